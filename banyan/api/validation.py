"""
请求体校验

每个接口一个校验函数，在调用业务服务之前执行，
返回 ValidationResult，不通过时由路由抛出 RequestValidationFailed。
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from banyan.core.exceptions import RequestValidationFailed
from banyan.schemas.user import LoginRequest, RefreshTokenRequest, RegisterRequest

T = TypeVar("T", bound=BaseModel)

FIELD_LABELS = {
    "username": "用户名",
    "password": "密码",
    "phone": "手机号",
    "email": "邮箱",
    "refresh_token": "refresh_token",
}


@dataclass
class ValidationResult(Generic[T]):
    """校验结果：ok 为 True 时 data 为解析后的请求体，否则 errors 为字段错误"""
    ok: bool
    data: Optional[T] = None
    errors: Dict[str, str] = field(default_factory=dict)

    def unwrap(self) -> T:
        if not self.ok:
            raise RequestValidationFailed(self.errors)
        return self.data


def _error_message(field_name: str, error: Dict[str, Any]) -> str:
    label = FIELD_LABELS.get(field_name, field_name)
    error_type = error["type"]
    ctx = error.get("ctx") or {}

    if error_type == "missing":
        return f"{label}不能为空"
    if error_type == "string_type":
        return f"{label}必须是字符串"
    if error_type == "string_too_short":
        if ctx.get("min_length") == 1:
            return f"{label}不能为空"
        return f"{label}至少{ctx.get('min_length')}个字符"
    if error_type == "string_too_long":
        return f"{label}最多{ctx.get('max_length')}个字符"
    if error_type == "extra_forbidden":
        return f"不允许的字段: {field_name}"
    if field_name == "email":
        return "邮箱格式不正确"
    return f"{label}格式不正确"


def _validate(model: Type[T], payload: Any) -> ValidationResult[T]:
    if not isinstance(payload, dict):
        return ValidationResult(ok=False, errors={"body": "请求体必须是JSON对象"})
    try:
        return ValidationResult(ok=True, data=model.model_validate(payload))
    except ValidationError as e:
        errors: Dict[str, str] = {}
        for error in e.errors():
            field_name = str(error["loc"][0]) if error["loc"] else "body"
            # 每个字段只保留第一条错误
            errors.setdefault(field_name, _error_message(field_name, error))
        return ValidationResult(ok=False, errors=errors)


def validate_register(payload: Any) -> ValidationResult[RegisterRequest]:
    return _validate(RegisterRequest, payload)


def validate_login(payload: Any) -> ValidationResult[LoginRequest]:
    return _validate(LoginRequest, payload)


def validate_refresh(payload: Any) -> ValidationResult[RefreshTokenRequest]:
    return _validate(RefreshTokenRequest, payload)
