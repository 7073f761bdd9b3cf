"""
用户与认证相关的Pydantic模式
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


# ==================== 请求体 ====================
class RegisterRequest(BaseModel):
    """用户注册请求"""
    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., min_length=3, max_length=50, description="用户名，3-50个字符")
    password: str = Field(..., min_length=6, max_length=20, description="密码，6-20个字符")
    phone: Optional[str] = Field(None, max_length=20, description="手机号码")
    email: Optional[str] = Field(None, max_length=100, description="邮箱地址")

    @field_validator("phone", "email", mode="before")
    @classmethod
    def empty_as_missing(cls, value):
        return _blank_to_none(value)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        # 拒绝 "Alice <a@x.com>" 这类带显示名的写法，只接受纯邮箱地址
        _, address = validate_email(value)
        if address.lower() != value.lower():
            raise ValueError("邮箱格式不正确")
        return value


class LoginRequest(BaseModel):
    """用户登录请求"""
    model_config = ConfigDict(extra="forbid")

    username: str = Field(..., min_length=1, description="用户名、邮箱或手机号")
    password: str = Field(..., min_length=1, description="密码")


class RefreshTokenRequest(BaseModel):
    """刷新令牌请求"""
    model_config = ConfigDict(extra="forbid")

    refresh_token: str = Field(..., min_length=1, description="刷新令牌")


# ==================== 响应体 ====================
class UserPublic(BaseModel):
    """令牌响应中附带的用户信息（不含密码）"""
    id: int
    username: str
    email: Optional[str] = None
    phone: Optional[str] = None
    status: int

    model_config = ConfigDict(from_attributes=True)


class UserProfile(BaseModel):
    """用户资料"""
    id: int = Field(..., description="用户ID")
    username: str = Field(..., description="用户名")
    email: Optional[str] = Field(None, description="邮箱")
    phone: Optional[str] = Field(None, description="手机号码")
    login_time: Optional[datetime] = Field(None, description="最后登录时间")
    created_at: datetime = Field(..., description="创建时间")
    status: int = Field(..., description="状态：0-禁用，1-正常")

    model_config = ConfigDict(from_attributes=True)


class AuthResult(BaseModel):
    """登录、注册、刷新成功后的令牌响应"""
    access_token: str = Field(..., description="访问令牌")
    refresh_token: str = Field(..., description="刷新令牌")
    expires_in: int = Field(..., description="访问令牌过期时间（秒）")
    user: UserPublic


class MessageData(BaseModel):
    message: str
