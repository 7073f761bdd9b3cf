from typing import Dict, Optional


class BaseAppException(Exception):
    """基础应用异常"""
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ConflictError(BaseAppException):
    """资源冲突（用户名或邮箱已存在）"""
    status_code = 409


class UnauthorizedError(BaseAppException):
    """未授权：凭据错误、令牌无效或已过期"""
    status_code = 401

    def __init__(self, message: str = "未授权访问"):
        super().__init__(message)


class NotFoundError(BaseAppException):
    """资源不存在"""
    status_code = 404


class RequestValidationFailed(BaseAppException):
    """请求参数校验失败"""
    status_code = 400

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None):
        self.errors = errors
        if message is None:
            message = next(iter(errors.values()), "请求参数验证失败")
        super().__init__(message)


# ==================== 令牌异常 ====================
# 仅在服务层内部使用，对外统一转换为 UnauthorizedError

class TokenError(Exception):
    """令牌校验失败"""


class InvalidTokenError(TokenError):
    """签名错误或格式错误"""


class ExpiredTokenError(TokenError):
    """令牌已过期"""
