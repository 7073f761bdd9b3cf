"""
依赖注入函数
用于FastAPI的路由依赖项
"""
from typing import Any, Optional

from fastapi import Body, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from banyan.api.validation import validate_login
from banyan.core.exceptions import UnauthorizedError
from banyan.db.session import get_db
from banyan.models.user import User
from banyan.services.auth_service import AuthService


# HTTP Bearer认证方案，缺少令牌时由本模块统一返回401
security = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    """获取启动时组装好的认证服务"""
    return request.app.state.auth_service


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    获取当前登录用户

    令牌通过 Authorization: Bearer <token> 传递，
    令牌无效、过期或用户被禁用时均返回401
    """
    if credentials is None:
        raise UnauthorizedError("未认证，请先登录")
    return auth_service.authenticate_access_token(db, credentials.credentials)


def get_credential_user(
    payload: Any = Body(None),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    登录凭据守卫

    先校验请求体，再按用户名/邮箱/手机号校验密码
    """
    login_data = validate_login(payload).unwrap()
    user = auth_service.validate_credentials(db, login_data.username, login_data.password)
    if user is None:
        raise UnauthorizedError("用户名或密码错误")
    return user
