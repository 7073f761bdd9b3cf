"""
认证相关API路由
"""
from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from banyan.api.validation import validate_refresh, validate_register
from banyan.core.deps import get_auth_service, get_credential_user, get_current_user
from banyan.core.responses import ApiResponse, success
from banyan.db.session import get_db
from banyan.models.user import User
from banyan.schemas.user import AuthResult, MessageData, UserProfile
from banyan.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=ApiResponse[AuthResult], summary="用户注册")
def register(
    payload: Any = Body(None),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    用户注册接口

    - **username**: 用户名，3-50个字符
    - **password**: 密码，6-20个字符
    - **email**: 邮箱地址（可选）
    - **phone**: 手机号码（可选）
    """
    data = validate_register(payload).unwrap()
    result = auth_service.register(
        db,
        username=data.username,
        password=data.password,
        email=data.email,
        phone=data.phone,
    )
    return success(result, "注册成功")


@router.post("/login", response_model=ApiResponse[AuthResult], summary="用户登录")
def login(
    user: User = Depends(get_credential_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    用户登录接口

    - **username**: 用户名、邮箱或手机号
    - **password**: 密码
    """
    return success(auth_service.login(db, user), "登录成功")


@router.get("/profile", response_model=ApiResponse[UserProfile], summary="获取用户资料")
def get_profile(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """需要在请求头中携带Bearer Token"""
    return success(auth_service.get_profile(db, current_user.id), "获取用户资料成功")


@router.post("/refresh", response_model=ApiResponse[AuthResult], summary="刷新访问令牌")
def refresh_token(
    payload: Any = Body(None),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """使用刷新令牌换取新的令牌对"""
    data = validate_refresh(payload).unwrap()
    return success(auth_service.refresh(db, data.refresh_token), "Token刷新成功")


@router.post("/logout", response_model=ApiResponse[MessageData], summary="用户登出")
def logout(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    用户登出

    只记录登出时间，已签发的令牌在过期前仍然有效
    """
    return success(auth_service.logout(db, current_user.id), "登出成功")
