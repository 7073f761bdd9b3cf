"""
认证服务 - 用户注册、登录、资料查询、令牌刷新与登出
"""
import logging
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from banyan.core.exceptions import ConflictError, NotFoundError, TokenError, UnauthorizedError
from banyan.core.security import get_password_hash, verify_password
from banyan.core.tokens import TokenIssuer
from banyan.models.user import User
from banyan.repositories.user_repository import UserRepository
from banyan.schemas.user import AuthResult, UserProfile, UserPublic

logger = logging.getLogger(__name__)


class AuthService:
    """认证服务类"""

    def __init__(self, repository: UserRepository, token_issuer: TokenIssuer):
        self.repository = repository
        self.token_issuer = token_issuer

    def register(
        self,
        db: Session,
        username: str,
        password: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> AuthResult:
        """
        用户注册

        Args:
            db: 数据库会话
            username: 用户名
            password: 明文密码
            email: 邮箱（可选）
            phone: 手机号（可选）

        Returns:
            AuthResult: 令牌及用户公开信息

        Raises:
            ConflictError: 用户名或邮箱已存在
        """
        # 检查用户名是否已存在
        if self.repository.get_by_username(db, username):
            raise ConflictError("用户名已存在")

        # 检查邮箱是否已存在
        if email and self.repository.get_by_email(db, email):
            raise ConflictError("邮箱已被注册")

        new_user = User(
            username=username,
            password=get_password_hash(password),
            email=email,
            phone=phone,
            status=1,
        )
        try:
            saved = self.repository.create(db, new_user)
        except IntegrityError as e:
            # 并发注册时由数据库唯一约束兜底
            db.rollback()
            logger.warning(f"用户注册唯一约束冲突: {username}: {e.orig}")
            raise ConflictError("用户名或邮箱已存在")

        logger.info(f"用户注册成功: {saved.username} (ID: {saved.id})")
        return self._generate_tokens(saved)

    def validate_credentials(self, db: Session, identifier: str, password: str) -> Optional[User]:
        """
        验证用户凭据，支持用户名、邮箱或手机号登录

        Returns:
            匹配且密码正确的启用用户，否则返回 None
        """
        user = self.repository.get_active_by_identifier(db, identifier)
        if user and verify_password(password, user.password):
            return user
        logger.warning(f"凭据校验失败: {identifier}")
        return None

    def login(self, db: Session, user: User) -> AuthResult:
        """已通过凭据校验的用户登录，记录登录时间并签发令牌"""
        self.repository.update_login_time(db, user, datetime.now())
        logger.info(f"用户登录成功: {user.username} (ID: {user.id})")
        return self._generate_tokens(user)

    def get_profile(self, db: Session, user_id: int) -> UserProfile:
        """获取用户资料"""
        user = self.repository.get_by_id(db, user_id)
        if not user:
            raise NotFoundError("用户不存在")
        return UserProfile.model_validate(user)

    def refresh(self, db: Session, refresh_token: str) -> AuthResult:
        """
        使用刷新令牌换取新的令牌对

        每次刷新都签发全新的令牌对，旧的刷新令牌在过期前仍然有效

        Raises:
            UnauthorizedError: 令牌无效、已过期，或用户不存在/已禁用
        """
        try:
            payload = self.token_issuer.verify_refresh(refresh_token)
            user = self.repository.get_active_by_id(db, int(payload["sub"]))
        except (TokenError, ValueError) as e:
            logger.warning(f"刷新令牌校验失败: {e}")
            raise UnauthorizedError("refresh token无效或已过期")

        if not user:
            logger.warning(f"刷新令牌对应的用户不存在或已被禁用: sub={payload['sub']}")
            raise UnauthorizedError("refresh token无效或已过期")

        logger.info(f"令牌刷新成功: {user.username} (ID: {user.id})")
        return self._generate_tokens(user)

    def logout(self, db: Session, user_id: int) -> Dict[str, str]:
        """
        用户登出，仅记录登出时间

        已签发的令牌不会被吊销，到期前仍可使用
        """
        self.repository.update_logout_time(db, user_id, datetime.now())
        logger.info(f"用户登出: ID {user_id}")
        return {"message": "登出成功"}

    def authenticate_access_token(self, db: Session, token: str) -> User:
        """校验访问令牌并返回启用状态的用户"""
        try:
            payload = self.token_issuer.verify_access(token)
            user = self.repository.get_active_by_id(db, int(payload["sub"]))
        except (TokenError, ValueError) as e:
            logger.debug(f"访问令牌校验失败: {e}")
            raise UnauthorizedError("无效的认证凭证")

        if user is None:
            raise UnauthorizedError("用户不存在或已被禁用")
        return user

    def _generate_tokens(self, user: User) -> AuthResult:
        pair = self.token_issuer.issue_pair(user.id, user.username)
        return AuthResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            expires_in=self.token_issuer.access_expires_in,
            user=UserPublic.model_validate(user),
        )
