"""
客户端会话

AuthSession 保存当前用户与令牌，由界面层的组合根创建并持有。
登录态通过 SessionStorage 持久化（JSON 文件），下次启动时恢复。
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ValidationError

from banyan.client.api import AuthApiClient, AuthClientError

logger = logging.getLogger(__name__)

# 持久化的字段，loading / error 只存在于内存中
PERSISTED_FIELDS = {"is_authenticated", "user", "token", "refresh_token"}


class SessionUser(BaseModel):
    """当前用户快照"""
    id: int
    username: str
    email: Optional[str] = None
    phone: Optional[str] = None
    status: int = 1
    login_time: Optional[str] = None
    created_at: Optional[str] = None


class SessionState(BaseModel):
    is_authenticated: bool = False
    user: Optional[SessionUser] = None
    token: Optional[str] = None
    refresh_token: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None


class MemoryStorage:
    """内存存储，主要用于测试"""

    def __init__(self):
        self.data: Optional[Dict[str, Any]] = None

    def load(self) -> Optional[Dict[str, Any]]:
        return self.data

    def save(self, data: Dict[str, Any]) -> None:
        self.data = data

    def clear(self) -> None:
        self.data = None


class SessionStorage:
    """JSON 文件存储"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"读取会话文件失败，忽略已保存的登录态: {self.path}: {e}")
            return None

    def save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()


class AuthSession:
    """
    客户端认证会话

    login / register 成功后保存令牌与用户信息；
    check_auth 在受保护页面导航时调用，401 时尝试刷新一次令牌；
    logout 总是清空本地状态，服务端通知失败不影响登出。
    """

    def __init__(self, api: AuthApiClient, storage=None):
        self.api = api
        self.storage = storage if storage is not None else MemoryStorage()
        self.state = self._restore()

    @classmethod
    def from_settings(cls, settings, api: Optional[AuthApiClient] = None) -> "AuthSession":
        return cls(api or AuthApiClient.from_settings(settings), SessionStorage(settings.SESSION_FILE))

    # ==================== 状态管理 ====================
    def _restore(self) -> SessionState:
        data = self.storage.load()
        if not data:
            return SessionState()
        try:
            return SessionState.model_validate({k: v for k, v in data.items() if k in PERSISTED_FIELDS})
        except ValidationError as e:
            logger.warning(f"会话数据格式错误，已忽略: {e}")
            return SessionState()

    def _set(self, **changes) -> None:
        self.state = self.state.model_copy(update=changes)
        if PERSISTED_FIELDS & changes.keys():
            self.storage.save(self.state.model_dump(mode="json", include=PERSISTED_FIELDS))

    @staticmethod
    def _parse_user(data: Any) -> SessionUser:
        try:
            return SessionUser.model_validate(data)
        except ValidationError as e:
            logger.warning(f"用户数据格式错误: {e}")
            raise AuthClientError("响应数据格式错误") from e

    def _apply_auth_result(self, result: Dict[str, Any]) -> None:
        if not isinstance(result, dict) or not result.get("access_token") or not isinstance(result.get("user"), dict):
            raise AuthClientError("登录响应数据格式错误：缺少必要字段")
        user = self._parse_user(result["user"])
        self._set(
            is_authenticated=True,
            user=user,
            token=result["access_token"],
            refresh_token=result.get("refresh_token"),
            loading=False,
            error=None,
        )

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    @property
    def user(self) -> Optional[SessionUser]:
        return self.state.user

    @property
    def token(self) -> Optional[str]:
        return self.state.token

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def error(self) -> Optional[str]:
        return self.state.error

    def clear_error(self) -> None:
        """用户修改输入时清除错误提示"""
        self._set(error=None)

    # ==================== 操作 ====================
    def login(self, username: str, password: str) -> SessionUser:
        """
        登录并保存令牌

        Raises:
            AuthClientError: 登录失败，错误信息同时写入 state.error
        """
        self._set(loading=True, error=None)
        try:
            result = self.api.login(username, password)
            self._apply_auth_result(result)
        except AuthClientError as e:
            message = "用户名或密码错误" if e.is_unauthorized else e.message
            self._set(is_authenticated=False, user=None, token=None, refresh_token=None,
                      loading=False, error=message)
            raise
        logger.info(f"登录成功: {self.state.user.username}")
        return self.state.user

    def register(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> SessionUser:
        """注册成功后服务端同时返回令牌，直接进入登录态"""
        self._set(loading=True, error=None)
        try:
            result = self.api.register(username, password, email=email, phone=phone)
            self._apply_auth_result(result)
        except AuthClientError as e:
            self._set(loading=False, error=e.message)
            raise
        logger.info(f"注册成功: {self.state.user.username}")
        return self.state.user

    def logout(self) -> None:
        """清空本地登录态，并尽力通知服务端"""
        token = self.state.token
        if token:
            try:
                self.api.logout(token)
            except AuthClientError as e:
                logger.warning(f"服务端登出失败，已忽略: {e.message}")

        self._set(is_authenticated=False, user=None, token=None, refresh_token=None,
                  loading=False, error=None)
        self.storage.clear()

    def refresh_token(self) -> bool:
        """
        使用刷新令牌换取新的令牌对

        Returns:
            是否刷新成功；失败时已执行登出
        """
        refresh_token = self.state.refresh_token
        if not refresh_token:
            self.logout()
            return False

        self._set(loading=True)
        try:
            result = self.api.refresh(refresh_token)
            self._apply_auth_result(result)
        except AuthClientError as e:
            logger.warning(f"Token refresh failed: {e.message}")
            self._set(loading=False)
            self.logout()
            return False
        return True

    def check_auth(self) -> bool:
        """
        校验当前登录态

        已认证且有用户信息时直接返回；
        获取资料返回401时尝试刷新一次令牌，仍失败则登出。
        """
        if not self.state.token:
            self.logout()
            return False

        # 已经在加载中，避免重复请求
        if self.state.loading:
            return self.state.is_authenticated

        if self.state.is_authenticated and self.state.user:
            return True

        self._set(loading=True)
        try:
            user = self._parse_user(self.api.get_profile(self.state.token))
        except AuthClientError as e:
            logger.warning(f"Auth check failed: {e.message}")
            self._set(loading=False)
            if e.is_unauthorized and self.refresh_token():
                return True
            self.logout()
            return False

        self._set(user=user, is_authenticated=True, loading=False)
        return True

    def initialize(self) -> bool:
        """应用启动时恢复登录态，存在令牌时执行一次校验"""
        if not self.state.token:
            return False
        # 持久化的登录态需要重新校验
        self._set(is_authenticated=False, user=None)
        return self.check_auth()
