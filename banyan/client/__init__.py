"""
Banyan 客户端：认证接口、会话与路由守卫
"""
from banyan.client.api import AuthApiClient, AuthClientError
from banyan.client.guard import GuardAction, GuardDecision, RouteGuard
from banyan.client.session import AuthSession, MemoryStorage, SessionState, SessionStorage, SessionUser

__all__ = [
    "AuthApiClient",
    "AuthClientError",
    "AuthSession",
    "GuardAction",
    "GuardDecision",
    "MemoryStorage",
    "RouteGuard",
    "SessionState",
    "SessionStorage",
    "SessionUser",
]
