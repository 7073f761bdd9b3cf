"""
受保护路由守卫
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from banyan.client.session import AuthSession


class GuardAction(str, Enum):
    ALLOW = "allow"
    LOADING = "loading"
    REDIRECT = "redirect"


@dataclass
class GuardDecision:
    action: GuardAction
    redirect_to: Optional[str] = None
    # 重定向前的原始路径，登录后可以跳回
    from_path: Optional[str] = None


class RouteGuard:
    """
    每次导航到受保护页面时调用 resolve

    只在路径变化或首次加载时检查认证状态，且仅在未认证、未加载时触发 check_auth
    """

    def __init__(self, session: AuthSession, login_path: str = "/login"):
        self.session = session
        self.login_path = login_path
        self.has_checked = False
        self.last_path: Optional[str] = None

    def resolve(self, path: str) -> GuardDecision:
        if path != self.last_path or not self.has_checked:
            self.last_path = path
            self.has_checked = True
            if not self.session.is_authenticated and not self.session.loading:
                self.session.check_auth()

        if self.session.loading:
            return GuardDecision(GuardAction.LOADING)
        if not self.session.is_authenticated:
            return GuardDecision(GuardAction.REDIRECT, redirect_to=self.login_path, from_path=path)
        return GuardDecision(GuardAction.ALLOW)
