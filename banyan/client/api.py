"""
认证接口客户端

封装 httpx.Client，统一处理 Bearer 令牌、请求耗时日志和
{code, message, data} 响应的解包。
"""
import logging
import time
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class AuthClientError(Exception):
    """客户端请求失败；status_code 为 None 表示网络错误"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class AuthApiClient:
    """Banyan 认证接口"""

    def __init__(
        self,
        base_url: str = "http://localhost:3001/api",
        timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ):
        # base_url 的路径部分作为接口前缀，传入的 http_client 只负责连接（例如测试中的 TestClient）
        url = httpx.URL(base_url)
        self.prefix = url.path.rstrip("/")
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(base_url=url.copy_with(path="/"), timeout=timeout)

    @classmethod
    def from_settings(cls, settings, http_client: Optional[httpx.Client] = None) -> "AuthApiClient":
        return cls(base_url=settings.API_BASE_URL, timeout=settings.CLIENT_TIMEOUT, http_client=http_client)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> Any:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.prefix}{path}"
        start_time = time.time()
        try:
            response = self.client.request(method, url, json=json, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"API Timeout: {method} {url}: {e}")
            raise AuthClientError("请求超时") from e
        except httpx.HTTPError as e:
            logger.error(f"API Network Error: {method} {url}: {e}")
            raise AuthClientError("网络连接失败，请检查网络连接") from e

        duration = (time.time() - start_time) * 1000
        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            logger.warning(f"API Error: {method} {url} {response.status_code} ({duration:.0f}ms)")
            message = body.get("message") if isinstance(body, dict) else None
            raise AuthClientError(message or f"HTTP {response.status_code} 错误", response.status_code)

        logger.debug(f"API Response: {method} {url} {response.status_code} ({duration:.0f}ms)")
        if not isinstance(body, dict) or body.get("code") != 200 or "data" not in body:
            raise AuthClientError("响应数据格式错误", response.status_code)
        return body["data"]

    def register(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload = {"username": username, "password": password}
        if email:
            payload["email"] = email
        if phone:
            payload["phone"] = phone
        return self._request("POST", "/auth/register", json=payload)

    def login(self, username: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/login", json={"username": username, "password": password})

    def get_profile(self, token: str) -> Dict[str, Any]:
        return self._request("GET", "/auth/profile", token=token)

    def refresh(self, refresh_token: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/refresh", json={"refresh_token": refresh_token})

    def logout(self, token: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/logout", token=token)
