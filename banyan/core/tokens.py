"""
JWT令牌签发与校验

访问令牌和刷新令牌使用不同的密钥和有效期，
因此一种令牌无法被当作另一种令牌使用。
"""
import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NamedTuple, Optional, Union

from jose import ExpiredSignatureError, JWTError, jwt

from banyan.core.exceptions import ExpiredTokenError, InvalidTokenError

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(value: Union[str, int, timedelta]) -> timedelta:
    """
    解析有效期配置

    支持 "15m"、"7d"、"24h"、"30s" 以及纯数字（秒）
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"无法解析的有效期: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNIT_SECONDS[unit])


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


class TokenIssuer:
    """令牌签发器"""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expires: Union[str, int, timedelta] = "15m",
        refresh_expires: Union[str, int, timedelta] = "7d",
        algorithm: str = "HS256",
    ):
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expires = parse_duration(access_expires)
        self.refresh_expires = parse_duration(refresh_expires)
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings) -> "TokenIssuer":
        return cls(
            access_secret=settings.JWT_SECRET,
            refresh_secret=settings.JWT_REFRESH_SECRET,
            access_expires=settings.JWT_EXPIRES_IN,
            refresh_expires=settings.JWT_REFRESH_EXPIRES_IN,
            algorithm=settings.JWT_ALGORITHM,
        )

    @property
    def access_expires_in(self) -> int:
        """访问令牌有效期（秒）"""
        return int(self.access_expires.total_seconds())

    def _sign(self, subject_id: int, username: str, secret: str, lifetime: timedelta) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": str(subject_id),
            "username": username,
            "iat": now,
            "exp": now + lifetime,
            # 保证同一秒内签发的令牌也互不相同
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(to_encode, secret, algorithm=self.algorithm)

    def issue_access_token(
        self, subject_id: int, username: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        """签发访问令牌"""
        return self._sign(subject_id, username, self.access_secret, self.access_expires if expires_delta is None else expires_delta)

    def issue_refresh_token(
        self, subject_id: int, username: str, expires_delta: Optional[timedelta] = None
    ) -> str:
        """签发刷新令牌"""
        return self._sign(subject_id, username, self.refresh_secret, self.refresh_expires if expires_delta is None else expires_delta)

    def issue_pair(self, subject_id: int, username: str) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access_token(subject_id, username),
            refresh_token=self.issue_refresh_token(subject_id, username),
        )

    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        """
        校验令牌签名与有效期

        Args:
            token: JWT令牌字符串
            secret: 签名密钥

        Returns:
            解码后的载荷

        Raises:
            ExpiredTokenError: 令牌已过期
            InvalidTokenError: 签名错误、格式错误或缺少 sub
        """
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise ExpiredTokenError(str(e)) from e
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

        if not payload.get("sub"):
            raise InvalidTokenError("令牌中缺少用户ID")
        return payload

    def verify_access(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.access_secret)

    def verify_refresh(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.refresh_secret)
