"""
安全相关功能模块
密码加密与校验（bcrypt）
"""
from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from banyan.core.config import settings


# ==================== 密码加密 ====================
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def get_password_hash(password: str) -> str:
    """生成带盐的密码哈希"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    验证密码

    哈希格式错误时返回 False，不抛出异常
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (UnknownHashError, ValueError):
        return False
