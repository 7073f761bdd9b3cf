"""
数据库模型
"""
from banyan.models.user import User

__all__ = ["User"]
