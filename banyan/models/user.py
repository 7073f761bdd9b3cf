"""
用户表模型
"""
from sqlalchemy import Column, Integer, SmallInteger, String, DateTime
from sqlalchemy.sql import func
from banyan.db.session import Base


class User(Base):
    """用户表"""
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True, comment="用户ID")
    username = Column(String(50), unique=True, nullable=False, index=True, comment="用户名")
    password = Column(String(255), nullable=False, comment="密码（加密后）")
    phone = Column(String(20), nullable=True, comment="手机号码")
    email = Column(String(100), unique=True, nullable=True, index=True, comment="邮箱地址")
    login_time = Column(DateTime, nullable=True, comment="最后登录时间")
    logout_time = Column(DateTime, nullable=True, comment="最后退出时间")
    created_at = Column(DateTime, server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")
    status = Column(SmallInteger, nullable=False, default=1, comment="用户状态：1-正常，0-禁用")

    @property
    def is_active(self) -> bool:
        return self.status == 1

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, status={self.status})>"
