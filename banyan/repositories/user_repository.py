"""
用户数据访问

认证流程只需要以下固定的查询集合
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from banyan.models.user import User


class UserRepository:
    """用户表查询"""

    def get_by_id(self, db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    def get_active_by_id(self, db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id, User.status == 1).first()

    def get_by_username(self, db: Session, username: str) -> Optional[User]:
        return db.query(User).filter(User.username == username).first()

    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    def get_active_by_identifier(self, db: Session, identifier: str) -> Optional[User]:
        """
        按用户名、邮箱或手机号查找启用状态的用户

        多个账户同时匹配时按ID取第一个
        """
        return (
            db.query(User)
            .filter(
                or_(
                    User.username == identifier,
                    User.email == identifier,
                    User.phone == identifier,
                ),
                User.status == 1,
            )
            .order_by(User.id)
            .first()
        )

    def list_all(self, db: Session) -> List[User]:
        return db.query(User).order_by(User.id).all()

    def create(self, db: Session, user: User) -> User:
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    def update_login_time(self, db: Session, user: User, when: Optional[datetime] = None) -> User:
        user.login_time = when or datetime.now()
        db.commit()
        db.refresh(user)
        return user

    def update_logout_time(self, db: Session, user_id: int, when: Optional[datetime] = None) -> int:
        """返回受影响的行数"""
        count = (
            db.query(User)
            .filter(User.id == user_id)
            .update({User.logout_time: when or datetime.now()}, synchronize_session=False)
        )
        db.commit()
        return count

    def set_status(self, db: Session, user: User, status: int) -> User:
        user.status = status
        db.commit()
        db.refresh(user)
        return user


user_repository = UserRepository()
