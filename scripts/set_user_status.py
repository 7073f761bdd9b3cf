"""
启用或禁用用户

用法: python scripts/set_user_status.py <username> <0|1>
禁用后该用户无法登录，也无法刷新令牌
"""
import argparse
import os
import sys

# 将项目根目录添加到python路径
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from banyan.core.config import settings
from banyan.db.session import build_engine, build_session_factory
from banyan.repositories.user_repository import user_repository


def main(argv=None):
    parser = argparse.ArgumentParser(description="设置用户状态")
    parser.add_argument("username", help="用户名")
    parser.add_argument("status", type=int, choices=[0, 1], help="1-正常，0-禁用")
    args = parser.parse_args(argv)

    engine = build_engine(settings.DATABASE_URL, settings)
    SessionLocal = build_session_factory(engine)
    with SessionLocal() as s:
        user = user_repository.get_by_username(s, args.username)
        if user is None:
            print(f"用户不存在: {args.username}")
            return 1
        user_repository.set_status(s, user, args.status)
        print(f"用户 {user.username} (ID: {user.id}) 状态已设置为 {args.status}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
