import os
import sys

# 将项目根目录添加到python路径
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from banyan.core.config import settings
from banyan.db.session import build_engine, build_session_factory
from banyan.repositories.user_repository import user_repository


def main():
    engine = build_engine(settings.DATABASE_URL, settings)
    SessionLocal = build_session_factory(engine)
    with SessionLocal() as s:
        for u in user_repository.list_all(s):
            state = "active" if u.is_active else "disabled"
            print(f"User: {u.username}, Email: {u.email or '-'}, Status: {state}, ID: {u.id}")


if __name__ == "__main__":
    main()
