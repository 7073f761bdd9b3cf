"""
数据库会话管理
"""
import logging
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# 创建基类
Base = declarative_base()


def build_engine(database_url: str, settings=None, **kwargs) -> Engine:
    """
    根据连接URL创建数据库引擎

    SQLite 不使用连接池参数
    """
    options = {"echo": bool(settings and settings.DEBUG)}
    if database_url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}
    elif settings is not None:
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=True,  # 连接前先ping，确保连接有效
        )
    options.update(kwargs)
    return create_engine(database_url, **options)


def build_session_factory(engine: Engine) -> sessionmaker:
    """创建会话工厂"""
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


def init_db(engine: Engine) -> None:
    """初始化数据库，创建所有表"""
    from banyan.models.user import User  # noqa: F401 确保模型已注册
    Base.metadata.create_all(bind=engine)
    logger.info("数据库表检查完成")


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    获取数据库会话的依赖注入函数
    用于FastAPI的Depends，会话工厂在应用启动时挂载到 app.state
    """
    db = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
