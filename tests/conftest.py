import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from banyan.core.config import Settings
from banyan.db.session import build_engine, build_session_factory, init_db
from banyan.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL_OVERRIDE="sqlite://",
        INIT_DB_ON_STARTUP=False,
        LOG_DIR=str(tmp_path / "logs"),
        SESSION_FILE=str(tmp_path / "auth-storage.json"),
        API_BASE_URL="http://testserver/api",
    )


@pytest.fixture
def engine(settings):
    # 内存数据库，所有连接共享同一个库
    engine = build_engine(settings.DATABASE_URL, settings, poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def app(settings, engine):
    return create_app(settings, engine=engine)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def db(engine):
    SessionLocal = build_session_factory(engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def auth_service(app):
    return app.state.auth_service


@pytest.fixture
def token_issuer(app):
    return app.state.token_issuer


@pytest.fixture
def register(client):
    """通过接口注册用户，返回响应"""
    def _register(username="alice", password="secret1", **extra):
        return client.post(
            "/api/auth/register",
            json={"username": username, "password": password, **extra},
        )
    return _register
