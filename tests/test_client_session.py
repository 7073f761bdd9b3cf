"""
客户端会话与路由守卫测试

AuthApiClient 直接复用 TestClient 作为 httpx 客户端，请求会打到真实的应用
"""
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
import respx

from banyan.client import (
    AuthApiClient,
    AuthClientError,
    AuthSession,
    GuardAction,
    MemoryStorage,
    RouteGuard,
    SessionStorage,
)


@pytest.fixture
def api(settings, client):
    return AuthApiClient.from_settings(settings, http_client=client)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def session(api, storage):
    return AuthSession(api, storage)


@pytest.fixture
def alice(register):
    return register("alice", "secret1", email="a@x.com").json()["data"]


def _replace_state(session, **changes):
    session.state = session.state.model_copy(update=changes)


def test_login_persists_session(session, storage, alice):
    user = session.login("alice", "secret1")

    assert user.username == "alice"
    assert session.is_authenticated
    assert session.token
    assert session.error is None
    assert storage.data["token"] == session.token
    assert storage.data["user"]["username"] == "alice"
    assert "loading" not in storage.data


def test_restored_session_is_revalidated(api, storage, session, alice):
    session.login("alice", "secret1")

    restored = AuthSession(api, storage)
    assert restored.is_authenticated
    assert restored.token == session.token

    assert restored.initialize() is True
    assert restored.user.created_at is not None


def test_login_failure_sets_error(session, alice):
    with pytest.raises(AuthClientError) as exc_info:
        session.login("alice", "wrong-pass")

    assert exc_info.value.status_code == 401
    assert not session.is_authenticated
    assert session.token is None
    assert session.error == "用户名或密码错误"
    assert not session.loading

    session.clear_error()
    assert session.error is None


def test_register_enters_authenticated_state(session):
    user = session.register("bob", "secret1", email="bob@x.com")

    assert user.username == "bob"
    assert session.is_authenticated
    assert session.state.refresh_token


def test_register_conflict_message(session, alice):
    with pytest.raises(AuthClientError) as exc_info:
        session.register("alice", "secret1")

    assert exc_info.value.status_code == 409
    assert session.error == "用户名已存在"


def test_check_auth_skips_when_already_authenticated(session, alice):
    session.login("alice", "secret1")

    with patch.object(session.api, "get_profile") as mock_profile:
        assert session.check_auth() is True
    mock_profile.assert_not_called()


def test_check_auth_skips_while_loading(session, alice):
    session.login("alice", "secret1")
    _replace_state(session, loading=True, is_authenticated=False, user=None)

    with patch.object(session.api, "get_profile") as mock_profile:
        assert session.check_auth() is False
    mock_profile.assert_not_called()


def test_check_auth_without_token_logs_out(session, storage):
    storage.save({"is_authenticated": True, "user": None, "token": None})
    assert session.check_auth() is False
    assert storage.data is None


def test_check_auth_refreshes_expired_access_token(session, token_issuer, alice):
    expired = token_issuer.issue_access_token(
        alice["user"]["id"], "alice", expires_delta=timedelta(seconds=-60)
    )
    _replace_state(session, token=expired, refresh_token=alice["refresh_token"])

    assert session.check_auth() is True
    assert session.is_authenticated
    assert session.token != expired
    assert session.state.refresh_token != alice["refresh_token"]
    assert session.user.username == "alice"


def test_check_auth_logs_out_when_refresh_fails(session, storage, token_issuer, alice):
    expired = token_issuer.issue_access_token(
        alice["user"]["id"], "alice", expires_delta=timedelta(seconds=-60)
    )
    _replace_state(session, token=expired, refresh_token="garbage")

    assert session.check_auth() is False
    assert not session.is_authenticated
    assert session.token is None
    assert storage.data is None


def test_logout_notifies_server(session, alice):
    session.login("alice", "secret1")

    with patch.object(session.api, "logout", wraps=session.api.logout) as mock_logout:
        session.logout()

    mock_logout.assert_called_once()
    assert not session.is_authenticated
    assert session.user is None


@pytest.fixture
def offline_api():
    """服务端不可达"""
    with respx.mock:
        respx.route(host="offline").mock(side_effect=httpx.ConnectError)
        api = AuthApiClient("http://offline/api")
        yield api
        api.close()


def test_logout_succeeds_when_server_unreachable(storage, offline_api):
    storage.save({"is_authenticated": True, "user": {"id": 1, "username": "alice"}, "token": "t"})
    session = AuthSession(offline_api, storage)
    assert session.is_authenticated

    session.logout()

    assert not session.is_authenticated
    assert session.token is None
    assert storage.data is None


def test_network_error_message(offline_api):
    with pytest.raises(AuthClientError) as exc_info:
        offline_api.login("alice", "secret1")
    assert exc_info.value.status_code is None
    assert exc_info.value.message == "网络连接失败，请检查网络连接"


def test_timeout_message():
    with respx.mock:
        respx.post("http://slow/api/auth/login").mock(side_effect=httpx.ReadTimeout)
        with pytest.raises(AuthClientError) as exc_info:
            AuthApiClient("http://slow/api").login("alice", "secret1")
    assert exc_info.value.message == "请求超时"


def test_malformed_envelope_is_rejected():
    with respx.mock:
        respx.post("http://broken/api/auth/login").mock(return_value=httpx.Response(200, json={"ok": True}))
        with pytest.raises(AuthClientError) as exc_info:
            AuthApiClient("http://broken/api").login("alice", "secret1")
    assert exc_info.value.message == "响应数据格式错误"


def test_file_storage_round_trip(tmp_path, api, alice):
    path = tmp_path / "state" / "auth-storage.json"
    session = AuthSession(api, SessionStorage(path))
    session.login("alice", "secret1")
    assert path.exists()

    restored = AuthSession(api, SessionStorage(path))
    assert restored.token == session.token

    restored.logout()
    assert not path.exists()


def test_corrupt_storage_file_is_ignored(tmp_path, api):
    path = tmp_path / "auth-storage.json"
    path.write_text("{broken", encoding="utf-8")

    session = AuthSession(api, SessionStorage(path))
    assert not session.is_authenticated


def test_guard_redirects_unauthenticated(session):
    guard = RouteGuard(session)

    decision = guard.resolve("/dashboard")

    assert decision.action == GuardAction.REDIRECT
    assert decision.redirect_to == "/login"
    assert decision.from_path == "/dashboard"


def test_guard_allows_authenticated(session, alice):
    session.login("alice", "secret1")
    guard = RouteGuard(session)

    assert guard.resolve("/dashboard").action == GuardAction.ALLOW
    assert guard.resolve("/profile").action == GuardAction.ALLOW


def test_guard_checks_once_per_path(session):
    guard = RouteGuard(session)

    with patch.object(session, "check_auth") as mock_check:
        guard.resolve("/dashboard")
        guard.resolve("/dashboard")
        guard.resolve("/profile")

    assert mock_check.call_count == 2


def test_guard_reports_loading(session):
    _replace_state(session, loading=True)
    guard = RouteGuard(session)

    assert guard.resolve("/dashboard").action == GuardAction.LOADING


def test_malformed_user_in_login_response_resets_loading(storage):
    with respx.mock:
        respx.post("http://broken/api/auth/login").mock(
            return_value=httpx.Response(
                200, json={"code": 200, "message": "登录成功", "data": {"access_token": "t", "user": {"id": 1}}}
            )
        )
        session = AuthSession(AuthApiClient("http://broken/api"), storage)
        with pytest.raises(AuthClientError):
            session.login("alice", "secret1")

    assert not session.loading
    assert not session.is_authenticated
    assert session.error == "响应数据格式错误"
    assert storage.data["token"] is None


def test_malformed_profile_logs_out_instead_of_hanging(storage):
    storage.save({"is_authenticated": False, "user": None, "token": "t"})
    with respx.mock:
        respx.get("http://broken/api/auth/profile").mock(
            return_value=httpx.Response(200, json={"code": 200, "message": "ok", "data": {"id": "x"}})
        )
        respx.post("http://broken/api/auth/logout").mock(
            return_value=httpx.Response(200, json={"code": 200, "message": "登出成功", "data": {}})
        )
        session = AuthSession(AuthApiClient("http://broken/api"), storage)
        guard = RouteGuard(session)
        decision = guard.resolve("/dashboard")

    assert decision.action == GuardAction.REDIRECT
    assert not session.loading
    assert session.token is None


def test_from_settings_persists_to_session_file(settings, api, alice):
    session = AuthSession.from_settings(settings, api=api)
    session.login("alice", "secret1")

    assert Path(settings.SESSION_FILE).exists()
    restored = AuthSession.from_settings(settings, api=api)
    assert restored.is_authenticated
    assert restored.token == session.token
    assert restored.initialize() is True
