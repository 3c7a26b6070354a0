"""
ApiClient：响应信封解析与错误映射（本地 aiohttp 测试服务器）
"""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from kickmates.client import ApiClient, ApiError, AuthenticationError, NotFoundError, Session


async def _events(request):
    assert request.headers.get("Authorization") == "Bearer good-token"
    return web.json_response({
        "success": True,
        "data": {"events": [{"id": 1, "title": "Tennis doubles"}]},
        "message": "",
    })


async def _missing(request):
    return web.json_response(
        {"detail": {"code": "EVENT_NOT_FOUND", "message": "活动不存在"}}, status=404
    )


async def _unauthorized(request):
    return web.json_response(
        {"detail": {"code": "UNAUTHORIZED", "message": "Authentication required"}}, status=401
    )


async def _invalid(request):
    return web.json_response(
        {"detail": [{"loc": ["body", "content"], "msg": "field required"}]}, status=422
    )


async def _crash(request):
    return web.json_response({
        "success": False, "code": 500, "message": "Internal server error",
        "error": {"type": "RuntimeError", "message": "boom"},
    }, status=500)


async def _login(request):
    body = await request.json()
    return web.json_response({
        "success": True,
        "data": {"token": "fresh-token", "user": {"id": 3, "username": "carol", "email": body["email"]}},
    })


async def _slow(request):
    await asyncio.sleep(1)
    return web.json_response({"success": True, "data": []})


def _make_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/api/events", _events)
    app.router.add_get("/api/events/99", _missing)
    app.router.add_get("/api/users/profile", _unauthorized)
    app.router.add_post("/api/events/1/comments", _invalid)
    app.router.add_get("/api/discussions", _crash)
    app.router.add_post("/api/users/login", _login)
    app.router.add_get("/api/notifications", _slow)
    return app


async def _client(session: Session):
    server = test_utils.TestServer(_make_app())
    await server.start_server()
    return server, ApiClient(session=session, base_url=str(server.make_url("/api")))


class TestApiClient:
    """请求与错误映射"""

    @pytest.mark.asyncio
    async def test_success_returns_data(self):
        server, api = await _client(Session(token="good-token", user={"id": 1}))
        try:
            events = await api.list_events()
        finally:
            await server.close()

        assert events == [{"id": 1, "title": "Tennis doubles"}]

    @pytest.mark.asyncio
    async def test_not_found(self):
        server, api = await _client(Session(token="good-token", user={"id": 1}))
        try:
            with pytest.raises(NotFoundError) as exc_info:
                await api.get_event(99)
        finally:
            await server.close()

        assert exc_info.value.status == 404
        assert exc_info.value.code == "EVENT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_unauthorized_clears_session(self):
        session = Session(token="expired", user={"id": 1, "username": "alice"})
        server, api = await _client(session)
        try:
            with pytest.raises(AuthenticationError):
                await api.get_profile()
        finally:
            await server.close()

        assert not session.is_authenticated
        assert session.user is None

    @pytest.mark.asyncio
    async def test_validation_error_message(self):
        server, api = await _client(Session(token="good-token"))
        try:
            with pytest.raises(ApiError) as exc_info:
                await api.add_comment("events", 1, "")
        finally:
            await server.close()

        assert exc_info.value.status == 422
        assert exc_info.value.code == "VALIDATION_ERROR"
        assert exc_info.value.message == "field required"

    @pytest.mark.asyncio
    async def test_server_error_envelope(self):
        server, api = await _client(Session())
        try:
            with pytest.raises(ApiError) as exc_info:
                await api.list_discussions()
        finally:
            await server.close()

        assert exc_info.value.status == 500
        assert exc_info.value.message == "boom"

    @pytest.mark.asyncio
    async def test_login_starts_session(self):
        session = Session()
        server, api = await _client(session)
        try:
            user = await api.login("carol@example.com", "secret123")
        finally:
            await server.close()

        assert user["username"] == "carol"
        assert session.token == "fresh-token"
        assert session.auth_headers() == {"Authorization": "Bearer fresh-token"}

    @pytest.mark.asyncio
    async def test_connection_error(self):
        api = ApiClient(session=Session(), base_url="http://127.0.0.1:1/api", timeout=2)
        with pytest.raises(ApiError) as exc_info:
            await api.list_events()
        assert exc_info.value.status == 0

    @pytest.mark.asyncio
    async def test_timeout_becomes_network_error(self):
        server = test_utils.TestServer(_make_app())
        await server.start_server()
        api = ApiClient(session=Session(token="good-token"), base_url=str(server.make_url("/api")), timeout=0.1)
        try:
            with pytest.raises(ApiError) as exc_info:
                await api.list_notifications()
        finally:
            await server.close()

        assert exc_info.value.status == 0
