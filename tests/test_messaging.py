"""
私信线程：乐观发送、确认替换、失败回滚、撤回与日期分组
"""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from kickmates.client import (
    ApiClient, ApiError, MessageState, MessageThread, NotFoundError, Session, next_temp_id,
)


class FakeMessageApi:
    def __init__(self):
        self.session = Session(token="t", user={"id": 1, "username": "alice", "full_name": "Alice A"})
        self.next_id = 500
        self.send_gate = None
        self.send_error = None
        self.delete_error = None
        self.liked = set()

    async def get_messages(self, conversation_id):
        return [history(10, "Hi!", sender_id=2)]

    async def send_message(self, conversation_id, content, reply_to_id=None):
        if self.send_gate is not None:
            await self.send_gate.wait()
        if self.send_error is not None:
            raise self.send_error
        self.next_id += 1
        return {
            "id": self.next_id,
            "conversation_id": conversation_id,
            "sender_id": 1,
            "sender_username": "alice",
            "content": content,
            "is_read": False,
            "reply_to_id": reply_to_id,
            "created_at": "2024-05-02T09:00:00",
        }

    async def delete_message(self, conversation_id, message_id):
        if self.delete_error is not None:
            raise self.delete_error

    async def toggle_message_like(self, conversation_id, message_id):
        self.liked ^= {message_id}
        return message_id in self.liked


def history(id, content, sender_id=2, created_at="2024-05-01T10:00:00"):
    return {
        "id": id,
        "sender_id": sender_id,
        "sender_username": "bob" if sender_id == 2 else "alice",
        "content": content,
        "created_at": created_at,
    }


class TestTempIds:
    def test_strictly_increasing(self):
        ids = [next_temp_id() for _ in range(50)]
        assert ids == sorted(set(ids))


class TestSend:
    """发送"""

    def test_begin_send_appends_pending(self):
        thread = MessageThread(FakeMessageApi(), 7, [history(10, "Hi!")])

        pending = thread.begin_send("Hello Bob", reply_to_id=10)

        assert thread.messages[-1] is pending
        assert pending.is_pending
        assert pending.sender_id == 1
        assert pending.sender_name == "Alice A"
        assert pending.reply_to_content == "Hi!"
        assert pending.reply_to_sender == "bob"

    def test_begin_send_validates(self):
        thread = MessageThread(FakeMessageApi(), 7)
        with pytest.raises(ValueError):
            thread.begin_send("   ")
        with pytest.raises(ValueError):
            thread.begin_send("x" * 2001)
        assert thread.messages == ()

    @pytest.mark.asyncio
    async def test_confirm_replaces_in_place(self):
        thread = MessageThread(FakeMessageApi(), 7, [history(10, "Hi!")])

        confirmed = await thread.send("Hello Bob")

        assert [m.id for m in thread.messages] == [10, 501]
        assert confirmed.state == MessageState.CONFIRMED
        assert confirmed.created_at == "2024-05-02T09:00:00"
        # 服务端未返回的字段沿用本地值
        assert confirmed.sender_name == "Alice A"

    @pytest.mark.asyncio
    async def test_failure_restores_previous_list(self):
        api = FakeMessageApi()
        api.send_error = ApiError(500, "boom")
        thread = MessageThread(api, 7, [history(10, "Hi!")])
        before = thread.messages

        with pytest.raises(ApiError):
            await thread.send("Hello Bob")

        assert thread.messages == before
        assert not thread.is_sending

    @pytest.mark.asyncio
    async def test_timeout_restores_previous_list(self):
        async def slow_send(request):
            await asyncio.sleep(1)
            return web.json_response({"success": True, "data": {"id": 900}})

        app = web.Application()
        app.router.add_post("/api/messages/conversations/7/messages", slow_send)
        server = test_utils.TestServer(app)
        await server.start_server()

        session = Session(token="t", user={"id": 1, "username": "alice"})
        api = ApiClient(session=session, base_url=str(server.make_url("/api")), timeout=0.1)
        thread = MessageThread(api, 7, [history(10, "Hi!")])
        before = thread.messages
        try:
            with pytest.raises(ApiError) as exc_info:
                await thread.send("hello")
        finally:
            await server.close()

        assert exc_info.value.status == 0
        assert thread.messages == before
        assert not thread.is_sending

    @pytest.mark.asyncio
    async def test_cancelled_send_restores_previous_list(self):
        api = FakeMessageApi()
        api.send_gate = asyncio.Event()
        thread = MessageThread(api, 7, [history(10, "Hi!")])
        before = thread.messages

        task = asyncio.ensure_future(thread.send("on my way"))
        await asyncio.sleep(0)
        assert thread.messages[-1].is_pending

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert thread.messages == before
        assert not thread.is_sending

    @pytest.mark.asyncio
    async def test_pending_visible_while_in_flight(self):
        api = FakeMessageApi()
        api.send_gate = asyncio.Event()
        thread = MessageThread(api, 7)

        task = asyncio.ensure_future(thread.send("on my way"))
        await asyncio.sleep(0)

        assert len(thread.messages) == 1
        assert thread.messages[0].is_pending
        assert await thread.send("duplicate") is None
        assert len(thread.messages) == 1

        api.send_gate.set()
        confirmed = await task
        assert thread.messages == (confirmed,)

    def test_confirm_drops_duplicate_server_record(self):
        thread = MessageThread(FakeMessageApi(), 7)
        pending = thread.begin_send("hey")
        thread.load(thread.messages + (thread.messages[0].merged({"id": 900}),))

        thread.confirm(pending.id, {"id": 900, "content": "hey", "created_at": "2024-05-02T09:00:00"})

        assert [m.id for m in thread.messages] == [900]

    def test_confirm_unknown_temp_id(self):
        thread = MessageThread(FakeMessageApi(), 7)
        assert thread.confirm(12345, {"id": 1}) is None
        assert thread.messages == ()


class TestDeleteAndLike:
    """撤回与点赞"""

    @pytest.mark.asyncio
    async def test_delete_blanks_content(self):
        thread = MessageThread(FakeMessageApi(), 7, [history(10, "secret", sender_id=1)])

        await thread.delete(10)

        message = thread.find(10)
        assert message.is_deleted
        assert message.content == ""

    @pytest.mark.asyncio
    async def test_delete_not_found_removes_locally(self):
        api = FakeMessageApi()
        api.delete_error = NotFoundError(404, "Message not found", "MESSAGE_NOT_FOUND")
        thread = MessageThread(api, 7, [history(10, "Hi!"), history(11, "Still there?")])

        await thread.delete(10)

        assert [m.id for m in thread.messages] == [11]

    @pytest.mark.asyncio
    async def test_toggle_like(self):
        thread = MessageThread(FakeMessageApi(), 7, [history(10, "Hi!")])

        assert (await thread.toggle_like(10)).is_liked
        assert not (await thread.toggle_like(10)).is_liked

    @pytest.mark.asyncio
    async def test_refresh(self):
        thread = MessageThread(FakeMessageApi(), 7)
        await thread.refresh()
        assert [m.content for m in thread.messages] == ["Hi!"]


class TestGrouped:
    """日期分组"""

    def test_groups_in_time_order_ids_ascending(self):
        thread = MessageThread(FakeMessageApi(), 7, [
            history(3, "c", created_at="2024-03-02T08:00:00"),
            history(1, "a", created_at="2024-03-01T09:00:00"),
            history(4, "d", created_at="2024-03-02T07:00:00"),
            history(2, "b", created_at="2024-03-01T10:00:00"),
        ])

        groups = thread.grouped()

        assert [label for label, _ in groups] == ["March 01, 2024", "March 02, 2024"]
        assert [[m.id for m in items] for _, items in groups] == [[1, 2], [3, 4]]
