"""
评论区状态（使用内存中的假 API）
"""

import asyncio

import pytest

from kickmates.client import CommentBoard, NotFoundError, ApiError, OLDEST, Session


class FakeCommentApi:
    """只实现评论区用到的接口"""

    def __init__(self, comments=()):
        self.session = Session(token="t", user={"id": 1, "username": "alice"})
        self.comments = list(comments)
        self.next_id = 100
        self.deleted = []
        self.add_gate = None
        self.fail_delete_with = None

    async def get_comments(self, target, target_id):
        return list(self.comments)

    async def add_comment(self, target, target_id, content, parent_comment_id=None):
        if self.add_gate is not None:
            await self.add_gate.wait()
        self.next_id += 1
        comment = {
            "id": self.next_id,
            "content": content,
            "created_at": "2024-05-02T09:00:00",
            "user_id": 1,
            "username": "alice",
            "parent_comment_id": parent_comment_id,
            "thumbs_up": 0,
            "thumbs_down": 0,
        }
        self.comments.insert(0, comment)
        return comment

    async def delete_comment(self, target, target_id, comment_id):
        if self.fail_delete_with is not None:
            raise self.fail_delete_with
        self.deleted.append(comment_id)
        return [comment_id]

    async def vote_comment(self, target, target_id, comment_id, vote_type):
        return {"comment_id": comment_id, "thumbs_up": 1, "thumbs_down": 0, "user_vote": vote_type}


def seed():
    return [
        {"id": 2, "content": "reply", "created_at": "2024-05-01T11:00:00", "user_id": 2,
         "username": "bob", "parent_comment_id": 1},
        {"id": 1, "content": "first", "created_at": "2024-05-01T10:00:00", "user_id": 1,
         "username": "alice"},
    ]


class TestCommentBoard:
    """评论区"""

    @pytest.mark.asyncio
    async def test_refresh_builds_tree(self):
        board = CommentBoard(FakeCommentApi(seed()), target_id=1)
        await board.refresh()

        assert [c.id for c in board.comments] == [2, 1]
        assert [n.id for n in board.tree] == [1]
        assert [r.id for r in board.tree[0].replies] == [2]

    @pytest.mark.asyncio
    async def test_add_waits_for_server(self):
        api = FakeCommentApi(seed())
        board = CommentBoard(api, target_id=1)
        board.load(seed())

        created = await board.add("  Count me in  ")

        assert created.id == 101
        assert created.content == "Count me in"
        assert board.comments[0] == created

    @pytest.mark.asyncio
    async def test_add_reply_lands_under_parent(self):
        board = CommentBoard(FakeCommentApi(), target_id=1, order=OLDEST)
        board.load(seed())

        await board.add("me too", parent_comment_id=1)

        assert [r.id for r in board.tree[0].replies] == [2, 101]

    @pytest.mark.asyncio
    async def test_add_rejects_empty_and_long(self):
        board = CommentBoard(FakeCommentApi(), target_id=1)

        with pytest.raises(ValueError):
            await board.add("   ")
        with pytest.raises(ValueError):
            await board.add("x" * 1001)
        assert board.comments == ()

    @pytest.mark.asyncio
    async def test_double_submit_ignored(self):
        api = FakeCommentApi()
        api.add_gate = asyncio.Event()
        board = CommentBoard(api, target_id=1)

        first = asyncio.ensure_future(board.add("first"))
        await asyncio.sleep(0)
        assert board.is_submitting

        assert await board.add("second") is None

        api.add_gate.set()
        created = await first
        assert [c.id for c in board.comments] == [created.id]
        assert not board.is_submitting

    @pytest.mark.asyncio
    async def test_add_failure_leaves_list_unchanged(self):
        class FailingApi(FakeCommentApi):
            async def add_comment(self, *args, **kwargs):
                raise ApiError(500, "boom")

        board = CommentBoard(FailingApi(), target_id=1)
        board.load(seed())

        with pytest.raises(ApiError):
            await board.add("hello")
        assert [c.id for c in board.comments] == [2, 1]
        assert not board.is_submitting

    @pytest.mark.asyncio
    async def test_delete_removes_replies(self):
        api = FakeCommentApi()
        board = CommentBoard(api, target_id=1)
        board.load(seed())

        await board.delete(1)

        assert board.comments == ()
        assert api.deleted == [1]

    @pytest.mark.asyncio
    async def test_delete_not_found_still_removes(self):
        api = FakeCommentApi()
        api.fail_delete_with = NotFoundError(404, "Comment not found", "COMMENT_NOT_FOUND")
        board = CommentBoard(api, target_id=1)
        board.load(seed())

        await board.delete(2)

        assert [c.id for c in board.comments] == [1]

    @pytest.mark.asyncio
    async def test_delete_other_errors_propagate(self):
        api = FakeCommentApi()
        api.fail_delete_with = ApiError(403, "Not authorized", "FORBIDDEN")
        board = CommentBoard(api, target_id=1)
        board.load(seed())

        with pytest.raises(ApiError):
            await board.delete(1)
        assert len(board.comments) == 2

    @pytest.mark.asyncio
    async def test_vote_applies_server_counts(self):
        board = CommentBoard(FakeCommentApi(), target_id=1)
        board.load(seed())

        await board.vote(2, "up")

        reply = board.tree[0].replies[0]
        assert (reply.thumbs_up, reply.user_vote) == (1, "up")

    @pytest.mark.asyncio
    async def test_vote_rejects_unknown_type(self):
        board = CommentBoard(FakeCommentApi(), target_id=1)
        with pytest.raises(ValueError):
            await board.vote(1, "sideways")
