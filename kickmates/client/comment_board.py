"""
评论区状态

持有某个活动或讨论帖的扁平评论列表。发表评论等待服务端确认后再插入（非乐观），
删除时 404 视为已删除，投票只写入服务端返回的计数。
"""

from typing import List, Optional, Tuple

from loguru import logger

from kickmates.config.settings import settings
from kickmates.client.api_client import ApiClient, EVENTS
from kickmates.client.comment_tree import (
    Comment, CommentNode, NEWEST, apply_vote, organize_comments, remove_comment,
)
from kickmates.client.errors import NotFoundError


class CommentBoard:
    """活动 / 讨论帖评论区"""

    def __init__(
        self,
        api: ApiClient,
        target_id: int,
        target: str = EVENTS,
        order: str = NEWEST,
        sort_replies: bool = False
    ):
        """
        Args:
            api: API 客户端
            target_id: 活动或讨论帖ID
            target: events 或 discussions
            order: 顶层评论排序 newest / oldest
            sort_replies: 回复是否按时间正序重排（活动详情页）
        """
        self.api = api
        self.target = target
        self.target_id = target_id
        self.order = order
        self.sort_replies = sort_replies
        self._comments: Tuple[Comment, ...] = ()
        self._submitting = False

    @property
    def comments(self) -> Tuple[Comment, ...]:
        """当前扁平评论列表"""
        return self._comments

    @property
    def tree(self) -> List[CommentNode]:
        """由扁平列表重新组装的评论树"""
        return organize_comments(self._comments, self.order, self.sort_replies)

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    def load(self, comments) -> Tuple[Comment, ...]:
        """用服务端数据替换本地列表"""
        self._comments = tuple(Comment.from_dict(c) if isinstance(c, dict) else c for c in comments)
        return self._comments

    async def refresh(self) -> Tuple[Comment, ...]:
        """重新拉取评论"""
        return self.load(await self.api.get_comments(self.target, self.target_id))

    async def add(self, content: str, parent_comment_id: Optional[int] = None) -> Optional[Comment]:
        """
        发表评论或回复

        - 内容为空或超长时直接抛出 ValueError，不发请求
        - 上一次提交尚未返回时忽略本次提交，返回 None

        Returns:
            服务端返回的评论
        """
        content = (content or "").strip()
        if not content:
            raise ValueError("Comment content cannot be empty")
        if len(content) > settings.COMMENT_MAX_LENGTH:
            raise ValueError(f"Comment content exceeds {settings.COMMENT_MAX_LENGTH} characters")

        if self._submitting:
            logger.warning("⚠️  Comment submit already in flight, ignoring duplicate")
            return None

        self._submitting = True
        try:
            created = Comment.from_dict(
                await self.api.add_comment(self.target, self.target_id, content, parent_comment_id)
            )
        finally:
            self._submitting = False

        self._comments = (created,) + self._comments
        return created

    async def delete(self, comment_id: int) -> Tuple[Comment, ...]:
        """
        删除评论及其全部回复

        服务端返回 404 时同样从本地移除
        """
        try:
            await self.api.delete_comment(self.target, self.target_id, comment_id)
        except NotFoundError:
            logger.info(f"Comment {comment_id} already gone on server, removing locally")

        self._comments = tuple(remove_comment(self._comments, comment_id))
        return self._comments

    async def vote(self, comment_id: int, vote_type: str) -> Tuple[Comment, ...]:
        """
        投票，并把服务端返回的计数写回对应评论
        """
        if vote_type not in ("up", "down"):
            raise ValueError(f"Unknown vote type: {vote_type!r}")

        delta = await self.api.vote_comment(self.target, self.target_id, comment_id, vote_type)
        self._comments = tuple(apply_vote(self._comments, delta))
        return self._comments
