"""
评论树

服务端返回扁平评论列表（回复通过 parent_comment_id 指向父评论），
这里负责排序、组装成树、以及在树上应用投票结果。所有函数都返回新对象，不修改入参。
"""

from dataclasses import dataclass, field, fields, replace, asdict
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union

from kickmates.utils.timefmt import parse_timestamp

NEWEST = "newest"
OLDEST = "oldest"


@dataclass(frozen=True)
class Comment:
    """服务端评论记录"""
    id: int
    content: str
    created_at: str
    user_id: int
    username: str
    profile_image: Optional[str] = None
    parent_comment_id: Optional[int] = None
    thumbs_up: int = 0
    thumbs_down: int = 0
    user_vote: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Comment":
        """从响应字典构造（忽略未知字段）"""
        known = {f.name for f in fields(Comment)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @property
    def created(self) -> datetime:
        return parse_timestamp(self.created_at) or datetime.min

    @property
    def is_reply(self) -> bool:
        return self.parent_comment_id is not None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CommentNode(Comment):
    """评论树节点：评论 + 直接回复"""
    replies: List["CommentNode"] = field(default_factory=list)

    @classmethod
    def of(cls, comment: Comment) -> "CommentNode":
        values = {f.name: getattr(comment, f.name) for f in fields(Comment)}
        return cls(**values, replies=[])


@dataclass(frozen=True)
class VoteDelta:
    """服务端确认后的投票结果"""
    comment_id: int
    thumbs_up: int
    thumbs_down: int
    user_vote: Optional[str] = None

    @classmethod
    def coerce(cls, value: Union["VoteDelta", dict]) -> "VoteDelta":
        if isinstance(value, VoteDelta):
            return value
        return cls(
            comment_id=value["comment_id"],
            thumbs_up=value["thumbs_up"],
            thumbs_down=value["thumbs_down"],
            user_vote=value.get("user_vote"),
        )


def _coerce(comments: Iterable[Union[Comment, dict]]) -> List[Comment]:
    return [c if isinstance(c, Comment) else Comment.from_dict(c) for c in comments]


def sort_comments(comments: Iterable[Union[Comment, dict]], order: str = NEWEST) -> List[Comment]:
    """
    按创建时间排序（稳定排序，时间相同保持原顺序）

    Args:
        comments: 评论
        order: newest（新的在前）或 oldest

    Returns:
        排序后的新列表
    """
    if order not in (NEWEST, OLDEST):
        raise ValueError(f"Unknown sort order: {order!r}")
    return sorted(_coerce(comments), key=lambda c: c.created, reverse=(order == NEWEST))


def _creates_cycle(comment_id: int, parent_id: int, parents: Dict[int, Optional[int]]) -> bool:
    """沿已挂接的父链向上查找，确认挂到 parent_id 下不会形成环"""
    seen = set()
    current = parent_id
    while current is not None and current not in seen:
        if current == comment_id:
            return True
        seen.add(current)
        current = parents.get(current)
    return False


def _sort_replies(nodes: List[CommentNode]):
    for node in nodes:
        node.replies.sort(key=lambda r: r.created)
        _sort_replies(node.replies)


def build_comment_tree(
    comments: Iterable[Union[Comment, dict]],
    sort_replies: bool = False
) -> List[CommentNode]:
    """
    把扁平评论列表组装成树

    1. 以 id 建立节点映射，每个节点的 replies 为空
    2. 按输入顺序遍历：父评论存在则挂到父节点下，否则作为顶层评论

    父评论不在输入中的回复提升为顶层评论，所以树中的 id 集合与输入一致。
    父链成环时（A 回复 B，B 又回复 A），按输入顺序挂接，
    最后一条会闭合环的评论提升为顶层，其余评论保持原有的父子关系。

    Args:
        comments: 扁平评论（顺序即顶层与回复的顺序）
        sort_replies: 是否把每层回复按时间正序重排

    Returns:
        顶层评论节点列表
    """
    ordered = []
    nodes: Dict[int, CommentNode] = {}
    for comment in _coerce(comments):
        if comment.id in nodes:
            continue
        nodes[comment.id] = CommentNode.of(comment)
        ordered.append(comment)

    # 已挂接的父子关系
    parents: Dict[int, Optional[int]] = {}

    roots: List[CommentNode] = []
    for comment in ordered:
        node = nodes[comment.id]
        parent_id = comment.parent_comment_id
        if parent_id in nodes and not _creates_cycle(comment.id, parent_id, parents):
            parents[comment.id] = parent_id
            nodes[parent_id].replies.append(node)
        else:
            roots.append(node)

    if sort_replies:
        _sort_replies(roots)

    return roots


def organize_comments(
    comments: Iterable[Union[Comment, dict]],
    order: str = NEWEST,
    sort_replies: bool = False
) -> List[CommentNode]:
    """排序 + 建树"""
    return build_comment_tree(sort_comments(comments, order), sort_replies=sort_replies)


def _apply_vote(node: Comment, delta: VoteDelta) -> Comment:
    if node.id == delta.comment_id:
        return replace(
            node,
            thumbs_up=delta.thumbs_up,
            thumbs_down=delta.thumbs_down,
            user_vote=delta.user_vote,
        )

    replies = getattr(node, "replies", None)
    if replies:
        return replace(node, replies=[_apply_vote(reply, delta) for reply in replies])
    return node


def apply_vote(nodes: Sequence[Comment], delta: Union[VoteDelta, dict]) -> List[Comment]:
    """
    把投票结果写入匹配的评论（递归查找回复）

    计数直接覆盖，重复应用结果不变；找不到 comment_id 时原样返回。
    同样适用于扁平评论列表。

    Args:
        nodes: 评论树或扁平评论列表
        delta: {comment_id, thumbs_up, thumbs_down, user_vote}

    Returns:
        新列表
    """
    delta = VoteDelta.coerce(delta)
    return [_apply_vote(node, delta) for node in nodes]


def iter_nodes(nodes: Iterable[Comment]) -> Iterator[Comment]:
    """深度优先遍历整棵树"""
    for node in nodes:
        yield node
        yield from iter_nodes(getattr(node, "replies", None) or [])


def collect_ids(nodes: Iterable[Comment]) -> Set[int]:
    return {node.id for node in iter_nodes(nodes)}


def find_comment(nodes: Iterable[Comment], comment_id: int) -> Optional[Comment]:
    for node in iter_nodes(nodes):
        if node.id == comment_id:
            return node
    return None


def remove_comment(comments: Iterable[Comment], comment_id: int) -> List[Comment]:
    """
    从扁平列表中移除评论及其全部后代

    Returns:
        新列表
    """
    comments = list(comments)
    doomed = {comment_id}
    changed = True
    while changed:
        changed = False
        for comment in comments:
            if comment.parent_comment_id in doomed and comment.id not in doomed:
                doomed.add(comment.id)
                changed = True
    return [c for c in comments if c.id not in doomed]


def paginate(nodes: Sequence[CommentNode], page: int, per_page: int) -> Tuple[List[CommentNode], int]:
    """
    顶层评论分页（回复跟随父评论）

    Returns:
        (当前页节点, 总页数)
    """
    if per_page < 1:
        raise ValueError("per_page must be positive")
    pages = max(1, (len(nodes) + per_page - 1) // per_page)
    page = min(max(page, 1), pages)
    start = (page - 1) * per_page
    return list(nodes[start:start + per_page]), pages
