"""
时间解析与展示
"""

from datetime import datetime, timezone, date
from typing import Optional, Union

TimeLike = Union[str, datetime, None]


def parse_timestamp(value: TimeLike) -> Optional[datetime]:
    """
    把服务端返回的时间统一解析为 naive UTC datetime

    支持 ISO 8601（含 Z / 时区偏移）与 SQLite 的 "YYYY-MM-DD HH:MM:SS" 格式

    Args:
        value: 时间字符串或 datetime

    Returns:
        datetime，无法解析时返回 None
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def humanize(value: TimeLike, now: Optional[datetime] = None) -> str:
    """
    相对时间文案：Just now / N mins ago / N hours ago / Yesterday / N days ago / 日期

    Args:
        value: 时间
        now: 当前时间（naive UTC），测试时可注入

    Returns:
        展示文案
    """
    moment = parse_timestamp(value)
    if moment is None:
        return ""

    now = now or datetime.utcnow()
    seconds = int((now - moment).total_seconds())

    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        minutes = seconds // 60
        return f"{minutes} mins ago"
    if seconds < 86400:
        hours = seconds // 3600
        return f"{hours} hours ago"

    days = seconds // 86400
    if days == 1:
        return "Yesterday"
    if days < 7:
        return f"{days} days ago"
    return moment.strftime("%b %d, %Y")


def date_group(value: TimeLike, today: Optional[date] = None) -> str:
    """
    消息分组标题：Today / Yesterday / 具体日期
    """
    moment = parse_timestamp(value)
    if moment is None:
        return ""

    today = today or datetime.utcnow().date()
    days = (today - moment.date()).days
    if days == 0:
        return "Today"
    if days == 1:
        return "Yesterday"
    return moment.strftime("%B %d, %Y")
