"""
通知服务
"""

from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.models import ApiResponse, NotificationResponse
from kickmates.db.dao import NotificationDAO


def _notification_not_found() -> ApiResponse:
    return ApiResponse(
        success=False,
        message="Notification not found",
        error={"code": "NOTIFICATION_NOT_FOUND", "message": "通知不存在"}
    )


class NotificationService:
    """通知服务"""

    @staticmethod
    async def list_notifications(session: AsyncSession, user_id: int) -> ApiResponse:
        """用户通知列表（新的在前）"""
        notifications = await NotificationDAO.list_for_user(session, user_id)
        return ApiResponse(
            success=True,
            data={
                "notifications": [
                    NotificationResponse.model_validate(n).model_dump(mode="json") for n in notifications
                ]
            }
        )

    @staticmethod
    async def unread_count(session: AsyncSession, user_id: int) -> ApiResponse:
        """未读数"""
        count = await NotificationDAO.count_unread(session, user_id)
        return ApiResponse(success=True, data={"count": count})

    @staticmethod
    async def mark_read(session: AsyncSession, notification_id: int, user_id: int) -> ApiResponse:
        """标记单条已读"""
        if not await NotificationDAO.mark_read(session, notification_id, user_id):
            return _notification_not_found()
        return ApiResponse(success=True, message="Notification marked as read")

    @staticmethod
    async def mark_all_read(session: AsyncSession, user_id: int) -> ApiResponse:
        """全部已读"""
        updated = await NotificationDAO.mark_all_read(session, user_id)
        return ApiResponse(
            success=True,
            message="All notifications marked as read",
            data={"updated": updated}
        )

    @staticmethod
    async def delete_notification(session: AsyncSession, notification_id: int, user_id: int) -> ApiResponse:
        """删除通知"""
        if not await NotificationDAO.delete(session, notification_id, user_id):
            return _notification_not_found()
        return ApiResponse(success=True, message="Notification deleted")


# 全局通知服务实例
notification_service = NotificationService()
