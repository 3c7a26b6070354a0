"""
活动服务

创建 / 更新 / 删除活动，报名与候补队列，收藏
"""

from typing import Optional

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.models import (
    ApiResponse, EventCreate, EventUpdate, EventResponse, NotificationType, ParticipationStatus
)
from kickmates.db.dao import EventDAO, ParticipantDAO, BookmarkDAO, NotificationDAO, UserDAO
from kickmates.services.comment_service import CommentService


def serialize_event(event, creator, **extra) -> dict:
    """活动 + 发起人 -> 响应字典，extra 追加额外字段（如报名状态）"""
    response = EventResponse.model_validate(event)
    response.creator_name = creator.username
    data = response.model_dump(mode="json")
    data.update(extra)
    return data


def _event_not_found() -> ApiResponse:
    return ApiResponse(
        success=False,
        message="Event not found",
        error={"code": "EVENT_NOT_FOUND", "message": "活动不存在"}
    )


def _forbidden(action: str) -> ApiResponse:
    return ApiResponse(
        success=False,
        message=f"Not authorized to {action} this event",
        error={"code": "FORBIDDEN", "message": "仅活动发起人可操作"}
    )


class EventService:
    """活动服务"""

    @staticmethod
    async def create_event(session: AsyncSession, user_id: int, data: EventCreate) -> ApiResponse:
        """
        创建活动（发起人自动确认参与，current_players = 1）

        Args:
            session: 数据库会话
            user_id: 发起人ID
            data: 活动数据

        Returns:
            API响应，包含新活动
        """
        event = await EventDAO.create(session, creator_id=user_id, **data.model_dump())
        creator = await UserDAO.get_by_id(session, user_id)

        logger.info(f"🏟️ Event created: {event.title} (id={event.id}, creator={user_id})")

        return ApiResponse(
            success=True,
            message="Event created successfully",
            data={"event": serialize_event(event, creator)}
        )

    @staticmethod
    async def list_events(
        session: AsyncSession,
        sport_type: Optional[str] = None,
        location: Optional[str] = None,
        date: Optional[str] = None,
        search: Optional[str] = None
    ) -> ApiResponse:
        """
        活动列表（按开始时间升序），附带确认与候补人数
        """
        rows = await EventDAO.list_events(session, sport_type, location, date, search)

        events = []
        for event, creator in rows:
            waiting = await EventDAO.count_participants(session, event.id, ParticipationStatus.WAITING.value)
            events.append(serialize_event(
                event, creator,
                confirmed_players=event.current_players,
                waiting_players=waiting,
            ))

        return ApiResponse(success=True, data={"events": events})

    @staticmethod
    async def get_event(
        session: AsyncSession,
        event_id: int,
        current_user_id: Optional[int] = None
    ) -> ApiResponse:
        """
        活动详情：活动、参与者、评论、是否收藏、报名状态

        Args:
            session: 数据库会话
            event_id: 活动ID
            current_user_id: 当前用户（可选）

        Returns:
            API响应
        """
        found = await EventDAO.get_with_creator(session, event_id)
        if not found:
            return _event_not_found()
        event, creator = found

        participants = [
            {
                "id": user.id,
                "username": user.username,
                "profile_image": user.profile_image,
                "status": participant.status,
                "joined_at": participant.joined_at.isoformat(),
            }
            for participant, user in await ParticipantDAO.list_with_users(session, event_id)
        ]

        comments = await CommentService.list_comments(
            session, event_id=event_id, current_user_id=current_user_id
        )

        is_bookmarked = False
        participation_status = None
        if current_user_id is not None:
            is_bookmarked = await BookmarkDAO.get(session, event_id, current_user_id) is not None
            participant = await ParticipantDAO.get(session, event_id, current_user_id)
            if participant:
                participation_status = participant.status

        return ApiResponse(
            success=True,
            data={
                "event": serialize_event(event, creator),
                "participants": participants,
                "comments": comments,
                "is_bookmarked": is_bookmarked,
                "participation_status": participation_status,
            }
        )

    @staticmethod
    async def _promote_waiting(session: AsyncSession, event) -> int:
        """
        有空位时按报名先后把候补转为确认

        Returns:
            转正人数
        """
        promoted = 0
        while event.current_players < event.max_players:
            waiting = await ParticipantDAO.first_waiting(session, event.id)
            if not waiting:
                break

            waiting.status = ParticipationStatus.CONFIRMED.value
            event.current_players += 1
            promoted += 1

            await NotificationDAO.create(
                session,
                user_id=waiting.user_id,
                type=NotificationType.JOIN_ACCEPTED.value,
                content=f"A spot opened up: you are now confirmed for \"{event.title}\"",
                related_id=event.id,
            )
            await session.flush()
            logger.info(f"⬆️ User {waiting.user_id} promoted from waiting list of event {event.id}")

        return promoted

    @staticmethod
    async def update_event(
        session: AsyncSession,
        event_id: int,
        user_id: int,
        data: EventUpdate
    ) -> ApiResponse:
        """
        更新活动（仅发起人），扩容时自动转正候补

        Returns:
            API响应，包含更新后的活动
        """
        event = await EventDAO.get_by_id(session, event_id)
        if not event:
            return _event_not_found()
        if event.creator_id != user_id:
            return _forbidden("update")

        fields = data.model_dump(exclude_unset=True)
        if fields.get("max_players") is not None and fields["max_players"] < event.current_players:
            return ApiResponse(
                success=False,
                message="max_players cannot be lower than the number of confirmed players",
                error={"code": "INVALID_CAPACITY", "message": "人数上限不能低于已确认人数"}
            )

        start = fields.get("start_date") or event.start_date
        end = fields.get("end_date") or event.end_date
        if end < start:
            return ApiResponse(
                success=False,
                message="end_date must not be before start_date",
                error={"code": "INVALID_DATES", "message": "结束时间早于开始时间"}
            )

        event = await EventDAO.update(session, event, **fields)
        await EventService._promote_waiting(session, event)

        found = await EventDAO.get_with_creator(session, event_id)
        return ApiResponse(
            success=True,
            message="Event updated successfully",
            data={"event": serialize_event(*found)}
        )

    @staticmethod
    async def delete_event(session: AsyncSession, event_id: int, user_id: int) -> ApiResponse:
        """删除活动（仅发起人），级联删除报名、收藏、评论"""
        event = await EventDAO.get_by_id(session, event_id)
        if not event:
            return _event_not_found()
        if event.creator_id != user_id:
            return _forbidden("delete")

        await EventDAO.delete(session, event_id)
        logger.info(f"🗑️ Event {event_id} deleted by user {user_id}")

        return ApiResponse(success=True, message="Event deleted successfully")

    @staticmethod
    async def join_event(session: AsyncSession, event_id: int, user_id: int) -> ApiResponse:
        """
        报名活动

        - 未满员：confirmed，current_players +1
        - 已满员：进入候补 waiting

        Returns:
            API响应，data.status 为报名结果
        """
        event = await EventDAO.get_by_id(session, event_id)
        if not event:
            return _event_not_found()

        existing = await ParticipantDAO.get(session, event_id, user_id)
        if existing:
            where = "a participant" if existing.status == ParticipationStatus.CONFIRMED.value else "on the waiting list"
            return ApiResponse(
                success=False,
                message=f"You are already {where} for this event",
                error={"code": "ALREADY_JOINED", "message": "已经报名过该活动"}
            )

        if event.current_players < event.max_players:
            status = ParticipationStatus.CONFIRMED.value
        else:
            status = ParticipationStatus.WAITING.value

        await ParticipantDAO.add(session, event_id, user_id, status)
        if status == ParticipationStatus.CONFIRMED.value:
            event.current_players += 1

        if event.creator_id != user_id:
            user = await UserDAO.get_by_id(session, user_id)
            await NotificationDAO.create(
                session,
                user_id=event.creator_id,
                type=NotificationType.JOIN_REQUEST.value,
                content=f"{user.username} joined \"{event.title}\" ({status})",
                related_id=event.id,
            )
        await session.flush()

        message = (
            "You have joined the event!"
            if status == ParticipationStatus.CONFIRMED.value
            else "You have been added to the waiting list"
        )
        return ApiResponse(
            success=True,
            message=message,
            data={"status": status, "current_players": event.current_players}
        )

    @staticmethod
    async def leave_event(session: AsyncSession, event_id: int, user_id: int) -> ApiResponse:
        """
        退出活动；确认参与者退出后候补队列最早的一人自动转正
        """
        event = await EventDAO.get_by_id(session, event_id)
        if not event:
            return _event_not_found()

        participant = await ParticipantDAO.get(session, event_id, user_id)
        if not participant:
            return ApiResponse(
                success=False,
                message="You are not a participant in this event",
                error={"code": "NOT_PARTICIPANT", "message": "未报名该活动"}
            )

        was_confirmed = participant.status == ParticipationStatus.CONFIRMED.value
        await ParticipantDAO.remove(session, participant)

        if was_confirmed:
            event.current_players = max(0, event.current_players - 1)
            await EventService._promote_waiting(session, event)
        await session.flush()

        return ApiResponse(
            success=True,
            message="You have left the event",
            data={"current_players": event.current_players}
        )

    @staticmethod
    async def toggle_bookmark(session: AsyncSession, event_id: int, user_id: int) -> ApiResponse:
        """收藏 / 取消收藏"""
        event = await EventDAO.get_by_id(session, event_id)
        if not event:
            return _event_not_found()

        bookmarked = await BookmarkDAO.toggle(session, event_id, user_id)

        return ApiResponse(
            success=True,
            message="Event bookmarked" if bookmarked else "Bookmark removed",
            data={"is_bookmarked": bookmarked}
        )


# 全局活动服务实例
event_service = EventService()
