"""
私信模块路由
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from kickmates.models import ApiResponse, ConversationCreate, MessageCreate
from kickmates.api.deps import get_current_user, get_db_session, ensure_success
from kickmates.services.message_service import message_service

router = APIRouter()


@router.get("/conversations", response_model=ApiResponse)
async def list_conversations(
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """会话列表（含最后一条消息与未读数）"""
    return ensure_success(await message_service.list_conversations(session, current_user["user_id"]))


@router.post("/conversations", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(
    data: ConversationCreate,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """创建会话（已有一对一会话时直接返回）"""
    result = await message_service.create_conversation(session, current_user["user_id"], data.participant_ids)
    return ensure_success(result)


@router.get("/conversations/{conversation_id}", response_model=ApiResponse)
async def get_conversation(
    conversation_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """会话详情"""
    return ensure_success(await message_service.get_conversation(session, conversation_id, current_user["user_id"]))


@router.get("/conversations/{conversation_id}/messages", response_model=ApiResponse)
async def get_messages(
    conversation_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """消息列表（同时标记已读）"""
    return ensure_success(await message_service.get_messages(session, conversation_id, current_user["user_id"]))


@router.post("/conversations/{conversation_id}/messages", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    conversation_id: int,
    data: MessageCreate,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """发送消息（可引用回复）"""
    result = await message_service.send_message(
        session, conversation_id, current_user["user_id"], data.content, data.reply_to_id
    )
    return ensure_success(result)


@router.post("/conversations/{conversation_id}/messages/{message_id}/like", response_model=ApiResponse)
async def toggle_like(
    conversation_id: int,
    message_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """点赞 / 取消点赞"""
    result = await message_service.toggle_like(session, conversation_id, message_id, current_user["user_id"])
    return ensure_success(result)


@router.delete("/conversations/{conversation_id}/messages/{message_id}", response_model=ApiResponse)
async def delete_message(
    conversation_id: int,
    message_id: int,
    current_user: dict = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    """撤回消息（仅发送人）"""
    result = await message_service.delete_message(session, conversation_id, message_id, current_user["user_id"])
    return ensure_success(result)
