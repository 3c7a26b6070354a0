"""
数据库初始化脚本

创建所有表，可选写入演示数据或清空全部数据

    python -m kickmates.db.init_db            # 建表
    python -m kickmates.db.init_db --seed     # 建表 + 演示数据
    python -m kickmates.db.init_db --clear    # 清空全部数据
"""

import argparse
import asyncio
from datetime import datetime, timedelta

from loguru import logger
from sqlalchemy import delete, update

from kickmates.db import base
from kickmates.db.dao import (
    UserDAO, EventDAO, ParticipantDAO, DiscussionDAO, CommentDAO, ConversationDAO, MessageDAO,
    NotificationDAO,
)
from kickmates.db.models import Comment, Message

DEMO_USERS = [
    {
        "username": "john_doe",
        "email": "john@example.com",
        "password": "password123",
        "full_name": "John Doe",
        "bio": "Sports enthusiast and football lover",
    },
    {
        "username": "jane_smith",
        "email": "jane@example.com",
        "password": "password456",
        "full_name": "Jane Smith",
        "bio": "Tennis player and runner",
    },
    {
        "username": "mike_johnson",
        "email": "mike@example.com",
        "password": "password789",
        "full_name": "Mike Johnson",
        "bio": "Basketball coach and player",
    },
]


async def seed_demo_data():
    """写入演示用户、活动、讨论、评论与私信"""
    async with base.transaction() as session:
        john, jane, mike = [await UserDAO.create(session, **user) for user in DEMO_USERS]

        kickoff = datetime.utcnow().replace(hour=14, minute=0, second=0, microsecond=0) + timedelta(days=7)
        football = await EventDAO.create(
            session,
            creator_id=john.id,
            title="Weekend Football Match",
            description="Friendly football match at the local park. All skill levels welcome!",
            sport_type="Football",
            location="Central Park, New York",
            start_date=kickoff,
            end_date=kickoff + timedelta(hours=2),
            max_players=14,
        )
        tennis = await EventDAO.create(
            session,
            creator_id=jane.id,
            title="Tennis Doubles",
            description="Looking for two more players for doubles.",
            sport_type="Tennis",
            location="Riverside Courts",
            start_date=kickoff + timedelta(days=1),
            end_date=kickoff + timedelta(days=1, hours=2),
            max_players=4,
        )

        await ParticipantDAO.add(session, football.id, jane.id, "confirmed")
        await ParticipantDAO.add(session, tennis.id, mike.id, "confirmed")
        football.current_players += 1
        tennis.current_players += 1

        question = await CommentDAO.create(
            session, user_id=jane.id, content="Should I bring a ball?", event_id=football.id
        )
        await CommentDAO.create(
            session, user_id=john.id, content="I have two, no need.",
            event_id=football.id, parent_comment_id=question.id
        )

        discussion = await DiscussionDAO.create(
            session,
            creator_id=mike.id,
            title="Best drills for improving ball handling?",
            content="Share your favourite basketball drills for beginners.",
            category="Basketball",
        )
        await CommentDAO.create(
            session, user_id=john.id, content="Two-ball dribbling works wonders.",
            discussion_id=discussion.id
        )

        conversation = await ConversationDAO.create(session, [john.id, jane.id])
        await MessageDAO.create(session, conversation.id, john.id, "See you on Saturday!")

        await NotificationDAO.create(
            session, user_id=john.id, type="join_request",
            content="jane_smith joined \"Weekend Football Match\" (confirmed)", related_id=football.id
        )

    logger.success(f"🌱 Seeded {len(DEMO_USERS)} users with demo events, discussions and messages")


async def clear_all_data():
    """按依赖倒序清空全部表"""
    async with base.transaction() as session:
        # 先断开评论、消息的自引用
        await session.execute(update(Comment).values(parent_comment_id=None))
        await session.execute(update(Message).values(reply_to_id=None))
        for table in reversed(base.Base.metadata.sorted_tables):
            await session.execute(delete(table))

    logger.success("🧹 All tables cleared")


async def main(seed: bool = False, clear: bool = False):
    """主函数"""
    logger.info("🚀 Starting database initialization...")
    logger.info(f"Database URL: {base.get_database_url(async_mode=True)}")

    try:
        await base.init_db()
        await base.create_tables()

        if clear:
            await clear_all_data()
        if seed:
            await seed_demo_data()

        logger.success("✅ Database initialization completed successfully!")

    except Exception as e:
        logger.error(f"❌ Database initialization failed: {e}")
        raise
    finally:
        await base.close_db()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="KickMates database setup")
    parser.add_argument("--seed", action="store_true", help="insert demo data")
    parser.add_argument("--clear", action="store_true", help="delete all rows")
    args = parser.parse_args()

    asyncio.run(main(seed=args.seed, clear=args.clear))
