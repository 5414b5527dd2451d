# app/crud/notification.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, desc, func
from app.models.notification import Notification, IssuedNotificationKey
from app.schemas.notification import NotificationCreate
from typing import List, Optional
import uuid
import logging
from datetime import datetime

logger = logging.getLogger(__name__)

class InvalidStatusTransition(Exception):
    """Raised when a notification is moved to a status it cannot reach"""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot move notification from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested

async def is_key_issued(db: AsyncSession, user_id: uuid.UUID, dedupe_key: str) -> bool:
    result = await db.execute(
        select(IssuedNotificationKey.id)
        .filter(IssuedNotificationKey.user_id == user_id, IssuedNotificationKey.dedupe_key == dedupe_key)
    )
    return result.first() is not None

async def create_notification(db: AsyncSession, notification: NotificationCreate) -> Optional[Notification]:
    """
    Create a new notification.

    A ``dedupe_key`` is issued once per user: if the user was ever notified
    under it, even by a notification deleted since, nothing is inserted and
    None is returned.
    """
    if notification.dedupe_key:
        if await is_key_issued(db, notification.user_id, notification.dedupe_key):
            logger.debug(f"Skipping duplicate notification {notification.dedupe_key} for user {notification.user_id}")
            return None
        db.add(IssuedNotificationKey(user_id=notification.user_id, dedupe_key=notification.dedupe_key))

    db_notification = Notification(**notification.model_dump(), created_at=datetime.utcnow())
    db.add(db_notification)
    await db.commit()
    await db.refresh(db_notification)
    return db_notification

async def get_notification_by_id(db: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Notification]:
    """Get a specific notification, ensuring it belongs to the user"""
    result = await db.execute(
        select(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
    )
    return result.scalars().first()

async def get_notifications_for_user(
    db: AsyncSession,
    user_id: uuid.UUID,
    unread_only: bool = False,
    include_archived: bool = False,
    limit: int = 50
) -> List[Notification]:
    """Get notifications for a specific user with filtering options"""
    query = (
        select(Notification)
        .filter(Notification.user_id == user_id)
    )

    if unread_only:
        query = query.filter(Notification.status == "unread")
    elif not include_archived:
        query = query.filter(Notification.status != "archived")

    query = query.order_by(desc(Notification.created_at)).limit(limit)

    result = await db.execute(query)
    return result.scalars().all()

async def get_unread_count(db: AsyncSession, user_id: uuid.UUID) -> int:
    """Get count of unread notifications for a user"""
    result = await db.execute(
        select(func.count())
        .select_from(Notification)
        .filter(Notification.user_id == user_id, Notification.status == "unread")
    )
    return result.scalar_one() or 0

async def set_notification_status(db: AsyncSession, notification: Notification, status: str) -> Notification:
    """Move a notification along unread -> read -> archived (or unread -> archived)"""
    if notification.status == status:
        return notification
    if not notification.can_transition(status):
        raise InvalidStatusTransition(notification.status, status)

    notification.status = status
    if status == "read":
        notification.read_at = datetime.utcnow()
    await db.commit()
    await db.refresh(notification)
    return notification

async def mark_all_notifications_as_read(db: AsyncSession, user_id: uuid.UUID) -> int:
    """Mark all unread notifications as read for a specific user"""
    result = await db.execute(
        update(Notification)
        .filter(Notification.user_id == user_id, Notification.status == "unread")
        .values(status="read", read_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount

async def delete_notification(db: AsyncSession, notification_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    """Delete a notification, ensuring it belongs to the specified user"""
    result = await db.execute(
        delete(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
    )
    await db.commit()
    return result.rowcount > 0
