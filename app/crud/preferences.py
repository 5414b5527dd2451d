# app/crud/preferences.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.models.preferences import NotificationPreferences
from app.schemas.preferences import PreferencesUpdate
from app.core.config import settings
import uuid
import logging

logger = logging.getLogger(__name__)

def default_preferences(user_id: uuid.UUID) -> NotificationPreferences:
    return NotificationPreferences(
        user_id=user_id,
        goal_deadline_reminder=True,
        deadline_days_threshold=settings.DEFAULT_DEADLINE_DAYS_THRESHOLD,
        goal_progress_alert=True,
        progress_threshold=settings.DEFAULT_PROGRESS_THRESHOLD,
        monthly_spending_alert=True,
        spending_threshold=settings.DEFAULT_SPENDING_THRESHOLD,
        email_notifications=True,
        notification_types=list(settings.DEFAULT_NOTIFICATION_TYPES),
    )

async def get_preferences(user_id: uuid.UUID, db: AsyncSession) -> NotificationPreferences:
    """Return the user's notification preferences, creating the defaults on first access"""
    result = await db.execute(
        select(NotificationPreferences).where(NotificationPreferences.user_id == user_id)
    )
    preferences = result.scalar_one_or_none()
    if preferences:
        return preferences

    preferences = default_preferences(user_id)
    db.add(preferences)
    await db.commit()
    await db.refresh(preferences)
    logger.info(f"Created default notification preferences for user {user_id}")
    return preferences

async def update_preferences(user_id: uuid.UUID, prefs_in: PreferencesUpdate, db: AsyncSession) -> NotificationPreferences:
    preferences = await get_preferences(user_id, db)
    for field, value in prefs_in.model_dump(exclude_unset=True).items():
        setattr(preferences, field, value)
    db.add(preferences)
    await db.commit()
    await db.refresh(preferences)
    return preferences
