# app/api/v1/routes/notification.py
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID
from datetime import datetime
import logging

from app.schemas.notification import NotificationRead
from app.schemas.preferences import PreferencesRead, PreferencesUpdate
from app.crud import notification as crud_notification
from app.crud import preferences as crud_preferences
from app.crud import goal as crud_goal
from app.api import deps
from app.core.database import get_async_session
from app.models.user import User
from app.utils.realtime import manager
from app.utils.triggers import after_goal_change, evaluate_expense_triggers

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/", response_model=List[NotificationRead])
async def get_notifications(
    unread_only: bool = Query(False, description="Filter to only unread notifications"),
    include_archived: bool = Query(False, description="Include archived notifications"),
    limit: int = Query(50, ge=1, le=200, description="Maximum number of notifications to return"),
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user)
):
    """Get notifications for the current user with optional filtering"""
    return await crud_notification.get_notifications_for_user(
        db,
        user_id=current_user.id,
        unread_only=unread_only,
        include_archived=include_archived,
        limit=limit
    )

@router.get("/unread-count", response_model=int)
async def get_unread_count(
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user)
):
    """Get count of unread notifications for the current user"""
    return await crud_notification.get_unread_count(db, current_user.id)

@router.get("/preferences", response_model=PreferencesRead)
async def get_preferences(
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user)
):
    """Notification preferences; defaults are created on first access"""
    return await crud_preferences.get_preferences(current_user.id, db)

@router.patch("/preferences", response_model=PreferencesRead)
async def update_preferences(
    prefs_in: PreferencesUpdate,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user)
):
    return await crud_preferences.update_preferences(current_user.id, prefs_in, db)

@router.post("/evaluate", response_model=List[NotificationRead])
async def evaluate_triggers(
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user)
):
    """Run goal, milestone and spending triggers now and return the notifications created"""
    created = []
    for goal in await crud_goal.get_goals_for_user(current_user.id, db):
        created += await after_goal_change(db, goal)
    created += await evaluate_expense_triggers(db, current_user.id)
    return created

@router.post("/read_all", response_model=int)
async def mark_all_notifications_as_read(
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user)
):
    """Mark all unread notifications for the current user as read"""
    return await crud_notification.mark_all_notifications_as_read(db, current_user.id)

@router.get("/{notification_id}", response_model=NotificationRead)
async def get_notification(
    notification_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user)
):
    """Get a specific notification, ensuring it belongs to the current user"""
    notification = await crud_notification.get_notification_by_id(db, notification_id, current_user.id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification

async def _transition(notification_id: UUID, new_status: str, db: AsyncSession, user: User):
    notification = await crud_notification.get_notification_by_id(db, notification_id, user.id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    try:
        notification = await crud_notification.set_notification_status(db, notification, new_status)
    except crud_notification.InvalidStatusTransition as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    await manager.push(user.id, "notifications", "UPDATE", notification)
    return notification

@router.post("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_as_read(
    notification_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user)
):
    """Mark a specific notification as read"""
    return await _transition(notification_id, "read", db, current_user)

@router.post("/{notification_id}/archive", response_model=NotificationRead)
async def archive_notification(
    notification_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user)
):
    """Archive a notification; archived notifications cannot be marked read again"""
    return await _transition(notification_id, "archived", db, current_user)

@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: UUID,
    db: AsyncSession = Depends(get_async_session),
    current_user: User = Depends(deps.get_current_user)
):
    deleted = await crud_notification.delete_notification(db, notification_id, current_user.id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Notification not found")
    await manager.push(current_user.id, "notifications", "DELETE", {"id": notification_id})
    return None

@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str = Query(...),
    db: AsyncSession = Depends(get_async_session)
):
    """WebSocket endpoint pushing change records for the user's notifications, goals and contributions"""
    try:
        user = await deps.get_user_from_token(token, db)
    except HTTPException:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    await websocket.accept()
    manager.connect(websocket, user.id)
    try:
        while True:
            await websocket.receive_text()
            await websocket.send_json({"status": "received", "timestamp": datetime.utcnow().isoformat()})
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, user.id)
