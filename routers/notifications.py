# Notifications Router for the collaboration platform
# Lets users read the notifications emitted by collaboration and contract events

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import List

from database.config import get_db
from database.models import User, Notification
from schemas.collaboration import NotificationResponse
from auth.roles import Permission
from auth.decorators import require_permission
from services.errors import NotFoundError
from services.notification_service import get_notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationResponse])
async def get_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.VIEW_NOTIFICATIONS)),
    unread_only: bool = Query(False, description="Only return unread notifications"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    """
    Get user's notifications, newest first.
    """
    query = db.query(Notification).filter(Notification.user_id == current_user.id)

    if unread_only:
        query = query.filter(Notification.read == False)

    offset = (page - 1) * limit
    return query.order_by(desc(Notification.created_at)).offset(offset).limit(limit).all()


@router.get("/unread-count")
async def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.VIEW_NOTIFICATIONS))
):
    return {"unread_count": get_notification_service(db).get_unread_count(current_user.id)}


@router.post("/{notification_id}/read")
async def mark_as_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.VIEW_NOTIFICATIONS))
):
    """
    Mark a notification as read.
    """
    if not get_notification_service(db).mark_read(notification_id, current_user.id):
        raise NotFoundError("Notification introuvable")

    db.commit()

    return {"status": "success"}


@router.post("/read-all")
async def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.VIEW_NOTIFICATIONS))
):
    count = get_notification_service(db).mark_all_read(current_user.id)
    db.commit()

    return {"status": "success", "updated": count}
