"""
Notification Service
Fire-and-forget user notifications created alongside booking transitions
"""
import logging
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.models import Credential, Notification, ROLE_ADMIN

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50


def notify(db: Session, user_id: Optional[int], type_: str, title: str, message: str) -> Optional[Notification]:
    """
    Insert a notification for a user.

    Runs in its own commit after the caller's state change has been committed,
    so a failure here never undoes the operation that triggered it.

    Args:
        db: Database session
        user_id: Recipient credential id (ignored when empty)
        type_: Notification type, e.g. 'booking_request'
        title: Short title
        message: Body text

    Returns:
        The created Notification, or None when nothing was stored
    """
    if not user_id:
        return None

    try:
        notification = Notification(
            user_id=user_id,
            type=type_,
            title=title,
            message=message,
            read=False,
        )
        db.add(notification)
        db.commit()
        return notification
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store notification", extra={"user_id": user_id})
        return None


def notify_admins(db: Session, type_: str, title: str, message: str) -> int:
    """Send the same notification to every admin. Returns how many were stored."""
    admin_ids = [row.id for row in db.query(Credential.id).filter(Credential.role == ROLE_ADMIN).all()]
    sent = 0
    for admin_id in admin_ids:
        if notify(db, admin_id, type_, title, message) is not None:
            sent += 1
    return sent


def list_notifications(db: Session, user_id: int, limit: int = DEFAULT_LIST_LIMIT) -> List[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )


def mark_read(db: Session, user_id: int, notification_id: int) -> Optional[Notification]:
    """Mark one of the user's notifications as read. None when it is not theirs."""
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if notification is None:
        return None

    notification.read = True
    db.commit()
    return notification


def mark_all_read(db: Session, user_id: int) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session="fetch")
    )
    db.commit()
    return updated


def unread_count(db: Session, user_id: int) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .count()
    )
