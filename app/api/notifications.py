from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.database import get_db
from app.models import Credential
from app.services import notification_service

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("")
def list_notifications(user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    """Latest notifications, newest first"""
    notifications = notification_service.list_notifications(db, user.id)
    return {"success": True, "notifications": [n.to_dict() for n in notifications]}


@router.get("/unread-count")
def unread_count(user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "count": notification_service.unread_count(db, user.id)}


@router.post("/mark-all-read")
def mark_all_read(user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    updated = notification_service.mark_all_read(db, user.id)
    return {"success": True, "message": "All notifications marked as read", "updated": updated}


@router.post("/{notification_id}/read")
def mark_read(notification_id: int, user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    if notification_service.mark_read(db, user.id, notification_id) is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"success": True, "message": "Notification marked as read"}
