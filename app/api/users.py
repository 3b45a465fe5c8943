from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.database import get_db
from app.models import Credential, EventServiceProvider, ROLE_ADMIN
from app.models.vendor import APPLICATION_APPROVED

router = APIRouter(tags=["users"])


@router.get("/api/users")
def list_users(db: Session = Depends(get_db)):
    users = db.query(Credential.id, Credential.username).order_by(Credential.id).all()
    return {"success": True, "users": [{"id": u.id, "username": u.username} for u in users]}


@router.get("/api/users/by-id/{user_id}")
def get_user_by_id(user_id: int, db: Session = Depends(get_db)):
    user = db.get(Credential, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "user": user.public_dict()}


@router.get("/api/users/{firebase_uid}")
def get_user_by_firebase_uid(firebase_uid: str, db: Session = Depends(get_db)):
    """Chat clients identify users by their Firebase uid"""
    user = db.query(Credential).filter(Credential.firebase_uid == firebase_uid).first()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"success": True, "user": user.public_dict()}


@router.get("/api/chat/contacts")
def chat_contacts(user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    """Admins the caller can message"""
    admins = (
        db.query(Credential)
        .filter(Credential.role == ROLE_ADMIN, Credential.id != user.id)
        .order_by(Credential.first_name)
        .all()
    )
    return {"success": True, "contacts": [a.public_dict() for a in admins]}


@router.get("/api/chat/vendors")
def chat_vendors(user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    rows = (
        db.query(EventServiceProvider, Credential)
        .join(Credential, EventServiceProvider.user_id == Credential.id)
        .filter(
            EventServiceProvider.application_status == APPLICATION_APPROVED,
            Credential.id != user.id,
        )
        .order_by(EventServiceProvider.business_name)
        .all()
    )
    vendors = []
    for provider, owner in rows:
        contact = owner.public_dict()
        contact["business_name"] = provider.business_name
        contact["category"] = provider.category
        vendors.append(contact)
    return {"success": True, "vendors": vendors}
