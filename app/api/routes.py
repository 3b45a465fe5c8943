from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.api import (
    admin, ai, auth, availability, bookings, feedback, notifications, users, vendors, venue_bookings, venues,
)
from app.config import settings
from app.database import get_db

router = APIRouter()

router.include_router(auth.router)
router.include_router(users.router)
router.include_router(bookings.router)
router.include_router(venue_bookings.router)
router.include_router(availability.router)
router.include_router(notifications.router)
router.include_router(vendors.router)
router.include_router(venues.router)
router.include_router(admin.router)
router.include_router(feedback.router)
router.include_router(ai.router)


@router.get("/api/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        database = "error"
    return {"status": "ok", "app": settings.app_name, "database": database}
