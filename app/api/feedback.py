from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.database import get_db
from app.models import Credential
from app.services import admin_service

router = APIRouter(tags=["feedback"])


class SiteFeedbackRequest(BaseModel):
    message: Optional[str] = None


@router.post("/api/feedback", status_code=201)
def submit_feedback(
    request: SiteFeedbackRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """General feedback about the platform"""
    feedback = admin_service.submit_site_feedback(db, user, request.message or "")
    return {"success": True, "message": "Feedback submitted", "feedback_id": feedback.id}
