from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.agents.booking_agent import run_booking_conversation
from app.agents.booking_state import STAGE_DISCOVERY
from app.api.deps import get_current_user
from app.config import settings
from app.database import get_db
from app.models import Credential
from app.services import ai_assistant
from app.services.rate_limiter import SlidingWindowRateLimiter, get_ai_rate_limiter
from app.services.relevance_filter import OFF_TOPIC_RESPONSE, is_event_planning_related

router = APIRouter(prefix="/api/ai", tags=["ai"])


class ChatRequest(BaseModel):
    """Request model for /api/ai/chat"""

    message: Optional[str] = None
    history: Optional[List[dict]] = None


class ConversationalBookingRequest(BaseModel):
    message: Optional[str] = None
    currentData: Optional[dict] = None
    stage: Optional[str] = STAGE_DISCOVERY
    history: Optional[List[dict]] = None


def get_llm_factory():
    """Callable returning a chat model; overridden in tests"""
    return ai_assistant.create_chat_model


@router.get("/status")
def ai_status():
    return {"success": True, "configured": ai_assistant.is_configured(), "model": settings.openai_model}


@router.post("/chat")
def chat(
    request: ChatRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm_factory=Depends(get_llm_factory),
    limiter: SlidingWindowRateLimiter = Depends(get_ai_rate_limiter),
):
    """
    Event-planning Q&A.

    - Rate limited per user, checked before anything else
    - Off-topic messages get a fixed reply without calling the model
    """
    message = (request.message or "").strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")
    if len(message) > ai_assistant.MAX_MESSAGE_LENGTH:
        raise HTTPException(status_code=400, detail="Message is too long (max 1000 characters)")

    key = str(user.id)
    limiter.enforce(key)

    if not is_event_planning_related(message):
        return {"success": True, "response": OFF_TOPIC_RESPONSE, "filtered": True}

    reply = ai_assistant.chat(db, llm_factory(), message, request.history)
    limiter.record(key)
    return {"success": True, "response": reply}


@router.post("/conversational-booking")
def conversational_booking(
    request: ConversationalBookingRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
    llm_factory=Depends(get_llm_factory),
    limiter: SlidingWindowRateLimiter = Depends(get_ai_rate_limiter),
):
    """Booking through conversation with tool calls"""
    message = (request.message or "").strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")

    key = str(user.id)
    limiter.enforce(key)

    result = run_booking_conversation(
        db,
        user,
        llm_factory(),
        message,
        current_data=request.currentData,
        stage=request.stage or STAGE_DISCOVERY,
        history=request.history,
    )
    limiter.record(key)
    return {"success": True, **result}
