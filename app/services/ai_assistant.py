"""
AI Assistant Service
General event-planning chat backed by an OpenAI chat model
"""
import logging
from typing import List, Optional
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI
from pydantic import SecretStr
from sqlalchemy.orm import Session
from app.config import settings
from app.models import EventServiceProvider, VenueListing
from app.models.vendor import APPLICATION_APPROVED
from app.models.venue import VENUE_ACTIVE
from app.services.exceptions import ServiceError

logger = logging.getLogger(__name__)

MIN_API_KEY_LENGTH = 20
MAX_MESSAGE_LENGTH = 1000
MAX_HISTORY_MESSAGES = 10
CONTEXT_SUPPLIER_LIMIT = 10

SUPPLIER_KEYWORDS = (
    "supplier", "vendor", "photographer", "videographer", "caterer", "catering",
    "venue", "decorator", "coordinator", "host", "emcee", "band", "dj",
    "recommend", "suggest", "find", "looking for",
)

SYSTEM_PROMPT = """You are Solennia AI, a friendly event-planning assistant for the Solennia platform in the Philippines.

You help clients:
- plan weddings, birthdays, debuts, corporate events and other celebrations
- find and compare suppliers and venues listed on Solennia
- build budgets, timelines and checklists
- understand how to book and manage bookings on the platform

Rules:
- Only discuss event planning and the Solennia platform.
- When recommending suppliers or venues, only use the ones listed below.
- Prices are in Philippine pesos (PHP).
- Keep answers concise and practical.
{supplier_context}"""


class AIServiceError(ServiceError):
    """Raised when the chat model is unavailable"""
    status_code = 503


def is_configured() -> bool:
    key = settings.openai_api_key or ""
    return len(key) > MIN_API_KEY_LENGTH


def create_chat_model() -> ChatOpenAI:
    """Create the chat model used by both assistants"""
    if not is_configured():
        raise AIServiceError("AI service is not configured")

    return ChatOpenAI(
        model=settings.openai_model,
        api_key=SecretStr(settings.openai_api_key),
        max_tokens=settings.openai_max_tokens,
        temperature=settings.openai_temperature,
    )


def mentions_suppliers(message: str) -> bool:
    text = message.lower()
    return any(keyword in text for keyword in SUPPLIER_KEYWORDS)


def load_supplier_context(db: Session, limit: int = CONTEXT_SUPPLIER_LIMIT) -> str:
    """Approved providers and active venues formatted for the system prompt"""
    providers = (
        db.query(EventServiceProvider)
        .filter(EventServiceProvider.application_status == APPLICATION_APPROVED)
        .order_by(EventServiceProvider.average_rating.desc(), EventServiceProvider.id)
        .limit(limit)
        .all()
    )
    venues = (
        db.query(VenueListing)
        .filter(VenueListing.status == VENUE_ACTIVE)
        .order_by(VenueListing.id)
        .limit(limit)
        .all()
    )

    if not providers and not venues:
        return ""

    context = "\n## Available Suppliers\n"
    for provider in providers:
        context += (
            f"- {provider.business_name} ({provider.category or 'General'}): "
            f"{provider.pricing or 'Pricing on request'}; "
            f"rating {provider.average_rating or 0}/5; "
            f"{provider.business_address or 'Location not listed'}\n"
        )
    if venues:
        context += "\n## Available Venues\n"
        for venue in venues:
            context += (
                f"- {venue.venue_name} ({venue.venue_subcategory or 'Venue'}): "
                f"capacity {venue.venue_capacity or 'N/A'}; "
                f"{venue.pricing or 'Pricing on request'}; {venue.address}\n"
            )
    return context


def history_to_messages(history: Optional[List[dict]], limit: int = MAX_HISTORY_MESSAGES) -> List[BaseMessage]:
    """Convert [{role, content}] to LangChain messages, keeping the latest entries"""
    messages: List[BaseMessage] = []
    for item in (history or [])[-limit:]:
        content = str(item.get("content") or "")
        if not content:
            continue
        if item.get("role") == "assistant":
            messages.append(AIMessage(content=content))
        else:
            messages.append(HumanMessage(content=content))
    return messages


def chat(db: Session, llm, message: str, history: Optional[List[dict]] = None) -> str:
    """
    Answer one event-planning message.

    Args:
        db: Database session
        llm: Chat model
        message: User message
        history: Optional earlier turns as [{role, content}]

    Returns:
        The assistant reply
    """
    supplier_context = load_supplier_context(db) if mentions_suppliers(message) else ""
    messages: List[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT.format(supplier_context=supplier_context))]
    messages.extend(history_to_messages(history))
    messages.append(HumanMessage(content=message))

    try:
        response = llm.invoke(messages)
    except Exception as exc:
        logger.exception("AI chat request failed")
        raise AIServiceError("AI service is temporarily unavailable") from exc

    return str(response.content or "")
