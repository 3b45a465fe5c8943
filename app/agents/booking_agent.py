"""
LangChain Booking Agent
Drives a vendor or venue booking through conversation using tool calls
"""
import json
import logging
import re
from datetime import date, timedelta
from typing import List, Optional
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_core.tools import tool
from pydantic import ValidationError
from sqlalchemy.orm import Session
from app.agents.booking_state import (
    STAGE_COMPLETED, STAGE_DISCOVERY, determine_booking_stage, normalize_date, process_extracted_info,
)
from app.agents.tools import availability_tool, booking_tool, vendor_search_tool
from app.models import Credential
from app.services.ai_assistant import AIServiceError, history_to_messages

logger = logging.getLogger(__name__)

MAX_TOOL_ROUNDS = 5


class BookingSession:
    """Mutable state shared by the tools during one request"""

    def __init__(self, current_data: Optional[dict], stage: str, today: date):
        self.current = process_extracted_info(current_data or {}, {}, today)
        self.extracted: dict = {}
        self.stage = stage or STAGE_DISCOVERY
        self.suggested: List[dict] = []
        self.booking_id: Optional[int] = None
        self.today = today

    @property
    def booking_created(self) -> bool:
        return self.booking_id is not None

    def remember(self, **values) -> None:
        for key, value in values.items():
            if value:
                self.extracted[key] = value
                self.current[key] = value


def build_system_prompt(current: dict, stage: str, today: date) -> str:
    tomorrow = today + timedelta(days=1)
    return f"""You are the Solennia Booking Assistant. Your sole purpose is to help users find, recommend and book event suppliers and venues registered on the Solennia platform.

CURRENT DATE: {today.isoformat()}
TOMORROW'S DATE: {tomorrow.isoformat()}
CURRENT YEAR: {today.year}

CURRENT BOOKING DATA:
{json.dumps(current, indent=2, default=str)}

CURRENT STAGE: {stage}

STAGES:
- discovery: gathering event details
- vendor_search: the user is choosing from supplier or venue options
- confirmation: confirming final details before booking
- completed: the booking has been created

RULES:
- Only handle bookings and supplier/venue recommendations. For anything else reply:
  'I can only assist with finding vendors and making bookings on Solennia. What event are you planning?'
- If the message is gibberish, do not call any tool; ask the user to describe their event.
- Call extract_booking_info as soon as the user gives any booking detail. Never extract a date before {today.isoformat()}.
- Call search_vendors when the user asks for suppliers, vendors or venues. Leave category empty when no category is named.
  Do not search again once a vendor_id or venue_id is in the booking data.
- Only recommend suppliers and venues returned by search_vendors. Use their exact numeric ids.
- Call check_availability whenever both a date and a vendor_id or venue_id are known.
- Before create_booking, summarise: 'To confirm: you want to book [name] for [event type] on [date] at [time]. Shall I proceed?'
  Only call create_booking with confirmed=true after the user explicitly agrees.
- A supplier booking needs date, time, location, event type, budget and number of guests.
  A venue booking needs the same except location; the venue address is the location.
- Prices are in Philippine pesos (PHP). Keep replies short and friendly."""


def build_booking_tools(session: BookingSession, db: Session, user: Credential) -> list:
    """Tools bound to one conversation's state"""

    @tool
    def extract_booking_info(
        event_type: Optional[str] = None,
        date: Optional[str] = None,
        time: Optional[str] = None,
        location: Optional[str] = None,
        budget: Optional[float] = None,
        guests: Optional[int] = None,
        venue_id: Optional[int] = None,
        venue_name: Optional[str] = None,
        vendor_id: Optional[int] = None,
        vendor_name: Optional[str] = None,
        preferences: Optional[List[str]] = None,
    ) -> dict:
        """Extract event details from the user's message. Only include details the user explicitly stated. Dates in YYYY-MM-DD or natural language like 'tomorrow' or 'feb 20 2027'."""
        new_info = {
            "event_type": event_type, "date": date, "time": time, "location": location,
            "budget": budget, "guests": guests, "venue_id": venue_id, "venue_name": venue_name,
            "vendor_id": vendor_id, "vendor_name": vendor_name, "preferences": preferences,
        }
        merged = process_extracted_info(new_info, session.current, session.today)
        session.current = merged
        session.extracted = dict(merged)
        session.stage = determine_booking_stage(merged)

        result = {"status": "success", "extracted": merged, "stage": session.stage}

        if merged.get("date") and (merged.get("vendor_id") or merged.get("venue_id")):
            availability = availability_tool.check_availability(
                db, merged["date"], merged.get("vendor_id"), merged.get("venue_id"), session.today
            )
            result["availability_auto_check"] = availability
            if availability["available"]:
                result["availability_note"] = f"The vendor/venue IS available on {merged['date']}."
            else:
                result["availability_note"] = (
                    f"The vendor/venue is NOT available on {merged['date']}. "
                    f"Reason: {availability['reason']}. Ask the user to pick a different date."
                )
            session.extracted["availability_checked"] = availability
        return result

    @tool
    def search_vendors(
        category: Optional[str] = None,
        keyword: Optional[str] = None,
        budget_max: Optional[float] = None,
        location: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> dict:
        """Search Solennia suppliers and venues. category is one of: Photography & Videography, Catering, Venue, Coordination & Hosting, Decoration, Entertainment, Others. Leave category empty to return every type."""
        session.remember(location=location, budget=budget_max)
        vendors = vendor_search_tool.search_vendors(db, category, keyword, budget_max, location, limit)
        session.suggested = vendors
        return {"status": "success", "vendors": vendors, "count": len(vendors)}

    @tool
    def check_availability(date: str, vendor_id: Optional[int] = None, venue_id: Optional[int] = None) -> dict:
        """Check whether a supplier (vendor_id) or a venue (venue_id) is available on a date."""
        session.remember(date=normalize_date(date, session.today), vendor_id=vendor_id, venue_id=venue_id)
        availability = availability_tool.check_availability(db, date, vendor_id, venue_id, session.today)
        session.extracted["availability_checked"] = availability
        return {"status": "success", "availability": availability}

    @tool
    def create_booking(confirmed: bool, vendor_id: Optional[int] = None, venue_id: Optional[int] = None) -> dict:
        """Create the booking once the user has explicitly confirmed every detail. Use vendor_id for suppliers and venue_id for venues from search results."""
        session.remember(vendor_id=vendor_id, venue_id=venue_id)
        venue_id = venue_id or (None if vendor_id else session.current.get("venue_id"))
        vendor_id = vendor_id or session.current.get("vendor_id")

        missing = booking_tool.missing_fields(session.current, is_venue=bool(venue_id))
        if missing:
            return {
                "status": "error",
                "message": f"Cannot create booking. Missing information: {', '.join(missing)}. "
                           "Please ask user for these details.",
            }
        if not confirmed:
            return {"status": "cancelled", "message": "User did not confirm."}

        if venue_id:
            result = booking_tool.create_venue_booking(db, user, int(venue_id), session.current)
        elif vendor_id:
            result = booking_tool.create_vendor_booking(db, user, int(vendor_id), session.current)
        else:
            result = {"status": "error", "message": "No vendor or venue selected."}

        if result["status"] == "success":
            session.booking_id = result["booking_id"]
            session.stage = STAGE_COMPLETED
        return result

    return [extract_booking_info, search_vendors, check_availability, create_booking]


def _clean_response(text: str) -> str:
    text = text.replace("\\n", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def run_booking_conversation(
    db: Session,
    user: Credential,
    llm,
    message: str,
    current_data: Optional[dict] = None,
    stage: str = STAGE_DISCOVERY,
    history: Optional[List[dict]] = None,
    today: Optional[date] = None,
) -> dict:
    """
    Run one user turn of the booking conversation.

    Args:
        db: Database session
        user: Current user
        llm: Chat model supporting bind_tools
        message: User message
        current_data: Booking details gathered so far
        stage: Conversation stage sent by the client
        history: Earlier turns as [{role, content}]
        today: Current date override

    Returns:
        dict with aiResponse, extractedInfo, stage, suggestedVendors, bookingCreated and bookingId
    """
    session = BookingSession(current_data, stage, today or date.today())
    tools = build_booking_tools(session, db, user)
    tools_by_name = {t.name: t for t in tools}
    model = llm.bind_tools(tools)

    messages: List[BaseMessage] = [SystemMessage(content=build_system_prompt(session.current, session.stage, session.today))]
    messages.extend(history_to_messages(history))
    messages.append(HumanMessage(content=message))

    ai_response = ""
    for _ in range(MAX_TOOL_ROUNDS):
        try:
            response = model.invoke(messages)
        except Exception as exc:
            logger.exception("Booking assistant model call failed", extra={"user_id": user.id})
            raise AIServiceError("AI service is temporarily unavailable") from exc

        if response.content:
            ai_response = str(response.content)
        if not response.tool_calls:
            break

        messages.append(response)
        for call in response.tool_calls:
            selected = tools_by_name.get(call["name"])
            if selected is None:
                result = {"status": "error", "message": f"Unknown tool: {call['name']}"}
            else:
                try:
                    result = selected.invoke(call["args"])
                except ValidationError as exc:
                    result = {"status": "error", "message": f"Invalid arguments: {exc.errors()[0]['msg']}"}
            logger.info("Booking tool %s -> %s", call["name"], result.get("status"), extra={"user_id": user.id})
            messages.append(ToolMessage(content=json.dumps(result, default=str), tool_call_id=call["id"]))

        messages[0] = SystemMessage(content=build_system_prompt(session.current, session.stage, session.today))

    return {
        "aiResponse": _clean_response(ai_response),
        "extractedInfo": session.extracted,
        "stage": session.stage,
        "suggestedVendors": session.suggested,
        "bookingCreated": session.booking_created,
        "bookingId": session.booking_id,
    }
