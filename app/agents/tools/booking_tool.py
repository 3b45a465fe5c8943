"""
Tool for creating bookings from a completed conversation
"""
import logging
from datetime import date, datetime, time
from typing import List, Optional
from sqlalchemy.orm import Session
from app.agents.booking_state import parse_amount, parse_event_time, parse_guest_count
from app.models import Credential, EventServiceProvider, VenueListing
from app.models.vendor import APPLICATION_APPROVED
from app.services import booking_service
from app.services.booking_service import BookingError

logger = logging.getLogger(__name__)

AI_PACKAGE = "AI Conversational Booking"


def booking_date(data: dict) -> Optional[date]:
    try:
        return date.fromisoformat(str(data.get("date") or ""))
    except ValueError:
        return None


def missing_fields(data: dict, is_venue: bool) -> List[str]:
    """Details still needed before a booking can be created"""
    missing = []
    if booking_date(data) is None:
        missing.append("Date")
    if not data.get("time"):
        missing.append("Time")
    if not is_venue and not data.get("location"):
        missing.append("Location")
    if not data.get("event_type"):
        missing.append("Event Type")
    if not data.get("budget"):
        missing.append("Budget")
    if parse_guest_count(data.get("guests")) is None:
        missing.append("Number of Guests")
    return missing


def build_ai_notes(data: dict) -> str:
    notes = "AI Booking\n\n"
    if data.get("guests"):
        notes += f"Expected Guests: {data['guests']}\n"
    if data.get("time"):
        notes += f"Event Time: {data['time']}\n"
    budget = data.get("budget")
    if budget:
        notes += f"Budget: {budget:,.0f}\n" if isinstance(budget, (int, float)) else f"Budget: {budget}\n"
    if data.get("preferences"):
        notes += f"Preferences: {', '.join(str(p) for p in data['preferences'])}\n"
    return notes


def _error(exc: BookingError) -> dict:
    return {"status": "error", "message": exc.extra.get("message", exc.message)}


def create_vendor_booking(db: Session, user: Credential, vendor_user_id: int, data: dict) -> dict:
    """
    Create a supplier booking from conversation data.

    Args:
        db: Database session
        user: Booking client
        vendor_user_id: Supplier's user id
        data: Merged booking details (date, time, location, event_type, ...)

    Returns:
        dict with booking details or error message
    """
    provider = (
        db.query(EventServiceProvider)
        .filter(
            EventServiceProvider.user_id == vendor_user_id,
            EventServiceProvider.application_status == APPLICATION_APPROVED,
        )
        .first()
    )
    if provider is None and data.get("vendor_name"):
        provider = (
            db.query(EventServiceProvider)
            .filter(
                EventServiceProvider.business_name.ilike(f"%{data['vendor_name']}%"),
                EventServiceProvider.application_status == APPLICATION_APPROVED,
            )
            .first()
        )
    if provider is None:
        return {"status": "error", "message": "Vendor not found"}

    day = booking_date(data)
    if day is None:
        return {"status": "error", "message": "A valid event date is required"}
    event_date = datetime.combine(day, parse_event_time(data.get("time")) or time.min)
    try:
        booking = booking_service.create_vendor_booking(
            db,
            user,
            provider.user_id,
            service_name=provider.business_name,
            event_date=event_date,
            event_location=data.get("location") or "",
            event_type=data.get("event_type"),
            package_selected=AI_PACKAGE,
            additional_notes=build_ai_notes(data),
            total_amount=parse_amount(provider.pricing),
        )
    except BookingError as exc:
        logger.info("Conversational booking rejected: %s", exc.message, extra={"user_id": user.id})
        return _error(exc)

    return {"status": "success", "booking_id": booking.id, "message": "Booking created successfully"}


def create_venue_booking(db: Session, user: Credential, venue_id: int, data: dict) -> dict:
    """Create a venue booking; the venue address is the event location."""
    venue = db.get(VenueListing, venue_id)
    if venue is None:
        return {"status": "error", "message": "Venue not found"}
    day = booking_date(data)
    guests = parse_guest_count(data.get("guests"))
    if day is None or guests is None:
        return {"status": "error", "message": "A valid event date and number of guests are required"}

    try:
        booking, _ = booking_service.create_venue_booking(
            db,
            user,
            venue.id,
            event_type=data.get("event_type"),
            start_date=day,
            guest_count=guests,
            event_location=venue.address,
            event_time=parse_event_time(data.get("time")),
            package_selected=AI_PACKAGE,
            total_amount=parse_amount(venue.pricing),
            notes_override=build_ai_notes(data),
        )
    except BookingError as exc:
        logger.info("Conversational venue booking rejected: %s", exc.message, extra={"user_id": user.id})
        return _error(exc)

    return {"status": "success", "booking_id": booking.id, "message": "Booking created successfully"}
