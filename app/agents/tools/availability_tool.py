"""
Tool for checking whether a supplier or venue is free on a date
"""
from datetime import date
from typing import Optional
from sqlalchemy.orm import Session
from app.agents.booking_state import normalize_date
from app.services.availability_service import check_vendor_date, check_venue_date


def check_availability(
    db: Session,
    date_str: str,
    vendor_id: Optional[int] = None,
    venue_id: Optional[int] = None,
    today: Optional[date] = None,
) -> dict:
    """
    Check a supplier (by user id) or a venue on one date.

    Returns:
        dict with 'available' and 'reason'
    """
    normalized = normalize_date(date_str, today)
    if normalized is None:
        return {"available": False, "reason": "Invalid date format"}

    day = date.fromisoformat(normalized)
    if venue_id:
        result = check_venue_date(db, int(venue_id), day)
    elif vendor_id:
        result = check_vendor_date(db, int(vendor_id), day)
    else:
        return {"available": False, "reason": "No vendor_id or venue_id provided"}

    result["date"] = normalized
    return result
