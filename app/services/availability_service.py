"""
Availability Service
Per-day vendor and venue calendars merged with the dates bookings occupy
"""
import logging
from datetime import date, time
from typing import Dict, Iterable, List, Optional, Set, Union
from sqlalchemy.orm import Session
from app.models import (
    Booking, BookingStatus, Credential, EventServiceProvider, ROLE_VENDOR,
    VendorAvailability, VenueAvailability, VenueListing,
)
from app.models.vendor import APPLICATION_APPROVED
from app.services.booking_service import expand_range
from app.services.exceptions import ServiceError

logger = logging.getLogger(__name__)

DEFAULT_START_TIME = time(9, 0)
DEFAULT_END_TIME = time(17, 0)
UPDATABLE_FIELDS = ("date", "start_time", "end_time", "is_available", "notes")


class AvailabilityError(ServiceError):
    """Base exception for availability errors"""
    status_code = 400


class AvailabilityNotFound(AvailabilityError):
    status_code = 404


class AvailabilityForbidden(AvailabilityError):
    status_code = 403


def parse_time(value: Union[str, time, None], default: Optional[time] = None) -> Optional[time]:
    """Accept 'HH:MM' or 'HH:MM:SS'"""
    if value is None or value == "":
        return default
    if isinstance(value, time):
        return value
    parts = str(value).strip().split(":")
    if len(parts) == 2:
        parts.append("00")
    try:
        hour, minute, second = (int(p) for p in parts)
        return time(hour, minute, second)
    except ValueError as exc:
        raise AvailabilityError(f"Invalid time: {value}") from exc


def _in_period(day: date, year: Optional[int], month: Optional[int]) -> bool:
    if year is not None and day.year != year:
        return False
    if month is not None and day.month != month:
        return False
    return True


def _occupied_days(bookings: Iterable[Booking]) -> Set[date]:
    days: Set[date] = set()
    for booking in bookings:
        if booking.start_date is not None:
            days.update(expand_range(booking.start_date, booking.end_date))
        elif booking.event_date is not None:
            days.add(booking.event_date.date())
    return days


def vendor_booked_dates(db: Session, vendor_user_id: int) -> Set[date]:
    bookings = (
        db.query(Booking)
        .join(EventServiceProvider, Booking.event_service_provider_id == EventServiceProvider.id)
        .filter(
            EventServiceProvider.user_id == vendor_user_id,
            Booking.status.notin_(BookingStatus.INACTIVE),
        )
        .all()
    )
    return _occupied_days(bookings)


def venue_booked_dates(db: Session, venue_id: int) -> Set[date]:
    bookings = (
        db.query(Booking)
        .filter(Booking.venue_id == venue_id, Booking.status.notin_(BookingStatus.INACTIVE))
        .all()
    )
    return _occupied_days(bookings)


def availability_to_dict(record) -> dict:
    return {
        "id": record.id,
        "date": record.date.isoformat(),
        "start_time": record.start_time.strftime("%H:%M:%S"),
        "end_time": record.end_time.strftime("%H:%M:%S"),
        "is_available": bool(record.is_available),
        "notes": record.notes,
        "source": "availability",
    }


def merge_calendar(
    records: Iterable,
    booked: Set[date],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> List[dict]:
    """
    Combine manual records with booked days.

    A booked day overrides its manual record to unavailable; booked days
    without a record get a synthetic all-day entry.
    """
    by_date: Dict[date, dict] = {}
    for record in records:
        if _in_period(record.date, year, month):
            by_date[record.date] = availability_to_dict(record)

    for day in booked:
        if not _in_period(day, year, month):
            continue
        entry = by_date.get(day)
        if entry is not None:
            entry["is_available"] = False
            entry["source"] = "booking"
        else:
            by_date[day] = {
                "id": None,
                "date": day.isoformat(),
                "start_time": "00:00:00",
                "end_time": "23:59:59",
                "is_available": False,
                "notes": "Booked",
                "source": "booking",
            }

    return [by_date[day] for day in sorted(by_date)]


def _vendor_exists(db: Session, vendor_user_id: int) -> bool:
    provider = (
        db.query(EventServiceProvider.id)
        .filter(
            EventServiceProvider.user_id == vendor_user_id,
            EventServiceProvider.application_status == APPLICATION_APPROVED,
        )
        .first()
    )
    if provider is not None:
        return True
    user = db.get(Credential, vendor_user_id)
    return user is not None and user.role == ROLE_VENDOR


def vendor_calendar(db: Session, vendor_user_id: int, year: Optional[int] = None, month: Optional[int] = None) -> List[dict]:
    if not _vendor_exists(db, vendor_user_id):
        raise AvailabilityNotFound("Vendor not found")

    records = db.query(VendorAvailability).filter(VendorAvailability.vendor_user_id == vendor_user_id).all()
    return merge_calendar(records, vendor_booked_dates(db, vendor_user_id), year, month)


def venue_calendar(db: Session, venue_id: int, year: Optional[int] = None, month: Optional[int] = None) -> List[dict]:
    if db.get(VenueListing, venue_id) is None:
        raise AvailabilityNotFound("Venue not found")

    records = db.query(VenueAvailability).filter(VenueAvailability.venue_id == venue_id).all()
    return merge_calendar(records, venue_booked_dates(db, venue_id), year, month)


# ---------------------------------------------------------------------------
# Vendor records
# ---------------------------------------------------------------------------

def _require_vendor(user: Credential) -> None:
    if user.role != ROLE_VENDOR:
        raise AvailabilityForbidden("Only vendors can manage availability")


def create_vendor_availability(
    db: Session,
    user: Credential,
    day: date,
    start_time,
    end_time,
    is_available: bool = True,
    notes: Optional[str] = None,
) -> VendorAvailability:
    _require_vendor(user)

    if day in vendor_booked_dates(db, user.id):
        raise AvailabilityError("Cannot set availability for a date with an active booking")

    existing = (
        db.query(VendorAvailability.id)
        .filter(VendorAvailability.vendor_user_id == user.id, VendorAvailability.date == day)
        .first()
    )
    if existing is not None:
        raise AvailabilityError("Availability for this date already exists. Use update instead")

    record = VendorAvailability(
        vendor_user_id=user.id,
        date=day,
        start_time=parse_time(start_time, DEFAULT_START_TIME),
        end_time=parse_time(end_time, DEFAULT_END_TIME),
        is_available=is_available,
        notes=notes,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info("Vendor availability created for %s", day.isoformat(), extra={"user_id": user.id})
    return record


def _apply_updates(record, changes: dict, booked: Set[date]) -> None:
    changes = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS and v is not None}
    if not changes:
        raise AvailabilityError("No fields to update")

    if record.date in booked or changes.get("date") in booked:
        raise AvailabilityError("Cannot modify availability for a date with an active booking")

    if "date" in changes:
        record.date = changes["date"]
    if "start_time" in changes:
        record.start_time = parse_time(changes["start_time"])
    if "end_time" in changes:
        record.end_time = parse_time(changes["end_time"])
    if "is_available" in changes:
        record.is_available = bool(changes["is_available"])
    if "notes" in changes:
        record.notes = changes["notes"]


def _get_vendor_record(db: Session, user: Credential, record_id: int) -> VendorAvailability:
    _require_vendor(user)
    record = db.get(VendorAvailability, record_id)
    if record is None:
        raise AvailabilityNotFound("Availability not found")
    if record.vendor_user_id != user.id:
        raise AvailabilityForbidden("Access denied")
    return record


def update_vendor_availability(db: Session, user: Credential, record_id: int, changes: dict) -> VendorAvailability:
    record = _get_vendor_record(db, user, record_id)

    new_day = changes.get("date")
    if new_day is not None and new_day != record.date:
        clash = (
            db.query(VendorAvailability.id)
            .filter(VendorAvailability.vendor_user_id == user.id, VendorAvailability.date == new_day)
            .first()
        )
        if clash is not None:
            raise AvailabilityError("Availability for this date already exists. Use update instead")

    _apply_updates(record, changes, vendor_booked_dates(db, user.id))
    db.commit()
    db.refresh(record)
    return record


def delete_vendor_availability(db: Session, user: Credential, record_id: int) -> None:
    record = _get_vendor_record(db, user, record_id)
    if record.date in vendor_booked_dates(db, user.id):
        raise AvailabilityError("Cannot delete availability for a date with an active booking")

    db.delete(record)
    db.commit()


# ---------------------------------------------------------------------------
# Venue records
# ---------------------------------------------------------------------------

def _owned_venue(db: Session, user: Credential, venue_id: int) -> VenueListing:
    venue = db.get(VenueListing, venue_id)
    if venue is None:
        raise AvailabilityNotFound("Venue not found")
    if venue.user_id != user.id:
        raise AvailabilityForbidden("You do not own this venue")
    return venue


def create_venue_availability(
    db: Session,
    user: Credential,
    venue_id: int,
    day: date,
    start_time=None,
    end_time=None,
    is_available: bool = True,
    notes: Optional[str] = None,
) -> VenueAvailability:
    venue = _owned_venue(db, user, venue_id)

    if day in venue_booked_dates(db, venue.id):
        raise AvailabilityError("Cannot set availability for a date with an active booking")

    existing = (
        db.query(VenueAvailability.id)
        .filter(VenueAvailability.venue_id == venue.id, VenueAvailability.date == day)
        .first()
    )
    if existing is not None:
        raise AvailabilityError("Availability for this date already exists. Use update instead")

    record = VenueAvailability(
        venue_id=venue.id,
        date=day,
        start_time=parse_time(start_time, DEFAULT_START_TIME),
        end_time=parse_time(end_time, DEFAULT_END_TIME),
        is_available=is_available,
        notes=notes,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info("Venue availability created for %s", day.isoformat(), extra={"user_id": user.id})
    return record


def _get_venue_record(db: Session, user: Credential, record_id: int) -> VenueAvailability:
    record = db.get(VenueAvailability, record_id)
    if record is None:
        raise AvailabilityNotFound("Availability not found")
    _owned_venue(db, user, record.venue_id)
    return record


def update_venue_availability(db: Session, user: Credential, record_id: int, changes: dict) -> VenueAvailability:
    record = _get_venue_record(db, user, record_id)

    new_day = changes.get("date")
    if new_day is not None and new_day != record.date:
        clash = (
            db.query(VenueAvailability.id)
            .filter(VenueAvailability.venue_id == record.venue_id, VenueAvailability.date == new_day)
            .first()
        )
        if clash is not None:
            raise AvailabilityError("Availability for this date already exists. Use update instead")

    _apply_updates(record, changes, venue_booked_dates(db, record.venue_id))
    db.commit()
    db.refresh(record)
    return record


def delete_venue_availability(db: Session, user: Credential, record_id: int) -> None:
    record = _get_venue_record(db, user, record_id)
    if record.date in venue_booked_dates(db, record.venue_id):
        raise AvailabilityError("Cannot delete availability for a date with an active booking")

    db.delete(record)
    db.commit()


# ---------------------------------------------------------------------------
# Single-date checks
# ---------------------------------------------------------------------------

def check_vendor_date(db: Session, vendor_user_id: int, day: date) -> dict:
    """Whether a vendor can take a booking on a given day, with the reason"""
    if not _vendor_exists(db, vendor_user_id):
        return {"available": False, "reason": "Vendor not found in the system"}

    if day in vendor_booked_dates(db, vendor_user_id):
        return {"available": False, "reason": "Already booked on this date"}

    record = (
        db.query(VendorAvailability)
        .filter(VendorAvailability.vendor_user_id == vendor_user_id, VendorAvailability.date == day)
        .first()
    )
    if record is not None and not record.is_available:
        reason = "Vendor marked this date as unavailable"
        if record.notes:
            reason = f"{reason}: {record.notes}"
        return {"available": False, "reason": reason}

    return {"available": True, "reason": "Available"}


def check_venue_date(db: Session, venue_id: int, day: date) -> dict:
    """Whether a venue is free on a given day, with the reason"""
    venue = db.get(VenueListing, venue_id)
    if venue is None:
        return {"available": False, "reason": "Venue not found"}

    if day in venue_booked_dates(db, venue.id):
        return {"available": False, "reason": "Already booked on this date"}

    record = (
        db.query(VenueAvailability)
        .filter(VenueAvailability.venue_id == venue.id, VenueAvailability.date == day)
        .first()
    )
    if record is not None and not record.is_available:
        reason = "Venue marked as unavailable"
        if record.notes:
            reason = f"{reason}: {record.notes}"
        return {"available": False, "reason": reason}

    # Owners can also block days on their vendor calendar
    owner_block = (
        db.query(VendorAvailability)
        .filter(
            VendorAvailability.vendor_user_id == venue.user_id,
            VendorAvailability.date == day,
            VendorAvailability.is_available.is_(False),
        )
        .first()
    )
    if owner_block is not None:
        return {"available": False, "reason": "Venue owner marked this date as unavailable"}

    return {"available": True, "reason": "Available"}
