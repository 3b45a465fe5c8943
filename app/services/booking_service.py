"""
Booking Service
Conflict detection and state transitions for vendor and venue bookings.

Every check-then-write sequence runs inside one transaction that first locks
the booked resource row (the provider or the venue), so concurrent requests
for the same resource are serialised by the database on engines that support
row locks.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence, Tuple
from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session
from app.models import (
    Booking, BookingFeedback, BookingReschedule, BookingStatus, Credential, EventServiceProvider,
    RescheduleStatus, SupplierReport, VendorAvailability, VenueAvailability, VenueListing,
)
from app.models.vendor import APPLICATION_APPROVED
from app.models.venue import VENUE_ACTIVE
from app.services.exceptions import ServiceError
from app.services.notification_service import notify

logger = logging.getLogger(__name__)


class BookingError(ServiceError):
    """Base exception for booking service errors"""
    status_code = 400


class BookingNotFound(BookingError):
    status_code = 404


class BookingForbidden(BookingError):
    status_code = 403


class BookingConflict(BookingError):
    """Raised when the requested date is already taken"""
    status_code = 409


class InvalidBookingState(BookingError):
    """Raised when a transition is not allowed from the current status"""
    status_code = 400


class BookingValidationError(BookingError):
    status_code = 422


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_long_date(value) -> str:
    """'March 5, 2027'"""
    return f"{value:%B} {value.day}, {value.year}"


def format_long_datetime(value: datetime) -> str:
    """'March 5, 2027 at 2:00 PM'"""
    hour = value.hour % 12 or 12
    return f"{format_long_date(value)} at {hour}:{value:%M} {value:%p}"


def display_name(user: Optional[Credential], fallback: str = "A client") -> str:
    if user is None:
        return fallback
    return user.full_name or fallback


# ---------------------------------------------------------------------------
# Conflict detection
# ---------------------------------------------------------------------------

def normalize_range(start: date, end: Optional[date]) -> Tuple[date, date]:
    """Default a missing end to the start and swap inverted ranges"""
    if end is None:
        end = start
    if end < start:
        start, end = end, start
    return start, end


def expand_range(start: date, end: Optional[date]) -> List[date]:
    """Every day of an inclusive range"""
    start, end = normalize_range(start, end)
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def _active():
    return Booking.status.notin_(BookingStatus.INACTIVE)


def _range_end():
    return func.coalesce(Booking.end_date, Booking.start_date)


def vendor_conflict(
    db: Session,
    provider_id: int,
    when,
    exclude_id: Optional[int] = None,
) -> Optional[Booking]:
    """
    First active booking of a provider that occupies the same calendar day.

    A booking occupies a day when its event date falls on that day or its
    start/end range contains it.
    """
    day = when.date() if isinstance(when, datetime) else when
    day_start = datetime.combine(day, time.min)
    next_day = day_start + timedelta(days=1)

    query = db.query(Booking).filter(
        Booking.event_service_provider_id == provider_id,
        _active(),
        or_(
            and_(Booking.event_date >= day_start, Booking.event_date < next_day),
            and_(Booking.start_date <= day, _range_end() >= day),
        ),
    )
    if exclude_id is not None:
        query = query.filter(Booking.id != exclude_id)
    return query.order_by(Booking.event_date).first()


def venue_conflicts(
    db: Session,
    venue_id: int,
    start: date,
    end: Optional[date] = None,
    exclude_id: Optional[int] = None,
) -> List[Booking]:
    """Active venue bookings whose inclusive range intersects [start, end]"""
    start, end = normalize_range(start, end)
    query = db.query(Booking).filter(
        Booking.venue_id == venue_id,
        _active(),
        Booking.start_date <= end,
        _range_end() >= start,
    )
    if exclude_id is not None:
        query = query.filter(Booking.id != exclude_id)
    return query.order_by(Booking.start_date).all()


def vendor_day_blocked(db: Session, vendor_user_id: int, day: date) -> Optional[VendorAvailability]:
    """The vendor's explicit 'unavailable' record for a day, if any"""
    return (
        db.query(VendorAvailability)
        .filter(
            VendorAvailability.vendor_user_id == vendor_user_id,
            VendorAvailability.date == day,
            VendorAvailability.is_available.is_(False),
        )
        .first()
    )


def venue_blocked_days(db: Session, venue_id: int, days: Sequence[date]) -> List[VenueAvailability]:
    """The owner's 'unavailable' records among the given days, earliest first"""
    return (
        db.query(VenueAvailability)
        .filter(
            VenueAvailability.venue_id == venue_id,
            VenueAvailability.date.in_(list(days)),
            VenueAvailability.is_available.is_(False),
        )
        .order_by(VenueAvailability.date)
        .all()
    )


def venue_day_blocked(db: Session, venue_id: int, days: Sequence[date]) -> Optional[VenueAvailability]:
    blocked = venue_blocked_days(db, venue_id, days)
    return blocked[0] if blocked else None


def _ensure_venue_days_open(db: Session, venue_id: int, start: date, end: Optional[date]) -> None:
    blocked = venue_day_blocked(db, venue_id, expand_range(start, end))
    if blocked is not None:
        raise BookingConflict(f"Venue is not available on {format_long_date(blocked.date)}", conflict=True)


def _lock_provider(db: Session, vendor_user_id: int) -> Optional[EventServiceProvider]:
    return (
        db.query(EventServiceProvider)
        .filter(
            EventServiceProvider.user_id == vendor_user_id,
            EventServiceProvider.application_status == APPLICATION_APPROVED,
        )
        .with_for_update()
        .first()
    )


def _lock_venue(db: Session, venue_id: int, active_only: bool = True) -> Optional[VenueListing]:
    query = db.query(VenueListing).filter(VenueListing.id == venue_id)
    if active_only:
        query = query.filter(VenueListing.status == VENUE_ACTIVE)
    return query.with_for_update().first()


def _ensure_date_free(db: Session, booking: Booking, new_event_date: datetime) -> None:
    """Raise BookingConflict when moving a booking to new_event_date would double-book"""
    if booking.venue_id:
        _lock_venue(db, booking.venue_id, active_only=False)
        new_start, new_end = _shifted_range(booking, new_event_date)
        if venue_conflicts(db, booking.venue_id, new_start, new_end, exclude_id=booking.id) or \
                venue_day_blocked(db, booking.venue_id, expand_range(new_start, new_end)):
            raise BookingConflict("Date unavailable", conflict=True)
        return

    provider = booking.provider
    db.query(EventServiceProvider).filter(EventServiceProvider.id == provider.id).with_for_update().first()
    if vendor_conflict(db, provider.id, new_event_date, exclude_id=booking.id) or \
            vendor_day_blocked(db, provider.user_id, new_event_date.date()):
        raise BookingConflict("Date unavailable", conflict=True)


def _shifted_range(booking: Booking, new_event_date: datetime) -> Tuple[date, date]:
    """Venue range moved to start on new_event_date, keeping its length"""
    new_start = new_event_date.date()
    if booking.start_date is None:
        return new_start, new_start
    span = (booking.end_date or booking.start_date) - booking.start_date
    return new_start, new_start + span


def _apply_event_date(booking: Booking, new_event_date: datetime) -> None:
    if booking.venue_id:
        booking.start_date, booking.end_date = _shifted_range(booking, new_event_date)
    booking.event_date = new_event_date


# ---------------------------------------------------------------------------
# Serialisation
# ---------------------------------------------------------------------------

def _reschedule_dict(reschedule: BookingReschedule) -> dict:
    return reschedule.to_dict()


def booking_to_dict(booking: Booking, include_client: bool = False) -> dict:
    """Booking row plus the display fields the dashboards need"""
    data = booking.to_dict()
    data["booking_type"] = booking.booking_type

    if booking.provider is not None:
        data["vendor_name"] = booking.provider.business_name
        data["vendor_user_id"] = booking.provider.user_id
        data["vendor_category"] = booking.provider.category
    if booking.venue is not None:
        data["venue_name"] = booking.venue.venue_name
        data["venue_address"] = booking.venue.address
        data["venue_capacity"] = booking.venue.venue_capacity
        data["venue_owner_id"] = booking.venue.user_id
        owner = booking.venue.owner
        data["venue_owner_name"] = owner.full_name if owner is not None else None
        data["venue_owner_firebase_uid"] = owner.firebase_uid if owner is not None else None

    pending = booking.pending_reschedule
    data["has_pending_reschedule"] = pending is not None
    data["original_date"] = pending.original_event_date.isoformat() if pending else None
    data["requested_date"] = pending.requested_event_date.isoformat() if pending else None
    data["reschedule_requested_at"] = pending.requested_at.isoformat() if pending and pending.requested_at else None
    data["approved_reschedules"] = [
        _reschedule_dict(r) for r in booking.reschedules if r.status == RescheduleStatus.APPROVED
    ]
    data["rejected_reschedules"] = [
        _reschedule_dict(r) for r in booking.reschedules if r.status == RescheduleStatus.REJECTED
    ]
    data["has_feedback"] = booking.feedback is not None

    if include_client and booking.client is not None:
        data["client_name"] = booking.client.full_name
        data["client_email"] = booking.client.email
        data["client_phone"] = booking.client.phone
        data["client_firebase_uid"] = booking.client.firebase_uid
    return data


def _newest_first(bookings: List[Booking]) -> List[Booking]:
    return sorted(bookings, key=lambda b: (b.created_at or datetime.min, b.id), reverse=True)


# ---------------------------------------------------------------------------
# Vendor bookings
# ---------------------------------------------------------------------------

def create_vendor_booking(
    db: Session,
    client: Credential,
    vendor_user_id: int,
    service_name: str,
    event_date: datetime,
    event_location: str,
    event_type: Optional[str] = None,
    package_selected: Optional[str] = None,
    additional_notes: Optional[str] = None,
    total_amount: Optional[float] = None,
    now: Optional[datetime] = None,
) -> Booking:
    """
    Book an approved vendor for a future date.

    Args:
        db: Database session
        client: Booking client
        vendor_user_id: Credential id of the vendor
        service_name: Service being booked
        event_date: Event date and time
        event_location: Where the vendor is needed
        event_type: Optional event type
        package_selected: Optional package name
        additional_notes: Optional free text
        total_amount: Optional agreed amount, defaults to 0
        now: Current time override

    Returns:
        The Pending booking
    """
    now = now or datetime.now()
    if event_date <= now:
        raise BookingValidationError("Event date must be in the future", status_code=400)

    try:
        provider = _lock_provider(db, vendor_user_id)
        if provider is None:
            raise BookingNotFound("Vendor not found or not verified")
        if provider.user_id == client.id:
            raise InvalidBookingState("You cannot book your own services")

        if vendor_conflict(db, provider.id, event_date) is not None:
            raise BookingConflict(
                "Schedule Unavailable",
                message=f"Unfortunately, this vendor is already booked for {format_long_datetime(event_date)}.",
                conflict=True,
            )
        if vendor_day_blocked(db, provider.user_id, event_date.date()) is not None:
            raise BookingConflict(
                "Schedule Unavailable",
                message=f"This vendor is not available on {format_long_date(event_date)}.",
                conflict=True,
            )

        booking = Booking(
            user_id=client.id,
            event_service_provider_id=provider.id,
            service_name=service_name,
            event_date=event_date,
            event_location=event_location,
            event_type=event_type,
            package_selected=package_selected,
            additional_notes=additional_notes,
            total_amount=total_amount or 0,
            status=BookingStatus.PENDING,
            created_by=client.id,
        )
        db.add(booking)
        db.commit()
    except BookingError:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info("Vendor booking created", extra={"booking_id": booking.id, "user_id": client.id})

    notify(
        db,
        provider.user_id,
        "booking_request",
        "New Booking Request",
        f"{display_name(client)} has requested to book {service_name}",
    )
    return booking


def list_user_bookings(db: Session, user_id: int, status: Optional[str] = None) -> List[dict]:
    """All of a client's bookings, newest first"""
    query = db.query(Booking).filter(Booking.user_id == user_id)
    if status:
        query = query.filter(Booking.status == status)
    bookings = query.order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    return [booking_to_dict(b) for b in bookings]


def list_vendor_bookings(db: Session, user_id: int) -> Dict[str, object]:
    """Supplier bookings plus bookings of venues the user owns"""
    supplier_bookings = (
        db.query(Booking)
        .join(EventServiceProvider, Booking.event_service_provider_id == EventServiceProvider.id)
        .filter(EventServiceProvider.user_id == user_id)
        .all()
    )
    venue_bookings = (
        db.query(Booking)
        .join(VenueListing, Booking.venue_id == VenueListing.id)
        .filter(VenueListing.user_id == user_id)
        .all()
    )

    combined = _newest_first(supplier_bookings + venue_bookings)
    return {
        "bookings": [booking_to_dict(b, include_client=True) for b in combined],
        "summary": {
            "total": len(combined),
            "supplier_bookings": len(supplier_bookings),
            "venue_bookings": len(venue_bookings),
        },
    }


def _get_booking(db: Session, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise BookingNotFound("Booking not found")
    return booking


def _is_owner(booking: Booking, user_id: int) -> bool:
    return booking.owner_user_id is not None and booking.owner_user_id == user_id


def get_booking_details(db: Session, booking_id: int, user_id: int) -> dict:
    booking = _get_booking(db, booking_id)
    if booking.user_id != user_id and not _is_owner(booking, user_id):
        raise BookingForbidden("Access denied")
    return booking_to_dict(booking, include_client=True)


def request_reschedule(
    db: Session,
    client: Credential,
    booking_id: int,
    new_event_date: datetime,
    now: Optional[datetime] = None,
) -> BookingReschedule:
    """Client asks to move a Confirmed booking; the owner must approve."""
    now = now or datetime.now()
    booking = db.get(Booking, booking_id)
    if booking is None or booking.user_id != client.id:
        raise BookingForbidden("Access denied")
    if new_event_date <= now:
        raise InvalidBookingState("New date must be in the future")
    if booking.status != BookingStatus.CONFIRMED:
        raise InvalidBookingState("Only Confirmed bookings can be rescheduled")
    if booking.pending_reschedule is not None:
        raise BookingConflict("A reschedule request is already pending")

    try:
        _ensure_date_free(db, booking, new_event_date)

        reschedule = BookingReschedule(
            booking_id=booking.id,
            original_event_date=booking.event_date,
            requested_event_date=new_event_date,
            status=RescheduleStatus.PENDING,
            requested_by=client.id,
            requested_at=now,
        )
        db.add(reschedule)
        booking.status = BookingStatus.PENDING
        db.commit()
    except BookingError:
        db.rollback()
        raise

    db.refresh(reschedule)
    logger.info("Reschedule requested", extra={"booking_id": booking.id, "user_id": client.id})

    notify(
        db,
        booking.owner_user_id,
        "reschedule_request",
        "Reschedule Request",
        f"Client requested to reschedule {booking.service_name}",
    )
    return reschedule


def update_booking_status(
    db: Session,
    actor: Credential,
    booking_id: int,
    new_status: str,
    now: Optional[datetime] = None,
) -> str:
    """
    Owner confirms or rejects a booking, or answers a pending reschedule.

    Returns:
        A human-readable summary of what changed
    """
    now = now or datetime.now()
    if new_status not in (BookingStatus.CONFIRMED, BookingStatus.REJECTED):
        raise InvalidBookingState("Invalid status")

    booking = _get_booking(db, booking_id)
    if not _is_owner(booking, actor.id):
        raise BookingForbidden("Access denied")

    pending = booking.pending_reschedule
    try:
        if pending is not None:
            if new_status == BookingStatus.CONFIRMED:
                _ensure_date_free(db, booking, pending.requested_event_date)
                _apply_event_date(booking, pending.requested_event_date)
                booking.remarks = f"Rescheduled to {format_long_date(pending.requested_event_date)}"
                pending.status = RescheduleStatus.APPROVED
                summary = "Reschedule approved!"
            else:
                pending.status = RescheduleStatus.REJECTED
                summary = "Reschedule rejected"
            booking.status = BookingStatus.CONFIRMED
            pending.processed_by = actor.id
            pending.processed_at = now
            notification = ("reschedule_response", "Reschedule Response", summary)
        else:
            if booking.status in (BookingStatus.CANCELLED, BookingStatus.COMPLETED):
                raise InvalidBookingState(f"Cannot update a {booking.status} booking")
            if new_status == BookingStatus.CONFIRMED and booking.status != BookingStatus.CONFIRMED:
                _ensure_date_free(db, booking, booking.event_date)
            booking.status = new_status
            summary = f"Booking {new_status}"
            notification = ("booking_update", "Booking Updated", summary)
        db.commit()
    except BookingError:
        db.rollback()
        raise

    logger.info(
        "Booking status updated to %s", booking.status,
        extra={"booking_id": booking.id, "user_id": actor.id},
    )
    notify(db, booking.user_id, *notification)
    return summary


def cancel_booking(db: Session, client: Credential, booking_id: int) -> Booking:
    """Client cancels their own booking and the owner is told."""
    booking = db.get(Booking, booking_id)
    if booking is None or booking.user_id != client.id:
        raise BookingForbidden("Access denied")
    if booking.status == BookingStatus.CANCELLED:
        raise InvalidBookingState("Booking already cancelled")
    if booking.status in (BookingStatus.REJECTED, BookingStatus.COMPLETED):
        raise InvalidBookingState(f"Cannot cancel a {booking.status} booking")

    booking.status = BookingStatus.CANCELLED
    pending = booking.pending_reschedule
    if pending is not None:
        pending.status = RescheduleStatus.REJECTED
        pending.processed_by = client.id
        pending.processed_at = datetime.now()
    db.commit()

    logger.info("Booking cancelled", extra={"booking_id": booking.id, "user_id": client.id})

    if booking.venue is not None:
        notify(
            db, booking.venue.user_id, "booking_cancelled", "Venue Booking Cancelled",
            f"A booking for {booking.venue.venue_name} has been cancelled by the client",
        )
    else:
        notify(db, booking.owner_user_id, "booking_cancelled", "Booking Cancelled", "A booking has been cancelled")
    return booking


def complete_booking(
    db: Session,
    actor: Credential,
    booking_id: int,
    now: Optional[datetime] = None,
) -> Booking:
    """Owner marks a Confirmed booking as Completed once the event has happened."""
    now = now or datetime.now()
    booking = _get_booking(db, booking_id)
    if not _is_owner(booking, actor.id):
        raise BookingForbidden("Access denied. This booking does not belong to you.")
    if booking.status != BookingStatus.CONFIRMED:
        raise InvalidBookingState(
            f"Only Confirmed bookings can be marked as Completed. Current status: {booking.status}"
        )
    if booking.event_date > now:
        raise InvalidBookingState(
            f"Cannot mark as completed before the event date ({format_long_datetime(booking.event_date)})"
        )

    booking.status = BookingStatus.COMPLETED
    booking.remarks = "Service completed successfully"
    db.commit()

    logger.info("Booking completed", extra={"booking_id": booking.id, "user_id": actor.id})

    business = booking.provider.business_name if booking.provider is not None else booking.venue.venue_name
    notify(
        db,
        booking.user_id,
        "booking_completed",
        "Booking Completed",
        f"Your booking for {booking.service_name} has been marked as completed by {business}. "
        "You can now leave feedback!",
    )
    return booking


def submit_feedback(
    db: Session,
    client: Credential,
    booking_id: int,
    rating: int,
    comment: Optional[str] = None,
    report_reason: Optional[str] = None,
    report_details: Optional[str] = None,
) -> BookingFeedback:
    """Rate a completed booking, optionally filing a report against the vendor."""
    booking = _get_booking(db, booking_id)
    if booking.user_id != client.id:
        raise BookingForbidden("Access denied")
    if booking.status != BookingStatus.COMPLETED:
        raise InvalidBookingState("Feedback can only be left for completed bookings")
    if booking.feedback is not None:
        raise BookingConflict("Feedback already submitted for this booking")
    if not 1 <= rating <= 5:
        raise BookingValidationError("Rating must be between 1 and 5")

    feedback = BookingFeedback(booking_id=booking.id, user_id=client.id, rating=rating, comment=comment or None)
    db.add(feedback)

    if report_reason:
        db.add(SupplierReport(
            booking_id=booking.id,
            reporter_id=client.id,
            vendor_id=booking.owner_user_id,
            reason=report_reason,
            details=report_details,
        ))
    db.flush()

    if booking.provider is not None:
        _refresh_provider_rating(db, booking.provider)
    db.commit()
    db.refresh(feedback)

    logger.info("Feedback submitted", extra={"booking_id": booking.id, "user_id": client.id})
    notify(
        db,
        booking.owner_user_id,
        "new_feedback",
        "New Feedback",
        f"{display_name(client)} rated {booking.service_name} {rating}/5",
    )
    return feedback


def _refresh_provider_rating(db: Session, provider: EventServiceProvider) -> None:
    average, count = (
        db.query(func.avg(BookingFeedback.rating), func.count(BookingFeedback.id))
        .join(Booking, BookingFeedback.booking_id == Booking.id)
        .filter(Booking.event_service_provider_id == provider.id)
        .one()
    )
    provider.average_rating = round(float(average or 0), 2)
    provider.total_reviews = count


# ---------------------------------------------------------------------------
# Venue bookings
# ---------------------------------------------------------------------------

def capacity_warning(venue: VenueListing, guest_count: int) -> Optional[str]:
    if venue.venue_capacity and guest_count > venue.venue_capacity:
        return f"Guest count ({guest_count}) exceeds venue capacity ({venue.venue_capacity})"
    return None


def build_venue_notes(
    guest_count: int,
    event_time: Optional[time] = None,
    amenities: Optional[Sequence[str]] = None,
    warning: Optional[str] = None,
    additional_notes: Optional[str] = None,
) -> str:
    lines = [f"Guest Count: {guest_count}"]
    if event_time is not None:
        lines.append(f"Event Time: {event_time.strftime('%H:%M')}")
    if amenities:
        lines.append(f"Selected Amenities: {', '.join(amenities)}")
    if warning:
        lines.append(f"Warning: {warning}")
    if additional_notes:
        lines.append(f"Additional Notes: {additional_notes}")
    return "\n".join(lines)


def create_venue_booking(
    db: Session,
    client: Credential,
    venue_id: int,
    event_type: str,
    start_date: date,
    guest_count: int,
    event_location: str,
    end_date: Optional[date] = None,
    event_time: Optional[time] = None,
    amenities: Optional[Sequence[str]] = None,
    additional_notes: Optional[str] = None,
    package_selected: Optional[str] = None,
    total_amount: Optional[float] = None,
    notes_override: Optional[str] = None,
    today: Optional[date] = None,
) -> Tuple[Booking, Optional[str]]:
    """
    Book an Active venue for an inclusive date range.

    Returns:
        (booking, capacity_warning)
    """
    today = today or date.today()
    start_date, end_date = normalize_range(start_date, end_date)
    if start_date < today:
        raise BookingValidationError("Start date cannot be in the past", status_code=400)
    if guest_count < 1:
        raise BookingValidationError("Guest count must be at least 1")

    try:
        venue = _lock_venue(db, venue_id)
        if venue is None:
            raise BookingNotFound("Venue not found or inactive")
        if venue.user_id == client.id:
            raise InvalidBookingState("You cannot book your own venue")

        if venue_conflicts(db, venue.id, start_date, end_date):
            raise BookingConflict("Venue is already booked for the selected dates", conflict=True)
        _ensure_venue_days_open(db, venue.id, start_date, end_date)

        warning = capacity_warning(venue, guest_count)
        booking = Booking(
            user_id=client.id,
            venue_id=venue.id,
            event_service_provider_id=None,
            service_name=venue.venue_name,
            event_date=datetime.combine(start_date, event_time or time.min),
            start_date=start_date,
            end_date=end_date,
            event_location=event_location,
            event_type=event_type,
            guest_count=guest_count,
            package_selected=package_selected,
            additional_notes=notes_override or build_venue_notes(
                guest_count, event_time, amenities, warning, additional_notes
            ),
            total_amount=total_amount or 0,
            status=BookingStatus.PENDING,
            created_by=client.id,
        )
        db.add(booking)
        db.commit()
    except BookingError:
        db.rollback()
        raise

    db.refresh(booking)
    logger.info(
        "Venue booking created",
        extra={"booking_id": booking.id, "user_id": client.id, "venue_id": venue.id},
    )

    notify(
        db,
        venue.user_id,
        "venue_booking_request",
        "New Venue Booking Request",
        f"{display_name(client)} has requested to book {venue.venue_name} for {event_type}",
    )
    return booking, warning


def list_user_venue_bookings(db: Session, user_id: int) -> List[dict]:
    bookings = (
        db.query(Booking)
        .filter(Booking.user_id == user_id, Booking.venue_id.isnot(None))
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )
    return [booking_to_dict(b) for b in bookings]


def list_owner_venue_bookings(db: Session, owner_id: int) -> List[dict]:
    bookings = (
        db.query(Booking)
        .join(VenueListing, Booking.venue_id == VenueListing.id)
        .filter(VenueListing.user_id == owner_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )
    return [booking_to_dict(b, include_client=True) for b in bookings]


def _get_venue_booking(db: Session, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if booking is None or booking.venue_id is None:
        raise BookingNotFound("Booking not found")
    return booking


def get_venue_booking(db: Session, booking_id: int, user_id: int) -> dict:
    booking = _get_venue_booking(db, booking_id)
    if booking.user_id != user_id and booking.venue.user_id != user_id:
        raise BookingNotFound("Booking not found")
    return booking_to_dict(booking, include_client=True)


def update_venue_booking_status(db: Session, owner: Credential, booking_id: int, new_status: str) -> Booking:
    if new_status not in (BookingStatus.CONFIRMED, BookingStatus.REJECTED):
        raise InvalidBookingState("Invalid status")

    booking = db.get(Booking, booking_id)
    if booking is None or booking.venue is None or booking.venue.user_id != owner.id:
        raise BookingNotFound("Booking not found or access denied")
    if booking.status in (BookingStatus.CANCELLED, BookingStatus.COMPLETED):
        raise InvalidBookingState(f"Cannot update a {booking.status} booking")

    try:
        if new_status == BookingStatus.CONFIRMED and booking.status != BookingStatus.CONFIRMED:
            _lock_venue(db, booking.venue_id, active_only=False)
            if venue_conflicts(db, booking.venue_id, booking.start_date, booking.end_date, exclude_id=booking.id):
                raise BookingConflict("Venue is already booked for the selected dates", conflict=True)
            _ensure_venue_days_open(db, booking.venue_id, booking.start_date, booking.end_date)
        booking.status = new_status
        db.commit()
    except BookingError:
        db.rollback()
        raise

    logger.info("Venue booking status updated to %s", new_status, extra={"booking_id": booking.id})
    notify(
        db,
        booking.user_id,
        "booking_status_update",
        f"Venue Booking {new_status}",
        f"Your booking for {booking.venue.venue_name} has been {new_status}",
    )
    return booking


def cancel_venue_booking(db: Session, client: Credential, booking_id: int) -> Booking:
    booking = db.get(Booking, booking_id)
    if booking is None or booking.venue_id is None or booking.user_id != client.id:
        raise BookingNotFound("Booking not found")
    return cancel_booking(db, client, booking_id)


def reschedule_venue_booking(
    db: Session,
    client: Credential,
    booking_id: int,
    new_start_date: date,
    new_end_date: Optional[date] = None,
    today: Optional[date] = None,
) -> Booking:
    """Move a venue booking to new dates directly; it returns to Pending for owner approval."""
    today = today or date.today()
    booking = db.get(Booking, booking_id)
    if booking is None or booking.venue_id is None or booking.user_id != client.id:
        raise BookingNotFound("Booking not found")
    if booking.status not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
        raise InvalidBookingState("Only Pending or Confirmed bookings can be rescheduled")

    new_start_date, new_end_date = normalize_range(new_start_date, new_end_date)
    if new_start_date < today:
        raise InvalidBookingState("New date cannot be in the past")

    try:
        _lock_venue(db, booking.venue_id, active_only=False)
        if venue_conflicts(db, booking.venue_id, new_start_date, new_end_date, exclude_id=booking.id):
            raise BookingConflict("Venue is not available for the new dates", conflict=True)
        _ensure_venue_days_open(db, booking.venue_id, new_start_date, new_end_date)

        event_time = booking.event_date.time() if booking.event_date else time.min
        booking.event_date = datetime.combine(new_start_date, event_time)
        booking.start_date = new_start_date
        booking.end_date = new_end_date
        booking.status = BookingStatus.PENDING
        db.commit()
    except BookingError:
        db.rollback()
        raise

    logger.info("Venue booking rescheduled", extra={"booking_id": booking.id, "user_id": client.id})
    notify(
        db,
        booking.venue.user_id,
        "booking_rescheduled",
        "Venue Booking Rescheduled",
        f"A booking has been rescheduled to {new_start_date.isoformat()}",
    )
    return booking


def check_venue_range(db: Session, venue_id: int, start: date, end: Optional[date] = None) -> dict:
    venue = db.get(VenueListing, venue_id)
    if venue is None:
        raise BookingNotFound("Venue not found")

    start, end = normalize_range(start, end)
    conflicts = venue_conflicts(db, venue.id, start, end)
    blocked = venue_blocked_days(db, venue.id, expand_range(start, end))
    return {
        "available": not conflicts and not blocked,
        "venue": {"id": venue.id, "name": venue.venue_name, "capacity": venue.venue_capacity},
        "conflicting_bookings": [
            {
                "start_date": b.start_date.isoformat() if b.start_date else None,
                "end_date": (b.end_date or b.start_date).isoformat() if b.start_date else None,
                "status": b.status,
            }
            for b in conflicts
        ],
        "blocked_dates": [record.date.isoformat() for record in blocked],
    }
