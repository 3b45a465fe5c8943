from datetime import date, time
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.database import get_db
from app.models import Credential
from app.services import booking_service

router = APIRouter(tags=["venue-bookings"])


class CreateVenueBookingRequest(BaseModel):
    """Request model for /api/venue-bookings/create"""

    venue_id: int
    event_type: str
    start_date: date
    guest_count: int
    event_location: str
    end_date: Optional[date] = None
    event_time: Optional[time] = None
    selected_amenities: Optional[List[str]] = None
    additional_notes: Optional[str] = None
    package_selected: Optional[str] = None
    total_amount: Optional[float] = None


class VenueStatusRequest(BaseModel):
    status: Optional[str] = None


class VenueRescheduleRequest(BaseModel):
    new_start_date: date
    new_end_date: Optional[date] = None


@router.post("/api/venue-bookings/create", status_code=201)
def create_venue_booking(
    request: CreateVenueBookingRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    booking, warning = booking_service.create_venue_booking(
        db,
        user,
        request.venue_id,
        event_type=request.event_type,
        start_date=request.start_date,
        guest_count=request.guest_count,
        event_location=request.event_location,
        end_date=request.end_date,
        event_time=request.event_time,
        amenities=request.selected_amenities,
        additional_notes=request.additional_notes,
        package_selected=request.package_selected,
        total_amount=request.total_amount,
    )
    return {
        "success": True,
        "message": "Venue booking request sent successfully",
        "booking_id": booking.id,
        "capacity_warning": warning,
    }


@router.get("/api/venue-bookings/user")
def user_venue_bookings(user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "bookings": booking_service.list_user_venue_bookings(db, user.id)}


@router.get("/api/venue-bookings/owner")
def owner_venue_bookings(user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "bookings": booking_service.list_owner_venue_bookings(db, user.id)}


@router.get("/api/venue-bookings/{booking_id}")
def get_venue_booking(booking_id: int, user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "booking": booking_service.get_venue_booking(db, booking_id, user.id)}


@router.patch("/api/venue-bookings/{booking_id}/status")
def update_venue_booking_status(
    booking_id: int,
    request: VenueStatusRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    booking = booking_service.update_venue_booking_status(db, user, booking_id, request.status or "")
    return {"success": True, "message": f"Booking {booking.status.lower()} successfully"}


@router.patch("/api/venue-bookings/{booking_id}/cancel")
def cancel_venue_booking(booking_id: int, user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    booking_service.cancel_venue_booking(db, user, booking_id)
    return {"success": True, "message": "Booking cancelled successfully"}


@router.patch("/api/venue-bookings/{booking_id}/reschedule")
def reschedule_venue_booking(
    booking_id: int,
    request: VenueRescheduleRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    booking = booking_service.reschedule_venue_booking(
        db, user, booking_id, request.new_start_date, request.new_end_date
    )
    return {
        "success": True,
        "message": "Booking rescheduled. Waiting for the venue owner's approval.",
        "booking": booking_service.booking_to_dict(booking),
    }


@router.get("/api/venues/{venue_id}/availability")
def venue_range_availability(
    venue_id: int,
    start_date: date,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    """Whether a venue is free for an inclusive date range"""
    return {"success": True, **booking_service.check_venue_range(db, venue_id, start_date, end_date)}
