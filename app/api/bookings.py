from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.database import get_db
from app.models import Credential
from app.services import booking_service

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


class CreateBookingRequest(BaseModel):
    """Request model for /create"""

    vendor_id: int
    service_name: str
    event_date: datetime
    event_location: str
    event_type: Optional[str] = None
    package_selected: Optional[str] = None
    additional_notes: Optional[str] = None
    total_amount: Optional[float] = None


class RescheduleRequest(BaseModel):
    new_event_date: Optional[datetime] = None


class StatusRequest(BaseModel):
    status: Optional[str] = None


class FeedbackRequest(BaseModel):
    rating: int
    comment: Optional[str] = None
    report: bool = False
    report_reason: Optional[str] = None
    report_details: Optional[str] = None


def _naive(value: datetime) -> datetime:
    """Store local wall-clock times; drop any offset the client sent"""
    return value.replace(tzinfo=None) if value.tzinfo else value


@router.post("/create", status_code=201)
def create_booking(
    request: CreateBookingRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Book a vendor.

    - Rejects past dates and unverified vendors
    - 409 when the vendor already has an active booking that day
    - Notifies the vendor
    """
    booking = booking_service.create_vendor_booking(
        db,
        user,
        request.vendor_id,
        service_name=request.service_name,
        event_date=_naive(request.event_date),
        event_location=request.event_location,
        event_type=request.event_type,
        package_selected=request.package_selected,
        additional_notes=request.additional_notes,
        total_amount=request.total_amount,
    )
    return {"success": True, "message": "Booking request sent successfully", "booking_id": booking.id}


@router.get("/user")
def user_bookings(
    status: Optional[str] = None,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return {"success": True, "bookings": booking_service.list_user_bookings(db, user.id, status)}


@router.get("/vendor")
def vendor_bookings(user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    """Supplier bookings and venue bookings of the caller's listings"""
    return {"success": True, **booking_service.list_vendor_bookings(db, user.id)}


@router.get("/{booking_id}")
def get_booking(booking_id: int, user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "booking": booking_service.get_booking_details(db, booking_id, user.id)}


@router.patch("/{booking_id}/reschedule")
def reschedule_booking(
    booking_id: int,
    request: RescheduleRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if request.new_event_date is None:
        raise HTTPException(status_code=400, detail="New event date is required")

    reschedule = booking_service.request_reschedule(db, user, booking_id, _naive(request.new_event_date))
    return {
        "success": True,
        "message": "Reschedule request sent. Waiting for approval.",
        "reschedule_id": reschedule.id,
    }


@router.patch("/{booking_id}/status")
def update_status(
    booking_id: int,
    request: StatusRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    summary = booking_service.update_booking_status(db, user, booking_id, request.status or "")
    return {"success": True, "message": summary}


@router.patch("/{booking_id}/cancel")
def cancel_booking(booking_id: int, user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    booking_service.cancel_booking(db, user, booking_id)
    return {"success": True, "message": "Booking cancelled successfully"}


@router.patch("/{booking_id}/complete")
def complete_booking(booking_id: int, user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    booking = booking_service.complete_booking(db, user, booking_id)
    return {
        "success": True,
        "message": "Booking marked as completed",
        "booking": booking_service.booking_to_dict(booking),
    }


@router.post("/{booking_id}/feedback", status_code=201)
def submit_feedback(
    booking_id: int,
    request: FeedbackRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    feedback = booking_service.submit_feedback(
        db,
        user,
        booking_id,
        rating=request.rating,
        comment=request.comment,
        report_reason=request.report_reason if request.report else None,
        report_details=request.report_details if request.report else None,
    )
    return {"success": True, "message": "Thank you for your feedback!", "feedback_id": feedback.id}
