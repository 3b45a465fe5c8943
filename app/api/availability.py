import datetime as dt
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.database import get_db
from app.models import Credential
from app.services import availability_service

router = APIRouter(tags=["availability"])


class VendorAvailabilityRequest(BaseModel):
    date: dt.date
    start_time: str
    end_time: str
    is_available: bool = True
    notes: Optional[str] = None


class VenueAvailabilityRequest(BaseModel):
    venue_id: int
    date: dt.date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_available: bool = True
    notes: Optional[str] = None


class AvailabilityUpdateRequest(BaseModel):
    date: Optional[dt.date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_available: Optional[bool] = None
    notes: Optional[str] = None


@router.get("/api/vendor/availability/{vendor_id}")
def vendor_calendar(
    vendor_id: int,
    year: Optional[int] = None,
    month: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """Vendor calendar with booked days merged in"""
    return {"success": True, "availability": availability_service.vendor_calendar(db, vendor_id, year, month)}


@router.post("/api/vendor/availability", status_code=201)
def create_vendor_availability(
    request: VendorAvailabilityRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = availability_service.create_vendor_availability(
        db, user, request.date, request.start_time, request.end_time, request.is_available, request.notes
    )
    return {
        "success": True,
        "message": "Availability created",
        "availability": availability_service.availability_to_dict(record),
    }


@router.patch("/api/vendor/availability/{record_id}")
def update_vendor_availability(
    record_id: int,
    request: AvailabilityUpdateRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = availability_service.update_vendor_availability(db, user, record_id, request.model_dump())
    return {
        "success": True,
        "message": "Availability updated",
        "availability": availability_service.availability_to_dict(record),
    }


@router.delete("/api/vendor/availability/{record_id}")
def delete_vendor_availability(record_id: int, user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    availability_service.delete_vendor_availability(db, user, record_id)
    return {"success": True, "message": "Availability deleted"}


@router.get("/api/venue/availability/{venue_id}")
def venue_calendar(
    venue_id: int,
    year: Optional[int] = None,
    month: Optional[int] = None,
    db: Session = Depends(get_db),
):
    return {"success": True, "availability": availability_service.venue_calendar(db, venue_id, year, month)}


@router.post("/api/venue/availability", status_code=201)
def create_venue_availability(
    request: VenueAvailabilityRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = availability_service.create_venue_availability(
        db, user, request.venue_id, request.date, request.start_time, request.end_time,
        request.is_available, request.notes,
    )
    return {
        "success": True,
        "message": "Availability created",
        "availability": availability_service.availability_to_dict(record),
    }


@router.patch("/api/venue/availability/{record_id}")
def update_venue_availability(
    record_id: int,
    request: AvailabilityUpdateRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = availability_service.update_venue_availability(db, user, record_id, request.model_dump())
    return {
        "success": True,
        "message": "Availability updated",
        "availability": availability_service.availability_to_dict(record),
    }


@router.delete("/api/venue/availability/{record_id}")
def delete_venue_availability(record_id: int, user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    availability_service.delete_venue_availability(db, user, record_id)
    return {"success": True, "message": "Availability deleted"}
