from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.database import get_db
from app.models import Credential
from app.services import venue_service

router = APIRouter(tags=["venues"])


class VenueListingRequest(BaseModel):
    venue_name: str
    address: str
    venue_subcategory: Optional[str] = None
    venue_capacity: Optional[int] = None
    venue_amenities: Optional[str] = None
    venue_operating_hours: Optional[str] = None
    venue_parking: Optional[str] = None
    description: Optional[str] = None
    pricing: Optional[str] = None
    contact_email: Optional[str] = None


class VenueUpdateRequest(BaseModel):
    venue_name: Optional[str] = None
    address: Optional[str] = None
    venue_subcategory: Optional[str] = None
    venue_capacity: Optional[int] = None
    venue_amenities: Optional[str] = None
    venue_operating_hours: Optional[str] = None
    venue_parking: Optional[str] = None
    description: Optional[str] = None
    pricing: Optional[str] = None
    contact_email: Optional[str] = None
    status: Optional[str] = None


@router.get("/api/venue/my-listings")
def my_listings(user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, "venues": venue_service.list_my_venues(db, user)}


@router.post("/api/venue/listings", status_code=201)
def create_listing(
    request: VenueListingRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    venue = venue_service.create_venue(db, user, request.model_dump())
    return {"success": True, "message": "Venue listing created", "venue_id": venue.id}


@router.put("/api/venue/listings/{venue_id}")
def update_listing(
    venue_id: int,
    request: VenueUpdateRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    venue = venue_service.update_venue(db, user, venue_id, request.model_dump())
    return {"success": True, "message": "Venue listing updated", "venue": venue_service.venue_to_dict(venue)}


@router.delete("/api/venue/listings/{venue_id}")
def delete_listing(venue_id: int, user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    venue_service.delete_venue(db, user, venue_id)
    return {"success": True, "message": "Venue listing deleted"}


@router.get("/api/venues")
def list_venues(db: Session = Depends(get_db)):
    """Active venues, newest first"""
    return {"success": True, "venues": venue_service.list_active_venues(db)}


@router.get("/api/venues/{venue_id}")
def get_venue(venue_id: int, db: Session = Depends(get_db)):
    return {"success": True, "venue": venue_service.get_venue(db, venue_id)}
