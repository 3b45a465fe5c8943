"""
Venue Service
Venue listing CRUD for owners and the public venue directory
"""
import logging
from typing import List
from sqlalchemy.orm import Session
from app.models import Credential, ROLE_ADMIN, ROLE_VENDOR, VenueListing
from app.models.venue import VENUE_ACTIVE, VENUE_DELETED
from app.services.exceptions import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "venue_name", "venue_subcategory", "venue_capacity", "venue_amenities",
    "venue_operating_hours", "venue_parking", "address", "description",
    "pricing", "contact_email", "status",
)


def venue_to_dict(venue: VenueListing) -> dict:
    data = venue.to_dict()
    owner = venue.owner
    data["owner_name"] = owner.full_name if owner is not None else None
    data["owner_firebase_uid"] = owner.firebase_uid if owner is not None else None
    return data


def list_my_venues(db: Session, user: Credential) -> List[dict]:
    venues = (
        db.query(VenueListing)
        .filter(VenueListing.user_id == user.id, VenueListing.status != VENUE_DELETED)
        .order_by(VenueListing.created_at.desc(), VenueListing.id.desc())
        .all()
    )
    return [venue_to_dict(v) for v in venues]


def create_venue(db: Session, user: Credential, fields: dict) -> VenueListing:
    if user.role not in (ROLE_VENDOR, ROLE_ADMIN):
        raise ForbiddenError("Only vendors can create venue listings")

    venue = VenueListing(user_id=user.id, **{k: v for k, v in fields.items() if k in EDITABLE_FIELDS})
    if not venue.status:
        venue.status = VENUE_ACTIVE
    db.add(venue)
    db.commit()
    db.refresh(venue)

    logger.info("Venue listing created", extra={"user_id": user.id, "venue_id": venue.id})
    return venue


def _owned(db: Session, user: Credential, venue_id: int) -> VenueListing:
    venue = db.get(VenueListing, venue_id)
    if venue is None or venue.status == VENUE_DELETED:
        raise NotFoundError("Venue not found")
    if venue.user_id != user.id:
        raise ForbiddenError("You do not own this venue")
    return venue


def update_venue(db: Session, user: Credential, venue_id: int, fields: dict) -> VenueListing:
    venue = _owned(db, user, venue_id)
    for key, value in fields.items():
        if key in EDITABLE_FIELDS and value is not None:
            setattr(venue, key, value)
    db.commit()
    db.refresh(venue)
    return venue


def delete_venue(db: Session, user: Credential, venue_id: int) -> None:
    """Soft delete; existing bookings keep their venue reference"""
    venue = _owned(db, user, venue_id)
    venue.status = VENUE_DELETED
    db.commit()
    logger.info("Venue listing deleted", extra={"user_id": user.id, "venue_id": venue.id})


def list_active_venues(db: Session) -> List[dict]:
    venues = (
        db.query(VenueListing)
        .filter(VenueListing.status == VENUE_ACTIVE)
        .order_by(VenueListing.created_at.desc(), VenueListing.id.desc())
        .all()
    )
    return [venue_to_dict(v) for v in venues]


def get_venue(db: Session, venue_id: int) -> dict:
    venue = db.get(VenueListing, venue_id)
    if venue is None or venue.status == VENUE_DELETED:
        raise NotFoundError("Venue not found")
    return venue_to_dict(venue)
