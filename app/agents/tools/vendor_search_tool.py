"""
Tool for finding suppliers and venues to recommend
"""
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.models import EventServiceProvider, VenueListing
from app.models.vendor import APPLICATION_APPROVED
from app.models.venue import VENUE_ACTIVE

FILTERED_LIMIT = 10
UNFILTERED_LIMIT = 100

CATEGORIES = (
    "Photography & Videography", "Catering", "Venue", "Coordination & Hosting",
    "Decoration", "Entertainment", "Others",
)


def _limit(keyword, location, budget_max, limit) -> int:
    if keyword or location or budget_max:
        return limit or FILTERED_LIMIT
    return UNFILTERED_LIMIT


def search_suppliers(
    db: Session,
    category: Optional[str] = None,
    keyword: Optional[str] = None,
    budget_max: Optional[float] = None,
    location: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[dict]:
    """
    Approved suppliers matching the filters.

    Returns ten results when any filter is given, otherwise everything up to a
    hundred. vendor_id is the supplier's user id, the id bookings are made with.
    """
    query = db.query(EventServiceProvider).filter(
        EventServiceProvider.application_status == APPLICATION_APPROVED
    )
    if category:
        query = query.filter(EventServiceProvider.category == category)
    if keyword:
        pattern = f"%{keyword}%"
        query = query.filter(or_(
            EventServiceProvider.business_name.ilike(pattern),
            EventServiceProvider.description.ilike(pattern),
            EventServiceProvider.services.ilike(pattern),
        ))
    elif location:
        query = query.filter(EventServiceProvider.business_address.ilike(f"%{location}%"))

    providers = query.order_by(EventServiceProvider.id).limit(_limit(keyword, location, budget_max, limit)).all()
    return [
        {
            "type": "supplier",
            "id": p.id,
            "vendor_id": p.user_id,
            "business_name": p.business_name,
            "category": p.category or "Others",
            "pricing": p.pricing,
            "description": p.description,
            "address": p.business_address,
            "average_rating": p.average_rating,
            "total_reviews": p.total_reviews,
        }
        for p in providers
    ]


def search_venues(
    db: Session,
    keyword: Optional[str] = None,
    budget_max: Optional[float] = None,
    location: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[dict]:
    query = db.query(VenueListing).filter(VenueListing.status == VENUE_ACTIVE)
    if keyword:
        pattern = f"%{keyword}%"
        query = query.filter(or_(
            VenueListing.venue_name.ilike(pattern),
            VenueListing.description.ilike(pattern),
            VenueListing.venue_subcategory.ilike(pattern),
        ))
    if location:
        query = query.filter(VenueListing.address.ilike(f"%{location}%"))

    venues = query.order_by(VenueListing.id).limit(_limit(keyword, location, budget_max, limit)).all()
    return [
        {
            "type": "venue",
            "id": v.id,
            "venue_id": v.id,
            "business_name": v.venue_name,
            "category": "Venue",
            "venue_subcategory": v.venue_subcategory,
            "capacity": v.venue_capacity,
            "pricing": v.pricing,
            "description": v.description,
            "address": v.address,
        }
        for v in venues
    ]


def search_vendors(
    db: Session,
    category: Optional[str] = None,
    keyword: Optional[str] = None,
    budget_max: Optional[float] = None,
    location: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[dict]:
    """Venues for the 'Venue' category, suppliers otherwise"""
    if (category or "").lower() == "venue":
        return search_venues(db, keyword, budget_max, location, limit)
    return search_suppliers(db, category, keyword, budget_max, location, limit)
