from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Time, Boolean, ForeignKey, UniqueConstraint, func
)
from app.database import Base


class VendorAvailability(Base):
    """Per-day open/closed override set by a vendor"""
    __tablename__ = "vendor_availability"
    __table_args__ = (UniqueConstraint("vendor_user_id", "date", name="uq_vendor_availability_day"),)

    id = Column(Integer, primary_key=True, index=True)
    vendor_user_id = Column(Integer, ForeignKey("credential.id"), index=True, nullable=False)
    date = Column(Date, index=True, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)
    notes = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class VenueAvailability(Base):
    """Per-day open/closed override set by a venue owner"""
    __tablename__ = "venue_availability"
    __table_args__ = (UniqueConstraint("venue_id", "date", name="uq_venue_availability_day"),)

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venue_listings.id"), index=True, nullable=False)
    date = Column(Date, index=True, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)
    notes = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
