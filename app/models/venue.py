from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, func
from sqlalchemy.orm import relationship
from app.database import Base

VENUE_ACTIVE = "Active"
VENUE_INACTIVE = "Inactive"
VENUE_DELETED = "Deleted"


class VenueListing(Base):
    """Venue profile owned by a vendor"""
    __tablename__ = "venue_listings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("credential.id"), index=True, nullable=False)
    venue_name = Column(String(255), nullable=False)
    venue_subcategory = Column(String(100), nullable=True)  # e.g. Garden, Church, Hotel
    venue_capacity = Column(Integer, nullable=True)
    venue_amenities = Column(Text, nullable=True)
    venue_operating_hours = Column(String(255), nullable=True)
    venue_parking = Column(String(255), nullable=True)
    address = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    pricing = Column(Text, nullable=True)
    contact_email = Column(String(255), nullable=True)
    status = Column(String(20), default=VENUE_ACTIVE, index=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    owner = relationship("Credential")
    bookings = relationship("Booking", back_populates="venue")
