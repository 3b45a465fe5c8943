from sqlalchemy import Column, Integer, String, DateTime, Text, Float, ForeignKey, func
from sqlalchemy.orm import relationship
from app.database import Base

APPLICATION_PENDING = "Pending"
APPLICATION_APPROVED = "Approved"
APPLICATION_DENIED = "Denied"


class VendorApplication(Base):
    """A client's request to become a vendor, reviewed by an admin"""
    __tablename__ = "vendor_application"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("credential.id"), index=True, nullable=False)
    business_name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    address = Column(String(500), nullable=False)
    description = Column(Text, nullable=False)
    pricing = Column(Text, nullable=False)
    contact_email = Column(String(255), nullable=True)
    status = Column(String(20), default=APPLICATION_PENDING, index=True)
    created_at = Column(DateTime, default=func.now())

    # Relationships
    user = relationship("Credential")


class EventServiceProvider(Base):
    """Approved vendor profile keyed by the vendor's credential id"""
    __tablename__ = "event_service_provider"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("credential.id"), unique=True, index=True, nullable=False)
    business_name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    pricing = Column(Text, nullable=True)
    business_address = Column(String(500), nullable=True)
    business_email = Column(String(255), nullable=True)
    services = Column(Text, nullable=True)
    service_areas = Column(Text, nullable=True)
    application_status = Column(String(20), default=APPLICATION_PENDING, index=True)
    average_rating = Column(Float, default=0)
    total_reviews = Column(Integer, default=0)
    created_at = Column(DateTime, default=func.now())

    # Relationships
    user = relationship("Credential")
    bookings = relationship("Booking", back_populates="provider")
