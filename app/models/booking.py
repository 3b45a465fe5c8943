from sqlalchemy import (
    Column, Integer, String, DateTime, Date, Text, Boolean, Numeric, ForeignKey, func
)
from sqlalchemy.orm import relationship
from app.database import Base


class BookingStatus:
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"

    ALL = (PENDING, CONFIRMED, REJECTED, CANCELLED, COMPLETED)
    # Statuses that no longer hold a date
    INACTIVE = (CANCELLED, REJECTED)


class RescheduleStatus:
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ReportStatus:
    PENDING = "Pending"
    REVIEWED = "Reviewed"
    RESOLVED = "Resolved"
    DISMISSED = "Dismissed"

    ALL = (PENDING, REVIEWED, RESOLVED, DISMISSED)


class Booking(Base):
    """A client's booking of either a vendor or a venue"""
    __tablename__ = "booking"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("credential.id"), index=True, nullable=False)
    event_service_provider_id = Column(Integer, ForeignKey("event_service_provider.id"), index=True, nullable=True)
    venue_id = Column(Integer, ForeignKey("venue_listings.id"), index=True, nullable=True)
    service_name = Column(String(255), nullable=False)
    event_date = Column(DateTime, index=True, nullable=False)
    start_date = Column(Date, index=True, nullable=True)  # venue bookings only
    end_date = Column(Date, index=True, nullable=True)
    event_location = Column(String(500), nullable=True)
    event_type = Column(String(100), nullable=True)
    guest_count = Column(Integer, nullable=True)
    package_selected = Column(String(255), nullable=True)
    additional_notes = Column(Text, nullable=True)
    total_amount = Column(Numeric(12, 2, asdecimal=False), default=0)
    status = Column(String(20), default=BookingStatus.PENDING, index=True)
    remarks = Column(Text, nullable=True)
    reminder_sent = Column(Boolean, default=False)  # Upcoming event reminder sent
    completion_prompt_sent = Column(Boolean, default=False)  # Owner asked to mark completed
    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=func.now(), index=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("Credential", foreign_keys=[user_id])
    provider = relationship("EventServiceProvider", back_populates="bookings")
    venue = relationship("VenueListing", back_populates="bookings")
    reschedules = relationship(
        "BookingReschedule",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingReschedule.id",
    )
    feedback = relationship("BookingFeedback", back_populates="booking", uselist=False, cascade="all, delete-orphan")

    @property
    def booking_type(self) -> str:
        return "venue" if self.venue_id else "supplier"

    @property
    def owner_user_id(self):
        """Credential id of whoever fulfils the booking"""
        if self.venue is not None:
            return self.venue.user_id
        if self.provider is not None:
            return self.provider.user_id
        return None

    @property
    def pending_reschedule(self):
        for reschedule in self.reschedules:
            if reschedule.status == RescheduleStatus.PENDING:
                return reschedule
        return None


class BookingReschedule(Base):
    """A client's request to move a confirmed booking to a new date"""
    __tablename__ = "booking_reschedule"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("booking.id"), index=True, nullable=False)
    original_event_date = Column(DateTime, nullable=False)
    requested_event_date = Column(DateTime, nullable=False)
    status = Column(String(20), default=RescheduleStatus.PENDING, index=True)
    requested_by = Column(Integer, nullable=True)
    requested_at = Column(DateTime, default=func.now())
    processed_by = Column(Integer, nullable=True)
    processed_at = Column(DateTime, nullable=True)

    # Relationships
    booking = relationship("Booking", back_populates="reschedules")


class BookingFeedback(Base):
    """Client rating of a completed booking"""
    __tablename__ = "booking_feedback"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("booking.id"), unique=True, index=True, nullable=False)
    user_id = Column(Integer, ForeignKey("credential.id"), index=True, nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="feedback")


class SupplierReport(Base):
    """Complaint about a vendor raised alongside booking feedback"""
    __tablename__ = "supplier_reports"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("booking.id"), index=True, nullable=True)
    reporter_id = Column(Integer, ForeignKey("credential.id"), index=True, nullable=False)
    vendor_id = Column(Integer, ForeignKey("credential.id"), index=True, nullable=True)
    reason = Column(String(255), nullable=False)
    details = Column(Text, nullable=True)
    status = Column(String(20), default=ReportStatus.PENDING, index=True)
    admin_notes = Column(Text, nullable=True)
    reviewed_by = Column(Integer, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=func.now())

    # Relationships
    reporter = relationship("Credential", foreign_keys=[reporter_id])
    vendor = relationship("Credential", foreign_keys=[vendor_id])
