from app.models.credential import Credential, ROLE_CLIENT, ROLE_VENDOR, ROLE_ADMIN
from app.models.vendor import EventServiceProvider, VendorApplication
from app.models.venue import VenueListing
from app.models.booking import (
    Booking, BookingReschedule, BookingFeedback, SupplierReport,
    BookingStatus, RescheduleStatus, ReportStatus,
)
from app.models.availability import VendorAvailability, VenueAvailability
from app.models.notification import Notification, Feedback

__all__ = [
    "Credential", "ROLE_CLIENT", "ROLE_VENDOR", "ROLE_ADMIN",
    "EventServiceProvider", "VendorApplication",
    "VenueListing",
    "Booking", "BookingReschedule", "BookingFeedback", "SupplierReport",
    "BookingStatus", "RescheduleStatus", "ReportStatus",
    "VendorAvailability", "VenueAvailability",
    "Notification", "Feedback",
]
