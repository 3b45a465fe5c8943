"""
Admin Service
Vendor application review, user roles, analytics, reports and site feedback
"""
import logging
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models import (
    Booking, BookingFeedback, BookingStatus, Credential, EventServiceProvider, Feedback,
    ReportStatus, ROLE_ADMIN, ROLE_CLIENT, ROLE_VENDOR, SupplierReport, VendorApplication, VenueListing,
)
from app.models.vendor import APPLICATION_APPROVED, APPLICATION_PENDING
from app.models.venue import VENUE_ACTIVE
from app.services.exceptions import NotFoundError, ServiceError
from app.services.notification_service import notify

logger = logging.getLogger(__name__)

DECISION_APPROVE = "approve"
DECISION_DENY = "deny"


def analytics(db: Session, now: Optional[datetime] = None) -> dict:
    """Dashboard counters for the admin panel"""
    now = now or datetime.now()

    role_counts = dict(db.query(Credential.role, func.count(Credential.id)).group_by(Credential.role).all())
    status_counts = dict(db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all())
    review_count, review_average = db.query(
        func.count(BookingFeedback.id), func.avg(BookingFeedback.rating)
    ).one()

    week_start = now - timedelta(days=7)
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    last_4_weeks = []
    for weeks_ago in range(3, -1, -1):
        end = now - timedelta(weeks=weeks_ago)
        start = end - timedelta(weeks=1)
        count = (
            db.query(func.count(Booking.id))
            .filter(Booking.created_at >= start, Booking.created_at < end)
            .scalar()
        )
        last_4_weeks.append({"week_start": start.date().isoformat(), "bookings": count})

    return {
        "users": {
            "total": sum(role_counts.values()),
            "clients": role_counts.get(ROLE_CLIENT, 0),
            "vendors": role_counts.get(ROLE_VENDOR, 0),
            "admins": role_counts.get(ROLE_ADMIN, 0),
        },
        "approved_providers": db.query(EventServiceProvider)
        .filter(EventServiceProvider.application_status == APPLICATION_APPROVED)
        .count(),
        "pending_applications": db.query(VendorApplication)
        .filter(VendorApplication.status == APPLICATION_PENDING)
        .count(),
        "active_venues": db.query(VenueListing).filter(VenueListing.status == VENUE_ACTIVE).count(),
        "bookings_by_status": {status: status_counts.get(status, 0) for status in BookingStatus.ALL},
        "reviews": {
            "count": review_count,
            "average_rating": round(float(review_average), 2) if review_average is not None else 0.0,
        },
        "upcoming_bookings": db.query(Booking)
        .filter(
            Booking.event_date >= now,
            Booking.status.in_((BookingStatus.PENDING, BookingStatus.CONFIRMED)),
        )
        .count(),
        "bookings_this_week": db.query(Booking).filter(Booking.created_at >= week_start).count(),
        "bookings_this_month": db.query(Booking).filter(Booking.created_at >= month_start).count(),
        "last_4_weeks": last_4_weeks,
    }


def list_applications(db: Session, include_all: bool = False) -> List[dict]:
    query = db.query(VendorApplication)
    if not include_all:
        query = query.filter(VendorApplication.status == APPLICATION_PENDING)
    applications = query.order_by(VendorApplication.created_at.desc(), VendorApplication.id.desc()).all()

    result = []
    for application in applications:
        data = application.to_dict()
        data["applicant_name"] = application.user.full_name if application.user is not None else None
        data["applicant_email"] = application.user.email if application.user is not None else None
        result.append(data)
    return result


def decide_application(db: Session, admin: Credential, application_id: int, action: str) -> str:
    """
    Approve or deny a vendor application.

    Approval upserts the provider profile, promotes the applicant to a vendor
    and marks the application approved in a single commit.

    Returns:
        The resulting application status
    """
    if action not in (DECISION_APPROVE, DECISION_DENY):
        raise ServiceError("Invalid action")

    application = db.get(VendorApplication, application_id)
    if application is None:
        raise NotFoundError("Application not found")
    if application.status != APPLICATION_PENDING:
        raise ServiceError("Application already processed")

    applicant_id = application.user_id
    business_name = application.business_name

    if action == DECISION_DENY:
        db.delete(application)
        db.commit()
        logger.info("Vendor application denied", extra={"user_id": applicant_id})
        notify(
            db, applicant_id, "vendor_application_denied", "Vendor Application Denied",
            f"Your vendor application for {business_name} was not approved",
        )
        return "Denied"

    provider = db.query(EventServiceProvider).filter(EventServiceProvider.user_id == applicant_id).first()
    if provider is None:
        provider = EventServiceProvider(user_id=applicant_id)
        db.add(provider)
    provider.business_name = business_name
    provider.category = application.category
    provider.business_address = application.address
    provider.description = application.description
    provider.pricing = application.pricing
    provider.business_email = application.contact_email
    provider.application_status = APPLICATION_APPROVED

    applicant = db.get(Credential, applicant_id)
    if applicant is not None and applicant.role == ROLE_CLIENT:
        applicant.role = ROLE_VENDOR
    application.status = APPLICATION_APPROVED
    db.commit()

    logger.info("Vendor application approved", extra={"user_id": applicant_id})
    notify(
        db, applicant_id, "vendor_application_approved", "Vendor Application Approved",
        f"Congratulations! {business_name} is now a verified vendor",
    )
    return APPLICATION_APPROVED


def list_users(db: Session) -> List[dict]:
    users = db.query(Credential).order_by(Credential.id).all()
    return [user.to_dict() for user in users]


def set_user_role(db: Session, user_id: int, role: int) -> Credential:
    if role not in (ROLE_CLIENT, ROLE_VENDOR, ROLE_ADMIN):
        raise ServiceError("Invalid role")

    user = db.get(Credential, user_id)
    if user is None:
        raise NotFoundError("User not found")

    user.role = role
    db.commit()
    logger.info("User role changed to %s", role, extra={"user_id": user_id})
    return user


def submit_site_feedback(db: Session, user: Credential, message: str) -> Feedback:
    if not message or not message.strip():
        raise ServiceError("Message is required")

    feedback = Feedback(user_id=user.id, message=message.strip())
    db.add(feedback)
    db.commit()
    db.refresh(feedback)
    return feedback


def list_site_feedback(db: Session) -> List[dict]:
    rows = (
        db.query(Feedback, Credential)
        .outerjoin(Credential, Feedback.user_id == Credential.id)
        .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        .all()
    )
    result = []
    for feedback, user in rows:
        data = feedback.to_dict()
        data["user_name"] = user.full_name if user is not None else None
        data["username"] = user.username if user is not None else None
        result.append(data)
    return result


def list_reports(db: Session, status: Optional[str] = None) -> List[dict]:
    query = db.query(SupplierReport)
    if status:
        query = query.filter(SupplierReport.status == status)
    reports = query.order_by(SupplierReport.created_at.desc(), SupplierReport.id.desc()).all()

    result = []
    for report in reports:
        data = report.to_dict()
        data["reporter_name"] = report.reporter.full_name if report.reporter is not None else None
        data["vendor_name"] = report.vendor.full_name if report.vendor is not None else None
        result.append(data)
    return result


def update_report(
    db: Session,
    admin: Credential,
    report_id: int,
    status: Optional[str] = None,
    admin_notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> SupplierReport:
    report = db.get(SupplierReport, report_id)
    if report is None:
        raise NotFoundError("Report not found")
    if status is None and admin_notes is None:
        raise ServiceError("No fields to update")
    if status is not None and status not in ReportStatus.ALL:
        raise ServiceError("Invalid status")

    if status is not None:
        report.status = status
    if admin_notes is not None:
        report.admin_notes = admin_notes
    report.reviewed_by = admin.id
    report.reviewed_at = now or datetime.now()
    db.commit()
    db.refresh(report)
    return report
