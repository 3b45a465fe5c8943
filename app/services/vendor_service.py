"""
Vendor Service
Vendor applications and public provider profiles
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from app.models import Credential, EventServiceProvider, ROLE_CLIENT, VendorApplication
from app.models.vendor import APPLICATION_APPROVED, APPLICATION_PENDING
from app.services.exceptions import ForbiddenError, NotFoundError, ServiceError
from app.services.notification_service import notify_admins

logger = logging.getLogger(__name__)


def apply_as_vendor(
    db: Session,
    user: Credential,
    business_name: str,
    category: str,
    address: str,
    description: str,
    pricing: str,
    contact_email: Optional[str] = None,
) -> VendorApplication:
    """Submit a vendor application for admin review"""
    if user.role != ROLE_CLIENT:
        raise ForbiddenError("Only clients can apply as vendors")

    open_application = (
        db.query(VendorApplication.id)
        .filter(
            VendorApplication.user_id == user.id,
            VendorApplication.status.in_((APPLICATION_PENDING, APPLICATION_APPROVED)),
        )
        .first()
    )
    if open_application is not None:
        raise ServiceError("You already have a pending or approved application")

    application = VendorApplication(
        user_id=user.id,
        business_name=business_name,
        category=category,
        address=address,
        description=description,
        pricing=pricing,
        contact_email=contact_email or user.email,
        status=APPLICATION_PENDING,
    )
    db.add(application)
    db.commit()
    db.refresh(application)

    logger.info("Vendor application submitted", extra={"user_id": user.id})
    notify_admins(
        db,
        "vendor_application",
        "New Vendor Application",
        f"{user.full_name} applied as a vendor ({business_name})",
    )
    return application


def application_status(db: Session, user: Credential) -> dict:
    application = (
        db.query(VendorApplication)
        .filter(VendorApplication.user_id == user.id)
        .order_by(VendorApplication.created_at.desc(), VendorApplication.id.desc())
        .first()
    )
    provider = db.query(EventServiceProvider).filter(EventServiceProvider.user_id == user.id).first()
    return {
        "status": application.status if application is not None else None,
        "application": application.to_dict() if application is not None else None,
        "vendor": provider.to_dict() if provider is not None else None,
    }


def provider_to_dict(provider: EventServiceProvider) -> dict:
    data = provider.to_dict()
    owner = provider.user
    data["owner_name"] = owner.full_name if owner is not None else None
    data["firebase_uid"] = owner.firebase_uid if owner is not None else None
    return data


def list_public_vendors(db: Session) -> List[dict]:
    providers = (
        db.query(EventServiceProvider)
        .filter(EventServiceProvider.application_status == APPLICATION_APPROVED)
        .order_by(EventServiceProvider.business_name)
        .all()
    )
    return [provider_to_dict(p) for p in providers]


def get_public_vendor(db: Session, user_id: int) -> dict:
    provider = (
        db.query(EventServiceProvider)
        .filter(
            EventServiceProvider.user_id == user_id,
            EventServiceProvider.application_status == APPLICATION_APPROVED,
        )
        .first()
    )
    if provider is None:
        raise NotFoundError("Vendor not found")
    return provider_to_dict(provider)
