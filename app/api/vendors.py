from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.database import get_db
from app.models import Credential
from app.services import vendor_service

router = APIRouter(tags=["vendors"])


class VendorApplicationRequest(BaseModel):
    """Request model for /api/vendor/apply"""

    business_name: str
    category: str
    address: str
    description: str
    pricing: str
    contact_email: Optional[str] = None


@router.post("/api/vendor/apply", status_code=201)
def apply_as_vendor(
    request: VendorApplicationRequest,
    user: Credential = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    application = vendor_service.apply_as_vendor(
        db,
        user,
        business_name=request.business_name,
        category=request.category,
        address=request.address,
        description=request.description,
        pricing=request.pricing,
        contact_email=request.contact_email,
    )
    return {"success": True, "message": "Application submitted", "application_id": application.id}


@router.get("/api/vendor/status")
def vendor_status(user: Credential = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"success": True, **vendor_service.application_status(db, user)}


@router.get("/api/vendors/public")
def public_vendors(db: Session = Depends(get_db)):
    return {"success": True, "vendors": vendor_service.list_public_vendors(db)}


@router.get("/api/vendor/public/{user_id}")
def public_vendor(user_id: int, db: Session = Depends(get_db)):
    return {"success": True, "vendor": vendor_service.get_public_vendor(db, user_id)}
