from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.api.deps import require_role
from app.database import get_db
from app.models import Credential, ROLE_ADMIN
from app.services import admin_service

router = APIRouter(prefix="/api/admin", tags=["admin"])

require_admin = require_role(ROLE_ADMIN)


class DecisionRequest(BaseModel):
    id: int
    action: str


class RoleRequest(BaseModel):
    user_id: int
    role: int


class ReportUpdateRequest(BaseModel):
    status: Optional[str] = None
    admin_notes: Optional[str] = None


@router.get("/analytics")
def analytics(admin: Credential = Depends(require_admin), db: Session = Depends(get_db)):
    return {"success": True, "analytics": admin_service.analytics(db)}


@router.get("/vendor-applications")
def vendor_applications(
    all: int = 0,
    admin: Credential = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Pending applications; all=1 includes every status"""
    return {"success": True, "applications": admin_service.list_applications(db, include_all=bool(all))}


@router.post("/vendor-application/decision")
def vendor_application_decision(
    request: DecisionRequest,
    admin: Credential = Depends(require_admin),
    db: Session = Depends(get_db),
):
    status = admin_service.decide_application(db, admin, request.id, request.action.lower())
    return {"success": True, "message": f"Application {status.lower()}", "status": status}


@router.get("/users")
def users(admin: Credential = Depends(require_admin), db: Session = Depends(get_db)):
    return {"success": True, "users": admin_service.list_users(db)}


@router.post("/users/role")
def set_role(request: RoleRequest, admin: Credential = Depends(require_admin), db: Session = Depends(get_db)):
    user = admin_service.set_user_role(db, request.user_id, request.role)
    return {"success": True, "message": "Role updated", "user": user.to_dict()}


@router.get("/feedbacks")
def feedbacks(admin: Credential = Depends(require_admin), db: Session = Depends(get_db)):
    return {"success": True, "feedbacks": admin_service.list_site_feedback(db)}


@router.get("/reports")
def reports(
    status: Optional[str] = None,
    admin: Credential = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return {"success": True, "reports": admin_service.list_reports(db, status)}


@router.patch("/reports/{report_id}")
def update_report(
    report_id: int,
    request: ReportUpdateRequest,
    admin: Credential = Depends(require_admin),
    db: Session = Depends(get_db),
):
    report = admin_service.update_report(db, admin, report_id, request.status, request.admin_notes)
    return {"success": True, "message": "Report updated", "report": report.to_dict()}
