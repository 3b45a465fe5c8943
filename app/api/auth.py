from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.database import get_db
from app.models import Credential
from app.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    """Request model for /register"""

    first_name: str
    last_name: str
    email: str
    password: str
    username: Optional[str] = None
    phone: Optional[str] = None
    firebase_uid: Optional[str] = None


class LoginRequest(BaseModel):
    """Accepts identifier, username or email alongside the password"""

    identifier: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    password: str


def _token_payload(user: Credential) -> dict:
    return {"token": auth_service.create_access_token(user), "user": user.to_dict()}


@router.post("/register", status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Create a client account and sign it in"""
    user = auth_service.register_user(
        db,
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        password=request.password,
        username=request.username,
        phone=request.phone,
        firebase_uid=request.firebase_uid,
    )
    return {"success": True, "message": "Registration successful", **_token_payload(user)}


@router.post("/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    identifier = request.identifier or request.username or request.email
    if not identifier:
        raise HTTPException(status_code=400, detail="Username or email is required")

    user = auth_service.authenticate(db, identifier, request.password)
    return {"success": True, "message": "Login successful", **_token_payload(user)}


@router.get("/me")
def me(user: Credential = Depends(get_current_user)):
    return {"success": True, "user": user.to_dict()}


@router.get("/resolve-username")
def resolve_username(u: str = "", db: Session = Depends(get_db)):
    """Map a username (or email) to the account email for sign-in"""
    if not u.strip():
        raise HTTPException(status_code=400, detail="Username is required")
    return {"success": True, "email": auth_service.resolve_email(db, u)}
