"""
Authentication helpers: password hashing, bearer tokens and registration
"""
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from app.config import settings
from app.models import Credential, ROLE_CLIENT
from app.services.exceptions import ServiceError, NotFoundError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
_USERNAME_DISALLOWED = re.compile(r"[^a-z0-9._-]")
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthError(ServiceError):
    status_code = 401


class InvalidCredentials(AuthError):
    pass


class InvalidToken(AuthError):
    pass


class RegistrationError(ServiceError):
    status_code = 400


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # Malformed or unknown hash format
        return False


def create_access_token(user: Credential, now: Optional[datetime] = None) -> str:
    """Issue a signed bearer token for a user"""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "mysql_id": user.id,
        "username": user.username,
        "role": user.role,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + timedelta(hours=settings.jwt_expire_hours)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry, returning the claims"""
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise InvalidToken("Token expired") from exc
    except jwt.PyJWTError as exc:
        raise InvalidToken("Invalid token") from exc

    if not str(claims.get("sub", "")).isdigit():
        raise InvalidToken("Invalid token")
    return claims


def sanitize_username(raw: Optional[str]) -> Optional[str]:
    """Lowercase and strip disallowed characters; None when the result is unusable."""
    if not raw:
        return None
    cleaned = _USERNAME_DISALLOWED.sub("", raw.strip().lower())
    if USERNAME_MIN_LENGTH <= len(cleaned) <= USERNAME_MAX_LENGTH:
        return cleaned
    return None


def username_from_email(email: str) -> str:
    local_part = email.split("@", 1)[0].lower()
    base = _USERNAME_DISALLOWED.sub("", local_part)[:USERNAME_MAX_LENGTH]
    if len(base) < USERNAME_MIN_LENGTH:
        base = (base + "user")[:USERNAME_MAX_LENGTH]
    return base


def unique_username(db: Session, base: str) -> str:
    """Append a numeric suffix until the username is free"""
    candidate = base
    suffix = 1
    while db.query(Credential.id).filter(Credential.username == candidate).first() is not None:
        tail = str(suffix)
        candidate = f"{base[:USERNAME_MAX_LENGTH - len(tail)]}{tail}"
        suffix += 1
    return candidate


def register_user(
    db: Session,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    username: Optional[str] = None,
    phone: Optional[str] = None,
    firebase_uid: Optional[str] = None,
) -> Credential:
    """
    Create a client account.

    Args:
        db: Database session
        first_name: Given name
        last_name: Family name
        email: Login email, stored lowercase
        password: Plain password, stored as a bcrypt hash
        username: Optional requested username
        phone: Optional phone number
        firebase_uid: Optional Firebase identity used by the chat client

    Returns:
        The new Credential
    """
    email = email.strip().lower()
    if not _EMAIL_PATTERN.match(email):
        raise RegistrationError("Invalid email address")

    if db.query(Credential.id).filter(Credential.email == email).first() is not None:
        raise RegistrationError("Email already registered")

    base = sanitize_username(username) or username_from_email(email)

    user = Credential(
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        email=email,
        username=unique_username(db, base),
        password=hash_password(password),
        role=ROLE_CLIENT,
        phone=phone,
        firebase_uid=firebase_uid or None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("User registered", extra={"user_id": user.id})
    return user


def find_by_identifier(db: Session, identifier: str) -> Optional[Credential]:
    """Look up by email when the identifier contains '@', else by username"""
    identifier = identifier.strip()
    if "@" in identifier:
        return db.query(Credential).filter(Credential.email == identifier.lower()).first()
    return db.query(Credential).filter(Credential.username == identifier.lower()).first()


def authenticate(db: Session, identifier: str, password: str) -> Credential:
    user = find_by_identifier(db, identifier)
    if user is None or not verify_password(password, user.password):
        logger.info("Failed login attempt")
        raise InvalidCredentials("Invalid credentials")
    return user


def resolve_email(db: Session, identifier: str) -> str:
    """Resolve a username or email to the account email"""
    identifier = identifier.strip()
    user = (
        db.query(Credential)
        .filter((Credential.username == identifier.lower()) | (Credential.email == identifier.lower()))
        .first()
    )
    if user is None:
        raise NotFoundError("Account not found")
    return user.email
