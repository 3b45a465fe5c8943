"""
Shared API dependencies: bearer authentication and role checks
"""
from typing import Optional
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from app.database import get_db
from app.models import Credential
from app.services.auth_service import InvalidToken, decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Credential:
    """Resolve the bearer token to a Credential row"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    try:
        claims = decode_access_token(credentials.credentials)
    except InvalidToken:
        raise AuthenticationError()

    user = db.get(Credential, int(claims["sub"]))
    if user is None:
        raise AuthenticationError()
    return user


def require_role(*roles: int):
    """Dependency factory allowing only the given roles"""

    def checker(user: Credential = Depends(get_current_user)) -> Credential:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Access denied")
        return user

    return checker
