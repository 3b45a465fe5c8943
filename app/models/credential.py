from sqlalchemy import Column, Integer, String, DateTime, func
from app.database import Base

ROLE_CLIENT = 0
ROLE_VENDOR = 1
ROLE_ADMIN = 2


class Credential(Base):
    """User identity row (clients, vendors and admins)"""
    __tablename__ = "credential"
    __serialize_exclude__ = ("password",)

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(50), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash
    role = Column(Integer, default=ROLE_CLIENT, nullable=False, index=True)
    firebase_uid = Column(String(128), unique=True, nullable=True, index=True)
    avatar = Column(String(500), nullable=True)
    phone = Column(String(30), nullable=True)
    created_at = Column(DateTime, default=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def public_dict(self) -> dict:
        """Fields safe to expose to other users"""
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "username": self.username,
            "role": self.role,
            "firebase_uid": self.firebase_uid,
            "avatar": self.avatar,
        }
