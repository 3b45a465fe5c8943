from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey, func
from app.database import Base


class Notification(Base):
    """User-facing message created alongside state transitions"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("credential.id"), index=True, nullable=False)
    type = Column(String(50), index=True)
    title = Column(String(255))
    message = Column(Text)
    read = Column(Boolean, default=False, index=True)
    created_at = Column(DateTime, default=func.now(), index=True)


class Feedback(Base):
    """General site feedback submitted by a user"""
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("credential.id"), index=True, nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=func.now())
