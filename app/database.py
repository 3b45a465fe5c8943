from datetime import date, datetime, time
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings


class SerializerMixin:
    """Plain-dict rendering of mapped columns for JSON responses"""

    __serialize_exclude__ = ()

    def to_dict(self) -> dict:
        data = {}
        for column in self.__table__.columns:
            if column.key in self.__serialize_exclude__:
                continue
            value = getattr(self, column.key)
            if isinstance(value, time):
                value = value.strftime("%H:%M:%S")
            elif isinstance(value, (date, datetime)):
                value = value.isoformat()
            data[column.key] = value
        return data


connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base(cls=SerializerMixin)


def get_db():
    """FastAPI dependency yielding a database session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create all tables. Models must be imported so they register with Base."""
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
