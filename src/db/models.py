import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, JSON, ForeignKey
from .base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)  # identity supplied by the auth gateway
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

class Prediction(Base):
    __tablename__ = "predictions"

    id = Column(String, primary_key=True, default=lambda: uuid.uuid4().hex)
    owner = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    input_data = Column(JSON, nullable=False)
    result = Column(JSON, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
