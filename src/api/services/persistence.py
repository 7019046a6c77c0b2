from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.models import Prediction, User
from ..errors import StoreUnavailable

logger = logging.getLogger("risk-api")


def serialize_prediction(p: Prediction) -> dict:
    return {
        "id": p.id,
        "owner": p.owner,
        "inputData": p.input_data,
        "result": p.result,
        "createdAt": p.created_at,
    }


class StoreHandle(Protocol):
    """Owner-scoped record store, passed into each request handler."""

    def is_available(self) -> bool: ...

    def create(self, owner: str, input_data: dict, result: dict) -> dict: ...

    def find_by_owner(self, owner: str, page: int, limit: int) -> Tuple[List[dict], int]: ...

    def find_one(self, prediction_id: str, owner: str) -> Optional[dict]: ...

    def delete_one(self, prediction_id: str, owner: str) -> Optional[dict]: ...


def get_or_create_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).one_or_none()
    if user is not None:
        return user

    user = User(id=user_id)
    db.add(user)
    db.flush()
    return user


class SqlPredictionStore:
    def __init__(self, db: Session, enabled: bool = True):
        self.db = db
        self.enabled = enabled

    def ping(self) -> None:
        if not self.enabled:
            raise StoreUnavailable("store disabled by configuration")
        try:
            self.db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(str(e)) from e

    def is_available(self) -> bool:
        try:
            self.ping()
            return True
        except StoreUnavailable as e:
            logger.warning("store_unavailable reason=%s", e)
            return False

    def create(self, owner: str, input_data: dict, result: dict) -> dict:
        get_or_create_user(self.db, owner)
        p = Prediction(owner=owner, input_data=input_data, result=result)
        self.db.add(p)
        self.db.commit()
        self.db.refresh(p)
        return serialize_prediction(p)

    def find_by_owner(self, owner: str, page: int, limit: int) -> Tuple[List[dict], int]:
        q = self.db.query(Prediction).filter(Prediction.owner == owner)
        rows = (
            q.order_by(Prediction.created_at.desc())
             .offset((page - 1) * limit)
             .limit(limit)
             .all()
        )
        total = q.count()
        return [serialize_prediction(p) for p in rows], total

    def _owned(self, prediction_id: str, owner: str) -> Optional[Prediction]:
        return (
            self.db.query(Prediction)
            .filter(Prediction.id == prediction_id, Prediction.owner == owner)
            .one_or_none()
        )

    def find_one(self, prediction_id: str, owner: str) -> Optional[dict]:
        p = self._owned(prediction_id, owner)
        return serialize_prediction(p) if p is not None else None

    def delete_one(self, prediction_id: str, owner: str) -> Optional[dict]:
        p = self._owned(prediction_id, owner)
        if p is None:
            return None
        out = serialize_prediction(p)
        self.db.delete(p)
        self.db.commit()
        return out
