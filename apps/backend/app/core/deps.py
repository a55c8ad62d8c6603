from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services import RecurrenceService


def get_recurrence_service(db: Session = Depends(get_db)) -> RecurrenceService:
    """Per-request service bound to the request's session.

    Tests override ``get_db``; the service follows automatically.
    """
    return RecurrenceService(db)
