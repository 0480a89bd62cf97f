# control-plane/core/audit.py
"""
Admission audit trail
"""

import json
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from database.models import AdmissionAudit

logger = logging.getLogger(__name__)


def record_admission(
    db: Session,
    operation: str,
    resource_name: str,
    allowed: bool,
    request_uid: Optional[str] = None,
    username: Optional[str] = None,
    reason: Optional[str] = None,
    message: Optional[str] = None,
    details: Optional[dict] = None
) -> None:
    """
    Store one webhook decision

    A failing audit write is logged and dropped; it never changes the
    admission outcome.
    """
    if not settings.ENABLE_AUDIT_LOG:
        return

    try:
        entry = AdmissionAudit(
            request_uid=request_uid,
            operation=operation,
            resource_name=resource_name,
            username=username,
            allowed=allowed,
            reason=reason,
            message=message,
            details=json.dumps(details) if details else None,
        )
        db.add(entry)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create admission audit: {e}")
