"""
Database modules
"""

from .session import get_db, init_db, db_manager, SessionLocal, engine
from .models import Base, AdmissionAudit, AdmissionOperation

__all__ = [
    # Session
    "get_db",
    "init_db",
    "db_manager",
    "SessionLocal",
    "engine",
    # Models
    "Base",
    "AdmissionAudit",
    "AdmissionOperation",
]
