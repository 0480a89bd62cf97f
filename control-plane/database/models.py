# control-plane/database/models.py
"""
SQLAlchemy Database Models for the Subnet Control Plane
"""

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, Index
)
from sqlalchemy.orm import declarative_base
from datetime import datetime
import enum

Base = declarative_base()


class AdmissionOperation(str, enum.Enum):
    """Admission hooks that can record a decision"""
    DEFAULT = "DEFAULT"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AdmissionAudit(Base):
    """
    Admission Audit table - one row per webhook decision on a SpiderSubnet
    """
    __tablename__ = "admission_audits"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Request
    request_uid = Column(String(64), nullable=True,
                         comment="AdmissionReview request UID")
    operation = Column(String(10), nullable=False,
                       comment="DEFAULT, CREATE, UPDATE, DELETE")
    resource_kind = Column(String(50), nullable=False, default="SpiderSubnet")
    resource_name = Column(String(253), nullable=False, index=True)
    username = Column(String(253), nullable=True,
                      comment="Requesting user from AdmissionRequest.userInfo")

    # Decision
    allowed = Column(Boolean, nullable=False)
    reason = Column(String(50), nullable=True,
                    comment="Invalid, Forbidden, BadRequest")
    message = Column(Text, nullable=True)
    details = Column(Text, nullable=True,
                     comment="JSON-encoded status causes")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        Index('ix_admission_resource_created', 'resource_name', 'created_at'),
        Index('ix_admission_allowed_created', 'allowed', 'created_at'),
    )

    def __repr__(self):
        verdict = "allowed" if self.allowed else "denied"
        return f"<AdmissionAudit {self.operation} {self.resource_name} {verdict}>"
