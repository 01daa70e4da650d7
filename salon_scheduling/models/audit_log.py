# salon_scheduling/models/audit_log.py
from sqlalchemy import Column, String
from sqlalchemy import Uuid
from sqlalchemy.sql import func
import uuid

from salon_scheduling.models.base import Base, UTCDateTime


class AuditLog(Base):
    """Append-only record of who did what to which entity"""
    __tablename__ = "audit_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    actor_id = Column(Uuid(as_uuid=True), nullable=True)
    action = Column(String(64), nullable=False, index=True)
    entity = Column(String(64), nullable=False)
    entity_id = Column(Uuid(as_uuid=True), nullable=True, index=True)

    created_at = Column(UTCDateTime, server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<AuditLog {self.action} {self.entity}:{self.entity_id}>"
