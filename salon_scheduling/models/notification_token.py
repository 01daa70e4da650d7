# salon_scheduling/models/notification_token.py
from sqlalchemy import Column, String
from sqlalchemy import Uuid
import uuid

from salon_scheduling.models.base import Base, UTCDateTime


class NotificationToken(Base):
    """Web push token registered by a user's browser"""
    __tablename__ = "notification_tokens"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    platform = Column(String(20), nullable=False, default="web")
    token = Column(String(512), unique=True, nullable=False)
    last_seen_at = Column(UTCDateTime, nullable=True)
