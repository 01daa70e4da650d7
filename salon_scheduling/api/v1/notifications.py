# ============================================================================
# salon_scheduling/api/v1/notifications.py
# ============================================================================
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from salon_scheduling.config.database import get_db
from salon_scheduling.schemas.scheduling import RegisterPushTokenRequest
from salon_scheduling.services.notification.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register_push_token(
        payload: RegisterPushTokenRequest,
        db: Session = Depends(get_db)
):
    """Register (or refresh) a browser push token for a user"""
    record = NotificationService.register_push_token(db, payload)
    return {
        "id": str(record.id),
        "user_id": str(record.user_id),
        "platform": record.platform,
        "last_seen_at": record.last_seen_at.isoformat() if record.last_seen_at else None,
    }
