"""Health checks and monitoring endpoints"""
from fastapi import APIRouter, Depends
from sqlalchemy import func, text
from sqlalchemy.orm import Session
import redis.asyncio as redis

from salon_scheduling.config.database import get_db
from salon_scheduling.config.settings import get_settings
from salon_scheduling.models import AvailabilityRule, Service

health_router = APIRouter()


@health_router.get("/")
async def health_check():
    """Liveness only; touches nothing"""
    return {"status": "healthy", "service": "salon-scheduling-api"}


def _check_database(db: Session) -> dict:
    db.execute(text("SELECT 1"))
    return {
        "active_services": db.query(func.count(Service.id)).filter(Service.is_active.is_(True)).scalar(),
        "availability_rules": db.query(func.count(AvailabilityRule.id)).scalar(),
    }


async def _check_broker(url: str) -> None:
    client = redis.from_url(url)
    try:
        await client.ping()
    finally:
        await client.aclose()


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Readiness: database round-trip plus catalog counts, and the Redis broker
    that carries notification tasks. A salon with no availability rules can
    serve requests but will never offer a slot, so it is reported as degraded.
    """
    checks = {
        "api": "healthy",
        "database": "unknown",
        "broker": "unknown",
        "overall": "unknown"
    }
    catalog = None

    try:
        catalog = _check_database(db)
        checks["database"] = "healthy"
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)}"

    try:
        await _check_broker(get_settings().CELERY_BROKER_URL)
        checks["broker"] = "healthy"
    except Exception as e:
        checks["broker"] = f"unhealthy: {str(e)}"

    healthy = all(status == "healthy" for key, status in checks.items() if key != "overall")
    bookable = bool(catalog and catalog["availability_rules"])
    checks["overall"] = "healthy" if healthy and bookable else "degraded"
    checks["catalog"] = catalog

    return checks
