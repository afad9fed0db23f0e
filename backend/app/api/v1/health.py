"""
Liveness and database readiness endpoint for load balancers and uptime checks.
"""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core import settings
from app.core.datetime_utils import utc_now
from app.models import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Report service identity and whether the database answers a trivial query.

    Unauthenticated. Responds 503 with ``status: degraded`` when the database
    is unreachable so load balancers can take the instance out of rotation.
    """
    payload = {
        "success": True,
        "status": "healthy",
        "database": "ok",
        "timestamp": utc_now().isoformat(),
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
    }

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Health check database query failed: %s", e)
        payload.update(success=False, status="degraded", database="unavailable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=payload
        )

    return payload
