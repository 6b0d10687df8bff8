"""
Health check endpoint for deployment monitoring.
"""
from fastapi import APIRouter
from sqlalchemy import text

from fitness_gh.core.dates import utcnow
from fitness_gh.db.session import SessionLocal

router = APIRouter(prefix="/health", tags=["Health"])

VERSION = "1.0.0"


@router.get("")
def health_check():
    """
    Report service status and database connectivity.

    Always 200; a database failure shows up as ``degraded``.
    """
    status = "healthy"
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {e.__class__.__name__}"
        status = "degraded"
    finally:
        db.close()

    return {
        "status": status,
        "timestamp": utcnow().isoformat(),
        "database": db_status,
        "version": VERSION,
    }
