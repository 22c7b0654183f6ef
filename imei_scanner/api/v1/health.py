"""
==============================================================================
Health Check Endpoints
==============================================================================

System health status endpoints for monitoring and orchestration.

==============================================================================
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text

from imei_scanner.db.database import get_db
from imei_scanner.services.scan_service import get_scan_service


router = APIRouter(prefix="/health", tags=["Health"])


class HealthController:
    """Controller for health check operations."""

    def __init__(self, db: Session):
        self._db = db

    def check_database(self) -> str:
        """Check database connectivity."""
        try:
            self._db.execute(text("SELECT 1"))
            return "healthy"
        except Exception:
            return "unhealthy"

    def check_session(self) -> dict:
        """Check scan session status."""
        service = get_scan_service()
        if service is None:
            return {"status": "not_initialized", "records": 0}
        session = service.current_session
        if session is None:
            return {"status": "idle", "records": 0}
        return {"status": "active", "records": len(session.log)}

    def get_health(self) -> dict:
        """Get full health status."""
        db_status = self.check_database()
        session_info = self.check_session()

        overall = "healthy" if db_status == "healthy" else "degraded"

        return {
            "status": overall,
            "components": {
                "api": "healthy",
                "database": db_status,
                "session": session_info["status"]
            },
            "details": {
                "records_loaded": session_info["records"]
            }
        }


@router.get("")
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns system status including API, database, and scan session.
    """
    controller = HealthController(db)
    return controller.get_health()


@router.get("/ready")
async def readiness_check():
    """Readiness probe for container orchestration."""
    return {"ready": get_scan_service() is not None}


@router.get("/live")
async def liveness_check():
    """Liveness probe for container orchestration."""
    return {"alive": True}
