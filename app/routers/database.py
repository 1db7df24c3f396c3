"""
Database router — diagnostics and sample data.

Endpoints:
  GET  /database/status  — Connectivity check and row counts per table
  POST /database/seed    — [Admin] Insert sample rules/products into empty tables

The status endpoint always answers 200: a store failure is reported as
databaseConnected=false (the cause is logged, and only echoed in DEBUG
outside production). A store that doesn't answer within DB_TIMEOUT_SECONDS
counts as a failure.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db, utcnow
from app.dependencies import require_admin
from app.exceptions import StoreTimeoutError
from app.logging_config import get_logger
from app.models.user import User
from app.services import seed_service

logger = get_logger(__name__)

router = APIRouter()


@router.get("/status", summary="Check database status and record counts")
async def database_status(db: AsyncSession = Depends(get_db)):
    try:
        tables = await seed_service.database_status(db)
    except (SQLAlchemyError, StoreTimeoutError) as exc:
        logger.exception("Database status check failed")
        await db.rollback()
        body = {"databaseConnected": False, "lastChecked": utcnow().isoformat()}
        if settings.expose_error_details:
            body["error"] = str(exc)
        return body

    return {
        "databaseConnected": True,
        "tables": tables,
        "lastChecked": utcnow().isoformat(),
    }


@router.post("/seed", summary="[Admin] Add sample data to the database")
async def seed_database(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    seeded = await seed_service.seed_sample_data(db)
    return {
        "message": "Database seeded successfully",
        "seeded": seeded,
        "seedTime": utcnow().isoformat(),
    }
