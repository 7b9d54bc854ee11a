"""
Health check endpoint with database and last import status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, text
from api.dependencies import get_db
from schemas.imports import HealthCheckResponse
from models.historico_importacao import HistoricoImportacao
from models.base import utcnow
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - Status and start time of the most recent import run
    """
    db_connected = False
    last_run = None

    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")

    if db_connected:
        try:
            result = await db.execute(
                select(HistoricoImportacao)
                .order_by(HistoricoImportacao.data_inicio.desc())
                .limit(1)
            )
            last_run = result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to fetch last import run: {str(e)}")

    return HealthCheckResponse(
        status="healthy" if db_connected else "unhealthy",
        timestamp=utcnow(),
        database_connected=db_connected,
        last_import_status=last_run.status if last_run else None,
        last_import_at=last_run.data_inicio if last_run else None,
    )
