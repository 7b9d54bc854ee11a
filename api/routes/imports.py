"""
Import endpoints: start a run and inspect run history
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from uuid import UUID
import logging

from api.dependencies import get_db
from core.config import settings
from ingestion.config_store import load_import_config
from ingestion.history import create_import_run
from ingestion.runner import ImportRunner
from models.historico_importacao import HistoricoImportacao
from schemas.imports import ImportRequest, ImportResponse, ImportRunList, ImportRunResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/imports", tags=["Imports"])


@router.post("", response_model=ImportResponse, status_code=201)
async def create_import(
    payload: ImportRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Import rows already parsed from a spreadsheet.

    The run is executed before the response is sent; failures are reported
    in `result` (success=false), not as HTTP errors.
    """
    request_id = getattr(request.state, "request_id", "-")
    logger.info(f"[{request_id}] POST /imports - {payload.file_name}: {len(payload.records)} records")

    config = await load_import_config(db, settings, use_ai=payload.use_ai)
    run = await create_import_run(db, payload.file_name)
    import_id = run.id

    result = await ImportRunner(db, config).run(payload.records, payload.file_name, import_id)

    return ImportResponse(import_id=import_id, result=result)


@router.get("", response_model=ImportRunList)
async def list_imports(
    limit: int = Query(20, ge=1, le=200, description="Number of runs to return"),
    db: AsyncSession = Depends(get_db)
):
    """Most recent import runs first"""
    total = (await db.execute(select(func.count(HistoricoImportacao.id)))).scalar_one()
    result = await db.execute(
        select(HistoricoImportacao)
        .order_by(HistoricoImportacao.data_inicio.desc())
        .limit(limit)
        .execution_options(populate_existing=True)
    )
    runs = result.scalars().all()

    return ImportRunList(
        items=[ImportRunResponse.model_validate(run) for run in runs],
        total=total,
    )


@router.get("/{import_id}", response_model=ImportRunResponse)
async def get_import(import_id: UUID, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(HistoricoImportacao)
        .where(HistoricoImportacao.id == import_id)
        .execution_options(populate_existing=True)
    )
    run = result.scalar_one_or_none()
    if run is None:
        raise HTTPException(status_code=404, detail=f"Import run {import_id} not found")
    return ImportRunResponse.model_validate(run)
