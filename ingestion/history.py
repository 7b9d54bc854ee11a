"""
Import run record (historico_importacao) management
"""

from typing import Dict, Any, Optional
from uuid import UUID
import json
import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import ImportStatus, utcnow
from models.historico_importacao import HistoricoImportacao
from core.exceptions import ImportRunError

logger = logging.getLogger(__name__)

_TERMINAL_STATES = [ImportStatus.COMPLETED, ImportStatus.ERROR]


async def create_import_run(db_session: AsyncSession, origem: str) -> HistoricoImportacao:
    """Create a pending run record"""
    run = HistoricoImportacao(
        status=ImportStatus.PENDING,
        origem=origem,
        data_inicio=utcnow(),
    )
    db_session.add(run)
    await db_session.commit()
    await db_session.refresh(run)
    return run


class ImportHistory:
    """
    Drive one run record through pendente -> em_andamento -> concluido | erro.

    Every transition is an UPDATE guarded on a non-terminal status and is
    committed immediately. `detalhes` accumulates across updates.
    """

    def __init__(self, db_session: AsyncSession, import_id: UUID):
        self.db = db_session
        self.import_id = import_id
        self.details: Dict[str, Any] = {}

    async def _apply(self, operation: str, **values) -> bool:
        values["detalhes"] = json.dumps(self.details, ensure_ascii=False, default=str)
        result = await self.db.execute(
            update(HistoricoImportacao)
            .where(
                HistoricoImportacao.id == self.import_id,
                HistoricoImportacao.status.notin_(_TERMINAL_STATES),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        if result.rowcount == 0:
            logger.warning(f"Import run {self.import_id}: '{operation}' ignored (missing or finished)")
            return False
        return True

    async def start(self, details: Dict[str, Any]) -> None:
        """
        Mark the run em_andamento.

        Raises:
            ImportRunError: Run not found or already finished
        """
        self.details.update(details)
        if not await self._apply("start", status=ImportStatus.IN_PROGRESS):
            existing = await self.db.execute(
                select(HistoricoImportacao.status).where(HistoricoImportacao.id == self.import_id)
            )
            status = existing.scalar_one_or_none()
            reason = "not found" if status is None else f"already {ImportStatus(status).value}"
            raise ImportRunError(
                f"Import run {self.import_id} cannot start: {reason}",
                context={"import_id": str(self.import_id), "operation": "start"}
            )

    async def update_details(self, details: Dict[str, Any]) -> None:
        self.details.update(details)
        await self._apply("update_details")

    async def complete(self, records_processed: int, details: Optional[Dict[str, Any]] = None) -> None:
        self.details.update(details or {})
        self.details["fim_processamento"] = utcnow().isoformat()
        await self._apply(
            "complete",
            status=ImportStatus.COMPLETED,
            data_fim=utcnow(),
            registros_processados=records_processed,
        )

    async def fail(self, message: str) -> None:
        self.details.update({
            "erro": message,
            "timestamp": utcnow().isoformat(),
        })
        await self._apply("fail", status=ImportStatus.ERROR, data_fim=utcnow())
