"""
Import Runner - orchestrates enrichment, normalization and persistence.

This module drives one import run end to end:
- Run record lifecycle (pendente -> em_andamento -> concluido | erro)
- Optional Gemini enrichment, block by block, with per-block isolation
- Per-record normalization and persistence with per-record isolation
- Aggregated counts and a structured result instead of exceptions
"""

from typing import Dict, Any, List, Optional
from uuid import UUID
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.config import ImportConfig
from core.exceptions import ConfigurationError, ImportPipelineError
from core.logging import SystemLogger
from ingestion.enrichment.gemini import GeminiEnricher
from ingestion.history import ImportHistory
from ingestion.loaders.entity_writer import EntityWriter
from ingestion.transformers.batcher import split_into_blocks
from ingestion.transformers.normalizer import RowNormalizer, ProcessingContext
from models.base import utcnow
from schemas.drafts import RecordDrafts
from schemas.imports import ImportCounts, ImportResult

logger = logging.getLogger(__name__)

LOG_MODULE = "import"


class ImportRunner:
    """
    Import orchestrator

    Responsibilities:
    - Move the run record through its states (terminal states are final)
    - Enrich blocks with Gemini when AI mode is on
    - Normalize and persist every record, one unit of work each
    - Report counts; never raise to the caller
    """

    def __init__(
        self,
        db_session: AsyncSession,
        config: ImportConfig,
        system_logger: Optional[SystemLogger] = None,
        enricher: Optional[GeminiEnricher] = None
    ):
        self.db = db_session
        self.config = config
        self.system_logger = system_logger or SystemLogger.for_session(db_session)
        self.enricher = enricher or GeminiEnricher(config)

    async def run(
        self,
        records: List[Dict[str, Any]],
        file_name: str,
        import_id: UUID
    ) -> ImportResult:
        """
        Run the import for a list of records.

        Args:
            records: Rows as read from the spreadsheet (column name -> value)
            file_name: Original file name, recorded in the run details
            import_id: Id of an existing historico_importacao row

        Returns:
            ImportResult with counts on success, or success=False and the
            error message on failure
        """
        history = ImportHistory(self.db, import_id)
        counts = ImportCounts()

        try:
            columns = {column for record in records for column in record.keys()}
            await history.start({
                "arquivo_original": file_name,
                "registros_detectados": len(records),
                "colunas_detectadas": len(columns),
                "inicio_processamento": utcnow().isoformat(),
            })
            await self.system_logger.info(
                f"Iniciando importação de {file_name}: {len(records)} registros", LOG_MODULE
            )

            if self.config.use_ai and not self.config.ai_available:
                raise ConfigurationError(
                    "Chave da API do Gemini não configurada",
                    context={"import_id": str(import_id)}
                )

            if self.config.use_ai:
                working_records = await self._enrich(records, history)
            else:
                working_records = list(records)

            # --------------------------------------------------
            # NORMALIZE + PERSIST
            # --------------------------------------------------
            normalizer = RowNormalizer(ProcessingContext(
                file_name=file_name,
                import_id=import_id,
                gemini_api_key=self.config.gemini_api_key,
            ))
            writer = EntityWriter(self.db, import_id)

            for index, record in enumerate(working_records):
                drafts = await self._process_record(normalizer, writer, record, index)
                counts.add(ImportCounts.from_drafts(drafts))

            await history.complete(counts.convencoes, counts.model_dump())

            message = f"Importação concluída: {counts.convencoes} convenções processadas"
            logger.info(
                f"Import {import_id} completed - "
                f"Convenções: {counts.convencoes}, Pisos: {counts.pisos_salariais}, "
                f"Particularidades: {counts.particularidades}"
            )
            await self.system_logger.info(message, LOG_MODULE, details=counts.model_dump())

            return ImportResult(success=True, message=message, data=counts)

        except Exception as e:
            error_message = e.message if isinstance(e, ImportPipelineError) else str(e)
            logger.exception(f"Import {import_id} failed")

            try:
                await self.db.rollback()
            except Exception as rollback_error:
                logger.error(f"Rollback failed for import {import_id}: {rollback_error}")

            try:
                await history.fail(error_message)
            except Exception as history_error:
                logger.error(f"Failed to mark import {import_id} as erro: {history_error}")

            await self.system_logger.error(f"Erro ao processar dados: {error_message}", LOG_MODULE)

            return ImportResult(
                success=False,
                message=f"Erro ao processar dados: {error_message}",
            )

    async def _enrich(self, records: List[Dict[str, Any]], history: ImportHistory) -> List[Dict[str, Any]]:
        """Enrich every block; fall back to the raw records if nothing comes back"""
        blocks = split_into_blocks(records, self.config.block_size)
        enriched: List[Dict[str, Any]] = []
        failed_blocks = 0

        for index, block in enumerate(blocks, start=1):
            try:
                enriched.extend(await self.enricher.enrich_block(block))
                await self.system_logger.info(
                    f"Bloco {index}/{len(blocks)} processado com Gemini", LOG_MODULE
                )
            except Exception as e:
                failed_blocks += 1
                logger.error(f"Block {index}/{len(blocks)} enrichment failed: {e}")
                await self.system_logger.error(
                    f"Erro ao processar bloco {index} com Gemini: {e}", LOG_MODULE
                )

            if index < len(blocks):
                await asyncio.sleep(self.config.block_delay_seconds)

        fallback = not enriched and bool(records)
        if fallback:
            await self.system_logger.warn(
                "Nenhum dado retornado pelo Gemini, usando dados originais", LOG_MODULE
            )

        await history.update_details({
            "blocos_total": len(blocks),
            "blocos_com_erro": failed_blocks,
            "registros_enriquecidos": len(enriched),
            "usou_dados_originais": fallback,
        })

        return list(records) if fallback else enriched

    async def _process_record(
        self,
        normalizer: RowNormalizer,
        writer: EntityWriter,
        record: Dict[str, Any],
        index: int
    ) -> RecordDrafts:
        """Normalize and persist one record; failures yield empty drafts"""
        try:
            return await writer.persist(normalizer.normalize(record))
        except Exception as e:
            logger.error(f"Record {index} failed: {e}")
            await self.system_logger.error(
                f"Erro ao processar linha {index + 1}: {e}", LOG_MODULE
            )
            return RecordDrafts.empty()
