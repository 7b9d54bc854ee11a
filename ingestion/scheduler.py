import logging
from typing import Optional
from uuid import UUID
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import async_sessionmaker
from core.config import settings
from core.database import async_session_maker
from core.exceptions import SpreadsheetReadError
from ingestion.config_store import load_import_config
from ingestion.extractors.spreadsheet_extractor import parse_raw_json
from ingestion.history import create_import_run
from ingestion.runner import ImportRunner
from models.base import utcnow
from models.uploaded_file import UploadedFile

logger = logging.getLogger(__name__)

SCHEDULER_ORIGIN = "agendador"


class ImportScheduler:
    """Periodically import uploaded files that have not been processed yet"""

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self.scheduler = AsyncIOScheduler()
        self.SessionLocal = session_factory or async_session_maker

    async def run_pending_imports(self) -> int:
        """Job to import pending uploads; returns how many were imported"""
        logger.info("Scheduler: Looking for pending uploads")
        try:
            async with self.SessionLocal() as session:
                result = await session.execute(
                    select(UploadedFile.id)
                    .where(
                        UploadedFile.processed.is_(False),
                        UploadedFile.raw_json.isnot(None),
                        UploadedFile.import_attempts < settings.SCHEDULER_MAX_ATTEMPTS,
                    )
                    .order_by(UploadedFile.uploaded_at)
                    .limit(settings.SCHEDULER_BATCH_LIMIT)
                )
                upload_ids = list(result.scalars().all())
        except Exception as e:
            logger.error(f"Scheduler: could not list pending uploads - {e}")
            return 0

        imported = 0
        for upload_id in upload_ids:
            try:
                if await self.import_upload(upload_id):
                    imported += 1
            except Exception as e:
                logger.error(f"Scheduler: import of upload {upload_id} failed - {e}")

        logger.info(f"Scheduler: imported {imported}/{len(upload_ids)} pending uploads")
        return imported

    async def import_upload(self, upload_id: UUID) -> bool:
        """Import one uploaded file and mark it processed on success"""
        async with self.SessionLocal() as session:
            upload = await session.get(UploadedFile, upload_id)
            if upload is None or upload.processed:
                return False
            filename = upload.filename

            try:
                records = parse_raw_json(upload.raw_json)
            except SpreadsheetReadError as e:
                logger.error(f"Scheduler: upload {filename} has unreadable rows - {e.message}")
                await self._record_failure(session, upload_id, e.message)
                return False

            config = await load_import_config(session, settings)
            run = await create_import_run(session, SCHEDULER_ORIGIN)

            result = await ImportRunner(session, config).run(records, filename, run.id)
            if not result.success:
                logger.warning(f"Scheduler: {filename} - {result.message}")
                await self._record_failure(session, upload_id, result.message)
                return False

            await session.execute(
                update(UploadedFile)
                .where(UploadedFile.id == upload_id)
                .values(processed=True, processed_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return True

    async def _record_failure(self, session, upload_id: UUID, message: str):
        await session.execute(
            update(UploadedFile)
            .where(UploadedFile.id == upload_id)
            .values(
                import_attempts=UploadedFile.import_attempts + 1,
                last_error=message,
            )
            .execution_options(synchronize_session=False)
        )
        await session.commit()

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_pending_imports,
            trigger=IntervalTrigger(minutes=settings.SCHEDULER_INTERVAL_MINUTES),
            id="pending_imports_job",
            replace_existing=True
        )
        self.scheduler.start()
        logger.info("Import Scheduler started")

    def stop(self):
        self.scheduler.shutdown()
        logger.info("Import Scheduler stopped")
