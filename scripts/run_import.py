"""
Import a collective-agreement spreadsheet from the command line.

Usage:
    python scripts/run_import.py planilha.xlsx [--no-ai]
"""

import argparse
import asyncio
import sys
import os
import logging
from typing import Optional

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from core.config import settings
from core.exceptions import SpreadsheetReadError
from core.logging import setup_logging
from ingestion.config_store import load_import_config
from ingestion.extractors.spreadsheet_extractor import SpreadsheetExtractor
from ingestion.history import create_import_run
from ingestion.runner import ImportRunner

logger = logging.getLogger(__name__)


async def run_import(file_path: str, use_ai: Optional[bool] = None) -> bool:
    """Read the spreadsheet and run one import; returns the run outcome"""
    extractor = SpreadsheetExtractor(file_path)
    try:
        records = await extractor.fetch_data()
    except SpreadsheetReadError as e:
        logger.error(str(e))
        return False

    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    try:
        async with AsyncSessionLocal() as session:
            config = await load_import_config(session, settings, use_ai=use_ai)
            run = await create_import_run(session, extractor.file_name)
            import_id = run.id

            logger.info(f"Import {import_id}: {len(records)} records from {extractor.file_name}")
            result = await ImportRunner(session, config).run(records, extractor.file_name, import_id)
    finally:
        await engine.dispose()

    if result.success:
        counts = result.data
        logger.info(
            f"{result.message} "
            f"(pisos={counts.pisos_salariais}, particularidades={counts.particularidades}, "
            f"beneficios={counts.beneficios}, licencas={counts.licencas})"
        )
    else:
        logger.error(result.message)
    return result.success


def main():
    parser = argparse.ArgumentParser(description="Import a collective-agreement spreadsheet")
    parser.add_argument("file", help="Path to a .xlsx, .xls or .csv file")
    parser.add_argument("--no-ai", action="store_true", help="Skip Gemini enrichment")
    args = parser.parse_args()

    setup_logging()
    ok = asyncio.run(run_import(args.file, use_ai=False if args.no_ai else None))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
