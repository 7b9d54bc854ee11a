"""
Import pipeline components for collective-agreement spreadsheets.

Modules:
    runner: Import orchestrator (run lifecycle, enrichment, persistence)
    history: historico_importacao state transitions
    config_store: Per-run configuration resolved from configuracoes
    scheduler: APScheduler job importing pending uploaded files

Subpackages:
    extractors: Spreadsheet reading (Excel and CSV via pandas)
    transformers: Row normalization and block batching
    enrichment: Gemini adapter and JSON extraction from generated text
    loaders: Entity writer (union resolution and inserts)

Architecture:
    raw rows -> blocks -> [Gemini enrichment] -> records
             -> RowNormalizer -> EntityWriter -> counts -> run finalized

    Block failures and record failures are isolated and logged; only
    configuration or run-record failures end a run in `erro`.

Usage:
    from ingestion.runner import ImportRunner
    from ingestion.history import create_import_run
    from ingestion.config_store import load_import_config

Example:
    config = await load_import_config(session, settings, use_ai=False)
    run = await create_import_run(session, "planilha.xlsx")

    result = await ImportRunner(session, config).run(records, "planilha.xlsx", run.id)
    print(result.message)
"""

__all__ = [
    "ImportRunner",
    "ImportHistory",
    "ImportScheduler",
    "SpreadsheetExtractor",
    "RowNormalizer",
    "split_into_blocks",
    "GeminiEnricher",
    "extract_json_array",
    "EntityWriter",
]
