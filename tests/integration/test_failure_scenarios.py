"""
Tests for failure scenarios and error handling
"""

import json
import uuid
import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock, patch
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from core.config import ImportConfig
from core.exceptions import EnrichmentParseError
from core.logging import SystemLogger
from ingestion.history import ImportHistory, create_import_run
from ingestion.loaders.entity_writer import EntityWriter
from ingestion.runner import ImportRunner
from models.base import ImportStatus
from models.convenio import Convenio
from models.historico_importacao import HistoricoImportacao
from models.sindicato import Sindicato
from models.system_log import SystemLog


async def load_run(session_factory, import_id):
    async with session_factory() as session:
        return await session.get(HistoricoImportacao, import_id)


async def error_logs(session_factory):
    async with session_factory() as session:
        result = await session.execute(select(SystemLog).where(SystemLog.level == "ERROR"))
        return result.scalars().all()


@pytest.mark.asyncio
async def test_failed_block_is_isolated(db_session, session_factory, ai_config, system_logger):
    """
    Test: one block fails, the others are still imported and the run completes
    """
    records = [{"SINDICATO": f"Sind {i}"} for i in range(4)]
    enricher = AsyncMock()
    enricher.enrich_block.side_effect = [
        EnrichmentParseError("Gemini response does not contain a valid JSON array"),
        [{"SINDICATO": "Sind 2"}, {"SINDICATO": "Sind 3"}],
    ]
    run = await create_import_run(db_session, "planilha.xlsx")
    import_id = run.id

    result = await ImportRunner(db_session, ai_config, system_logger, enricher=enricher).run(
        records, "planilha.xlsx", import_id
    )

    assert result.success is True
    assert result.data.convencoes == 2
    assert enricher.enrich_block.call_count == 2

    stored = await load_run(session_factory, import_id)
    assert stored.status == ImportStatus.COMPLETED
    assert json.loads(stored.detalhes)["blocos_com_erro"] == 1

    errors = await error_logs(session_factory)
    assert any("bloco 1" in log.message for log in errors)


@pytest.mark.asyncio
async def test_all_blocks_fail_falls_back_to_raw_records(db_session, session_factory, ai_config, system_logger):
    records = [{"SINDICATO": "Sind A"}, {"SINDICATO": "Sind B"}, {"SINDICATO": "Sind C"}]
    run = await create_import_run(db_session, "planilha.xlsx")
    import_id = run.id

    with patch("httpx.AsyncClient") as mock_client:
        mock_client.return_value.__aenter__.return_value.post = AsyncMock(
            side_effect=httpx.ConnectError("Connection refused")
        )
        result = await ImportRunner(db_session, ai_config, system_logger).run(
            records, "planilha.xlsx", import_id
        )

    assert result.success is True
    assert result.data.convencoes == 3

    details = json.loads((await load_run(session_factory, import_id)).detalhes)
    assert details["blocos_com_erro"] == 2
    assert details["usou_dados_originais"] is True


@pytest.mark.asyncio
async def test_missing_api_key_fails_run(db_session, session_factory, system_logger):
    """
    Test: AI mode without a key ends the run in erro with no writes
    """
    enricher = AsyncMock()
    config = ImportConfig(gemini_api_key=None, use_ai=True, block_delay_seconds=0)
    run = await create_import_run(db_session, "planilha.xlsx")
    import_id = run.id

    result = await ImportRunner(db_session, config, system_logger, enricher=enricher).run(
        [{"SINDICATO": "Sind A"}], "planilha.xlsx", import_id
    )

    assert result.success is False
    assert result.data is None
    assert result.message.startswith("Erro ao processar dados:")
    assert "Gemini" in result.message
    assert not enricher.enrich_block.called
    assert (await db_session.execute(select(func.count()).select_from(Convenio))).scalar_one() == 0

    stored = await load_run(session_factory, import_id)
    assert stored.status == ImportStatus.ERROR
    assert stored.data_fim is not None
    details = json.loads(stored.detalhes)
    assert "Gemini" in details["erro"]
    assert "timestamp" in details


@pytest.mark.asyncio
async def test_failed_record_is_skipped(db_session, session_factory, offline_config, system_logger):
    """
    Test: a record whose insert fails is logged and the others are kept
    """
    records = [{"SINDICATO": "Sind A"}, {"SINDICATO": "Sind B"}, {"SINDICATO": "Sind C"}]
    original = EntityWriter.create_agreement

    async def flaky_create_agreement(self, union_id, draft, raw_record=None):
        if raw_record and raw_record.get("SINDICATO") == "Sind B":
            raise SQLAlchemyError("constraint violation")
        return await original(self, union_id, draft, raw_record)

    run = await create_import_run(db_session, "planilha.xlsx")
    import_id = run.id

    with patch.object(EntityWriter, "create_agreement", flaky_create_agreement):
        result = await ImportRunner(db_session, offline_config, system_logger).run(
            records, "planilha.xlsx", import_id
        )

    assert result.success is True
    assert result.data.convencoes == 2

    names = (await db_session.execute(select(Sindicato.nome).order_by(Sindicato.nome))).scalars().all()
    assert names == ["Sind A", "Sind C"]

    stored = await load_run(session_factory, import_id)
    assert stored.status == ImportStatus.COMPLETED
    assert stored.registros_processados == 2

    errors = await error_logs(session_factory)
    assert len(errors) == 1
    assert errors[0].module == "import"


@pytest.mark.asyncio
async def test_unknown_run_returns_failure(db_session, offline_config, system_logger):
    result = await ImportRunner(db_session, offline_config, system_logger).run(
        [{"SINDICATO": "Sind A"}], "planilha.xlsx", uuid.uuid4()
    )

    assert result.success is False
    assert "not found" in result.message
    assert (await db_session.execute(select(func.count()).select_from(Convenio))).scalar_one() == 0


@pytest.mark.asyncio
async def test_terminal_state_is_final(db_session, session_factory, offline_config, system_logger):
    run = await create_import_run(db_session, "planilha.xlsx")
    import_id = run.id

    first = await ImportRunner(db_session, offline_config, system_logger).run([], "planilha.xlsx", import_id)
    assert first.success is True

    history = ImportHistory(db_session, import_id)
    await history.fail("late failure")

    second = await ImportRunner(db_session, offline_config, system_logger).run([], "planilha.xlsx", import_id)
    assert second.success is False
    assert "already concluido" in second.message

    stored = await load_run(session_factory, import_id)
    assert stored.status == ImportStatus.COMPLETED
    assert "erro" not in json.loads(stored.detalhes)


@pytest.mark.asyncio
async def test_log_sink_failure_does_not_break_run(db_session, offline_config):
    """
    Test: the import still completes when system_logs cannot be written
    """
    broken_factory = MagicMock(side_effect=RuntimeError("sink unavailable"))
    run = await create_import_run(db_session, "planilha.xlsx")

    result = await ImportRunner(db_session, offline_config, SystemLogger(broken_factory)).run(
        [{"SINDICATO": "Sind A"}], "planilha.xlsx", run.id
    )

    assert result.success is True
    assert result.data.convencoes == 1


@pytest.mark.asyncio
async def test_rollback_failure_still_returns_result(db_session, session_factory, system_logger):
    """
    Test: a rollback error inside the failure path does not escape run()
    """
    config = ImportConfig(gemini_api_key=None, use_ai=True, block_delay_seconds=0)
    run = await create_import_run(db_session, "planilha.xlsx")
    import_id = run.id

    with patch.object(db_session, "rollback", AsyncMock(side_effect=SQLAlchemyError("connection lost"))):
        result = await ImportRunner(db_session, config, system_logger).run(
            [{"SINDICATO": "Sind A"}], "planilha.xlsx", import_id
        )

    assert result.success is False
    assert "Gemini" in result.message

    stored = await load_run(session_factory, import_id)
    assert stored.status == ImportStatus.ERROR
