"""
Integration tests for the entity writer
"""

import pytest
from unittest.mock import patch
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from core.exceptions import EntityWriteError
from ingestion.loaders.entity_writer import EntityWriter, GENERIC_ROLE_NAME
from ingestion.transformers.normalizer import RowNormalizer, ProcessingContext
from models.sindicato import Sindicato
from models.convenio import Convenio, BeneficioGeral
from models.cargo import Cargo, PisoSalarial, ValorHora, Particularidade
from models.base import HourlyRateType
from schemas.drafts import RecordDrafts


@pytest.fixture
def normalizer():
    return RowNormalizer(ProcessingContext(file_name="planilha.xlsx"))


async def count(session, model):
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_persist_full_record(db_session, normalizer, sample_row):
    """Test union, agreement, role, floor, rates and particularities are written"""
    writer = EntityWriter(db_session)

    result = await writer.persist(normalizer.normalize(sample_row))

    union = (await db_session.execute(select(Sindicato))).scalar_one()
    agreement = (await db_session.execute(select(Convenio))).scalar_one()
    role = (await db_session.execute(select(Cargo))).scalar_one()
    floor = (await db_session.execute(select(PisoSalarial))).scalar_one()
    rates = (await db_session.execute(select(ValorHora))).scalars().all()
    particularities = (await db_session.execute(
        select(Particularidade).order_by(Particularidade.conteudo.desc())
    )).scalars().all()

    assert union.nome == "Sind A"
    assert agreement.titulo == "CONVENÇÃO COLETIVA SP - Sind A"
    assert agreement.sindicato_id == union.id
    assert agreement.dados_brutos["CARGO"] == "Atendente"
    assert role.cargo == "Atendente"
    assert role.convenio_id == agreement.id
    assert floor.valor == 1000
    assert floor.cargo_id == role.id
    assert {(r.tipo, r.valor) for r in rates} == {
        (HourlyRateType.NORMAL, 10),
        (HourlyRateType.EXTRA_50, 15),
        (HourlyRateType.EXTRA_100, 20),
    }
    assert [p.conteudo for p in particularities] == ["Uma", "Duas"]
    assert all(p.cargo_id == role.id and p.categoria == "Geral" for p in particularities)

    assert result.agreement.sindicato_id == union.id
    assert result.convenio_id == agreement.id
    assert result.cargo_id == role.id
    assert result.salary_floors[0].convenio_id == agreement.id
    assert {p.cargo_id for p in result.particularities} == {role.id}


@pytest.mark.asyncio
async def test_union_resolved_once_per_name(db_session, normalizer):
    """Test the same union name maps to one row, across records and writers"""
    writer = EntityWriter(db_session)
    first = await writer.persist(normalizer.normalize({"SINDICATO": "Sind A", "ESTADO": "SP"}))
    second = await writer.persist(normalizer.normalize({"SINDICATO": "Sind A", "ESTADO": "RJ"}))

    assert first.agreement.sindicato_id == second.agreement.sindicato_id
    assert await count(db_session, Sindicato) == 1
    assert await count(db_session, Convenio) == 2

    # A fresh writer (new run) finds the existing union by name
    other_run = await EntityWriter(db_session).persist(normalizer.normalize({"SINDICATO": "Sind A"}))
    assert other_run.agreement.sindicato_id == first.agreement.sindicato_id
    assert await count(db_session, Sindicato) == 1


@pytest.mark.asyncio
async def test_union_cache_hit_skips_lookup(db_session):
    writer = EntityWriter(db_session)
    union_id = await writer.resolve_or_create_union("Sind A")
    await db_session.commit()

    with patch.object(db_session, "execute", wraps=db_session.execute) as spy:
        assert await writer.resolve_or_create_union("Sind A") == union_id
        assert not spy.called


@pytest.mark.asyncio
async def test_hourly_rates_written_without_salary_floor(db_session, normalizer):
    """Test a role keeps its hourly rates when the row has no floor or hours"""
    result = await EntityWriter(db_session).persist(normalizer.normalize({
        "SINDICATO": "Sind A",
        "CARGO": "Atendente",
        "VALOR HORA NORMAL": "10",
    }))

    rate = (await db_session.execute(select(ValorHora))).scalar_one()
    assert result.salary_floors == []
    assert await count(db_session, PisoSalarial) == 0
    assert rate.tipo == HourlyRateType.NORMAL
    assert rate.valor == 10
    assert rate.cargo_id == result.cargo_id


@pytest.mark.asyncio
async def test_empty_drafts_write_nothing(db_session):
    result = await EntityWriter(db_session).persist(RecordDrafts.empty())

    assert result.is_empty
    for model in (Sindicato, Convenio, Cargo, PisoSalarial, Particularidade):
        assert await count(db_session, model) == 0


@pytest.mark.asyncio
async def test_particularities_without_role_use_generic_role(db_session, normalizer):
    result = await EntityWriter(db_session).persist(normalizer.normalize({
        "SINDICATO": "Sind A",
        "PARTICULARIDADE": "Adicional de insalubridade",
        "LICENÇAS": "Licença casamento | Licença nojo",
    }))

    role = (await db_session.execute(select(Cargo))).scalar_one()
    assert role.cargo == GENERIC_ROLE_NAME
    assert result.cargo_id == role.id
    assert await count(db_session, Particularidade) == 3
    assert [leave.categoria for leave in result.leaves] == ["Licença", "Licença"]


@pytest.mark.asyncio
async def test_benefits_are_written(db_session, normalizer, sample_rows):
    result = await EntityWriter(db_session).persist(normalizer.normalize(sample_rows[0]))

    benefits = (await db_session.execute(select(BeneficioGeral))).scalars().all()
    assert {b.tipo for b in benefits} == {"Vale Refeição", "Assistência Médica", "Uniforme"}
    assert all(b.convenio_id == result.convenio_id for b in benefits)


@pytest.mark.asyncio
async def test_failure_rolls_back_record_and_evicts_union(db_session, normalizer, sample_row):
    """Test a failing insert leaves no partial rows and no stale cache entry"""
    writer = EntityWriter(db_session)

    with patch.object(writer, "create_salary_floor", side_effect=SQLAlchemyError("disk full")):
        with pytest.raises(EntityWriteError) as exc_info:
            await writer.persist(normalizer.normalize(sample_row))

    assert exc_info.value.context["stage"] == "piso_salarial"
    assert exc_info.value.context["union_name"] == "Sind A"
    for model in (Sindicato, Convenio, Cargo, PisoSalarial, ValorHora, Particularidade):
        assert await count(db_session, model) == 0

    # The writer recovers and recreates the union on the next record
    result = await writer.persist(normalizer.normalize(sample_row))
    union = (await db_session.execute(select(Sindicato))).scalar_one()
    assert result.agreement.sindicato_id == union.id
