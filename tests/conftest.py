"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from typing import AsyncGenerator

from core.config import ImportConfig
from core.logging import SystemLogger
from models import Base

# In-memory SQLite shared by every session of a test
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def system_logger(session_factory):
    return SystemLogger(session_factory)


@pytest.fixture
def offline_config():
    """Run configuration without AI enrichment"""
    return ImportConfig(use_ai=False, block_delay_seconds=0)


@pytest.fixture
def ai_config():
    """Run configuration with AI enrichment and no inter-block delay"""
    return ImportConfig(gemini_api_key="test-key", use_ai=True, block_size=2, block_delay_seconds=0)


@pytest.fixture
def sample_row():
    """Spreadsheet row with a role, a salary floor and two particularities"""
    return {
        "SINDICATO": "Sind A",
        "ESTADO": "SP",
        "CARGO": "Atendente",
        "CARGA HORÁRIA": "44",
        "PISO SALARIAL": "1000",
        "VALOR HORA NORMAL": "10",
        "VALOR HORA EXTRA 50%": "15",
        "VALOR HORA EXTRA 100%": "20",
        "PARTICULARIDADE": "Uma, Duas",
    }


@pytest.fixture
def sample_rows():
    """Rows from a typical spreadsheet"""
    return [
        {
            "SINDICATO": "Sindicato dos Comerciários de São Paulo",
            "CNPJ": "60.983.047/0001-10",
            "ESTADO": "SP",
            "DATA BASE": "01/09/2024",
            "VIGENCIA_INICIO": "2024-09-01",
            "VIGENCIA_FIM": "2025-08-31",
            "CARGO": "Vendedor",
            "CARGA HORÁRIA": "44",
            "PISO SALARIAL": "2.150,00",
            "VALE REFEIÇÃO": "Diário",
            "VALE REFEIÇÃO VALOR": "35.5",
            "ASSISTENCIA MÉDICA": "SIM",
            "SEGURO DE VIDA": "NÃO",
            "UNIFORME": "sim ",
            "PARTICULARIDADE": "Quebra de caixa | Comissão mínima",
            "LICENÇAS": "Licença paternidade 20 dias",
        },
        {
            "SINDICATO": "Sindicato dos Comerciários de São Paulo",
            "ESTADO": "SP",
            "CARGO": "Caixa",
            "PISO SALARIAL": 2300,
        },
        {
            "ESTADO": "RJ",
            "CARGO": "Sem sindicato",
        },
    ]
