"""
Resolve the per-run import configuration from the configuracoes table
"""

from typing import Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import Settings, ImportConfig
from models.configuracao import Configuracao

logger = logging.getLogger(__name__)

GEMINI_API_KEY_SETTING = "gemini_api_key"


async def get_setting(db_session: AsyncSession, key: str) -> Optional[str]:
    """Value stored under `key`, or None when missing or unreadable"""
    try:
        result = await db_session.execute(
            select(Configuracao.valor).where(Configuracao.chave == key)
        )
        value = result.scalar_one_or_none()
    except Exception as e:
        logger.warning(f"Could not read setting '{key}': {e}")
        await db_session.rollback()
        return None

    if value is None or not str(value).strip():
        return None
    return str(value).strip()


async def load_import_config(
    db_session: AsyncSession,
    app_settings: Settings,
    use_ai: Optional[bool] = None
) -> ImportConfig:
    """
    Build the ImportConfig for one run.

    The stored Gemini key wins over GEMINI_API_KEY from the environment. A
    missing key only leaves AI mode unavailable; the runner decides whether
    that is fatal.
    """
    api_key = await get_setting(db_session, GEMINI_API_KEY_SETTING) or app_settings.GEMINI_API_KEY

    if not api_key:
        logger.info("No Gemini API key configured; AI enrichment unavailable")

    return ImportConfig.from_settings(app_settings, gemini_api_key=api_key or None, use_ai=use_ai)
