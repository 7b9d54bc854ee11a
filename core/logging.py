"""
Logging configuration and the system_logs sink
"""

import logging
import sys
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.config import settings
from models.base import LogLevel
from models.system_log import SystemLog

logger = logging.getLogger(__name__)

_STDLIB_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


def setup_logging():
    """Configure application logging"""

    # Get log level from settings
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Set SQLAlchemy and HTTP client logging to WARNING to reduce noise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.info(f"Logging configured at {settings.LOG_LEVEL} level")


class SystemLogger:
    """
    Write-only sink for the `system_logs` table.

    Each entry is written through its own short-lived session so it never
    joins (or is rolled back with) the caller's unit of work. Every entry is
    mirrored to the stdlib logger. A failure to write is reported as a
    warning and otherwise ignored.
    """

    def __init__(self, session_factory: async_sessionmaker, mirror: Optional[logging.Logger] = None):
        self.session_factory = session_factory
        self.mirror = mirror or logging.getLogger("system_log")

    @classmethod
    def for_session(cls, db_session: AsyncSession) -> "SystemLogger":
        """Build a sink bound to the same engine as an existing session"""
        return cls(
            async_sessionmaker(db_session.bind, class_=AsyncSession, expire_on_commit=False)
        )

    async def add(
        self,
        level: LogLevel,
        message: str,
        module: str = "import",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        level = LogLevel(level)
        self.mirror.log(_STDLIB_LEVELS[level], f"[{module}] {message}")

        try:
            async with self.session_factory() as session:
                session.add(SystemLog(
                    level=level.value,
                    message=message,
                    module=module,
                    details=details
                ))
                await session.commit()
        except Exception as e:
            logger.warning(f"Failed to write system log entry: {e}")

    async def info(self, message: str, module: str = "import", **kwargs) -> None:
        await self.add(LogLevel.INFO, message, module, **kwargs)

    async def warn(self, message: str, module: str = "import", **kwargs) -> None:
        await self.add(LogLevel.WARN, message, module, **kwargs)

    async def error(self, message: str, module: str = "import", **kwargs) -> None:
        await self.add(LogLevel.ERROR, message, module, **kwargs)
