from datetime import datetime, timezone
from sqlalchemy import JSON, Enum
from sqlalchemy.orm import declarative_base
from sqlalchemy.dialects.postgresql import JSONB
import enum

Base = declarative_base()

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def value_enum(enum_cls, length: int = 20) -> Enum:
    """Store enum values (not member names), matching the hosted schema"""
    return Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=length,
    )


# ============================================================================
# ENUMS
# ============================================================================

class ImportStatus(str, enum.Enum):
    """Import run status"""
    PENDING = "pendente"
    IN_PROGRESS = "em_andamento"
    COMPLETED = "concluido"
    ERROR = "erro"

    @property
    def is_terminal(self) -> bool:
        return self in (ImportStatus.COMPLETED, ImportStatus.ERROR)


class HourlyRateType(str, enum.Enum):
    """Hourly rate tag"""
    NORMAL = "normal"
    EXTRA_50 = "extra_50"
    EXTRA_100 = "extra_100"


class LogLevel(str, enum.Enum):
    """System log level"""
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
