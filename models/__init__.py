"""
SQLAlchemy ORM models for database tables.

This package defines the relational schema the import pipeline writes to:

Models:
    base: Base declarative class and shared enums (ImportStatus, HourlyRateType, LogLevel)
    sindicato: Union registry, resolved by exact name
    convenio: Collective agreements and agreement-wide benefits
    cargo: Job roles with salary floors, hourly rates and particularities
    historico_importacao: Import run tracking
    uploaded_file: Uploaded spreadsheets awaiting import
    configuracao: Key/value system settings
    system_log: Application log sink

Database Schema:
    Table names follow the hosted Supabase schema. JSON columns use JSONB
    on PostgreSQL and plain JSON elsewhere.

Relationships:
    - Sindicato → Convenio (one-to-many)
    - Convenio → Cargo, BeneficioGeral (one-to-many)
    - Cargo → PisoSalarial, ValorHora, Particularidade (one-to-many)
    - HistoricoImportacao → Convenio (one-to-many, traceability)
"""

from models.base import Base, ImportStatus, HourlyRateType, LogLevel
from models.sindicato import Sindicato
from models.convenio import Convenio, BeneficioGeral
from models.cargo import Cargo, PisoSalarial, ValorHora, Particularidade
from models.historico_importacao import HistoricoImportacao
from models.uploaded_file import UploadedFile
from models.configuracao import Configuracao
from models.system_log import SystemLog

__all__ = [
    "Base",
    "ImportStatus",
    "HourlyRateType",
    "LogLevel",
    "Sindicato",
    "Convenio",
    "BeneficioGeral",
    "Cargo",
    "PisoSalarial",
    "ValorHora",
    "Particularidade",
    "HistoricoImportacao",
    "UploadedFile",
    "Configuracao",
    "SystemLog",
]
