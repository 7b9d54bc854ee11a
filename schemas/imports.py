"""
Pydantic schemas for import requests, results and run history
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID
import json
from models.base import ImportStatus
from schemas.drafts import RecordDrafts


class ImportCounts(BaseModel):
    """Run-level totals"""
    convencoes: int = 0
    pisos_salariais: int = 0
    particularidades: int = 0
    beneficios: int = 0
    licencas: int = 0

    @classmethod
    def from_drafts(cls, drafts: RecordDrafts) -> "ImportCounts":
        """Counts contributed by one persisted record"""
        if drafts.is_empty:
            return cls()
        return cls(
            convencoes=1,
            pisos_salariais=len(drafts.salary_floors),
            particularidades=len(drafts.particularities),
            beneficios=len(drafts.benefits),
            licencas=len(drafts.leaves),
        )

    def add(self, other: "ImportCounts") -> None:
        self.convencoes += other.convencoes
        self.pisos_salariais += other.pisos_salariais
        self.particularidades += other.particularidades
        self.beneficios += other.beneficios
        self.licencas += other.licencas


class ImportResult(BaseModel):
    """Structured outcome returned to the caller; never an exception"""
    success: bool
    message: str
    data: Optional[ImportCounts] = None


class ImportRequest(BaseModel):
    """Body of POST /imports: rows already parsed by the front end"""
    file_name: str = Field(..., min_length=1, max_length=255)
    records: List[Dict[str, Any]] = Field(default_factory=list)
    use_ai: Optional[bool] = Field(None, description="Override IMPORT_USE_AI for this run")


class ImportRunResponse(BaseModel):
    id: UUID
    status: ImportStatus
    origem: Optional[str] = None
    data_inicio: datetime
    data_fim: Optional[datetime] = None
    registros_processados: Optional[int] = None
    detalhes: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    @field_validator("detalhes", mode="before")
    @classmethod
    def parse_detalhes(cls, v):
        """`detalhes` is stored as JSON text"""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except ValueError:
                return {"raw": v}
            return parsed if isinstance(parsed, dict) else {"raw": parsed}
        return v


class ImportRunList(BaseModel):
    items: List[ImportRunResponse]
    total: int


class ImportResponse(BaseModel):
    import_id: UUID
    result: ImportResult


class HealthCheckResponse(BaseModel):
    status: str
    timestamp: datetime
    database_connected: bool
    last_import_status: Optional[ImportStatus] = None
    last_import_at: Optional[datetime] = None

    model_config = ConfigDict(use_enum_values=True)
