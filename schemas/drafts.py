"""
Pydantic schemas for the drafts produced by the row normalizer.

Drafts are plain data: the normalizer fills everything it can derive from
the source record and the entity writer fills the foreign keys
(`sindicato_id`, `convenio_id`, `cargo_id`) once the owning rows exist.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date
from uuid import UUID


class UnionDraft(BaseModel):
    """Union attributes used when the union has to be created"""
    nome: str = Field(..., min_length=1)
    cnpj: Optional[str] = None
    site: Optional[str] = None
    estado: Optional[str] = None
    data_base: Optional[date] = None


class AgreementDraft(BaseModel):
    titulo: str
    tipo: str = "CCT"
    estado: Optional[str] = None
    data_base: Optional[date] = None
    vigencia_inicio: Optional[date] = None
    vigencia_fim: Optional[date] = None
    vale_refeicao: Optional[str] = None
    vale_refeicao_valor: Optional[float] = None
    assistencia_medica: Optional[bool] = None
    seguro_vida: Optional[bool] = None
    uniforme: Optional[bool] = None
    adicional_noturno: Optional[str] = None
    sindicato_id: Optional[UUID] = None


class JobRoleDraft(BaseModel):
    cargo: str
    carga_horaria: Optional[str] = None
    cbo: Optional[str] = None
    valor_hora_normal: Optional[float] = None
    valor_hora_extra_50: Optional[float] = None
    valor_hora_extra_100: Optional[float] = None


class SalaryFloorDraft(BaseModel):
    convenio_id: Optional[UUID] = None
    cargo: str
    carga_horaria: Optional[str] = None
    piso_salarial: Optional[float] = None
    valor_hora_normal: Optional[float] = None
    valor_hora_extra_50: Optional[float] = None
    valor_hora_extra_100: Optional[float] = None


class ParticularityDraft(BaseModel):
    cargo_id: Optional[UUID] = None
    conteudo: str
    categoria: str = "Geral"


class BenefitDraft(BaseModel):
    convenio_id: Optional[UUID] = None
    tipo: str
    valor: Optional[str] = None
    descricao: Optional[str] = None


class RecordDrafts(BaseModel):
    """Everything one input record turns into"""
    union: Optional[UnionDraft] = None
    agreement: Optional[AgreementDraft] = None
    job_role: Optional[JobRoleDraft] = None
    salary_floors: List[SalaryFloorDraft] = Field(default_factory=list)
    particularities: List[ParticularityDraft] = Field(default_factory=list)
    benefits: List[BenefitDraft] = Field(default_factory=list)
    leaves: List[ParticularityDraft] = Field(default_factory=list)
    raw_record: Optional[dict] = None

    # Filled by the entity writer
    convenio_id: Optional[UUID] = None
    cargo_id: Optional[UUID] = None

    @classmethod
    def empty(cls) -> "RecordDrafts":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.agreement is None
