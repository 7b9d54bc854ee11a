"""
Transform spreadsheet rows into typed agreement drafts
"""

from typing import Dict, Any, Optional, List
from datetime import date, datetime, timedelta
from uuid import UUID
import math
import re
import logging

from pydantic import BaseModel, ConfigDict

from schemas.drafts import (
    UnionDraft,
    AgreementDraft,
    JobRoleDraft,
    SalaryFloorDraft,
    ParticularityDraft,
    BenefitDraft,
    RecordDrafts,
)

logger = logging.getLogger(__name__)

# Source columns (as produced by the spreadsheet and by Gemini enrichment)
COL_UNION = "SINDICATO"
COL_CNPJ = "CNPJ"
COL_SITE = "SITE"
COL_STATE = "ESTADO"
COL_WAGE_BASE_DATE = "DATA BASE"
COL_VALIDITY_START = "VIGENCIA_INICIO"
COL_VALIDITY_END = "VIGENCIA_FIM"
COL_MEAL_VOUCHER = "VALE REFEIÇÃO"
COL_MEAL_VOUCHER_VALUE = "VALE REFEIÇÃO VALOR"
COL_MEDICAL = "ASSISTENCIA MÉDICA"
COL_LIFE_INSURANCE = "SEGURO DE VIDA"
COL_UNIFORM = "UNIFORME"
COL_NIGHT_SHIFT = "ADICIONAL NOTURNO"
COL_ROLE = "CARGO"
COL_CBO = "CBO"
COL_WEEKLY_HOURS = "CARGA HORÁRIA"
COL_SALARY_FLOOR = "PISO SALARIAL"
COL_HOURLY_NORMAL = "VALOR HORA NORMAL"
COL_HOURLY_EXTRA_50 = "VALOR HORA EXTRA 50%"
COL_HOURLY_EXTRA_100 = "VALOR HORA EXTRA 100%"
COL_PARTICULARITY = "PARTICULARIDADE"
COL_LEAVES = ("LICENÇAS", "LICENÇA")

AGREEMENT_TYPE = "CCT"
DEFAULT_CATEGORY = "Geral"
LEAVE_CATEGORY = "Licença"

# Leading numeric prefix, as JavaScript parseFloat reads it
_FLOAT_PREFIX = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_SPLIT_PATTERN = re.compile(r"[,|]")

_DATE_FORMATS = ("%d/%m/%Y", "%d/%m/%y", "%d-%m-%Y", "%d.%m.%Y")

# Excel stores dates as days since 1899-12-30
_EXCEL_EPOCH = date(1899, 12, 30)
_EXCEL_SERIAL_RANGE = (20000, 80000)


class ProcessingContext(BaseModel):
    """Identifies the run a record belongs to"""
    model_config = ConfigDict(frozen=True)

    file_name: str
    import_id: Optional[UUID] = None
    gemini_api_key: Optional[str] = None


def json_safe(value: Any) -> Any:
    """Convert a spreadsheet cell into something JSON columns accept"""
    if value is None:
        return None
    if isinstance(value, bool) or isinstance(value, (int, str)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    if value != value:  # NaN / NaT
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


class RowNormalizer:
    """
    Normalize one semi-structured record into agreement drafts.

    Handles:
    - Union / agreement mapping and title derivation
    - Lenient numeric, boolean and date parsing (never raises)
    - Splitting of particularities and leaves into separate drafts

    The normalizer performs no I/O; persistence is the EntityWriter's job.
    """

    def __init__(self, context: ProcessingContext):
        self.context = context

    def normalize(self, record: Dict[str, Any]) -> RecordDrafts:
        """
        Normalize a record.

        Returns:
            RecordDrafts; empty when the record has no union name
        """
        union_name = self._parse_text(record.get(COL_UNION))
        if union_name is None:
            logger.debug(f"Skipping record without {COL_UNION} ({self.context.file_name})")
            return RecordDrafts.empty()

        state = self._parse_text(record.get(COL_STATE))
        wage_base_date = self._parse_date(record.get(COL_WAGE_BASE_DATE))

        union = UnionDraft(
            nome=union_name,
            cnpj=self._parse_text(record.get(COL_CNPJ)),
            site=self._parse_text(record.get(COL_SITE)),
            estado=state,
            data_base=wage_base_date,
        )

        agreement = AgreementDraft(
            titulo=f"CONVENÇÃO COLETIVA {state or ''} - {union_name}",
            tipo=AGREEMENT_TYPE,
            estado=state,
            data_base=wage_base_date,
            vigencia_inicio=self._parse_date(record.get(COL_VALIDITY_START)),
            vigencia_fim=self._parse_date(record.get(COL_VALIDITY_END)),
            vale_refeicao=self._parse_text(record.get(COL_MEAL_VOUCHER)),
            vale_refeicao_valor=self._parse_float(record.get(COL_MEAL_VOUCHER_VALUE)),
            assistencia_medica=self._parse_bool(record.get(COL_MEDICAL)),
            seguro_vida=self._parse_bool(record.get(COL_LIFE_INSURANCE)),
            uniforme=self._parse_bool(record.get(COL_UNIFORM)),
            adicional_noturno=self._parse_text(record.get(COL_NIGHT_SHIFT)),
        )

        job_role = None
        salary_floors = []
        role_name = self._parse_text(record.get(COL_ROLE))
        weekly_hours = self._parse_text(record.get(COL_WEEKLY_HOURS))

        if role_name is not None:
            job_role = JobRoleDraft(
                cargo=role_name,
                carga_horaria=weekly_hours,
                cbo=self._parse_text(record.get(COL_CBO)),
                valor_hora_normal=self._parse_float(record.get(COL_HOURLY_NORMAL)),
                valor_hora_extra_50=self._parse_float(record.get(COL_HOURLY_EXTRA_50)),
                valor_hora_extra_100=self._parse_float(record.get(COL_HOURLY_EXTRA_100)),
            )
            if self._parse_text(record.get(COL_SALARY_FLOOR)) is not None or weekly_hours is not None:
                salary_floors.append(SalaryFloorDraft(
                    cargo=role_name,
                    carga_horaria=weekly_hours,
                    piso_salarial=self._parse_float(record.get(COL_SALARY_FLOOR)),
                    valor_hora_normal=job_role.valor_hora_normal,
                    valor_hora_extra_50=job_role.valor_hora_extra_50,
                    valor_hora_extra_100=job_role.valor_hora_extra_100,
                ))

        particularities = [
            ParticularityDraft(conteudo=item, categoria=DEFAULT_CATEGORY)
            for item in self._split_list(record.get(COL_PARTICULARITY))
        ]

        leaves = []
        for column in COL_LEAVES:
            leaves.extend(
                ParticularityDraft(conteudo=item, categoria=LEAVE_CATEGORY)
                for item in self._split_list(record.get(column))
            )

        return RecordDrafts(
            union=union,
            agreement=agreement,
            job_role=job_role,
            salary_floors=salary_floors,
            particularities=particularities,
            benefits=self._extract_benefits(agreement),
            leaves=leaves,
            raw_record=json_safe(dict(record)),
        )

    def _extract_benefits(self, agreement: AgreementDraft) -> List[BenefitDraft]:
        """Agreement-wide benefits derived from the agreement's terms"""
        benefits = []

        if agreement.vale_refeicao is not None or agreement.vale_refeicao_valor is not None:
            benefits.append(BenefitDraft(
                tipo="Vale Refeição",
                valor=(
                    f"{agreement.vale_refeicao_valor:.2f}"
                    if agreement.vale_refeicao_valor is not None else None
                ),
                descricao=agreement.vale_refeicao,
            ))
        if agreement.assistencia_medica:
            benefits.append(BenefitDraft(tipo="Assistência Médica", valor="SIM"))
        if agreement.seguro_vida:
            benefits.append(BenefitDraft(tipo="Seguro de Vida", valor="SIM"))
        if agreement.uniforme:
            benefits.append(BenefitDraft(tipo="Uniforme", valor="SIM"))
        if agreement.adicional_noturno is not None:
            benefits.append(BenefitDraft(
                tipo="Adicional Noturno",
                descricao=agreement.adicional_noturno,
            ))

        return benefits

    @classmethod
    def _split_list(cls, value: Any) -> List[str]:
        """Split comma- or pipe-separated text into trimmed, non-empty items"""
        text = cls._parse_text(value)
        if text is None:
            return []
        return [part.strip() for part in _SPLIT_PATTERN.split(text) if part.strip()]

    @staticmethod
    def _parse_text(value: Any) -> Optional[str]:
        """Safely parse a text cell; blanks become None"""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, float):
            if not math.isfinite(value):
                return None
            if value.is_integer():
                return str(int(value))  # pandas reads "44" as 44.0
        text = str(value).strip()
        return text or None

    @staticmethod
    def _parse_float(value: Any) -> Optional[float]:
        """Safely parse float value with parseFloat semantics"""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            match = _FLOAT_PREFIX.match(value.strip())
            if not match:
                return None
            result = float(match.group(0))
        else:
            try:
                result = float(value)
            except (ValueError, TypeError):
                return None
        return result if math.isfinite(result) else None

    @staticmethod
    def _parse_bool(value: Any) -> bool:
        if value is True:
            return True
        if isinstance(value, str):
            return value.strip().upper() == "SIM"
        return False

    @staticmethod
    def _parse_date(value: Any) -> Optional[date]:
        """Safely parse date value"""
        if value is None or isinstance(value, bool):
            return None
        if value != value:  # NaN / NaT
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, (int, float)):
            low, high = _EXCEL_SERIAL_RANGE
            if low <= value <= high:
                return _EXCEL_EPOCH + timedelta(days=int(value))
            return None

        text = str(value).strip()
        if not text:
            return None
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
        if _ISO_DATE_PREFIX.match(text):
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                return None
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        return None
