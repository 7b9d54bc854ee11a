"""
Persist normalized agreement drafts into the relational store
"""

from typing import Dict, List, Optional, Set
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from models.sindicato import Sindicato
from models.convenio import Convenio, BeneficioGeral
from models.cargo import Cargo, PisoSalarial, ValorHora, Particularidade
from models.base import HourlyRateType
from schemas.drafts import (
    UnionDraft,
    AgreementDraft,
    JobRoleDraft,
    SalaryFloorDraft,
    ParticularityDraft,
    BenefitDraft,
    RecordDrafts,
)
from core.exceptions import EntityWriteError
import logging

logger = logging.getLogger(__name__)

GENERIC_ROLE_NAME = "Geral"


class EntityWriter:
    """
    Write one record's entities as a single unit of work.

    Ensures:
    - Unions are resolved by exact name (cache, then lookup, then insert)
    - Every other entity is always inserted, never deduplicated
    - A failed record leaves no partial rows behind

    The union cache lives as long as the writer, so one writer should be
    used per import run.
    """

    def __init__(self, db_session: AsyncSession, import_id: Optional[UUID] = None):
        self.db = db_session
        self.import_id = import_id
        self._union_cache: Dict[str, UUID] = {}
        self._uncommitted_unions: Set[str] = set()

    async def resolve_or_create_union(self, name: str, draft: Optional[UnionDraft] = None) -> UUID:
        """Return the id of the union named `name`, creating it if absent"""
        if name in self._union_cache:
            return self._union_cache[name]

        result = await self.db.execute(
            select(Sindicato.id)
            .where(Sindicato.nome == name)
            .order_by(Sindicato.created_at)
            .limit(1)
        )
        union_id = result.scalar_one_or_none()

        if union_id is None:
            draft = draft or UnionDraft(nome=name)
            union = Sindicato(
                nome=name,
                cnpj=draft.cnpj,
                site=draft.site,
                estado=draft.estado,
                data_base=draft.data_base,
            )
            self.db.add(union)
            await self.db.flush()
            union_id = union.id
            self._uncommitted_unions.add(name)
            logger.debug(f"Created union '{name}' ({union_id})")

        self._union_cache[name] = union_id
        return union_id

    async def create_agreement(
        self,
        union_id: UUID,
        draft: AgreementDraft,
        raw_record: Optional[dict] = None
    ) -> UUID:
        agreement = Convenio(
            titulo=draft.titulo,
            tipo=draft.tipo,
            estado=draft.estado,
            data_base=draft.data_base,
            vigencia_inicio=draft.vigencia_inicio,
            vigencia_fim=draft.vigencia_fim,
            vale_refeicao=draft.vale_refeicao,
            vale_refeicao_valor=draft.vale_refeicao_valor,
            assistencia_medica=draft.assistencia_medica,
            seguro_vida=draft.seguro_vida,
            uniforme=draft.uniforme,
            adicional_noturno=draft.adicional_noturno,
            sindicato_id=union_id,
            historico_importacao_id=self.import_id,
            dados_brutos=raw_record,
        )
        self.db.add(agreement)
        await self.db.flush()
        return agreement.id

    async def create_job_role(self, agreement_id: UUID, draft: JobRoleDraft) -> UUID:
        role = Cargo(
            cargo=draft.cargo,
            carga_horaria=draft.carga_horaria,
            cbo=draft.cbo,
            convenio_id=agreement_id,
        )
        self.db.add(role)
        await self.db.flush()
        return role.id

    async def create_salary_floor(self, role_id: UUID, draft: SalaryFloorDraft) -> UUID:
        floor = PisoSalarial(
            valor=draft.piso_salarial,
            descricao=draft.carga_horaria,
            cargo_id=role_id,
        )
        self.db.add(floor)
        await self.db.flush()
        return floor.id

    async def create_hourly_rate(self, role_id: UUID, rate_type: HourlyRateType, value: float) -> UUID:
        rate = ValorHora(tipo=rate_type, valor=value, cargo_id=role_id)
        self.db.add(rate)
        await self.db.flush()
        return rate.id

    async def create_particularity(
        self,
        role_id: UUID,
        draft: ParticularityDraft,
        agreement_id: Optional[UUID] = None
    ) -> UUID:
        particularity = Particularidade(
            conteudo=draft.conteudo,
            categoria=draft.categoria,
            cargo_id=role_id,
            convenio_id=agreement_id,
        )
        self.db.add(particularity)
        await self.db.flush()
        return particularity.id

    async def create_benefit(self, agreement_id: UUID, draft: BenefitDraft) -> UUID:
        benefit = BeneficioGeral(
            tipo=draft.tipo,
            valor=draft.valor,
            descricao=draft.descricao,
            convenio_id=agreement_id,
        )
        self.db.add(benefit)
        await self.db.flush()
        return benefit.id

    async def persist(self, drafts: RecordDrafts) -> RecordDrafts:
        """
        Persist every entity of one record and commit.

        Args:
            drafts: Output of RowNormalizer.normalize

        Returns:
            The drafts with sindicato_id, convenio_id and cargo_id filled in

        Raises:
            EntityWriteError: The record was rolled back
        """
        if drafts.is_empty:
            return drafts

        union_name = drafts.union.nome
        stage = "sindicato"

        try:
            union_id = await self.resolve_or_create_union(union_name, drafts.union)

            stage = "convenio"
            agreement = drafts.agreement.model_copy(update={"sindicato_id": union_id})
            agreement_id = await self.create_agreement(union_id, agreement, drafts.raw_record)

            role_id = None
            salary_floors: List[SalaryFloorDraft] = []
            if drafts.job_role is not None:
                stage = "cargo"
                role_id = await self.create_job_role(agreement_id, drafts.job_role)

                stage = "piso_salarial"
                for floor in drafts.salary_floors:
                    await self.create_salary_floor(role_id, floor)
                    salary_floors.append(floor.model_copy(update={"convenio_id": agreement_id}))

                stage = "valor_hora"
                for rate_type, value in (
                    (HourlyRateType.NORMAL, drafts.job_role.valor_hora_normal),
                    (HourlyRateType.EXTRA_50, drafts.job_role.valor_hora_extra_50),
                    (HourlyRateType.EXTRA_100, drafts.job_role.valor_hora_extra_100),
                ):
                    if value is not None:
                        await self.create_hourly_rate(role_id, rate_type, value)

            stage = "particularidade"
            particularities = []
            leaves = []
            if drafts.particularities or drafts.leaves:
                if role_id is None:
                    role_id = await self.create_job_role(
                        agreement_id, JobRoleDraft(cargo=GENERIC_ROLE_NAME)
                    )
                for item in drafts.particularities:
                    await self.create_particularity(role_id, item, agreement_id)
                    particularities.append(item.model_copy(update={"cargo_id": role_id}))
                for item in drafts.leaves:
                    await self.create_particularity(role_id, item, agreement_id)
                    leaves.append(item.model_copy(update={"cargo_id": role_id}))

            stage = "beneficio"
            benefits = []
            for benefit in drafts.benefits:
                await self.create_benefit(agreement_id, benefit)
                benefits.append(benefit.model_copy(update={"convenio_id": agreement_id}))

            await self.db.commit()
            self._uncommitted_unions.clear()

        except Exception as e:
            await self.db.rollback()
            for name in self._uncommitted_unions:
                self._union_cache.pop(name, None)
            self._uncommitted_unions.clear()
            raise EntityWriteError(
                f"Failed to persist record for union '{union_name}'",
                context={"union_name": union_name, "stage": stage},
                original_exception=e
            )

        return drafts.model_copy(update={
            "agreement": agreement,
            "salary_floors": salary_floors,
            "particularities": particularities,
            "leaves": leaves,
            "benefits": benefits,
            "convenio_id": agreement_id,
            "cargo_id": role_id,
        })
