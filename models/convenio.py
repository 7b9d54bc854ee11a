from sqlalchemy import (
    Column, String, Date, DateTime, Float, Boolean, Text, ForeignKey, Index, Uuid
)
from sqlalchemy.orm import relationship
import uuid
from models.base import Base, JSONType, utcnow


class Convenio(Base):
    """
    Collective-bargaining agreement.

    One row is created for every imported record that names a union; rows
    are never deduplicated, so re-running an import duplicates agreements
    and everything below them.
    """
    __tablename__ = "convenios"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    titulo = Column(String, nullable=False)
    tipo = Column(String(20), nullable=False, default="CCT")
    estado = Column(String, nullable=True, index=True)

    # Dates
    data_base = Column(Date, nullable=True)
    vigencia_inicio = Column(Date, nullable=True)
    vigencia_fim = Column(Date, nullable=True)

    # Benefit terms
    vale_refeicao = Column(Text, nullable=True)
    vale_refeicao_valor = Column(Float, nullable=True)
    assistencia_medica = Column(Boolean, nullable=True)
    seguro_vida = Column(Boolean, nullable=True)
    uniforme = Column(Boolean, nullable=True)
    adicional_noturno = Column(Text, nullable=True)

    sindicato_id = Column(Uuid, ForeignKey("sindicatos.id"), nullable=False, index=True)
    historico_importacao_id = Column(Uuid, ForeignKey("historico_importacao.id"), nullable=True, index=True)

    dados_brutos = Column(JSONType, nullable=True)  # Source record as imported

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    sindicato = relationship("Sindicato", back_populates="convenios")
    cargos = relationship("Cargo", back_populates="convenio")
    beneficios = relationship("BeneficioGeral", back_populates="convenio")

    __table_args__ = (
        Index("idx_convenio_sindicato_estado", "sindicato_id", "estado"),
    )


class BeneficioGeral(Base):
    """Agreement-wide benefit (meal voucher, health plan, uniform, ...)"""
    __tablename__ = "beneficios_gerais"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    tipo = Column(String(100), nullable=False)
    valor = Column(Text, nullable=True)
    descricao = Column(Text, nullable=True)

    convenio_id = Column(Uuid, ForeignKey("convenios.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    convenio = relationship("Convenio", back_populates="beneficios")
