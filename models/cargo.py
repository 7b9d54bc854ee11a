from sqlalchemy import Column, String, DateTime, Float, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid
from models.base import Base, HourlyRateType, utcnow, value_enum


class Cargo(Base):
    """
    Job role within an agreement.

    Every imported record with a CARGO value creates a new row; roles with
    the same name under the same agreement are not merged.
    """
    __tablename__ = "cargos"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    cargo = Column(String, nullable=False)
    carga_horaria = Column(String, nullable=True)
    cbo = Column(String, nullable=True)  # Classificação Brasileira de Ocupações

    convenio_id = Column(Uuid, ForeignKey("convenios.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    convenio = relationship("Convenio", back_populates="cargos")
    pisos = relationship("PisoSalarial", back_populates="cargo")
    valores_hora = relationship("ValorHora", back_populates="cargo")
    particularidades = relationship("Particularidade", back_populates="cargo")


class PisoSalarial(Base):
    """Salary floor for a job role"""
    __tablename__ = "piso_salarial"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    valor = Column(Float, nullable=True)
    descricao = Column(Text, nullable=True)
    cargo_id = Column(Uuid, ForeignKey("cargos.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    cargo = relationship("Cargo", back_populates="pisos")


class ValorHora(Base):
    """Hourly rate (normal, 50% or 100% overtime) for a job role"""
    __tablename__ = "valores_hora"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    tipo = Column(value_enum(HourlyRateType), nullable=False)
    valor = Column(Float, nullable=True)
    cargo_id = Column(Uuid, ForeignKey("cargos.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    cargo = relationship("Cargo", back_populates="valores_hora")


class Particularidade(Base):
    """Free-text clause attached to a job role"""
    __tablename__ = "particularidades"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    conteudo = Column(Text, nullable=True)
    categoria = Column(String(100), nullable=True, default="Geral")
    cargo_id = Column(Uuid, ForeignKey("cargos.id"), nullable=False, index=True)
    convenio_id = Column(Uuid, ForeignKey("convenios.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    cargo = relationship("Cargo", back_populates="particularidades")
