from sqlalchemy import Column, String, Date, DateTime, Index, Uuid
from sqlalchemy.orm import relationship
import uuid
from models.base import Base, utcnow


class Sindicato(Base):
    """
    Union registry.

    `nome` is the business key used by the import pipeline: rows are looked
    up by exact name and created once if absent. The pipeline never updates
    an existing union.
    """
    __tablename__ = "sindicatos"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    nome = Column(String, nullable=False)
    cnpj = Column(String, nullable=True)
    site = Column(String, nullable=True)
    estado = Column(String, nullable=True)
    data_base = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    convenios = relationship("Convenio", back_populates="sindicato")

    __table_args__ = (
        Index("idx_sindicato_nome", "nome"),
    )
