from sqlalchemy import Column, String, Integer, DateTime, Text, Index, Uuid
import uuid
from models.base import Base, ImportStatus, utcnow, value_enum


class HistoricoImportacao(Base):
    """
    Tracks one execution of the import pipeline.

    Lifecycle:
        pendente -> em_andamento -> concluido | erro

    `detalhes` is a JSON document serialized as text; it holds detection
    metadata at start, block statistics mid-run and final counts (or the
    error message) at the end.
    """
    __tablename__ = "historico_importacao"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    status = Column(value_enum(ImportStatus), nullable=False, default=ImportStatus.PENDING, index=True)
    origem = Column(String(500), nullable=True)  # File name or trigger

    data_inicio = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    data_fim = Column(DateTime(timezone=True), nullable=True)

    registros_processados = Column(Integer, nullable=True)
    detalhes = Column(Text, nullable=True)

    __table_args__ = (
        Index("idx_historico_status_inicio", "status", "data_inicio"),
    )
