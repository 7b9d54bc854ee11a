from sqlalchemy import Column, String, DateTime, Text, Uuid
import uuid
from models.base import Base, utcnow


class Configuracao(Base):
    """Key/value system setting (e.g. chave='gemini_api_key')"""
    __tablename__ = "configuracoes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    chave = Column(String(100), nullable=False, unique=True)
    valor = Column(Text, nullable=True)
    descricao = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
