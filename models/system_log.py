from sqlalchemy import Column, String, DateTime, Text, Uuid
import uuid
from models.base import Base, JSONType, utcnow


class SystemLog(Base):
    """Write-only application log shown on the admin screens"""
    __tablename__ = "system_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    level = Column(String(10), nullable=False, index=True)
    message = Column(Text, nullable=False)
    module = Column(String(100), nullable=True, index=True)
    details = Column(JSONType, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
