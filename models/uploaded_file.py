from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, Uuid
import uuid
from models.base import Base, utcnow


class UploadedFile(Base):
    """
    Spreadsheet uploaded by the front end.

    `raw_json` holds the parsed rows as a JSON array; files with
    `processed = false` are picked up by the import scheduler until
    `import_attempts` reaches SCHEDULER_MAX_ATTEMPTS.
    """
    __tablename__ = "uploaded_files"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    filename = Column(String(500), nullable=False)
    file_type = Column(String(100), nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    file_path = Column(String(1000), nullable=True)
    file_hash = Column(String(64), nullable=True, index=True)
    raw_json = Column(Text, nullable=True)

    processed = Column(Boolean, default=False, index=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)

    # Failed scheduler runs; the upload is skipped once the limit is reached
    import_attempts = Column(Integer, nullable=False, default=0)
    last_error = Column(Text, nullable=True)

    uploaded_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
