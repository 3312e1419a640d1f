from sqlalchemy import Column, String, Integer, BigInteger, DateTime, Uuid
import uuid
from app.db.base import Base, utcnow

class FileVersion(Base):
    """Append-only history of the blobs a file has pointed at."""
    __tablename__ = "file_versions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # No foreign key: history outlives the file row
    file_id = Column(Uuid, nullable=False, index=True)
    version = Column(Integer, nullable=False, index=True)
    blob_url = Column(String(500), nullable=False)
    size = Column(BigInteger, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
