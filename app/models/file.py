from sqlalchemy import Column, String, Boolean, Integer, BigInteger, ForeignKey, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
import uuid
from app.db.base import Base, TimestampMixin

class File(Base, TimestampMixin):
    __tablename__ = "files"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    folder_id = Column(Uuid, ForeignKey("folders.id"), index=True)

    # File Info
    name = Column(String(255), nullable=False, index=True)
    original_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=False, index=True)
    size = Column(BigInteger, nullable=False)

    # Storage
    blob_url = Column(String(500), nullable=False)
    version = Column(Integer, default=1, nullable=False)

    is_public = Column(Boolean, default=False, nullable=False)
    # "metadata" is reserved on declarative classes
    extra_metadata = Column("metadata", JSON().with_variant(JSONB, "postgresql"), default=dict)

    # Relationships
    owner = relationship("User", back_populates="files")

    def __repr__(self) -> str:
        return f"<File {self.id}: {self.name}>"
