from sqlalchemy import Column, String, Boolean, ForeignKey, Text, Uuid
from sqlalchemy.orm import relationship
import uuid
from app.db.base import Base, TimestampMixin

class Folder(Base, TimestampMixin):
    __tablename__ = "folders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Null parent means the folder sits at the root ("My Drive").
    # Deleting a parent is refused while it has children, so no cascade here.
    parent_id = Column(Uuid, ForeignKey("folders.id"), index=True)

    # Folder Info
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text)
    is_public = Column(Boolean, default=False, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="folders")

    def __repr__(self) -> str:
        return f"<Folder {self.id}: {self.name}>"
