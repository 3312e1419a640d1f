from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship
import uuid
from app.db.base import Base, TimestampMixin

class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Subject of the identity provider's tokens
    external_id = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)

    # Profile
    first_name = Column(String(100))
    last_name = Column(String(100))
    avatar_url = Column(String(500))

    # Relationships
    folders = relationship("Folder", back_populates="owner", passive_deletes=True)
    files = relationship("File", back_populates="owner", passive_deletes=True)

    @property
    def display_name(self) -> str:
        full_name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return full_name or self.email
