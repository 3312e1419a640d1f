from dataclasses import dataclass
from typing import Literal
from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, Uuid
import uuid
from app.db.base import Base, utcnow

ResourceType = Literal["file", "folder"]


@dataclass(frozen=True)
class ResourceRef:
    """A shareable resource: exactly one file or one folder.

    Share and PublicLink rows keep two nullable columns; they are only ever
    written through ``columns()`` so that exactly one of them is set.
    """
    type: ResourceType
    id: uuid.UUID

    def __post_init__(self):
        if self.type not in ("file", "folder"):
            raise ValueError(f"Unknown resource type: {self.type!r}")

    @classmethod
    def file(cls, file_id: uuid.UUID) -> "ResourceRef":
        return cls("file", file_id)

    @classmethod
    def folder(cls, folder_id: uuid.UUID) -> "ResourceRef":
        return cls("folder", folder_id)

    def columns(self) -> dict:
        return {
            "file_id": self.id if self.type == "file" else None,
            "folder_id": self.id if self.type == "folder" else None,
        }

    def matches(self, model):
        """Filter clause selecting ``model`` rows that point at this resource."""
        if self.type == "file":
            return model.file_id == self.id
        return model.folder_id == self.id


class ResourceColumnsMixin:
    @property
    def resource(self) -> ResourceRef:
        if (self.file_id is None) == (self.folder_id is None):
            raise ValueError(f"{type(self).__name__} {self.id} must reference exactly one file or folder")
        if self.file_id is not None:
            return ResourceRef.file(self.file_id)
        return ResourceRef.folder(self.folder_id)


class Share(Base, ResourceColumnsMixin):
    """A per-user grant of view/edit permission on a file or folder."""
    __tablename__ = "shares"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # What's being shared
    file_id = Column(Uuid, ForeignKey("files.id", ondelete="CASCADE"), index=True)
    folder_id = Column(Uuid, ForeignKey("folders.id", ondelete="CASCADE"), index=True)

    # Grantor and grantee
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    shared_with_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    permission = Column(String(20), nullable=False, default="view")
    expires_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class PublicLink(Base, ResourceColumnsMixin):
    """Bearer-token access to a single file or folder, no sign-in required."""
    __tablename__ = "public_links"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    token = Column(String(100), unique=True, nullable=False, index=True)

    file_id = Column(Uuid, ForeignKey("files.id", ondelete="CASCADE"), index=True)
    folder_id = Column(Uuid, ForeignKey("folders.id", ondelete="CASCADE"), index=True)
    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    permission = Column(String(20), nullable=False, default="view")
    expires_at = Column(DateTime)
    download_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
