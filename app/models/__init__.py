from app.models.user import User
from app.models.folder import Folder
from app.models.file import File
from app.models.share import Share, PublicLink, ResourceRef
from app.models.file_version import FileVersion

__all__ = ["User", "Folder", "File", "Share", "PublicLink", "ResourceRef", "FileVersion"]
