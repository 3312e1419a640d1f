from app.models.file import File
from app.models.file_version import FileVersion
from app.models.folder import Folder
from app.models.share import PublicLink
from app.models.user import User
from app.services.metadata import file_category
from app.services.sharing import public_link_url


def _iso(value):
    return value.isoformat() if value else None


def _id(value):
    return str(value) if value else None


def user_summary(user: User | None) -> dict | None:
    if user is None:
        return None
    return {
        "id": str(user.id),
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "avatarUrl": user.avatar_url,
    }


def user_detail(user: User) -> dict:
    return {
        **user_summary(user),
        "externalId": user.external_id,
        "displayName": user.display_name,
        "createdAt": _iso(user.created_at),
    }


def folder_to_dict(folder: Folder) -> dict:
    return {
        "id": str(folder.id),
        "name": folder.name,
        "description": folder.description,
        "parentId": _id(folder.parent_id),
        "ownerId": str(folder.owner_id),
        "isPublic": bool(folder.is_public),
        "createdAt": _iso(folder.created_at),
        "updatedAt": _iso(folder.updated_at),
    }


def file_to_dict(file: File) -> dict:
    return {
        "id": str(file.id),
        "name": file.name,
        "originalName": file.original_name,
        "mimeType": file.mime_type,
        "category": file_category(file.mime_type),
        "size": file.size,
        "blobUrl": file.blob_url,
        "folderId": _id(file.folder_id),
        "ownerId": str(file.owner_id),
        "isPublic": bool(file.is_public),
        "version": file.version,
        "metadata": file.extra_metadata or {},
        "createdAt": _iso(file.created_at),
        "updatedAt": _iso(file.updated_at),
    }


def version_to_dict(version: FileVersion) -> dict:
    return {
        "id": str(version.id),
        "fileId": str(version.file_id),
        "version": version.version,
        "blobUrl": version.blob_url,
        "size": version.size,
        "createdAt": _iso(version.created_at),
    }


def public_link_to_dict(link: PublicLink | None, base_url: str) -> dict | None:
    if link is None:
        return None
    return {
        "token": link.token,
        "url": public_link_url(base_url, link.token),
        "permission": link.permission,
        "expiresAt": _iso(link.expires_at),
        "downloadCount": link.download_count,
    }
