"""File registry: metadata rows for blobs held by the blob store.

Every operation is scoped to the owner. Ids that belong to someone else are
treated exactly like ids that do not exist.
"""
import asyncio
import io
import logging
import uuid
import zipfile
from dataclasses import dataclass
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.db.base import utcnow
from app.models.file import File
from app.models.file_version import FileVersion
from app.models.share import PublicLink, Share
from app.services.folders import get_folder
from app.services.storage import BlobStorage
from app.services.validation import clean_name, like_pattern

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "name": File.name,
    "size": File.size,
    "createdAt": File.created_at,
    "updatedAt": File.updated_at,
}


@dataclass
class FilePage:
    files: list
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.files) < self.total


def in_folder(folder_id: uuid.UUID | None):
    return File.folder_id == folder_id if folder_id is not None else File.folder_id.is_(None)


async def get_file(db: AsyncSession, file_id: uuid.UUID, owner_id: uuid.UUID) -> File:
    result = await db.execute(
        select(File).where(File.id == file_id, File.owner_id == owner_id)
    )
    file = result.scalar_one_or_none()
    if file is None:
        raise NotFoundError("File not found")
    return file


async def find_by_name(
    db: AsyncSession,
    name: str,
    owner_id: uuid.UUID,
    folder_id: uuid.UUID | None,
    exclude_id: uuid.UUID | None = None,
) -> File | None:
    query = select(File).where(File.name == name, File.owner_id == owner_id, in_folder(folder_id))
    if exclude_id is not None:
        query = query.where(File.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def owned_files(db: AsyncSession, file_ids: list[uuid.UUID], owner_id: uuid.UUID) -> list[File]:
    if not file_ids:
        return []
    result = await db.execute(
        select(File).where(File.id.in_(file_ids), File.owner_id == owner_id)
    )
    return list(result.scalars().all())


async def create_file(
    db: AsyncSession,
    owner_id: uuid.UUID,
    name: str,
    original_name: str,
    mime_type: str,
    size: int,
    blob_url: str,
    folder_id: uuid.UUID | None = None,
    metadata: dict | None = None,
) -> File:
    file = File(
        owner_id=owner_id,
        name=name,
        original_name=original_name,
        mime_type=mime_type,
        size=size,
        blob_url=blob_url,
        folder_id=folder_id,
        extra_metadata=metadata or {},
        version=1,
    )
    db.add(file)
    await db.flush()
    db.add(FileVersion(file_id=file.id, version=1, blob_url=blob_url, size=size))
    await db.commit()
    await db.refresh(file)

    logger.info(f"File {file.id} registered for {owner_id} ({size} bytes)")
    return file


async def add_version(
    db: AsyncSession,
    file: File,
    blob_url: str,
    size: int,
    mime_type: str,
    metadata: dict | None = None,
) -> File:
    """Point ``file`` at a new blob and append it to the version log."""
    latest = await db.scalar(select(func.max(FileVersion.version)).where(FileVersion.file_id == file.id))
    next_version = (latest or file.version or 0) + 1

    db.add(FileVersion(file_id=file.id, version=next_version, blob_url=blob_url, size=size))
    file.blob_url = blob_url
    file.size = size
    file.mime_type = mime_type
    file.version = next_version
    if metadata is not None:
        file.extra_metadata = metadata
    file.updated_at = utcnow()
    await db.commit()
    await db.refresh(file)
    return file


async def list_versions(db: AsyncSession, file_id: uuid.UUID, owner_id: uuid.UUID) -> list[FileVersion]:
    file = await get_file(db, file_id, owner_id)
    result = await db.execute(
        select(FileVersion).where(FileVersion.file_id == file.id).order_by(FileVersion.version.desc())
    )
    return list(result.scalars().all())


async def rename_file(db: AsyncSession, file_id: uuid.UUID, new_name: str, owner_id: uuid.UUID) -> File:
    file = await get_file(db, file_id, owner_id)
    name = clean_name(new_name, "File")

    if await find_by_name(db, name, owner_id, file.folder_id, exclude_id=file.id):
        raise ConflictError("A file with this name already exists")

    file.name = name
    file.updated_at = utcnow()
    await db.commit()
    await db.refresh(file)
    return file


async def _delete_rows(db: AsyncSession, file_ids: list[uuid.UUID], owner_id: uuid.UUID) -> int:
    await db.execute(delete(Share).where(Share.file_id.in_(file_ids)))
    await db.execute(delete(PublicLink).where(PublicLink.file_id.in_(file_ids)))
    result = await db.execute(
        delete(File).where(File.id.in_(file_ids), File.owner_id == owner_id)
    )
    await db.commit()
    return result.rowcount


async def delete_file(db: AsyncSession, storage: BlobStorage, file_id: uuid.UUID, owner_id: uuid.UUID) -> None:
    file = await get_file(db, file_id, owner_id)
    await storage.attempt_delete(file.blob_url)
    await _delete_rows(db, [file.id], owner_id)
    logger.info(f"File {file_id} deleted by {owner_id}")


async def bulk_delete(db: AsyncSession, storage: BlobStorage, file_ids: list[uuid.UUID], owner_id: uuid.UUID) -> int:
    files = await owned_files(db, file_ids, owner_id)
    if not files:
        raise NotFoundError("No valid files found to delete")

    await asyncio.gather(*(storage.attempt_delete(file.blob_url) for file in files))
    deleted = await _delete_rows(db, [file.id for file in files], owner_id)

    logger.info(f"Bulk delete by {owner_id}: {deleted} of {len(file_ids)} requested")
    return deleted


async def bulk_move(
    db: AsyncSession,
    file_ids: list[uuid.UUID],
    target_folder_id: uuid.UUID,
    owner_id: uuid.UUID,
) -> int:
    files = await owned_files(db, file_ids, owner_id)
    if not files:
        raise NotFoundError("No valid files found")
    await get_folder(db, target_folder_id, owner_id)

    moved_ids = [file.id for file in files]
    names = [file.name for file in files]
    if len(set(names)) != len(names):
        raise ConflictError("Cannot move files with the same name into one folder")

    clash = await db.scalar(
        select(File.name)
        .where(
            File.owner_id == owner_id,
            in_folder(target_folder_id),
            File.name.in_(names),
            File.id.not_in(moved_ids),
        )
        .limit(1)
    )
    if clash is not None:
        raise ConflictError(f"A file named {clash} already exists in the target folder")

    result = await db.execute(
        update(File)
        .where(File.id.in_(moved_ids), File.owner_id == owner_id)
        .values(folder_id=target_folder_id, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount


async def list_files(
    db: AsyncSession,
    owner_id: uuid.UUID,
    search: str | None = None,
    category: str | None = None,
    folder_id: uuid.UUID | None = None,
    sort_by: str = "createdAt",
    sort_order: str = "desc",
    limit: int = 50,
    offset: int = 0,
    max_limit: int = 100,
) -> FilePage:
    if sort_by not in SORT_COLUMNS:
        raise ValidationError(f"Cannot sort by {sort_by}")
    limit = max(1, min(limit, max_limit))
    offset = max(0, offset)

    conditions = [File.owner_id == owner_id]
    if search and search.strip():
        pattern = like_pattern(search.strip())
        conditions.append(or_(
            File.name.ilike(pattern, escape="\\"),
            File.original_name.ilike(pattern, escape="\\"),
            File.mime_type.ilike(pattern, escape="\\"),
        ))
    if category:
        conditions.append(File.mime_type == category)
    if folder_id is not None:
        conditions.append(File.folder_id == folder_id)

    total = await db.scalar(select(func.count()).select_from(File).where(*conditions))

    column = SORT_COLUMNS[sort_by]
    ordering = column.asc() if sort_order == "asc" else column.desc()
    result = await db.execute(
        select(File).where(*conditions).order_by(ordering, File.id).limit(limit).offset(offset)
    )
    return FilePage(files=list(result.scalars().all()), total=total or 0, limit=limit, offset=offset)


async def file_stats(db: AsyncSession, owner_id: uuid.UUID) -> tuple[int, int]:
    row = (await db.execute(
        select(func.count(File.id), func.coalesce(func.sum(File.size), 0)).where(File.owner_id == owner_id)
    )).one()
    return int(row[0]), int(row[1])


def _unique_entry(name: str, used: set) -> str:
    if name not in used:
        used.add(name)
        return name
    stem, dot, ext = name.rpartition(".")
    if not dot:
        stem, ext = name, ""
    counter = 1
    while True:
        candidate = f"{stem} ({counter}).{ext}" if ext else f"{stem} ({counter})"
        if candidate not in used:
            used.add(candidate)
            return candidate
        counter += 1


async def bulk_download(db: AsyncSession, storage: BlobStorage, file_ids: list[uuid.UUID], owner_id: uuid.UUID) -> bytes:
    """Zip the owned files. A blob that cannot be fetched becomes an ERROR_ entry."""
    files = await owned_files(db, file_ids, owner_id)
    if not files:
        raise NotFoundError("No valid files found to download")

    async def fetch(file: File):
        try:
            return file, await storage.fetch(file.blob_url)
        except Exception as e:
            logger.error(f"Failed to download file {file.original_name}: {str(e)}")
            return file, None

    fetched = await asyncio.gather(*(fetch(file) for file in files))

    buffer = io.BytesIO()
    used = set()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for file, data in fetched:
            if data is None:
                entry = _unique_entry(f"ERROR_{file.original_name}.txt", used)
                archive.writestr(entry, f"Failed to download: {file.original_name}")
            else:
                archive.writestr(_unique_entry(file.original_name, used), data)
    return buffer.getvalue()
