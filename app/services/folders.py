"""Folder hierarchy: create, rename, delete, list and path building.

Sibling names are unique per owner and parent, where a null parent (the root)
counts as one scope. A folder can only be deleted once it holds no files and no
subfolders.
"""
import logging
import uuid
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import ConflictError, NotFoundError
from app.db.base import utcnow
from app.models.file import File
from app.models.folder import Folder
from app.models.share import PublicLink, Share
from app.services.folder_tree import FolderTree
from app.services.validation import clean_name

logger = logging.getLogger(__name__)


def same_parent(parent_id: uuid.UUID | None):
    return Folder.parent_id == parent_id if parent_id is not None else Folder.parent_id.is_(None)


async def get_folder(db: AsyncSession, folder_id: uuid.UUID, owner_id: uuid.UUID) -> Folder:
    result = await db.execute(
        select(Folder).where(Folder.id == folder_id, Folder.owner_id == owner_id)
    )
    folder = result.scalar_one_or_none()
    if folder is None:
        raise NotFoundError("Folder not found")
    return folder


async def _sibling_named(
    db: AsyncSession,
    name: str,
    owner_id: uuid.UUID,
    parent_id: uuid.UUID | None,
    exclude_id: uuid.UUID | None = None,
) -> Folder | None:
    query = select(Folder).where(
        Folder.name == name,
        Folder.owner_id == owner_id,
        same_parent(parent_id),
    )
    if exclude_id is not None:
        query = query.where(Folder.id != exclude_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def create_folder(
    db: AsyncSession,
    name: str,
    owner_id: uuid.UUID,
    parent_id: uuid.UUID | None = None,
    description: str | None = None,
) -> Folder:
    name = clean_name(name, "Folder")

    if parent_id is not None:
        # Parent must belong to the caller; this also keeps the chain acyclic
        await get_folder(db, parent_id, owner_id)

    if await _sibling_named(db, name, owner_id, parent_id):
        raise ConflictError("A folder with this name already exists")

    folder = Folder(
        name=name,
        owner_id=owner_id,
        parent_id=parent_id,
        description=description,
    )
    db.add(folder)
    await db.commit()
    await db.refresh(folder)

    logger.info(f"Folder {folder.id} created by {owner_id}")
    return folder


async def rename_folder(
    db: AsyncSession,
    folder_id: uuid.UUID,
    new_name: str,
    owner_id: uuid.UUID,
    description: str | None = None,
) -> Folder:
    folder = await get_folder(db, folder_id, owner_id)
    name = clean_name(new_name, "Folder")

    if await _sibling_named(db, name, owner_id, folder.parent_id, exclude_id=folder.id):
        raise ConflictError("A folder with this name already exists")

    folder.name = name
    if description is not None:
        folder.description = description
    folder.updated_at = utcnow()
    await db.commit()
    await db.refresh(folder)
    return folder


async def delete_folder(db: AsyncSession, folder_id: uuid.UUID, owner_id: uuid.UUID) -> None:
    folder = await get_folder(db, folder_id, owner_id)

    file_count = await db.scalar(select(func.count()).select_from(File).where(File.folder_id == folder.id))
    subfolder_count = await db.scalar(
        select(func.count()).select_from(Folder).where(Folder.parent_id == folder.id)
    )
    if file_count or subfolder_count:
        raise ConflictError("Folder is not empty")

    await db.execute(delete(Share).where(Share.folder_id == folder.id))
    await db.execute(delete(PublicLink).where(PublicLink.folder_id == folder.id))
    await db.delete(folder)
    await db.commit()

    logger.info(f"Folder {folder_id} deleted by {owner_id}")


async def list_folders(
    db: AsyncSession,
    owner_id: uuid.UUID,
    parent_id: uuid.UUID | None = None,
    all_folders: bool = False,
) -> list[Folder]:
    query = select(Folder).where(Folder.owner_id == owner_id)
    if not all_folders:
        query = query.where(same_parent(parent_id))
    result = await db.execute(query.order_by(func.lower(Folder.name), Folder.name))
    return list(result.scalars().all())


async def load_tree(db: AsyncSession, owner_id: uuid.UUID) -> FolderTree:
    return FolderTree(await list_folders(db, owner_id, all_folders=True))


async def build_path(db: AsyncSession, folder_id: uuid.UUID | None) -> str:
    """Breadcrumb such as ``"My Drive / Reports / 2024"`` for ``folder_id``.

    Loads the owner's folders once and walks the chain in memory.
    """
    if folder_id is None:
        return FolderTree([]).path(None)
    owner_id = await db.scalar(select(Folder.owner_id).where(Folder.id == folder_id))
    if owner_id is None:
        return FolderTree([]).path(None)
    tree = await load_tree(db, owner_id)
    return tree.path(folder_id)
