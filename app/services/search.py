"""Name search across a user's files and folders, with breadcrumb paths."""
import uuid
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.file import File
from app.models.folder import Folder
from app.services.folders import load_tree
from app.services.validation import like_pattern

FILE_SORT = {"name": File.name, "createdAt": File.created_at, "size": File.size}
FOLDER_SORT = {"name": Folder.name, "createdAt": Folder.created_at}


def _ordering(columns: dict, default, sort_by: str, sort_order: str):
    column = columns.get(sort_by, default)
    return column.desc() if sort_order == "desc" else column.asc()


def _sort_key(sort_by: str):
    if sort_by == "createdAt":
        return lambda item: item["createdAt"]
    if sort_by == "size":
        return lambda item: item.get("size") or 0
    return lambda item: item["name"].lower()


async def search(
    db: AsyncSession,
    owner_id: uuid.UUID,
    query: str,
    resource_type: str = "all",
    sort_by: str = "name",
    sort_order: str = "asc",
    limit: int = 20,
) -> list[dict]:
    query = (query or "").strip()
    if not query:
        return []

    pattern = like_pattern(query)
    tree = await load_tree(db, owner_id)
    results = []

    if resource_type != "folder":
        files = (await db.execute(
            select(File)
            .where(File.owner_id == owner_id, File.name.ilike(pattern, escape="\\"))
            .order_by(_ordering(FILE_SORT, File.name, sort_by, sort_order))
            .limit(limit)
        )).scalars().all()
        for file in files:
            results.append({
                "id": str(file.id),
                "name": file.name,
                "type": "file",
                "size": file.size,
                "mimeType": file.mime_type,
                "createdAt": file.created_at.isoformat(),
                "path": tree.path(file.folder_id),
            })

    if resource_type != "file":
        folders = (await db.execute(
            select(Folder)
            .where(Folder.owner_id == owner_id, Folder.name.ilike(pattern, escape="\\"))
            .order_by(_ordering(FOLDER_SORT, Folder.name, sort_by, sort_order))
            .limit(limit)
        )).scalars().all()
        for folder in folders:
            results.append({
                "id": str(folder.id),
                "name": folder.name,
                "type": "folder",
                "createdAt": folder.created_at.isoformat(),
                "path": tree.path(folder.id),
            })

    if resource_type == "all":
        results.sort(key=_sort_key(sort_by), reverse=sort_order == "desc")

    return results[:limit]
