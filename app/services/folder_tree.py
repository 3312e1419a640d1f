"""In-memory view of a user's folder hierarchy.

Folders are held in an arena keyed by id, with a parent id -> child ids index.
Nothing holds a reference to its parent object, so walking the chain is always a
lookup and a corrupted chain (dangling parent, cycle) simply ends the walk.
"""
from collections import defaultdict
from typing import Iterable
import uuid

ROOT_LABEL = "My Drive"
PATH_SEPARATOR = " / "
MAX_DEPTH = 1000


class FolderTree:
    def __init__(self, folders: Iterable):
        self.nodes = {}
        self.children = defaultdict(list)
        for folder in folders:
            self.nodes[folder.id] = folder
        for folder in sorted(self.nodes.values(), key=lambda f: f.name.lower()):
            self.children[folder.parent_id].append(folder.id)

    def __contains__(self, folder_id) -> bool:
        return folder_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def ancestors(self, folder_id: uuid.UUID | None, max_depth: int = MAX_DEPTH) -> list:
        """Folders from ``folder_id`` up towards the root, nearest first.

        Stops at a null parent, a parent missing from the arena, an id already
        visited, or after ``max_depth`` hops, whichever comes first.
        """
        chain = []
        seen = set()
        current = folder_id
        while current is not None and len(chain) < max_depth:
            if current in seen:
                break
            folder = self.nodes.get(current)
            if folder is None:
                break
            seen.add(current)
            chain.append(folder)
            current = folder.parent_id
        return chain

    def breadcrumbs(self, folder_id: uuid.UUID | None) -> list:
        return list(reversed(self.ancestors(folder_id)))

    def path(self, folder_id: uuid.UUID | None) -> str:
        names = [folder.name for folder in self.breadcrumbs(folder_id)]
        return PATH_SEPARATOR.join([ROOT_LABEL, *names])

    def children_of(self, parent_id: uuid.UUID | None) -> list:
        return [self.nodes[child_id] for child_id in self.children.get(parent_id, [])]

    def nested(self, serialize, parent_id: uuid.UUID | None = None, max_depth: int = MAX_DEPTH) -> list:
        """Nested ``{..., "children": [...]}`` structure below ``parent_id``.

        Folders caught in a cycle are unreachable from the root and are left out.
        """
        def build(node_id, depth, seen):
            items = []
            if depth >= max_depth:
                return items
            for child in self.children_of(node_id):
                if child.id in seen:
                    continue
                item = serialize(child)
                item["children"] = build(child.id, depth + 1, seen | {child.id})
                items.append(item)
            return items

        return build(parent_id, 0, frozenset())
