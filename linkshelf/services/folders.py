from __future__ import annotations

from typing import Iterable

from linkshelf.errors import InvalidReference, NotFound
from linkshelf.records import Folder


class FolderTree:
    """Hierarchy queries over one snapshot of folders.

    Folders keep the order they were given in, which for both backends is
    creation order.
    """

    def __init__(self, folders: Iterable[Folder]):
        self._by_id: dict[int, Folder] = {}
        self._children: dict[tuple[int, int | None], list[Folder]] = {}
        for folder in folders:
            self._by_id[folder.id] = folder
            self._children.setdefault((folder.user_id, folder.parent_id), []).append(
                folder
            )

    def children_of(self, user_id: int, parent_id: int | None = None) -> list[Folder]:
        return list(self._children.get((user_id, parent_id), []))

    def path_to(self, folder_id: int) -> list[Folder]:
        folder = self._by_id.get(folder_id)
        if folder is None:
            raise NotFound(f"folder {folder_id} not found")

        path = [folder]
        seen = {folder.id}
        while folder.parent_id is not None:
            parent = self._by_id.get(folder.parent_id)
            if parent is None or parent.id in seen:
                break
            seen.add(parent.id)
            path.append(parent)
            folder = parent
        path.reverse()
        return path

    def is_descendant(self, candidate_id: int, ancestor_id: int) -> bool:
        """True when ``ancestor_id`` is on the parent chain of ``candidate_id``.

        A folder counts as its own descendant, so the check also rejects
        self-parenting.
        """
        current = self._by_id.get(candidate_id)
        seen: set[int] = set()
        while current is not None and current.id not in seen:
            if current.id == ancestor_id:
                return True
            seen.add(current.id)
            if current.parent_id is None:
                return False
            current = self._by_id.get(current.parent_id)
        return False

    def validate_parent(self, user_id: int, parent_id: int | None) -> None:
        if parent_id is None:
            return
        parent = self._by_id.get(parent_id)
        if parent is None or parent.user_id != user_id:
            raise InvalidReference(f"parent folder {parent_id} not found")
