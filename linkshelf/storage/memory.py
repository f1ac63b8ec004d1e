from __future__ import annotations

import itertools
import threading
from dataclasses import replace

from linkshelf.errors import Conflict
from linkshelf.records import Folder, Link, SharedLink, Tag, User, utcnow
from linkshelf.storage.base import StorageBackend


class _Collection:
    def __init__(self):
        self.rows: dict = {}
        self._ids = itertools.count(1)
        self.lock = threading.Lock()

    def next_id(self) -> int:
        return next(self._ids)


class MemoryBackend(StorageBackend):
    """Process-local store. Everything is lost when the process exits."""

    name = "memory"

    def __init__(self):
        self.users = _Collection()
        self.folders = _Collection()
        self.links = _Collection()
        self.tags = _Collection()
        self.shared_links = _Collection()
        self.link_tags: dict[tuple[int, int], None] = {}
        self._link_tags_lock = threading.Lock()

    async def add_user(self, email: str, password_hash: str) -> User:
        with self.users.lock:
            if any(user.email == email for user in self.users.rows.values()):
                raise Conflict(f"email {email} is already registered")
            user = User(
                id=self.users.next_id(),
                email=email,
                password_hash=password_hash,
                created_at=utcnow(),
            )
            self.users.rows[user.id] = user
        return user

    async def get_user(self, user_id: int) -> User | None:
        return self.users.rows.get(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        return next(
            (user for user in self.users.rows.values() if user.email == email), None
        )

    async def add_folder(self, user_id: int, name: str, parent_id: int | None) -> Folder:
        with self.folders.lock:
            folder = Folder(
                id=self.folders.next_id(),
                user_id=user_id,
                name=name,
                parent_id=parent_id,
                created_at=utcnow(),
            )
            self.folders.rows[folder.id] = folder
        return folder

    async def get_folder(self, folder_id: int) -> Folder | None:
        return self.folders.rows.get(folder_id)

    async def list_folders(self, user_id: int) -> list[Folder]:
        return [f for f in self.folders.rows.values() if f.user_id == user_id]

    async def add_link(
        self,
        user_id: int,
        folder_id: int,
        url: str,
        title: str,
        description: str | None,
        icon: str | None,
        notes: str | None,
    ) -> Link:
        with self.links.lock:
            link = Link(
                id=self.links.next_id(),
                user_id=user_id,
                folder_id=folder_id,
                url=url,
                title=title,
                description=description,
                icon=icon,
                notes=notes,
                created_at=utcnow(),
            )
            self.links.rows[link.id] = link
        return link

    async def get_link(self, link_id: int) -> Link | None:
        return self.links.rows.get(link_id)

    async def list_links(self, user_id: int, folder_id: int | None = None) -> list[Link]:
        return [
            link
            for link in self.links.rows.values()
            if link.user_id == user_id
            and (folder_id is None or link.folder_id == folder_id)
        ]

    async def update_link_metadata(
        self, link_id: int, title: str, description: str | None, icon: str | None
    ) -> Link | None:
        with self.links.lock:
            link = self.links.rows.get(link_id)
            if link is None:
                return None
            updated = replace(link, title=title, description=description, icon=icon)
            self.links.rows[link_id] = updated
        return updated

    async def add_tag(self, user_id: int, name: str) -> Tag:
        with self.tags.lock:
            tag = Tag(id=self.tags.next_id(), user_id=user_id, name=name)
            self.tags.rows[tag.id] = tag
        return tag

    async def get_tag(self, tag_id: int) -> Tag | None:
        return self.tags.rows.get(tag_id)

    async def list_tags(self, user_id: int) -> list[Tag]:
        return [tag for tag in self.tags.rows.values() if tag.user_id == user_id]

    async def add_link_tag(self, link_id: int, tag_id: int) -> None:
        with self._link_tags_lock:
            self.link_tags.setdefault((link_id, tag_id), None)

    async def remove_link_tag(self, link_id: int, tag_id: int) -> None:
        with self._link_tags_lock:
            self.link_tags.pop((link_id, tag_id), None)

    async def list_link_tags(self, link_id: int) -> list[Tag]:
        return [
            self.tags.rows[tag_id]
            for (pair_link_id, tag_id) in list(self.link_tags)
            if pair_link_id == link_id and tag_id in self.tags.rows
        ]

    async def list_tagged_links(self, tag_id: int) -> list[Link]:
        return [
            self.links.rows[link_id]
            for (link_id, pair_tag_id) in list(self.link_tags)
            if pair_tag_id == tag_id and link_id in self.links.rows
        ]

    async def add_shared_link(self, link_id: int, token: str) -> SharedLink:
        with self.shared_links.lock:
            shared = SharedLink(
                id=self.shared_links.next_id(),
                link_id=link_id,
                token=token,
                created_at=utcnow(),
            )
            self.shared_links.rows[token] = shared
        return shared

    async def get_shared_link(self, token: str) -> SharedLink | None:
        return self.shared_links.rows.get(token)
