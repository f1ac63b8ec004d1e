from __future__ import annotations

from abc import ABC, abstractmethod

from linkshelf.records import Folder, Link, SharedLink, Tag, User


class StorageBackend(ABC):
    """Persistence for the six collections behind :class:`StorageService`.

    Backends only store and fetch. Ownership checks, hierarchy validation and
    metadata enrichment live in the service. Every ``add_*`` call assigns a
    fresh id that no concurrent call can also receive.
    """

    name = "base"

    @abstractmethod
    async def add_user(self, email: str, password_hash: str) -> User: ...

    @abstractmethod
    async def get_user(self, user_id: int) -> User | None: ...

    @abstractmethod
    async def get_user_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    async def add_folder(
        self, user_id: int, name: str, parent_id: int | None
    ) -> Folder: ...

    @abstractmethod
    async def get_folder(self, folder_id: int) -> Folder | None: ...

    @abstractmethod
    async def list_folders(self, user_id: int) -> list[Folder]: ...

    @abstractmethod
    async def add_link(
        self,
        user_id: int,
        folder_id: int,
        url: str,
        title: str,
        description: str | None,
        icon: str | None,
        notes: str | None,
    ) -> Link: ...

    @abstractmethod
    async def get_link(self, link_id: int) -> Link | None: ...

    @abstractmethod
    async def list_links(self, user_id: int, folder_id: int | None = None) -> list[Link]: ...

    @abstractmethod
    async def update_link_metadata(
        self, link_id: int, title: str, description: str | None, icon: str | None
    ) -> Link | None: ...

    @abstractmethod
    async def add_tag(self, user_id: int, name: str) -> Tag: ...

    @abstractmethod
    async def get_tag(self, tag_id: int) -> Tag | None: ...

    @abstractmethod
    async def list_tags(self, user_id: int) -> list[Tag]: ...

    @abstractmethod
    async def add_link_tag(self, link_id: int, tag_id: int) -> None: ...

    @abstractmethod
    async def remove_link_tag(self, link_id: int, tag_id: int) -> None: ...

    @abstractmethod
    async def list_link_tags(self, link_id: int) -> list[Tag]: ...

    @abstractmethod
    async def list_tagged_links(self, tag_id: int) -> list[Link]: ...

    @abstractmethod
    async def add_shared_link(self, link_id: int, token: str) -> SharedLink: ...

    @abstractmethod
    async def get_shared_link(self, token: str) -> SharedLink | None: ...
