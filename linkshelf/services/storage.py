from __future__ import annotations

import logging
import secrets

from werkzeug.security import check_password_hash, generate_password_hash

from linkshelf.errors import Conflict, InvalidReference, NotFound, ValidationError
from linkshelf.records import Folder, Link, SharedLink, Tag, User
from linkshelf.services.common import (
    MAX_FOLDER_NAME_LENGTH,
    MAX_TAG_NAME_LENGTH,
    clean_name,
    normalize_email,
    normalize_notes,
    validate_url,
)
from linkshelf.services.folders import FolderTree
from linkshelf.services.metadata import MetadataResolver
from linkshelf.services.search import filter_links
from linkshelf.storage.base import StorageBackend

logger = logging.getLogger(__name__)

SHARE_TOKEN_BYTES = 32


def issue_share_token() -> str:
    return secrets.token_urlsafe(SHARE_TOKEN_BYTES)


class StorageService:
    """Entry point for every read and write of users, folders, links and tags.

    The caller is expected to have authenticated ``user_id`` already; this
    class only authorizes by comparing owner ids. Link creation enriches the
    record through the metadata resolver before it is persisted.
    """

    def __init__(self, backend: StorageBackend, resolver: MetadataResolver):
        self.backend = backend
        self.resolver = resolver

    # Users

    async def create_user(self, email: str, credential: str) -> User:
        email = normalize_email(email)
        if not credential:
            raise ValidationError("credential is required")
        if await self.backend.get_user_by_email(email) is not None:
            raise Conflict(f"email {email} is already registered")
        user = await self.backend.add_user(email, generate_password_hash(credential))
        logger.info("created user %s", user.id)
        return user

    async def get_user(self, user_id: int) -> User | None:
        return await self.backend.get_user(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        cleaned = (email or "").strip().lower()
        if not cleaned:
            return None
        return await self.backend.get_user_by_email(cleaned)

    async def verify_credentials(self, email: str, credential: str) -> User | None:
        user = await self.get_user_by_email(email)
        if user is None or not check_password_hash(user.password_hash, credential or ""):
            return None
        return user

    # Folders

    async def _folder_tree(self, user_id: int) -> FolderTree:
        return FolderTree(await self.backend.list_folders(user_id))

    async def create_folder(
        self, user_id: int, name: str, parent_id: int | None = None
    ) -> Folder:
        name = clean_name(name, "folder", MAX_FOLDER_NAME_LENGTH)
        tree = await self._folder_tree(user_id)
        tree.validate_parent(user_id, parent_id)
        folder = await self.backend.add_folder(user_id, name, parent_id)
        logger.info("created folder %s for user %s", folder.id, user_id)
        return folder

    async def list_folders(
        self, user_id: int, parent_id: int | None = None
    ) -> list[Folder]:
        tree = await self._folder_tree(user_id)
        return tree.children_of(user_id, parent_id)

    async def get_folder(self, user_id: int, folder_id: int) -> Folder:
        folder = await self.backend.get_folder(folder_id)
        if folder is None or folder.user_id != user_id:
            raise NotFound(f"folder {folder_id} not found")
        return folder

    async def folder_path(self, user_id: int, folder_id: int) -> list[Folder]:
        await self.get_folder(user_id, folder_id)
        tree = await self._folder_tree(user_id)
        return tree.path_to(folder_id)

    async def _owned_folder(self, user_id: int, folder_id: int) -> Folder:
        folder = await self.backend.get_folder(folder_id)
        if folder is None or folder.user_id != user_id:
            raise InvalidReference(f"folder {folder_id} not found")
        return folder

    # Links

    async def create_link(
        self,
        user_id: int,
        folder_id: int,
        url: str,
        notes: str | None = None,
        title: str | None = None,
    ) -> Link:
        url = validate_url(url)
        await self._owned_folder(user_id, folder_id)

        metadata = await self.resolver.resolve(url)
        link = await self.backend.add_link(
            user_id=user_id,
            folder_id=folder_id,
            url=url,
            title=(title or "").strip() or metadata.title,
            description=metadata.description,
            icon=metadata.icon,
            notes=normalize_notes(notes),
        )
        logger.info("created link %s in folder %s", link.id, folder_id)
        return link

    async def get_link(self, user_id: int, link_id: int) -> Link:
        link = await self.backend.get_link(link_id)
        if link is None or link.user_id != user_id:
            raise NotFound(f"link {link_id} not found")
        return link

    async def list_links(
        self,
        user_id: int,
        folder_id: int | None = None,
        search_text: str | None = None,
    ) -> list[Link]:
        links = await self.backend.list_links(user_id, folder_id)
        return filter_links(links, search_text)

    async def refresh_link(self, user_id: int, link_id: int) -> Link:
        link = await self.get_link(user_id, link_id)
        self.resolver.cache.invalidate(link.url)
        metadata = await self.resolver.resolve(link.url)
        updated = await self.backend.update_link_metadata(
            link_id, metadata.title, metadata.description, metadata.icon
        )
        if updated is None:
            raise NotFound(f"link {link_id} not found")
        return updated

    # Tags

    async def create_tag(self, user_id: int, name: str) -> Tag:
        # Names are not checked for uniqueness per user.
        name = clean_name(name, "tag", MAX_TAG_NAME_LENGTH)
        tag = await self.backend.add_tag(user_id, name)
        logger.info("created tag %s for user %s", tag.id, user_id)
        return tag

    async def list_tags(self, user_id: int) -> list[Tag]:
        return await self.backend.list_tags(user_id)

    async def _owned_link_and_tag(
        self, link_id: int, tag_id: int, user_id: int | None
    ) -> None:
        link = await self.backend.get_link(link_id)
        tag = await self.backend.get_tag(tag_id)
        if link is None or (user_id is not None and link.user_id != user_id):
            raise InvalidReference(f"link {link_id} not found")
        if tag is None or tag.user_id != link.user_id:
            raise InvalidReference(f"tag {tag_id} not found")

    async def attach_tag(
        self, link_id: int, tag_id: int, user_id: int | None = None
    ) -> None:
        await self._owned_link_and_tag(link_id, tag_id, user_id)
        await self.backend.add_link_tag(link_id, tag_id)

    async def detach_tag(
        self, link_id: int, tag_id: int, user_id: int | None = None
    ) -> None:
        if user_id is not None:
            link = await self.backend.get_link(link_id)
            tag = await self.backend.get_tag(tag_id)
            if link is not None and link.user_id != user_id:
                raise InvalidReference(f"link {link_id} not found")
            if tag is not None and tag.user_id != user_id:
                raise InvalidReference(f"tag {tag_id} not found")
        await self.backend.remove_link_tag(link_id, tag_id)

    async def list_link_tags(self, user_id: int, link_id: int) -> list[Tag]:
        await self.get_link(user_id, link_id)
        return await self.backend.list_link_tags(link_id)

    async def list_tagged_links(self, user_id: int, tag_id: int) -> list[Link]:
        tag = await self.backend.get_tag(tag_id)
        if tag is None or tag.user_id != user_id:
            raise NotFound(f"tag {tag_id} not found")
        return await self.backend.list_tagged_links(tag_id)

    # Sharing

    async def share_link(self, link_id: int, user_id: int | None = None) -> SharedLink:
        link = await self.backend.get_link(link_id)
        if link is None or (user_id is not None and link.user_id != user_id):
            raise NotFound(f"link {link_id} not found")
        shared = await self.backend.add_shared_link(link_id, issue_share_token())
        logger.info("shared link %s as share %s", link_id, shared.id)
        return shared

    async def resolve_share(self, token: str) -> Link:
        shared = await self.backend.get_shared_link(token or "")
        if shared is None:
            raise NotFound("share token not found")
        link = await self.backend.get_link(shared.link_id)
        if link is None:
            raise NotFound("share token not found")
        return link
