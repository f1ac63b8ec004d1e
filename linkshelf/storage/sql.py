from __future__ import annotations

import asyncio

from sqlalchemy.exc import IntegrityError

from linkshelf import records
from linkshelf.errors import Conflict
from linkshelf.extensions import db
from linkshelf.models import Folder, Link, SharedLink, Tag, User, link_tags
from linkshelf.storage.base import StorageBackend


async def _checkpoint() -> None:
    await asyncio.sleep(0)


class SqlBackend(StorageBackend):
    """Relational store on the Flask-SQLAlchemy session.

    Must be used inside an application context. Rows are converted to plain
    records before they leave this module.

    Each method yields to the event loop once, then runs its session calls
    synchronously on the application-context session. A slow database blocks
    the loop for the length of those calls.
    """

    name = "sql"

    async def add_user(self, email: str, password_hash: str) -> records.User:
        await _checkpoint()
        user = User(email=email, password_hash=password_hash)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise Conflict(f"email {email} is already registered") from exc
        return user.to_record()

    async def get_user(self, user_id: int) -> records.User | None:
        await _checkpoint()
        user = db.session.get(User, user_id)
        return user.to_record() if user else None

    async def get_user_by_email(self, email: str) -> records.User | None:
        await _checkpoint()
        user = User.query.filter_by(email=email).first()
        return user.to_record() if user else None

    async def add_folder(
        self, user_id: int, name: str, parent_id: int | None
    ) -> records.Folder:
        await _checkpoint()
        folder = Folder(user_id=user_id, name=name, parent_id=parent_id)
        db.session.add(folder)
        db.session.commit()
        return folder.to_record()

    async def get_folder(self, folder_id: int) -> records.Folder | None:
        await _checkpoint()
        folder = db.session.get(Folder, folder_id)
        return folder.to_record() if folder else None

    async def list_folders(self, user_id: int) -> list[records.Folder]:
        await _checkpoint()
        rows = Folder.query.filter_by(user_id=user_id).order_by(Folder.id.asc()).all()
        return [row.to_record() for row in rows]

    async def add_link(
        self,
        user_id: int,
        folder_id: int,
        url: str,
        title: str,
        description: str | None,
        icon: str | None,
        notes: str | None,
    ) -> records.Link:
        await _checkpoint()
        link = Link(
            user_id=user_id,
            folder_id=folder_id,
            url=url,
            title=title,
            description=description,
            icon=icon,
            notes=notes,
        )
        db.session.add(link)
        db.session.commit()
        return link.to_record()

    async def get_link(self, link_id: int) -> records.Link | None:
        await _checkpoint()
        link = db.session.get(Link, link_id)
        return link.to_record() if link else None

    async def list_links(
        self, user_id: int, folder_id: int | None = None
    ) -> list[records.Link]:
        await _checkpoint()
        query = Link.query.filter_by(user_id=user_id)
        if folder_id is not None:
            query = query.filter_by(folder_id=folder_id)
        return [row.to_record() for row in query.order_by(Link.id.asc()).all()]

    async def update_link_metadata(
        self, link_id: int, title: str, description: str | None, icon: str | None
    ) -> records.Link | None:
        await _checkpoint()
        link = db.session.get(Link, link_id)
        if link is None:
            return None
        link.title = title
        link.description = description
        link.icon = icon
        db.session.commit()
        return link.to_record()

    async def add_tag(self, user_id: int, name: str) -> records.Tag:
        await _checkpoint()
        tag = Tag(user_id=user_id, name=name)
        db.session.add(tag)
        db.session.commit()
        return tag.to_record()

    async def get_tag(self, tag_id: int) -> records.Tag | None:
        await _checkpoint()
        tag = db.session.get(Tag, tag_id)
        return tag.to_record() if tag else None

    async def list_tags(self, user_id: int) -> list[records.Tag]:
        await _checkpoint()
        rows = Tag.query.filter_by(user_id=user_id).order_by(Tag.id.asc()).all()
        return [row.to_record() for row in rows]

    async def add_link_tag(self, link_id: int, tag_id: int) -> None:
        await _checkpoint()
        link = db.session.get(Link, link_id)
        tag = db.session.get(Tag, tag_id)
        if link is None or tag is None or tag in link.tags:
            return
        link.tags.append(tag)
        try:
            db.session.commit()
        except IntegrityError:
            # A concurrent attach already stored the pair.
            db.session.rollback()

    async def remove_link_tag(self, link_id: int, tag_id: int) -> None:
        await _checkpoint()
        db.session.execute(
            link_tags.delete().where(
                link_tags.c.link_id == link_id, link_tags.c.tag_id == tag_id
            )
        )
        db.session.commit()

    async def list_link_tags(self, link_id: int) -> list[records.Tag]:
        await _checkpoint()
        rows = (
            Tag.query.join(link_tags, link_tags.c.tag_id == Tag.id)
            .filter(link_tags.c.link_id == link_id)
            .order_by(Tag.id.asc())
            .all()
        )
        return [row.to_record() for row in rows]

    async def list_tagged_links(self, tag_id: int) -> list[records.Link]:
        await _checkpoint()
        rows = (
            Link.query.join(link_tags, link_tags.c.link_id == Link.id)
            .filter(link_tags.c.tag_id == tag_id)
            .order_by(Link.id.asc())
            .all()
        )
        return [row.to_record() for row in rows]

    async def add_shared_link(self, link_id: int, token: str) -> records.SharedLink:
        await _checkpoint()
        shared = SharedLink(link_id=link_id, token=token)
        db.session.add(shared)
        db.session.commit()
        return shared.to_record()

    async def get_shared_link(self, token: str) -> records.SharedLink | None:
        await _checkpoint()
        shared = SharedLink.query.filter_by(token=token).first()
        return shared.to_record() if shared else None
