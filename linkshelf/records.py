from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive values read back from databases that drop tzinfo."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Metadata:
    title: str
    description: str | None = None
    icon: str | None = None

    def as_dict(self):
        return {"title": self.title, "description": self.description, "icon": self.icon}


@dataclass
class User:
    id: int
    email: str
    password_hash: str = field(repr=False)
    created_at: datetime = field(default_factory=utcnow)

    def as_dict(self):
        return {"id": self.id, "email": self.email, "created_at": _iso(self.created_at)}


@dataclass
class Folder:
    id: int
    user_id: int
    name: str
    parent_id: int | None = None
    created_at: datetime = field(default_factory=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "created_at": _iso(self.created_at),
        }


@dataclass
class Link:
    id: int
    user_id: int
    folder_id: int
    url: str
    title: str
    description: str | None = None
    icon: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "folder_id": self.folder_id,
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "notes": self.notes or "",
            "created_at": _iso(self.created_at),
        }


@dataclass
class Tag:
    id: int
    user_id: int
    name: str

    def as_dict(self):
        return {"id": self.id, "name": self.name}


@dataclass
class SharedLink:
    id: int
    link_id: int
    token: str
    created_at: datetime = field(default_factory=utcnow)

    def as_dict(self):
        return {
            "id": self.id,
            "link_id": self.link_id,
            "token": self.token,
            "created_at": _iso(self.created_at),
        }
