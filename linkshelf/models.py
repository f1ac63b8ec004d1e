from linkshelf import records
from linkshelf.extensions import db
from linkshelf.records import as_utc, utcnow


link_tags = db.Table(
    "link_tags",
    db.Column("link_id", db.Integer, db.ForeignKey("links.id"), primary_key=True),
    db.Column("tag_id", db.Integer, db.ForeignKey("tags.id"), primary_key=True),
)


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(320), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    folders = db.relationship("Folder", backref="user", lazy=True)
    links = db.relationship("Link", backref="user", lazy=True)

    def to_record(self) -> records.User:
        return records.User(
            id=self.id,
            email=self.email,
            password_hash=self.password_hash,
            created_at=as_utc(self.created_at),
        )


class Folder(db.Model):
    __tablename__ = "folders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    name = db.Column(db.String(255), nullable=False)
    parent_id = db.Column(db.Integer, db.ForeignKey("folders.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    children = db.relationship("Folder", backref=db.backref("parent", remote_side=[id]))

    def to_record(self) -> records.Folder:
        return records.Folder(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            parent_id=self.parent_id,
            created_at=as_utc(self.created_at),
        )


class Link(db.Model):
    __tablename__ = "links"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    folder_id = db.Column(
        db.Integer, db.ForeignKey("folders.id"), nullable=False, index=True
    )
    url = db.Column(db.Text, nullable=False)
    title = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=True)
    icon = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    folder = db.relationship("Folder", backref="links")
    tags = db.relationship("Tag", secondary=link_tags, backref="links")

    __table_args__ = (db.Index("ix_link_user_folder", "user_id", "folder_id"),)

    def to_record(self) -> records.Link:
        return records.Link(
            id=self.id,
            user_id=self.user_id,
            folder_id=self.folder_id,
            url=self.url,
            title=self.title,
            description=self.description,
            icon=self.icon,
            notes=self.notes,
            created_at=as_utc(self.created_at),
        )


class Tag(db.Model):
    __tablename__ = "tags"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    name = db.Column(db.String(64), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_record(self) -> records.Tag:
        return records.Tag(id=self.id, user_id=self.user_id, name=self.name)


class SharedLink(db.Model):
    __tablename__ = "shared_links"

    id = db.Column(db.Integer, primary_key=True)
    link_id = db.Column(
        db.Integer, db.ForeignKey("links.id"), nullable=False, index=True
    )
    token = db.Column(db.String(128), nullable=False, unique=True, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    link = db.relationship("Link", backref="shares")

    def to_record(self) -> records.SharedLink:
        return records.SharedLink(
            id=self.id,
            link_id=self.link_id,
            token=self.token,
            created_at=as_utc(self.created_at),
        )
