"""Errors raised across the storage service boundary.

Only structural and input problems are represented here. Failures while
fetching link metadata never surface as exceptions.
"""


class LinkshelfError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LinkshelfError):
    """Malformed input such as an unparsable URL or an empty name."""


class InvalidReference(LinkshelfError):
    """A folder, parent, link or tag id that does not resolve to an owned row."""


class NotFound(LinkshelfError):
    """A lookup by id or share token found nothing."""


class Conflict(LinkshelfError):
    """A uniqueness violation, e.g. an email that is already registered."""
