from urllib.parse import urlparse

from linkshelf.errors import ValidationError

ALLOWED_SCHEMES = {"http", "https"}
MAX_EMAIL_LENGTH = 320
MAX_FOLDER_NAME_LENGTH = 255
MAX_TAG_NAME_LENGTH = 64


def validate_url(url: str) -> str:
    cleaned = (url or "").strip()
    if not cleaned:
        raise ValidationError("url is required")
    try:
        parsed = urlparse(cleaned)
        host = parsed.hostname
    except ValueError as exc:
        raise ValidationError(f"invalid url: {cleaned}") from exc
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not host:
        raise ValidationError(f"invalid url: {cleaned}")
    return cleaned


def clean_name(value: str | None, label: str, max_length: int) -> str:
    name = " ".join((value or "").split())
    if not name:
        raise ValidationError(f"{label} name is required")
    if len(name) > max_length:
        raise ValidationError(f"{label} name is longer than {max_length} characters")
    return name


def normalize_notes(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


def normalize_email(value: str | None) -> str:
    email = (value or "").strip().lower()
    if not email or "@" not in email or len(email) > MAX_EMAIL_LENGTH:
        raise ValidationError("a valid email is required")
    return email
