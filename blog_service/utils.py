import re
from typing import Optional

from blog_service.settings import settings

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_email(email: str) -> bool:
    return isinstance(email, str) and EMAIL_RE.match(email) is not None


def normalize_email(email: str) -> str:
    return email.strip().lower()


def sanitize_string(value: str) -> str:
    """Trim surrounding whitespace and strip angle brackets."""
    return value.replace("<", "").replace(">", "").strip()


def validate_user_data(name: Optional[str] = None, email: Optional[str] = None) -> Optional[str]:
    """Return an error message for the provided fields, or None when they are valid.

    Fields left as None are not checked, so the same rules serve both
    creation and partial updates. Names are judged as they will be stored,
    after sanitizing.
    """
    if name is not None and (not isinstance(name, str) or not sanitize_string(name)):
        return "Name must be a non-empty string"
    if email is not None and not validate_email(email.strip()):
        return "Invalid email format"
    return None


def make_excerpt(content: str, excerpt: Optional[str] = None, length: Optional[int] = None) -> str:
    if excerpt:
        return excerpt
    return content[: length or settings.EXCERPT_LENGTH]
