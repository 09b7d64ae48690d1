"""
Paste record, its enums, and Pydantic models for HTTP responses.
"""
import os
import re
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from wordbin.animals import MAX_ID, to_animal_names
from wordbin.errors import InvalidExpirationChoice

URL_SCHEMES = ("http", "https", "ftp", "ftps")
_WHITESPACE = re.compile(r"\s+")
# Characters a link scanner leaves out of a URL when they end it.
TRAILING_PUNCTUATION = ".,;:!?'\""


class PasteKind(str, Enum):
    """What a paste holds. Derived from its content, never chosen by the client."""

    TEXT = "text"
    URL = "url"
    FILE = "file"


class ExpirationChoice(str, Enum):
    """Expiration keywords accepted from the create form."""

    ONE_MINUTE = "1min"
    TEN_MINUTES = "10min"
    ONE_HOUR = "1hour"
    ONE_DAY = "24hour"
    ONE_WEEK = "1week"
    NEVER = "never"

    @property
    def offset_seconds(self) -> Optional[int]:
        return _OFFSETS[self]

    @classmethod
    def parse(cls, value: str) -> "ExpirationChoice":
        try:
            return cls(value)
        except ValueError:
            raise InvalidExpirationChoice(value) from None


_OFFSETS = {
    ExpirationChoice.ONE_MINUTE: 60,
    ExpirationChoice.TEN_MINUTES: 60 * 10,
    ExpirationChoice.ONE_HOUR: 60 * 60,
    ExpirationChoice.ONE_DAY: 60 * 60 * 24,
    ExpirationChoice.ONE_WEEK: 60 * 60 * 24 * 7,
    ExpirationChoice.NEVER: None,
}


class Paste(BaseModel):
    """A stored paste. ``expires_at == 0`` means it never expires."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, le=MAX_ID)
    content: str
    file_name: Optional[str] = None
    created_at: int
    kind: PasteKind
    expires_at: int = 0

    @property
    def has_file(self) -> bool:
        """True when an uploaded file is attached."""
        return self.file_name is not None

    def id_as_animals(self) -> str:
        """Identifier in its shareable animal-name form."""
        return to_animal_names(self.id)

    def is_expired(self, now: int) -> bool:
        """
        Check whether the paste is past its deadline.

        Args:
            now: Current time in epoch seconds

        Returns:
            True once now reaches expires_at; never for expires_at == 0
        """
        return self.expires_at != 0 and now >= self.expires_at


def is_valid_url(content: str) -> bool:
    """
    Check whether the whole of ``content`` is one absolute URL.

    Trailing sentence punctuation and an unbalanced closing parenthesis are
    not part of a link, so content ending in them is not a single URL.

    Returns:
        True if content has no whitespace, a known scheme, a host, and no
        trailing punctuation
    """
    if not content or _WHITESPACE.search(content):
        return False
    if content[-1] in TRAILING_PUNCTUATION:
        return False
    if content[-1] == ")" and content.count(")") > content.count("("):
        return False
    try:
        parts = urlsplit(content)
    except ValueError:
        return False
    return parts.scheme.lower() in URL_SCHEMES and bool(parts.hostname)


def classify(content: str, file_name: Optional[str] = None) -> PasteKind:
    """
    Derive the kind of a paste.

    Args:
        content: Text content of the paste
        file_name: Normalised name of an attached file, if any

    Returns:
        FILE when a file is attached, URL when content is a single URL,
        TEXT otherwise
    """
    if file_name:
        return PasteKind.FILE
    if is_valid_url(content):
        return PasteKind.URL
    return PasteKind.TEXT


def normalize_file_name(name: Optional[str]) -> Optional[str]:
    """
    Make an uploaded file name safe to store on disk.

    Directory components are dropped and whitespace runs become ``_``.
    Returns None when nothing usable is left.
    """
    if not name:
        return None
    base = os.path.basename(name.replace("\\", "/")).strip()
    base = _WHITESPACE.sub("_", base)
    if base in ("", ".", ".."):
        return None
    return base


class PasteView(BaseModel):
    """Schema for viewing/fetching a paste."""
    id: str = Field(..., description="Identifier as animal names")
    content: str = Field(..., description="Paste text content")
    kind: PasteKind
    file_name: Optional[str] = Field(None, description="Attached file, null if none")
    created_at: int = Field(..., description="Creation time, epoch seconds")
    expires_at: Optional[int] = Field(None, description="Expiry, epoch seconds (null if never)")

    @classmethod
    def from_paste(cls, paste: Paste) -> "PasteView":
        return cls(
            id=paste.id_as_animals(),
            content=paste.content,
            kind=paste.kind,
            file_name=paste.file_name,
            created_at=paste.created_at,
            expires_at=paste.expires_at or None,
        )


class HealthCheck(BaseModel):
    """Schema for health check response."""
    ok: bool = Field(..., description="Is the application healthy?")
