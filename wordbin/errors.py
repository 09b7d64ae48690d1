"""
Error types for WordBin.
Every failure the store or codec can produce is one of these; the HTTP layer
turns them into responses through a single exception handler.
"""
from typing import Any, Dict


class WordbinError(Exception):
    """Base exception for all WordBin errors."""

    code = "internal_error"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> Dict[str, Any]:
        """Convert to a JSON error envelope."""
        return {"error": {"code": self.code, "message": self.message}}


class InvalidExpirationChoice(WordbinError):
    code = "invalid_expiration"
    http_status = 400

    def __init__(self, value: str):
        super().__init__(f"Unexpected expiration time: {value!r}")
        self.value = value


class InvalidIdentifier(WordbinError):
    """Word sequence that does not decode to a 64-bit identifier.

    Reported to clients the same way as a missing paste.
    """

    code = "not_found"
    http_status = 404

    def __init__(self, animal_names: str, reason: str):
        super().__init__(f"Invalid identifier {animal_names!r}: {reason}")
        self.animal_names = animal_names
        self.reason = reason


class PasteNotFound(WordbinError):
    code = "not_found"
    http_status = 404

    def __init__(self, paste_id: int):
        super().__init__(f"Paste {paste_id} not found")
        self.paste_id = paste_id


class PersistenceCorrupt(WordbinError):
    """Snapshot exists but cannot be parsed. Fatal at startup."""

    code = "persistence_corrupt"


class PersistenceUnavailable(WordbinError):
    """Snapshot backend could not be reached while loading. Fatal at startup."""

    code = "persistence_unavailable"


class PersistenceWriteFailed(WordbinError):
    code = "persistence_write_failed"


class ClockError(WordbinError):
    code = "clock_error"


class IdentifierSpaceExhausted(WordbinError):
    code = "identifier_space_exhausted"
    http_status = 503
