# reflet/core/errors.py
from __future__ import annotations

from typing import Any, Mapping, Optional


class RefletError(Exception):
    """Base class for the application's domain errors."""

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)


# ---------- Image pipeline ----------
class ImageValidationError(RefletError):
    """The selected file cannot be accepted; nothing was decoded or uploaded."""


class NotAnImage(ImageValidationError):
    def __init__(self, content_type: str | None = None):
        self.content_type = content_type
        super().__init__("Veuillez sélectionner une image")


class TooLarge(ImageValidationError):
    def __init__(self, size: int, max_bytes: int):
        self.size = size
        self.max_bytes = max_bytes
        max_mb = max_bytes / (1024 * 1024)
        super().__init__(f"L'image ne doit pas dépasser {max_mb:g} Mo")


class DecodeError(RefletError):
    """The bytes could not be read as an image (corrupt or unsupported format)."""

    def __init__(self, message: str = "Impossible de lire l'image"):
        super().__init__(message)


# ---------- Data / storage collaborators ----------
class DataUnavailable(RefletError):
    """Transport or permission failure reported by the database or the object storage."""


class BulkSaveError(DataUnavailable):
    """
    A bulk save stopped at `index`. Items before it are already applied,
    items after it were not attempted.
    """

    def __init__(self, index: int, item: Mapping[str, Any], cause: Optional[BaseException] = None):
        self.index = index
        self.item = dict(item)
        self.cause = cause
        where = f"{self.item.get('page')}/{self.item.get('section')}/{self.item.get('content_key')}"
        detail = str(cause) if cause is not None else "unknown error"
        super().__init__(f"Échec de l'enregistrement de '{where}' (élément {index + 1}): {detail}")


# ---------- Auth ----------
class AuthRequired(RefletError):
    """No active admin session; web callers redirect to the login view."""

    def __init__(self, next_path: str | None = None):
        self.next_path = next_path
        super().__init__("Login required")
