"""
Gallery error taxonomy

Every error carries the HTTP status it maps to; server.py turns them into
JSON responses. Validation and authorization errors are raised before any
write is staged, so they never leave side effects.
"""
from typing import Any, Dict, Optional


class GalleryError(Exception):
    """Base exception for gallery operations"""
    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra: Dict[str, Any] = extra

    def to_dict(self) -> dict:
        return {"detail": self.message, **self.extra}


class Unauthorized(GalleryError):
    """Missing or invalid credential on a mutating call"""
    status_code = 401


class NotFound(GalleryError):
    """Referenced photo, category or trash entry is absent"""
    status_code = 404


class Conflict(GalleryError):
    """Target key already exists"""
    status_code = 409


class ValidationError(GalleryError):
    """Missing or malformed request fields"""
    status_code = 400


class TransportError(GalleryError):
    """Upstream blob store or image origin failed"""
    status_code = 502


class InternalError(GalleryError):
    """Unexpected store failure; no changes were applied"""
    status_code = 500


def not_found_unless(found: bool, message: str, not_found_ids: Optional[list] = None) -> None:
    """Raise NotFound (with the per-id report) when a batch resolved nothing"""
    if not found:
        raise NotFound(message, notFoundIds=not_found_ids or [])
