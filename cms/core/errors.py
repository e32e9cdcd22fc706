"""Error types shared by stores, services and routers."""
from __future__ import annotations


class StoreError(Exception):
    def __init__(self, message: str, code: str = "io_error", status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class InvalidPayloadError(StoreError):
    """Raised before any filesystem mutation when a payload is rejected."""

    def __init__(self, message: str):
        super().__init__(message, "invalid", 400)


class NotFoundError(StoreError):
    def __init__(self, message: str):
        super().__init__(message, "not_found", 404)


class ForbiddenPathError(StoreError):
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, "forbidden", 403)


class ConflictError(StoreError):
    def __init__(self, message: str):
        super().__init__(message, "conflict", 409)


class PartialWriteError(StoreError):
    """A multi-file save failed after some files were already written."""

    def __init__(self, message: str, language: str, written: list[str]):
        super().__init__(message, "partial_write", 500)
        self.language = language
        self.written = list(written)
