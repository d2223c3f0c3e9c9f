from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from .invariants.exceptions import InvariantViolation


class PageBuilderError(Exception):
    """Base class for every error raised by the page builder."""


class SchemaError(PageBuilderError):
    """Unknown section type or content shape. Indicates a version mismatch."""


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class ValidationError(PageBuilderError):
    """
    User-input validation failure.

    Editor operations hand these back as values instead of raising them so the
    offending fields can be reported inline. The HTTP layer raises them.
    """

    def __init__(self, errors: Iterable[FieldError], message: str | None = None):
        self.errors: List[FieldError] = list(errors)
        super().__init__(message or "; ".join(f"{e.field}: {e.message}" for e in self.errors))

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([FieldError(field, message)])

    def to_dict(self) -> dict:
        return {
            "error": "ValidationError",
            "message": str(self),
            "fields": [e.to_dict() for e in self.errors],
        }


class SectionNotFound(PageBuilderError):
    def __init__(self, section_id: str):
        self.section_id = section_id
        super().__init__(f"Section not found: {section_id}")


class PageNotFound(PageBuilderError):
    def __init__(self, page_id: str):
        self.page_id = page_id
        super().__init__(f"Page not found: {page_id}")


class SaveConflict(PageBuilderError):
    """The server holds a newer revision than the one the save was based on."""

    def __init__(self, sent_revision: int, server_revision: int | None = None):
        self.sent_revision = sent_revision
        self.server_revision = server_revision
        super().__init__(
            f"Save conflict: sent revision {sent_revision}, "
            f"server is at {server_revision if server_revision is not None else 'unknown'}"
        )


class NetworkError(PageBuilderError):
    """Transport failure or unexpected server error talking to the gateway."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


__all__ = [
    "PageBuilderError",
    "SchemaError",
    "FieldError",
    "ValidationError",
    "SectionNotFound",
    "PageNotFound",
    "SaveConflict",
    "NetworkError",
    "InvariantViolation",
]
