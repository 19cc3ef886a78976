"""Data models for book records and service results."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass
class BookRecord:
    """One book's metadata entry. Identity is its position in the collection."""
    title: str
    author: str
    summary: str
    publish_date: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookRecord":
        """Build a record from the persisted/JSON shape."""
        return cls(
            title=data.get("title", ""),
            author=data.get("author", ""),
            summary=data.get("summary", ""),
            publish_date=data.get("publishDate", ""),
        )

    def to_dict(self) -> Dict[str, str]:
        """Serialize with the key names used in book.json."""
        return {
            "title": self.title,
            "author": self.author,
            "summary": self.summary,
            "publishDate": self.publish_date,
        }


class ErrorKind(str, Enum):
    """Failure categories surfaced to the transport layer."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    MALFORMED_INPUT = "malformed_input"
    IO_ERROR = "io_error"
    INTERNAL_INCONSISTENCY = "internal_inconsistency"


class ReadMode(str, Enum):
    """How a content read is scheduled."""
    BLOCKING = "blocking"
    NON_BLOCKING = "non-blocking"


@dataclass
class ServiceResult:
    """Outcome of a RecordService operation."""
    success: bool
    data: Any = None
    message: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ServiceResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(
        cls,
        kind: ErrorKind,
        message: Optional[str] = None,
        errors: Optional[List[str]] = None,
        data: Any = None
    ) -> "ServiceResult":
        return cls(success=False, data=data, message=message, errors=errors or [], kind=kind)

    def to_envelope(self) -> Dict[str, Any]:
        """Uniform response shape: success flag, data, message, errors."""
        return {
            "success": self.success,
            "data": self.data,
            "message": self.message,
            "errors": list(self.errors),
        }
