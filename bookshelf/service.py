"""Book record operations over the collection file and content files."""
import asyncio
import logging
import threading
from typing import Any, Dict, List, Optional, Union

from bookshelf.content_store import ContentStore
from bookshelf.models import BookRecord, ErrorKind, ReadMode, ServiceResult
from bookshelf.record_store import RecordStore
from bookshelf.validate import normalize_mode, validate_book

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Book not found"


class RecordService:
    """
    CRUD and content operations for positionally addressed book records.

    Metadata changes (create/update/delete) run as blocking
    load-modify-save sequences under one lock, so concurrent writers
    cannot overwrite each other's changes. Content reads and writes can
    run in worker threads; same-blob access is serialized by ContentStore.

    On delete, content files after the removed position are renamed one
    position down so each record keeps its own document.
    """

    def __init__(self, store: RecordStore, content: ContentStore):
        """
        Initialize the service.

        Args:
            store: Collection storage
            content: Per-record document storage
        """
        self.store = store
        self.content = content
        self._lock = threading.Lock()

    @staticmethod
    def _in_bounds(position: int, records: List[BookRecord]) -> bool:
        return 0 <= position < len(records)

    def list_all(self) -> ServiceResult:
        """Return every record in collection order."""
        records = self.store.load_all()
        return ServiceResult.ok(data=[record.to_dict() for record in records])

    def create(self, raw: Dict[str, Any]) -> ServiceResult:
        """
        Validate and append a record, then create its placeholder document.

        Args:
            raw: Candidate record (title, author, summary, publishDate)

        Returns:
            ServiceResult with the stored record
        """
        errors = validate_book(raw)
        if errors:
            return ServiceResult.fail(ErrorKind.VALIDATION, "Validation failed", errors=errors)

        record = BookRecord.from_dict(raw)

        with self._lock:
            records = self.store.load_all()
            records.append(record)

            if not self.store.save_all(records):
                return ServiceResult.fail(ErrorKind.IO_ERROR, "Failed to save book")

            position = len(records) - 1
            if not self.content.create_placeholder(position):
                # The record is already persisted; report it without rolling back.
                logger.error(f"Book saved at position {position} but its content file was not created")
                return ServiceResult.fail(
                    ErrorKind.INTERNAL_INCONSISTENCY,
                    "Book saved but its content file could not be created",
                    data=record.to_dict()
                )

        logger.info(f"Created book at position {position}: {record.title}")
        return ServiceResult.ok(data=record.to_dict(), message="Book created")

    def update(self, position: int, raw: Dict[str, Any]) -> ServiceResult:
        """
        Replace the record at a position. Its document is left untouched.

        Validation runs before the bounds check, so an invalid payload
        reports its violations even for a position that does not exist.
        """
        errors = validate_book(raw)
        if errors:
            return ServiceResult.fail(ErrorKind.VALIDATION, "Validation failed", errors=errors)

        record = BookRecord.from_dict(raw)

        with self._lock:
            records = self.store.load_all()
            if not self._in_bounds(position, records):
                return ServiceResult.fail(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)

            records[position] = record
            if not self.store.save_all(records):
                return ServiceResult.fail(ErrorKind.IO_ERROR, "Failed to update book")

        logger.info(f"Updated book at position {position}")
        return ServiceResult.ok(data=record.to_dict(), message="Book updated")

    def delete(self, position: int) -> ServiceResult:
        """
        Remove the record at a position along with its document.

        Returns:
            ServiceResult with the removed record
        """
        with self._lock:
            records = self.store.load_all()
            if not self._in_bounds(position, records):
                return ServiceResult.fail(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)

            old_count = len(records)
            removed = records.pop(position)

            if not self.store.save_all(records):
                return ServiceResult.fail(ErrorKind.IO_ERROR, "Failed to delete book")

            try:
                self.content.delete(position)
                self.content.shift_down(position, old_count)
            except OSError as e:
                logger.error(f"Book at position {position} deleted but content files were not realigned: {e}")
                return ServiceResult.fail(
                    ErrorKind.INTERNAL_INCONSISTENCY,
                    "Book deleted but content files could not be realigned",
                    data=removed.to_dict()
                )

        logger.info(f"Deleted book at position {position}: {removed.title}")
        return ServiceResult.ok(data=removed.to_dict(), message="Book deleted")

    async def read_content(
        self,
        position: int,
        mode: Optional[Union[str, ReadMode]] = None
    ) -> ServiceResult:
        """
        Read a record's document.

        Args:
            position: Zero-based record position
            mode: "blocking" reads on the calling thread; anything else
                (including None) reads in a worker thread

        Returns:
            ServiceResult with {"content", "mode"}
        """
        mode = normalize_mode(mode)

        records = self.store.load_all()
        if not self._in_bounds(position, records):
            return ServiceResult.fail(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)

        try:
            if mode is ReadMode.BLOCKING:
                content = self.content.read(position)
            else:
                content = await self.content.read_async(position)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read content for position {position}: {e}")
            return ServiceResult.fail(ErrorKind.IO_ERROR, "Failed to read content")

        if content is None:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Content file not found")

        return ServiceResult.ok(data={"content": content, "mode": mode.value})

    async def write_content(self, position: int, content: Any) -> ServiceResult:
        """Replace a record's document. Empty content is rejected."""
        if not isinstance(content, str) or content == "":
            return ServiceResult.fail(
                ErrorKind.VALIDATION,
                "Content must not be empty",
                errors=["Content must not be empty"]
            )

        records = self.store.load_all()
        if not self._in_bounds(position, records):
            return ServiceResult.fail(ErrorKind.NOT_FOUND, NOT_FOUND_MESSAGE)

        if not await self.content.write_async(position, content):
            return ServiceResult.fail(ErrorKind.IO_ERROR, "Failed to write content")

        return ServiceResult.ok(message="Content written")

    def read_content_sync(self, position: int, mode: Optional[Union[str, ReadMode]] = None) -> ServiceResult:
        """Run read_content for callers without an event loop."""
        return asyncio.run(self.read_content(position, mode))

    def write_content_sync(self, position: int, content: Any) -> ServiceResult:
        """Run write_content for callers without an event loop."""
        return asyncio.run(self.write_content(position, content))


def build_service(config) -> RecordService:
    """Create a service over the configured collection file and content folder."""
    return RecordService(
        RecordStore(config.BOOKS_JSON_PATH),
        ContentStore(config.CONTENT_DIR)
    )
