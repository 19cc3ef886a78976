"""Per-record text documents, one file per collection position."""
import asyncio
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)

PLACEHOLDER_TEMPLATE = "This is book NO.{ordinal}"

FILE_MODE = 0o644


def filename_for(position: int) -> str:
    """Blob filename for a zero-based position (named by 1-based ordinal)."""
    if position < 0:
        raise ValueError(f"Position must be non-negative, got {position}")
    return f"content_{position + 1}.txt"


class ContentStore:
    """Text blobs addressed by record position."""

    def __init__(self, directory: Union[str, Path]):
        """
        Initialize the store and create its directory.

        Args:
            directory: Folder holding one blob file per record
        """
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

        self._locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, position: int) -> Path:
        return self.directory / filename_for(position)

    def _lock(self, position: int) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(position)
            if lock is None:
                lock = self._locks[position] = threading.Lock()
            return lock

    def read(self, position: int) -> Optional[str]:
        """
        Read a blob, blocking the calling thread.

        Args:
            position: Zero-based record position

        Returns:
            Blob text, or None if the file does not exist

        Raises:
            OSError: any other storage failure
            UnicodeDecodeError: the file is not valid UTF-8
        """
        path = self.path_for(position)
        with self._lock(position):
            try:
                return path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return None

    async def read_async(self, position: int) -> Optional[str]:
        """Read a blob in a worker thread so the event loop keeps running."""
        return await asyncio.to_thread(self.read, position)

    def write(self, position: int, content: str) -> bool:
        """
        Replace a blob's text.

        Args:
            position: Zero-based record position
            content: New text (must not be empty)

        Returns:
            True if successful, False on I/O failure

        Raises:
            ValueError: content is empty
        """
        if not content:
            raise ValueError("Content must not be empty")

        path = self.path_for(position)
        tmp_path = None

        with self._lock(position):
            try:
                fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{path.name}.", suffix=".tmp")
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(content)
                os.chmod(tmp_path, FILE_MODE)
                os.replace(tmp_path, path)
                logger.info(f"Wrote {len(content)} characters to {path.name}")
                return True
            except (OSError, UnicodeError) as e:
                logger.error(f"Failed to write {path}: {e}")
                if tmp_path and os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                return False

    async def write_async(self, position: int, content: str) -> bool:
        """Write a blob in a worker thread."""
        return await asyncio.to_thread(self.write, position, content)

    def create_placeholder(self, position: int) -> bool:
        """Write the initial text for a newly appended record."""
        return self.write(position, PLACEHOLDER_TEMPLATE.format(ordinal=position + 1))

    def delete(self, position: int) -> bool:
        """
        Remove a blob. A missing file is not an error.

        Returns:
            True if a file was removed
        """
        path = self.path_for(position)
        with self._lock(position):
            try:
                path.unlink()
            except FileNotFoundError:
                logger.info(f"No content file to delete: {path.name}")
                return False
        logger.info(f"Deleted {path.name}")
        return True

    def shift_down(self, removed_position: int, old_count: int) -> int:
        """
        Move the blobs after a removed record one position down.

        Blobs of positions removed_position+1 .. old_count-1 are renamed in
        ascending order, so each target name is already free.

        Args:
            removed_position: Position of the deleted record
            old_count: Collection length before the delete

        Returns:
            Number of files renamed
        """
        renamed = 0
        for position in range(removed_position + 1, old_count):
            source = self.path_for(position)
            target = self.path_for(position - 1)
            with self._lock(position - 1), self._lock(position):
                try:
                    os.replace(source, target)
                except FileNotFoundError:
                    logger.warning(f"Missing content file while shifting: {source.name}")
                    continue
            renamed += 1

        if renamed:
            logger.info(f"Shifted {renamed} content files after position {removed_position}")
        return renamed
