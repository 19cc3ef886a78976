"""JSON file storage for the book collection."""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Union

from bookshelf.models import BookRecord

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


class RecordStore:
    """Ordered book collection persisted as a single JSON array."""

    def __init__(self, path: Union[str, Path]):
        """
        Initialize the store.

        Args:
            path: Location of the JSON collection file
        """
        self.path = Path(path)

    def load_all(self) -> List[BookRecord]:
        """
        Read the whole collection.

        A missing or corrupt file is logged and treated as an empty
        collection so the service keeps running.

        Returns:
            List of BookRecord objects
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"Collection file not found, starting empty: {self.path}")
            return []
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read collection {self.path}: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"Collection {self.path} is not a JSON array, ignoring it")
            return []

        records = []
        for i, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning(f"Skipping malformed entry #{i} in {self.path}")
                continue
            records.append(BookRecord.from_dict(item))

        return records

    def save_all(self, records: List[BookRecord]) -> bool:
        """
        Replace the whole collection on disk.

        Writes to a temp file next to the target and renames it over the
        target, so a failed write leaves the previous file intact.

        Args:
            records: Full collection to persist

        Returns:
            True if successful, False otherwise
        """
        payload = json.dumps([record.to_dict() for record in records], indent=4, ensure_ascii=False)
        tmp_path = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates 0600 files
            os.chmod(tmp_path, FILE_MODE)
            os.replace(tmp_path, self.path)
            logger.info(f"Saved {len(records)} records to {self.path}")
            return True
        except (OSError, UnicodeError) as e:
            logger.error(f"Failed to save collection {self.path}: {e}")
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            return False
