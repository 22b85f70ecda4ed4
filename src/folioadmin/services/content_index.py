"""
Content index persistence for folioadmin.

Each media category has one JSON document holding a top-level list of
records. The public site renders whatever the index contains, so the
index is the only source of truth for published content.

The index has no locking or version token: a read-modify-write cycle
that overlaps another one loses the earlier write. With a single admin
submitting uploads this is accepted.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..config import get_content_dir
from ..error_handling import ContentIndexError, ValidationError
from ..logging_config import get_logger
from ..models.content import ContentCategory

logger = get_logger(__name__)


class IndexStore(ABC):
    """Whole-document persistence of content indexes."""

    @abstractmethod
    def read(self, category: ContentCategory) -> dict[str, Any]:
        """Return the full index document for category."""

    @abstractmethod
    def write(self, category: ContentCategory, document: dict[str, Any]) -> None:
        """Replace the full index document for category."""


class JsonFileIndexStore(IndexStore):
    """IndexStore keeping one JSON file per category in a directory."""

    def __init__(self, content_dir: str | Path | None = None) -> None:
        self.content_dir = Path(content_dir or get_content_dir())

    def path_for(self, category: ContentCategory) -> Path:
        return self.content_dir / category.index_filename

    def read(self, category: ContentCategory) -> dict[str, Any]:
        """
        Read and check an index document.

        Raises:
            ContentIndexError: If the file is absent, unreadable, not JSON,
                or lacks the category's record list
        """
        path = self.path_for(category)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ContentIndexError(
                f"Content index not found: {path}",
                code="index_not_found",
                details={"category": category.value, "path": str(path)},
            ) from e
        except OSError as e:
            raise ContentIndexError(
                f"Failed to read content index {path}: {e}",
                code="index_unreadable",
                details={"category": category.value, "path": str(path)},
                original_exception=e,
            ) from e

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ContentIndexError(
                f"Content index {path} is not valid JSON: {e}",
                code="index_malformed",
                details={"category": category.value, "path": str(path)},
                original_exception=e,
            ) from e

        if not isinstance(document, dict) or not isinstance(document.get(category.records_key), list):
            raise ContentIndexError(
                f"Content index {path} has no '{category.records_key}' list",
                code="index_malformed",
                details={"category": category.value, "path": str(path)},
            )

        return document

    def write(self, category: ContentCategory, document: dict[str, Any]) -> None:
        """
        Replace an index document.

        The new document goes to a temporary file in the same directory
        and is renamed over the old one, so readers see either the old or
        the new document.
        """
        path = self.path_for(category)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(document, indent=2, ensure_ascii=False, allow_nan=False) + "\n"
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                    tmp_file.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise ContentIndexError(
                f"Failed to write content index {path}: {e}",
                code="index_write_failed",
                details={"category": category.value, "path": str(path)},
                original_exception=e,
            ) from e

        logger.info(
            "content_index_written",
            category=category.value,
            path=str(path),
            records=len(document.get(category.records_key, [])),
        )

    def initialize(self, category: ContentCategory) -> bool:
        """Create an empty index document if none exists. Returns True if created."""
        if self.path_for(category).exists():
            return False
        self.write(category, {category.records_key: []})
        return True


class ContentIndexService:
    """Record-level operations over an IndexStore."""

    def __init__(self, index_store: IndexStore) -> None:
        self.index_store = index_store

    def read_document(self, category: ContentCategory | str) -> dict[str, Any]:
        category = ContentCategory.parse(category)
        return self.index_store.read(category)

    def list_records(self, category: ContentCategory | str) -> list[dict[str, Any]]:
        category = ContentCategory.parse(category)
        return list(self.index_store.read(category)[category.records_key])

    def count(self, category: ContentCategory | str) -> int:
        return len(self.list_records(category))

    def append_record(self, category: ContentCategory | str, record: dict[str, Any]) -> dict[str, Any]:
        """
        Append a record to the end of a category index.

        Existing records and any other top-level keys are written back
        untouched.

        Raises:
            ValidationError: If a record with the same id already exists
            ContentIndexError: If the index cannot be read or written
        """
        category = ContentCategory.parse(category)
        document = self.index_store.read(category)
        records = document[category.records_key]

        record_id = record.get("id")
        if any(isinstance(existing, dict) and existing.get("id") == record_id for existing in records):
            raise ValidationError(
                f"A record with id '{record_id}' already exists in {category.value}",
                code="duplicate_record",
                details={"category": category.value, "id": record_id},
            )

        records.append(record)
        self.index_store.write(category, document)

        logger.info("content_record_appended", category=category.value, record_id=record_id, total=len(records))
        return record


# Global index service instance
_index_service: ContentIndexService | None = None


def get_content_index_service() -> ContentIndexService:
    """Get the global content index service backed by the JSON files in CONTENT_DIR."""
    global _index_service

    if _index_service is None:
        _index_service = ContentIndexService(JsonFileIndexStore())

    return _index_service
