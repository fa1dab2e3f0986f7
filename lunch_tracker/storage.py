"""
Storage Module

This module persists the lunch data snapshot and handles import/export.

Features:
    - String-keyed stores (in-memory and one-JSON-file-per-key on disk)
    - Load/save the whole snapshot under a single key
    - Pretty-printed JSON export, validated JSON import
    - Timestamped export files and .json file import

Storage layout:
    {store}[settings.STORAGE_KEY] -> JSON text of LunchData.to_dict()
        - people: list
        - orders: list
        - settlements: list

Error handling:
    Storage failures never propagate out of load_data/save_data. Loading
    falls back to an empty snapshot; saving logs and drops the write. The
    in-memory snapshot stays authoritative either way.

Functions:
    get_store: Default FileStore under settings.DATA_DIR.
    load_data: Read the snapshot (empty snapshot on any failure).
    save_data: Write the snapshot (best effort).
    export_data: Stored snapshot as pretty-printed JSON text.
    import_data: Validate JSON text and store it as the new snapshot.
    export_to_file: Write the export to lunch-data-YYYY-MM-DD.json.
    import_from_file: Import a .json file.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PayloadValidationError

from lunch_tracker.config import get_settings
from lunch_tracker.exceptions import StorageError
from lunch_tracker.schemas import SnapshotPayload
from lunch_tracker.snapshot import LunchData

logger = logging.getLogger(__name__)


class MemoryStore:
    """Dictionary-backed store. Useful for tests and throwaway sessions."""

    def __init__(self, items: Optional[dict] = None):
        self._items = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStore:
    """
    Store that keeps each key in its own JSON file inside a directory.

    Writes go to a temporary file first and are then moved into place, so a
    failed write never leaves a half-written file behind.
    """

    def __init__(self, directory):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Could not remove {self._path(key)}: {e}") from e


def get_store() -> FileStore:
    """Return the default on-disk store under settings.DATA_DIR."""
    return FileStore(get_settings().DATA_DIR)


def _storage_key(key: Optional[str]) -> str:
    return key or get_settings().STORAGE_KEY


def _parse_snapshot(text: str) -> LunchData:
    """
    Parse and validate snapshot JSON text.

    The snapshot is built from the validated values, so lax inputs such as
    40000.0 for a price come out as ints.

    Raises:
        json.JSONDecodeError: If the text is not JSON.
        pydantic.ValidationError: If the structure or any record is invalid.
    """
    payload = SnapshotPayload.model_validate(json.loads(text))
    return LunchData.from_dict(payload.model_dump(by_alias=True, exclude_none=True))


def load_data(store, key: Optional[str] = None) -> LunchData:
    """
    Load the snapshot from a store.

    Args:
        store: Object with get_item(key) -> str | None.
        key: Storage key (default: settings.STORAGE_KEY).

    Returns:
        LunchData: The stored snapshot, or an empty snapshot if nothing is
        stored, the data is malformed, or the store fails.
    """
    key = _storage_key(key)
    try:
        stored = store.get_item(key)
        if stored:
            return _parse_snapshot(stored)
    except StorageError as e:
        logger.error("Error loading data: %s", e)
    except (json.JSONDecodeError, PayloadValidationError) as e:
        logger.error("Stored data under %r is malformed: %s", key, e)
    return LunchData.empty()


def save_data(store, data: LunchData, key: Optional[str] = None) -> bool:
    """
    Save the snapshot to a store (best effort).

    Returns:
        bool: True if the write succeeded. Failures are logged, not raised.
    """
    try:
        store.set_item(_storage_key(key), json.dumps(data.to_dict(), ensure_ascii=False))
        return True
    except StorageError as e:
        logger.error("Error saving data: %s", e)
        return False


def dump_snapshot(data: LunchData) -> str:
    """Serialize a snapshot as pretty-printed JSON (2-space indent)."""
    return json.dumps(data.to_dict(), indent=2, ensure_ascii=False)


def export_data(store, key: Optional[str] = None) -> str:
    """Return the stored snapshot as pretty-printed JSON text."""
    return dump_snapshot(load_data(store, key))


def import_data(store, text: str, key: Optional[str] = None) -> bool:
    """
    Validate JSON text and store it as the new snapshot.

    The text must be a JSON object whose people, orders and settlements
    fields are lists of valid records. Anything else is rejected and the
    stored snapshot is left untouched.

    Args:
        store: Object with set_item(key, value).
        text: JSON text, typically produced by export_data.
        key: Storage key (default: settings.STORAGE_KEY).

    Returns:
        bool: True if the data was accepted and saved.
    """
    try:
        data = _parse_snapshot(text)
    except (TypeError, json.JSONDecodeError, PayloadValidationError) as e:
        logger.warning("Rejected import: %s", e)
        return False

    return save_data(store, data, key)


def export_filename(now: Optional[datetime] = None) -> str:
    """Return the export file name for a moment in time, e.g. lunch-data-2024-05-01.json."""
    now = now or datetime.now(timezone.utc)
    return f"{get_settings().EXPORT_PREFIX}-{now.date().isoformat()}.json"


def export_to_file(store, directory, key: Optional[str] = None) -> Path:
    """
    Write the export to a timestamped .json file in a directory.

    Returns:
        Path: The written file.

    Raises:
        StorageError: If the file cannot be written.
    """
    path = Path(directory) / export_filename()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(export_data(store, key), encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Could not export to {path}: {e}") from e

    logger.info("Exported lunch data to %s", path)
    return path


def import_from_file(store, path, key: Optional[str] = None) -> bool:
    """
    Import a .json file produced by export_to_file.

    Returns:
        bool: False if the file is not .json, cannot be read, or is invalid.
    """
    path = Path(path)
    if path.suffix.lower() != ".json":
        logger.warning("Rejected import: %s is not a .json file", path)
        return False

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Could not read %s: %s", path, e)
        return False

    return import_data(store, text, key)
