"""Durable per-calendar storage.

Each calendar lives in its own JSON file, ``<data_dir>/calendars/<id>.json``,
holding ``{name, state, updatedAt}``. Revisions are session scoped and are not
written to disk.

Writes go to a temporary file in the same directory, are fsynced, then
renamed over the target, so a crash mid-write leaves either the old file or
the new one, never a partial file.
"""

import json
import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from models.calendar import CalendarRecord
from models.errors import StorageError
from models.normalize import normalize_state
from models.schedule import ScheduleState

logger = logging.getLogger(__name__)

_CALENDAR_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

DEFAULT_CALENDAR_NAME = "Untitled calendar"


class CalendarRepository:
    """Reads and writes calendar records as JSON files.

    Attributes:
        data_dir: Root data directory.
        legacy_file: Path of the old single-calendar file, if any.
    """

    def __init__(self, data_dir: str | Path, legacy_file: str | Path | None = None):
        self.data_dir = Path(data_dir)
        self.legacy_file = Path(legacy_file) if legacy_file else None

    @property
    def calendars_dir(self) -> Path:
        return self.data_dir / "calendars"

    def path_for(self, calendar_id: str) -> Path:
        """Return the file path of a calendar.

        Raises:
            StorageError: If the id cannot be used as a file name.
        """
        if not _CALENDAR_ID_PATTERN.fullmatch(calendar_id):
            raise StorageError(f"Invalid calendar id for storage: {calendar_id!r}")
        return self.calendars_dir / f"{calendar_id}.json"

    # ===== Reading =====

    def load_all(self) -> list[CalendarRecord]:
        """Load every stored calendar with revision 0.

        Files that cannot be read or decoded are logged and skipped so one
        damaged file does not take every other calendar offline.

        Returns:
            The loaded records, in no particular order.
        """
        if not self.calendars_dir.is_dir():
            return []

        records = []
        for path in sorted(self.calendars_dir.glob("*.json")):
            try:
                records.append(self._read_record(path))
            except StorageError as e:
                logger.warning(f"Skipping calendar file {path}: {e.message}")
        return records

    def _read_record(self, path: Path) -> CalendarRecord:
        data = self._read_json(path)
        if not isinstance(data, dict):
            raise StorageError("calendar file does not contain an object", str(path))

        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            name = DEFAULT_CALENDAR_NAME

        return CalendarRecord(
            calendar_id=path.stem,
            name=name,
            state=normalize_state(data.get("state")),
            revision=0,
            updated_at=_parse_timestamp(data.get("updatedAt")) or _file_mtime(path),
        )

    def read_legacy_state(self) -> Optional[ScheduleState]:
        """Read the old single-calendar file, if one exists.

        Returns:
            The normalized state, or None when there is no legacy file.

        Raises:
            StorageError: If the file exists but cannot be read or decoded.
        """
        if self.legacy_file is None or not self.legacy_file.is_file():
            return None
        return normalize_state(self._read_json(self.legacy_file))

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}", str(path)) from e
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt JSON in {path}: {e}", str(path)) from e

    # ===== Writing =====

    def write(self, record: CalendarRecord) -> None:
        """Atomically write a calendar file.

        Raises:
            StorageError: If the file cannot be written.
        """
        path = self.path_for(record.calendar_id)
        payload = json.dumps(
            {
                "name": record.name,
                "state": record.state.to_wire(),
                "updatedAt": record.updated_at.isoformat(),
            },
            indent=2,
        )

        try:
            self.calendars_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.calendars_dir, prefix=f".{record.calendar_id}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}", str(path)) from e

    def delete(self, calendar_id: str) -> None:
        """Remove a calendar file. A file that is already gone is not an error.

        Raises:
            StorageError: If the file exists but cannot be removed.
        """
        path = self.path_for(calendar_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}", str(path)) from e


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _file_mtime(path: Path) -> datetime:
    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    except OSError:
        return datetime.now(timezone.utc)
