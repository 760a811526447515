"""Calendar store with revision-checked optimistic concurrency.

The store owns the authoritative registry of calendars. Clients read a
calendar's state and revision, edit locally, then save with the state and
revision they started from:

- same revision as stored: nobody else wrote in between, the incoming state
  is adopted as-is;
- older revision: the incoming state is three-way merged with the stored
  state (see ``models.merge``).

Mutations of one calendar are serialized by a per-calendar lock held across
read, merge, persist and swap. Records are immutable and swapped whole, so
readers never see a half-applied update. The registry is only updated after
the durable write succeeded.
"""

import logging
import threading
import uuid
from typing import Any, Optional

from models.calendar import CalendarRecord, CalendarSummary, SaveResult, utc_now
from models.errors import CalendarNotFoundError, InvalidArgumentError
from models.merge import merge_states
from models.normalize import normalize_state
from models.persistence import DEFAULT_CALENDAR_NAME, CalendarRepository
from models.schedule import default_schedule_state

logger = logging.getLogger(__name__)

LEGACY_CALENDAR_NAME = "My Calendar"


def _is_revision(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class CalendarStore:
    """In-memory calendar registry backed by a CalendarRepository.

    Attributes:
        repository: Durable storage for calendar records.
    """

    def __init__(self, repository: CalendarRepository):
        self.repository = repository
        self._calendars: dict[str, CalendarRecord] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    @classmethod
    def open(cls, repository: CalendarRepository) -> "CalendarStore":
        """Create a store and load every calendar from the repository."""
        store = cls(repository)
        store.load()
        return store

    # ===== Lifecycle =====

    def load(self) -> int:
        """Load stored calendars, importing the legacy file if there are none.

        The legacy single-calendar file is imported only while no
        per-calendar records exist, so it is picked up exactly once.

        Returns:
            Number of calendars loaded.

        Raises:
            StorageError: If the legacy file exists but cannot be imported.
        """
        records = self.repository.load_all()

        if not records:
            legacy_state = self.repository.read_legacy_state()
            if legacy_state is not None:
                record = CalendarRecord(
                    calendar_id=self._new_id(),
                    name=LEGACY_CALENDAR_NAME,
                    state=legacy_state,
                )
                self.repository.write(record)
                records = [record]
                logger.info(
                    f"Imported legacy calendar file {self.repository.legacy_file} "
                    f"as {record.calendar_id} ({legacy_state.event_count} events)"
                )

        with self._registry_lock:
            self._calendars = {record.calendar_id: record for record in records}
            self._locks = {}

        logger.info(f"Loaded {len(records)} calendar(s) from {self.repository.data_dir}")
        return len(records)

    # ===== Reads =====

    def list_calendars(self) -> list[CalendarSummary]:
        """List calendars, most recently updated first."""
        with self._registry_lock:
            records = list(self._calendars.values())

        records.sort(key=lambda record: record.updated_at, reverse=True)
        return [
            CalendarSummary(
                calendar_id=record.calendar_id,
                name=record.name,
                updated_at=record.updated_at,
            )
            for record in records
        ]

    def get_calendar(self, calendar_id: str) -> CalendarRecord:
        """Return a full snapshot of a calendar.

        The snapshot is a deep copy, so callers may keep it as the base of a
        later save.

        Raises:
            CalendarNotFoundError: If the id is unknown.
        """
        return self._require(calendar_id).model_copy(deep=True)

    def __contains__(self, calendar_id: object) -> bool:
        with self._registry_lock:
            return calendar_id in self._calendars

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._calendars)

    # ===== Mutations =====

    def create_calendar(self, name: Any = None) -> CalendarRecord:
        """Create a calendar with the default schedule state and revision 0.

        Args:
            name: Display name. A missing or blank name gets a default.

        Returns:
            The new record.

        Raises:
            InvalidArgumentError: If name is given but is not a string.
            StorageError: If the record cannot be persisted.
        """
        if name is not None and not isinstance(name, str):
            raise InvalidArgumentError("Calendar name must be a string")
        name = (name or "").strip() or DEFAULT_CALENDAR_NAME

        record = CalendarRecord(
            calendar_id=self._new_id(),
            name=name,
            state=default_schedule_state(),
        )
        self.repository.write(record)

        with self._registry_lock:
            self._calendars[record.calendar_id] = record

        logger.info(f"Created calendar {record.calendar_id} ({name!r})")
        return record

    def rename_calendar(self, calendar_id: str, name: Any) -> CalendarRecord:
        """Change a calendar's name without touching its revision.

        Renames are not schedule mutations and bypass the merge protocol.

        Raises:
            CalendarNotFoundError: If the id is unknown.
            InvalidArgumentError: If name is not a non-empty string.
            StorageError: If the record cannot be persisted.
        """
        with self._lock_for(calendar_id):
            record = self._require(calendar_id)
            if not isinstance(name, str) or not name.strip():
                raise InvalidArgumentError("Calendar name must be a non-empty string")

            renamed = record.model_copy(
                update={"name": name.strip(), "updated_at": utc_now()}
            )
            self.repository.write(renamed)
            self._swap(renamed)

        logger.info(f"Renamed calendar {calendar_id} to {renamed.name!r}")
        return renamed

    def delete_calendar(self, calendar_id: str) -> None:
        """Delete a calendar from memory and disk. Irreversible.

        Raises:
            CalendarNotFoundError: If the id is unknown.
            StorageError: If the file cannot be removed.
        """
        with self._lock_for(calendar_id):
            self._require(calendar_id)
            self.repository.delete(calendar_id)
            with self._registry_lock:
                del self._calendars[calendar_id]
                self._locks.pop(calendar_id, None)

        logger.info(f"Deleted calendar {calendar_id}")

    def save_calendar(
        self,
        calendar_id: str,
        incoming: Any,
        base: Optional[Any] = None,
        base_revision: Optional[Any] = None,
    ) -> SaveResult:
        """Save a client's schedule state.

        Args:
            calendar_id: Calendar to save.
            incoming: Raw state the client wants stored.
            base: Raw state the client started editing from.
            base_revision: Revision the client started editing from.

        Returns:
            The stored state and revision after the save.

        Raises:
            CalendarNotFoundError: If the id is unknown.
            StorageError: If the new state cannot be persisted. The stored
                state and revision are left as they were.
        """
        incoming_state = normalize_state(incoming)
        base_state = normalize_state(base) if base is not None else None

        with self._lock_for(calendar_id):
            record = self._require(calendar_id)

            merged = (
                base_state is not None
                and _is_revision(base_revision)
                and base_revision != record.revision
            )
            if merged:
                next_state = merge_states(record.state, base_state, incoming_state)
            else:
                next_state = incoming_state

            if next_state == record.state:
                logger.debug(
                    f"Save of calendar {calendar_id} changed nothing "
                    f"(revision {record.revision})"
                )
                return SaveResult(
                    state=record.state,
                    revision=record.revision,
                    updated_at=record.updated_at,
                    changed=False,
                    merged=merged,
                )

            updated = record.model_copy(
                update={
                    "state": next_state,
                    "revision": record.revision + 1,
                    "updated_at": utc_now(),
                }
            )
            self.repository.write(updated)
            self._swap(updated)

        if merged:
            logger.info(
                f"Merged save of calendar {calendar_id} from base revision "
                f"{base_revision} into revision {updated.revision}"
            )
        return SaveResult(
            state=updated.state,
            revision=updated.revision,
            updated_at=updated.updated_at,
            changed=True,
            merged=merged,
        )

    # ===== Internals =====

    @staticmethod
    def _new_id() -> str:
        return str(uuid.uuid4())

    def _require(self, calendar_id: str) -> CalendarRecord:
        with self._registry_lock:
            record = self._calendars.get(calendar_id)
        if record is None:
            raise CalendarNotFoundError(calendar_id)
        return record

    def _lock_for(self, calendar_id: str) -> threading.Lock:
        """Return the mutation lock of a known calendar.

        Raises:
            CalendarNotFoundError: If the id is unknown, so that stray ids
                never allocate locks.
        """
        with self._registry_lock:
            if calendar_id not in self._calendars:
                raise CalendarNotFoundError(calendar_id)
            return self._locks.setdefault(calendar_id, threading.Lock())

    def _swap(self, record: CalendarRecord) -> None:
        with self._registry_lock:
            self._calendars[record.calendar_id] = record
