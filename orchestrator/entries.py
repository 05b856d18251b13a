import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional

from api.models import JournalDocument, JournalEntry
from storage.journal import JournalStore
from utils.errors import NotFoundError, PersistenceError, ValidationError
from utils.telemetry import get_logger

logger = get_logger(__name__)

DELETE_CONFIRMATION = "Entry deleted successfully"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2024-01-01T12:00:00.000Z."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class EntryManager:
    """
    CRUD operations over the journal document.

    Every operation is a full read-modify-write against the store. Mutations
    hold a single lock for the whole cycle, so concurrent requests in this
    process cannot overwrite each other's changes.
    """

    def __init__(
        self,
        store: JournalStore,
        clock: Optional[Callable[[], datetime]] = None,
        lock: Optional[threading.Lock] = None,
    ):
        self.store = store
        self.clock = clock or utc_now
        self._lock = lock or threading.Lock()

    def list(self) -> List[JournalEntry]:
        return self.store.read().entries

    def create(self, text: Optional[str], date: Optional[str]) -> JournalEntry:
        if not text or not date:
            raise ValidationError("Text and date are required")

        with self._lock:
            doc = self.store.read()
            now = self.clock()
            entry = JournalEntry(
                id=self._new_id(doc, now),
                text=text,
                date=date,
                created_at=format_timestamp(now),
            )
            doc.entries.insert(0, entry)

            if not self.store.write(doc):
                raise PersistenceError("Failed to save journal entry")

        logger.info(f"Created entry {entry.id} ({len(doc.entries)} total)")
        return entry

    def update(self, entry_id: str, text: Optional[str] = None, date: Optional[str] = None) -> JournalEntry:
        if not text and not date:
            raise ValidationError("Text or date is required for update")

        with self._lock:
            doc = self.store.read()
            index = doc.find_index(entry_id)
            if index == -1:
                raise NotFoundError("Entry not found")

            # Update only the provided fields
            entry = doc.entries[index]
            if text:
                entry.text = text
            if date:
                entry.date = date
            entry.updated_at = format_timestamp(self.clock())

            if not self.store.write(doc):
                raise PersistenceError("Failed to update journal entry")

        logger.info(f"Updated entry {entry_id}")
        return entry

    def delete(self, entry_id: str) -> str:
        with self._lock:
            doc = self.store.read()
            index = doc.find_index(entry_id)
            if index == -1:
                raise NotFoundError("Entry not found")

            del doc.entries[index]

            if not self.store.write(doc):
                raise PersistenceError("Failed to delete journal entry")

        logger.info(f"Deleted entry {entry_id} ({len(doc.entries)} remaining)")
        return DELETE_CONFIRMATION

    def _new_id(self, doc: JournalDocument, now: datetime) -> str:
        """Millisecond timestamp, bumped past any id already in the document."""
        candidate = int(now.timestamp() * 1000)
        taken = doc.taken_ids()
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)
