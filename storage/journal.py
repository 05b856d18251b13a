import json
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError as SchemaError

from api.models import JournalDocument
from utils.telemetry import get_logger

logger = get_logger(__name__)

DEFAULT_JOURNAL_FILE = "journal-entries.json"


class JournalStore(Protocol):
    """Sole read/write path to the persisted journal document."""

    def read(self) -> JournalDocument:
        """Load the whole document. Never raises; degrades to an empty document."""
        ...

    def write(self, doc: JournalDocument) -> bool:
        """Persist the whole document. Returns False on failure instead of raising."""
        ...


class FileJournalStorage:
    """
    Whole-document JSON storage backed by a single file.

    Implements JournalStore. Writes go to a temp file in the same directory
    which is then renamed over the target, so readers see either the old or
    the new document, never a partial one.
    """

    def __init__(self, data_dir: str, file_name: str = DEFAULT_JOURNAL_FILE):
        self.data_dir = Path(data_dir).expanduser()
        self.path = self.data_dir / file_name

    def ensure_initialized(self) -> None:
        """Creates the data directory and an empty document if absent."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            logger.info(f"Initializing empty journal at {self.path}")
            if not self.write(JournalDocument()):
                raise OSError(f"Could not initialize journal at {self.path}")

    def read(self) -> JournalDocument:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            doc = JournalDocument.from_json(data)
            if doc.unreadable:
                logger.warning(f"Skipped {len(doc.unreadable)} unreadable entries in {self.path}, they are kept on write-back")
            return doc
        except FileNotFoundError:
            logger.warning(f"Journal file missing at {self.path}, using empty document")
        except (OSError, ValueError, SchemaError) as e:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            logger.error(f"Error reading journal entries from {self.path}: {e}")
        return JournalDocument()

    def write(self, doc: JournalDocument) -> bool:
        tmp_path = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.data_dir,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_path = f.name
                json.dump(doc.to_json(), f, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno()) # Ensure it hits disk
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing journal entries to {self.path}: {e}")
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.warning(f"Could not remove temp file {tmp_path}")
            return False
