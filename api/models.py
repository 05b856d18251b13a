from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, StrictStr
from pydantic import ValidationError as SchemaError
from typing import Any, Dict, List, Optional

# =============================================================================
# PERSISTED MODEL
# =============================================================================

class JournalEntry(BaseModel):
    """
    A single user-authored record. Field names match the on-disk camelCase JSON.
    Keys this model does not know about are kept and written back as-is.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    text: str
    date: str
    created_at: str = Field(alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")  # absent until first update

    def to_json(self) -> Dict[str, Any]:
        exclude = {"updated_at"} if self.updated_at is None else None
        return self.model_dump(by_alias=True, exclude=exclude)


class JournalDocument(BaseModel):
    """The whole persisted collection, most-recently-created first."""
    model_config = ConfigDict(extra="allow")

    entries: List[JournalEntry] = Field(default_factory=list)

    # Stored items that are not valid entries. Hidden from callers, written back untouched.
    _unreadable: List[Any] = PrivateAttr(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> "JournalDocument":
        """
        Builds a document from parsed JSON.
        Raises ValueError only when the document itself has the wrong shape;
        individual bad entries are set aside instead of failing the whole read.
        """
        if not isinstance(data, dict):
            raise ValueError("Journal document is not a JSON object")
        raw_entries = data.get("entries", [])
        if not isinstance(raw_entries, list):
            raise ValueError("Journal document 'entries' is not a list")

        doc = cls.model_validate({k: v for k, v in data.items() if k != "entries"})
        for item in raw_entries:
            try:
                doc.entries.append(JournalEntry.model_validate(item))
            except SchemaError:
                doc._unreadable.append(item)
        return doc

    @property
    def unreadable(self) -> List[Any]:
        return self._unreadable

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"entries": [e.to_json() for e in self.entries] + list(self._unreadable)}
        data.update(self.model_dump(exclude={"entries"}))
        return data

    def taken_ids(self) -> set:
        """Every id in the stored document, including ones on unreadable items."""
        ids = {e.id for e in self.entries}
        ids.update(str(item["id"]) for item in self._unreadable if isinstance(item, dict) and "id" in item)
        return ids

    def find_index(self, entry_id: str) -> int:
        """Index of the entry with this exact id, or -1."""
        for i, entry in enumerate(self.entries):
            if entry.id == entry_id:
                return i
        return -1

# =============================================================================
# REQUEST BODIES
# =============================================================================

# Fields are optional here so presence checks happen in EntryManager
# and produce the documented messages.

class EntryCreate(BaseModel):
    text: Optional[StrictStr] = None
    date: Optional[StrictStr] = None

class EntryUpdate(BaseModel):
    text: Optional[StrictStr] = None
    date: Optional[StrictStr] = None

class MessageResponse(BaseModel):
    message: str
