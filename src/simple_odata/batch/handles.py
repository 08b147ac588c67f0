"""
Entry handles

An entry handle is returned when an insert is queued in a batch. Passing
the handle as an associated value in a later payload of the same batch
links to the new entry through its content-id.
"""

from typing import Any, Dict, Optional


class EntryHandle:
    """Opaque reference to an entry inserted by a queued command"""

    __slots__ = ("_owner", "content_id", "collection", "result")

    def __init__(self, owner: object, content_id: int, collection: str):
        self._owner = owner
        self.content_id = content_id
        self.collection = collection
        self.result: Optional[Dict[str, Any]] = None

    def belongs_to(self, owner: object) -> bool:
        return self._owner is owner

    def __repr__(self) -> str:
        return f"EntryHandle({self.collection}, content_id={self.content_id})"
