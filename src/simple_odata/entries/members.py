"""
Entry members

The classified form of an entity payload.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass
class EntryMembers:
    """
    Properties and associations of one payload.

    An association entry lands in exactly one of ``associations_by_value``,
    ``associations_by_content_id`` or ``unlinks``.
    """

    properties: Dict[str, Any] = field(default_factory=dict)
    associations_by_value: List[Tuple[str, Any]] = field(default_factory=list)
    associations_by_content_id: List[Tuple[str, int]] = field(default_factory=list)
    unlinks: List[str] = field(default_factory=list)

    def add_property(self, name: str, value: Any) -> None:
        self.properties[name] = value

    def add_association_by_value(self, name: str, value: Any) -> None:
        self.associations_by_value.append((name, value))

    def add_association_by_content_id(self, name: str, content_id: int) -> None:
        self.associations_by_content_id.append((name, content_id))

    def add_unlink(self, name: str) -> None:
        self.unlinks.append(name)

    @property
    def has_properties(self) -> bool:
        return bool(self.properties)
