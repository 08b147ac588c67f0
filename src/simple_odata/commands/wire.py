"""
Wire commands

Abstract HTTP commands produced by the command factory and consumed by
request contexts and transports.
"""

import json
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Dict, Literal, Mapping, Optional, Tuple
from uuid import UUID

RestVerb = Literal["GET", "POST", "PUT", "PATCH", "MERGE", "DELETE"]


def format_datetime(value: datetime) -> str:
    """DateTimeOffset text in UTC; naive values are taken as UTC"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, UUID):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_body(body: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Serialize a request body to JSON text"""
    if body is None:
        return None
    return json.dumps(body, default=_json_default)


@dataclass
class WireCommand:
    """A single HTTP command addressed relative to the service root"""

    verb: RestVerb
    path: str
    payload: Optional[Mapping[str, Any]] = None
    body: Optional[str] = None
    content_id: int = 0
    omit_from_result: bool = False
    depends_on: Tuple[int, ...] = field(default_factory=tuple)
    headers: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def get(cls, path: str) -> "WireCommand":
        return cls("GET", path)

    @classmethod
    def post(cls, path: str, payload: Optional[Mapping[str, Any]] = None,
             body: Optional[Mapping[str, Any]] = None) -> "WireCommand":
        return cls("POST", path, payload, serialize_body(body))

    @classmethod
    def delete(cls, path: str) -> "WireCommand":
        return cls("DELETE", path)

    @property
    def json_body(self) -> Optional[Dict[str, Any]]:
        """Decoded body, for transports that send JSON objects"""
        return None if self.body is None else json.loads(self.body)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "verb": self.verb,
            "path": self.path,
            "body": self.json_body,
            "content_id": self.content_id,
            "omit_from_result": self.omit_from_result,
            "depends_on": list(self.depends_on),
        }
