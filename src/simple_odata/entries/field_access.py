"""
Field access

Associated entities arrive as plain mappings, pydantic models, dataclass
instances or arbitrary objects. A field reader gives the resolver one way
to read named fields off any of them.
"""

import dataclasses
from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Tuple

from pydantic import BaseModel

_MISSING = object()


class FieldReader(ABC):
    """Read-only named field access"""

    @abstractmethod
    def names(self) -> Iterable[str]:
        pass

    @abstractmethod
    def read(self, name: str) -> Any:
        """Return the field value; raise KeyError if absent"""
        pass

    def try_read(self, name: str) -> Tuple[bool, Any]:
        try:
            return True, self.read(name)
        except KeyError:
            return False, None


class MappingReader(FieldReader):
    def __init__(self, data: Mapping[str, Any]):
        self._data = data

    def names(self) -> Iterable[str]:
        return list(self._data.keys())

    def read(self, name: str) -> Any:
        return self._data[name]


class ModelReader(MappingReader):
    """Pydantic models, readable by field name or alias"""

    def __init__(self, model: BaseModel):
        data = model.model_dump()
        data.update(model.model_dump(by_alias=True))
        super().__init__(data)


class DataclassReader(FieldReader):
    def __init__(self, instance: Any):
        self._instance = instance
        self._names = [f.name for f in dataclasses.fields(instance)]

    def names(self) -> Iterable[str]:
        return list(self._names)

    def read(self, name: str) -> Any:
        if name not in self._names:
            raise KeyError(name)
        return getattr(self._instance, name)


class AttributeReader(FieldReader):
    def __init__(self, instance: Any):
        self._instance = instance

    def names(self) -> Iterable[str]:
        return [n for n in getattr(self._instance, "__dict__", {}) if not n.startswith("_")]

    def read(self, name: str) -> Any:
        if name.startswith("_"):
            raise KeyError(name)
        value = getattr(self._instance, name, _MISSING)
        if value is _MISSING:
            raise KeyError(name)
        return value


def as_field_reader(value: Any) -> FieldReader:
    """Pick a field reader for an associated value"""
    if isinstance(value, Mapping):
        return MappingReader(value)
    if isinstance(value, BaseModel):
        return ModelReader(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return DataclassReader(value)
    return AttributeReader(value)
