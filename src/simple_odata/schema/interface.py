"""
Schema Interface

Defines the read-only schema contract consumed by the mutation pipeline:
collections, their keys, columns and associations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Tuple, FrozenSet, Literal


class UnresolvableObjectError(Exception):
    """A name could not be resolved against the service schema"""

    def __init__(self, object_name: str, message: str):
        super().__init__(message)
        self.object_name = object_name


class UnresolvableCollectionError(UnresolvableObjectError):
    """No entity set with the given name"""
    pass


class UnresolvableMemberError(UnresolvableObjectError):
    """A payload field is neither a column nor an association"""
    pass


class UnresolvableAssociationError(UnresolvableObjectError):
    """No navigation property with the given name"""
    pass


class UnresolvableFunctionError(UnresolvableObjectError):
    """No function or action import with the given name"""
    pass


@dataclass(frozen=True)
class Association:
    """A navigation property from one collection to another"""

    name: str
    reference_collection: str
    is_multiple: bool
    actual_name: str = ""

    def __post_init__(self) -> None:
        if not self.actual_name:
            object.__setattr__(self, "actual_name", self.name)


@dataclass(frozen=True)
class Collection:
    """An entity set: key shape, columns and associations"""

    name: str
    key_names: Tuple[str, ...]
    column_names: FrozenSet[str]
    associations: Dict[str, Association] = field(default_factory=dict)
    actual_name: str = ""

    def __post_init__(self) -> None:
        if not self.actual_name:
            object.__setattr__(self, "actual_name", self.name)

    def has_column(self, name: str) -> bool:
        return name in self.column_names

    def has_association(self, name: str) -> bool:
        return name in self.associations

    def find_association(self, name: str) -> Association:
        try:
            return self.associations[name]
        except KeyError:
            raise UnresolvableAssociationError(
                name, f"No association {name} found in {self.name}."
            ) from None

    def get_key_names(self) -> Tuple[str, ...]:
        return self.key_names


@dataclass(frozen=True)
class FunctionImport:
    """A function (GET) or action (POST) exposed at the service root"""

    name: str
    kind: Literal["function", "action"]
    parameter_names: Tuple[str, ...] = ()

    @property
    def http_method(self) -> str:
        return "GET" if self.kind == "function" else "POST"


class ISchema(ABC):
    """Interface for resolved service schemas"""

    @abstractmethod
    def find_collection(self, name: str) -> Collection:
        """
        Resolve a collection by entity set name.

        Args:
            name: Entity set name; matched exactly, then case-insensitively

        Returns:
            The collection definition

        Raises:
            UnresolvableCollectionError: If no entity set matches
        """
        pass

    @abstractmethod
    def find_function(self, name: str) -> FunctionImport:
        """
        Resolve a function or action import by name.

        Raises:
            UnresolvableFunctionError: If no import matches
        """
        pass

    def find_association(self, collection: str, name: str) -> Association:
        """Resolve a named association of a collection"""
        return self.find_collection(collection).find_association(name)
