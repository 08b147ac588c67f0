"""
EDM Schema

In-memory ISchema built from a parsed $metadata document. Immutable once
constructed and shared read-only by every client operation.
"""

from typing import Dict, Any, List, Optional

from .interface import (
    ISchema,
    Collection,
    FunctionImport,
    UnresolvableCollectionError,
    UnresolvableFunctionError,
)


class EdmSchema(ISchema):
    """Schema over a fixed set of collections and function imports"""

    def __init__(
        self,
        collections: List[Collection],
        functions: Optional[List[FunctionImport]] = None,
    ):
        self._collections: Dict[str, Collection] = {c.name: c for c in collections}
        self._collections_folded: Dict[str, Collection] = {
            c.name.lower(): c for c in collections
        }
        self._functions: Dict[str, FunctionImport] = {f.name: f for f in functions or []}

    def find_collection(self, name: str) -> Collection:
        collection = self._collections.get(name) or self._collections_folded.get(name.lower())
        if collection is None:
            raise UnresolvableCollectionError(name, f"No collection found for {name}.")
        return collection

    def find_function(self, name: str) -> FunctionImport:
        try:
            return self._functions[name]
        except KeyError:
            raise UnresolvableFunctionError(name, f"No function found for {name}.") from None

    @property
    def collection_names(self) -> List[str]:
        return sorted(self._collections)

    def get_schema_info(self) -> Dict[str, Any]:
        return {
            "collections": len(self._collections),
            "associations": sum(len(c.associations) for c in self._collections.values()),
            "functions": len(self._functions),
        }
