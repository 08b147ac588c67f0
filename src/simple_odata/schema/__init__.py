"""
Schema module

Collection, key and association metadata of an OData service.
"""

from .interface import (
    ISchema,
    Collection,
    Association,
    FunctionImport,
    UnresolvableObjectError,
    UnresolvableCollectionError,
    UnresolvableMemberError,
    UnresolvableAssociationError,
    UnresolvableFunctionError,
)
from .edm_schema import EdmSchema
from .metadata_parser import MetadataParser, MetadataParseError, parse_metadata
from .service import SchemaService

__all__ = [
    "ISchema",
    "Collection",
    "Association",
    "FunctionImport",
    "UnresolvableObjectError",
    "UnresolvableCollectionError",
    "UnresolvableMemberError",
    "UnresolvableAssociationError",
    "UnresolvableFunctionError",
    "EdmSchema",
    "MetadataParser",
    "MetadataParseError",
    "parse_metadata",
    "SchemaService",
]
