"""
simple-odata

Client for OData services: entry inserts, updates, deletes and links,
with batches whose entries can refer to each other before they exist.
"""

__version__ = "0.1.0"

from .client import ODataClient
from .batch import ODataBatch, EntryHandle
from .config import Settings, get_settings
from .schema import (
    UnresolvableObjectError,
    UnresolvableCollectionError,
    UnresolvableMemberError,
    UnresolvableAssociationError,
)
from .transport import BatchRequestError

__all__ = [
    "ODataClient",
    "ODataBatch",
    "EntryHandle",
    "Settings",
    "get_settings",
    "UnresolvableObjectError",
    "UnresolvableCollectionError",
    "UnresolvableMemberError",
    "UnresolvableAssociationError",
    "BatchRequestError",
]
