"""
Request contexts

Direct execution and batched execution with content-id references.
"""

from .interface import IRequestContext
from .handles import EntryHandle
from .direct import DirectContext
from .batch import ODataBatch, BatchStateError

__all__ = [
    "IRequestContext",
    "EntryHandle",
    "DirectContext",
    "ODataBatch",
    "BatchStateError",
]
