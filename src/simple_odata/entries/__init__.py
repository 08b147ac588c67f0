"""
Entry members: classification of entity payloads and resolution of
association targets.
"""

from .members import EntryMembers
from .classifier import MemberClassifier
from .resolver import AssociationResolver
from .field_access import FieldReader, as_field_reader

__all__ = [
    "EntryMembers",
    "MemberClassifier",
    "AssociationResolver",
    "FieldReader",
    "as_field_reader",
]
