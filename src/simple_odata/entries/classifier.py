"""
Member classifier

Splits a flat entity payload into properties and associations. Each
field must be a column or an association of the target collection; the
first field that is neither aborts the operation before any command is
built.
"""

from collections.abc import Iterator, Sequence, Set
from typing import Any, Mapping

from ..schema.interface import Collection, ISchema, UnresolvableMemberError
from .members import EntryMembers
from .resolver import AssociationResolver


def _is_sequence(value: Any) -> bool:
    # A pydantic model is iterable but is a single target
    return isinstance(value, (Sequence, Set, Iterator)) and not isinstance(value, (str, bytes))


class MemberClassifier:
    """Classifies payload fields using schema metadata"""

    def __init__(self, schema: ISchema, resolver: AssociationResolver):
        self.schema = schema
        self.resolver = resolver

    def classify(self, collection_name: str, payload: Mapping[str, Any]) -> EntryMembers:
        """
        Classify every field of ``payload``.

        Raises:
            UnresolvableMemberError: If a field is neither a column nor an
                association of the collection
        """
        collection = self.schema.find_collection(collection_name)
        members = EntryMembers()
        for name, value in payload.items():
            self._classify_member(collection, name, value, members)
        return members

    def _classify_member(
        self, collection: Collection, name: str, value: Any, members: EntryMembers
    ) -> None:
        if collection.has_column(name):
            members.add_property(name, value)
        elif collection.has_association(name):
            association = collection.find_association(name)
            if value is None:
                members.add_unlink(name)
            elif association.is_multiple and _is_sequence(value):
                for element in value:
                    if element is not None:
                        self._add_association(members, name, element)
            else:
                self._add_association(members, name, value)
        else:
            raise UnresolvableMemberError(
                name, f"No property or association found for {name}."
            )

    def _add_association(self, members: EntryMembers, name: str, value: Any) -> None:
        content_id = self.resolver.content_id_for(value)
        if content_id == 0:
            members.add_association_by_value(name, value)
        else:
            members.add_association_by_content_id(name, content_id)
