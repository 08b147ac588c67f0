"""
Command factory

Builds wire commands for entry writes and for link/unlink operations.

Protocol rules applied here:
    - associations resolvable by value are bound inline in the entry body
      (``<Association>@odata.bind``); multiple associations bind a list;
    - links to a multiple association are POSTed, links to a single
      association are PUT; unlinks are always DELETE;
    - updates use full replace (PUT) when there is nothing to merge, or when
      the supplied key carries fields that are neither key fields nor part
      of the payload; otherwise the configured merge verb.
"""

from typing import Any, Dict, List, Mapping, Tuple, TYPE_CHECKING

from ..entries.members import EntryMembers
from ..schema.interface import Collection, ISchema
from . import paths
from .wire import WireCommand, RestVerb, serialize_body

if TYPE_CHECKING:
    from ..entries.resolver import AssociationResolver

BIND_ANNOTATION = "@odata.bind"
ID_ANNOTATION = "@odata.id"


class CommandFactory:
    """Builds wire commands from classified entry members"""

    def __init__(
        self,
        schema: ISchema,
        resolver: "AssociationResolver",
        merge_verb: RestVerb = "PATCH",
    ):
        self.schema = schema
        self.resolver = resolver
        self.merge_verb = merge_verb

    # Entry writes
    def build_insert(
        self, collection_name: str, payload: Mapping[str, Any], members: EntryMembers
    ) -> WireCommand:
        collection = self.schema.find_collection(collection_name)
        body = self._build_entry_body(collection, members)
        return WireCommand("POST", collection.actual_name, payload, serialize_body(body))

    def build_update(
        self,
        collection_name: str,
        key: Mapping[str, Any],
        payload: Mapping[str, Any],
        members: EntryMembers,
    ) -> WireCommand:
        collection = self.schema.find_collection(collection_name)
        verb: RestVerb = "PUT" if self.use_full_replace(collection, key, payload, members) \
            else self.merge_verb
        body = self._build_entry_body(collection, members)
        return WireCommand(verb, paths.entry_path(collection, key), payload, serialize_body(body))

    def build_delete(self, collection_name: str, key: Mapping[str, Any]) -> WireCommand:
        collection = self.schema.find_collection(collection_name)
        return WireCommand.delete(paths.entry_path(collection, key))

    def use_full_replace(
        self,
        collection: Collection,
        key: Mapping[str, Any],
        payload: Mapping[str, Any],
        members: EntryMembers,
    ) -> bool:
        """Merge decision for updates; True selects PUT"""
        if not members.has_properties:
            return True
        key_names = collection.get_key_names()
        return any(name not in key_names and name not in payload for name in key)

    # Links
    def build_link(
        self,
        collection_name: str,
        key: Mapping[str, Any],
        association_name: str,
        target_key: Mapping[str, Any],
    ) -> WireCommand:
        collection = self.schema.find_collection(collection_name)
        association = collection.find_association(association_name)
        target = self.schema.find_collection(association.reference_collection)
        return self._link_command(
            collection,
            association_name,
            paths.entry_path(collection, key),
            paths.entry_path(target, target_key),
        )

    def build_content_id_link(
        self,
        collection_name: str,
        association_name: str,
        source_content_id: int,
        target_content_id: int,
    ) -> WireCommand:
        collection = self.schema.find_collection(collection_name)
        command = self._link_command(
            collection,
            association_name,
            paths.content_id_path(source_content_id),
            paths.content_id_path(target_content_id),
        )
        command.depends_on = (source_content_id, target_content_id)
        return command

    def build_unlink(
        self, collection_name: str, key: Mapping[str, Any], association_name: str
    ) -> WireCommand:
        collection = self.schema.find_collection(collection_name)
        association = collection.find_association(association_name)
        return WireCommand.delete(
            paths.link_path(paths.entry_path(collection, key), association.actual_name)
        )

    def _link_command(
        self, collection: Collection, association_name: str, source_path: str, target_path: str
    ) -> WireCommand:
        association = collection.find_association(association_name)
        verb: RestVerb = "POST" if association.is_multiple else "PUT"
        return WireCommand(
            verb,
            paths.link_path(source_path, association.actual_name),
            None,
            serialize_body({ID_ANNOTATION: target_path}),
            omit_from_result=True,
        )

    # Bodies
    def _build_entry_body(self, collection: Collection, members: EntryMembers) -> Dict[str, Any]:
        body: Dict[str, Any] = dict(members.properties)
        for annotation, target in self._inline_links(collection, members.associations_by_value):
            if isinstance(target, list):
                body.setdefault(annotation, []).extend(target)
            else:
                body[annotation] = target
        return body

    def _inline_links(
        self, collection: Collection, associations: List[Tuple[str, Any]]
    ) -> List[Tuple[str, Any]]:
        links = []
        for association_name, value in associations:
            association = collection.find_association(association_name)
            target_path = self.resolver.resolve_link_path(association.reference_collection, value)
            if target_path is None:
                continue
            annotation = f"{association.actual_name}{BIND_ANNOTATION}"
            links.append((annotation, [target_path] if association.is_multiple else target_path))
        return links
