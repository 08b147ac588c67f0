"""
OData Client

Public entry point for entry writes, links and the read helpers they
build on. Each write runs the same pipeline: classify the payload,
resolve its associations, build and queue the primary command, then
build and queue the secondary commands (content-id links, unlinks) that
refer to it.
"""

from typing import Any, Callable, Awaitable, Dict, List, Mapping, Optional, Tuple, Union
import structlog

from .batch import DirectContext, EntryHandle, IRequestContext, ODataBatch
from .commands import paths
from .commands.factory import CommandFactory
from .commands.wire import RestVerb, WireCommand
from .entries import AssociationResolver, EntryMembers, MemberClassifier
from .schema.interface import ISchema
from .transport.interface import ITransport, ODataResponse

logger = structlog.get_logger(__name__)

Entry = Dict[str, Any]


class ODataClient:
    """
    Client for one OData service.

    Outside a batch every command is sent as soon as it is built. Inside a
    batch (see :meth:`batch`) commands are queued, ``insert_entry`` returns
    an :class:`EntryHandle`, and handles can be used as associated values in
    later payloads of the same batch.
    """

    def __init__(
        self,
        schema: ISchema,
        transport: ITransport,
        context: Optional[IRequestContext] = None,
        merge_verb: RestVerb = "PATCH",
    ):
        self.schema = schema
        self.transport = transport
        self.context = context or DirectContext(transport)
        self.merge_verb = merge_verb

        self.resolver = AssociationResolver(schema, self.context)
        self.classifier = MemberClassifier(schema, self.resolver)
        self.commands = CommandFactory(schema, self.resolver, merge_verb)

    def batch(self) -> ODataBatch:
        """
        Open a batch on the same service.

        Usage::

            async with client.batch() as batch:
                line = await batch.client.insert_entry("Lines", {"Sku": "A"})
                await batch.client.insert_entry("Orders", {"OrderId": 5, "Lines": [line]})
        """
        batch = ODataBatch(self.transport)
        batch.client = ODataClient(self.schema, self.transport, batch, self.merge_verb)
        return batch

    # Reads
    async def _query(self, command_text: str) -> Tuple[List[Entry], Dict[str, Any]]:
        response = await self.transport.get(command_text)
        payload = response.payload or {}
        if isinstance(payload.get("value"), list):
            return list(payload["value"]), payload
        return ([payload] if payload else []), payload

    async def find_entries(
        self, command_text: str, include_count: bool = False
    ) -> Union[List[Entry], Tuple[List[Entry], Optional[int]]]:
        """
        Run a query and return its entries.

        Args:
            command_text: Resource path and query options, sent verbatim
            include_count: Also return the service's ``@odata.count``; the
                query must ask for it with ``$count=true``

        Returns:
            Entries, or (entries, total count) with ``include_count``. The
            count is None when the service sent none.
        """
        entries, payload = await self._query(command_text)
        if include_count:
            count = payload.get("@odata.count")
            return entries, int(count) if count is not None else None
        return entries

    async def find_entry(self, command_text: str) -> Optional[Entry]:
        entries, _ = await self._query(command_text)
        return entries[0] if entries else None

    async def find_scalar(self, command_text: str) -> Any:
        """First value of the first entry; for $count and single-property paths"""
        entries, payload = await self._query(command_text)
        if "value" in payload and not isinstance(payload["value"], list):
            return payload["value"]
        if not entries:
            return None
        return next((v for k, v in entries[0].items() if not k.startswith("@")), None)

    async def get_entry(self, collection: str, *key_parts: Any) -> Optional[Entry]:
        """
        Get an entry by positional key values, in declared key order.

        Raises:
            ValueError: If the number of values differs from the number of
                key fields
        """
        key_names = self.schema.find_collection(collection).get_key_names()
        if len(key_parts) != len(key_names):
            raise ValueError(
                f"{collection} has {len(key_names)} key field(s) {list(key_names)}, "
                f"got {len(key_parts)} value(s)"
            )
        return await self.get_entry_by_key(collection, dict(zip(key_names, key_parts)))

    async def get_entry_by_key(self, collection: str, key: Mapping[str, Any]) -> Optional[Entry]:
        path = paths.entry_path(self.schema.find_collection(collection), key)
        response = await self.transport.get(path)
        return response.payload

    # Writes
    async def insert_entry(
        self, collection: str, entry_data: Mapping[str, Any], result_required: bool = True
    ) -> Union[Entry, EntryHandle, None]:
        """
        Insert an entry and link it to its associated entries.

        Returns:
            The inserted entry when ``result_required``, None otherwise;
            inside a batch, a handle for the queued insert
        """
        members = self.classifier.classify(collection, entry_data)

        command = self.commands.build_insert(collection, entry_data, members)
        command.headers["Prefer"] = "return=representation" if result_required else "return=minimal"
        self.context.add_command(command)
        response = await self.context.run(command)

        await self._link_by_content_id(collection, command, members)

        logger.info("Entry inserted", collection=collection, batch=self.context.is_batch,
                    content_id_links=len(members.associations_by_content_id))

        if self.context.is_batch:
            return self.context.create_handle(command, collection)
        if not result_required or response is None:
            return None
        return response.payload

    async def update_entry(
        self, collection: str, entry_key: Mapping[str, Any], entry_data: Mapping[str, Any]
    ) -> int:
        """
        Update an entry, its links, and unlink associations set to None.

        Returns:
            Number of updated entries (0 or 1)
        """
        members = self.classifier.classify(collection, entry_data)
        return await self._update_members(collection, entry_key, entry_data, members)

    async def _update_members(
        self,
        collection: str,
        entry_key: Mapping[str, Any],
        entry_data: Mapping[str, Any],
        members: EntryMembers,
    ) -> int:
        command = self.commands.build_update(collection, entry_key, entry_data, members)
        self.context.add_command(command)
        response = await self.context.run(command)

        await self._link_by_content_id(collection, command, members)

        for association_name in members.unlinks:
            await self.unlink_entry(collection, entry_key, association_name)

        logger.info("Entry updated", collection=collection, verb=command.verb,
                    unlinks=len(members.unlinks))
        return self._affected(response)

    async def update_entries(
        self, collection: str, command_text: str, entry_data: Mapping[str, Any]
    ) -> int:
        """
        Update the entry addressed by ``command_text``, or every entry the
        query returns.

        Matches are fetched completely before the first update. A failure
        stops the iteration; entries already updated stay updated.

        Returns:
            Number of updated entries
        """
        async def update(key: Mapping[str, Any]) -> int:
            return await self.update_entry(collection, key, entry_data)

        return await self._iterate_entries(collection, command_text, update)

    async def delete_entry(self, collection: str, entry_key: Mapping[str, Any]) -> int:
        command = self.commands.build_delete(collection, entry_key)
        self.context.add_command(command)
        response = await self.context.run(command)
        logger.info("Entry deleted", collection=collection, path=command.path)
        return self._affected(response)

    async def delete_entries(self, collection: str, command_text: str) -> int:
        """Delete the entry addressed by ``command_text``, or every match"""
        async def delete(key: Mapping[str, Any]) -> int:
            return await self.delete_entry(collection, key)

        return await self._iterate_entries(collection, command_text, delete)

    async def link_entry(
        self,
        collection: str,
        entry_key: Mapping[str, Any],
        link_name: str,
        linked_entry_key: Mapping[str, Any],
    ) -> None:
        command = self.commands.build_link(collection, entry_key, link_name, linked_entry_key)
        self.context.add_command(command)
        await self.context.run(command)

    async def unlink_entry(
        self, collection: str, entry_key: Mapping[str, Any], link_name: str
    ) -> None:
        command = self.commands.build_unlink(collection, entry_key, link_name)
        self.context.add_command(command)
        await self.context.run(command)

    # Functions
    async def execute_function(
        self, function_name: str, parameters: Optional[Mapping[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Call a function import (GET) or an action import (POST).

        Returns:
            The decoded response payload; None inside a batch
        """
        function = self.schema.find_function(function_name)
        parameters = parameters or {}
        if function.http_method == "GET":
            command = WireCommand.get(paths.function_path(function.name, parameters))
        else:
            command = WireCommand.post(function.name, parameters, dict(parameters))
        self.context.add_command(command)
        response = await self.context.run(command)
        return response.payload if response is not None else None

    # Helpers
    async def _link_by_content_id(
        self, collection: str, command: WireCommand, members: EntryMembers
    ) -> None:
        for association_name, content_id in members.associations_by_content_id:
            link_command = self.commands.build_content_id_link(
                collection, association_name, command.content_id, content_id
            )
            self.context.add_command(link_command)
            await self.context.run(link_command)

    async def _iterate_entries(
        self,
        collection: str,
        command_text: str,
        func: Callable[[Mapping[str, Any]], Awaitable[int]],
    ) -> int:
        collection_def = self.schema.find_collection(collection)
        entry_key = paths.extract_key_from_command_text(collection_def, command_text)
        if entry_key is not None:
            return await func(entry_key)

        entries, _ = await self._query(command_text)
        key_names = collection_def.get_key_names()
        keys = []
        for entry in entries:
            missing = [name for name in key_names if name not in entry]
            if missing:
                raise ValueError(f"Matched {collection} entry lacks key field(s) {missing}")
            keys.append({name: entry[name] for name in key_names})

        logger.info("Iterating matched entries", collection=collection, count=len(keys))
        for key in keys:
            await func(key)
        return len(keys)

    @staticmethod
    def _affected(response: Optional[ODataResponse]) -> int:
        # Deferred batch commands count as affected once queued
        if response is None:
            return 1
        return 1 if response.is_success else 0
