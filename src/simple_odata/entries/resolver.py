"""
Association resolver

Decides how an associated value is linked: through the content-id of an
entry queued earlier in the same batch, or through the key values read
off the value itself.
"""

from typing import Any, Dict, Optional
import structlog

from ..batch.interface import IRequestContext
from ..commands.paths import entry_path
from ..schema.interface import ISchema
from .field_access import as_field_reader

logger = structlog.get_logger(__name__)


class AssociationResolver:
    """Resolves association targets against the schema and request context"""

    def __init__(self, schema: ISchema, context: IRequestContext):
        self.schema = schema
        self.context = context

    def content_id_for(self, value: Any) -> int:
        return self.context.content_id_for(value)

    def resolve_key(self, reference_collection: str, value: Any) -> Optional[Dict[str, Any]]:
        """
        Read the target collection's key fields off an associated value.

        Returns:
            Key values by field name, or None if any key field is missing
        """
        reader = as_field_reader(value)
        key: Dict[str, Any] = {}
        for key_name in self.schema.find_collection(reference_collection).get_key_names():
            found, key_value = reader.try_read(key_name)
            if not found:
                logger.debug("Link target has no value for key field, link skipped",
                             collection=reference_collection, key_field=key_name)
                return None
            key[key_name] = key_value
        return key

    def resolve_link_path(self, reference_collection: str, value: Any) -> Optional[str]:
        """Entry path of an associated value, or None if its key is incomplete"""
        key = self.resolve_key(reference_collection, value)
        if key is None:
            return None
        return entry_path(self.schema.find_collection(reference_collection), key)
