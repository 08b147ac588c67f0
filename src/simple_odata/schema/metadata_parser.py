"""
EDMX metadata parser

Parses an OData v4 $metadata document (CSDL XML) into an EdmSchema.
Entity types are resolved through their base types, so inherited keys,
properties and navigation properties show up on every derived set.
"""

import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Tuple, Any
import structlog

from .interface import Association, Collection, FunctionImport
from .edm_schema import EdmSchema

logger = structlog.get_logger(__name__)

EDM_NS = "{http://docs.oasis-open.org/odata/ns/edm}"


class MetadataParseError(ValueError):
    """The metadata document is not valid CSDL"""
    pass


def _local_name(qualified: str) -> str:
    """Strip namespace or alias from a qualified type name"""
    if qualified.startswith("Collection(") and qualified.endswith(")"):
        qualified = qualified[len("Collection("):-1]
    return qualified.rsplit(".", 1)[-1]


class MetadataParser:
    """Parser for OData v4 CSDL metadata documents"""

    def parse(self, metadata_xml: str) -> EdmSchema:
        """
        Parse a metadata document.

        Args:
            metadata_xml: Full $metadata XML

        Returns:
            Schema with one collection per entity set

        Raises:
            MetadataParseError: If the document is not well-formed CSDL
        """
        try:
            root = ET.fromstring(metadata_xml)
        except ET.ParseError as e:
            raise MetadataParseError(f"Invalid metadata XML: {e}") from e

        entity_types = self._parse_entity_types(root)
        if not entity_types and root.find(f".//{EDM_NS}Schema") is None:
            raise MetadataParseError("No CSDL v4 Schema element found in metadata")

        container = root.find(f".//{EDM_NS}EntityContainer")
        if container is None:
            logger.warning("EntityContainer not found in metadata")
            return EdmSchema([])

        entity_sets = self._parse_entity_sets(container)
        set_for_type: Dict[str, str] = {}
        for set_name, (type_name, _) in entity_sets.items():
            set_for_type.setdefault(type_name, set_name)

        collections = []
        for set_name, (type_name, bindings) in entity_sets.items():
            if type_name not in entity_types:
                logger.warning("EntityType not found for EntitySet",
                               set_name=set_name, entity_type=type_name)
                continue
            keys, columns, nav_props = self._resolve_type(type_name, entity_types)
            associations = {}
            for nav_name, (target_type, is_collection) in nav_props.items():
                target_set = bindings.get(nav_name) or set_for_type.get(target_type)
                if target_set is None:
                    logger.debug("Navigation target has no entity set",
                                 set_name=set_name, navigation=nav_name, target_type=target_type)
                    continue
                associations[nav_name] = Association(
                    name=nav_name,
                    reference_collection=target_set,
                    is_multiple=is_collection,
                )
            collections.append(Collection(
                name=set_name,
                key_names=tuple(keys),
                column_names=frozenset(columns),
                associations=associations,
            ))

        functions = self._parse_imports(root, container)

        schema = EdmSchema(collections, functions)
        logger.info("Metadata parsed", **schema.get_schema_info())
        return schema

    def _parse_entity_types(self, root: ET.Element) -> Dict[str, Dict[str, Any]]:
        """Parse EntityType definitions without resolving inheritance"""
        entity_types: Dict[str, Dict[str, Any]] = {}

        for entity_type in root.findall(f".//{EDM_NS}EntityType"):
            name = entity_type.get("Name")
            if not name:
                continue

            keys: List[str] = []
            key_element = entity_type.find(f"./{EDM_NS}Key")
            if key_element is not None:
                for key_ref in key_element.findall(f"./{EDM_NS}PropertyRef"):
                    key_name = key_ref.get("Name")
                    if key_name:
                        keys.append(key_name)

            columns = [
                prop.get("Name") for prop in entity_type.findall(f"./{EDM_NS}Property")
                if prop.get("Name")
            ]

            nav_props: Dict[str, Tuple[str, bool]] = {}
            for nav_prop in entity_type.findall(f"./{EDM_NS}NavigationProperty"):
                prop_name = nav_prop.get("Name")
                prop_type = nav_prop.get("Type", "")
                if not prop_name or not prop_type:
                    continue
                nav_props[prop_name] = (_local_name(prop_type), prop_type.startswith("Collection("))

            base_type = entity_type.get("BaseType")
            entity_types[name] = {
                "keys": keys,
                "columns": columns,
                "nav_props": nav_props,
                "base_type": _local_name(base_type) if base_type else None,
            }

        return entity_types

    def _resolve_type(
        self, type_name: str, entity_types: Dict[str, Dict[str, Any]]
    ) -> Tuple[List[str], List[str], Dict[str, Tuple[str, bool]]]:
        """Merge a type with its base types, base first"""
        chain = []
        seen = set()
        current: Optional[str] = type_name
        while current and current in entity_types and current not in seen:
            seen.add(current)
            chain.append(entity_types[current])
            current = entity_types[current]["base_type"]

        keys: List[str] = []
        columns: List[str] = []
        nav_props: Dict[str, Tuple[str, bool]] = {}
        for definition in reversed(chain):
            if definition["keys"]:
                keys = list(definition["keys"])
            columns.extend(c for c in definition["columns"] if c not in columns)
            nav_props.update(definition["nav_props"])
        return keys, columns, nav_props

    def _parse_entity_sets(
        self, container: ET.Element
    ) -> Dict[str, Tuple[str, Dict[str, str]]]:
        """Parse EntitySet definitions with their navigation bindings"""
        entity_sets = {}
        for entity_set in container.findall(f"./{EDM_NS}EntitySet"):
            set_name = entity_set.get("Name")
            entity_type_ref = entity_set.get("EntityType")
            if not set_name or not entity_type_ref:
                continue

            bindings = {}
            for binding in entity_set.findall(f"./{EDM_NS}NavigationPropertyBinding"):
                path = binding.get("Path")
                target = binding.get("Target")
                if path and target:
                    # Path may be type-cast qualified: NS.Derived/Nav
                    bindings[path.rsplit("/", 1)[-1]] = target.rsplit("/", 1)[-1]

            entity_sets[set_name] = (_local_name(entity_type_ref), bindings)
        return entity_sets

    def _parse_imports(self, root: ET.Element, container: ET.Element) -> List[FunctionImport]:
        """Parse FunctionImport and ActionImport definitions"""
        parameters = self._parameter_index(root)
        imports = []
        for element, kind, ref_attr in (
            ("FunctionImport", "function", "Function"),
            ("ActionImport", "action", "Action"),
        ):
            for item in container.findall(f"./{EDM_NS}{element}"):
                name = item.get("Name")
                if not name:
                    continue
                target = _local_name(item.get(ref_attr, name))
                imports.append(FunctionImport(
                    name=name,
                    kind=kind,  # type: ignore[arg-type]
                    parameter_names=parameters.get(target, ()),
                ))
        return imports

    def _parameter_index(self, root: ET.Element) -> Dict[str, Tuple[str, ...]]:
        """Parameter names of unbound functions and actions"""
        index: Dict[str, Tuple[str, ...]] = {}
        for tag in ("Function", "Action"):
            for operation in root.iter(f"{EDM_NS}{tag}"):
                if operation.get("IsBound", "false").lower() == "true":
                    continue
                index[operation.get("Name", "")] = tuple(
                    p.get("Name", "") for p in operation.findall(f"./{EDM_NS}Parameter")
                )
        return index


def parse_metadata(metadata_xml: str) -> EdmSchema:
    """Parse a metadata document into a schema"""
    return MetadataParser().parse(metadata_xml)
