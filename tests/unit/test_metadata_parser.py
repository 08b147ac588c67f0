"""
Tests for the metadata parser and EdmSchema lookups
"""

import pytest

from simple_odata.schema import (
    MetadataParseError,
    UnresolvableAssociationError,
    UnresolvableCollectionError,
    UnresolvableFunctionError,
    parse_metadata,
)


@pytest.mark.unit
class TestMetadataParser:
    def test_collections_from_entity_sets(self, schema):
        """Every entity set with a known type becomes a collection"""
        assert schema.collection_names == [
            "Customers", "Lines", "Orders", "SpecialOrders", "Warehouses"
        ]

    def test_keys_and_columns(self, schema):
        """Test keys and columns"""
        orders = schema.find_collection("Orders")

        assert orders.get_key_names() == ("OrderId",)
        assert orders.column_names == frozenset({"OrderId", "Total", "Note"})

    def test_composite_key_order_preserved(self, schema):
        """Test composite key order preserved"""
        warehouses = schema.find_collection("Warehouses")

        assert warehouses.get_key_names() == ("DataAreaId", "WarehouseId")

    def test_association_multiplicity(self, schema):
        """Test association multiplicity"""
        orders = schema.find_collection("Orders")

        customer = orders.find_association("Customer")
        lines = orders.find_association("Lines")

        assert customer.reference_collection == "Customers"
        assert customer.is_multiple is False
        assert lines.reference_collection == "Lines"
        assert lines.is_multiple is True

    def test_inherited_members(self, schema):
        """Derived types carry base keys, properties and navigation"""
        special = schema.find_collection("SpecialOrders")

        assert special.get_key_names() == ("OrderId",)
        assert special.has_column("Priority")
        assert special.has_column("Total")
        # No binding on the set; target resolved by entity type
        assert special.find_association("Customer").reference_collection == "Customers"

    def test_function_and_action_imports(self, schema):
        """Test function and action imports"""
        top = schema.find_function("TopCustomers")
        close = schema.find_function("CloseOrder")

        assert top.http_method == "GET"
        assert top.parameter_names == ("Count",)
        assert close.http_method == "POST"
        assert close.parameter_names == ("OrderId",)

    def test_schema_info(self, schema):
        """Test schema info"""
        info = schema.get_schema_info()

        assert info["collections"] == 5
        assert info["functions"] == 2

    def test_invalid_xml(self):
        """Test invalid XML is rejected"""
        with pytest.raises(MetadataParseError):
            parse_metadata("<not-closed")

    def test_document_without_schema(self):
        """Test a document without a CSDL schema is rejected"""
        with pytest.raises(MetadataParseError):
            parse_metadata("<root/>")


@pytest.mark.unit
class TestEdmSchemaLookup:
    def test_case_insensitive_collection_fallback(self, schema):
        """Test case insensitive collection fallback"""
        assert schema.find_collection("orders").name == "Orders"

    def test_unknown_collection(self, schema):
        """Test unknown collection"""
        with pytest.raises(UnresolvableCollectionError) as exc_info:
            schema.find_collection("Invoices")

        assert exc_info.value.object_name == "Invoices"

    def test_unknown_association(self, schema):
        """Test unknown association"""
        with pytest.raises(UnresolvableAssociationError):
            schema.find_association("Orders", "Invoice")

    def test_association_lookup_is_exact(self, schema):
        """Test association lookup is exact"""
        with pytest.raises(UnresolvableAssociationError):
            schema.find_association("Orders", "customer")

    def test_unknown_function(self, schema):
        """Test unknown function"""
        with pytest.raises(UnresolvableFunctionError):
            schema.find_function("Missing")
