"""
Pytest configuration and fixtures for simple-odata tests
"""

import pytest

from simple_odata.client import ODataClient
from simple_odata.config import Settings
from simple_odata.factories import RecordingTransport
from simple_odata.schema import parse_metadata


SAMPLE_METADATA = """<?xml version="1.0" encoding="utf-8"?>
<edmx:Edmx Version="4.0" xmlns:edmx="http://docs.oasis-open.org/odata/ns/edmx">
  <edmx:DataServices>
    <Schema Namespace="Sales" xmlns="http://docs.oasis-open.org/odata/ns/edm">
      <EntityType Name="Order">
        <Key><PropertyRef Name="OrderId"/></Key>
        <Property Name="OrderId" Type="Edm.Int32" Nullable="false"/>
        <Property Name="Total" Type="Edm.Decimal"/>
        <Property Name="Note" Type="Edm.String"/>
        <NavigationProperty Name="Customer" Type="Sales.Customer"/>
        <NavigationProperty Name="Lines" Type="Collection(Sales.Line)"/>
      </EntityType>
      <EntityType Name="SpecialOrder" BaseType="Sales.Order">
        <Property Name="Priority" Type="Edm.Int32"/>
      </EntityType>
      <EntityType Name="Customer">
        <Key><PropertyRef Name="CustomerId"/></Key>
        <Property Name="CustomerId" Type="Edm.Int32" Nullable="false"/>
        <Property Name="Name" Type="Edm.String"/>
        <NavigationProperty Name="Orders" Type="Collection(Sales.Order)"/>
      </EntityType>
      <EntityType Name="Line">
        <Key><PropertyRef Name="LineId"/></Key>
        <Property Name="LineId" Type="Edm.Int32" Nullable="false"/>
        <Property Name="Sku" Type="Edm.String"/>
        <Property Name="Qty" Type="Edm.Int32"/>
        <NavigationProperty Name="Order" Type="Sales.Order"/>
      </EntityType>
      <EntityType Name="Warehouse">
        <Key>
          <PropertyRef Name="DataAreaId"/>
          <PropertyRef Name="WarehouseId"/>
        </Key>
        <Property Name="DataAreaId" Type="Edm.String" Nullable="false"/>
        <Property Name="WarehouseId" Type="Edm.String" Nullable="false"/>
        <Property Name="Name" Type="Edm.String"/>
      </EntityType>
      <Function Name="TopCustomers">
        <Parameter Name="Count" Type="Edm.Int32"/>
        <ReturnType Type="Collection(Sales.Customer)"/>
      </Function>
      <Action Name="CloseOrder">
        <Parameter Name="OrderId" Type="Edm.Int32"/>
      </Action>
      <EntityContainer Name="Container">
        <EntitySet Name="Orders" EntityType="Sales.Order">
          <NavigationPropertyBinding Path="Customer" Target="Customers"/>
          <NavigationPropertyBinding Path="Lines" Target="Lines"/>
        </EntitySet>
        <EntitySet Name="SpecialOrders" EntityType="Sales.SpecialOrder"/>
        <EntitySet Name="Customers" EntityType="Sales.Customer">
          <NavigationPropertyBinding Path="Orders" Target="Orders"/>
        </EntitySet>
        <EntitySet Name="Lines" EntityType="Sales.Line">
          <NavigationPropertyBinding Path="Order" Target="Orders"/>
        </EntitySet>
        <EntitySet Name="Warehouses" EntityType="Sales.Warehouse"/>
        <FunctionImport Name="TopCustomers" Function="Sales.TopCustomers"/>
        <ActionImport Name="CloseOrder" Action="Sales.CloseOrder"/>
      </EntityContainer>
    </Schema>
  </edmx:DataServices>
</edmx:Edmx>
"""


@pytest.fixture
def sample_metadata():
    """Sample CSDL v4 metadata document"""
    return SAMPLE_METADATA


@pytest.fixture
def schema(sample_metadata):
    """Schema parsed from the sample metadata"""
    return parse_metadata(sample_metadata)


@pytest.fixture
def mock_settings():
    """Settings for testing"""
    return Settings(
        odata_service_url="https://sales.example.com/odata/",
        auth_provider="none",
        transport="recording",
    )


@pytest.fixture
def recording_transport(sample_metadata):
    """Transport that records commands instead of sending them"""
    return RecordingTransport(sample_metadata)


@pytest.fixture
def client(schema, recording_transport):
    """Client in direct mode over the recording transport"""
    return ODataClient(schema, recording_transport)
