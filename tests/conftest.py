"""Shared test helpers for the l5xdata test suite."""

import textwrap

from lxml import etree

from l5xdata.config import SerializerConfig
from l5xdata.model.types import Member, TypeDefinition
from l5xdata.registry import TypeRegistry
from l5xdata.serialize import Serializer


def xml(source: str):
    """Parse an XML snippet (indentation-insensitive) into an element."""
    return etree.fromstring(textwrap.dedent(source).strip())


def member(name: str, data_type: str, **kwargs) -> Member:
    return Member(name=name, data_type=data_type, **kwargs)


def udt(name: str, *members: Member, **kwargs) -> TypeDefinition:
    """Build a user-defined TypeDefinition from members."""
    return TypeDefinition(name=name, members=tuple(members), **kwargs)


def controller(*data_types: str, modules: str = "", instructions: str = ""):
    """Wrap DataType / Module / AddOnInstructionDefinition snippets in a document."""
    body = "".join(data_types)
    return xml(
        "<RSLogix5000Content><Controller Name=\"PLC\">"
        f"<DataTypes>{body}</DataTypes>"
        f"<Modules>{modules}</Modules>"
        f"<AddOnInstructionDefinitions>{instructions}</AddOnInstructionDefinitions>"
        "</Controller></RSLogix5000Content>"
    )


MOTOR_DATA_TYPE = """
<DataType Name="MOTOR" Family="NoFamily" Class="User">
  <Members>
    <Member Name="Run" DataType="BIT" Dimension="0" Radix="Decimal" Hidden="false" ExternalAccess="Read/Write"/>
    <Member Name="Speed" DataType="DINT" Dimension="0" Radix="Decimal" Hidden="false" ExternalAccess="Read/Write"/>
  </Members>
</DataType>
"""

MOTOR_STRUCTURE = """
<Structure DataType="MOTOR">
  <DataValueMember Name="Run" DataType="BOOL" Value="1"/>
  <DataValueMember Name="Speed" DataType="DINT" Radix="Decimal" Value="1750"/>
</Structure>
"""


def motor_serializer(**config) -> Serializer:
    """Serializer over a document that defines MOTOR {Run: BOOL, Speed: DINT}."""
    registry = TypeRegistry.for_document(controller(MOTOR_DATA_TYPE))
    return Serializer(registry, SerializerConfig(**config))
