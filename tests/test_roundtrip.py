"""End-to-end tests: document -> registry -> values -> elements -> values."""

import pytest
from lxml import etree

from l5xdata.model.types import Radix
from l5xdata.model.values import Array, Atomic, Undefined
from l5xdata.registry import TypeRegistry
from l5xdata.serialize import Serializer

from conftest import MOTOR_DATA_TYPE, MOTOR_STRUCTURE, controller, motor_serializer, xml


DOCUMENT_TYPES = (
    MOTOR_DATA_TYPE,
    """
    <DataType Name="LINE" Family="NoFamily" Class="User">
      <Members>
        <Member Name="Drives" DataType="MOTOR" Dimension="2" Radix="NullType" Hidden="false" ExternalAccess="Read/Write"/>
        <Member Name="Label" DataType="STRING" Dimension="0" Radix="NullType" Hidden="false" ExternalAccess="Read/Write"/>
        <Member Name="Ramp" DataType="TIMER" Dimension="0" Radix="NullType" Hidden="false" ExternalAccess="Read/Write"/>
        <Member Name="Gain" DataType="REAL" Dimension="0" Radix="Exponential" Hidden="false" ExternalAccess="Read/Write"/>
        <Member Name="Mode" DataType="SINT" Dimension="0" Radix="ASCII" Hidden="false" ExternalAccess="Read/Write"/>
        <Member Name="Faulted" DataType="BIT" Dimension="0" Radix="Decimal" Hidden="false" ExternalAccess="Read/Write"/>
      </Members>
    </DataType>
    """,
)


def _line_serializer() -> Serializer:
    return Serializer(TypeRegistry.for_document(controller(*DOCUMENT_TYPES)))


# ---------------------------------------------------------------------------
# MOTOR end to end
# ---------------------------------------------------------------------------

class TestMotor:
    def test_definition_has_hidden_backing(self):
        definition = motor_serializer().registry.resolve("MOTOR")
        assert [m.name for m in definition.public_members] == ["Run", "Speed"]
        assert len(definition.hidden_members) == 1

    def test_decoded_value(self):
        value = motor_serializer().decode(xml(MOTOR_STRUCTURE))
        assert value.names == ["Run", "Speed"]
        assert value["Run"] == Atomic(data_type="BOOL", value=True)
        assert value["Speed"] == Atomic(data_type="DINT", value=1750)
        assert len(value.hidden_members) == 1

    def test_reencode(self):
        serializer = motor_serializer()
        node = serializer.encode(serializer.decode(xml(MOTOR_STRUCTURE)))
        members = {c.get("Name"): c for c in node}
        assert members["Run"].get("Value") == "1"
        assert members["Speed"].get("Value") == "1750"
        assert members["ZZZZZZZZZZMOTOR0"].get("Hidden") == "true"
        assert members["ZZZZZZZZZZMOTOR0"].get("Value") == "1"

    def test_decode_encode_decode(self):
        serializer = motor_serializer()
        value = serializer.decode(xml(MOTOR_STRUCTURE))
        assert serializer.decode(serializer.encode(value)) == value

    def test_without_hidden_members(self):
        serializer = motor_serializer(emit_hidden_members=False)
        value = serializer.decode(xml(MOTOR_STRUCTURE))
        assert serializer.decode(serializer.encode(value)) == value

    def test_unknown_type_encodes(self):
        serializer = motor_serializer()
        value = serializer.decode(xml('<Structure DataType="UNKNOWN_TYPE"/>'))
        assert isinstance(value, Undefined)
        node = serializer.encode(value)
        assert etree.tostring(node) == b'<Structure DataType="UNKNOWN_TYPE"/>'


# ---------------------------------------------------------------------------
# Composite values
# ---------------------------------------------------------------------------

class TestComposite:
    def _line(self):
        serializer = _line_serializer()
        value = serializer.registry.instantiate("LINE")
        value["Drives"][1]["Run"].value = True
        value["Drives"][1]["Speed"].value = 900
        value["Drives"][1].sync_backing()
        value["Gain"].value = 0.25
        value["Mode"].value = ord("A")
        value["Faulted"].value = True
        value.sync_backing()
        value["Ramp"]["PRE"].value = 3000
        return serializer, value

    def test_round_trip(self):
        serializer, value = self._line()
        assert serializer.decode(serializer.encode(value)) == value

    def test_round_trip_through_data(self):
        serializer, value = self._line()
        assert serializer.decode_data(serializer.encode_data(value)) == value

    def test_member_radixes_written(self):
        serializer, value = self._line()
        node = serializer.encode(value)
        gain = node.find("DataValueMember[@Name='Gain']")
        mode = node.find("DataValueMember[@Name='Mode']")
        assert gain.get("Radix") == "Exponential"
        assert gain.get("Value") == "2.50000000e-001"
        assert mode.get("Value") == "'A'"

    def test_string_member(self):
        serializer, value = self._line()
        label = serializer.decode_data(
            xml("<Data Format=\"String\" Length=\"4\"><![CDATA['Fill']]></Data>"), "STRING"
        )
        value["Label"] = label
        decoded = serializer.decode(serializer.encode(value))
        assert decoded["Label"]["LEN"].value == 4
        assert decoded == value

    def test_text_is_stable(self):
        serializer, value = self._line()
        first = etree.tostring(serializer.encode(value))
        second = etree.tostring(serializer.encode(serializer.decode(serializer.encode(value))))
        assert first == second


# ---------------------------------------------------------------------------
# Atomic and array values
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "value",
    [
        Atomic(data_type="LINT", value=1_700_000_000_000_000, radix=Radix.DATE_TIME),
        Atomic(data_type="LINT", value=-1, radix=Radix.HEX),
        Atomic(data_type="UDINT", value=4294967295, radix=Radix.OCTAL),
        Atomic(data_type="DINT", value=0x41424344, radix=Radix.ASCII),
        Atomic(data_type="REAL", value=3.14159, radix=Radix.FLOAT),
        Atomic(data_type="LREAL", value=-1e-300, radix=Radix.EXPONENTIAL),
        Array(
            element_type="INT",
            length=4,
            dimensions=[2, 2],
            elements=[Atomic(data_type="INT", value=v, radix=Radix.BINARY) for v in (1, -2, 3, -4)],
        ),
    ],
    ids=["date-time", "lint-hex", "udint-octal", "dint-ascii", "real", "lreal-exp", "int-2x2"],
)
def test_value_round_trip(value):
    serializer = Serializer()
    assert serializer.decode(serializer.encode(value)) == value
