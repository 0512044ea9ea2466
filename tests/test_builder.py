"""Tests for structure expansion and instantiation."""

from l5xdata.model.types import DataTypeClass, Radix
from l5xdata.model.values import Array, Atomic, Structure, Undefined
from l5xdata.registry import TIMER, StructureBuilder, backing_name

from conftest import member, udt


def _motor():
    return udt("MOTOR", member("Run", "BOOL"), member("Speed", "DINT"))


# ---------------------------------------------------------------------------
# expand
# ---------------------------------------------------------------------------

class TestExpand:
    def test_motor_layout(self):
        expanded = StructureBuilder().expand(_motor())
        assert [m.name for m in expanded.members] == ["ZZZZZZZZZZMOTOR0", "Run", "Speed"]

    def test_backing_member_shape(self):
        backing = StructureBuilder().expand(_motor()).members[0]
        assert backing.hidden
        assert backing.data_type == "SINT"
        assert backing.radix is Radix.DECIMAL

    def test_bool_targets_backing(self):
        run = StructureBuilder().expand(_motor()).member("Run")
        assert run.target == "ZZZZZZZZZZMOTOR0"
        assert run.bit_number == 0

    def test_public_members_unchanged(self):
        expanded = StructureBuilder().expand(_motor())
        assert [m.name for m in expanded.public_members] == ["Run", "Speed"]
        assert expanded.structurally_equals(_motor())

    def test_deterministic(self):
        builder = StructureBuilder()
        assert builder.expand(_motor()) == builder.expand(_motor())

    def test_idempotent(self):
        builder = StructureBuilder()
        expanded = builder.expand(_motor())
        assert builder.expand(expanded) is expanded

    def test_position_among_bools(self):
        definition = udt(
            "VALVE",
            member("Open", "BOOL"),
            member("Position", "REAL"),
            member("Closed", "BOOL"),
        )
        expanded = StructureBuilder().expand(definition)
        assert [m.name for m in expanded.members] == [
            "ZZZZZZZZZZVALVE0", "Open", "Position", "ZZZZZZZZZZVALVE1", "Closed",
        ]

    def test_owner_name_truncated(self):
        assert backing_name("CONVEYOR_SECTION", 3) == "ZZZZZZZZZZCONVEYOR_S3"

    def test_bool_array_not_backed(self):
        definition = udt("FLAGS", member("Bits", "BOOL", dimension=32))
        assert StructureBuilder().expand(definition) is definition

    def test_predefined_not_expanded(self):
        assert StructureBuilder().expand(TIMER) is TIMER

    def test_declared_backing_kept(self):
        definition = udt(
            "MOTOR",
            member("Flags", "SINT", hidden=True),
            member("Run", "BOOL", target="Flags", bit_number=0),
            member("Jog", "BOOL", target="Flags", bit_number=1),
        )
        assert StructureBuilder().expand(definition) is definition

    def test_only_untargeted_bools_backed(self):
        definition = udt(
            "MOTOR",
            member("Flags", "SINT", hidden=True),
            member("Run", "BOOL", target="Flags", bit_number=0),
            member("Jog", "BOOL"),
        )
        expanded = StructureBuilder().expand(definition)
        assert [m.name for m in expanded.members] == ["Flags", "Run", "ZZZZZZZZZZMOTOR1", "Jog"]

    def test_non_user_class(self):
        definition = udt("AOI", member("Run", "BOOL"), type_class=DataTypeClass.ADD_ON)
        assert StructureBuilder().expand(definition) is definition


# ---------------------------------------------------------------------------
# build / instantiate
# ---------------------------------------------------------------------------

class TestBuild:
    def test_build_motor(self):
        value = StructureBuilder().build(_motor())
        assert isinstance(value, Structure)
        assert value.names == ["Run", "Speed"]
        assert len(value.hidden_members) == 1
        assert value["Run"].value is False
        assert value["ZZZZZZZZZZMOTOR0"] == Atomic(data_type="SINT")

    def test_values_are_independent(self):
        builder = StructureBuilder()
        first = builder.build(_motor())
        second = builder.build(_motor())
        first["Speed"].value = 10
        assert second["Speed"].value == 0

    def test_array_member(self):
        definition = udt("RECIPE", member("Steps", "REAL", dimension=3))
        steps = StructureBuilder().build(definition)["Steps"]
        assert isinstance(steps, Array)
        assert steps.length == 3
        assert all(e.radix is Radix.FLOAT for e in steps.elements)

    def test_member_radix_applied(self):
        definition = udt("WORDS", member("Mask", "DINT", radix=Radix.HEX))
        assert StructureBuilder().build(definition)["Mask"].radix is Radix.HEX

    def test_unresolved_member_without_resolver(self):
        definition = udt("LINE", member("Pump", "PUMP"))
        assert StructureBuilder().build(definition)["Pump"] == Undefined(name="PUMP")

    def test_nested_through_resolver(self):
        pump = udt("PUMP", member("Running", "BOOL"))
        builder = StructureBuilder(lambda name: pump if name.upper() == "PUMP" else Undefined(name=name))
        line = builder.build(udt("LINE", member("Pump", "PUMP")))
        nested = line["Pump"]
        assert isinstance(nested, Structure)
        assert nested.names == ["Running"]
        assert len(nested.hidden_members) == 1

    def test_instantiate_atomic(self):
        assert StructureBuilder().instantiate("dint") == Atomic(data_type="DINT")

    def test_deep_nesting(self):
        depth = 3000
        chain = {
            f"T{i}": udt(f"T{i}", member("Next", f"T{i + 1}")) for i in range(depth)
        }
        builder = StructureBuilder(lambda name: chain.get(name, Undefined(name=name)))
        value = builder.instantiate("T0")
        for _ in range(depth):
            value = value["Next"]
        assert value == Undefined(name=f"T{depth}")

    def test_array_of_structures_filled(self):
        pump = udt("PUMP", member("Speed", "DINT"))
        builder = StructureBuilder(lambda name: pump if name == "PUMP" else Undefined(name=name))
        value = builder.instantiate("PUMP", dimension=2)
        assert [e.names for e in value.elements] == [["Speed"], ["Speed"]]
        assert value[0] is not value[1]
