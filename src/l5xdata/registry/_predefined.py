"""Built-in atomic and predefined structure definitions.

These are module constants shared by every registry. Predefined structures
are class ``ProductDefined``: their status bits are plain BOOL members and
never receive synthesized backing members.
"""

from __future__ import annotations

from l5xdata.model.types import (
    AtomicKind,
    DataTypeClass,
    DataTypeFamily,
    Member,
    Radix,
    TypeDefinition,
    name_key,
)

STRING_LENGTH = 82


def _members(*specs: tuple) -> tuple[Member, ...]:
    """(name, data_type, dimension[, radix]) tuples -> members."""
    return tuple(
        Member(name=name, data_type=data_type, dimension=dimension, radix=radix[0] if radix else None)
        for name, data_type, dimension, *radix in specs
    )


def _bools(*names: str) -> list[tuple]:
    return [(name, "BOOL", 0) for name in names]


def _of(data_type: str, *names: str) -> list[tuple]:
    return [(name, data_type, 0) for name in names]


TIMER = TypeDefinition(
    name="TIMER",
    type_class=DataTypeClass.PREDEFINED,
    members=_members(
        ("PRE", "DINT", 0),
        ("ACC", "DINT", 0),
        *_bools("EN", "TT", "DN"),
    ),
)

COUNTER = TypeDefinition(
    name="COUNTER",
    type_class=DataTypeClass.PREDEFINED,
    members=_members(
        ("PRE", "DINT", 0),
        ("ACC", "DINT", 0),
        *_bools("CU", "CD", "DN", "OV", "UN"),
    ),
)

CONTROL = TypeDefinition(
    name="CONTROL",
    type_class=DataTypeClass.PREDEFINED,
    members=_members(
        ("LEN", "DINT", 0),
        ("POS", "DINT", 0),
        *_bools("EN", "EU", "DN", "EM", "ER", "UL", "IN", "FD"),
    ),
)

STRING = TypeDefinition(
    name="STRING",
    family=DataTypeFamily.STRING,
    type_class=DataTypeClass.PREDEFINED,
    members=(
        Member(name="LEN", data_type="DINT"),
        Member(name="DATA", data_type="SINT", dimension=STRING_LENGTH, radix=Radix.ASCII),
    ),
)

MESSAGE = TypeDefinition(
    name="MESSAGE",
    type_class=DataTypeClass.PREDEFINED,
    members=_members(
        ("MessageType", "STRING", 0),
        ("RequestedLength", "INT", 0),
        ("ConnectionPath", "STRING", 0),
        ("ConnectedFlag", "INT", 0),
        ("CommTypeCode", "INT", 0),
        ("ServiceCode", "INT", 0, Radix.HEX),
        ("ObjectType", "INT", 0, Radix.HEX),
        ("TargetObject", "INT", 0),
        ("AttributeNumber", "INT", 0, Radix.HEX),
        ("LocalIndex", "INT", 0),
        ("DestinationTag", "STRING", 0),
        *_bools("CacheConnections", "LargePacketUsage"),
    ),
)

ALARM_DIGITAL = TypeDefinition(
    name="ALARM_DIGITAL",
    type_class=DataTypeClass.PREDEFINED,
    members=_members(
        *_bools(
            "EnableIn", "In", "InFault", "Condition", "AckRequired", "Latched",
            "ProgAck", "OperAck", "ProgReset", "OperReset",
            "ProgSuppress", "OperSuppress", "ProgUnsuppress", "OperUnsuppress",
            "OperShelve", "ProgUnshelve", "OperUnshelve",
            "ProgDisable", "OperDisable", "ProgEnable", "OperEnable",
            "AlarmCountReset", "UseProgTime",
        ),
        ("ProgTime", "LINT", 0, Radix.DATE_TIME),
        *_of("DINT", "Severity", "MinDurationPRE", "ShelveDuration", "MaxShelveDuration"),
    ),
)

ALARM_ANALOG = TypeDefinition(
    name="ALARM_ANALOG",
    type_class=DataTypeClass.PREDEFINED,
    members=_members(
        ("EnableIn", "BOOL", 0),
        ("In", "REAL", 0),
        ("InFault", "BOOL", 0),
        *_bools(
            "HHEnabled", "HEnabled", "LEnabled", "LLEnabled", "AckRequired",
            "ProgAckAll", "OperAckAll",
            "HHProgAck", "HHOperAck", "HProgAck", "HOperAck",
            "LProgAck", "LOperAck", "LLProgAck", "LLOperAck",
            "ROCPosProgAck", "ROCPosOperAck", "ROCNegProgAck", "ROCNegOperAck",
            "ProgSuppress", "OperSuppress", "ProgUnsuppress", "OperUnsuppress",
            "HHOperShelve", "HOperShelve", "LOperShelve", "LLOperShelve",
            "ROCPosOperShelve", "ROCNegOperShelve", "ProgUnshelveAll",
            "HHOperUnshelve", "HOperUnshelve", "LOperUnshelve", "LLOperUnshelve",
            "ROCPosOperUnshelve", "ROCNegOperUnshelve",
            "ProgDisable", "OperDisable", "ProgEnable", "OperEnable", "AlarmCountReset",
            "HHMinDurationEnable", "HMinDurationEnable", "LMinDurationEnable", "LLMinDurationEnable",
        ),
        ("HHLimit", "REAL", 0),
        ("HHSeverity", "DINT", 0),
        ("HLimit", "REAL", 0),
        ("HSeverity", "DINT", 0),
        ("LLimit", "REAL", 0),
        ("LSeverity", "DINT", 0),
        ("LLLimit", "REAL", 0),
        ("LLSeverity", "DINT", 0),
        *_of("DINT", "MinDurationPRE", "ShelveDuration", "MaxShelveDuration"),
        ("Deadband", "REAL", 0),
        ("ROCPosLimit", "REAL", 0),
        ("ROCPosSeverity", "DINT", 0),
        ("ROCNegLimit", "REAL", 0),
        ("ROCNegSeverity", "DINT", 0),
        ("ROCPeriod", "REAL", 0),
    ),
)

PID = TypeDefinition(
    name="PID",
    type_class=DataTypeClass.PREDEFINED,
    members=_members(
        ("CTL", "DINT", 0),
        *_bools(
            "EN", "CT", "CL", "PVT", "DOE", "SWM", "CA", "MO", "PE", "NDF", "NOBC",
            "NOZC", "INI", "SPOR", "OLL", "OLH", "EWD", "DVNA", "DVPA", "PVLA", "PVHA",
        ),
        *_of(
            "REAL",
            "SP", "KP", "KI", "KD", "BIAS", "MAXS", "MINS", "DB", "SO", "MAXO", "MINO",
            "UPD", "PV", "ERR", "OUT", "PVH", "PVL", "DVP", "DVN", "PVDB", "DVDB",
            "MAXI", "MINI", "TIE", "MAXCV", "MINCV", "MINTIE", "MAXTIE",
        ),
        ("DATA", "REAL", 17),
    ),
)

PREDEFINED: dict[str, TypeDefinition] = {
    name_key(definition.name): definition
    for definition in (
        TIMER, COUNTER, CONTROL, STRING, MESSAGE, ALARM_DIGITAL, ALARM_ANALOG, PID,
    )
}

ATOMIC: dict[str, TypeDefinition] = {
    name_key(kind.value): TypeDefinition(name=kind.value, type_class=DataTypeClass.ATOMIC)
    for kind in AtomicKind
}


def builtin(name: str) -> TypeDefinition | None:
    """Atomic or predefined definition named *name*, or ``None``."""
    key = name_key(name)
    if key == "bit":
        key = "bool"
    return ATOMIC.get(key) or PREDEFINED.get(key)
