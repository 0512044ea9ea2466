"""Tests for the radix codec."""

import pytest

from l5xdata.codec import (
    AtomicKind,
    Radix,
    RadixFormatError,
    RadixUnsupportedError,
    default_radix,
    format_value,
    infer_radix,
    parse_value,
    supports_radix,
    validate_radix,
)

SINT = AtomicKind.SINT
INT = AtomicKind.INT
DINT = AtomicKind.DINT
LINT = AtomicKind.LINT
USINT = AtomicKind.USINT
ULINT = AtomicKind.ULINT
BOOL = AtomicKind.BOOL
REAL = AtomicKind.REAL
LREAL = AtomicKind.LREAL


# ---------------------------------------------------------------------------
# Decimal
# ---------------------------------------------------------------------------

class TestDecimal:
    def test_format_integer(self):
        assert format_value(-42, Radix.DECIMAL, DINT) == "-42"

    def test_format_bool(self):
        assert format_value(True, Radix.DECIMAL, BOOL) == "1"
        assert format_value(False, Radix.DECIMAL, BOOL) == "0"

    def test_parse_integer(self):
        assert parse_value("1750", Radix.DECIMAL, DINT) == 1750

    def test_parse_bool(self):
        assert parse_value("1", Radix.DECIMAL, BOOL) is True

    def test_parse_bool_out_of_range(self):
        with pytest.raises(RadixFormatError):
            parse_value("2", Radix.DECIMAL, BOOL)

    def test_parse_out_of_range(self):
        with pytest.raises(RadixFormatError, match="out of range"):
            parse_value("128", Radix.DECIMAL, SINT)

    def test_parse_negative_unsigned(self):
        with pytest.raises(RadixFormatError):
            parse_value("-1", Radix.DECIMAL, USINT)

    def test_parse_garbage(self):
        with pytest.raises(ValueError):
            parse_value("12abc", Radix.DECIMAL, DINT)

    def test_default_radix_used_when_none(self):
        assert format_value(5, None, DINT) == "5"


# ---------------------------------------------------------------------------
# Binary / Octal / Hex
# ---------------------------------------------------------------------------

class TestBased:
    def test_binary_sint(self):
        assert format_value(10, Radix.BINARY, SINT) == "2#0000_1010"

    def test_hex_sint(self):
        assert format_value(10, Radix.HEX, SINT) == "16#0A"

    def test_octal_int(self):
        assert format_value(14, Radix.OCTAL, INT) == "8#000_016"

    def test_hex_negative_dint(self):
        assert format_value(-1, Radix.HEX, DINT) == "16#FFFF_FFFF"

    def test_binary_negative_sint(self):
        assert format_value(-1, Radix.BINARY, SINT) == "2#1111_1111"

    def test_hex_ulint_max(self):
        assert format_value(ULINT.max_value, Radix.HEX, ULINT) == "16#FFFF_FFFF_FFFF_FFFF"

    def test_bool_single_digit(self):
        assert format_value(True, Radix.BINARY, BOOL) == "2#1"
        assert format_value(False, Radix.HEX, BOOL) == "16#0"

    def test_parse_binary_and_hex_agree(self):
        assert parse_value("2#0000_1010", Radix.BINARY, SINT) == 10
        assert parse_value("16#0A", Radix.HEX, SINT) == 10

    def test_parse_without_padding_or_separators(self):
        assert parse_value("2#1010", Radix.BINARY, SINT) == 10
        assert parse_value("2#1_0_1_0", Radix.BINARY, SINT) == 10

    def test_parse_lowercase_hex(self):
        assert parse_value("16#ff", Radix.HEX, SINT) == -1

    def test_parse_twos_complement(self):
        assert parse_value("16#FFFF_FFFF", Radix.HEX, DINT) == -1
        assert parse_value("8#177_777", Radix.OCTAL, INT) == -1

    def test_parse_overflow(self):
        with pytest.raises(RadixFormatError, match="does not fit"):
            parse_value("16#100", Radix.HEX, SINT)

    def test_parse_bool_overflow(self):
        with pytest.raises(RadixFormatError):
            parse_value("2#10", Radix.BINARY, BOOL)

    def test_parse_wrong_prefix(self):
        with pytest.raises(RadixFormatError):
            parse_value("8#17", Radix.HEX, DINT)

    def test_parse_bad_digit(self):
        with pytest.raises(RadixFormatError):
            parse_value("8#19", Radix.OCTAL, DINT)

    def test_canonical_form_after_parse(self):
        value = parse_value("16#a", Radix.HEX, SINT)
        assert format_value(value, Radix.HEX, SINT) == "16#0A"


# ---------------------------------------------------------------------------
# ASCII
# ---------------------------------------------------------------------------

class TestAscii:
    def test_format_dint(self):
        assert format_value(65, Radix.ASCII, DINT) == "'$00$00$00A'"

    def test_format_escapes(self):
        assert format_value(0x24, Radix.ASCII, SINT) == "'$$'"
        assert format_value(0x27, Radix.ASCII, SINT) == "'$''"
        assert format_value(-1, Radix.ASCII, SINT) == "'$FF'"

    def test_parse_short_text_is_right_aligned(self):
        assert parse_value("'A'", Radix.ASCII, DINT) == 65

    def test_parse_hex_escape(self):
        assert parse_value("'$41'", Radix.ASCII, SINT) == 65

    def test_parse_control_escapes(self):
        assert parse_value("'$n'", Radix.ASCII, SINT) == 10
        assert parse_value("'$t'", Radix.ASCII, SINT) == 9
        assert parse_value("'$R'", Radix.ASCII, SINT) == 13

    def test_parse_negative(self):
        assert parse_value("'$FF'", Radix.ASCII, SINT) == -1

    def test_parse_too_long(self):
        with pytest.raises(RadixFormatError, match="holds 2 bytes"):
            parse_value("'AB'", Radix.ASCII, SINT)

    def test_parse_unquoted(self):
        with pytest.raises(RadixFormatError):
            parse_value("AB", Radix.ASCII, INT)

    def test_parse_dangling_escape(self):
        with pytest.raises(RadixFormatError):
            parse_value("'$'", Radix.ASCII, INT)


# ---------------------------------------------------------------------------
# Float / Exponential
# ---------------------------------------------------------------------------

class TestFloat:
    def test_format_simple(self):
        assert format_value(1.5, Radix.FLOAT, REAL) == "1.5"

    def test_format_whole_number_keeps_point(self):
        assert format_value(3.0, Radix.FLOAT, REAL) == "3.0"
        assert format_value(1500.0, Radix.FLOAT, REAL) == "1500.0"

    def test_format_real_shortest(self):
        value = parse_value("0.1", Radix.FLOAT, REAL)
        assert value != 0.1
        assert format_value(value, Radix.FLOAT, REAL) == "0.1"

    def test_format_large_exponent(self):
        assert format_value(1e20, Radix.FLOAT, LREAL) == "1.0e+20"

    def test_parse_integer_text(self):
        assert parse_value("5", Radix.FLOAT, REAL) == 5.0

    def test_parse_garbage(self):
        with pytest.raises(RadixFormatError):
            parse_value("1.2.3", Radix.FLOAT, REAL)

    def test_parse_real_overflow(self):
        with pytest.raises(RadixFormatError):
            parse_value("1e40", Radix.FLOAT, REAL)


class TestExponential:
    def test_format_real(self):
        assert format_value(1500.0, Radix.EXPONENTIAL, REAL) == "1.50000000e+003"

    def test_format_lreal(self):
        assert format_value(-0.25, Radix.EXPONENTIAL, LREAL) == "-2.5000000000000000e-001"

    def test_format_zero(self):
        assert format_value(0.0, Radix.EXPONENTIAL, REAL) == "0.00000000e+000"

    def test_parse(self):
        assert parse_value("1.50000000e+003", Radix.EXPONENTIAL, REAL) == 1500.0


# ---------------------------------------------------------------------------
# Date/Time
# ---------------------------------------------------------------------------

class TestDateTime:
    def test_format_epoch(self):
        assert format_value(0, Radix.DATE_TIME, LINT) == "DT#1970-01-01-00:00:00.000_000Z"

    def test_format_micros(self):
        assert format_value(1_500_000, Radix.DATE_TIME, LINT) == "DT#1970-01-01-00:00:01.500_000Z"

    def test_parse(self):
        assert parse_value("DT#1970-01-02-00:00:00.000_001Z", Radix.DATE_TIME, LINT) == 86_400_000_001

    def test_parse_invalid_date(self):
        with pytest.raises(RadixFormatError):
            parse_value("DT#1970-13-01-00:00:00.000_000Z", Radix.DATE_TIME, LINT)

    def test_format_nanoseconds(self):
        assert (
            format_value(1, Radix.DATE_TIME_NS, LINT)
            == "LDT#1970-01-01-00:00:00.000_000_001(UTC+00:00)"
        )

    def test_parse_nanoseconds_with_offset(self):
        text = "LDT#1970-01-01-01:00:00.000_000_000(UTC+01:00)"
        assert parse_value(text, Radix.DATE_TIME_NS, LINT) == 0

    def test_parse_nanoseconds_out_of_range(self):
        with pytest.raises(RadixFormatError, match="out of range"):
            parse_value("LDT#3000-01-01-00:00:00.000_000_000(UTC+00:00)", Radix.DATE_TIME_NS, LINT)

    def test_requires_lint(self):
        with pytest.raises(RadixUnsupportedError):
            format_value(0, Radix.DATE_TIME, DINT)


# ---------------------------------------------------------------------------
# Compatibility and inference
# ---------------------------------------------------------------------------

class TestCompatibility:
    def test_bool_radixes(self):
        assert supports_radix(BOOL, Radix.HEX)
        assert not supports_radix(BOOL, Radix.ASCII)

    def test_float_radixes(self):
        assert supports_radix(REAL, Radix.EXPONENTIAL)
        assert not supports_radix(REAL, Radix.DECIMAL)

    def test_lint_date_time(self):
        assert supports_radix(LINT, Radix.DATE_TIME_NS)
        assert not supports_radix(DINT, Radix.DATE_TIME)

    def test_validate_rejects(self):
        with pytest.raises(RadixUnsupportedError, match="not supported by REAL"):
            validate_radix(REAL, Radix.HEX)

    def test_format_rejects_incompatible(self):
        with pytest.raises(RadixUnsupportedError):
            format_value(1.0, Radix.HEX, REAL)

    def test_parse_rejects_incompatible(self):
        with pytest.raises(RadixUnsupportedError):
            parse_value("1", Radix.ASCII, BOOL)

    def test_default_radix(self):
        assert default_radix(REAL) is Radix.FLOAT
        assert default_radix(DINT) is Radix.DECIMAL
        assert default_radix("MOTOR") is Radix.NULL

    def test_radix_token_parse(self):
        assert Radix.parse("hex") is Radix.HEX
        assert Radix.parse("Date/Time (ns)") is Radix.DATE_TIME_NS

    def test_radix_token_unknown(self):
        with pytest.raises(RadixUnsupportedError, match="Unrecognized radix"):
            Radix.parse("Base64")


class TestInferRadix:
    @pytest.mark.parametrize(
        "text, radix",
        [
            ("2#0000_1010", Radix.BINARY),
            ("8#000_016", Radix.OCTAL),
            ("16#0A", Radix.HEX),
            ("'A'", Radix.ASCII),
            ("-42", Radix.DECIMAL),
            ("1.5", Radix.FLOAT),
            ("1.50000000e+003", Radix.EXPONENTIAL),
            ("DT#1970-01-01-00:00:00.000_000Z", Radix.DATE_TIME),
            ("LDT#1970-01-01-00:00:00.000_000_000(UTC+00:00)", Radix.DATE_TIME_NS),
        ],
    )
    def test_infer(self, text, radix):
        assert infer_radix(text) is radix

    def test_unrecognized(self):
        with pytest.raises(RadixFormatError):
            infer_radix("hello")
