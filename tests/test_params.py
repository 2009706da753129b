from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from uuid import UUID

import pytest

from statiq.params import OdbcParam, ParamKind, ParamValue, PkValue, params

SAMPLE_UUID = UUID("12345678-1234-5678-1234-567812345678")


def test_bool_is_not_treated_as_int():
    assert ParamValue.of(True).kind is ParamKind.BOOL
    assert ParamValue.of(False).value is False


def test_small_int_is_i32_large_is_i64():
    assert ParamValue.of(5).kind is ParamKind.I32
    assert ParamValue.of(2**40).kind is ParamKind.I64
    assert ParamValue.of(2**40).value == 2**40


def test_int_beyond_i64_rejected():
    with pytest.raises(ValueError):
        ParamValue.of(2**70)


def test_none_becomes_null():
    value = ParamValue.of(None)
    assert value.kind is ParamKind.NULL
    assert value.is_null


@pytest.mark.parametrize(
    "raw, kind",
    [
        ("Ali", ParamKind.STR),
        (1.5, ParamKind.F64),
        (Decimal("19.99"), ParamKind.DECIMAL),
        (date(2024, 1, 2), ParamKind.DATE),
        (time(10, 30), ParamKind.TIME),
        (SAMPLE_UUID, ParamKind.GUID),
    ],
)
def test_inferred_kinds(raw, kind):
    value = ParamValue.of(raw)
    assert value.kind is kind
    assert value.value == raw


def test_bytearray_becomes_bytes():
    value = ParamValue.of(bytearray(b"ab"))
    assert value.kind is ParamKind.BYTES
    assert value.value == b"ab"
    assert isinstance(value.value, bytes)


def test_naive_datetime_is_utc():
    value = ParamValue.of(datetime(2024, 1, 2, 3, 4, 5))
    assert value.kind is ParamKind.DATETIME
    assert value.value.tzinfo == timezone.utc
    assert value.value.hour == 3


def test_offset_datetime_keeps_offset():
    tz = timezone(timedelta(hours=2))
    raw = datetime(2024, 1, 2, 3, 4, 5, tzinfo=tz)
    value = ParamValue.of(raw)
    assert value.kind is ParamKind.DATETIME_OFFSET
    assert value.value.utcoffset() == timedelta(hours=2)


def test_unsupported_type_rejected():
    with pytest.raises(TypeError):
        ParamValue.of(object())


def test_explicit_kind_range_checked():
    assert ParamValue(ParamKind.U8, 255).value == 255
    with pytest.raises(ValueError):
        ParamValue(ParamKind.U8, 256)
    with pytest.raises(ValueError):
        ParamValue(ParamKind.I16, 2**15)


def test_explicit_kind_type_checked():
    with pytest.raises(TypeError):
        ParamValue(ParamKind.STR, 5)
    with pytest.raises(TypeError):
        ParamValue(ParamKind.DATE, datetime(2024, 1, 1))


def test_non_finite_decimal_rejected():
    with pytest.raises(ValueError):
        ParamValue.of(Decimal("NaN"))


def test_of_is_identity_on_param_value():
    original = ParamValue(ParamKind.F32, 1.5)
    assert ParamValue.of(original) is original


def test_odbc_param_coerces_raw_value():
    param = OdbcParam("active", True)
    assert param.value == ParamValue(ParamKind.BOOL, True)


def test_params_keeps_order_and_names():
    result = params(active=True, name="Ali", amount=Decimal("19.99"))
    assert [p.name for p in result] == ["active", "name", "amount"]
    assert [p.value.kind for p in result] == [ParamKind.BOOL, ParamKind.STR, ParamKind.DECIMAL]


def test_pk_value_as_param_round_trip():
    assert PkValue.of(42).as_param() == ParamValue(ParamKind.I32, 42)
    assert PkValue.of(2**40).as_param().kind is ParamKind.I64
    assert PkValue.of("abc").as_param() == ParamValue(ParamKind.STR, "abc")


def test_pk_value_display():
    assert str(PkValue.of(SAMPLE_UUID)) == str(SAMPLE_UUID)
    assert str(PkValue.of(42)) == "42"


@pytest.mark.parametrize("bad", [1.5, True, None, b"x"])
def test_pk_value_rejects_unsupported(bad):
    with pytest.raises(TypeError):
        PkValue.of(bad)


def test_pk_value_rejects_non_key_kind():
    with pytest.raises(ValueError):
        PkValue(ParamKind.BOOL, True)