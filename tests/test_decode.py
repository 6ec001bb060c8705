"""Tests for positron.bridge.decode and shapes — strict argument decoding."""

import enum
from dataclasses import dataclass, field
from typing import Any

import pytest

from positron.bridge.decode import decode_arguments, parse_arguments
from positron.bridge.shapes import (
    DictShape,
    EnumShape,
    IntShape,
    ListShape,
    OptionalShape,
    RecordShape,
    TupleShape,
    compile_shape,
)
from positron.bridge.types import Int8, IntRange, UInt8, UInt16
from positron.errors import (
    ConfigurationError,
    InvalidEnumTag,
    InvalidJson,
    InvalidNumber,
    InvalidValue,
    JsonSyntaxError,
    LengthMismatch,
    MissingField,
    Overflow,
    UnexpectedEndOfInput,
    UnexpectedToken,
    UnknownField,
)


class Color(enum.Enum):
    RED = 1
    GREEN = 2


@dataclass
class Credentials:
    user: str
    password: str
    remember: bool = False


@dataclass
class Node:
    name: str
    children: list["Node"] = field(default_factory=list)


@dataclass
class Account:
    user: str

    def __post_init__(self) -> None:
        if not self.user:
            msg = "empty user"
            raise ValueError(msg)


def _decode(text: str, *annotations: Any) -> list[Any]:
    return decode_arguments(text, [compile_shape(a) for a in annotations])


class TestParseArguments:
    def test_array(self) -> None:
        assert parse_arguments("[1, \"a\", null]") == [1, "a", None]

    def test_whitespace_around(self) -> None:
        assert parse_arguments("  [ ]\n") == []

    def test_not_an_array(self) -> None:
        with pytest.raises(InvalidJson):
            parse_arguments('{"a": 1}')

    def test_empty_text(self) -> None:
        with pytest.raises(UnexpectedEndOfInput):
            parse_arguments("")

    def test_truncated(self) -> None:
        with pytest.raises(UnexpectedEndOfInput):
            parse_arguments("[1, 2")

    def test_open_bracket_only(self) -> None:
        with pytest.raises(UnexpectedEndOfInput):
            parse_arguments("[")

    def test_malformed(self) -> None:
        with pytest.raises(JsonSyntaxError) as exc_info:
            parse_arguments("[1,,2]")
        assert exc_info.value.code == "SyntaxError"

    def test_trailing_data(self) -> None:
        with pytest.raises(InvalidJson):
            parse_arguments("[1] [2]")

    def test_nan_rejected(self) -> None:
        with pytest.raises(JsonSyntaxError):
            parse_arguments("[NaN]")

    def test_float_overflow(self) -> None:
        with pytest.raises(Overflow):
            parse_arguments("[1e999]")

    def test_duplicate_keys_first_wins(self) -> None:
        assert parse_arguments('[{"a": 1, "a": 2}]') == [{"a": 1}]

    def test_integer_past_digit_limit(self) -> None:
        with pytest.raises(Overflow):
            parse_arguments("[" + "1" * 5000 + "]")

    def test_nesting_past_recursion_limit(self) -> None:
        with pytest.raises(JsonSyntaxError, match="nested too deeply"):
            parse_arguments("[" * 100_000 + "]" * 100_000)


class TestArity:
    def test_exact(self) -> None:
        assert _decode("[2, 3]", int, int) == [2, 3]

    def test_too_few(self) -> None:
        with pytest.raises(UnexpectedToken) as exc_info:
            _decode("[2]", int, int)
        assert exc_info.value.index == 1

    def test_too_many(self) -> None:
        with pytest.raises(InvalidJson):
            _decode("[2, 3, 4]", int, int)

    def test_no_parameters(self) -> None:
        assert decode_arguments("[]", []) == []

    def test_no_parameters_extra_argument(self) -> None:
        with pytest.raises(InvalidJson):
            decode_arguments("[1]", [])

    def test_error_carries_index(self) -> None:
        with pytest.raises(UnexpectedToken) as exc_info:
            _decode('[2, "x"]', int, int)
        assert exc_info.value.index == 1


class TestScalars:
    def test_int(self) -> None:
        assert _decode("[42]", int) == [42]

    def test_int_rejects_string(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode('["42"]', int)

    def test_int_rejects_bool(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode("[true]", int)

    def test_int_integral_float(self) -> None:
        [value] = _decode("[3.0]", int)
        assert value == 3
        assert isinstance(value, int)

    def test_int_fractional(self) -> None:
        with pytest.raises(InvalidNumber):
            _decode("[3.5]", int)

    def test_int_unbounded(self) -> None:
        assert _decode("[123456789012345678901234567890]", int) == [123456789012345678901234567890]

    def test_float_accepts_int(self) -> None:
        [value] = _decode("[2]", float)
        assert value == 2.0
        assert isinstance(value, float)

    def test_float_rejects_null(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode("[null]", float)

    def test_float_from_huge_int(self) -> None:
        with pytest.raises(Overflow):
            _decode("[" + "9" * 400 + "]", float)

    def test_bool(self) -> None:
        assert _decode("[true, false]", bool, bool) == [True, False]

    def test_bool_rejects_number(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode("[1]", bool)

    def test_str(self) -> None:
        assert _decode('["héllo"]', str) == ["héllo"]

    def test_none(self) -> None:
        assert _decode("[null]", None) == [None]

    def test_none_rejects_value(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode("[0]", None)

    def test_any_passes_through(self) -> None:
        assert _decode('[{"a": [1]}]', Any) == [{"a": [1]}]


class TestSizedIntegers:
    def test_uint8_bounds(self) -> None:
        assert _decode("[0, 255]", UInt8, UInt8) == [0, 255]

    def test_uint8_overflow(self) -> None:
        with pytest.raises(Overflow):
            _decode("[256]", UInt8)

    def test_uint8_negative(self) -> None:
        with pytest.raises(Overflow):
            _decode("[-1]", UInt8)

    def test_int8(self) -> None:
        assert _decode("[-128, 127]", Int8, Int8) == [-128, 127]
        with pytest.raises(Overflow):
            _decode("[128]", Int8)

    def test_uint16_in_list(self) -> None:
        with pytest.raises(Overflow):
            _decode("[[1, 70000]]", list[UInt16])

    def test_range_contains(self) -> None:
        bounds = IntRange.unsigned(8)
        assert 255 in bounds
        assert 256 not in bounds
        assert "1" not in bounds


class TestContainers:
    def test_optional(self) -> None:
        assert _decode('[null, "x"]', str | None, str | None) == [None, "x"]

    def test_optional_inner_mismatch(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode("[1]", str | None)

    def test_list(self) -> None:
        assert _decode("[[1, 2, 3]]", list[int]) == [[1, 2, 3]]

    def test_list_item_mismatch(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode('[[1, "2"]]', list[int])

    def test_variadic_tuple(self) -> None:
        assert _decode("[[1, 2]]", tuple[int, ...]) == [(1, 2)]

    def test_fixed_tuple(self) -> None:
        assert _decode('[[1, "a"]]', tuple[int, str]) == [(1, "a")]

    def test_fixed_tuple_length(self) -> None:
        with pytest.raises(LengthMismatch):
            _decode("[[1]]", tuple[int, str])

    def test_dict(self) -> None:
        assert _decode('[{"a": 1, "b": 2}]', dict[str, int]) == [{"a": 1, "b": 2}]

    def test_dict_rejects_array(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode("[[1]]", dict[str, int])


class TestEnums:
    def test_by_name(self) -> None:
        assert _decode('["RED"]', Color) == [Color.RED]

    def test_by_value(self) -> None:
        assert _decode("[2]", Color) == [Color.GREEN]

    def test_unknown_name(self) -> None:
        with pytest.raises(InvalidEnumTag):
            _decode('["BLUE"]', Color)

    def test_unknown_value(self) -> None:
        with pytest.raises(InvalidEnumTag):
            _decode("[9]", Color)

    def test_wrong_type(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode("[[1]]", Color)


class TestRecords:
    def test_decode(self) -> None:
        [creds] = _decode('[{"user": "ann", "password": "pw"}]', Credentials)
        assert creds == Credentials(user="ann", password="pw")

    def test_optional_field_supplied(self) -> None:
        [creds] = _decode('[{"user": "a", "password": "b", "remember": true}]', Credentials)
        assert creds.remember is True

    def test_unknown_field(self) -> None:
        with pytest.raises(UnknownField):
            _decode('[{"user": "a", "password": "b", "admin": true}]', Credentials)

    def test_missing_field(self) -> None:
        with pytest.raises(MissingField):
            _decode('[{"user": "a"}]', Credentials)

    def test_field_type_mismatch(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode('[{"user": 1, "password": "b"}]', Credentials)

    def test_duplicate_key_first_wins(self) -> None:
        [creds] = _decode('[{"user": "first", "user": "second", "password": "p"}]', Credentials)
        assert creds.user == "first"

    def test_recursive(self) -> None:
        [tree] = _decode('[{"name": "root", "children": [{"name": "leaf"}]}]', Node)
        assert tree == Node("root", [Node("leaf")])

    def test_not_an_object(self) -> None:
        with pytest.raises(UnexpectedToken):
            _decode('["ann"]', Credentials)

    def test_constructor_rejects_fields(self) -> None:
        with pytest.raises(InvalidValue, match="empty user") as exc_info:
            _decode('[{"user": ""}]', Account)
        assert exc_info.value.code == "InvalidValue"
        assert exc_info.value.index == 0

    def test_constructor_accepts_fields(self) -> None:
        assert _decode('[{"user": "ann"}]', Account) == [Account("ann")]


class TestCompileShape:
    def test_shapes(self) -> None:
        assert isinstance(compile_shape(int), IntShape)
        assert isinstance(compile_shape(UInt8), IntShape)
        assert isinstance(compile_shape(int | None), OptionalShape)
        assert isinstance(compile_shape(list[str]), ListShape)
        assert isinstance(compile_shape(tuple[int, str]), TupleShape)
        assert isinstance(compile_shape(dict[str, int]), DictShape)
        assert isinstance(compile_shape(Color), EnumShape)
        assert isinstance(compile_shape(Credentials), RecordShape)

    def test_wide_union_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            compile_shape(int | str)

    def test_non_str_keys_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            compile_shape(dict[int, str])

    def test_arbitrary_class_rejected(self) -> None:
        class Opaque:
            pass

        with pytest.raises(ConfigurationError):
            compile_shape(Opaque)

    def test_range_on_non_int_rejected(self) -> None:
        from typing import Annotated

        with pytest.raises(ConfigurationError):
            compile_shape(Annotated[str, IntRange(0, 1)])
