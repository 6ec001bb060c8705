"""Parameter shapes — compiled, strict JSON decoders for bound functions.

A shape is built once per parameter at bind time from the parameter's
annotation, so unsupported annotations fail at startup rather than on
the first call. At call time each shape turns exactly one parsed JSON
value into the declared Python type or raises a ``ProtocolError``.

Supported annotations: ``int`` (and the sized aliases in
``positron.bridge.types``), ``float``, ``bool``, ``str``, ``None``,
``X | None``, ``list[X]``, ``tuple[X, ...]``, ``tuple[X, Y]``,
``dict[str, X]``, ``Enum`` subclasses, dataclasses and ``Any``.
"""

import dataclasses
import enum
import math
import types
import typing
from typing import Annotated, Any, Union, get_args, get_origin

from positron.bridge.types import IntRange
from positron.errors import (
    ConfigurationError,
    InvalidEnumTag,
    InvalidNumber,
    InvalidValue,
    LengthMismatch,
    MissingField,
    Overflow,
    UnexpectedToken,
    UnknownField,
)


def _json_type(value: Any) -> str:
    """Name of a parsed JSON value's type, for diagnostics."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _mismatch(expected: str, value: Any, where: str) -> UnexpectedToken:
    return UnexpectedToken(f"{where}: expected {expected}, got {_json_type(value)}")


class Shape:
    """Base shape. Subclasses implement ``decode``."""

    __slots__ = ()

    name = "value"

    def decode(self, value: Any, where: str) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class AnyShape(Shape):
    """Passes the parsed JSON value through untouched."""

    __slots__ = ()

    name = "any"

    def decode(self, value: Any, where: str) -> Any:
        return value


class IntShape(Shape):
    __slots__ = ("bounds",)

    name = "integer"

    def __init__(self, bounds: IntRange | None = None) -> None:
        self.bounds = bounds

    def decode(self, value: Any, where: str) -> int:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise _mismatch(self.name, value, where)
        if isinstance(value, float):
            if not value.is_integer():
                raise InvalidNumber(f"{where}: {value!r} is not an integer")
            value = int(value)
        if self.bounds is not None and value not in self.bounds:
            raise Overflow(
                f"{where}: {value} outside [{self.bounds.minimum}, {self.bounds.maximum}]"
            )
        return value


class FloatShape(Shape):
    __slots__ = ()

    name = "number"

    def decode(self, value: Any, where: str) -> float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise _mismatch(self.name, value, where)
        try:
            result = float(value)
        except OverflowError as exc:
            raise Overflow(f"{where}: {value} does not fit a float") from exc
        if math.isinf(result):
            raise Overflow(f"{where}: {value} does not fit a float")
        return result


class BoolShape(Shape):
    __slots__ = ()

    name = "boolean"

    def decode(self, value: Any, where: str) -> bool:
        if not isinstance(value, bool):
            raise _mismatch(self.name, value, where)
        return value


class StrShape(Shape):
    __slots__ = ()

    name = "string"

    def decode(self, value: Any, where: str) -> str:
        if not isinstance(value, str):
            raise _mismatch(self.name, value, where)
        return value


class NoneShape(Shape):
    __slots__ = ()

    name = "null"

    def decode(self, value: Any, where: str) -> None:
        if value is not None:
            raise _mismatch(self.name, value, where)


class OptionalShape(Shape):
    __slots__ = ("inner",)

    def __init__(self, inner: Shape) -> None:
        self.inner = inner

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"{self.inner.name} or null"

    def decode(self, value: Any, where: str) -> Any:
        if value is None:
            return None
        return self.inner.decode(value, where)


class ListShape(Shape):
    __slots__ = ("as_tuple", "item")

    name = "array"

    def __init__(self, item: Shape, *, as_tuple: bool = False) -> None:
        self.item = item
        self.as_tuple = as_tuple

    def decode(self, value: Any, where: str) -> list[Any] | tuple[Any, ...]:
        if not isinstance(value, list):
            raise _mismatch(self.name, value, where)
        items = [self.item.decode(v, f"{where}[{i}]") for i, v in enumerate(value)]
        return tuple(items) if self.as_tuple else items


class TupleShape(Shape):
    """Fixed-length heterogeneous array."""

    __slots__ = ("items",)

    name = "array"

    def __init__(self, items: tuple[Shape, ...]) -> None:
        self.items = items

    def decode(self, value: Any, where: str) -> tuple[Any, ...]:
        if not isinstance(value, list):
            raise _mismatch(self.name, value, where)
        if len(value) != len(self.items):
            raise LengthMismatch(
                f"{where}: expected {len(self.items)} elements, got {len(value)}"
            )
        return tuple(
            shape.decode(v, f"{where}[{i}]")
            for i, (shape, v) in enumerate(zip(self.items, value, strict=True))
        )


class DictShape(Shape):
    __slots__ = ("value",)

    name = "object"

    def __init__(self, value: Shape) -> None:
        self.value = value

    def decode(self, value: Any, where: str) -> dict[str, Any]:
        if not isinstance(value, dict):
            raise _mismatch(self.name, value, where)
        return {k: self.value.decode(v, f"{where}.{k}") for k, v in value.items()}


class EnumShape(Shape):
    """Enum members decode from their name, or from an integer value."""

    __slots__ = ("cls",)

    def __init__(self, cls: type[enum.Enum]) -> None:
        self.cls = cls

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.cls.__name__

    def decode(self, value: Any, where: str) -> enum.Enum:
        if isinstance(value, str):
            try:
                return self.cls[value]
            except KeyError:
                raise InvalidEnumTag(f"{where}: {value!r} is not a {self.name}") from None
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return self.cls(value)
            except ValueError:
                raise InvalidEnumTag(f"{where}: {value!r} is not a {self.name}") from None
        raise _mismatch(f"{self.name} tag", value, where)


class RecordShape(Shape):
    """A dataclass decoded from a JSON object.

    Unknown fields are rejected; fields without a default are required.
    Duplicate keys never reach this point: the parser keeps the first.
    """

    __slots__ = ("cls", "fields", "required")

    def __init__(self, cls: type) -> None:
        self.cls = cls
        self.fields: dict[str, Shape] = {}
        self.required: frozenset[str] = frozenset()

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.cls.__name__

    def decode(self, value: Any, where: str) -> Any:
        if not isinstance(value, dict):
            raise _mismatch(f"{self.name} object", value, where)
        for key in value:
            if key not in self.fields:
                raise UnknownField(f"{where}: {self.name} has no field {key!r}")
        missing = self.required.difference(value)
        if missing:
            raise MissingField(f"{where}: {self.name} is missing {sorted(missing)}")
        kwargs = {
            key: self.fields[key].decode(raw, f"{where}.{key}") for key, raw in value.items()
        }
        try:
            return self.cls(**kwargs)
        except (TypeError, ValueError) as exc:
            raise InvalidValue(f"{where}: {self.name} rejected its fields: {exc}") from exc


_SCALARS: dict[Any, type[Shape]] = {
    int: IntShape,
    float: FloatShape,
    bool: BoolShape,
    str: StrShape,
    None: NoneShape,
    type(None): NoneShape,
    Any: AnyShape,
}


def compile_shape(annotation: Any, _records: dict[type, RecordShape] | None = None) -> Shape:
    """Build the decoder for one annotation.

    Raises ``ConfigurationError`` for annotations the bridge cannot decode.
    """
    records = {} if _records is None else _records

    try:
        scalar = _SCALARS.get(annotation)
    except TypeError:  # unhashable annotation object
        scalar = None
    if scalar is not None:
        return scalar()

    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin is Annotated:
        base, *extras = args
        bounds = next((e for e in extras if isinstance(e, IntRange)), None)
        if bounds is not None:
            if base is not int:
                msg = f"IntRange only applies to int, not {base!r}."
                raise ConfigurationError(msg)
            return IntShape(bounds)
        return compile_shape(base, records)

    if origin is Union or origin is types.UnionType:
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) == 1 and len(args) == 2:
            return OptionalShape(compile_shape(non_none[0], records))
        msg = f"Only 'X | None' unions are supported, got {annotation!r}."
        raise ConfigurationError(msg)

    if annotation is list or origin is list:
        item = compile_shape(args[0], records) if args else AnyShape()
        return ListShape(item)

    if annotation is tuple or origin is tuple:
        if not args:
            return ListShape(AnyShape(), as_tuple=True)
        if len(args) == 2 and args[1] is Ellipsis:
            return ListShape(compile_shape(args[0], records), as_tuple=True)
        return TupleShape(tuple(compile_shape(a, records) for a in args))

    if annotation is dict or origin is dict:
        if args and args[0] is not str:
            msg = f"JSON objects only have string keys, got {annotation!r}."
            raise ConfigurationError(msg)
        return DictShape(compile_shape(args[1], records) if args else AnyShape())

    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return EnumShape(annotation)

    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        return _compile_record(annotation, records)

    msg = f"Unsupported parameter annotation {annotation!r}."
    raise ConfigurationError(msg)


def _compile_record(cls: type, records: dict[type, RecordShape]) -> RecordShape:
    # Self-referencing records reuse the shape under construction
    if cls in records:
        return records[cls]
    shape = RecordShape(cls)
    records[cls] = shape

    hints = typing.get_type_hints(cls, include_extras=True)
    required: set[str] = set()
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        shape.fields[f.name] = compile_shape(hints.get(f.name, Any), records)
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            required.add(f.name)
    shape.required = frozenset(required)
    return shape
