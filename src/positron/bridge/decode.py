"""Argument decoding — JSON argument-array text to typed Python values.

The front-end sends every call's arguments as the text of one JSON
array. Decoding is all-or-nothing: the first mismatch raises a
``ProtocolError`` and no argument reaches the bound function.
"""

import json
from collections.abc import Sequence
from typing import Any

from positron.bridge.shapes import Shape
from positron.errors import (
    InvalidJson,
    JsonSyntaxError,
    Overflow,
    ProtocolError,
    UnexpectedEndOfInput,
    UnexpectedToken,
)


def _first_key_wins(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """Object hook: duplicate keys resolve to their first occurrence."""
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key not in result:
            result[key] = value
    return result


def _parse_float(text: str) -> float:
    value = float(text)
    if value in (float("inf"), float("-inf")):
        msg = f"{text} does not fit a float"
        raise Overflow(msg)
    return value


def _reject_constant(name: str) -> Any:
    # NaN / Infinity are accepted by the json module but are not JSON
    msg = f"{name} is not valid JSON"
    raise JsonSyntaxError(msg)


_decoder = json.JSONDecoder(
    object_pairs_hook=_first_key_wins,
    parse_float=_parse_float,
    parse_constant=_reject_constant,
)


def parse_arguments(text: str) -> list[Any]:
    """Parse *text* and return the top-level argument array.

    Raises ``InvalidJson`` if the top-level value is not an array,
    ``UnexpectedEndOfInput`` for truncated text, ``Overflow`` for
    numbers the parser cannot represent and ``JsonSyntaxError`` for
    anything else it rejects, including nesting past the recursion limit.
    """
    stripped = text.strip()
    if not stripped:
        msg = "empty argument text"
        raise UnexpectedEndOfInput(msg)
    if not stripped.startswith("["):
        msg = "argument text must be a JSON array"
        raise InvalidJson(msg)

    try:
        value, end = _decoder.raw_decode(stripped)
    except json.JSONDecodeError as exc:
        if exc.pos >= len(stripped):
            raise UnexpectedEndOfInput(exc.msg) from exc
        raise JsonSyntaxError(f"{exc.msg} at position {exc.pos}") from exc
    except ValueError as exc:
        # int() refuses literals past the interpreter's digit limit
        raise Overflow(str(exc)) from exc
    except RecursionError as exc:
        msg = "argument text is nested too deeply"
        raise JsonSyntaxError(msg) from exc

    if end != len(stripped):
        msg = f"trailing data after the argument array at position {end}"
        raise InvalidJson(msg)
    return value


def decode_arguments(text: str, shapes: Sequence[Shape]) -> list[Any]:
    """Decode *text* into one value per shape, in order.

    Too few elements raise ``UnexpectedToken`` (the array closed where a
    value was expected); too many raise ``InvalidJson`` (the array did
    not close after the last parameter).
    """
    values = parse_arguments(text)

    if len(values) < len(shapes):
        missing = len(values)
        msg = f"expected {len(shapes)} arguments, got {len(values)}"
        raise UnexpectedToken(msg, index=missing)
    if len(values) > len(shapes):
        msg = f"expected {len(shapes)} arguments, got {len(values)}"
        raise InvalidJson(msg, index=len(shapes))

    decoded: list[Any] = []
    for index, (shape, value) in enumerate(zip(shapes, values, strict=True)):
        try:
            decoded.append(shape.decode(value, f"argument {index}"))
        except ProtocolError as exc:
            if exc.index is None:
                exc.index = index
            raise
        except RecursionError as exc:
            msg = f"argument {index} is nested too deeply"
            raise JsonSyntaxError(msg, index=index) from exc
    return decoded
