"""Result encoding — Python values to the JSON text of a success envelope.

Mirrors the shapes the decoder accepts so a value encoded here decodes
back to an equal value: dataclasses become objects, enums their member
name, tuples arrays.
"""

import dataclasses
import enum
import json
from typing import Any


class EncodeError(TypeError):
    """A bound function returned a value with no JSON form."""


def to_jsonable(value: Any) -> Any:
    """Convert *value* into plain JSON-compatible Python data."""
    if value is None or isinstance(value, bool | str):
        return value
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, int | float):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, list | tuple):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                msg = f"object keys must be strings, got {type(key).__name__}"
                raise EncodeError(msg)
            result[key] = to_jsonable(item)
        return result
    msg = f"{type(value).__name__} is not JSON serializable"
    raise EncodeError(msg)


def encode_result(value: Any, *, void: bool = False) -> str:
    """Encode a call result as compact JSON text.

    A ``void`` call (declared ``-> None``, or unannotated and returning
    ``None``) encodes as the empty string, not ``null``.
    """
    if void and value is None:
        return ""
    try:
        return json.dumps(
            to_jsonable(value),
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except ValueError as exc:
        raise EncodeError(str(exc)) from exc
