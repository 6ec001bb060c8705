"""Response envelopes — the success/failure result of one completed call.

Exactly one case is populated per call. ``status`` follows the native
return convention: 0 for success, 1 for failure.
"""

import json
from dataclasses import dataclass
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class Success:
    """JSON text of the call's result. Empty for calls without a result."""

    text: str = ""
    status = 0


@dataclass(frozen=True, slots=True)
class Failure:
    """JSON text describing the failure, typically a quoted identifier."""

    text: str
    status = 1

    @classmethod
    def from_code(cls, code: str) -> "Failure":
        """Quote an error identifier: ``InvalidJson`` -> ``"InvalidJson"``."""
        return cls(json.dumps(code))

    @property
    def code(self) -> str | None:
        """The identifier, when the payload is a quoted string."""
        try:
            value = json.loads(self.text)
        except ValueError:
            return None
        return value if isinstance(value, str) else None


ReturnValue: TypeAlias = Success | Failure
