"""Provider and view configuration.

Both are frozen dataclasses: immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

# Upper bound for a single file read by the content provider
DEFAULT_MAX_FILE_SIZE = 20 * 1024 * 1024  # 20 MB


class SizeHint(IntEnum):
    """How the native window treats ``width`` and ``height``."""

    NONE = 0  # default size
    MIN = 1  # minimum bounds
    MAX = 2  # maximum bounds
    FIXED = 3  # not resizable by the user


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Content provider configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ProviderConfig(port=5882, allowed_origins=("http://localhost:3000",))
    """

    # Listener
    host: str = "127.0.0.1"
    port: int = 0  # 0 = ephemeral, resolved at start()

    # Access control: exact-match allow-list for the Origin header
    allowed_origins: tuple[str, ...] = ()

    # 404 body override (HTML); None keeps the built-in page
    not_found_text: str | None = None

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE

    # Listener logging
    log_level: str = "warning"
    access_log: bool = False


@dataclass(frozen=True, slots=True)
class ViewConfig:
    """Native window configuration. Immutable after creation."""

    title: str = "positron"
    width: int = 800
    height: int = 600
    size_hint: SizeHint = SizeHint.NONE
    debug: bool = False  # developer tools, where the platform has them
    icon: str | Path | None = None
