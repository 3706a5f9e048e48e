"""Parse options and their JSON loader.

Options are plain values handed to :func:`berry_lockfile.parse_lockfile`;
the parser itself never reads files or the environment. Callers that want
file-based configuration use :func:`load_options`, which reads a JSON object
such as::

    {"decodeEscapes": true, "warnOnDuplicates": false}
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError

CONFIG_PATH_ENV_VAR = "BERRY_LOCKFILE_OPTIONS"

_FIELDS = {
    "decodeEscapes": "decode_escapes",
    "warnOnDuplicates": "warn_on_duplicates",
}


@dataclass(slots=True, frozen=True)
class ParseOptions:
    """Options controlling how a lockfile is parsed."""

    # Decode backslash escapes inside quoted scalars; raw text is kept otherwise.
    decode_escapes: bool = False
    # Log a warning when one descriptor heads more than one entry.
    warn_on_duplicates: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ParseOptions:
        """Create ParseOptions from a dictionary, validating field types."""
        unknown = sorted(set(data) - set(_FIELDS))
        if unknown:
            raise ConfigError(f"Unknown option(s): {', '.join(unknown)}")

        values: dict[str, bool] = {}
        for key, attr in _FIELDS.items():
            if key not in data:
                continue
            value = data[key]
            if not isinstance(value, bool):
                raise ConfigError(f"Option '{key}' must be a boolean")
            values[attr] = value
        return cls(**values)


def _resolve_config_path(path: Path | str | None = None) -> Path | None:
    """Resolve the options file path.

    Priority:
    1. Explicit path argument
    2. BERRY_LOCKFILE_OPTIONS environment variable
    3. None (use defaults)
    """
    if path is not None:
        return Path(path)

    env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)

    return None


def load_options(path: Path | str | None = None) -> ParseOptions:
    """Load parse options from a JSON file.

    Args:
        path: Optional path to the options file. If not provided, uses the
            BERRY_LOCKFILE_OPTIONS env var or falls back to defaults.

    Raises:
        ConfigError: If the file cannot be read or contains invalid data.
    """
    config_path = _resolve_config_path(path)
    if config_path is None:
        return ParseOptions()

    if not config_path.exists():
        raise ConfigError(f"Options file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read options file: {exc}") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in options file: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Options must be a JSON object")

    return ParseOptions.from_dict(data)
