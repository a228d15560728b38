"""Debug mode, turned on by the DEBUG environment variable or `aliaskit --debug FILE`."""

import os
from types import SimpleNamespace

__all__ = [
    "is_debug",
    "set_debug",
]

_state = SimpleNamespace(debug=os.environ.get("DEBUG", "") not in ("", "0"))


def is_debug() -> bool:
    """Tell if debug logs are enabled."""
    return _state.debug


def set_debug(value: bool) -> None:
    _state.debug = value
