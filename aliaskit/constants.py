"""Shared constants for aliaskit."""

import os
from pathlib import Path

__all__ = [
    "BASH_COMPLETION_PATHS",
    "CONFIG_FILE",
    "DEFAULT_PROBE_TIMEOUT",
    "DEFAULT_SCAN_TIMEOUT",
    "DEFAULT_SHORT_NAME",
    "HANDLER_PREFIX",
    "PROGRAM_NAME",
]

PROGRAM_NAME = "aliaskit"

_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
CONFIG_FILE = _xdg_config_home / "aliaskit" / "config.toml"

# Generated completion handlers are named HANDLER_PREFIX + alias name
HANDLER_PREFIX = "_"

# Short name bound to make-autocompleted-alias by the shell hooks
DEFAULT_SHORT_NAME = "mca"

# Seconds
DEFAULT_SCAN_TIMEOUT = 2.0
DEFAULT_PROBE_TIMEOUT = 5.0

# Where the bash-completion framework usually lives, first match wins
BASH_COMPLETION_PATHS = (
    "/usr/share/bash-completion/bash_completion",
    "/usr/local/share/bash-completion/bash_completion",
    "/opt/homebrew/share/bash-completion/bash_completion",
    "/etc/bash_completion",
)
