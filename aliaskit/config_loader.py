"""Configuration file loading utilities.

This module handles loading, parsing, and merging TOML configuration files.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .constants import CONFIG_FILE
from .models import AliaskitError
from .utils import merge

if TYPE_CHECKING:
    import logging

__all__ = ["ConfigLoader"]


class ConfigLoader:
    """Handles loading and merging configuration files.

    Supports:
    - a single TOML file
    - directory-based config (every .toml file merged, in name order)
    - `include` directives of the `[aliaskit]` section
    """

    def __init__(self, log: logging.Logger) -> None:
        """Initialize the config loader.

        Args:
            log: Logger instance for status and error messages
        """
        self.log = log
        self._seen: set[Path] = set()

    def load(self, config_filename: str | os.PathLike[str] | None = None) -> dict[str, Any]:
        """Load configuration from file or directory.

        Without a filename the default location is used, a missing default
        file being an empty configuration.

        Raises:
            AliaskitError: If an explicit file is missing or has syntax errors.
        """
        self._seen.clear()
        if config_filename:
            return self._open_config(self._expand(config_filename))
        if not CONFIG_FILE.exists():
            self.log.debug("No configuration at %s", CONFIG_FILE)
            return {}
        return self._open_config(CONFIG_FILE)

    @staticmethod
    def _expand(filename: str | os.PathLike[str]) -> Path:
        return Path(os.path.expandvars(os.fspath(filename))).expanduser()

    def _open_config(self, fname: Path) -> dict[str, Any]:
        """Load a file or directory, then its includes."""
        config = self._load_config_directory(fname) if fname.is_dir() else self._load_config_file(fname)

        includes = config.get("aliaskit", {}).pop("include", [])
        for extra_config in includes:
            extra = self._expand(extra_config)
            if not extra.is_absolute():
                extra = (fname if fname.is_dir() else fname.parent) / extra
            if extra.resolve() in self._seen:
                self.log.warning("Skipping already included %s", extra)
                continue
            merge(config, self._open_config(extra))
        return config

    def _load_config_directory(self, directory: Path) -> dict[str, Any]:
        """Load and merge all .toml files from a directory."""
        config: dict[str, Any] = {}
        for toml_file in sorted(f.name for f in directory.iterdir()):
            if not toml_file.endswith(".toml"):
                continue
            merge(config, self._load_config_file(directory / toml_file))
        return config

    def _load_config_file(self, fname: Path) -> dict[str, Any]:
        """Load a single TOML file.

        Raises:
            AliaskitError: If file not found or has syntax errors
        """
        if not fname.exists():
            self.log.critical("Config file not found: %s", fname)
            raise AliaskitError(f"Config file not found: {fname}")
        self._seen.add(fname.resolve())
        self.log.info("Loading %s", fname)
        with fname.open("rb") as f:
            try:
                return tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                self.log.critical("Problem reading %s: %s", fname, e)
                raise AliaskitError(f"Problem reading {fname}: {e}") from e
