"""Completion registries: where the completion handler of a command is looked up.

`StaticRegistry` answers from the configuration file, `BashRegistry` asks a
bash subprocess with the bash-completion framework loaded, `ChainRegistry`
tries several of them in order.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex
from pathlib import Path
from typing import Any, Protocol

from .constants import BASH_COMPLETION_PATHS, DEFAULT_PROBE_TIMEOUT
from .logging_setup import get_logger
from .models import CompletionSpec

__all__ = [
    "BashRegistry",
    "ChainRegistry",
    "CompletionRegistry",
    "StaticRegistry",
    "find_bash_completion",
    "parse_complete_line",
]

# `complete` options consuming the next word
_OPTIONS_WITH_VALUE = frozenset({"-o", "-A", "-G", "-W", "-F", "-C", "-X", "-P", "-S"})

_PROBE_SCRIPT = """
[ -n "$1" ] && . "$1" >/dev/null 2>&1
declare -F _completion_loader >/dev/null && _completion_loader "$2" >/dev/null 2>&1
complete -p -- "$2" 2>/dev/null || complete -p "$2" 2>/dev/null
"""


class CompletionRegistry(Protocol):
    """Lookup of completion registrations by command name."""

    async def ensure_loaded(self, command: str) -> None:
        """Force-load the completion handler of `command` if it is lazily loaded."""

    async def lookup(self, command: str) -> CompletionSpec | None:
        """Return the current registration of `command`, None if it has none."""


def parse_complete_line(line: str) -> tuple[str, CompletionSpec] | None:
    """Parse a `complete -p` dump line.

    Eg:
        parse_complete_line("complete -o filenames -F _pass pass")
        == ("pass", CompletionSpec("_pass", ("-o", "filenames")))

    Returns:
        (command, spec), or None if the line is not a function based registration
    """
    try:
        words = shlex.split(line)
    except ValueError:
        return None
    if not words or words[0] != "complete":
        return None

    handler = ""
    options: list[str] = []
    names: list[str] = []
    idx = 1
    while idx < len(words):
        word = words[idx]
        if word == "--":
            names.extend(words[idx + 1 :])
            break
        if word in _OPTIONS_WITH_VALUE and idx + 1 < len(words):
            if word == "-F":
                handler = words[idx + 1]
            else:
                options.extend((word, words[idx + 1]))
            idx += 2
            continue
        if word.startswith("-") and len(word) > 1:
            options.append(word)
        else:
            names.append(word)
        idx += 1

    if not handler or not names:
        return None
    return names[-1], CompletionSpec(handler=handler, options=tuple(options))


class StaticRegistry:
    """Registrations declared in the `[completions]` section of the configuration."""

    def __init__(self, specs: dict[str, CompletionSpec] | None = None) -> None:
        self.specs: dict[str, CompletionSpec] = dict(specs or {})

    @classmethod
    def from_config(cls, section: dict[str, Any], log: logging.Logger | None = None) -> StaticRegistry:
        """Build from a `{command: {handler, options}}` mapping.

        Malformed entries are logged and skipped.
        """
        log = log or get_logger("registry")
        specs: dict[str, CompletionSpec] = {}
        for command, entry in section.items():
            handler = entry.get("handler") if isinstance(entry, dict) else None
            if not isinstance(handler, str) or not handler:
                log.error("[completions.%s] needs a handler, skipped", command)
                continue
            options = entry.get("options", ())
            if isinstance(options, str):
                options = shlex.split(options)
            elif not isinstance(options, list | tuple):
                log.error("[completions.%s] options must be a list or a string, skipped", command)
                continue
            specs[command] = CompletionSpec(handler=handler, options=tuple(str(opt) for opt in options))
        return cls(specs)

    async def ensure_loaded(self, command: str) -> None:
        """Nothing to load."""

    async def lookup(self, command: str) -> CompletionSpec | None:
        """Return the configured registration of `command`."""
        return self.specs.get(command)


def find_bash_completion(candidates: tuple[str, ...] = BASH_COMPLETION_PATHS) -> str | None:
    """Return the first existing bash-completion framework script."""
    for candidate in candidates:
        if Path(candidate).is_file():
            return candidate
    return None


class BashRegistry:
    """Asks a bash subprocess for the registrations.

    The subprocess sources the bash-completion framework and runs
    `_completion_loader` before dumping the registration, so lazily loaded
    completions are found too. Answers are cached per command.
    """

    def __init__(
        self,
        bash: str = "bash",
        bash_completion: str | None = None,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
        log: logging.Logger | None = None,
    ) -> None:
        self.bash = bash
        self.bash_completion = bash_completion if bash_completion is not None else find_bash_completion()
        self.timeout = timeout
        self.log = log or get_logger("registry")
        self._cache: dict[str, CompletionSpec | None] = {}

    async def _probe(self, command: str) -> str:
        """Run the probe script and return its output ("" on any failure)."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self.bash,
                "-c",
                _PROBE_SCRIPT,
                "aliaskit-probe",
                self.bash_completion or "",
                command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            self.log.warning("Cannot run %s: %s", self.bash, e)
            return ""
        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except TimeoutError:
            self.log.warning("Completion probe for %s timed out after %ss", command, self.timeout)
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
            return ""
        if proc.returncode != 0:
            self.log.debug("No registration reported for %s (exit %s)", command, proc.returncode)
            return ""
        return stdout.decode("utf-8", errors="replace")

    async def ensure_loaded(self, command: str) -> None:
        """Probe `command` once."""
        if command in self._cache:
            return
        spec = None
        for line in (await self._probe(command)).splitlines():
            parsed = parse_complete_line(line)
            if parsed and parsed[0] == command:
                spec = parsed[1]
        self.log.debug("Probed %s: %s", command, spec)
        self._cache[command] = spec

    async def lookup(self, command: str) -> CompletionSpec | None:
        """Return the registration of `command` as reported by bash."""
        await self.ensure_loaded(command)
        return self._cache[command]


class ChainRegistry:
    """Tries each registry in turn, the first answer wins."""

    def __init__(self, *registries: CompletionRegistry) -> None:
        self.registries = registries

    async def ensure_loaded(self, command: str) -> None:
        """Members are loaded on lookup."""

    async def lookup(self, command: str) -> CompletionSpec | None:
        """Return the first registration found for `command`."""
        for registry in self.registries:
            await registry.ensure_loaded(command)
            spec = await registry.lookup(command)
            if spec is not None:
                return spec
        return None
