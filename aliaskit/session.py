"""Declarations collected for one shell session.

The configuration file plays the part of a hand-written rc file: every
`[[source_path]]` and `[[alias]]` entry adds declarations to the session,
which is then rendered in one go.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .config import Configuration
from .constants import DEFAULT_PROBE_TIMEOUT, DEFAULT_SCAN_TIMEOUT, DEFAULT_SHORT_NAME, PROGRAM_NAME
from .logging_setup import get_logger
from .proxy import ProxyResult, make_autocompleted_alias
from .registry import BashRegistry, ChainRegistry, StaticRegistry
from .render import render_bash, render_hooks
from .source_paths import add_source_path

if TYPE_CHECKING:
    from .models import Declaration
    from .registry import CompletionRegistry

__all__ = ["Session", "registry_from_config"]


def registry_from_config(config: Configuration) -> CompletionRegistry:
    """Build the registry described by the configuration.

    `[completions]` entries are looked up first, then bash is probed unless
    `probe = false`.
    """
    settings = config.sub("aliaskit")
    static = StaticRegistry.from_config(config.sub("completions"), log=config.log)
    if not settings.get_bool("probe", default=True):
        return static
    bash = BashRegistry(
        bash_completion=settings.get("bash_completion"),
        timeout=settings.get_float("probe_timeout", DEFAULT_PROBE_TIMEOUT),
        log=config.log,
    )
    return ChainRegistry(static, bash)


@dataclass
class Session:
    """Ordered declarations for the target session, plus what failed."""

    declarations: list[Declaration] = field(default_factory=list)
    failures: list[ProxyResult] = field(default_factory=list)
    log: logging.Logger = field(default_factory=lambda: get_logger("session"))

    def extend(self, declarations: list[Declaration]) -> None:
        """Append declarations."""
        self.declarations.extend(declarations)

    def add_result(self, result: ProxyResult) -> None:
        """Record the outcome of a make_autocompleted_alias call."""
        self.extend(result.declarations)
        if not result.ok:
            self.failures.append(result)

    async def apply_config(self, config: Configuration, registry: CompletionRegistry) -> None:
        """Add the declarations of every `[[source_path]]` then every `[[alias]]` entry.

        A failing alias does not prevent the next ones.
        """
        scan_timeout = config.sub("aliaskit").get_float("scan_timeout", DEFAULT_SCAN_TIMEOUT)
        for entry in config.entries("source_path"):
            self.extend(
                await add_source_path(
                    entry.get_str("path"),
                    include_hidden=entry.get_bool("all"),
                    keep_extension=entry.get_bool("keep_extension"),
                    timeout=scan_timeout,
                    log=self.log,
                )
            )
        for entry in config.entries("alias"):
            name = entry.get_str("name")
            try:
                result = await make_autocompleted_alias(
                    name,
                    entry.get_words("command"),
                    registry,
                    source_file=entry.get("source"),
                    override=entry.get("override"),
                    quiet=entry.get_bool("quiet"),
                    log=self.log,
                )
            except ValueError as e:
                self.log.error("Alias %r: %s", name, e)
                continue
            self.add_result(result)

    def render(self, title: str = "", hooks: bool = False, short_name: str = DEFAULT_SHORT_NAME, executable: str = PROGRAM_NAME) -> str:
        """Render the session as bash code, optionally preceded by the shell hooks."""
        script = render_bash(self.declarations, title)
        if hooks:
            script = render_hooks(short_name, executable) + script
        return script
