"""Aliases completing like the command they wrap.

`make_autocompleted_alias` defines an alias plus a completion handler which
rewrites the completion context so the reference command's own handler sees
the words it would see if the full command had been typed.
"""

from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .logging_setup import get_logger
from .models import (
    AliasAction,
    AliasDefinition,
    CompletionContext,
    CompletionLoad,
    CompletionProxy,
    CompletionRegistration,
    Declaration,
    ExitCode,
    ProxyMode,
)
from .source_paths import is_valid_alias_name

if TYPE_CHECKING:
    from .registry import CompletionRegistry

__all__ = [
    "ProxyResult",
    "adjust_context",
    "build_alias_action",
    "make_autocompleted_alias",
]


@dataclass
class ProxyResult:
    """Outcome of one make_autocompleted_alias call."""

    name: str
    mode: ProxyMode
    declarations: list[Declaration] = field(default_factory=list)
    exit_code: ExitCode = ExitCode.SUCCESS

    @property
    def ok(self) -> bool:
        """Tell if the completion proxy was created."""
        return self.exit_code == ExitCode.SUCCESS


def adjust_context(proxy: CompletionProxy, ctx: CompletionContext) -> CompletionContext:
    """Rewrite the completion context of an alias invocation as the reference invocation.

    Eg: with `pc` proxying `pass -c`, "pc fo" (cword 1, point 5) becomes
    "pass -c fo" (cword 2, point 10).
    """
    return CompletionContext(
        words=proxy.reference_words + ctx.words[1:],
        cword=ctx.cword + proxy.arg_delta,
        point=ctx.point - len(proxy.name) + len(proxy.prefix),
        line=proxy.prefix + ctx.line[len(proxy.name) :],
    )


def build_alias_action(
    reference_words: tuple[str, ...],
    source_file: str | os.PathLike[str] | None = None,
    override: str | None = None,
) -> tuple[ProxyMode, AliasAction]:
    """Decide what the alias runs.

    Raises:
        ValueError: if both `source_file` and `override` are given
    """
    if source_file is not None and override is not None:
        raise ValueError("source file and override string are mutually exclusive")
    if source_file is not None:
        path = Path(os.path.abspath(os.path.expanduser(source_file)))
        return ProxyMode.SOURCE, AliasAction.source(str(path))
    if override is not None:
        return ProxyMode.OVERRIDE, AliasAction(command=override)
    return ProxyMode.DIRECT, AliasAction(command=shlex.join(reference_words))


async def make_autocompleted_alias(
    name: str,
    reference_words: tuple[str, ...] | list[str],
    registry: CompletionRegistry,
    *,
    source_file: str | os.PathLike[str] | None = None,
    override: str | None = None,
    quiet: bool = False,
    log: logging.Logger | None = None,
) -> ProxyResult:
    """Define `name` as an alias completing like `reference_words`.

    The alias is declared even when the reference command has no completion,
    only the completion part is then missing.

    Args:
        name: Alias to define
        reference_words: Command (and fixed leading arguments) whose completion is borrowed
        registry: Where the reference command's registration is looked up
        source_file: Make the alias source this file instead of running the command
        override: Make the alias run this literal string instead of the command
        quiet: Do not warn when the reference command has no completion
        log: Logger to use

    Raises:
        ValueError: on an invalid alias name, an empty reference or conflicting modes
    """
    log = log or get_logger("proxy")
    words = tuple(reference_words)
    if not words:
        raise ValueError("missing reference command")
    if not is_valid_alias_name(name):
        raise ValueError(f"invalid alias name: {name!r}")
    mode, action = build_alias_action(words, source_file, override)
    result = ProxyResult(name=name, mode=mode)

    reference = words[0]
    await registry.ensure_loaded(reference)
    spec = await registry.lookup(reference)

    result.declarations.append(AliasDefinition(name=name, action=action))
    if spec is None:
        if not quiet:
            log.warning("No completion found for %s, %s will not complete", reference, name)
        result.exit_code = ExitCode.NO_COMPLETION
        return result

    proxy = CompletionProxy(name=name, reference_handler=spec.handler, reference_words=words)
    result.declarations.extend(
        (
            CompletionLoad(command=reference),
            proxy,
            CompletionRegistration(command=name, handler=proxy.handler_name, options=spec.options),
        )
    )
    log.debug("%s completes like %s via %s", name, proxy.prefix, spec.handler)
    return result
