"""Declarations produced by aliaskit and the types they are built from.

Nothing here touches a shell: every operation returns a list of these
records, and `aliaskit.render` turns them into bash code for the session
to evaluate.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from enum import IntEnum, StrEnum

from .constants import HANDLER_PREFIX

__all__ = [
    "AliasAction",
    "AliasDefinition",
    "AliaskitError",
    "CompletionContext",
    "CompletionLoad",
    "CompletionProxy",
    "CompletionRegistration",
    "CompletionSpec",
    "Declaration",
    "ExitCode",
    "ProxyMode",
    "handler_name_for",
]


class AliaskitError(Exception):
    """Used for errors which already triggered logging."""


class ExitCode(IntEnum):
    """Exit codes for the aliaskit CLI."""

    SUCCESS = 0
    NO_COMPLETION = 1  # Reference command has no completion registration
    USAGE_ERROR = 2  # Invalid arguments (same code as argparse)
    CONFIG_ERROR = 3  # Configuration file missing, unreadable or invalid


class ProxyMode(StrEnum):
    """What an autocompleted alias runs."""

    DIRECT = "direct"  # the reference command line itself
    SOURCE = "source"  # sources a file
    OVERRIDE = "override"  # an arbitrary literal string


def handler_name_for(alias_name: str) -> str:
    """Return the completion handler function name of an alias."""
    return f"{HANDLER_PREFIX}{alias_name}"


@dataclass(frozen=True)
class AliasAction:
    """Command line bound to an alias, or a file to source."""

    command: str = ""
    source_path: str | None = None

    @classmethod
    def source(cls, path: str) -> AliasAction:
        """Build a "source this file" action."""
        return cls(source_path=path)

    @property
    def is_source(self) -> bool:
        """Tell if the action sources a file."""
        return self.source_path is not None


@dataclass(frozen=True)
class AliasDefinition:
    """An alias binding in the target session."""

    name: str
    action: AliasAction


@dataclass(frozen=True)
class CompletionSpec:
    """Current completion registration of a command.

    `options` are the registration flags without the `-F handler` pair
    and without the command name, e.g. ("-o", "filenames").
    """

    handler: str
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class CompletionRegistration:
    """`complete` registration binding a handler function to a command name."""

    command: str
    handler: str
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class CompletionLoad:
    """Force-load of a command's completion handler in the target session."""

    command: str


@dataclass(frozen=True)
class CompletionContext:
    """Completion state as seen by a handler (COMP_WORDS, COMP_CWORD, COMP_POINT, COMP_LINE)."""

    words: tuple[str, ...]
    cword: int
    point: int
    line: str


@dataclass(frozen=True)
class CompletionProxy:
    """Completion handler delegating to another command's handler.

    Holds everything the generated handler needs: the alias it serves, the
    handler to delegate to and the words the reference command is invoked with.
    """

    name: str
    reference_handler: str
    reference_words: tuple[str, ...]
    handler_name: str = field(default="")

    def __post_init__(self) -> None:
        if not self.reference_words:
            raise ValueError("a completion proxy needs at least the reference command")
        if not self.handler_name:
            object.__setattr__(self, "handler_name", handler_name_for(self.name))

    @property
    def reference_command(self) -> str:
        """Return the command whose completion is borrowed."""
        return self.reference_words[0]

    @property
    def arg_delta(self) -> int:
        """Return how many more words the reference invocation has than the alias."""
        return len(self.reference_words) - 1

    @property
    def prefix(self) -> str:
        """Return the reference invocation as typed on a command line.

        Quoted like the direct alias text, so `COMP_LINE` matches what the alias expands to.
        """
        return shlex.join(self.reference_words)


Declaration = AliasDefinition | CompletionLoad | CompletionProxy | CompletionRegistration
