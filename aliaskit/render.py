"""Bash rendering of declarations.

The output is meant to be evaluated by an interactive bash session:

    eval "$(aliaskit make-autocompleted-alias pc pass -c)"
"""

from __future__ import annotations

import shlex
from collections.abc import Iterable
from functools import singledispatch

from .constants import DEFAULT_SHORT_NAME, PROGRAM_NAME
from .models import (
    AliasAction,
    AliasDefinition,
    CompletionLoad,
    CompletionProxy,
    CompletionRegistration,
    Declaration,
)

__all__ = [
    "render_action",
    "render_bash",
    "render_declaration",
    "render_hooks",
]


def render_action(action: AliasAction) -> str:
    """Return the command line an alias expands to."""
    if action.is_source:
        return f"source {shlex.quote(action.source_path or '')}"
    return action.command


@singledispatch
def render_declaration(decl: Declaration) -> str:
    """Return the bash code applying one declaration."""
    raise TypeError(f"Cannot render {type(decl).__name__}")


@render_declaration.register
def _(decl: AliasDefinition) -> str:
    return f"alias {decl.name}={shlex.quote(render_action(decl.action))}"


@render_declaration.register
def _(decl: CompletionLoad) -> str:
    cmd = shlex.quote(decl.command)
    return f"complete -p {cmd} >/dev/null 2>&1 || {{ declare -F _completion_loader >/dev/null && _completion_loader {cmd}; }}"


@render_declaration.register
def _(decl: CompletionRegistration) -> str:
    options = " ".join(shlex.quote(opt) for opt in decl.options)
    if options:
        options += " "
    return f"complete {options}-F {decl.handler} {shlex.quote(decl.command)}"


@render_declaration.register
def _(decl: CompletionProxy) -> str:
    words = " ".join(shlex.quote(word) for word in decl.reference_words)
    alias_len = len(decl.name)
    return f"""{decl.handler_name}() {{
    local _aliaskit_words=("${{COMP_WORDS[@]:1}}")
    COMP_CWORD=$((COMP_CWORD + {decl.arg_delta}))
    COMP_POINT=$((COMP_POINT - {alias_len} + {len(decl.prefix)}))
    COMP_LINE={shlex.quote(decl.prefix)}"${{COMP_LINE:{alias_len}}}"
    COMP_WORDS=({words} "${{_aliaskit_words[@]}}")
    local cur prev words cword split
    declare -F _init_completion >/dev/null && _init_completion
    {decl.reference_handler} {shlex.quote(decl.reference_command)} "${{COMP_WORDS[COMP_CWORD]}}" "${{COMP_WORDS[COMP_CWORD-1]}}"
}}"""


def render_bash(declarations: Iterable[Declaration], title: str = "") -> str:
    """Render declarations as a bash script.

    Args:
        declarations: What to declare, in order
        title: Command line shown in the header comment
    """
    header = " ".join((title or PROGRAM_NAME).splitlines())
    lines = [f"# Generated by: {header}"]
    lines.extend(render_declaration(decl) for decl in declarations)
    return "\n".join(lines) + "\n"


def render_hooks(short_name: str = DEFAULT_SHORT_NAME, executable: str = PROGRAM_NAME) -> str:
    """Return the shell functions wrapping this program.

    They evaluate the generated code in the calling session and keep the
    program's exit status.
    """
    exe = shlex.quote(executable)
    blocks = [
        f"""{command}() {{
    local _aliaskit_out _aliaskit_status
    _aliaskit_out="$(command {exe} {command} "$@")"
    _aliaskit_status=$?
    eval "$_aliaskit_out"
    return $_aliaskit_status
}}"""
        for command in ("add-source-path", "make-autocompleted-alias")
    ]
    if short_name and short_name != "make-autocompleted-alias":
        blocks.append(f'{short_name}() {{\n    make-autocompleted-alias "$@"\n}}')
    return "\n".join(blocks) + "\n"
