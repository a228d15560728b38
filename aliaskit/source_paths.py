"""Source-on-demand aliases for every script found under a directory tree.

Each regular file becomes an alias sourcing it, named after the file with
its last extension stripped (unless asked to keep it).
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePath

from aiofiles import os as aios

from .constants import DEFAULT_SCAN_TIMEOUT
from .logging_setup import get_logger
from .models import AliasAction, AliasDefinition

__all__ = [
    "ScanResult",
    "add_source_path",
    "derive_alias_name",
    "is_hidden",
    "is_supported_filename",
    "is_valid_alias_name",
    "scan_tree",
]

_WHITESPACE = re.compile(r"\s")

# bash refuses these in alias names, or they would break the quoting or glob when evaluated
_INVALID_ALIAS_CHARS = frozenset("/$`=\\'\"|&;()<>*?[")


@dataclass(frozen=True)
class ScanResult:
    """Regular files found under a root directory."""

    root: Path
    files: tuple[Path, ...]
    truncated: bool = False  # the scan hit its timeout


def is_supported_filename(filename: str) -> bool:
    """Tell if a file can get an alias (names containing whitespace can not)."""
    return _WHITESPACE.search(filename) is None


def is_valid_alias_name(name: str) -> bool:
    """Tell if bash accepts `name` as an alias name."""
    return bool(name) and is_supported_filename(name) and not _INVALID_ALIAS_CHARS.intersection(name)


def is_hidden(relative_path: PurePath) -> bool:
    """Tell if any component of a path (relative to the scanned root) is hidden."""
    return any(part.startswith(".") for part in relative_path.parts)


def derive_alias_name(filename: str, keep_extension: bool = False) -> str | None:
    """Compute the alias name of a file.

    Without `keep_extension`, the last `.segment` is dropped, except for
    dotfiles like `.profile` which have no extension to drop.

    Returns:
        The alias name, or None when the filename is empty
    """
    if not filename:
        return None
    if keep_extension:
        return filename
    segments = filename.split(".")
    if len(segments) == 1:
        return filename
    if len(segments) == 2:  # noqa: PLR2004
        return filename if segments[0] == "" else segments[0]
    return ".".join(segments[:-1])


async def _walk(
    directory: Path,
    root: Path,
    include_hidden: bool,
    found: list[Path],
    log: logging.Logger,
) -> None:
    """Collect the regular files under `directory` into `found`.

    Appends as it goes so a cancelled walk still leaves its partial results.
    """
    try:
        names = await aios.listdir(directory)
    except OSError as e:
        log.warning("Cannot read %s: %s", directory, e)
        return
    for name in sorted(names):
        path = directory / name
        if not include_hidden and is_hidden(path.relative_to(root)):
            continue
        if await aios.path.isdir(path):
            if await aios.path.islink(path):
                log.debug("Not following symlinked directory %s", path)
                continue
            await _walk(path, root, include_hidden, found, log)
        elif await aios.path.isfile(path):
            found.append(path)


async def scan_tree(
    root: Path,
    include_hidden: bool = False,
    timeout: float = DEFAULT_SCAN_TIMEOUT,
    log: logging.Logger | None = None,
) -> ScanResult:
    """List the regular files under `root`, giving up after `timeout` seconds.

    A scan which times out returns whatever was collected so far.

    Args:
        root: Directory to scan
        include_hidden: Also list hidden files and the content of hidden directories
        timeout: Scan duration limit, in seconds
        log: Logger to use
    """
    log = log or get_logger("source_paths")
    found: list[Path] = []
    truncated = False
    try:
        async with asyncio.timeout(timeout):
            await _walk(root, root, include_hidden, found, log)
    except TimeoutError:
        truncated = True
        log.debug("Scan of %s stopped after %ss with %d files", root, timeout, len(found))
    return ScanResult(root=root, files=tuple(sorted(found)), truncated=truncated)


async def add_source_path(
    root: str | os.PathLike[str],
    include_hidden: bool = False,
    keep_extension: bool = False,
    timeout: float = DEFAULT_SCAN_TIMEOUT,
    log: logging.Logger | None = None,
) -> list[AliasDefinition]:
    """Build one alias per script under `root`, each sourcing its file.

    Files with unsupported names are skipped with a warning. Nothing found is
    not an error.

    Args:
        root: Directory to scan (`~` is expanded)
        include_hidden: Also alias hidden files and files under hidden directories
        keep_extension: Use the full filename as alias name
        timeout: Scan duration limit, in seconds
        log: Logger to use

    Returns:
        The alias definitions, in path order
    """
    log = log or get_logger("source_paths")
    root_path = Path(os.path.abspath(os.path.expanduser(root)))
    if not await aios.path.isdir(root_path):
        log.warning("Not a directory: %s", root_path)
        return []

    result = await scan_tree(root_path, include_hidden, timeout, log)
    aliases: list[AliasDefinition] = []
    for path in result.files:
        if not is_supported_filename(path.name):
            log.warning("Filename contains whitespace, not supported: %s", path)
            continue
        name = derive_alias_name(path.name, keep_extension)
        if name is None:
            continue
        if not is_valid_alias_name(name):
            log.warning("Cannot use %r as an alias name, skipping %s", name, path)
            continue
        aliases.append(AliasDefinition(name=name, action=AliasAction.source(str(path))))
    log.debug("%d aliases from %s", len(aliases), root_path)
    return aliases
