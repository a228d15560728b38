"""Tests for completion registries."""

from unittest.mock import AsyncMock

import pytest

from aliaskit.models import CompletionSpec
from aliaskit.registry import BashRegistry, ChainRegistry, StaticRegistry, find_bash_completion, parse_complete_line

from .conftest import HAS_BASH


def test_parse_complete_line():
    assert parse_complete_line("complete -o filenames -F _pass pass") == ("pass", CompletionSpec("_pass", ("-o", "filenames")))


def test_parse_complete_line_no_options():
    assert parse_complete_line("complete -F _ssh ssh") == ("ssh", CompletionSpec("_ssh"))


def test_parse_complete_line_many_options():
    line = "complete -o bashdefault -o default -o nospace -F __git_wrap__git_main git"
    command, spec = parse_complete_line(line)
    assert command == "git"
    assert spec.handler == "__git_wrap__git_main"
    assert spec.options == ("-o", "bashdefault", "-o", "default", "-o", "nospace")


def test_parse_complete_line_quoted_values():
    command, spec = parse_complete_line("complete -W 'start stop' -o nospace -F _svc svc")
    assert command == "svc"
    assert spec.options == ("-W", "start stop", "-o", "nospace")


def test_parse_complete_line_double_dash():
    assert parse_complete_line("complete -F _longopt -- ls") == ("ls", CompletionSpec("_longopt"))


def test_parse_complete_line_flags():
    command, spec = parse_complete_line("complete -d -F _cd cd")
    assert command == "cd"
    assert spec.options == ("-d",)


@pytest.mark.parametrize(
    "line",
    [
        "",
        "complete -W 'a b' svc",  # no function to delegate to
        "complete -F _foo",  # no command
        "alias ll='ls -l'",
        "complete -F 'unbalanced",
    ],
)
def test_parse_complete_line_rejects(line):
    assert parse_complete_line(line) is None


@pytest.mark.asyncio
async def test_static_registry_from_config():
    registry = StaticRegistry.from_config(
        {
            "pass": {"handler": "_pass", "options": ["-o", "filenames"]},
            "make": {"handler": "_make", "options": "-o default"},
            "ssh": {"handler": "_ssh"},
        }
    )
    await registry.ensure_loaded("pass")
    assert await registry.lookup("pass") == CompletionSpec("_pass", ("-o", "filenames"))
    assert await registry.lookup("make") == CompletionSpec("_make", ("-o", "default"))
    assert await registry.lookup("ssh") == CompletionSpec("_ssh")
    assert await registry.lookup("scp") is None


@pytest.mark.asyncio
async def test_static_registry_skips_malformed_entries(test_logger):
    registry = StaticRegistry.from_config(
        {
            "pass": {"options": ["-o", "filenames"]},
            "make": "_make",
            "ssh": {"handler": "_ssh", "options": 3},
            "git": {"handler": "_git", "options": ["-o", 1]},
        },
        log=test_logger,
    )
    assert await registry.lookup("pass") is None
    assert await registry.lookup("make") is None
    assert await registry.lookup("ssh") is None
    assert await registry.lookup("git") == CompletionSpec("_git", ("-o", "1"))
    assert test_logger.error.call_count == 3


@pytest.mark.asyncio
async def test_chain_registry_order():
    first = StaticRegistry({"pass": CompletionSpec("_first")})
    second = StaticRegistry({"pass": CompletionSpec("_second"), "ssh": CompletionSpec("_ssh")})
    chain = ChainRegistry(first, second)
    assert (await chain.lookup("pass")).handler == "_first"
    assert (await chain.lookup("ssh")).handler == "_ssh"
    assert await chain.lookup("scp") is None


@pytest.mark.asyncio
async def test_chain_registry_loads_before_lookup(mocker):
    member = StaticRegistry({"pass": CompletionSpec("_pass")})
    ensure_loaded = mocker.spy(member, "ensure_loaded")
    await ChainRegistry(member).lookup("pass")
    ensure_loaded.assert_called_once_with("pass")


@pytest.mark.asyncio
async def test_bash_registry_parses_probe(test_logger):
    registry = BashRegistry(bash_completion="", log=test_logger)
    registry._probe = AsyncMock(return_value="complete -o filenames -F _pass pass\n")
    assert await registry.lookup("pass") == CompletionSpec("_pass", ("-o", "filenames"))
    # cached
    assert await registry.lookup("pass") == CompletionSpec("_pass", ("-o", "filenames"))
    registry._probe.assert_awaited_once_with("pass")


@pytest.mark.asyncio
async def test_bash_registry_ignores_other_commands(test_logger):
    registry = BashRegistry(bash_completion="", log=test_logger)
    registry._probe = AsyncMock(return_value="complete -F _other other\n")
    assert await registry.lookup("pass") is None


@pytest.mark.asyncio
async def test_bash_registry_missing_bash(test_logger):
    registry = BashRegistry(bash="/nonexistent/bash", bash_completion="", log=test_logger)
    assert await registry.lookup("pass") is None
    test_logger.warning.assert_called_once()


@pytest.mark.skipif(not HAS_BASH, reason="bash not installed")
@pytest.mark.asyncio
async def test_bash_registry_unknown_command(test_logger):
    registry = BashRegistry(bash_completion="", log=test_logger)
    assert await registry.lookup("aliaskit-surely-not-a-command") is None


@pytest.mark.skipif(not HAS_BASH, reason="bash not installed")
@pytest.mark.asyncio
async def test_bash_registry_reads_framework(tmp_path, test_logger):
    framework = tmp_path / "bash_completion"
    framework.write_text("_fake() { :; }\ncomplete -o nospace -F _fake fakecmd\n")
    registry = BashRegistry(bash_completion=str(framework), log=test_logger)
    assert await registry.lookup("fakecmd") == CompletionSpec("_fake", ("-o", "nospace"))


@pytest.mark.skipif(not HAS_BASH, reason="bash not installed")
@pytest.mark.asyncio
async def test_bash_registry_runs_loader(tmp_path, test_logger):
    framework = tmp_path / "bash_completion"
    framework.write_text('_completion_loader() { eval "_lazy_$1() { :; }"; complete -F "_lazy_$1" "$1"; }\n')
    registry = BashRegistry(bash_completion=str(framework), log=test_logger)
    assert await registry.lookup("lazycmd") == CompletionSpec("_lazy_lazycmd")


def test_find_bash_completion(tmp_path):
    existing = tmp_path / "bash_completion"
    existing.write_text("")
    assert find_bash_completion((str(tmp_path / "missing"), str(existing))) == str(existing)
    assert find_bash_completion((str(tmp_path / "missing"),)) is None
