"""Tests for the bash rendering of declarations."""

import subprocess

import pytest

from aliaskit.models import AliasAction, AliasDefinition, CompletionLoad, CompletionProxy, CompletionRegistration
from aliaskit.proxy import make_autocompleted_alias
from aliaskit.render import render_action, render_bash, render_declaration, render_hooks

from .conftest import HAS_BASH


def _run_bash(script: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["bash", "--norc", "--noprofile", "-c", script],
        capture_output=True,
        text=True,
        check=False,
    )


def test_render_alias():
    decl = AliasDefinition(name="pc", action=AliasAction(command="pass -c"))
    assert render_declaration(decl) == "alias pc='pass -c'"


def test_render_alias_with_quotes():
    decl = AliasDefinition(name="hi", action=AliasAction(command="echo 'hi there'"))
    assert render_declaration(decl) == "alias hi='echo '\"'\"'hi there'\"'\"''"


def test_render_source_action():
    assert render_action(AliasAction.source("/home/me/scripts/venv.sh")) == "source /home/me/scripts/venv.sh"
    assert render_action(AliasAction.source("/tmp/odd$dir/x.sh")) == "source '/tmp/odd$dir/x.sh'"


def test_render_registration():
    decl = CompletionRegistration(command="pc", handler="_pc", options=("-o", "filenames"))
    assert render_declaration(decl) == "complete -o filenames -F _pc pc"
    decl = CompletionRegistration(command="g", handler="_g")
    assert render_declaration(decl) == "complete -F _g g"
    decl = CompletionRegistration(command="svc", handler="_svc", options=("-W", "start stop"))
    assert render_declaration(decl) == "complete -W 'start stop' -F _svc svc"


def test_render_load():
    text = render_declaration(CompletionLoad(command="pass"))
    assert text.startswith("complete -p pass >/dev/null 2>&1 ||")
    assert "_completion_loader pass" in text


def test_render_proxy():
    proxy = CompletionProxy(name="pc", reference_handler="_pass", reference_words=("pass", "-c"))
    text = render_declaration(proxy)
    assert text.startswith("_pc() {")
    assert "COMP_CWORD=$((COMP_CWORD + 1))" in text
    assert "COMP_POINT=$((COMP_POINT - 2 + 7))" in text
    assert "COMP_LINE='pass -c'\"${COMP_LINE:2}\"" in text
    assert 'COMP_WORDS=(pass -c "${_aliaskit_words[@]}")' in text
    assert "_init_completion" in text
    assert "_pass pass" in text


def test_render_unknown_declaration():
    with pytest.raises(TypeError):
        render_declaration("alias x=y")


def test_render_bash_header():
    script = render_bash([], "aliaskit make-autocompleted-alias -o 'a\nb' x y")
    assert script == "# Generated by: aliaskit make-autocompleted-alias -o 'a b' x y\n"


def test_render_hooks():
    hooks = render_hooks("mca", "aliaskit")
    assert "add-source-path() {" in hooks
    assert "make-autocompleted-alias() {" in hooks
    assert 'command aliaskit make-autocompleted-alias "$@"' in hooks
    assert "mca() {" in hooks


def test_render_hooks_without_short_name():
    hooks = render_hooks("", "aliaskit")
    assert "mca" not in hooks
    assert hooks.count("() {") == 2


@pytest.mark.skipif(not HAS_BASH, reason="bash not installed")
class TestBash:
    """Run the generated code in bash."""

    def test_syntax_valid(self, scripts_dir):
        decls = [
            AliasDefinition(name="venv", action=AliasAction.source(str(scripts_dir / "script1.txt"))),
            CompletionLoad(command="pass"),
            CompletionProxy(name="pc", reference_handler="_pass", reference_words=("pass", "-c")),
            CompletionRegistration(command="pc", handler="_pc", options=("-o", "filenames")),
        ]
        script = render_hooks() + render_bash(decls)
        result = subprocess.run(["bash", "-n", "-c", script], capture_output=True, text=True, check=False)
        assert result.returncode == 0, f"Bash syntax error: {result.stderr}"

    @pytest.mark.asyncio
    async def test_proxy_handler_rewrites_context(self, pass_registry):
        result = await make_autocompleted_alias("pc", ["pass", "-c"], pass_registry)
        script = f"""
_pass() {{
    printf '%s\\n' "$COMP_CWORD" "$COMP_POINT" "$COMP_LINE" "${{COMP_WORDS[*]}}" "$1" "$2" "$3"
}}
complete -o filenames -F _pass pass
{render_bash(result.declarations)}
complete -p pc
COMP_WORDS=(pc fo)
COMP_CWORD=1
COMP_LINE="pc fo"
COMP_POINT=5
_pc
"""
        proc = _run_bash(script)
        assert proc.returncode == 0, proc.stderr
        assert proc.stdout.splitlines() == [
            "complete -o filenames -F _pc pc",
            "2",
            "10",
            "pass -c fo",
            "pass -c fo",
            "pass",
            "fo",
            "-c",
        ]

    @pytest.mark.asyncio
    async def test_quoted_argument_line_matches_alias(self, pass_registry):
        result = await make_autocompleted_alias("pw", ["pass", "-c", "a b"], pass_registry)
        script = f"""
_pass() {{
    printf '%s\\n' "$COMP_CWORD" "$COMP_POINT" "$COMP_LINE" "${{#COMP_WORDS[@]}}" "${{COMP_WORDS[2]}}"
}}
{render_bash(result.declarations)}
printf '%s\\n' "${{BASH_ALIASES[pw]}}"
COMP_WORDS=(pw fo)
COMP_CWORD=1
COMP_LINE="pw fo"
COMP_POINT=5
_pw
"""
        proc = _run_bash(script)
        assert proc.returncode == 0, proc.stderr
        assert proc.stdout.splitlines() == ["pass -c 'a b'", "3", "16", "pass -c 'a b' fo", "4", "a b"]

    @pytest.mark.asyncio
    async def test_proxy_alias_expands(self, pass_registry):
        result = await make_autocompleted_alias("pc", ["pass", "-c"], pass_registry)
        proc = _run_bash(render_bash(result.declarations) + "alias pc\n")
        assert proc.returncode == 0, proc.stderr
        assert proc.stdout.strip() == "alias pc='pass -c'"

    def test_hooks_eval_and_keep_status(self, tmp_path):
        fake = tmp_path / "fake-aliaskit"
        fake.write_text("#!/bin/sh\necho \"alias hi='echo hi'\"\nexit 1\n")
        fake.chmod(0o755)
        script = render_hooks("mca", str(fake)) + 'mca x y\necho "status=$?"\nalias hi\n'
        proc = _run_bash(script)
        assert proc.stdout.splitlines() == ["status=1", "alias hi='echo hi'"]

    def test_source_alias_runs_file(self, tmp_path):
        target = tmp_path / "greet.sh"
        target.write_text("GREETING=hello\n")
        decl = AliasDefinition(name="greet", action=AliasAction.source(str(target)))
        script = "shopt -s expand_aliases\n" + render_bash([decl]) + "greet\necho $GREETING\n"
        proc = _run_bash(script)
        assert proc.stdout.strip() == "hello"
