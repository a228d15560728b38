" generic fixtures "
import shutil
from unittest.mock import Mock

import pytest

from aliaskit.models import CompletionSpec
from aliaskit.registry import StaticRegistry

HAS_BASH = shutil.which("bash") is not None


def pytest_configure():
    "Runs once before all"
    from aliaskit.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


@pytest.fixture
def test_logger():
    "A logger recording its calls"
    return Mock()


@pytest.fixture
def pass_registry():
    "Knows `pass` the way bash-completion registers it"
    return StaticRegistry(
        {
            "pass": CompletionSpec(handler="_pass", options=("-o", "filenames")),
            "git": CompletionSpec(handler="__git_wrap__git_main", options=("-o", "bashdefault", "-o", "default", "-o", "nospace")),
        }
    )


@pytest.fixture
def scripts_dir(tmp_path):
    "A directory of scripts to alias"
    root = tmp_path / "scripts"
    root.mkdir()
    for name in ("script1.txt", "script2.34.sh", ".script3.a.sh", ".script4"):
        (root / name).write_text("echo hi\n")
    return root
