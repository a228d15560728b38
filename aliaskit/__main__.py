"""Run aliaskit as `python -m aliaskit`."""

from .command import run

run()
