"""
Execution of git commands.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from git import Git
from git.exc import GitCommandNotFound
from rich.console import Console
from rich.text import Text

from .models import CommandError


logger = logging.getLogger(__name__)


def _decode(value: Union[bytes, str]) -> str:
    """Decode git output as UTF-8, replacing bytes that are not valid UTF-8.

    Commit messages and paths are arbitrary bytes; GitPython hands back
    undecodable bytes as lone surrogates, which cannot be printed.
    """
    if isinstance(value, str):
        value = value.encode("utf-8", errors="surrogateescape")
    return value.decode("utf-8", errors="replace")


class GitRunner:
    """Runs git with argument lists and returns the captured output."""

    def __init__(self, working_dir: Optional[Path] = None, console: Optional[Console] = None) -> None:
        """Initialize the runner for a working directory (defaults to cwd)."""
        self.working_dir = (working_dir or Path.cwd()).resolve()
        self.console = console or Console()
        self._git = Git(str(self.working_dir))

    def run(self, args: Sequence[str], verbose: bool = False) -> str:
        """
        Run `git <args>` once and wait for it to exit.

        Returns:
            The captured standard output with trailing whitespace removed.

        Raises:
            CommandError: If git exits with a non-zero status or cannot be started.
        """
        args = list(args)
        if not args:
            raise ValueError("git needs at least one argument")

        if verbose:
            self.console.print(
                Text.assemble(("git", "bold bright_white on green"), " ", " ".join(args))
            )
        logger.debug(f"Running 'git {' '.join(args)}' in {self.working_dir}")

        try:
            status, stdout, stderr = self._git.execute(
                ["git", *args],
                with_extended_output=True,
                with_exceptions=False,
                stdout_as_string=False,
            )
        except GitCommandNotFound as e:
            logger.error(f"Could not launch git: {e}")
            raise CommandError(args, 127, str(e)) from e

        stdout, stderr = _decode(stdout), _decode(stderr)
        if status != 0:
            logger.error(f"git {' '.join(args)} failed with status {status}: {stderr.strip()}")
            raise CommandError(args, status, stderr)

        output = stdout.rstrip()
        if verbose and output:
            self.console.print(output, markup=False, highlight=False)
        return output
