"""
CLI-specific implementation of the prompt interface.
"""

from __future__ import annotations

from typing import List

import click
from rich.console import Console

from .prompt_interface import UserPrompt


class CliPrompt(UserPrompt):
    """CLI implementation of the prompt interface using click and rich."""

    def __init__(self, console: Console = None):
        self.console = console or Console()

    def confirm_purge(self, branches: List[str], remote_name: str = "origin") -> bool:
        """Ask for confirmation before deleting branches gone from the remote."""
        self.console.print(
            f"\n⚠️  {len(branches)} local branch(es) no longer exist on [yellow]{remote_name}[/yellow]",
            style="bold",
        )
        return click.confirm("Ok?", default=False)
