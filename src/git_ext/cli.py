"""
Command-line interface for git-ext.
"""

from __future__ import annotations

import functools
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from .cli_prompt import CliPrompt
from .git_runner import GitRunner
from .models import (
    AggregateError,
    CommandError,
    CycleError,
    DirtyWorkingTreeError,
    GitExtConfig,
    GitExtError,
    ParseError,
)
from .prompt_interface import AssumeYesPrompt
from .workflows import Workflows
from . import __version__ as PACKAGE_VERSION


console = Console()
logger = logging.getLogger(__name__)

ALIASES = {
    "lh": "lasthash",
    "shup": "show-up",
    "fu": "fix-up",
    "rup": "rec-fix-up",
    "cbr": "commit-branch",
    "tree": "show-tree",
    "po": "push-origin",
    "aap": "add-amend-push-origin",
    "rl": "rebase-onto-latest",
    "rho": "reset-hard-origin",
}

ERROR_TITLES = {
    CommandError: "Git Error",
    ParseError: "Parse Error",
    CycleError: "Cycle Error",
    DirtyWorkingTreeError: "Unclean Repository",
    AggregateError: "Purge Error",
}


class AliasedGroup(click.Group):
    """Click group that also accepts the short alias of each command."""

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        _, cmd, args = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, args


def _print_version(ctx, param, value):
    """Eager option callback to print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"git-ext {PACKAGE_VERSION}")
    ctx.exit()


def _default_log_path() -> Path:
    """Default log file path (~/.git-ext/git-ext.log)."""
    return Path.home() / ".git-ext" / "git-ext.log"


def setup_logging(console_level: Optional[str] = None, log_file: Optional[Path] = None) -> Path:
    """Send all log records to a rotating file, and to the console if a level is given.

    Returns the log file path.
    """
    log_path = Path(log_file).expanduser() if log_file else _default_log_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    # Clear existing handlers to avoid duplication in tests / repeated invocations
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    file_handler = RotatingFileHandler(str(log_path), maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(file_handler)

    if console_level:
        console_handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
        console_handler.setLevel(getattr(logging, console_level.upper(), logging.INFO))
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(console_handler)

    return log_path


def error_boundary(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report workflow failures on the console and exit non-zero."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except GitExtError as e:
            title = ERROR_TITLES.get(type(e), "Error")
            console.print(Text(f"\n❌ {title}: {e}", style="bold red"))
            logger.debug(f"{func.__name__} aborted due to {type(e).__name__}", exc_info=True)
            sys.exit(1)
        except (click.Abort, KeyboardInterrupt):
            console.print("\n🚫 Operation cancelled by user", style="bold yellow")
            logger.debug("Operation cancelled by user", exc_info=True)
            sys.exit(130)
        except Exception as e:
            console.print(Text(f"\n💥 Unexpected Error: {e}", style="bold red"))
            ctx = click.get_current_context(silent=True)
            if ctx is not None and ctx.obj and ctx.obj.get("verbose"):
                console.print_exception()
            logger.debug(f"Unexpected error in {func.__name__}", exc_info=True)
            sys.exit(1)

    return wrapper


def _workflows(ctx: click.Context, assume_yes: bool = False) -> Workflows:
    runner = GitRunner(ctx.obj.get("repo_path"), console=console)
    prompt = AssumeYesPrompt() if assume_yes else CliPrompt(console)
    return Workflows(runner, ctx.obj["config"], console=console, prompt=prompt)


@click.group(cls=AliasedGroup)
@click.option(
    "--version",
    "-V",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, help="Echo every git command and its output")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Console log level. By default, console logging is disabled.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="GIT_EXT_LOG",
    help="Log file path (defaults to ~/.git-ext/git-ext.log)",
)
@click.option(
    "--repo-path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Path to repository (defaults to current directory)",
)
@click.option("--remote", envvar="GIT_EXT_REMOTE", default="origin", show_default=True, help="Remote to push to and prune")
@click.option(
    "--base-branch",
    envvar="GIT_EXT_BASE_BRANCH",
    default="main",
    show_default=True,
    help="Branch used by rebase-onto-latest when none is given",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    log_level: Optional[str],
    log_file: Optional[Path],
    repo_path: Optional[Path],
    remote: str,
    base_branch: str,
) -> None:
    """git-ext - helpers for stacked branches: rebase onto upstream, split commits, show the branch tree."""
    log_path = setup_logging(log_level, log_file)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["log_path"] = log_path
    ctx.obj["repo_path"] = repo_path.resolve() if isinstance(repo_path, Path) else None
    ctx.obj["config"] = GitExtConfig(remote=remote, base_branch=base_branch, log_file=log_path)
    logger.debug(f"CLI init: cwd={Path.cwd()} repo_path={ctx.obj['repo_path']} remote={remote}")


@cli.command()
@click.pass_context
@error_boundary
def lasthash(ctx: click.Context) -> None:
    """(alias: lh) Print the most recent commit hash."""
    click.echo(_workflows(ctx).last_hash(ctx.obj["verbose"]))


@cli.command("show-up")
@click.pass_context
@error_boundary
def show_up(ctx: click.Context) -> None:
    """(alias: shup) Print the current branch's upstream."""
    click.echo(_workflows(ctx).get_upstream(ctx.obj["verbose"]))


@cli.command("fix-up")
@click.pass_context
@error_boundary
def fix_up(ctx: click.Context) -> None:
    """(alias: fu) Rebase the latest commit onto the upstream."""
    _workflows(ctx).fix_upstream(verbose=ctx.obj["verbose"])


@cli.command()
@click.argument("branch")
@click.pass_context
@error_boundary
def up(ctx: click.Context, branch: str) -> None:
    """Rebase the latest commit onto BRANCH and track it."""
    _workflows(ctx).fix_upstream(branch, ctx.obj["verbose"])


@cli.command("rec-fix-up")
@click.argument("terminal")
@click.option("--push", is_flag=True, help="Force push each branch after rebasing it")
@click.pass_context
@error_boundary
def rec_fix_up(ctx: click.Context, terminal: str, push: bool) -> None:
    """(alias: rup) Rebase each branch of the stack onto its upstream, down from TERMINAL."""
    rebased = _workflows(ctx).rec_fix_up(terminal, push, ctx.obj["verbose"])
    if rebased:
        console.print(f"\n✅ Rebased {len(rebased)} branch(es)", style="bold green")
    else:
        console.print(f"Already on {terminal}; nothing to do.")


@cli.command("commit-branch")
@click.argument("name")
@click.pass_context
@error_boundary
def commit_branch(ctx: click.Context, name: str) -> None:
    """(alias: cbr) Reset to HEAD~1 and move the former HEAD commit into a new branch NAME."""
    _workflows(ctx).commit_branch(name, ctx.obj["verbose"])


@cli.command("show-tree")
@click.pass_context
@error_boundary
def show_tree(ctx: click.Context) -> None:
    """(alias: tree) Show the tree of all branches and their upstream relations."""
    _workflows(ctx).show_tree()


@cli.command("push-origin")
@click.pass_context
@error_boundary
def push_origin(ctx: click.Context) -> None:
    """(alias: po) Force push to the same-named branch on the remote."""
    _workflows(ctx).push_origin(ctx.obj["verbose"])


@cli.command()
@click.argument("prefix")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Delete without asking for confirmation")
@click.pass_context
@error_boundary
def purge(ctx: click.Context, prefix: str, assume_yes: bool) -> None:
    """Delete local branches under PREFIX/ that are no longer on the remote."""
    deleted = _workflows(ctx, assume_yes).purge(prefix, ctx.obj["verbose"])
    if deleted:
        console.print(f"🧹 Deleted {len(deleted)} branch(es)", style="bold green")


@cli.command("add-amend-push-origin")
@click.pass_context
@error_boundary
def add_amend_push_origin(ctx: click.Context) -> None:
    """(alias: aap) `git add .`, `git commit --amend --no-edit`, then push-origin."""
    _workflows(ctx).add_amend_push_origin(ctx.obj["verbose"])


@cli.command("rebase-onto-latest")
@click.argument("branch", required=False)
@click.pass_context
@error_boundary
def rebase_onto_latest(ctx: click.Context, branch: Optional[str]) -> None:
    """(alias: rl) Pull the latest base branch (or BRANCH) and rebase the latest commit onto it."""
    _workflows(ctx).rebase_onto_latest(branch, ctx.obj["verbose"])


@cli.command("reset-hard-origin")
@click.pass_context
@error_boundary
def reset_hard_origin(ctx: click.Context) -> None:
    """(alias: rho) Reset --hard to the same-named branch on the remote."""
    _workflows(ctx).reset_hard_origin(ctx.obj["verbose"])


@cli.command()
def version() -> None:
    """Print the current git-ext version."""
    console.print(f"git-ext {PACKAGE_VERSION}")


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n🚫 Operation cancelled by user", style="bold yellow")
        logger.debug("Top-level cancellation (KeyboardInterrupt)", exc_info=True)
        sys.exit(130)
    except Exception as e:
        console.print(Text(f"\n💥 Unexpected error: {e}", style="bold red"))
        logger.debug("Unexpected error in main()", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
