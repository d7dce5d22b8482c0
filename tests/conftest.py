"""Test configuration and fixtures."""

from io import StringIO
from pathlib import Path
from typing import Callable, Dict, Generator, List, Tuple, Union
from unittest.mock import MagicMock

import pytest
from git import Actor, Repo
from rich.console import Console


@pytest.fixture(autouse=True)
def isolated_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep CLI log files out of the real home directory."""
    log_path = tmp_path / "logs" / "git-ext.log"
    monkeypatch.setenv("GIT_EXT_LOG", str(log_path))
    monkeypatch.delenv("GIT_EXT_REMOTE", raising=False)
    monkeypatch.delenv("GIT_EXT_BASE_BRANCH", raising=False)
    return log_path


@pytest.fixture
def console() -> Console:
    """Console writing to an in-memory buffer."""
    return Console(file=StringIO(), width=120, color_system=None)


def console_output(console: Console) -> str:
    return console.file.getvalue()


Response = Union[str, Exception, Callable[[], str]]


def scripted_runner(responses: Dict[Tuple[str, ...], Response]) -> MagicMock:
    """A GitRunner stand-in answering from a table keyed by argument tuple.

    Unlisted commands succeed with empty output.
    """
    runner = MagicMock()

    def run(args: List[str], verbose: bool = False) -> str:
        result = responses.get(tuple(args), "")
        if callable(result) and not isinstance(result, Exception):
            result = result()
        if isinstance(result, Exception):
            raise result
        return result

    runner.run.side_effect = run
    return runner


def git_calls(runner: MagicMock) -> List[Tuple[str, ...]]:
    """Argument tuples of every run() call, in order."""
    return [tuple(call.args[0]) for call in runner.run.call_args_list]


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[Tuple[Path, Path], None, None]:
    """Create a local repository with a bare `origin` and a stack of branches.

    Layout (upstreams in brackets)::

        main [origin/main]
          feature/a [main]
            feature/b [feature/a]   <- checked out

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True)
    local_repo = Repo.init(local_path)

    author = Actor("Test User", "test@example.com")
    with local_repo.config_writer() as config:
        config.set_value("user", "name", author.name)
        config.set_value("user", "email", author.email)
        config.set_value("commit", "gpgsign", "false")

    def commit_file(name: str, content: str, message: str) -> None:
        path = local_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        local_repo.index.add([name])
        local_repo.index.commit(message, author=author, committer=author)

    commit_file("README.md", "# Test Repository", "Initial commit")

    if "main" not in local_repo.heads:
        local_repo.create_head("main")
    main_branch = local_repo.heads.main
    main_branch.checkout()
    for head in list(local_repo.heads):
        if head.name != "main":
            local_repo.delete_head(head, force=True)

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    local_repo.git.branch("--set-upstream-to", "origin/main", "main")

    local_repo.git.checkout("-b", "feature/a")
    commit_file("a.txt", "a", "Add a")
    local_repo.git.branch("--set-upstream-to", "main", "feature/a")

    local_repo.git.checkout("-b", "feature/b")
    commit_file("b.txt", "b", "Add b")
    local_repo.git.branch("--set-upstream-to", "feature/a", "feature/b")

    yield local_path, remote_path
