"""
Data models and errors for the git-ext branch helper.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence


NO_MESSAGE = "no message"

_AHEAD_RE = re.compile(r"ahead (\d+)")
_BEHIND_RE = re.compile(r"behind (\d+)")


@dataclass(frozen=True)
class BranchDescriptor:
    """One branch as reported by `git branch -vv`."""

    current: bool
    name: str
    sha: str
    upstream: Optional[str] = None
    status: str = ""
    message: str = NO_MESSAGE

    @property
    def ahead(self) -> Optional[int]:
        """Commits ahead of the upstream, if git reported any."""
        match = _AHEAD_RE.search(self.status)
        return int(match.group(1)) if match else None

    @property
    def behind(self) -> Optional[int]:
        """Commits behind the upstream, if git reported any."""
        match = _BEHIND_RE.search(self.status)
        return int(match.group(1)) if match else None


@dataclass
class BranchNode:
    """A branch in the upstream graph, with the names of branches tracking it."""

    desc: BranchDescriptor
    downstream: List[str] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.desc.name

    @property
    def upstream(self) -> Optional[str]:
        return self.desc.upstream

    @property
    def has_upstream(self) -> bool:
        return self.desc.upstream is not None


@dataclass(frozen=True)
class TreeRow:
    """A single display row of the branch tree.

    `style` names the highlight applied when printing: "remote", "missing",
    "current" or None. `ahead` and `behind` are the counts against the
    branch's upstream, printed before the message.
    """

    label: str
    sha: str
    message: str
    style: Optional[str] = None
    ahead: Optional[int] = None
    behind: Optional[int] = None


@dataclass
class GitExtConfig:
    """Runtime settings gathered from CLI options and the environment."""

    remote: str = "origin"
    base_branch: str = "main"
    log_file: Optional[Path] = None


class GitExtError(Exception):
    """Base exception for git-ext operations."""

    pass


class CommandError(GitExtError):
    """Exception raised when a git invocation exits with a non-zero status."""

    def __init__(self, args: Sequence[str], exit_code: int, stderr: str = "") -> None:
        self.args_list = list(args)
        self.exit_code = exit_code
        self.stderr = stderr.strip()
        message = f"git {' '.join(self.args_list)} exited with status {exit_code}"
        if self.stderr:
            message = f"{message}:\n{self.stderr}"
        super().__init__(message)


class ParseError(GitExtError):
    """Exception raised when a branch listing line has an unexpected shape."""

    def __init__(self, line: str, reason: str) -> None:
        self.line = line
        self.reason = reason
        super().__init__(f"Unable to parse branch line {line!r} ({reason})")


class CycleError(GitExtError):
    """Exception raised when the upstream relation loops back on itself."""

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__(f"Upstream cycle detected: {' -> '.join(self.chain)}")


class DirtyWorkingTreeError(GitExtError):
    """Exception raised when a destructive step needs a clean working tree."""

    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"Aborting due to unclean repository:\n{status}")


class AggregateError(GitExtError):
    """Several independent failures reported together."""

    def __init__(self, failures: Dict[str, Exception]) -> None:
        self.failures = dict(failures)
        lines = [f"  {name}: {error}" for name, error in self.failures.items()]
        super().__init__(
            "Got the following errors deleting branches:\n" + "\n".join(lines)
        )
