"""
Branch management workflows built on top of the git runner.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from rich.console import Console

from .branch_graph import BranchGraph
from .branch_parser import parse_branch_listing
from .git_runner import GitRunner
from .models import (
    AggregateError,
    CommandError,
    CycleError,
    DirtyWorkingTreeError,
    GitExtConfig,
    TreeRow,
)
from .prompt_interface import NoOpPrompt, UserPrompt
from .tree_renderer import print_tree, render_tree


logger = logging.getLogger(__name__)

CLEAN_MARKERS = (
    "nothing to commit, working tree clean",
    "nothing to commit, working directory clean",
)


class Workflows:
    """The branch workflows exposed by the CLI.

    Commands that change the repository are always echoed; read-only queries
    are echoed only when `verbose` is set.
    """

    def __init__(
        self,
        runner: GitRunner,
        config: Optional[GitExtConfig] = None,
        console: Optional[Console] = None,
        prompt: Optional[UserPrompt] = None,
    ) -> None:
        self.runner = runner
        self.config = config or GitExtConfig()
        self.console = console or Console()
        self.prompt = prompt or NoOpPrompt()

    def _git(self, *args: str, verbose: bool = False) -> str:
        return self.runner.run(list(args), verbose=verbose)

    # --- Queries ---
    def last_hash(self, verbose: bool = False) -> str:
        """Full hash of the HEAD commit."""
        return self._git("log", "-n", "1", "--pretty=format:%H", verbose=verbose)

    def get_upstream(self, verbose: bool = False) -> str:
        """Upstream of the checked-out branch, e.g. `origin/main`."""
        return self._git("rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}", verbose=verbose)

    def current_branch(self, verbose: bool = False) -> str:
        return self._git("rev-parse", "--abbrev-ref", "HEAD", verbose=verbose)

    def ensure_clean(self) -> None:
        """Raise DirtyWorkingTreeError unless `git status` reports a clean tree."""
        status = self._git("status")
        if not any(marker in status for marker in CLEAN_MARKERS):
            raise DirtyWorkingTreeError(status)

    # --- Building blocks ---
    def handle_submodules(self, verbose: bool = False) -> None:
        self._git("submodule", "init", verbose=verbose)
        self._git("submodule", "update", "--recursive", verbose=verbose)

    def checkout(self, branch: str, verbose: bool = False) -> None:
        self._git("checkout", branch, verbose=verbose)
        self.handle_submodules(verbose)

    def delete_branch(self, branch: str) -> None:
        self._git("branch", "-D", branch, verbose=True)

    # --- Workflows ---
    def fix_upstream(self, upstream: Optional[str] = None, verbose: bool = False) -> None:
        """Move the HEAD commit onto `upstream` (default: the tracked upstream).

        The branch is set to track `upstream`, hard-reset to it, and the
        former HEAD commit is cherry-picked back on top.
        """
        if upstream is None:
            upstream = self.get_upstream(verbose)
        commit = self.last_hash(verbose)
        logger.info(f"Rebasing {commit[:8]} onto {upstream}")
        self._git("branch", "--set-upstream-to", upstream, verbose=True)
        self.ensure_clean()
        self._git("reset", "--hard", upstream, "--", verbose=True)
        self.handle_submodules(True)
        self._git("cherry-pick", commit, verbose=True)
        self.handle_submodules(True)

    def rec_fix_up(self, terminal: str, push: bool = False, verbose: bool = False) -> List[str]:
        """
        Rebase every branch of a stack onto its upstream, starting next to `terminal`.

        Walks from the checked-out branch up its upstream chain until `terminal`
        is reached, then replays the chain back down.

        Returns:
            The branches that were rebased, in the order they were processed.
        """
        chain: List[str] = []
        current = self.current_branch(verbose)
        while current != terminal:
            if current in chain:
                raise CycleError(chain + [current])
            chain.insert(0, current)
            upstream = self.get_upstream(verbose)
            self.checkout(upstream, verbose)
            current = self.current_branch(verbose)

        for branch in chain:
            self.checkout(branch, True)
            self.fix_upstream(self.get_upstream(False), verbose)
            if push:
                self.push_origin(verbose)
        return chain

    def commit_branch(self, name: str, verbose: bool = False) -> None:
        """Move the HEAD commit into a new branch `name` stacked on the current one."""
        self._git("branch", name, verbose=True)
        self.ensure_clean()
        self._git("reset", "--hard", "HEAD~1", verbose=True)
        parent = self.current_branch(verbose)
        self._git("checkout", name, verbose=True)
        self._git("branch", "--set-upstream-to", parent, verbose=True)
        self.handle_submodules(True)

    def push_origin(self, verbose: bool = False) -> None:
        """Force-push the checked-out branch to the same name on the remote."""
        branch = self.current_branch(verbose)
        self._git("push", "-f", self.config.remote, branch, verbose=True)

    def add_amend_push_origin(self, verbose: bool = False) -> None:
        self._git("add", ".", verbose=True)
        self._git("commit", "--amend", "--no-edit", verbose=True)
        self.push_origin(verbose)

    def rebase_onto_latest(self, branch: Optional[str] = None, verbose: bool = False) -> None:
        """Update `branch` (default: the base branch) and rebase HEAD onto it."""
        branch = branch or self.config.base_branch
        current = self.current_branch(False)
        self._git("checkout", branch, verbose=True)
        self._git("pull", "--ff-only", verbose=True)
        self._git("checkout", current, verbose=True)
        self.fix_upstream(branch, verbose)

    def reset_hard_origin(self, verbose: bool = False) -> None:
        """Reset the checked-out branch to its namesake on the remote."""
        current = self.current_branch(verbose)
        self.ensure_clean()
        self._git("fetch", self.config.remote, verbose=True)
        self._git("reset", "--hard", f"{self.config.remote}/{current}", verbose=True)

    def find_purgeable(self, prefix: str, verbose: bool = False) -> List[str]:
        """Local branch names under `prefix` whose remote branch has been deleted."""
        remote = self.config.remote
        pattern = re.compile(rf"{re.escape(remote)}/{re.escape(prefix)}/([\w-]+)")
        output = self._git("remote", "prune", remote, "-n", verbose=verbose)
        branches = []
        for line in output.splitlines():
            match = pattern.search(line.strip())
            if match:
                branches.append(f"{prefix}/{match.group(1)}")
        return branches

    def purge(self, prefix: str, verbose: bool = False) -> List[str]:
        """
        Delete local branches under `prefix` that were deleted on the remote.

        Every deletion is attempted even if some fail; failures are reported
        together afterwards.

        Returns:
            The names of the branches that were deleted.

        Raises:
            AggregateError: If one or more deletions failed.
        """
        branches = self.find_purgeable(prefix, verbose)
        if not branches:
            self.console.print("No branches to purge.")
            return []

        self.console.print("I'm going to purge the following branches:")
        for branch in branches:
            self.console.print(f"  {branch}", markup=False, highlight=False)

        if not self.prompt.confirm_purge(branches, self.config.remote):
            self.console.print("Cancelling.")
            return []

        deleted: List[str] = []
        failures: Dict[str, CommandError] = {}
        for branch in branches:
            try:
                self.delete_branch(branch)
                deleted.append(branch)
            except CommandError as e:
                logger.warning(f"Failed to delete {branch}: {e}")
                failures[branch] = e

        self._git("remote", "prune", self.config.remote, verbose=verbose)
        if failures:
            raise AggregateError(failures)
        return deleted

    def remote_markers(self) -> List[str]:
        """Names of the configured remotes, used to spot remote-tracking upstreams."""
        remotes = [line.strip() for line in self._git("remote").splitlines() if line.strip()]
        return [f"{remote}/" for remote in remotes or [self.config.remote]]

    def branch_graph(self) -> BranchGraph:
        return BranchGraph.build(parse_branch_listing(self._git("branch", "-vv")))

    def show_tree(self) -> List[TreeRow]:
        """Print the tree of local branches and their upstream relations."""
        graph = self.branch_graph()
        rows = render_tree(graph, graph.roots(), self.remote_markers())
        print_tree(rows, self.console)
        return rows
