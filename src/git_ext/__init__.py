"""
git-ext - branch management helpers for stacked git branches.

Rebases branches onto their tracked upstream, walks chains of stacked
branches, splits commits into new branches, and renders the branch
dependency graph as an indented tree.
"""

__version__ = "0.1.0"

from .models import (
    BranchDescriptor,
    BranchNode,
    TreeRow,
    GitExtConfig,
    GitExtError,
    CommandError,
    ParseError,
    CycleError,
    DirtyWorkingTreeError,
    AggregateError,
)
from .git_runner import GitRunner
from .branch_parser import parse_branch_entry, parse_branch_listing
from .branch_graph import BranchGraph
from .tree_renderer import render_tree, print_tree
from .workflows import Workflows

__all__ = [
    "BranchDescriptor",
    "BranchNode",
    "TreeRow",
    "GitExtConfig",
    "GitExtError",
    "CommandError",
    "ParseError",
    "CycleError",
    "DirtyWorkingTreeError",
    "AggregateError",
    "GitRunner",
    "parse_branch_entry",
    "parse_branch_listing",
    "BranchGraph",
    "render_tree",
    "print_tree",
    "Workflows",
]
