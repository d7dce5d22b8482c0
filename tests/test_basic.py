"""
Basic tests for the git-ext package.
"""

import re

from git_ext import __version__


def test_version_format():
    assert isinstance(__version__, str)
    assert __version__ != ""


def test_version_matches_semver():
    semver_pattern = r"^\d+\.\d+\.\d+$"
    assert re.match(semver_pattern, __version__)


def test_import():
    """Test that the package can be imported."""
    import git_ext
    assert git_ext is not None


def test_package_structure():
    """Test package structure and __all__ exports."""
    import git_ext

    expected_exports = [
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

    for export in expected_exports:
        assert hasattr(git_ext, export), f"Missing export: {export}"
        assert export in git_ext.__all__
