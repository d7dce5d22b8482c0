"""
Parsing of `git branch -vv` output into branch descriptors.

Each line has the shape::

    [*] <name> <sha> [<upstream>[: <status>]] <message>

The leading `*` marks the checked-out branch. Git prints `+` instead for a
branch checked out in another worktree, followed after the sha by the
worktree path in parentheses; both are dropped and the branch is not
treated as current.

Lines are stripped, so a commit with an empty subject ends at the closing
bracket; such a branch keeps its upstream and gets the placeholder message.
"""

from __future__ import annotations

import logging
import re
from typing import List

from .models import NO_MESSAGE, BranchDescriptor, ParseError


logger = logging.getLogger(__name__)

_MARKER_RE = re.compile(r"^[*+]\s+")
_WHITESPACE_RE = re.compile(r"\s+")
_WORKTREE_RE = re.compile(r"^\([^)]*\) ")
_REST_RE = re.compile(r"(?:\[([^\]]*)\](?: |$))?(.*)")


def parse_branch_entry(line: str) -> BranchDescriptor:
    """Parse a single listing line.

    Raises:
        ParseError: If the line has fewer than three fields or the remainder
            cannot be matched.
    """
    current = line[:1] == "*"
    body = _MARKER_RE.sub("", line.strip(), count=1)
    parts = _WHITESPACE_RE.split(body, maxsplit=2)
    if len(parts) != 3 or not all(parts):
        raise ParseError(line, "wrong number of parts")

    name, sha, rest = parts
    if line[:1] == "+":
        rest = _WORKTREE_RE.sub("", rest, count=1)
    match = _REST_RE.match(rest)
    if match is None:
        raise ParseError(line, "failed to capture upstream and message")

    bracket, message = match.group(1), match.group(2)
    upstream = None
    status = ""
    if bracket is not None:
        upstream, _, status = bracket.partition(": ")

    return BranchDescriptor(
        current=current,
        name=name,
        sha=sha,
        upstream=upstream,
        status=status,
        message=message or NO_MESSAGE,
    )


def is_branch_line(line: str) -> bool:
    """Return False for blank lines and entries that are not branches.

    Git lists a detached HEAD or an interrupted rebase as `(HEAD detached at
    1a2b3c4)` or `(no branch, rebasing topic)`.
    """
    body = _MARKER_RE.sub("", line.strip(), count=1)
    return bool(body) and not body.startswith("(")


def parse_branch_listing(text: str) -> List[BranchDescriptor]:
    """Parse the whole output of `git branch -vv`.

    A single malformed line aborts the whole listing.
    """
    descriptors = []
    for line in text.splitlines():
        if not is_branch_line(line):
            if line.strip():
                logger.debug(f"Skipping non-branch entry: {line.strip()}")
            continue
        descriptors.append(parse_branch_entry(line))
    return descriptors
