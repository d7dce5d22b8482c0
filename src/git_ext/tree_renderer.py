"""
Rendering of the branch graph as an indented table.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Set

from rich.console import Console
from rich.padding import Padding
from rich.table import Table
from rich.text import Text

from .branch_graph import BranchGraph
from .models import BranchNode, CycleError, TreeRow


INDENT_AMOUNT = 2
BRANCH_GLYPH = "+-- "
CURRENT_MARKER = "* "
SHA_WIDTH = 8
CELL_PADDING = (0, 1)

ROW_STYLES = {
    "remote": "blue",
    "missing": "red",
}


def prefix_for_depth(depth: int) -> str:
    if depth <= 0:
        return ""
    return " " * (INDENT_AMOUNT * depth) + BRANCH_GLYPH


def _upstream_row(graph: BranchGraph, node: BranchNode, depth: int, remote_markers: Sequence[str]) -> Optional[TreeRow]:
    """Synthetic row standing in for a root's upstream that is not a local branch."""
    upstream = node.upstream or ""
    prefix = prefix_for_depth(depth - 1)
    if upstream and any(marker in upstream for marker in remote_markers):
        return TreeRow(prefix + upstream, "", "", style="remote")
    if upstream and upstream not in graph:
        return TreeRow(prefix + upstream + " [missing]", "", "", style="missing")
    return None


def _rows_rooted_at(
    graph: BranchGraph,
    node: BranchNode,
    remote_markers: Sequence[str],
    visited: Set[str],
    is_root: bool,
) -> List[TreeRow]:
    if node.name in visited:
        raise CycleError(sorted(visited) + [node.name])
    visited.add(node.name)

    depth = graph.depth(node.name)
    rows = []
    if is_root:
        upstream_row = _upstream_row(graph, node, depth, remote_markers)
        if upstream_row is not None:
            rows.append(upstream_row)

    label = prefix_for_depth(depth) + (CURRENT_MARKER if node.desc.current else "") + node.name
    rows.append(
        TreeRow(
            label,
            node.desc.sha,
            node.desc.message,
            style="current" if node.desc.current else None,
            ahead=node.desc.ahead,
            behind=node.desc.behind,
        )
    )

    for child_name in node.downstream:
        child = graph.get(child_name)
        if child is not None:
            rows.extend(_rows_rooted_at(graph, child, remote_markers, visited, is_root=False))
    return rows


def render_tree(
    graph: BranchGraph,
    roots: Optional[Sequence[BranchNode]] = None,
    remote_markers: Sequence[str] = ("origin",),
) -> List[TreeRow]:
    """
    Flatten the graph into display rows, pre-order and depth-first.

    Args:
        graph: The branch graph.
        roots: Root branches in display order (defaults to `graph.roots()`).
        remote_markers: Substrings identifying a remote-tracking upstream.

    Returns:
        One row per branch, plus one synthetic row above any root whose
        upstream is a remote-tracking or missing branch.
    """
    if roots is None:
        roots = graph.roots()
    visited: Set[str] = set()
    rows: List[TreeRow] = []
    for root in roots:
        rows.extend(_rows_rooted_at(graph, root, remote_markers, visited, is_root=True))
    return rows


def _message_cell(row: TreeRow) -> Text:
    message = Text()
    if row.ahead is not None:
        message.append(f"+{row.ahead} ", style="green")
    if row.behind is not None:
        message.append(f"-{row.behind} ", style="red")
    message.append(row.message, style="green" if row.style == "current" else "")
    return message


def build_table(rows: Sequence[TreeRow]) -> Table:
    """Build the borderless three-column table for the rows.

    The table itself has no padding; the branch and message cells carry one
    space on each side so the sha column sits flush between them.
    """
    table = Table(show_header=False, box=None, padding=0, expand=False)
    table.add_column("Branch", justify="left", no_wrap=True)
    table.add_column("Sha", justify="right", width=SHA_WIDTH, overflow="crop", no_wrap=True)
    table.add_column("Message", justify="left")
    for row in rows:
        label = Text(row.label, style=ROW_STYLES.get(row.style, ""))
        table.add_row(Padding(label, CELL_PADDING), row.sha, Padding(_message_cell(row), CELL_PADDING))
    return table


def print_tree(rows: Sequence[TreeRow], console: Console) -> None:
    """Print the rows as a table on the given console."""
    console.print(build_table(rows))
