"""
Tests for rendering the branch tree.
"""

from io import StringIO

import pytest
from rich.console import Console

from git_ext.branch_graph import BranchGraph
from git_ext.models import BranchDescriptor, BranchNode, CycleError, TreeRow
from git_ext.tree_renderer import build_table, prefix_for_depth, print_tree, render_tree


def branch(name, upstream=None, current=False, sha=None, message=None):
    return BranchDescriptor(
        current=current,
        name=name,
        sha=sha or "1234567",
        upstream=upstream,
        message=message or f"msg {name}",
    )


def labels(rows):
    return [row.label for row in rows]


class TestPrefix:
    """Test indentation prefixes."""

    def test_no_prefix_at_top_level(self):
        assert prefix_for_depth(0) == ""
        assert prefix_for_depth(-1) == ""

    def test_indent_grows_with_depth(self):
        assert prefix_for_depth(1) == "  +-- "
        assert prefix_for_depth(3) == "      +-- "


class TestRenderTree:
    """Test row generation."""

    def test_missing_upstream_and_nesting(self):
        graph = BranchGraph.build([branch("A"), branch("B", "A"), branch("C", "Z")])

        rows = render_tree(graph, graph.roots())

        assert labels(rows) == ["A", "  +-- B", "Z [missing]", "  +-- C"]
        assert rows[2] == TreeRow("Z [missing]", "", "", style="missing")
        assert rows[0].style is None

    def test_remote_upstream_row(self):
        graph = BranchGraph.build([branch("main", "origin/main"), branch("topic", "main")])

        rows = render_tree(graph)

        assert rows[0] == TreeRow("origin/main", "", "", style="remote")
        assert labels(rows) == ["origin/main", "  +-- main", "    +-- topic"]

    def test_custom_remote_markers(self):
        graph = BranchGraph.build([branch("main", "upstream/main")])

        assert render_tree(graph, remote_markers=("upstream/",))[0].style == "remote"
        assert render_tree(graph, remote_markers=("origin/",))[0].style == "missing"

    def test_current_branch_marked(self):
        graph = BranchGraph.build([branch("main"), branch("topic", "main", current=True, message="work")])

        rows = render_tree(graph)

        assert rows[1] == TreeRow("  +-- * topic", "1234567", "work", style="current")

    def test_children_follow_stored_order_depth_first(self):
        graph = BranchGraph.build(
            [
                branch("main"),
                branch("z", "main"),
                branch("z1", "z"),
                branch("a", "main"),
            ]
        )

        rows = render_tree(graph)

        assert labels(rows) == ["main", "  +-- z", "    +-- z1", "  +-- a"]

    def test_render_is_repeatable(self):
        descriptors = [branch("A"), branch("B", "A"), branch("C", "Z", current=True)]

        first = render_tree(BranchGraph.build(descriptors))
        second = render_tree(BranchGraph.build(descriptors))

        assert first == second
        graph = BranchGraph.build(descriptors)
        assert render_tree(graph) == render_tree(graph)

    def test_revisiting_a_node_is_a_cycle(self):
        node_a = BranchNode(branch("a"), downstream=["b"])
        node_b = BranchNode(branch("b", "a"), downstream=["a"])
        graph = BranchGraph({"a": node_a, "b": node_b})

        with pytest.raises(CycleError):
            render_tree(graph, [node_a])

    def test_empty_graph(self):
        assert render_tree(BranchGraph.build([])) == []


class TestPrintTree:
    """Test console output."""

    def make_console(self):
        return Console(file=StringIO(), width=100, color_system=None)

    def test_prints_all_columns(self):
        console = self.make_console()
        graph = BranchGraph.build([branch("main", message="root commit"), branch("topic", "main", current=True)])

        print_tree(render_tree(graph), console)

        output = console.file.getvalue()
        assert "main" in output
        assert "+-- * topic" in output
        assert "root commit" in output
        assert "1234567" in output

    def test_sha_column_is_cropped(self):
        console = self.make_console()
        rows = [TreeRow("main", "0123456789abcdef", "m")]

        print_tree(rows, console)

        output = console.file.getvalue()
        assert "01234567" in output
        assert "89abcdef" not in output

    def test_table_has_three_columns_and_no_header(self):
        table = build_table([TreeRow("main", "1234567", "m")])

        assert len(table.columns) == 3
        assert table.show_header is False
        assert table.columns[1].justify == "right"

    def test_sha_column_has_no_padding(self):
        console = self.make_console()

        print_tree([TreeRow("main", "0123456789abcdef", "m")], console)

        assert "main 01234567 m" in console.file.getvalue()

    def test_ahead_and_behind_before_message(self):
        console = self.make_console()
        graph = BranchGraph.build(
            [
                branch("main"),
                BranchDescriptor(
                    current=False,
                    name="topic",
                    sha="1234567",
                    upstream="main",
                    status="ahead 2, behind 1",
                    message="work",
                ),
            ]
        )

        rows = render_tree(graph)
        print_tree(rows, console)

        assert (rows[1].ahead, rows[1].behind) == (2, 1)
        assert (rows[0].ahead, rows[0].behind) == (None, None)
        assert "+2 -1 work" in console.file.getvalue()
