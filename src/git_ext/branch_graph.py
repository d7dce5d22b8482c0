"""
Upstream/downstream graph of local branches.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Dict, Iterable, Iterator, List

from .models import BranchDescriptor, BranchNode, CycleError


logger = logging.getLogger(__name__)


class BranchGraph(Mapping):
    """Mapping of branch name to BranchNode, linked through upstream names."""

    def __init__(self, nodes: Dict[str, BranchNode]) -> None:
        self._nodes = nodes

    def __getitem__(self, name: str) -> BranchNode:
        return self._nodes[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    @classmethod
    def build(cls, descriptors: Iterable[BranchDescriptor]) -> BranchGraph:
        """Build the graph, linking each branch under its upstream.

        Children are appended in the order the descriptors are supplied.

        Raises:
            CycleError: If the upstream relation loops.
        """
        descriptors = list(descriptors)
        nodes: Dict[str, BranchNode] = {}
        for desc in descriptors:
            if desc.name in nodes:
                logger.warning(f"Duplicate branch {desc.name!r} in listing; keeping the later entry")
            nodes[desc.name] = BranchNode(desc)

        for desc in descriptors:
            if nodes[desc.name].desc is not desc:
                continue
            upstream = nodes.get(desc.upstream) if desc.upstream is not None else None
            if upstream is not None:
                upstream.downstream.append(desc.name)

        graph = cls(nodes)
        graph.validate()
        return graph

    def depth(self, name: str) -> int:
        """Number of upstream hops from `name` to a branch without an upstream.

        An upstream missing from the graph counts as depth 0, so a branch
        tracking a remote or deleted branch sits at depth 1.
        """
        chain = [name]
        node = self._nodes.get(name)
        depth = 0
        while node is not None and node.upstream is not None:
            depth += 1
            if node.upstream in chain:
                raise CycleError(chain + [node.upstream])
            chain.append(node.upstream)
            node = self._nodes.get(node.upstream)
        return depth

    def is_root(self, node: BranchNode) -> bool:
        return not node.has_upstream or node.upstream not in self._nodes

    def roots(self) -> List[BranchNode]:
        """Branches without a local upstream, sorted by name."""
        return sorted(
            (node for node in self._nodes.values() if self.is_root(node)),
            key=lambda node: node.name,
        )

    def validate(self) -> None:
        """Raise CycleError if any branch's upstream chain loops."""
        for name in self._nodes:
            self.depth(name)
