"""Node-level ("complete form") view of a block graph.

``CompleteView`` expands a ``BlockGraph`` to its elementary nodes without
copying it: node ``i`` is linked to node ``j`` when their groups are linked.
"""

from typing import TYPE_CHECKING

import numpy as np

from gwishart.errors import ValidationError

if TYPE_CHECKING:
    from gwishart.graph.block import BlockGraph


class CompleteView:
    """Read-only node-level adapter over a ``BlockGraph``.

    Holds a reference, not a copy: mutations of the underlying block graph
    are visible through the view.
    """

    def __init__(self, graph: "BlockGraph") -> None:
        self._graph = graph

    @property
    def block_graph(self) -> "BlockGraph":
        return self._graph

    def size(self) -> int:
        return self._graph.complete_size()

    def link(self, i: int, j: int) -> bool:
        self._check_node(i)
        self._check_node(j)
        if i == j:
            return True
        groups = self._graph.partition
        return self._graph.link(groups.group_of(i), groups.group_of(j))

    def __call__(self, i: int, j: int) -> bool:
        return self.link(i, j)

    def neighbors(self, i: int) -> tuple[int, ...]:
        return self._graph.neighbors(i)

    def n_links(self) -> int:
        return self._graph.n_links()

    def n_block_links(self) -> int:
        return self._graph.n_block_links()

    def possible_links(self) -> int:
        return self._graph.possible_links()

    def possible_block_links(self) -> int:
        return self._graph.possible_block_links()

    def n_groups(self) -> int:
        return self._graph.size()

    def group(self, i: int) -> tuple[int, ...]:
        return self._graph.partition.group(i)

    def group_size(self, i: int) -> int:
        return self._graph.group_size(i)

    def n_singletons(self) -> int:
        return self._graph.n_singletons

    def map_to_complete(self, i: int, j: int) -> list[tuple[int, int]]:
        return self._graph.map_to_complete(i, j)

    def adjacency_matrix(self) -> np.ndarray:
        """Node-level boolean adjacency with a True diagonal, like :meth:`link`."""
        adj = self._graph.node_adjacency()
        np.fill_diagonal(adj, True)
        return adj

    def to_complete_view(self) -> "CompleteView":
        return self

    def __repr__(self) -> str:
        return f"CompleteView({self._graph!r})"

    def _check_node(self, i: int) -> None:
        if i < 0 or i >= self.size():
            raise ValidationError(
                f"Node {i} out of range for {self.size()} nodes"
            )
