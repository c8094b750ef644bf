"""Graphs stored directly at node level.

``CompleteGraph`` is a block graph over the all-singleton partition, so group
and node indices coincide and it is its own complete view.
"""

import math

import numpy as np

from gwishart.errors import ValidationError
from gwishart.graph.block import BlockGraph
from gwishart.graph.partition import GroupPartition


class CompleteGraph(BlockGraph):
    """Graph over ``n_nodes`` nodes with direct node-level storage.

    The compressed vector holds the strict upper triangle row by row, so it
    has ``n(n-1)/2`` entries.
    """

    def __init__(
        self, n_nodes: int, adjacency: np.ndarray | list | None = None
    ) -> None:
        super().__init__(GroupPartition.singletons(n_nodes), adjacency)

    @classmethod
    def from_compressed(  # type: ignore[override]
        cls, vector: np.ndarray | list, n_nodes: int | None = None
    ) -> "CompleteGraph":
        """Build from a strict upper-triangle vector.

        ``n_nodes`` is inferred from the vector length when omitted.
        """
        arr = np.asarray(vector)
        if n_nodes is None:
            n_nodes = _nodes_for_length(arr.size)
        return cls(n_nodes, arr)

    @classmethod
    def from_matrix(cls, matrix: np.ndarray | list) -> "CompleteGraph":  # type: ignore[override]
        mat = np.asarray(matrix)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise ValidationError(
                f"Graph matrix must be square, got shape {mat.shape}"
            )
        rows, cols = np.triu_indices(mat.shape[0], k=1)
        return cls(mat.shape[0], mat[rows, cols].astype(bool))

    @classmethod
    def empty(cls, n_nodes: int) -> "CompleteGraph":  # type: ignore[override]
        return cls(n_nodes)

    @classmethod
    def random(  # type: ignore[override]
        cls, n_nodes: int, sparsity: float = 0.5, seed: int | None = None
    ) -> "CompleteGraph":
        graph = cls(n_nodes)
        graph.fill_random(sparsity, seed)
        return graph

    @classmethod
    def full(cls, n_nodes: int) -> "CompleteGraph":
        """Graph in which every pair of nodes is linked."""
        return cls(n_nodes, np.ones(n_nodes * (n_nodes - 1) // 2, dtype=bool))

    def adjacency_matrix(self) -> np.ndarray:
        adj = self.node_adjacency()
        np.fill_diagonal(adj, True)
        return adj

    def to_complete_view(self) -> "CompleteGraph":
        return self

    def copy(self) -> "CompleteGraph":
        return type(self)(self.size(), self.to_compressed_vector())


def _nodes_for_length(length: int) -> int:
    n = (1 + math.isqrt(1 + 8 * length)) // 2
    if n * (n - 1) // 2 != length:
        raise ValidationError(
            f"Vector of length {length} is not the strict upper triangle of a "
            f"square matrix"
        )
    return n
