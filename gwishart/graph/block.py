"""Block graph: adjacency between groups of nodes in compressed storage.

A link between groups ``g`` and ``h`` connects every member of ``g`` with
every member of ``h``; a link on the diagonal makes a group internally
complete. Only the upper triangle is stored (see ``PositionCodec``), and
singleton diagonals are implicit and always present.
"""

import itertools
import logging

import numpy as np

from gwishart.errors import ValidationError
from gwishart.graph.codec import PositionCodec, compressed_length
from gwishart.graph.partition import GroupPartition
from gwishart.graph.view import CompleteView

log = logging.getLogger(__name__)


class BlockGraph:
    """Undirected graph over the groups of a shared ``GroupPartition``.

    The adjacency handed to the constructor is validated and copied; later
    changes to the caller's array do not reach the graph.

    Every mutation rebuilds the neighbour cache and the link counters before
    returning, so readers never see a partially updated graph.
    """

    def __init__(
        self,
        partition: GroupPartition,
        adjacency: np.ndarray | list | None = None,
    ) -> None:
        self._partition = partition
        self._codec = PositionCodec(partition)
        self._pair_rows, self._pair_cols = self._codec.pair_indices()
        if adjacency is None:
            adjacency = np.zeros(self._codec.length, dtype=bool)
        else:
            adjacency = self._check_vector(adjacency, partition)
        self._install(adjacency)

    # ------------------------------------------------------------------
    # Construction

    @classmethod
    def from_compressed(
        cls, vector: np.ndarray | list, partition: GroupPartition
    ) -> "BlockGraph":
        """Build from a compressed upper-triangle vector.

        Raises:
            ValidationError: If the length is not ``M(M-1)/2 + M - S``.
        """
        return cls(partition, vector)

    @classmethod
    def from_matrix(
        cls, matrix: np.ndarray | list, partition: GroupPartition
    ) -> "BlockGraph":
        """Build from a full M x M group adjacency matrix.

        Only the upper triangle is read. Singleton diagonal cells are forced
        to connected regardless of their value in ``matrix``.

        Raises:
            ValidationError: If ``matrix`` is not square with side M.
        """
        mat = np.asarray(matrix)
        if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
            raise ValidationError(
                f"Graph matrix must be square, got shape {mat.shape}"
            )
        M = partition.n_groups()
        if mat.shape[0] != M:
            raise ValidationError(
                f"Graph matrix has side {mat.shape[0]} but partition has "
                f"{M} groups"
            )
        rows, cols = PositionCodec(partition).pair_indices()
        adjacency = mat[rows, cols].astype(bool)
        return cls(partition, adjacency)

    @classmethod
    def empty(cls, partition: GroupPartition) -> "BlockGraph":
        """Graph with no links besides the implicit singleton self-loops."""
        return cls(partition)

    @classmethod
    def random(
        cls,
        partition: GroupPartition,
        sparsity: float = 0.5,
        seed: int | None = None,
    ) -> "BlockGraph":
        """Graph whose stored entries are independently present w.p. ``sparsity``."""
        graph = cls(partition)
        graph.fill_random(sparsity, seed)
        return graph

    @staticmethod
    def _check_vector(
        vector: np.ndarray | list, partition: GroupPartition
    ) -> np.ndarray:
        arr = np.asarray(vector)
        expected = compressed_length(
            partition.n_groups(), partition.n_singletons
        )
        if arr.ndim != 1 or arr.shape[0] != expected:
            raise ValidationError(
                f"The number of groups is not coherent with the size of the "
                f"adjacency vector: expected {expected} entries, got "
                f"{arr.size}"
            )
        return arr.astype(bool)

    # ------------------------------------------------------------------
    # Whole-graph mutation

    def set_graph(self, vector: np.ndarray | list) -> None:
        """Replace every link from a compressed vector."""
        self._install(self._check_vector(vector, self._partition))

    def set_empty_graph(self) -> None:
        self._install(np.zeros(self._codec.length, dtype=bool))

    def fill_random(self, sparsity: float = 0.5, seed: int | None = None) -> None:
        """Redraw every stored entry as present iff ``U(0,1) < sparsity``.

        ``seed=None`` draws fresh entropy, so successive calls differ.
        """
        if sparsity > 1.0:
            log.warning("Sparsity %.3f larger than 1, set to 0.5", sparsity)
            sparsity = 0.5
        rng = np.random.default_rng(seed)
        self._install(rng.random(self._codec.length) < sparsity)

    # ------------------------------------------------------------------
    # Single-link access

    def link(self, i: int, j: int) -> bool:
        """Whether groups ``i`` and ``j`` are linked (symmetric)."""
        if i > j:
            i, j = j, i
        self._codec.check_index(i)
        self._codec.check_index(j)
        if i == j and self._codec.is_singleton(i):
            return True
        return bool(self._adj[self._codec.encode(i, j)])

    def __call__(self, i: int, j: int) -> bool:
        return self.link(i, j)

    def set_link(self, i: int, j: int, value: bool) -> None:
        """Set the link between groups ``i`` and ``j``.

        Singleton self-loops are not stored and cannot be changed: the request
        is logged and ignored.
        """
        if i > j:
            i, j = j, i
        self._codec.check_index(i)
        self._codec.check_index(j)
        if i == j and self._codec.is_singleton(i):
            log.warning(
                "Cannot %s the self-loop of singleton group %d",
                "add" if value else "remove",
                i,
            )
            return
        adjacency = self._adj.copy()
        adjacency[self._codec.encode(i, j)] = bool(value)
        self._install(adjacency)

    def add_link(self, i: int, j: int) -> None:
        self.set_link(i, j, True)

    def remove_link(self, i: int, j: int) -> None:
        self.set_link(i, j, False)

    # ------------------------------------------------------------------
    # Getters

    @property
    def partition(self) -> GroupPartition:
        return self._partition

    @property
    def codec(self) -> PositionCodec:
        return self._codec

    def size(self) -> int:
        """Number of groups M (vertices of the block form)."""
        return self._partition.n_groups()

    def complete_size(self) -> int:
        """Number of elementary nodes (vertices of the complete form)."""
        return self._partition.size()

    @property
    def n_singletons(self) -> int:
        return self._partition.n_singletons

    def group_size(self, i: int) -> int:
        return self._partition.group_size(i)

    def n_links(self) -> int:
        """Node-level edge count, weighted by group sizes."""
        return self._n_links

    def n_block_links(self) -> int:
        """Group-level edge count, singleton self-loops excluded."""
        return self._n_block_links

    def possible_links(self) -> int:
        n = self.complete_size()
        return n * (n - 1) // 2

    def possible_block_links(self) -> int:
        return self._codec.length

    def neighbors(self, node: int) -> tuple[int, ...]:
        """Sorted node-level neighbours of elementary node ``node``."""
        if node < 0 or node >= self.complete_size():
            raise ValidationError(
                f"Node {node} out of range for {self.complete_size()} nodes"
            )
        return self._neighbors[node]

    def neighborhoods(self) -> dict[int, tuple[int, ...]]:
        return dict(enumerate(self._neighbors))

    def to_compressed_vector(self) -> np.ndarray:
        """Copy of the compressed adjacency, the buffer handed to writers."""
        return self._adj.copy()

    def to_matrix(self) -> np.ndarray:
        """Symmetric M x M boolean adjacency, singleton diagonals set."""
        return self._group_matrix.copy()

    def node_adjacency(self) -> np.ndarray:
        """Symmetric n x n boolean adjacency of the elementary nodes.

        The diagonal is False.
        """
        return self._node_matrix.copy()

    def map_to_complete(self, i: int, j: int) -> list[tuple[int, int]]:
        """All node pairs covered by the group pair ``(i, j)``."""
        if i > j:
            i, j = j, i
        return list(
            itertools.product(self._partition.group(i), self._partition.group(j))
        )

    def to_complete_view(self) -> CompleteView:
        return CompleteView(self)

    def copy(self) -> "BlockGraph":
        return type(self)(self._partition, self._adj.copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BlockGraph):
            return NotImplemented
        return self._partition == other._partition and np.array_equal(
            self._adj, other._adj
        )

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        bits = "".join("1" if v else "0" for v in self._adj)
        return (
            f"{type(self).__name__}(n_groups={self.size()}, "
            f"n_nodes={self.complete_size()}, adjacency={bits})"
        )

    # ------------------------------------------------------------------
    # Internals

    def _install(self, adjacency: np.ndarray) -> None:
        """Swap in a new compressed vector and rebuild every derived field."""
        M = self.size()
        group_matrix = np.zeros((M, M), dtype=bool)
        group_matrix[self._pair_rows, self._pair_cols] = adjacency
        group_matrix |= group_matrix.T
        singletons = list(self._partition.singleton_positions())
        group_matrix[singletons, singletons] = True

        node_groups = self._partition.node_groups()
        node_matrix = group_matrix[np.ix_(node_groups, node_groups)]
        np.fill_diagonal(node_matrix, False)

        sizes = self._partition.group_sizes()
        upper = np.triu(group_matrix, k=1)
        n_links = int((sizes[:, None] * sizes[None, :])[upper].sum())
        n_links += int((sizes * (sizes - 1) // 2)[np.diag(group_matrix)].sum())

        self._adj = adjacency
        self._group_matrix = group_matrix
        self._node_matrix = node_matrix
        self._neighbors = tuple(
            tuple(int(v) for v in np.flatnonzero(row)) for row in node_matrix
        )
        self._n_links = n_links
        self._n_block_links = int(adjacency.sum())
