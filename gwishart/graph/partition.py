"""Partition of elementary nodes into groups.

Block graphs are defined over groups of nodes: a link between two groups
connects every member of one with every member of the other. A group of
size one is a singleton, and its self-loop is implicit.
"""

from dataclasses import dataclass, field

import numpy as np

from gwishart.errors import ValidationError


@dataclass(frozen=True)
class GroupPartition:
    """Immutable mapping from ``n_elements`` nodes into ``n_groups`` groups.

    Members of each group are stored sorted. Lookup tables are derived once
    in ``__post_init__`` (through ``object.__setattr__`` since frozen) and
    shared read-only by every graph built over this partition.
    """

    groups: tuple[tuple[int, ...], ...]
    _node_to_group: np.ndarray = field(init=False, repr=False, compare=False)
    _singletons: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "groups",
            tuple(tuple(sorted(int(v) for v in g)) for g in self.groups),
        )
        if len(self.groups) == 0:
            raise ValidationError("A partition needs at least one group")

        n = sum(len(g) for g in self.groups)
        node_to_group = np.full(n, -1, dtype=np.int64)
        for idx, members in enumerate(self.groups):
            if len(members) == 0:
                raise ValidationError(f"Group {idx} is empty")
            for v in members:
                if v < 0 or v >= n:
                    raise ValidationError(
                        f"Node {v} in group {idx} is outside 0..{n - 1}"
                    )
                if node_to_group[v] != -1:
                    raise ValidationError(
                        f"Node {v} appears in groups {node_to_group[v]} and {idx}"
                    )
                node_to_group[v] = idx

        node_to_group.setflags(write=False)
        object.__setattr__(self, "_node_to_group", node_to_group)
        object.__setattr__(
            self,
            "_singletons",
            tuple(i for i, g in enumerate(self.groups) if len(g) == 1),
        )

    @classmethod
    def even(cls, n_groups: int, n_elements: int) -> "GroupPartition":
        """Split nodes ``0..n_elements-1`` into contiguous groups.

        Group sizes differ by at most one; larger groups come first.
        """
        if n_groups < 1 or n_groups > n_elements:
            raise ValidationError(
                f"Cannot split {n_elements} nodes into {n_groups} groups"
            )
        chunks = np.array_split(np.arange(n_elements), n_groups)
        return cls(chunk.tolist() for chunk in chunks)

    @classmethod
    def singletons(cls, n_elements: int) -> "GroupPartition":
        """Partition in which every node is its own group."""
        if n_elements < 1:
            raise ValidationError("A partition needs at least one node")
        return cls([v] for v in range(n_elements))

    def size(self) -> int:
        """Total number of elementary nodes."""
        return int(self._node_to_group.shape[0])

    @property
    def n_elements(self) -> int:
        return self.size()

    def n_groups(self) -> int:
        return len(self.groups)

    def group(self, idx: int) -> tuple[int, ...]:
        self._check_group(idx)
        return self.groups[idx]

    def group_size(self, idx: int) -> int:
        self._check_group(idx)
        return len(self.groups[idx])

    def is_singleton(self, idx: int) -> bool:
        return self.group_size(idx) == 1

    def singleton_positions(self) -> tuple[int, ...]:
        """Sorted indices of the groups of size one."""
        return self._singletons

    @property
    def n_singletons(self) -> int:
        return len(self._singletons)

    def group_of(self, node: int) -> int:
        if node < 0 or node >= self.size():
            raise ValidationError(
                f"Node {node} out of range for {self.size()} nodes"
            )
        return int(self._node_to_group[node])

    def node_groups(self) -> np.ndarray:
        """Read-only array mapping each node to its group index."""
        return self._node_to_group

    def group_sizes(self) -> np.ndarray:
        return np.array([len(g) for g in self.groups], dtype=np.int64)

    def _check_group(self, idx: int) -> None:
        if idx < 0 or idx >= len(self.groups):
            raise ValidationError(
                f"Group {idx} out of range for {len(self.groups)} groups"
            )
