"""Capability set required of any graph consumed by the samplers."""

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class Graph(Protocol):
    """Node-level view of a conditional-independence graph.

    Block-compressed and directly stored graphs both satisfy this protocol
    once converted with ``to_complete_view()``. Neighbour sequences are
    sorted, duplicate free, and never contain the node itself.
    """

    def size(self) -> int: ...

    def n_links(self) -> int: ...

    def possible_links(self) -> int: ...

    def link(self, i: int, j: int) -> bool: ...

    def neighbors(self, i: int) -> tuple[int, ...]: ...

    def adjacency_matrix(self) -> np.ndarray: ...

    def to_complete_view(self) -> "Graph": ...
