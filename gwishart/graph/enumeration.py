"""Exhaustive enumeration of every graph over a fixed node structure."""

import itertools
import logging

import numpy as np

from gwishart.errors import ValidationError
from gwishart.graph.block import BlockGraph
from gwishart.graph.codec import compressed_length
from gwishart.graph.complete import CompleteGraph
from gwishart.graph.partition import GroupPartition

log = logging.getLogger(__name__)

# Above this many free entries the graph space has over a million members.
LARGE_ENUMERATION = 20


def enumerate_graphs(
    partition: GroupPartition | None = None,
    n_elements: int | None = None,
) -> list[BlockGraph]:
    """List every graph over a partition or over ``n_elements`` plain nodes.

    Graphs are ordered lexicographically by compressed vector, first entry
    most significant and ``True`` before ``False``: the first graph is the
    full one and the last is the empty one.

    Args:
        partition: Group structure; yields ``BlockGraph`` instances.
        n_elements: Node count; yields ``CompleteGraph`` instances.

    Returns:
        All ``2**L`` graphs, ``L`` being the compressed length.

    Raises:
        ValidationError: Unless exactly one of the two arguments is given.
    """
    if (partition is None) == (n_elements is None):
        raise ValidationError(
            "enumerate_graphs needs exactly one of partition or n_elements"
        )

    if partition is not None:
        length = compressed_length(partition.n_groups(), partition.n_singletons)

        def build(vector: np.ndarray) -> BlockGraph:
            return BlockGraph(partition, vector)

    else:
        if n_elements < 1:
            raise ValidationError("A graph needs at least one node")
        length = n_elements * (n_elements - 1) // 2

        def build(vector: np.ndarray) -> BlockGraph:
            return CompleteGraph(n_elements, vector)

    if length > LARGE_ENUMERATION:
        log.warning(
            "Enumerating 2^%d graphs, this may exhaust memory", length
        )

    return [
        build(np.array(bits, dtype=bool))
        for bits in itertools.product((True, False), repeat=length)
    ]
