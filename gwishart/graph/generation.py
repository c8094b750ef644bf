"""Config-driven construction of partitions and random block graphs."""

import logging
from typing import TYPE_CHECKING

from gwishart.graph.block import BlockGraph
from gwishart.graph.partition import GroupPartition

if TYPE_CHECKING:
    from gwishart.config.experiment import RunConfig

log = logging.getLogger(__name__)


def build_partition(config: "RunConfig") -> GroupPartition:
    """Split ``config.graph.n_elements`` nodes into ``n_groups`` contiguous groups."""
    return GroupPartition.even(config.graph.n_groups, config.graph.n_elements)


def random_block_graph(config: "RunConfig") -> BlockGraph:
    """Draw a random block graph over the configured partition.

    Every stored entry is a link with probability ``config.graph.sparsity``;
    the draw is seeded with ``config.seed``, so equal configs give equal
    graphs.

    Args:
        config: Full run configuration.

    Returns:
        BlockGraph over ``build_partition(config)``.
    """
    partition = build_partition(config)
    graph = BlockGraph.random(partition, config.graph.sparsity, config.seed)
    log.info(
        "Random block graph generated (n=%d, groups=%d, singletons=%d, "
        "block links=%d/%d, links=%d/%d)",
        partition.size(),
        partition.n_groups(),
        partition.n_singletons,
        graph.n_block_links(),
        graph.possible_block_links(),
        graph.n_links(),
        graph.possible_links(),
    )
    return graph
