"""Block and complete graph representations over partitioned nodes."""

from gwishart.graph.block import BlockGraph
from gwishart.graph.codec import PositionCodec, compressed_length
from gwishart.graph.complete import CompleteGraph
from gwishart.graph.enumeration import enumerate_graphs
from gwishart.graph.generation import build_partition, random_block_graph
from gwishart.graph.partition import GroupPartition
from gwishart.graph.types import Graph
from gwishart.graph.view import CompleteView

__all__ = [
    "BlockGraph",
    "CompleteGraph",
    "CompleteView",
    "Graph",
    "GroupPartition",
    "PositionCodec",
    "build_partition",
    "compressed_length",
    "enumerate_graphs",
    "random_block_graph",
]
