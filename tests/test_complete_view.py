"""Tests for the node-level CompleteView adapter and CompleteGraph storage."""

import logging

import numpy as np
import pytest

from gwishart.config import DEFAULT_CONFIG
from gwishart.errors import ValidationError
from gwishart.graph import (
    BlockGraph,
    CompleteGraph,
    CompleteView,
    Graph,
    GroupPartition,
    build_partition,
    enumerate_graphs,
    random_block_graph,
)
from gwishart.graph import enumeration

PARTITION = GroupPartition(((0,), (1, 2), (3,), (4, 5)))
VECTOR = [1, 0, 1, 1, 0, 0, 1, 0]


@pytest.fixture
def block() -> BlockGraph:
    return BlockGraph.from_compressed(VECTOR, PARTITION)


class TestCompleteView:
    """The view expands group adjacency to nodes without copying."""

    def test_size_and_counts(self, block: BlockGraph) -> None:
        view = block.to_complete_view()
        assert isinstance(view, CompleteView)
        assert view.size() == 6
        assert view.n_links() == 7
        assert view.n_block_links() == 4
        assert view.possible_links() == 15
        assert view.possible_block_links() == 8
        assert view.n_groups() == 4
        assert view.n_singletons() == 2
        assert view.group(1) == (1, 2)
        assert view.group_size(3) == 2

    def test_node_links(self, block: BlockGraph) -> None:
        view = block.to_complete_view()
        assert view.link(1, 2)  # inside group 1
        assert not view.link(4, 5)  # group 3 is not internally linked
        assert view.link(0, 4)
        assert view(5, 3)
        assert not view.link(1, 3)

    def test_diagonal_always_linked(self, block: BlockGraph) -> None:
        view = block.to_complete_view()
        assert all(view.link(i, i) for i in range(6))

    def test_link_out_of_range(self, block: BlockGraph) -> None:
        with pytest.raises(ValidationError, match="out of range"):
            block.to_complete_view().link(6, 0)

    def test_link_matches_neighbors(self, block: BlockGraph) -> None:
        view = block.to_complete_view()
        for i in range(6):
            for j in range(6):
                if i != j:
                    assert view.link(i, j) == (j in view.neighbors(i))

    def test_adjacency_matrix(self, block: BlockGraph) -> None:
        adj = block.to_complete_view().adjacency_matrix()
        assert adj.diagonal().all()
        np.testing.assert_array_equal(adj, adj.T)
        off = ~np.eye(6, dtype=bool)
        np.testing.assert_array_equal(adj[off], block.node_adjacency()[off])

    def test_view_tracks_mutation(self, block: BlockGraph) -> None:
        view = block.to_complete_view()
        block.add_link(3, 3)
        assert view.link(4, 5)
        assert view.n_links() == 8

    def test_view_of_view_is_itself(self, block: BlockGraph) -> None:
        view = block.to_complete_view()
        assert view.to_complete_view() is view
        assert view.block_graph is block

    def test_map_to_complete(self, block: BlockGraph) -> None:
        assert block.to_complete_view().map_to_complete(0, 1) == [(0, 1), (0, 2)]

    def test_satisfies_graph_protocol(self, block: BlockGraph) -> None:
        assert isinstance(block.to_complete_view(), Graph)
        assert isinstance(CompleteGraph(3), Graph)


class TestCompleteGraph:
    """CompleteGraph stores the strict upper triangle of node adjacency."""

    def test_from_compressed_infers_size(self) -> None:
        graph = CompleteGraph.from_compressed([1, 0, 1])
        assert graph.size() == 3
        assert graph.link(0, 1)
        assert not graph.link(0, 2)
        assert graph.link(1, 2)
        assert graph.neighbors(1) == (0, 2)
        assert graph.n_links() == 2

    def test_from_compressed_bad_length(self) -> None:
        with pytest.raises(ValidationError, match="strict upper triangle"):
            CompleteGraph.from_compressed([1, 0, 1, 1])

    def test_from_compressed_explicit_size(self) -> None:
        with pytest.raises(ValidationError, match="not coherent"):
            CompleteGraph.from_compressed([1, 0, 1], n_nodes=4)

    def test_constructor_does_not_alias_caller_array(self) -> None:
        vector = np.zeros(3, dtype=bool)
        graph = CompleteGraph(3, vector)
        vector[0] = True
        assert not graph.link(0, 1)
        assert graph.neighbors(0) == ()
        assert graph.n_links() == 0

    def test_constructor_validates_list(self) -> None:
        graph = CompleteGraph(3, [1, 0, 1])
        assert graph.n_links() == 2
        with pytest.raises(ValidationError, match="not coherent"):
            CompleteGraph(3, [1, 0])

    def test_from_matrix(self) -> None:
        mat = np.array([[0, 1, 0], [1, 0, 0], [0, 0, 0]])
        graph = CompleteGraph.from_matrix(mat)
        np.testing.assert_array_equal(
            graph.to_compressed_vector(), [True, False, False]
        )

    def test_complete_view_is_itself(self) -> None:
        graph = CompleteGraph(4)
        assert graph.to_complete_view() is graph

    def test_full_and_empty(self) -> None:
        assert CompleteGraph.full(4).n_links() == 6
        assert CompleteGraph.full(4).possible_links() == 6
        assert CompleteGraph.empty(3).n_links() == 0

    def test_diagonal_linked(self) -> None:
        graph = CompleteGraph.empty(3)
        assert graph.link(1, 1)
        assert graph.adjacency_matrix().diagonal().all()

    def test_copy(self) -> None:
        graph = CompleteGraph.random(5, 0.5, seed=2)
        clone = graph.copy()
        assert isinstance(clone, CompleteGraph)
        assert clone == graph

    def test_equal_to_block_graph_over_singletons(self) -> None:
        vector = [1, 0, 1]
        assert CompleteGraph(3, np.array(vector, dtype=bool)) == (
            BlockGraph.from_compressed(vector, GroupPartition.singletons(3))
        )


class TestEnumeration:
    """enumerate_graphs lists every graph in lexicographic order."""

    def test_complete_graphs(self) -> None:
        graphs = enumerate_graphs(n_elements=3)
        assert len(graphs) == 8
        assert all(isinstance(g, CompleteGraph) for g in graphs)
        assert graphs[0].n_links() == 3
        assert graphs[-1].n_links() == 0
        np.testing.assert_array_equal(
            graphs[1].to_compressed_vector(), [True, True, False]
        )

    def test_block_graphs(self) -> None:
        partition = GroupPartition(((0, 1), (2,)))
        graphs = enumerate_graphs(partition=partition)
        assert len(graphs) == 4
        assert len({tuple(g.to_compressed_vector()) for g in graphs}) == 4

    def test_single_node(self) -> None:
        graphs = enumerate_graphs(n_elements=1)
        assert len(graphs) == 1
        assert graphs[0].size() == 1

    def test_exactly_one_argument(self) -> None:
        with pytest.raises(ValidationError, match="exactly one"):
            enumerate_graphs()
        with pytest.raises(ValidationError, match="exactly one"):
            enumerate_graphs(PARTITION, 3)

    def test_large_space_warns(self, caplog, monkeypatch) -> None:
        monkeypatch.setattr(enumeration, "LARGE_ENUMERATION", 2)
        with caplog.at_level(logging.WARNING, logger="gwishart.graph.enumeration"):
            enumerate_graphs(n_elements=3)
        assert "2^3" in caplog.text


class TestGeneration:
    """Config-driven partition and random graph construction."""

    def test_build_partition(self) -> None:
        partition = build_partition(DEFAULT_CONFIG)
        assert partition.size() == 10
        assert partition.n_groups() == 5
        assert partition.n_singletons == 0

    def test_random_block_graph_is_deterministic(self) -> None:
        a = random_block_graph(DEFAULT_CONFIG)
        b = random_block_graph(DEFAULT_CONFIG)
        assert a == b
        assert a.complete_size() == 10
