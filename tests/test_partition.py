"""Tests for GroupPartition construction, validation and lookups."""

import numpy as np
import pytest

from gwishart.errors import ValidationError
from gwishart.graph.partition import GroupPartition


class TestConstruction:
    """Explicit groups are normalized and validated."""

    def test_groups_are_sorted(self) -> None:
        partition = GroupPartition([[2, 0], [1]])
        assert partition.groups == ((0, 2), (1,))
        assert partition.group_of(2) == 0
        assert partition.group_of(1) == 1

    def test_counts(self) -> None:
        partition = GroupPartition(((0,), (1, 2), (3,), (4, 5)))
        assert partition.size() == 6
        assert partition.n_elements == 6
        assert partition.n_groups() == 4
        assert partition.singleton_positions() == (0, 2)
        assert partition.n_singletons == 2
        assert partition.is_singleton(0)
        assert not partition.is_singleton(1)
        np.testing.assert_array_equal(partition.group_sizes(), [1, 2, 1, 2])

    def test_node_groups(self) -> None:
        partition = GroupPartition(((0, 3), (1, 2)))
        np.testing.assert_array_equal(partition.node_groups(), [0, 1, 1, 0])

    def test_node_groups_read_only(self) -> None:
        partition = GroupPartition(((0, 1),))
        with pytest.raises(ValueError):
            partition.node_groups()[0] = 5

    def test_equality_ignores_member_order(self) -> None:
        assert GroupPartition([[1, 0], [2]]) == GroupPartition(((0, 1), (2,)))
        assert GroupPartition([[0], [1]]) != GroupPartition([[0, 1]])


class TestValidation:
    """Malformed partitions are rejected with ValidationError."""

    def test_no_groups(self) -> None:
        with pytest.raises(ValidationError, match="at least one group"):
            GroupPartition(())

    def test_empty_group(self) -> None:
        with pytest.raises(ValidationError, match="empty"):
            GroupPartition([[0], []])

    def test_overlapping_groups(self) -> None:
        with pytest.raises(ValidationError, match="appears in groups"):
            GroupPartition([[0, 1], [1]])

    def test_gap_in_nodes(self) -> None:
        with pytest.raises(ValidationError, match="outside"):
            GroupPartition([[0], [2]])

    def test_group_index_out_of_range(self) -> None:
        partition = GroupPartition([[0], [1]])
        with pytest.raises(ValidationError, match="out of range"):
            partition.group(2)

    def test_node_index_out_of_range(self) -> None:
        partition = GroupPartition([[0], [1]])
        with pytest.raises(ValidationError, match="out of range"):
            partition.group_of(-1)

    def test_validation_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            GroupPartition(())


class TestFactories:
    """even() and singletons() build the common partitions."""

    def test_even_split_larger_groups_first(self) -> None:
        partition = GroupPartition.even(3, 10)
        assert partition.groups == ((0, 1, 2, 3), (4, 5, 6), (7, 8, 9))

    def test_even_split_exact(self) -> None:
        partition = GroupPartition.even(5, 10)
        assert all(size == 2 for size in partition.group_sizes())
        assert partition.n_singletons == 0

    def test_even_split_all_singletons(self) -> None:
        partition = GroupPartition.even(4, 4)
        assert partition == GroupPartition.singletons(4)

    @pytest.mark.parametrize("n_groups", [0, 6])
    def test_even_rejects_bad_group_count(self, n_groups: int) -> None:
        with pytest.raises(ValidationError, match="Cannot split"):
            GroupPartition.even(n_groups, 5)

    def test_singletons(self) -> None:
        partition = GroupPartition.singletons(4)
        assert partition.n_groups() == 4
        assert partition.singleton_positions() == (0, 1, 2, 3)

    def test_singletons_rejects_zero(self) -> None:
        with pytest.raises(ValidationError):
            GroupPartition.singletons(0)
