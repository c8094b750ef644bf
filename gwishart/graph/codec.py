"""Bijection between linear storage positions and (row, col) group pairs.

The upper triangle of the M x M group adjacency matrix is stored row by row,
diagonal included, except that singleton diagonal cells are skipped (a
singleton group is always internally complete). Row ``h`` therefore holds
``M - h`` entries, or ``M - h - 1`` when ``h`` is a singleton, and the total
length is ``M(M-1)/2 + M - S`` with ``S`` singletons.
"""

import bisect

import numpy as np

from gwishart.errors import ValidationError
from gwishart.graph.partition import GroupPartition


def compressed_length(n_groups: int, n_singletons: int) -> int:
    """Number of stored entries for M groups of which S are singletons."""
    return n_groups * (n_groups - 1) // 2 + n_groups - n_singletons


class PositionCodec:
    """Encode and decode positions in the compressed upper triangle.

    The cumulative row boundaries are tabulated once at construction:
    encoding is O(1) and decoding is a bisection over the M row boundaries.
    """

    def __init__(self, partition: GroupPartition) -> None:
        M = partition.n_groups()
        singleton = np.zeros(M, dtype=bool)
        singleton[list(partition.singleton_positions())] = True

        # row_start[h] = position of the first stored cell of row h
        row_lengths = (M - np.arange(M)) - singleton.astype(np.int64)
        row_start = np.zeros(M + 1, dtype=np.int64)
        row_start[1:] = np.cumsum(row_lengths)

        self.n_groups = M
        self.length = int(row_start[-1])
        self._singleton = singleton
        self._row_start = row_start
        self._row_start_list = row_start[:-1].tolist()

    def is_singleton(self, row: int) -> bool:
        return bool(self._singleton[row])

    def diagonal_position(self, row: int) -> int:
        """Position the diagonal cell of ``row`` would have if it were stored.

        Equals ``sum_{k<row}(M - k)`` minus the number of singletons at or
        before ``row``. For a singleton row this is one less than the first
        stored cell of the row (the last cell of the previous row, or -1 for
        row 0), so ``diagonal_position(row) + (col - row)`` addresses every
        stored off-diagonal cell of the row.
        """
        self.check_index(row)
        first = int(self._row_start[row])
        return first - 1 if self._singleton[row] else first

    def encode(self, row: int, col: int) -> int:
        """Linear position of the stored cell ``(row, col)`` with ``row <= col``.

        Raises:
            ValidationError: If an index is outside ``0..M-1``, the pair lies
                below the diagonal, or it addresses a singleton diagonal cell
                (which is never stored).
        """
        self.check_index(row)
        self.check_index(col)
        if row > col:
            raise ValidationError(
                f"Pair ({row}, {col}) is outside the stored upper triangle"
            )
        if row == col and self._singleton[row]:
            raise ValidationError(
                f"Diagonal of singleton group {row} is not stored"
            )
        return self.diagonal_position(row) + (col - row)

    def decode(self, pos: int) -> tuple[int, int]:
        """Inverse of :meth:`encode`.

        When ``pos`` falls exactly on the diagonal boundary of row ``h + 1``,
        the result is ``(h + 1, h + 1)`` if that row stores its diagonal and
        ``(h, M - 1)``, the last column of row ``h``, if row ``h + 1`` is a
        singleton. Position 0 decodes to ``(0, 1)`` when group 0 is a
        singleton.

        Raises:
            ValidationError: If ``pos`` is outside ``0..length-1``.
        """
        if pos < 0 or pos >= self.length:
            raise ValidationError(
                f"Position {pos} exceeds compressed length {self.length}"
            )
        row = bisect.bisect_right(self._row_start_list, pos) - 1
        first_col = row + 1 if self._singleton[row] else row
        return row, first_col + (pos - int(self._row_start[row]))

    def pairs(self) -> list[tuple[int, int]]:
        """Every stored (row, col) pair in storage order."""
        return [
            (row, col)
            for row in range(self.n_groups)
            for col in range(row, self.n_groups)
            if not (row == col and self._singleton[row])
        ]

    def pair_indices(self) -> tuple[np.ndarray, np.ndarray]:
        """Row and column index arrays of :meth:`pairs`, for fancy indexing."""
        pairs = self.pairs()
        rows = np.array([p[0] for p in pairs], dtype=np.int64)
        cols = np.array([p[1] for p in pairs], dtype=np.int64)
        return rows, cols

    def check_index(self, idx: int) -> None:
        if idx < 0 or idx >= self.n_groups:
            raise ValidationError(
                f"Index {idx} out of range for {self.n_groups} groups"
            )
