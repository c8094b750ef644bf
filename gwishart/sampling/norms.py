"""Convergence statistics comparing consecutive sweeps of the completion."""

from enum import StrEnum

import numpy as np

from gwishart.errors import ValidationError


class ConvergenceNorm(StrEnum):
    """Distance between the current and the previous working matrix.

    MEAN: sum_ij |a_ij - b_ij| / N^2.
    INF: max_ij |a_ij - b_ij|.
    ONE: sum_ij |a_ij - b_ij|.
    SQUARED: sum_ij (a_ij - b_ij)^2.
    """

    MEAN = "Mean"
    INF = "Inf"
    ONE = "One"
    SQUARED = "Squared"

    def gap(self, upper: np.ndarray, lower: np.ndarray) -> float:
        """Evaluate the norm on ``upper - lower``."""
        diff = upper - lower
        if self is ConvergenceNorm.MEAN:
            return float(np.abs(diff).sum() / diff.shape[0] ** 2)
        if self is ConvergenceNorm.INF:
            return float(np.abs(diff).max())
        if self is ConvergenceNorm.ONE:
            return float(np.abs(diff).sum())
        return float(np.square(diff).sum())


def parse_norm(norm: ConvergenceNorm | str) -> ConvergenceNorm:
    """Resolve a norm name, raising ValidationError on unknown names."""
    try:
        return ConvergenceNorm(norm)
    except ValueError as exc:
        raise ValidationError(
            f"Only possible norms are "
            f"{', '.join(n.value for n in ConvergenceNorm)}; got {norm!r}"
        ) from exc
