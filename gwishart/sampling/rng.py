"""Caller-owned source of randomness for the samplers.

Every operation that draws random numbers takes a ``RandomSource`` explicitly.
Parallel Monte Carlo work never shares one: ``spawn`` derives independent
children from the parent ``SeedSequence`` so results depend only on the master
seed and the number of workers.
"""

import numpy as np

from gwishart.reproducibility.seed import as_seed_sequence, worker_seeds
from gwishart.sampling.forms import ScaleMatrix


class RandomSource:
    """Thin wrapper over ``np.random.Generator`` with the draws the samplers need.

    Args:
        seed: Integer seed, an existing ``SeedSequence``, or None for fresh
            OS entropy.
    """

    def __init__(self, seed: int | np.random.SeedSequence | None = None) -> None:
        self._seed_seq = as_seed_sequence(seed)
        self.generator = np.random.default_rng(self._seed_seq)

    @property
    def seed_sequence(self) -> np.random.SeedSequence:
        return self._seed_seq

    def uniform(self, size: int | tuple[int, ...] | None = None) -> np.ndarray | float:
        """Uniform reals on [0, 1)."""
        return self.generator.random(size)

    def normal(self, size: int | tuple[int, ...] | None = None) -> np.ndarray | float:
        """Standard normal draws."""
        return self.generator.standard_normal(size)

    def chisq(self, df: float | np.ndarray) -> np.ndarray | float:
        """Chi-square draws, one per entry of ``df``."""
        return self.generator.chisquare(df)

    def wishart(self, df: float, scale: ScaleMatrix) -> np.ndarray:
        """Draw K ~ Wishart(df, D^-1) by the Bartlett decomposition.

        The scale is reduced to its lower Cholesky factor L before any number
        is drawn. Then ``K = L A A^T L^T`` where A is lower triangular with
        ``A_ii = sqrt(chi2(df - i))`` and standard normal entries below the
        diagonal; the chi-square draws come first, the normals follow in
        row-major order.

        Args:
            df: Degrees of freedom, larger than ``N - 1``.
            scale: The matrix D in any of its four forms.

        Returns:
            Symmetric positive definite N x N draw.
        """
        L = scale.scale_cholesky()
        N = L.shape[0]
        A = np.zeros((N, N))
        A[np.diag_indices(N)] = np.sqrt(self.chisq(df - np.arange(N)))
        rows, cols = np.tril_indices(N, k=-1)
        A[rows, cols] = self.normal(rows.shape[0])
        LA = L @ A
        K = LA @ LA.T
        return (K + K.T) / 2

    def spawn(self, n: int) -> list["RandomSource"]:
        """``n`` statistically independent children of this source."""
        return [RandomSource(child) for child in worker_seeds(self._seed_seq, n)]

    def __repr__(self) -> str:
        return f"RandomSource(entropy={self._seed_seq.entropy})"


def as_random_source(rng: "RandomSource | int | None") -> RandomSource:
    """Accept an existing source, a seed, or None (fresh entropy)."""
    if isinstance(rng, RandomSource):
        return rng
    return RandomSource(rng)
