"""Monte Carlo estimate of the G-Wishart log normalizing constant.

Follows the Atay-Kayis and Massam decomposition: with T the upper Cholesky
factor of D^-1, the constant is a closed-form term times the expectation of
``exp(-1/2 * sum psi_ij^2)`` over the non-free entries of an upper triangular
matrix Psi whose free entries (diagonal and edges) are drawn independently.
Complete and empty graphs have closed forms and skip the Monte Carlo step.
"""

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import scipy.linalg
from scipy.special import gammaln, logsumexp

from gwishart.errors import NumericalFailure, ValidationError
from gwishart.graph.types import Graph
from gwishart.sampling.linalg import check_symmetric, cholesky_lower, spd_inverse
from gwishart.sampling.rng import RandomSource, as_random_source

if TYPE_CHECKING:
    from gwishart.config.experiment import NormalizingConstantConfig

log = logging.getLogger(__name__)

LOG_2 = math.log(2.0)
LOG_PI = math.log(math.pi)
LOG_2PI = math.log(2.0 * math.pi)


def log_normalizing_constant(
    graph: Graph,
    b: float,
    D: np.ndarray,
    mc_iterations: int,
    rng: RandomSource | int | None = None,
    n_workers: int = 1,
) -> float:
    """Log normalizing constant of GWishart(b, D) over ``graph``.

    Args:
        graph: Any graph; it is converted with ``to_complete_view()``.
        b: Shape parameter, must exceed 2.
        D: Symmetric positive definite inverse scale matrix.
        mc_iterations: Total number of Monte Carlo draws.
        rng: Caller-owned random source, or a seed. With several workers it
            is only used to spawn one independent child per worker.
        n_workers: Number of threads sharing the draws.

    Returns:
        The log normalizing constant.

    Raises:
        ValidationError: If ``b <= 2``, D is not square, symmetric and of the
            graph size, or the iteration and worker counts are not positive.
        NumericalFailure: If D is not positive definite, or if every Monte
            Carlo draw is non-finite.
    """
    G = graph.to_complete_view()
    D = np.asarray(D, dtype=np.float64)
    N = G.size()
    if b <= 2:
        raise ValidationError(f"Shape parameter has to be larger than 2, got {b}")
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise ValidationError(f"Non squared matrix inserted: shape {D.shape}")
    if D.shape[0] != N:
        raise ValidationError(
            f"Dimension of D ({D.shape[0]}) is not equal to the number of "
            f"nodes ({N})"
        )
    if mc_iterations < 1:
        raise ValidationError(f"mc_iterations must be positive, got {mc_iterations}")
    if n_workers < 1:
        raise ValidationError(f"n_workers must be positive, got {n_workers}")
    check_symmetric(D, "D")
    chol_D = cholesky_lower(D, "the inverse scale matrix")

    # nu[i] = number of neighbours of i with a larger index
    neighbors = [G.neighbors(i) for i in range(N)]
    nu = np.array([sum(1 for j in nbd if j > i) for i, nbd in enumerate(neighbors)])

    if G.n_links() == G.possible_links():
        log_det_D = 2.0 * float(np.log(np.diag(chol_D)).sum())
        return float(
            N * (N - 1) / 4 * LOG_PI
            + N * (b + N - 1) / 2 * LOG_2
            + gammaln((b + nu) / 2).sum()
            - (b + N - 1) / 2 * log_det_D
        )
    if G.n_links() == 0:
        return float(
            N * b / 2 * LOG_2
            + N * gammaln(b / 2)
            - b / 2 * np.log(np.diag(D)).sum()
        )

    # D^-1 = T^T T with T upper triangular, H[:, j] = T[:, j] / T[j, j]
    T = scipy.linalg.cholesky(spd_inverse(D, "the inverse scale matrix"), lower=False)
    H = T / np.diag(T)[None, :]
    identity = np.allclose(H, np.eye(N), rtol=0, atol=1e-12)
    upper_adj = np.triu(G.adjacency_matrix(), k=1)

    draws = _MonteCarloDraws(b, nu, upper_adj, H, identity)
    values, dropped = draws.run(mc_iterations, as_random_source(rng), n_workers)

    if dropped:
        log.warning(
            "Dropped %d of %d Monte Carlo draws with a non-finite sum of squares",
            dropped,
            mc_iterations,
        )
    if not values:
        raise NumericalFailure(
            f"All {mc_iterations} Monte Carlo draws were non-finite"
        )
    log.info(
        "Normalizing constant from %d valid draws on %d worker(s) (N=%d, links=%d)",
        len(values),
        n_workers,
        N,
        G.n_links(),
    )

    result_mc = float(logsumexp(np.sort(values))) - math.log(len(values))

    n_nbd = np.array([len(nbd) for nbd in neighbors])
    const_term = float(
        (
            nu / 2 * LOG_2PI
            + (b + nu) / 2 * LOG_2
            + (b + n_nbd) * np.log(np.diag(T))
            + gammaln((b + nu) / 2)
        ).sum()
    )
    return result_mc + const_term


class _MonteCarloDraws:
    """Draws and completes Psi; shared read-only by every worker."""

    def __init__(
        self,
        b: float,
        nu: np.ndarray,
        upper_adj: np.ndarray,
        H: np.ndarray,
        identity: bool,
    ) -> None:
        self.b = b
        self.nu = nu
        self.upper_adj = upper_adj
        self.H = H
        self.identity = identity
        self.N = upper_adj.shape[0]
        self.edge_rows, self.edge_cols = np.nonzero(upper_adj)

    def run(
        self, mc_iterations: int, source: RandomSource, n_workers: int
    ) -> tuple[list[float], int]:
        """All finite ``-1/2 * sum psi_nonfree^2`` values and the dropped count.

        Each worker owns one spawned child source and accumulates locally;
        local lists are merged under a lock.
        """
        if n_workers == 1:
            return self._batch(mc_iterations, source)

        budgets = [len(chunk) for chunk in np.array_split(np.arange(mc_iterations), n_workers)]
        children = source.spawn(n_workers)
        merged: list[float] = []
        dropped = 0
        lock = threading.Lock()

        def work(budget: int, child: RandomSource) -> None:
            nonlocal dropped
            local, local_dropped = self._batch(budget, child)
            with lock:
                merged.extend(local)
                dropped += local_dropped

        with ThreadPoolExecutor(max_workers=n_workers) as pool:
            futures = [
                pool.submit(work, budget, child)
                for budget, child in zip(budgets, children)
            ]
            for future in futures:
                future.result()
        return merged, dropped

    def _batch(self, n_draws: int, source: RandomSource) -> tuple[list[float], int]:
        values: list[float] = []
        dropped = 0
        for _ in range(n_draws):
            sq_sum = self._draw(source)
            if math.isfinite(sq_sum):
                values.append(-0.5 * sq_sum)
            else:
                dropped += 1
        return values, dropped

    def _draw(self, source: RandomSource) -> float:
        """Sum of squares of the non-free entries of one completed Psi.

        Free entries are sampled first: the diagonal from
        ``sqrt(chi2(b + nu_i))`` and the edges from N(0, 1). Non-free entries
        are then filled row by row; sums[a, j] accumulates
        ``sum_{k=a}^{j-1} psi[a, k] * H[k, j]`` and vanishes when H is the
        identity, which gets its own cheaper loop.
        """
        N = self.N
        psi = np.zeros((N, N))
        psi[np.diag_indices(N)] = np.sqrt(source.chisq(self.b + self.nu))
        psi[self.edge_rows, self.edge_cols] = source.normal(self.edge_rows.shape[0])

        sq_sum = 0.0
        if self.identity:
            # Row 0 non-free entries are exactly zero
            for i in range(1, N - 1):
                S = psi[:i, i]
                for j in range(i + 1, N):
                    if self.upper_adj[i, j]:
                        continue
                    value = -(S @ psi[:i, j]) / psi[i, i]
                    psi[i, j] = value
                    sq_sum += value * value
            return sq_sum

        H = self.H
        sums = np.zeros((N, N))
        for i in range(N - 1):
            S = psi[:i, i] + sums[:i, i]
            for j in range(i + 1, N):
                sums[i, j] = psi[i, i:j] @ H[i:j, j]
                if self.upper_adj[i, j]:
                    continue
                S_star = psi[:i, j] + sums[:i, j]
                value = -(sums[i, j] + (S @ S_star) / psi[i, i])
                psi[i, j] = value
                sq_sum += value * value
        return sq_sum


@dataclass(frozen=True, slots=True)
class NormalizingConstantEstimator:
    """Estimator with Monte Carlo budget and worker count bound once."""

    mc_iterations: int = 500
    n_workers: int = 1

    def __post_init__(self) -> None:
        if self.mc_iterations < 1:
            raise ValidationError(
                f"mc_iterations must be positive, got {self.mc_iterations}"
            )
        if self.n_workers < 1:
            raise ValidationError(f"n_workers must be positive, got {self.n_workers}")

    @classmethod
    def from_config(
        cls, config: "NormalizingConstantConfig"
    ) -> "NormalizingConstantEstimator":
        return cls(mc_iterations=config.mc_iterations, n_workers=config.n_workers)

    def estimate(
        self,
        graph: Graph,
        b: float,
        D: np.ndarray,
        rng: RandomSource | int | None = None,
    ) -> float:
        return log_normalizing_constant(
            graph, b, D, self.mc_iterations, rng, self.n_workers
        )

    __call__ = estimate
