"""Dense linear-algebra helpers shared by the sampler and the estimator."""

import numpy as np
import scipy.linalg
from scipy.special import logsumexp

from gwishart.errors import NumericalFailure, ValidationError
from gwishart.graph.types import Graph


def excluded_matvec(x: int, A: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Compute ``A[not x, not x] @ b`` without copying the submatrix.

    ``A`` is (p+1) x (p+1) and ``b`` has length p. The product is assembled
    from the four slice views of ``A`` around row and column ``x``.
    """
    p = b.shape[0]
    if A.shape != (p + 1, p + 1):
        raise ValidationError(
            f"Matrix of shape {A.shape} does not match a vector of length {p}"
        )
    if x < 0 or x > p:
        raise ValidationError(f"Index {x} exceeds matrix dimension {p + 1}")
    res = np.empty(p)
    res[:x] = A[:x, :x] @ b[:x] + A[:x, x + 1 :] @ b[x:]
    res[x:] = A[x + 1 :, :x] @ b[:x] + A[x + 1 :, x + 1 :] @ b[x:]
    return res


def upper_part(K: np.ndarray) -> np.ndarray:
    """Row-major upper triangle of ``K``, diagonal included (length N(N+1)/2).

    This is the flat buffer handed to writers persisting precision matrices.
    """
    K = np.asarray(K)
    if K.ndim != 2 or K.shape[0] != K.shape[1]:
        raise ValidationError(f"Non squared matrix inserted: shape {K.shape}")
    return K[np.triu_indices(K.shape[0])]


def check_structure(graph: Graph, K: np.ndarray, threshold: float = 1e-5) -> bool:
    """Whether the off-diagonal zeros of ``K`` are exactly the non-edges of ``graph``.

    An entry counts as zero when its absolute value is at most ``threshold``.
    """
    adjacency = graph.to_complete_view().adjacency_matrix()
    K = np.asarray(K)
    if K.shape != adjacency.shape:
        raise ValidationError(
            f"Matrix of shape {K.shape} does not match a graph of "
            f"{adjacency.shape[0]} nodes"
        )
    rows, cols = np.triu_indices(K.shape[0], k=1)
    is_zero = np.abs(K[rows, cols]) <= threshold
    return bool(np.all(is_zero != adjacency[rows, cols]))


def check_symmetric(D: np.ndarray, name: str = "D") -> None:
    if not np.allclose(D, D.T, rtol=1e-10, atol=1e-12):
        raise ValidationError(f"Matrix {name} is not symmetric")


def cholesky_lower(mat: np.ndarray, what: str) -> np.ndarray:
    """Lower Cholesky factor, translating failures into ``NumericalFailure``."""
    try:
        return scipy.linalg.cholesky(mat, lower=True)
    except np.linalg.LinAlgError as exc:
        raise NumericalFailure(f"Cholesky decomposition of {what} failed: {exc}") from exc


def spd_solve(mat: np.ndarray, rhs: np.ndarray, what: str) -> np.ndarray:
    """Solve ``mat @ x = rhs`` for symmetric positive definite ``mat``."""
    try:
        factor = scipy.linalg.cho_factor(mat, lower=True)
    except np.linalg.LinAlgError as exc:
        raise NumericalFailure(f"Cholesky decomposition of {what} failed: {exc}") from exc
    return scipy.linalg.cho_solve(factor, rhs)


def spd_inverse(mat: np.ndarray, what: str) -> np.ndarray:
    """Symmetrized inverse of a symmetric positive definite matrix."""
    inv = spd_solve(mat, np.eye(mat.shape[0]), what)
    return (inv + inv.T) / 2


def log_sum_exp(x: float, y: float) -> float:
    """``log(exp(x) + exp(y))`` without overflow."""
    if x == -np.inf and y == -np.inf:
        return -np.inf
    hi, lo = (x, y) if x >= y else (y, x)
    return float(hi + np.log1p(np.exp(lo - hi)))


def log_mean(values: np.ndarray | list[float]) -> float:
    """Logarithm of the arithmetic mean of strictly positive ``values``.

    Raises:
        ValidationError: If ``values`` is empty or holds a non-positive entry.
    """
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        raise ValidationError("Cannot take the mean of no values")
    if np.any(arr <= 0):
        raise ValidationError("log_mean requires strictly positive values")
    return float(logsumexp(np.log(arr)) - np.log(arr.size))
