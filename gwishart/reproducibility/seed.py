"""Seed derivation for reproducible, parallel random streams.

Every stream in the package descends from one ``SeedSequence``: a caller's
integer seed is the root, and parallel workers receive spawned children, so
results depend only on the master seed and the number of workers.
"""

import numpy as np


def as_seed_sequence(
    seed: int | np.random.SeedSequence | None,
) -> np.random.SeedSequence:
    """Root ``SeedSequence`` for a seed; None draws fresh OS entropy.

    An existing ``SeedSequence`` is returned as is, so spawning from the
    result keeps advancing the caller's own spawn counter.

    Raises:
        ValueError: If ``seed`` is a negative integer.
    """
    if isinstance(seed, np.random.SeedSequence):
        return seed
    return np.random.SeedSequence(seed)


def worker_seeds(
    seed: int | np.random.SeedSequence, n_workers: int
) -> list[np.random.SeedSequence]:
    """Deterministic, statistically independent seeds for ``n_workers`` workers.

    For an integer master seed the same call always yields the same children,
    and child ``k`` does not depend on how many workers follow it. Passing a
    ``SeedSequence`` spawns from it, so repeated calls give fresh children.

    Args:
        seed: Master seed or root sequence.
        n_workers: Number of workers.

    Returns:
        One child ``SeedSequence`` per worker.
    """
    return as_seed_sequence(seed).spawn(n_workers)
