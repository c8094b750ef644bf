"""Deterministic seed derivation for the random sources."""

from gwishart.reproducibility.seed import as_seed_sequence, worker_seeds

__all__ = [
    "as_seed_sequence",
    "worker_seeds",
]
