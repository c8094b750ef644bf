"""Deterministic config hashing using SHA-256 over sorted JSON."""

import hashlib
import json
from dataclasses import asdict
from typing import Any

from gwishart.config.experiment import RunConfig


def config_hash(config: Any) -> str:
    """Deterministic SHA-256 hash of a config dataclass.

    Returns:
        First 16 hex characters of the hash.
    """
    serialized = json.dumps(
        asdict(config),
        sort_keys=True,
        ensure_ascii=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()[:16]


def graph_config_hash(config: RunConfig) -> str:
    """Hash of the graph structure parameters plus the seed that draws them.

    Runs that differ only in sampler or estimator settings share it, so they
    operate on the same random graph.
    """
    return config_hash(config.graph) + f"-{config.seed}"


def full_config_hash(config: RunConfig) -> str:
    """Hash for full run identity, seed included."""
    return config_hash(config)
