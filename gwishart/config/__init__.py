"""Run configuration system with frozen, hashable, serializable dataclasses."""

from gwishart.config.experiment import (
    GraphConfig,
    GWishartConfig,
    NormalizingConstantConfig,
    RunConfig,
)
from gwishart.config.defaults import DEFAULT_CONFIG
from gwishart.config.hashing import config_hash, graph_config_hash, full_config_hash
from gwishart.config.serialization import (
    config_from_dict,
    config_from_json,
    config_to_dict,
    config_to_json,
)

__all__ = [
    "GraphConfig",
    "GWishartConfig",
    "NormalizingConstantConfig",
    "RunConfig",
    "DEFAULT_CONFIG",
    "config_hash",
    "graph_config_hash",
    "full_config_hash",
    "config_to_json",
    "config_from_json",
    "config_to_dict",
    "config_from_dict",
]
