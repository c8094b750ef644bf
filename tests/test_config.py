"""Tests for the run configuration system."""

import json

import pytest
from dacite import UnexpectedDataError
from dataclasses import FrozenInstanceError, replace

from gwishart.config import (
    DEFAULT_CONFIG,
    GraphConfig,
    GWishartConfig,
    NormalizingConstantConfig,
    RunConfig,
    config_from_dict,
    config_from_json,
    config_hash,
    config_to_dict,
    config_to_json,
    full_config_hash,
    graph_config_hash,
)
from gwishart.errors import ValidationError


class TestDefaultConfig:
    """DEFAULT_CONFIG has the documented values."""

    def test_defaults(self) -> None:
        assert DEFAULT_CONFIG.graph.n_elements == 10
        assert DEFAULT_CONFIG.graph.n_groups == 5
        assert DEFAULT_CONFIG.graph.sparsity == 0.3
        assert DEFAULT_CONFIG.gwishart.b == 3.0
        assert DEFAULT_CONFIG.gwishart.form == "InvScale"
        assert DEFAULT_CONFIG.gwishart.norm == "Mean"
        assert DEFAULT_CONFIG.gwishart.threshold == 1e-8
        assert DEFAULT_CONFIG.gwishart.max_iter == 500
        assert DEFAULT_CONFIG.normalizing.mc_iterations == 500
        assert DEFAULT_CONFIG.normalizing.n_workers == 1
        assert DEFAULT_CONFIG.seed == 42
        assert DEFAULT_CONFIG.tags == ()


class TestConfigImmutability:
    """Frozen dataclasses prevent mutation."""

    def test_config_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            DEFAULT_CONFIG.seed = 99  # type: ignore[misc]

    def test_sub_config_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            DEFAULT_CONFIG.gwishart.b = 5.0  # type: ignore[misc]


class TestConfigRoundTrip:
    """JSON and dict serialization round-trips preserve identity."""

    def test_json_round_trip(self) -> None:
        config = RunConfig(
            gwishart=GWishartConfig(b=4.5, form="CholUpper_InvScale", norm="Squared"),
            normalizing=NormalizingConstantConfig(mc_iterations=100, n_workers=4),
            seed=7,
            description="round trip",
            tags=("a", "b"),
        )
        assert config_from_json(config_to_json(config)) == config

    def test_json_is_sorted(self) -> None:
        data = json.loads(config_to_json(DEFAULT_CONFIG))
        assert list(data) == sorted(data)

    def test_dict_round_trip(self) -> None:
        assert config_from_dict(config_to_dict(DEFAULT_CONFIG)) == DEFAULT_CONFIG

    def test_unknown_key_rejected(self) -> None:
        data = config_to_dict(DEFAULT_CONFIG)
        data["graph"]["unknown"] = 1
        with pytest.raises(UnexpectedDataError):
            config_from_dict(data)

    def test_validation_runs_on_load(self) -> None:
        data = config_to_dict(DEFAULT_CONFIG)
        data["gwishart"]["b"] = 1.0
        with pytest.raises(ValidationError, match="must exceed 2"):
            config_from_dict(data)


class TestConfigValidation:
    """Invalid parameters are rejected at construction."""

    def test_groups_exceed_nodes(self) -> None:
        with pytest.raises(ValueError, match="n_groups"):
            RunConfig(graph=GraphConfig(n_elements=3, n_groups=4))

    def test_shape_parameter(self) -> None:
        with pytest.raises(ValueError, match="must exceed 2"):
            GWishartConfig(b=2.0)

    def test_unknown_form(self) -> None:
        with pytest.raises(ValueError, match="form"):
            GWishartConfig(form="Precision")

    def test_unknown_norm(self) -> None:
        with pytest.raises(ValueError, match="norm"):
            GWishartConfig(norm="L3")

    def test_sparsity_range(self) -> None:
        with pytest.raises(ValueError, match="sparsity"):
            GraphConfig(sparsity=1.5)

    def test_max_iter_positive(self) -> None:
        with pytest.raises(ValueError, match="max_iter"):
            GWishartConfig(max_iter=0)

    def test_mc_iterations_positive(self) -> None:
        with pytest.raises(ValueError, match="mc_iterations"):
            NormalizingConstantConfig(mc_iterations=0)


class TestConfigHash:
    """Hashes are deterministic and sensitive to the right fields."""

    def test_deterministic(self) -> None:
        assert full_config_hash(DEFAULT_CONFIG) == full_config_hash(RunConfig())
        assert len(config_hash(DEFAULT_CONFIG)) == 16

    def test_seed_changes_full_hash(self) -> None:
        assert full_config_hash(replace(DEFAULT_CONFIG, seed=1)) != full_config_hash(
            DEFAULT_CONFIG
        )

    def test_graph_hash_ignores_sampler_settings(self) -> None:
        other = replace(DEFAULT_CONFIG, gwishart=GWishartConfig(b=5.0))
        assert graph_config_hash(other) == graph_config_hash(DEFAULT_CONFIG)

    def test_graph_hash_tracks_seed(self) -> None:
        other = replace(DEFAULT_CONFIG, seed=1)
        assert graph_config_hash(other) != graph_config_hash(DEFAULT_CONFIG)
