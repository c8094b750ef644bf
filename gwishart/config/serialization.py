"""Round trips between RunConfig and JSON text or plain dictionaries."""

import json
from dataclasses import asdict
from typing import Any

from dacite import from_dict, Config as DaciteConfig

from gwishart.config.experiment import RunConfig

# Unknown keys are errors; JSON arrays become the tuple-typed tags field.
_LOAD_CONFIG = DaciteConfig(cast=[tuple], check_types=True, strict=True)


def config_to_dict(config: RunConfig) -> dict[str, Any]:
    """Nested plain dictionary of every field, sub-configs included."""
    return asdict(config)


def config_from_dict(d: dict[str, Any]) -> RunConfig:
    """Rebuild a RunConfig; each sub-config validates itself on the way in.

    Raises:
        dacite.DaciteError: On unknown keys or mistyped values.
        ValidationError: If a value is out of range.
    """
    return from_dict(data_class=RunConfig, data=d, config=_LOAD_CONFIG)


def config_to_json(config: RunConfig) -> str:
    """Indented JSON with sorted keys, stable under re-serialization."""
    return json.dumps(config_to_dict(config), indent=2, sort_keys=True)


def config_from_json(json_str: str) -> RunConfig:
    return config_from_dict(json.loads(json_str))
