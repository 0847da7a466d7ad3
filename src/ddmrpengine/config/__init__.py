"""Configuration module for DDMRP Engine."""

from ddmrpengine.config.loader import (
    load_config,
    load_model_inputs,
    model_inputs_from_mapping,
)
from ddmrpengine.config.schema import (
    Config,
    ModelInputs,
    StationDeclaration,
    StationInputLink,
)
from ddmrpengine.config.validator import ConfigValidator

__all__ = [
    "Config",
    "ConfigValidator",
    "ModelInputs",
    "StationDeclaration",
    "StationInputLink",
    "load_config",
    "load_model_inputs",
    "model_inputs_from_mapping",
]
