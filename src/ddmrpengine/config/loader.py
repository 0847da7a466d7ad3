"""
Loading of solver configuration and model inputs.

Solver configuration follows a three-level precedence (later overrides
earlier):

    1. package defaults  (ddmrpengine/defaults.yml)
    2. *config*  (YAML path / Mapping / None)
    3. explicit keyword arguments

Model inputs are read from JSON or YAML documents. Both the historical
PascalCase schema (``PlanningHorizon``, ``StationDeclarations`` ...) and
snake_case keys are accepted.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any, Dict

# noinspection PyPackageRequirements
import yaml

from ddmrpengine.config.schema import (
    Config,
    ModelInputs,
    StationDeclaration,
    StationInputLink,
)
from ddmrpengine.config.validator import ConfigValidator
from ddmrpengine.errors import ConfigurationError
from ddmrpengine.logging import configure_logging

__all__ = ["load_config", "load_model_inputs", "model_inputs_from_mapping"]

# PascalCase (historical JSON schema) -> snake_case field names
_INPUT_KEYS = {
    "PlanningHorizon": "planning_horizon",
    "PastHorizon": "past_horizon",
    "PeakHorizon": "peak_horizon",
    "PeakThreshold": "peak_threshold",
    "StationDeclarations": "stations",
    "station_declarations": "stations",
}

_STATION_KEYS = {
    "StationIndex": "index",
    "station_index": "index",
    "ProcessingTime": "processing_time",
    "LeadTime": "lead_time",
    "InitialBuffer": "initial_buffer",
    "PastBuffer": "past_buffer",
    "PastOrderAmount": "past_order_amount",
    "DemandVariability": "demand_variability",
    "DemandForecast": "demand_forecast",
    "NextStationsInput": "next_stations",
    "next_stations_input": "next_stations",
}

_LINK_KEYS = {
    "NextStationIndex": "next_station_index",
    "InputAmount": "input_amount",
}


# helpers
# ---------------------------------------------------------------------------
def _read_mapping(obj: str | Path | Mapping[str, Any] | None) -> Dict[str, Any]:
    """Return a plain dict – {} if *obj* is None. JSON or YAML by suffix."""
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    p = Path(obj)
    with p.open("rt", encoding="utf-8") as fh:
        if p.suffix.lower() == ".json":
            data = json.load(fh)
        else:
            data = yaml.safe_load(fh) or {}
    if not isinstance(data, Mapping):
        raise TypeError(f"config root must be mapping, got {type(data)!r}")
    return dict(data)


def _package_defaults() -> Dict[str, Any]:
    """Load ddmrpengine/defaults.yml"""
    txt = resources.files("ddmrpengine").joinpath("defaults.yml").read_text()
    return yaml.safe_load(txt) or {}


def _rename(data: Mapping[str, Any], keys: Mapping[str, str]) -> Dict[str, Any]:
    return {keys.get(k, k): v for k, v in data.items()}


def _optional_tuple(values: Any) -> tuple[int, ...] | None:
    if values is None:
        return None
    return tuple(values)


# Solver configuration
# ---------------------------------------------------------------------------
def load_config(
    config: str | Path | Mapping[str, Any] | None = None,
    **overrides: Any,  # anything here wins last
) -> Config:
    """
    Build a validated :class:`Config`.

    The ``logging`` section, if any, is applied to the ``ddmrpengine``
    loggers and does not end up on the returned Config.

    Parameters
    ----------
    config : str, Path, Mapping or None
        YAML file or mapping with user settings.
    **overrides
        Individual parameters; win over *config* and package defaults.

    Returns
    -------
    Config
        Immutable solver configuration.

    Raises
    ------
    ValueError
        If any parameter fails validation.
    """
    # 1 + 2 + 3 → one merged dict
    cfg_dict: Dict[str, Any] = _package_defaults()
    cfg_dict.update(_read_mapping(config))
    cfg_dict.update(overrides)

    ConfigValidator.validate_config(cfg_dict)

    log_config = cfg_dict.pop("logging", None)
    if log_config:
        configure_logging(log_config)

    return Config(**cfg_dict)


# Model inputs
# ---------------------------------------------------------------------------
def _station_from_mapping(raw: Mapping[str, Any]) -> StationDeclaration:
    data = _rename(raw, _STATION_KEYS)
    if data.get("index") is None:
        raise ConfigurationError(
            "Station index of one of the station declarations not declared"
        )
    if data.get("processing_time") is None:
        raise ConfigurationError(
            f"Processing time for station {data['index']} not declared",
            station_indices=[data["index"]],
        )

    links = tuple(
        StationInputLink(
            next_station_index=link["next_station_index"],
            input_amount=link["input_amount"],
        )
        for link in (_rename(item, _LINK_KEYS) for item in data.get("next_stations") or ())
    )

    lead_time = data.get("lead_time")
    variability = data.get("demand_variability")
    return StationDeclaration(
        index=data["index"],
        processing_time=float(data["processing_time"]),
        lead_time=None if lead_time is None else float(lead_time),
        initial_buffer=data.get("initial_buffer"),
        past_buffer=_optional_tuple(data.get("past_buffer")),
        past_order_amount=_optional_tuple(data.get("past_order_amount")),
        demand_variability=None if variability is None else float(variability),
        demand_forecast=_optional_tuple(data.get("demand_forecast")),
        next_stations=links,
    )


def model_inputs_from_mapping(data: Mapping[str, Any]) -> ModelInputs:
    """
    Convert a raw payload into :class:`ModelInputs`.

    Only the shape of the payload is checked here; the semantic rules are
    applied by ``ConfigValidator.validate_inputs`` when a model is built.

    Parameters
    ----------
    data : Mapping
        Payload using PascalCase or snake_case keys.

    Returns
    -------
    ModelInputs

    Raises
    ------
    ConfigurationError
        If a required key is missing or has the wrong shape.
    """
    payload = _rename(data, _INPUT_KEYS)

    for key in ("planning_horizon", "past_horizon", "peak_horizon"):
        if key not in payload:
            raise ConfigurationError(f"Model inputs are missing '{key}'")

    declarations = payload.get("stations")
    if not declarations:
        raise ConfigurationError("No station declarations found in the model inputs")
    if not isinstance(declarations, (list, tuple)):
        raise ConfigurationError(
            f"Station declarations must be a list, got {type(declarations).__name__}"
        )

    try:
        stations = tuple(_station_from_mapping(raw) for raw in declarations)
        peak_threshold = float(payload.get("peak_threshold", 1.0))
    except (KeyError, TypeError, ValueError) as exc:
        if isinstance(exc, ConfigurationError):
            raise
        raise ConfigurationError(f"Malformed station declaration: {exc!r}") from exc

    return ModelInputs(
        planning_horizon=payload["planning_horizon"],
        past_horizon=payload["past_horizon"],
        peak_horizon=payload["peak_horizon"],
        peak_threshold=peak_threshold,
        stations=stations,
    )


def load_model_inputs(source: str | Path | Mapping[str, Any]) -> ModelInputs:
    """
    Read model inputs from a JSON/YAML file or an in-memory mapping.

    Parameters
    ----------
    source : str, Path or Mapping
        File path (``.json`` parsed as JSON, anything else as YAML) or
        already-parsed payload.

    Returns
    -------
    ModelInputs
    """
    try:
        data = _read_mapping(source)
    except (OSError, json.JSONDecodeError, yaml.YAMLError, TypeError) as exc:
        raise ConfigurationError(
            f"An error occurred while reading model inputs from {source}: {exc}"
        ) from exc
    return model_inputs_from_mapping(data)
