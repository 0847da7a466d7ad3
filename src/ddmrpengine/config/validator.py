"""Centralized configuration validation for DDMRP Engine."""

from __future__ import annotations

import warnings
from collections import Counter
from dataclasses import fields
from numbers import Integral
from typing import Any

from ddmrpengine.config.schema import Config, ModelInputs
from ddmrpengine.errors import ConfigurationError


def _is_int(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def _all_ints(values: Any) -> bool:
    return all(_is_int(v) for v in values)


class ConfigValidator:
    """
    Centralized validation for solver configuration and model inputs.

    Solver parameters are validated once in load_config(); model inputs
    are validated once by the model builder, before any station exists:
    - Type correctness
    - Valid parameter ranges
    - Relationship constraints between parameters
    - Clear error messages naming the offending parameter or stations
    """

    # Valid log levels for logging configuration
    VALID_LOG_LEVELS = {"DEEP_DEBUG", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

    # ------------------------------------------------------------------
    # Solver configuration
    # ------------------------------------------------------------------
    @staticmethod
    def validate_config(cfg: dict[str, Any]) -> None:
        """
        Validate all solver configuration parameters.

        Parameters
        ----------
        cfg : dict
            Configuration dictionary to validate.

        Raises
        ------
        ValueError
            If any validation check fails.
        """
        ConfigValidator._validate_known_keys(cfg)

        # Type checking
        ConfigValidator._validate_types(cfg)

        # Range validation
        ConfigValidator._validate_ranges(cfg)

        # Relationship constraints
        ConfigValidator._validate_relationships(cfg)

        # Logging configuration
        if "logging" in cfg:
            ConfigValidator._validate_logging(cfg["logging"])

    @staticmethod
    def _validate_known_keys(cfg: dict[str, Any]) -> None:
        known = {f.name for f in fields(Config)} | {"logging"}
        unknown = sorted(set(cfg) - known)
        if unknown:
            raise ValueError(
                f"Unknown config parameter(s): {unknown}. "
                f"Valid parameters: {sorted(known)}"
            )

    @staticmethod
    def _validate_types(cfg: dict[str, Any]) -> None:
        """
        Ensure correct types for configuration parameters.

        Parameters
        ----------
        cfg : dict
            Configuration dictionary to validate.

        Raises
        ------
        ValueError
            If any parameter has incorrect type.
        """
        int_params = [
            "population_size",
            "tournament_size",
            "elite_count",
            "stagnation_generations",
            "max_generations",
            "n_workers",
            "seed",
        ]

        float_params = [
            "crossover_probability",
            "mutation_rate",
            "buffer_weight",
            "demand_weight",
            "activation_cost",
            "big_m",
        ]

        bool_params = ["replenish_unbuffered_outputs", "show_progress"]

        # Check integers (None allowed for the optional ones)
        for key in int_params:
            if key not in cfg:
                continue
            val = cfg[key]
            if val is not None and (isinstance(val, bool) or not isinstance(val, int)):
                raise ValueError(
                    f"Config parameter '{key}' must be int, got {type(val).__name__}"
                )

        # Check floats (accept int or float)
        for key in float_params:
            if key not in cfg:
                continue
            val = cfg[key]
            if isinstance(val, bool) or not isinstance(val, (int, float)):
                raise ValueError(
                    f"Config parameter '{key}' must be float, got {type(val).__name__}"
                )

        for key in bool_params:
            if key in cfg and not isinstance(cfg[key], bool):
                raise ValueError(
                    f"Config parameter '{key}' must be bool, "
                    f"got {type(cfg[key]).__name__}"
                )

    @staticmethod
    def _validate_ranges(cfg: dict[str, Any]) -> None:
        """
        Ensure parameters are in valid ranges.

        Parameters
        ----------
        cfg : dict
            Configuration dictionary to validate.

        Raises
        ------
        ValueError
            If any parameter is out of valid range.
        """
        # Define constraints as (min_val, max_val) tuples
        # None means unbounded
        constraints = {
            # Population (at least two parents)
            "population_size": (2, None),
            "tournament_size": (1, None),
            "elite_count": (0, None),
            # Termination
            "stagnation_generations": (1, None),
            "max_generations": (1, None),
            "n_workers": (1, None),
            "seed": (0, None),
            # Probabilities
            "crossover_probability": (0.0, 1.0),
            "mutation_rate": (0.0, 1.0),
            # Objective
            "buffer_weight": (0.0, None),
            "demand_weight": (0.0, None),
            "activation_cost": (0.0, None),
            "big_m": (0.0, None),
        }

        for key, (min_val, max_val) in constraints.items():
            if key not in cfg:
                continue

            val = cfg[key]

            # Skip None values for optional parameters
            if val is None:
                continue

            if min_val is not None and val < min_val:
                raise ValueError(
                    f"Config parameter '{key}' must be >= {min_val}, got {val}"
                )

            if max_val is not None and val > max_val:
                raise ValueError(
                    f"Config parameter '{key}' must be <= {max_val}, got {val}"
                )

        if cfg.get("big_m") == 0:
            raise ValueError("Config parameter 'big_m' must be > 0, got 0")

    @staticmethod
    def _validate_relationships(cfg: dict[str, Any]) -> None:
        """
        Validate cross-parameter constraints.

        Parameters
        ----------
        cfg : dict
            Configuration dictionary to validate.
        """
        population_size = cfg.get("population_size")
        if population_size is None:
            return

        tournament_size = cfg.get("tournament_size", 1)
        if tournament_size > population_size:
            raise ValueError(
                f"tournament_size ({tournament_size}) must not exceed "
                f"population_size ({population_size})"
            )

        elite_count = cfg.get("elite_count", 0)
        if elite_count >= population_size:
            raise ValueError(
                f"elite_count ({elite_count}) must be smaller than "
                f"population_size ({population_size})"
            )

        if cfg.get("mutation_rate") == 0 and cfg.get("crossover_probability") == 0:
            warnings.warn(
                "mutation_rate and crossover_probability are both 0. "
                "The search will never explore beyond the initial population.",
                UserWarning,
                stacklevel=3,
            )

        if cfg.get("buffer_weight") == 0 and cfg.get("demand_weight") == 0:
            warnings.warn(
                "buffer_weight and demand_weight are both 0. "
                "Every candidate will score the maximum fitness.",
                UserWarning,
                stacklevel=3,
            )

    @staticmethod
    def _validate_logging(log_config: dict[str, Any]) -> None:
        """
        Validate logging configuration.

        Parameters
        ----------
        log_config : dict
            Logging configuration dictionary with keys:
            - default_level: str (e.g., 'INFO', 'DEBUG')
            - modules: dict[str, str] (per-module overrides)

        Raises
        ------
        ValueError
            If logging configuration is invalid.
        """
        if not isinstance(log_config, dict):
            raise ValueError(
                f"Logging config must be dict, got {type(log_config).__name__}"
            )

        if "default_level" in log_config:
            level = log_config["default_level"]
            if not isinstance(level, str):
                raise ValueError(
                    f"Logging default_level must be str, got {type(level).__name__}"
                )

            if level.upper() not in ConfigValidator.VALID_LOG_LEVELS:
                raise ValueError(
                    f"Invalid log level '{level}'. "
                    f"Must be one of {ConfigValidator.VALID_LOG_LEVELS}"
                )

        if "modules" in log_config:
            modules = log_config["modules"]
            if not isinstance(modules, dict):
                raise ValueError(
                    f"Logging modules must be dict, got {type(modules).__name__}"
                )

            for module_name, level in modules.items():
                if not isinstance(module_name, str):
                    raise ValueError(
                        f"Module name must be str, got {type(module_name).__name__}"
                    )

                if not isinstance(level, str):
                    raise ValueError(
                        f"Log level for module '{module_name}' must be str, "
                        f"got {type(level).__name__}"
                    )

                if level.upper() not in ConfigValidator.VALID_LOG_LEVELS:
                    raise ValueError(
                        f"Invalid log level '{level}' for module '{module_name}'. "
                        f"Must be one of {ConfigValidator.VALID_LOG_LEVELS}"
                    )

    # ------------------------------------------------------------------
    # Model inputs
    # ------------------------------------------------------------------
    @staticmethod
    def validate_inputs(inputs: ModelInputs) -> None:
        """
        Validate a production line description.

        Checks run in order and the first failing rule raises, naming every
        station that breaks it.

        Parameters
        ----------
        inputs : ModelInputs
            Line description to validate.

        Raises
        ------
        ConfigurationError
            If any rule fails.
        """
        ConfigValidator._validate_horizons(inputs)
        ConfigValidator._validate_station_indices(inputs)
        ConfigValidator._validate_station_times(inputs)
        ConfigValidator._validate_links(inputs)
        ConfigValidator._validate_output_stations(inputs)
        ConfigValidator._validate_past_series(inputs)

    @staticmethod
    def _validate_horizons(inputs: ModelInputs) -> None:
        for key, min_val in (
            ("planning_horizon", 1),
            ("past_horizon", 0),
            ("peak_horizon", 0),
        ):
            val = getattr(inputs, key)
            if isinstance(val, bool) or not isinstance(val, int):
                raise ConfigurationError(
                    f"Model input '{key}' must be int, got {type(val).__name__}"
                )
            if val < min_val:
                raise ConfigurationError(
                    f"Model input '{key}' must be >= {min_val}, got {val}"
                )

        if not isinstance(inputs.peak_threshold, (int, float)):
            raise ConfigurationError(
                "Model input 'peak_threshold' must be float, "
                f"got {type(inputs.peak_threshold).__name__}"
            )
        if inputs.peak_threshold < 0:
            raise ConfigurationError(
                f"Model input 'peak_threshold' must be >= 0, got {inputs.peak_threshold}"
            )

    @staticmethod
    def _validate_station_indices(inputs: ModelInputs) -> None:
        if not inputs.stations:
            raise ConfigurationError("No station declarations found in the model inputs")

        not_int = [d.index for d in inputs.stations if not _is_int(d.index)]
        if not_int:
            raise ConfigurationError(f"Station indices must be int, got {not_int}")

        counts = Counter(d.index for d in inputs.stations)
        n = len(inputs.stations)
        duplicated = sorted(i for i, c in counts.items() if c > 1)
        missing = sorted(set(range(n)) - set(counts))
        out_of_range = sorted(i for i in counts if not 0 <= i < n)

        if duplicated or missing or out_of_range:
            raise ConfigurationError(
                f"Station indices must be exactly 0..{n - 1}, each once "
                f"(duplicated: {duplicated}, missing: {missing}, "
                f"out of range: {out_of_range})",
                station_indices=duplicated + missing + out_of_range,
            )

    @staticmethod
    def _validate_station_times(inputs: ModelInputs) -> None:
        bad_processing = [
            d.index
            for d in inputs.stations
            if d.processing_time is None or d.processing_time < 0
        ]
        if bad_processing:
            raise ConfigurationError(
                f"Processing time must be declared and >= 0 for stations {bad_processing}",
                station_indices=bad_processing,
            )

        bad_lead = [
            d.index
            for d in inputs.stations
            if d.lead_time is not None and d.lead_time < 0
        ]
        if bad_lead:
            raise ConfigurationError(
                f"Lead time must be >= 0 for stations {bad_lead}",
                station_indices=bad_lead,
            )

    @staticmethod
    def _validate_links(inputs: ModelInputs) -> None:
        n = inputs.n_stations
        bad = []
        for d in inputs.stations:
            targets = [link.next_station_index for link in d.next_stations]
            if len(set(targets)) != len(targets):
                bad.append(d.index)
                continue
            for link in d.next_stations:
                if (
                    not _is_int(link.next_station_index)
                    or not _is_int(link.input_amount)
                    or not 0 <= link.next_station_index < n
                    or link.next_station_index == d.index
                    or link.input_amount <= 0
                ):
                    bad.append(d.index)
                    break

        if bad:
            raise ConfigurationError(
                "Next-station links must target another existing station once, "
                f"with an integer input_amount > 0 (stations {bad})",
                station_indices=bad,
            )

    @staticmethod
    def _validate_output_stations(inputs: ModelInputs) -> None:
        outputs = [d for d in inputs.stations if d.is_output_station]

        missing_variability = [d.index for d in outputs if d.demand_variability is None]
        if missing_variability:
            raise ConfigurationError(
                "Demand variability for output station not set properly for "
                f"stations: {missing_variability}",
                station_indices=missing_variability,
            )

        negative_variability = [d.index for d in outputs if d.demand_variability < 0]
        if negative_variability:
            raise ConfigurationError(
                f"Demand variability must be >= 0 for stations {negative_variability}",
                station_indices=negative_variability,
            )

        bad_forecast = [
            d
            for d in outputs
            if d.demand_forecast is None
            or len(d.demand_forecast) != inputs.planning_horizon
        ]
        if bad_forecast:
            details = ", ".join(
                f"(station: {d.index}, length: "
                f"{'missing' if d.demand_forecast is None else len(d.demand_forecast)})"
                for d in bad_forecast
            )
            raise ConfigurationError(
                "Demand forecast size different from planning horizon "
                f"({inputs.planning_horizon}) for output stations {details}",
                station_indices=[d.index for d in bad_forecast],
            )

        not_int_forecast = [d.index for d in outputs if not _all_ints(d.demand_forecast)]
        if not_int_forecast:
            raise ConfigurationError(
                f"Demand forecast values must be int for stations {not_int_forecast}",
                station_indices=not_int_forecast,
            )

        negative_forecast = [
            d.index for d in outputs if any(v < 0 for v in d.demand_forecast)
        ]
        if negative_forecast:
            raise ConfigurationError(
                f"Demand forecast values must be >= 0 for stations {negative_forecast}",
                station_indices=negative_forecast,
            )

        ignored = [
            d.index
            for d in inputs.stations
            if not d.is_output_station and d.demand_forecast is not None
        ]
        if ignored:
            warnings.warn(
                f"Demand forecast declared on non-output stations {ignored} is "
                "ignored; their demand is derived from downstream stations.",
                UserWarning,
                stacklevel=4,
            )

    @staticmethod
    def _validate_past_series(inputs: ModelInputs) -> None:
        for attr in ("past_buffer", "past_order_amount"):
            wrong_length = [
                d.index
                for d in inputs.stations
                if getattr(d, attr) is not None
                and len(getattr(d, attr)) != inputs.past_horizon
            ]
            if wrong_length:
                raise ConfigurationError(
                    f"'{attr}' length must equal past horizon "
                    f"({inputs.past_horizon}) for stations {wrong_length}",
                    station_indices=wrong_length,
                )

            not_int = [
                d.index
                for d in inputs.stations
                if getattr(d, attr) is not None and not _all_ints(getattr(d, attr))
            ]
            if not_int:
                raise ConfigurationError(
                    f"'{attr}' values must be int for stations {not_int}",
                    station_indices=not_int,
                )

            negative = [
                d.index
                for d in inputs.stations
                if getattr(d, attr) is not None and any(v < 0 for v in getattr(d, attr))
            ]
            if negative:
                raise ConfigurationError(
                    f"'{attr}' values must be >= 0 for stations {negative}",
                    station_indices=negative,
                )

        not_int_initial = [
            d.index
            for d in inputs.stations
            if d.initial_buffer is not None and not _is_int(d.initial_buffer)
        ]
        if not_int_initial:
            raise ConfigurationError(
                f"Initial buffer must be int for stations {not_int_initial}",
                station_indices=not_int_initial,
            )

        negative_initial = [
            d.index
            for d in inputs.stations
            if d.initial_buffer is not None and d.initial_buffer < 0
        ]
        if negative_initial:
            raise ConfigurationError(
                f"Initial buffer must be >= 0 for stations {negative_initial}",
                station_indices=negative_initial,
            )
