"""Exception types raised by DDMRP Engine."""

from __future__ import annotations

from collections.abc import Iterable


class DdmrpError(Exception):
    """Base class for every error raised by ddmrpengine."""


class ConfigurationError(DdmrpError, ValueError):
    """
    Invalid model inputs or solver configuration.

    Raised eagerly, before any model is constructed. ``station_indices``
    lists the offending stations when the problem is station-specific.
    """

    def __init__(self, message: str, station_indices: Iterable[int] = ()) -> None:
        super().__init__(message)
        self.station_indices: tuple[int, ...] = tuple(station_indices)


class ModelStateError(DdmrpError, RuntimeError):
    """
    The production control model was used outside its contract.

    Examples: planning a model that was never imported through the builder,
    reading the objective before planning, or buffer thresholds still
    undefined after lead-time propagation (cyclic precedence graph).
    """
