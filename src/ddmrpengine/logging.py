"""
Logging for DDMRP Engine.

Every module logs through ``getLogger(__name__)`` under the ``ddmrpengine``
root logger. The levels map onto the stages of a search:

- INFO: solver start and finish (population size, generations run, best
  placement and objective), saved result paths.
- WARNING: a candidate placement that could not be planned and was scored
  with the worst fitness.
- DEBUG: one line per generation (best fitness, stagnation counter), the
  zones and lead times of each station after planning, constraint
  violations.
- DEEP_DEBUG (5, shown as ``DEEP``): one line per station and simulated
  instant with demand, qualified demand, buffer, on-order inventory, net
  flow and the replenishment decision. A single search plans thousands of
  placements, so this level is meant for ``ProductionControlModel.plan``
  on one placement.

Examples
--------
Trace one placement instant by instant:

>>> from ddmrpengine import ModelBuilder
>>> from ddmrpengine.logging import configure_logging
>>> configure_logging(
...     {"default_level": "WARNING", "modules": {"model.production_control": "DEEP_DEBUG"}}
... )
>>> model = ModelBuilder.create_from_file("line.json")  # doctest: +SKIP
>>> model.plan([0, 1, 1])  # doctest: +SKIP

The same mapping can be given as the ``logging`` section of a solver
config file, where ``ConfigValidator`` checks the level names.
"""

import logging
from typing import Any

(CRITICAL, ERROR, WARNING, INFO, DEBUG) = (
    logging.CRITICAL,
    logging.ERROR,
    logging.WARNING,
    logging.INFO,
    logging.DEBUG,
)
DEEP_DEBUG = 5
logging.addLevelName(DEEP_DEBUG, "DEEP")

ROOT_LOGGER = "ddmrpengine"


class DdmrpLogger(logging.Logger):
    """
    Logger of the ``ddmrpengine`` package.

    Adds :meth:`deep` for the per-instant planning trace. Callers that
    build costly trace arguments still guard the call with
    ``isEnabledFor(DEEP_DEBUG)``, as ``ProductionControlModel`` does.

    Examples
    --------
    >>> logger = getLogger("ddmrpengine.model.production_control")
    >>> logger.setLevel(DEEP_DEBUG)
    >>> logger.deep("t=%d station=%d buffer=%d", 3, 1, 42)
    """

    def deep(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log *msg* at DEEP_DEBUG, with the usual lazy %-formatting of *args*."""
        if self.isEnabledFor(DEEP_DEBUG):
            self._log(DEEP_DEBUG, msg, args, **kwargs)


# loggers created after this import are DdmrpLogger instances
logging.setLoggerClass(DdmrpLogger)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)


def getLogger(name: str | None = None) -> DdmrpLogger:
    """
    Return the named logger, typed as :class:`DdmrpLogger`.

    Parameters
    ----------
    name : str, optional
        Logger name. If None, returns root logger.

    Returns
    -------
    DdmrpLogger
        Logger instance with deep() method.
    """
    return logging.getLogger(name)  # type: ignore[return-value]


def _level_value(level: str) -> int:
    level = level.upper()
    if level == "DEEP_DEBUG":
        return DEEP_DEBUG
    return int(getattr(logging, level))


def configure_logging(log_config: dict[str, Any]) -> None:
    """
    Configure logging levels for ddmrpengine loggers.

    Parameters
    ----------
    log_config : dict
        Logging configuration with keys:
        - default_level: str (e.g., 'INFO', 'DEBUG')
        - modules: dict[str, str] (per-module overrides, names relative
          to the ``ddmrpengine`` package)
    """
    default_level = log_config.get("default_level", "INFO")
    logging.getLogger(ROOT_LOGGER).setLevel(_level_value(default_level))

    for module_name, level in log_config.get("modules", {}).items():
        logging.getLogger(f"{ROOT_LOGGER}.{module_name}").setLevel(
            _level_value(level)
        )
