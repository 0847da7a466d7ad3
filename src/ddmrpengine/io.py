"""JSON export of optimization results.

Saved files carry a schema version. Timestamped run directories keep the
output of successive runs apart.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ddmrpengine.results import OptimizationResult

_SCHEMA_VERSION = 1

# Default output directory, relative to the working directory
OUTPUT_DIR = Path("output")


def create_run_dir(name: str, output_dir: Path | None = None) -> Path:
    """Create timestamped output directory.

    Parameters
    ----------
    name : str
        Run name (included in directory name).
    output_dir : Path, optional
        Parent directory. Defaults to ./output/.

    Returns
    -------
    Path
        Path to the created directory.
    """
    parent = output_dir or OUTPUT_DIR
    timestamp = datetime.now(tz=UTC).strftime("%Y-%m-%d_%H%M%S")
    run_dir = parent / f"{timestamp}_{name}"
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def _station_record(station: Any) -> dict[str, Any]:
    return {
        "index": station.index,
        "has_buffer": station.has_buffer,
        "average_demand": station.average_demand,
        "demand_variability": station.demand_variability,
        "decoupled_lead_time": station.decoupled_lead_time,
        "lead_time_factor": station.lead_time_factor,
        "TOR": station.TOR,
        "TOY": station.TOY,
        "TOG": station.TOG,
        "timeline": [state.as_dict() for state in station.state_timeline],
    }


def save_result(result: OptimizationResult, path: Path) -> None:
    """Save optimization result to JSON."""
    data = {
        "_schema_version": _SCHEMA_VERSION,
        **result.summary,
        "fitness_history": result.fitness_history,
        "generation_best_fitness": result.generation_best_fitness,
        "stations": [_station_record(s) for s in result.final_model.stations],
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2, default=str)


def load_result(path: Path) -> dict[str, Any]:
    """Load a saved optimization result as a plain dict."""
    with open(path) as f:
        data = json.load(f)
    version = data.get("_schema_version")
    if version != _SCHEMA_VERSION:
        raise ValueError(
            f"Unsupported result schema version {version!r} in {path} "
            f"(expected {_SCHEMA_VERSION})"
        )
    return data
