"""
Configuration dataclasses for the DDMRP engine.

Two groups of parameters live here:

- :class:`ModelInputs` describes *the production line*: horizons and one
  :class:`StationDeclaration` per station. It is the payload consumed by
  :class:`ddmrpengine.model.ModelBuilder`.
- :class:`Config` holds *the solver*: genetic-search hyperparameters,
  objective weights and simulation policies. Instances are created by
  :func:`ddmrpengine.config.load_config` after merging defaults, user
  config and keyword overrides.

Design Notes
------------
- Immutable (frozen=True) so a single instance can be shared by every
  fitness evaluation, including across worker processes
- Memory-efficient (slots=True)
- No validation logic: ConfigValidator checks values before or after
  construction, keeping data and checks separate

See Also
--------
ConfigValidator : Centralized validation for both groups of parameters
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class StationInputLink:
    """
    Material flow from a station to one of its direct successors.

    Parameters
    ----------
    next_station_index : int
        Index of the downstream station consuming this station's output.
    input_amount : int
        Units of this station's output required per unit produced by the
        downstream station.
    """

    next_station_index: int
    input_amount: int


@dataclass(slots=True, frozen=True)
class StationDeclaration:
    """
    Static description of one production station.

    Parameters
    ----------
    index : int
        Position of the station in every precedence matrix (0-based).
    processing_time : float
        Processing time of the station.
    lead_time : float, optional
        External (supplier) lead time; only meaningful for input stations.
    initial_buffer : int, optional
        Buffer level at instant 0 when no past series is declared.
    past_buffer : tuple of int, optional
        Buffer levels at instants ``-past_horizon+1 .. 0``.
    past_order_amount : tuple of int, optional
        Orders placed at instants ``-past_horizon+1 .. 0``.
    demand_variability : float, optional
        Demand variability factor. Required for output stations.
    demand_forecast : tuple of int, optional
        Forecast demand per instant. Required for output stations, with
        exactly ``planning_horizon`` values.
    next_stations : tuple of StationInputLink
        Downstream links. An empty tuple marks an output station.
    """

    index: int
    processing_time: float
    lead_time: float | None = None
    initial_buffer: int | None = None
    past_buffer: tuple[int, ...] | None = None
    past_order_amount: tuple[int, ...] | None = None
    demand_variability: float | None = None
    demand_forecast: tuple[int, ...] | None = None
    next_stations: tuple[StationInputLink, ...] = ()

    @property
    def is_output_station(self) -> bool:
        """True when the station feeds no other station."""
        return len(self.next_stations) == 0


@dataclass(slots=True, frozen=True)
class ModelInputs:
    """
    Production line description consumed by the model builder.

    Parameters
    ----------
    planning_horizon : int
        Number of simulated instants (one per forecast value).
    past_horizon : int
        Length of the declared past buffer/order series.
    peak_horizon : int
        Number of instants scanned ahead for a demand spike.
    stations : tuple of StationDeclaration
        One declaration per station.
    peak_threshold : float, optional
        Multiplier on TOR used by the demand-spike test. Default: 1.0.

    Examples
    --------
    >>> from ddmrpengine.config import ModelInputs, StationDeclaration
    >>> from ddmrpengine.config import StationInputLink
    >>> inputs = ModelInputs(
    ...     planning_horizon=5,
    ...     past_horizon=0,
    ...     peak_horizon=2,
    ...     stations=(
    ...         StationDeclaration(
    ...             index=0,
    ...             processing_time=2.0,
    ...             next_stations=(StationInputLink(1, 1),),
    ...         ),
    ...         StationDeclaration(
    ...             index=1,
    ...             processing_time=1.0,
    ...             demand_variability=0.0,
    ...             demand_forecast=(10, 10, 10, 10, 10),
    ...         ),
    ...     ),
    ... )
    >>> inputs.n_stations
    2
    """

    planning_horizon: int
    past_horizon: int
    peak_horizon: int
    stations: tuple[StationDeclaration, ...]
    peak_threshold: float = 1.0

    @property
    def n_stations(self) -> int:
        """Number of declared stations."""
        return len(self.stations)


@dataclass(slots=True, frozen=True)
class Config:
    """
    Immutable solver, objective and simulation-policy parameters.

    Parameters
    ----------
    population_size : int
        Number of candidates per generation (positive).
    tournament_size : int
        Candidates drawn per tournament during parent selection.
    crossover_probability : float
        Probability that two parents are recombined (0 to 1); otherwise
        the children are copies of the parents.
    mutation_rate : float
        Independent per-gene bit-flip probability (0 to 1).
    elite_count : int
        Best candidates copied unchanged into the next generation.
    stagnation_generations : int
        Stop after this many generations without best-fitness improvement.
    max_generations : int or None, optional
        Hard generation cap. None disables the cap.
    n_workers : int, optional
        Worker processes for fitness evaluation. 1 evaluates in-process.
    seed : int or None, optional
        Seed for the search RNG.
    buffer_weight : float, optional
        Objective weight of the mean buffer level. Default: 0.5.
    demand_weight : float, optional
        Objective weight of the mean unsatisfied demand. Default: 0.5.
    activation_cost : float, optional
        Objective cost per activated buffer. Default: 0.0.
    big_m : float, optional
        Tolerance bound of the replenishment constraint. Default: 1000.
    replenish_unbuffered_outputs : bool, optional
        Simulate stock and replenishment for unbuffered output stations.
        Default: False (unbuffered stations never replenish).
    show_progress : bool, optional
        Display a tqdm progress bar over generations. Default: False.

    Examples
    --------
    Config instances are typically created by load_config():

    >>> from ddmrpengine.config import load_config
    >>> cfg = load_config(population_size=20, seed=7)
    >>> cfg.population_size
    20
    >>> cfg.stagnation_generations
    100
    """

    # Genetic search
    population_size: int
    tournament_size: int
    crossover_probability: float
    mutation_rate: float
    elite_count: int
    stagnation_generations: int
    max_generations: int | None = None
    n_workers: int = 1
    seed: int | None = None

    # Objective
    buffer_weight: float = 0.5
    demand_weight: float = 0.5
    activation_cost: float = 0.0

    # Simulation policies
    big_m: float = 1000.0
    replenish_unbuffered_outputs: bool = False

    show_progress: bool = False
