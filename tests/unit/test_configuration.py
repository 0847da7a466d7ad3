"""Tests for load_config and model-input loading."""

import json
import logging

import pytest
import yaml

from ddmrpengine.config import (
    Config,
    ModelInputs,
    load_config,
    load_model_inputs,
    model_inputs_from_mapping,
)
from ddmrpengine.errors import ConfigurationError
from ddmrpengine.model import ModelBuilder

PASCAL_CASE_LINE = {
    "PlanningHorizon": 4,
    "PastHorizon": 2,
    "PeakHorizon": 1,
    "StationDeclarations": [
        {
            "StationIndex": 0,
            "ProcessingTime": 2,
            "LeadTime": 1.5,
            "NextStationsInput": [{"NextStationIndex": 1, "InputAmount": 3}],
        },
        {
            "StationIndex": 1,
            "ProcessingTime": 1,
            "InitialBuffer": 12,
            "PastBuffer": [8, 9],
            "PastOrderAmount": [0, 4],
            "DemandVariability": 0.25,
            "DemandForecast": [5, 6, 7, 8],
        },
    ],
}


class TestLoadConfig:
    def test_package_defaults(self):
        cfg = load_config()
        assert isinstance(cfg, Config)
        assert cfg.population_size == 50
        assert cfg.tournament_size == 3
        assert cfg.crossover_probability == 0.75
        assert cfg.mutation_rate == 0.1
        assert cfg.elite_count == 1
        assert cfg.stagnation_generations == 100
        assert cfg.max_generations is None
        assert cfg.buffer_weight == cfg.demand_weight == 0.5
        assert cfg.big_m == 1000.0
        assert cfg.replenish_unbuffered_outputs is False

    def test_mapping_then_overrides(self):
        cfg = load_config({"population_size": 30, "seed": 4}, population_size=12)
        assert cfg.population_size == 12
        assert cfg.seed == 4

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "solver.yml"
        path.write_text(yaml.safe_dump({"mutation_rate": 0.05, "n_workers": 2}))
        cfg = load_config(path)
        assert cfg.mutation_rate == 0.05
        assert cfg.n_workers == 2

    def test_config_is_frozen(self):
        cfg = load_config()
        with pytest.raises(AttributeError):
            cfg.population_size = 3

    def test_invalid_override(self):
        with pytest.raises(ValueError, match="must be int"):
            load_config(population_size="many")

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "solver.yml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(TypeError, match="mapping"):
            load_config(path)

    def test_logging_section_is_applied(self):
        load_config(
            logging={"default_level": "WARNING", "modules": {"solver": "DEBUG"}}
        )
        assert logging.getLogger("ddmrpengine").level == logging.WARNING
        assert logging.getLogger("ddmrpengine.solver").level == logging.DEBUG
        logging.getLogger("ddmrpengine.solver").setLevel(logging.NOTSET)


class TestModelInputs:
    def test_pascal_case_mapping(self):
        inputs = model_inputs_from_mapping(PASCAL_CASE_LINE)
        assert isinstance(inputs, ModelInputs)
        assert inputs.planning_horizon == 4
        assert inputs.past_horizon == 2
        assert inputs.peak_threshold == 1.0

        upstream, downstream = inputs.stations
        assert upstream.lead_time == 1.5
        assert upstream.next_stations[0].next_station_index == 1
        assert upstream.next_stations[0].input_amount == 3
        assert downstream.is_output_station
        assert downstream.past_order_amount == (0, 4)
        assert downstream.demand_forecast == (5, 6, 7, 8)

    def test_snake_case_mapping(self):
        data = {
            "planning_horizon": 2,
            "past_horizon": 0,
            "peak_horizon": 0,
            "peak_threshold": 0.5,
            "stations": [
                {
                    "index": 0,
                    "processing_time": 1,
                    "demand_variability": 0,
                    "demand_forecast": [1, 1],
                }
            ],
        }
        inputs = model_inputs_from_mapping(data)
        assert inputs.peak_threshold == 0.5
        assert inputs.stations[0].processing_time == 1.0

    def test_json_file(self, tmp_path):
        path = tmp_path / "line.json"
        path.write_text(json.dumps(PASCAL_CASE_LINE))
        inputs = load_model_inputs(path)
        assert inputs.n_stations == 2

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "line.yml"
        path.write_text(yaml.safe_dump(PASCAL_CASE_LINE))
        assert load_model_inputs(path).stations[1].initial_buffer == 12

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="reading model inputs"):
            load_model_inputs(tmp_path / "absent.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "line.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_model_inputs(path)

    def test_missing_horizon(self):
        data = dict(PASCAL_CASE_LINE)
        del data["PeakHorizon"]
        with pytest.raises(ConfigurationError, match="peak_horizon"):
            model_inputs_from_mapping(data)

    def test_missing_processing_time(self):
        data = dict(PASCAL_CASE_LINE)
        data["StationDeclarations"] = [{"StationIndex": 0}]
        with pytest.raises(ConfigurationError, match="Processing time") as exc:
            model_inputs_from_mapping(data)
        assert exc.value.station_indices == (0,)

    def test_missing_station_index(self):
        data = dict(PASCAL_CASE_LINE)
        data["StationDeclarations"] = [{"ProcessingTime": 1}]
        with pytest.raises(ConfigurationError, match="Station index"):
            model_inputs_from_mapping(data)

    def test_malformed_link(self):
        data = dict(PASCAL_CASE_LINE)
        data["StationDeclarations"] = [
            {"StationIndex": 0, "ProcessingTime": 1, "NextStationsInput": [{}]}
        ]
        with pytest.raises(ConfigurationError, match="Malformed"):
            model_inputs_from_mapping(data)

    def test_values_are_not_coerced(self):
        data = json.loads(json.dumps(PASCAL_CASE_LINE))
        data["StationDeclarations"][0]["NextStationsInput"][0]["InputAmount"] = 1.5
        inputs = model_inputs_from_mapping(data)
        assert inputs.stations[0].next_stations[0].input_amount == 1.5

    def test_fractional_input_amount_rejected_on_build(self, tmp_path):
        data = json.loads(json.dumps(PASCAL_CASE_LINE))
        data["StationDeclarations"][0]["NextStationsInput"][0]["InputAmount"] = 0.5
        path = tmp_path / "line.json"
        path.write_text(json.dumps(data))
        with pytest.raises(ConfigurationError, match="integer input_amount") as exc:
            ModelBuilder.create_from_file(path)
        assert exc.value.station_indices == (0,)
