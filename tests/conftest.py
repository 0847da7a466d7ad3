"""Pytest configuration and fixtures for ddmrpengine tests."""

import os

import pytest

from ddmrpengine import logging
from ddmrpengine.model import ProductionControlModel
from tests.helpers.factories import assembly_inputs, build_model, two_station_inputs


@pytest.fixture
def two_station_model() -> ProductionControlModel:
    """Station 0 feeding station 1 over eight instants, flat demand of 10."""
    return build_model(two_station_inputs(planning_horizon=8))


@pytest.fixture
def assembly_model() -> ProductionControlModel:
    """Four-station assembly line with uneven demand and a peak horizon."""
    return build_model(assembly_inputs())


@pytest.fixture(autouse=True)
def mute_ddmrpengine_logs(caplog):
    # - coverage run: DEBUG to execute all logging branches
    # - everything else: ERROR for faster tests
    if os.environ.get("COVERAGE_RUN") == "true":
        level = logging.DEBUG
    else:
        level = logging.ERROR

    # Set both caplog level (for capture) and actual logger level
    caplog.set_level(level, logger="ddmrpengine")
    logging.getLogger("ddmrpengine").setLevel(level)
