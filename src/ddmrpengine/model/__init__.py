"""Production line model: stations, precedence graph and DDMRP simulation."""

from ddmrpengine.model.builder import ModelBuilder
from ddmrpengine.model.constraints import ReplenishmentsConstraint
from ddmrpengine.model.graph import PrecedenceGraph
from ddmrpengine.model.objective import MinBuffersAndMaxDemandsObjective
from ddmrpengine.model.production_control import ModelStatus, ProductionControlModel
from ddmrpengine.model.station import PastState, Station, TimeIndexedState

__all__ = [
    "MinBuffersAndMaxDemandsObjective",
    "ModelBuilder",
    "ModelStatus",
    "PastState",
    "PrecedenceGraph",
    "ProductionControlModel",
    "ReplenishmentsConstraint",
    "Station",
    "TimeIndexedState",
]
