"""Simulation and scoring engine for system-design challenges."""

from archsim.config import EngineConfig, FeedbackConfig, RequirementMatching, RubricWeights
from archsim.core.catalog import DEFAULT_CATALOG, Catalog
from archsim.core.challenge import SAMPLE_CHALLENGES, Challenge
from archsim.core.design import Design, TrafficProfile
from archsim.metrics.results import SimulationResult
from archsim.simulator import Simulator

__all__ = [
    "DEFAULT_CATALOG",
    "SAMPLE_CHALLENGES",
    "Catalog",
    "Challenge",
    "Design",
    "EngineConfig",
    "FeedbackConfig",
    "RequirementMatching",
    "RubricWeights",
    "SimulationResult",
    "Simulator",
    "TrafficProfile",
]
