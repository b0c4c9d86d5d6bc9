"""Metrics calculation and simulation results."""

from .calculator import compute_metrics, dominant_path_latency
from .results import LatencyPercentiles, Metrics, SimulationResult

__all__ = [
    "LatencyPercentiles",
    "Metrics",
    "SimulationResult",
    "compute_metrics",
    "dominant_path_latency",
]
