"""Shared pytest fixtures for archsim tests."""

import pytest

from archsim.config import EngineConfig
from archsim.core.catalog import DEFAULT_CATALOG, Catalog
from archsim.core.challenge import SLA, Challenge
from archsim.core.design import TrafficProfile
from archsim.core.types import ChallengeId
from archsim.simulator import Simulator


@pytest.fixture
def catalog() -> Catalog:
    return DEFAULT_CATALOG


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture
def simulator() -> Simulator:
    """Simulator without a feedback collaborator."""
    return Simulator()


@pytest.fixture
def challenge() -> Challenge:
    """Plain challenge at 1000 rps with no textual requirements."""
    return Challenge(
        id=ChallengeId("test"),
        title="Test Challenge",
        traffic_profile=TrafficProfile(rps=1000, read_ratio=0.8),
        budget=1000.0,
        sla=SLA(max_latency=200.0, min_availability=0.999),
    )
