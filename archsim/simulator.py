"""Simulation orchestrator: pure metrics/scoring core plus async feedback shell."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import TYPE_CHECKING

from archsim.config import EngineConfig
from archsim.core.catalog import DEFAULT_CATALOG
from archsim.feedback.analysis import analyze_system, basic_feedback
from archsim.metrics.calculator import compute_metrics
from archsim.metrics.results import SimulationResult
from archsim.scoring.rubric import score_design

if TYPE_CHECKING:
    from archsim.core.catalog import Catalog
    from archsim.core.challenge import Challenge
    from archsim.core.design import Design
    from archsim.feedback.models import SupplementaryFeedback
    from archsim.feedback.service import FeedbackProvider

logger = logging.getLogger(__name__)


class Simulator:
    """Evaluates designs against challenges.

    `evaluate` is synchronous, deterministic and only reads its inputs, so it
    is safe to call concurrently for independent designs. `simulate` adds a
    bounded, best-effort call to the feedback collaborator; whatever happens
    there, the score and rubric lists are those computed by `evaluate`.
    """

    def __init__(
        self,
        catalog: Catalog = DEFAULT_CATALOG,
        config: EngineConfig | None = None,
        feedback_provider: FeedbackProvider | None = None,
    ) -> None:
        self._catalog = catalog
        self._config = config if config is not None else EngineConfig()
        self._feedback_provider = feedback_provider

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def feedback_provider(self) -> FeedbackProvider | None:
        return self._feedback_provider

    def evaluate(self, challenge: Challenge, design: Design) -> SimulationResult:
        """Compute metrics and score without consulting any collaborator."""
        metrics = compute_metrics(
            self._catalog,
            design.placed_components,
            design.connections,
            challenge.traffic_profile,
            design.active_faults,
            self._config,
        )
        card = score_design(
            self._catalog,
            challenge,
            design.placed_components,
            design.connections,
            metrics,
            design.active_faults,
            self._config,
        )
        return SimulationResult(
            metrics=metrics,
            score=card.score,
            feedback=card.feedback,
            violations=card.violations,
            recommendations=card.recommendations,
        )

    async def _request_feedback(
        self, challenge: Challenge, design: Design, core: SimulationResult
    ) -> SupplementaryFeedback | None:
        if self._feedback_provider is None:
            return None
        try:
            return await asyncio.wait_for(
                self._feedback_provider.get_supplementary_feedback(
                    challenge, design.placed_components, design.connections, core
                ),
                timeout=self._config.feedback.timeout_seconds,
            )
        except TimeoutError:
            logger.warning(
                "supplementary feedback timed out after %.1fs",
                self._config.feedback.timeout_seconds,
            )
        except Exception as e:
            logger.warning("supplementary feedback unavailable: %s", e)
        return None

    async def simulate(self, challenge: Challenge, design: Design) -> SimulationResult:
        """Evaluate a design and attach supplementary feedback when available.

        Collaborator failures never propagate: the result is flagged as
        lacking supplementary feedback and carries a locally derived summary
        instead. Cancelling the caller cancels only the pending collaborator
        request.
        """
        core = self.evaluate(challenge, design)
        supplementary = await self._request_feedback(challenge, design, core)

        if supplementary is not None:
            return dataclasses.replace(
                core,
                supplementary_feedback=supplementary,
                is_supplementary_feedback_available=True,
            )

        analysis = analyze_system(
            self._catalog, challenge, design.placed_components, design.connections
        )
        return dataclasses.replace(
            core,
            is_supplementary_feedback_available=False,
            fallback_feedback=basic_feedback(analysis, challenge, core),
        )

    @classmethod
    def build(
        cls,
        config: EngineConfig | None = None,
        catalog: Catalog | None = None,
        with_feedback: bool = True,
    ) -> Simulator:
        """Simulator wired to the model-backed reviewer when requested."""
        from archsim.feedback.service import AnthropicFeedbackProvider

        if config is None:
            config = EngineConfig()
        if catalog is None:
            catalog = DEFAULT_CATALOG

        provider = AnthropicFeedbackProvider(catalog, config.feedback) if with_feedback else None
        return cls(catalog=catalog, config=config, feedback_provider=provider)
