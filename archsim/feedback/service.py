"""Supplementary-feedback collaborator backed by a hosted language model."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import anthropic

from archsim.config import FeedbackConfig
from archsim.errors import FeedbackUnavailable
from archsim.feedback.analysis import SystemAnalysis, analyze_system, cache_key
from archsim.feedback.parsing import parse_feedback_text

if TYPE_CHECKING:
    from collections.abc import Sequence

    from archsim.core.catalog import Catalog
    from archsim.core.challenge import Challenge
    from archsim.core.design import Connection, PlacedComponent
    from archsim.feedback.models import SupplementaryFeedback
    from archsim.metrics.results import SimulationResult

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your_anthropic_api_key_here"


class FeedbackProvider(Protocol):
    async def get_supplementary_feedback(
        self,
        challenge: Challenge,
        placed: Sequence[PlacedComponent],
        connections: Sequence[Connection],
        core: SimulationResult,
    ) -> SupplementaryFeedback: ...


@dataclass(frozen=True)
class _CacheEntry:
    feedback: SupplementaryFeedback
    stored_at: float


class FeedbackCache:
    """Time-bounded cache keyed by content-derived design keys."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}

    def get(self, key: str) -> SupplementaryFeedback | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at >= self._ttl:
            del self._entries[key]
            return None
        return entry.feedback

    def put(self, key: str, feedback: SupplementaryFeedback) -> None:
        """Store `feedback`, dropping every entry that has already expired."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now - e.stored_at >= self._ttl]
        for k in expired:
            del self._entries[k]
        self._entries[key] = _CacheEntry(feedback, now)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def build_prompt(
    catalog: Catalog,
    challenge: Challenge,
    placed: Sequence[PlacedComponent],
    connections: Sequence[Connection],
    core: SimulationResult,
    analysis: SystemAnalysis,
) -> str:
    names = {c.id: catalog.display_name(c) or c.type_id for c in placed}
    components = ", ".join(
        f"{names[c.id]} ({catalog.params_for(c).get('replicas', 1)} replicas)" for c in placed
    )
    links = ", ".join(
        f"{names.get(e.from_id, e.from_id)} -> {names.get(e.to_id, e.to_id)}" for e in connections
    )
    metrics = core.metrics

    return f"""You are an expert system architect reviewing a system design. \
Provide comprehensive analysis.

CHALLENGE: {challenge.title}
DESCRIPTION: {challenge.description}
TRAFFIC: {challenge.traffic_profile.rps:g} requests/sec, \
{challenge.traffic_profile.read_ratio:.0%} reads
BUDGET: ${challenge.budget:,.2f}/month
SLA: p95 <= {challenge.sla.max_latency:g}ms, availability >= {challenge.sla.min_availability:.3%}
MUST HAVE: {", ".join(challenge.must_haves) or "none"}
AVOID: {", ".join(challenge.anti_patterns) or "none"}

COMPONENTS: {components or "none"}
CONNECTIONS: {links or "none"}

SIMULATION RESULTS:
- p95 latency: {metrics.latency.p95:.1f}ms
- availability: {metrics.availability:.4%}
- cost: ${metrics.cost:,.2f}/month
- throughput: {metrics.throughput:g} requests/sec
- score: {core.score}/100
- violations: {"; ".join(core.violations) or "none"}

ANALYSIS: {analysis.complexity} complexity, load balancer={analysis.has_load_balancer}, \
database={analysis.has_database}, caching={analysis.has_caching}, \
monitoring={analysis.has_monitoring}, security={analysis.has_security}, \
redundancy={analysis.has_redundancy}

Respond with a single JSON object and nothing else:
{{
  "pros": ["strength 1", "strength 2"],
  "cons": ["weakness 1", "weakness 2"],
  "detailedAnalysis": "Paragraph analysing the design...",
  "optimalSolution": "Paragraph describing ideal solution...",
  "architectureGrade": "B",
  "costOptimization": "Specific cost recommendations...",
  "scalabilityNotes": "Scalability assessment...",
  "securityConsiderations": "Security analysis and recommendations..."
}}"""


class AnthropicFeedbackProvider:
    """Reviews designs with the Anthropic Messages API.

    Requests are spent sparingly: hard checks reject designs too small to be
    worth a review, a per-session budget caps the number of calls, and
    responses are cached per (challenge, placed type multiset) for a short
    TTL. Every refusal or failure raises FeedbackUnavailable.
    """

    def __init__(
        self,
        catalog: Catalog,
        config: FeedbackConfig | None = None,
        client: anthropic.AsyncAnthropic | None = None,
        clock: Callable[[], float] = time.monotonic,
        enforce_hard_checks: bool = True,
    ) -> None:
        self._catalog = catalog
        self._config = config if config is not None else FeedbackConfig()
        self._client = client
        self._cache = FeedbackCache(self._config.cache_ttl_seconds, clock)
        self._request_count = 0
        self.enforce_hard_checks = enforce_hard_checks

    @property
    def request_count(self) -> int:
        return self._request_count

    def _api_key(self) -> str | None:
        key = os.environ.get(self._config.api_key_env, "").strip()
        if not key or PLACEHOLDER_API_KEY in key:
            return None
        return key

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            api_key = self._api_key()
            if api_key is None:
                raise FeedbackUnavailable(f"{self._config.api_key_env} is not configured")
            self._client = anthropic.AsyncAnthropic(api_key=api_key)
        return self._client

    def check_request_allowed(self, analysis: SystemAnalysis, challenge: Challenge) -> None:
        """Raise FeedbackUnavailable if a model request should not be spent."""
        if self._request_count >= self._config.max_requests_per_session:
            raise FeedbackUnavailable("request budget for this session is exhausted")

        if not self.enforce_hard_checks:
            return

        if analysis.component_count < self._config.min_components:
            raise FeedbackUnavailable(
                f"need {self._config.min_components}+ components, "
                f"have {analysis.component_count}"
            )

        needs_database = any(
            "database" in phrase.lower() or "db" in phrase.lower()
            for phrase in challenge.must_haves
        )
        if needs_database and not analysis.has_database:
            raise FeedbackUnavailable("missing required database component")

        if (
            analysis.complexity == "simple"
            and analysis.component_count < self._config.min_components_when_simple
        ):
            raise FeedbackUnavailable(
                f"simple system needs {self._config.min_components_when_simple}+ components, "
                f"have {analysis.component_count}"
            )

    async def get_supplementary_feedback(
        self,
        challenge: Challenge,
        placed: Sequence[PlacedComponent],
        connections: Sequence[Connection],
        core: SimulationResult,
    ) -> SupplementaryFeedback:
        key = cache_key(challenge, placed)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("using cached feedback for %s", key)
            return cached

        analysis = analyze_system(self._catalog, challenge, placed, connections)
        self.check_request_allowed(analysis, challenge)
        client = self._get_client()

        prompt = build_prompt(self._catalog, challenge, placed, connections, core, analysis)
        self._request_count += 1
        logger.info(
            "requesting design review (%d/%d)",
            self._request_count,
            self._config.max_requests_per_session,
        )

        try:
            response = await client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise FeedbackUnavailable(f"review request failed: {e}") from e

        text = "".join(block.text for block in response.content if block.type == "text")
        feedback = parse_feedback_text(text)
        self._cache.put(key, feedback)
        return feedback

    def usage_stats(self) -> dict[str, int]:
        return {
            "requests_used": self._request_count,
            "requests_remaining": max(
                0, self._config.max_requests_per_session - self._request_count
            ),
            "cache_size": len(self._cache),
        }

    def reset_usage(self) -> None:
        self._request_count = 0
        self._cache.clear()
