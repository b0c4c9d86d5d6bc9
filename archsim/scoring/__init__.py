"""Scoring rubric."""

from .rubric import ScoreCard, clamp_score, requirement_met, score_design

__all__ = [
    "ScoreCard",
    "clamp_score",
    "requirement_met",
    "score_design",
]
