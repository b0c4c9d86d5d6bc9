"""Supplementary design feedback: local analysis and the model-backed reviewer."""

from .analysis import SystemAnalysis, analyze_system, basic_feedback, cache_key
from .models import SupplementaryFeedback
from .parsing import parse_feedback_text
from .service import AnthropicFeedbackProvider, FeedbackCache, FeedbackProvider

__all__ = [
    "AnthropicFeedbackProvider",
    "FeedbackCache",
    "FeedbackProvider",
    "SupplementaryFeedback",
    "SystemAnalysis",
    "analyze_system",
    "basic_feedback",
    "cache_key",
    "parse_feedback_text",
]
