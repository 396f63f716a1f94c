"""Compatibility scoring for student/preceptor pairs."""

from .compatibility import (
    CompatibilityScorer,
    ScoreBreakdown,
    ScoringWeights,
    attribute_quality,
    create_scorer_from_config
)

__all__ = [
    "CompatibilityScorer",
    "ScoreBreakdown",
    "ScoringWeights",
    "attribute_quality",
    "create_scorer_from_config"
]
