"""Evaluation module for pairing results."""

from .metrics import (
    compute_score_distribution_stats,
    compute_first_choice_rates,
    compute_constraint_satisfaction,
    check_against_reference,
    MatchEvaluation,
    create_match_evaluation
)

__all__ = [
    "compute_score_distribution_stats",
    "compute_first_choice_rates",
    "compute_constraint_satisfaction",
    "check_against_reference",
    "MatchEvaluation",
    "create_match_evaluation"
]
