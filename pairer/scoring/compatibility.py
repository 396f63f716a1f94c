"""
Compatibility scoring between a student and a preceptor.

The score is a convex combination of independent sub-scores, each in [0, 1]:

    q_group   = sum_i (N - rank_i + 1) * mask_i / (N * (N + 1) / 2)
    gender    = 1.0 if preference stated and met
                baseline if no preference
                0.0 if preference stated and not met
    language  = 1.0 if required and spoken
                baseline if not required
                0.0 if required and not spoken

    score = sum_g w_g * q_g + w_gender * gender + w_language * language

The baseline gives partial credit to "no opinion" cases so that preceptors
without stated preferences are not penalized. Scores are floored at a small
positive minimum because the assignment step inverts them into costs.

Default weights: practice 0.5, setting 0.2, gender 0.15, language 0.15.
"""

import json
import logging
from dataclasses import dataclass, asdict, field
from typing import Dict, Any, List, Optional, Sequence

import numpy as np

from ..profiles.schema import ATTRIBUTE_GROUPS, Host, Seeker

logger = logging.getLogger(__name__)

WEIGHT_TOLERANCE = 1e-6


@dataclass
class ScoringWeights:
    """
    Configuration for compatibility scoring.

    Attributes:
        attributes: Weight per attribute group (rank vector vs. mask)
        gender: Weight of the gender sub-score
        language: Weight of the language sub-score
        no_preference_baseline: Sub-score used when a preference is not stated
        min_score: Lower bound applied to every final score
    """
    attributes: Dict[str, float] = field(
        default_factory=lambda: {"practice": 0.5, "setting": 0.2}
    )
    gender: float = 0.15
    language: float = 0.15
    no_preference_baseline: float = 0.75
    min_score: float = 1e-6

    def total(self) -> float:
        return sum(self.attributes.values()) + self.gender + self.language

    def validate(self) -> None:
        """Validate configuration values."""
        weights = dict(self.attributes, gender=self.gender, language=self.language)
        negative = sorted(k for k, v in weights.items() if v < 0)
        if negative:
            raise ValueError(f"Scoring weights must be non-negative: {negative}")
        unknown = sorted(set(self.attributes) - set(ATTRIBUTE_GROUPS))
        if unknown:
            raise ValueError(f"Unknown attribute groups in scoring weights: {unknown}")
        if abs(self.total() - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(f"Scoring weights must sum to 1, got {self.total()}")
        if not 0 <= self.no_preference_baseline <= 1:
            raise ValueError(
                f"no_preference_baseline must be in [0, 1], got {self.no_preference_baseline}"
            )
        if self.min_score <= 0:
            raise ValueError(f"min_score must be positive, got {self.min_score}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScoringWeights":
        """Create from dictionary."""
        return cls(**d)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ScoringWeights":
        """
        Create from main config dictionary.

        Every entry of ``scoring.weights`` other than gender and language
        is an attribute group weight.

        Args:
            config: Main config dictionary

        Returns:
            ScoringWeights instance
        """
        scoring_config = config.get("scoring", {})
        weights = dict(scoring_config.get("weights", {}))
        defaults = cls()

        gender = weights.pop("gender", defaults.gender)
        language = weights.pop("language", defaults.language)

        return cls(
            attributes=weights or defaults.attributes,
            gender=gender,
            language=language,
            no_preference_baseline=scoring_config.get(
                "no_preference_baseline", defaults.no_preference_baseline
            ),
            min_score=scoring_config.get("min_score", defaults.min_score)
        )

    def save(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved scoring weights to {filepath}")

    @classmethod
    def load(cls, filepath: str) -> "ScoringWeights":
        """Load configuration from JSON file."""
        with open(filepath, "r") as f:
            d = json.load(f)
        return cls.from_dict(d)


@dataclass
class ScoreBreakdown:
    """Sub-scores behind one compatibility score."""
    attributes: Dict[str, float]
    gender: float
    language: float
    final_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attributes": {k: float(v) for k, v in self.attributes.items()},
            "gender": float(self.gender),
            "language": float(self.language),
            "final_score": float(self.final_score)
        }


def attribute_quality(ranks: Sequence[int], mask: Sequence[float]) -> float:
    """
    Score one attribute group.

    Each attribute contributes (N - rank + 1) * mask, so attributes the
    student ranks higher count more when the preceptor's mask also values
    them. The sum is divided by N(N + 1)/2, the total for a mask of all
    ones, so the result stays in [0, 1] and never falls when a mask weight
    rises.

    Args:
        ranks: Student's rank vector for the group (permutation of 1..N)
        mask: Preceptor's weights for the same attributes

    Returns:
        Group quality in [0, 1]
    """
    n = len(ranks)
    if n == 0:
        return 0.0
    if len(mask) != n:
        raise ValueError(f"Rank vector has {n} entries but mask has {len(mask)}")

    raw = sum((n - rank + 1) * weight for rank, weight in zip(ranks, mask))
    scale = n * (n + 1) / 2
    return raw / scale


class CompatibilityScorer:
    """
    Scores student/preceptor pairs.

    Both profiles must be pairable; scoring anything else is a caller
    error, since unpairable profiles are filtered out before the cost
    matrix is built.

    Attributes:
        weights: ScoringWeights with sub-score weights and baseline
    """

    def __init__(self, weights: Optional[ScoringWeights] = None):
        """
        Initialize the scorer.

        Args:
            weights: ScoringWeights instance (defaults to the standard weights)
        """
        self.weights = weights or ScoringWeights()
        self.weights.validate()
        logger.info(
            f"Initialized CompatibilityScorer with attributes={self.weights.attributes}, "
            f"gender={self.weights.gender}, language={self.weights.language}, "
            f"baseline={self.weights.no_preference_baseline}"
        )

    def gender_quality(self, seeker: Seeker, host: Host) -> float:
        if host.gender_preference is None:
            return self.weights.no_preference_baseline
        return 1.0 if seeker.is_female == host.gender_preference else 0.0

    def language_quality(self, seeker: Seeker, host: Host) -> float:
        if not host.requires_language:
            return self.weights.no_preference_baseline
        return 1.0 if seeker.speaks_language else 0.0

    def breakdown(self, seeker: Seeker, host: Host) -> ScoreBreakdown:
        """
        Compute every sub-score for a pair.

        Raises:
            ValueError: If either profile is not pairable
        """
        if not (seeker.pairable and host.pairable):
            raise ValueError(
                f"Tried to score unpairable student ({seeker.name}) and preceptor ({host.name})"
            )

        attributes = {
            group: attribute_quality(seeker.ranks[group], host.masks[group])
            for group in self.weights.attributes
        }
        gender = self.gender_quality(seeker, host)
        language = self.language_quality(seeker, host)

        score = (
            sum(self.weights.attributes[g] * q for g, q in attributes.items()) +
            self.weights.gender * gender +
            self.weights.language * language
        )
        score = max(score, self.weights.min_score)

        return ScoreBreakdown(
            attributes=attributes,
            gender=gender,
            language=language,
            final_score=score
        )

    def score(self, seeker: Seeker, host: Host) -> float:
        """
        Compatibility of a student and a preceptor (higher is better).

        Returns:
            Score in [min_score, 1]
        """
        result = self.breakdown(seeker, host)
        logger.debug(
            f"Crossing {seeker.name} with {host.name}: "
            f"attributes={result.attributes}, gender={result.gender:.4f}, "
            f"language={result.language:.4f}, score={result.final_score:.4f}"
        )
        return result.final_score

    def score_matrix(self, seekers: List[Seeker], hosts: List[Host]) -> np.ndarray:
        """
        Score every student against every preceptor.

        Returns:
            Array of shape (len(seekers), len(hosts))
        """
        scores = np.zeros((len(seekers), len(hosts)), dtype=float)
        for i, seeker in enumerate(seekers):
            for j, host in enumerate(hosts):
                scores[i, j] = self.score(seeker, host)
        return scores


def create_scorer_from_config(config: Dict[str, Any]) -> CompatibilityScorer:
    """
    Factory function to create a CompatibilityScorer from config.

    Args:
        config: Main configuration dictionary

    Returns:
        Configured CompatibilityScorer instance
    """
    return CompatibilityScorer(ScoringWeights.from_config(config))
