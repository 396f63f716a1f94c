"""
Cost matrix construction.

The assignment solver minimizes cost while the scorer measures quality, so
each cell holds the inverse of the compatibility score:

    cost[i, j] = 1 / score(student_i, preceptor_j)

Scores are strictly positive, so every cost is finite. Rectangular pools
are kept rectangular; the solver handles unequal sides itself.
"""

import logging
from typing import Sequence

import numpy as np

from ..profiles.schema import Host, Seeker
from ..scoring.compatibility import CompatibilityScorer

logger = logging.getLogger(__name__)


def build_cost_matrix(
    seekers: Sequence[Seeker],
    hosts: Sequence[Host],
    scorer: CompatibilityScorer
) -> np.ndarray:
    """
    Build the student x preceptor cost matrix.

    Args:
        seekers: Pairable students (rows)
        hosts: Pairable preceptors (columns)
        scorer: Compatibility scorer

    Returns:
        Array of shape (len(seekers), len(hosts)) with cost = 1 / score
    """
    scores = scorer.score_matrix(list(seekers), list(hosts))
    costs = np.empty_like(scores)
    np.divide(1.0, scores, out=costs)

    if costs.size:
        logger.info(
            f"Built {costs.shape[0]}x{costs.shape[1]} cost matrix "
            f"(cost range {costs.min():.4f} - {costs.max():.4f})"
        )
    else:
        logger.info(f"Built empty {costs.shape[0]}x{costs.shape[1]} cost matrix")
    return costs
