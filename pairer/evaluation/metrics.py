"""
Evaluation metrics for a pairing run.

There is no ground truth for a "good" pairing, so evaluation reports how
the result looks under the scoring model itself:
1. Match counts (pre-matched, algorithmic, unmatched students; idle preceptors)
2. Quality score distribution over scored pairs
3. First-choice rates: how often a student's top-ranked practice type and
   setting are valued by the assigned preceptor
4. Constraint satisfaction for stated gender and language preferences
5. A cross-check of the solver's total cost against scipy's
   linear_sum_assignment on the same cost matrix
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Sequence
import json

import numpy as np
from scipy.optimize import linear_sum_assignment

from ..assignment.hungarian import assignment_cost
from ..profiles.schema import Host, Seeker
from ..results.assembler import MatchKind, MatchRecord

logger = logging.getLogger(__name__)

COST_TOLERANCE = 1e-9


@dataclass
class ScoreDistributionStats:
    """Statistics about score distribution."""
    mean: float
    std: float
    min: float
    max: float
    quantiles: Dict[str, float]  # e.g., {"p10": 0.2, "p50": 0.5, "p90": 0.8}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mean": float(self.mean),
            "std": float(self.std),
            "min": float(self.min),
            "max": float(self.max),
            "quantiles": {k: float(v) for k, v in self.quantiles.items()}
        }


@dataclass
class ConstraintSatisfaction:
    """How often stated preceptor preferences were met by the assigned student."""
    gender_stated: int
    gender_met: int
    language_required: int
    language_met: int

    @property
    def gender_rate(self) -> float:
        return self.gender_met / self.gender_stated if self.gender_stated else 1.0

    @property
    def language_rate(self) -> float:
        return self.language_met / self.language_required if self.language_required else 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gender_stated": int(self.gender_stated),
            "gender_met": int(self.gender_met),
            "gender_rate": float(self.gender_rate),
            "language_required": int(self.language_required),
            "language_met": int(self.language_met),
            "language_rate": float(self.language_rate)
        }


@dataclass
class ReferenceCheck:
    """Solver total cost compared with scipy's linear_sum_assignment."""
    solver_cost: float
    reference_cost: float
    assigned_rows: int

    @property
    def gap(self) -> float:
        return self.solver_cost - self.reference_cost

    @property
    def matches_reference(self) -> bool:
        scale = max(1.0, abs(self.reference_cost))
        return abs(self.gap) <= COST_TOLERANCE * scale

    def to_dict(self) -> Dict[str, Any]:
        return {
            "solver_cost": float(self.solver_cost),
            "reference_cost": float(self.reference_cost),
            "gap": float(self.gap),
            "assigned_rows": int(self.assigned_rows),
            "matches_reference": bool(self.matches_reference)
        }


@dataclass
class MatchEvaluation:
    """
    Complete evaluation report for a pairing run.

    Describes the result under the scoring model WITHOUT claiming that
    high-scoring pairs work out better in practice.
    """
    counts: Dict[str, int]
    idle_preceptors: int
    distribution_stats: Optional[ScoreDistributionStats]
    first_choice_rates: Dict[str, float]
    constraints: ConstraintSatisfaction
    reference_check: Optional[ReferenceCheck] = None
    additional_metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "counts": dict(self.counts),
            "idle_preceptors": int(self.idle_preceptors),
            "first_choice_rates": {k: float(v) for k, v in self.first_choice_rates.items()},
            "constraints": self.constraints.to_dict(),
            "additional_metrics": self.additional_metrics
        }
        if self.distribution_stats:
            result["distribution_stats"] = self.distribution_stats.to_dict()
        if self.reference_check:
            result["reference_check"] = self.reference_check.to_dict()
        return result

    def save(self, filepath: str) -> None:
        """Save report to JSON file."""
        with open(filepath, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Saved match evaluation to {filepath}")

    def summary(self) -> str:
        """Generate text summary of the report."""
        lines = [
            "Match Evaluation",
            "=" * 50,
            "",
            "Students:",
        ]
        for kind, count in self.counts.items():
            lines.append(f"  {kind}: {count}")
        lines.append(f"Idle preceptors: {self.idle_preceptors}")

        if self.distribution_stats:
            lines.extend([
                "",
                "Quality Distribution:",
                f"  Mean: {self.distribution_stats.mean:.4f}",
                f"  Std:  {self.distribution_stats.std:.4f}",
                f"  Min:  {self.distribution_stats.min:.4f}",
                f"  Max:  {self.distribution_stats.max:.4f}",
            ])
            for q_name, q_value in self.distribution_stats.quantiles.items():
                lines.append(f"  {q_name}: {q_value:.4f}")

        if self.first_choice_rates:
            lines.extend(["", "First-choice Rates:"])
            for group, rate in self.first_choice_rates.items():
                lines.append(f"  {group}: {rate:.2%}")

        lines.extend([
            "",
            "Constraints:",
            f"  Gender preference met: {self.constraints.gender_met}/{self.constraints.gender_stated}",
            f"  Language requirement met: {self.constraints.language_met}/{self.constraints.language_required}",
        ])

        if self.reference_check:
            lines.extend([
                "",
                "Reference Check:",
                f"  Solver cost:    {self.reference_check.solver_cost:.6f}",
                f"  Reference cost: {self.reference_check.reference_cost:.6f}",
                f"  Matches reference: {self.reference_check.matches_reference}",
            ])

        return "\n".join(lines)


def compute_score_distribution_stats(
    scores: np.ndarray,
    quantiles: Sequence[float] = (0.1, 0.25, 0.5, 0.75, 0.9)
) -> Optional[ScoreDistributionStats]:
    """
    Compute distribution statistics for scores.

    Args:
        scores: Array of compatibility scores
        quantiles: Quantile values to compute (default: p10, p25, p50, p75, p90)

    Returns:
        ScoreDistributionStats instance, or None if there are no scores
    """
    scores = np.asarray(scores, dtype=float)
    if scores.size == 0:
        return None

    quantile_dict = {
        f"p{int(round(q * 100))}": float(np.percentile(scores, q * 100))
        for q in quantiles
    }

    return ScoreDistributionStats(
        mean=float(np.mean(scores)),
        std=float(np.std(scores)),
        min=float(np.min(scores)),
        max=float(np.max(scores)),
        quantiles=quantile_dict
    )


def compute_first_choice_rates(
    seekers: Sequence[Seeker],
    hosts: Sequence[Host],
    records: Sequence[MatchRecord]
) -> Dict[str, float]:
    """
    Share of matched students whose top-ranked attribute the preceptor values.

    Only pairs where both profiles are pairable are counted.

    Returns:
        Attribute group -> rate in [0, 1]
    """
    hits: Dict[str, int] = {}
    totals: Dict[str, int] = {}

    for record in records:
        if record.host_index is None:
            continue
        seeker, host = seekers[record.seeker_index], hosts[record.host_index]
        if not (seeker.pairable and host.pairable):
            continue
        for group in seeker.ranks:
            if group not in host.masks:
                continue
            totals[group] = totals.get(group, 0) + 1
            if host.masks[group][seeker.top_choice(group)] > 0:
                hits[group] = hits.get(group, 0) + 1

    return {group: hits.get(group, 0) / total for group, total in totals.items()}


def compute_constraint_satisfaction(
    seekers: Sequence[Seeker],
    hosts: Sequence[Host],
    records: Sequence[MatchRecord]
) -> ConstraintSatisfaction:
    """Count stated gender/language preferences and how many were met."""
    gender_stated = gender_met = 0
    language_required = language_met = 0

    for record in records:
        if record.host_index is None:
            continue
        seeker, host = seekers[record.seeker_index], hosts[record.host_index]
        if not (seeker.pairable and host.pairable):
            continue
        if host.gender_preference is not None:
            gender_stated += 1
            gender_met += int(seeker.is_female == host.gender_preference)
        if host.requires_language:
            language_required += 1
            language_met += int(bool(seeker.speaks_language))

    return ConstraintSatisfaction(
        gender_stated=gender_stated,
        gender_met=gender_met,
        language_required=language_required,
        language_met=language_met
    )


def check_against_reference(cost_matrix: np.ndarray, assignment: np.ndarray) -> ReferenceCheck:
    """
    Compare the solver's total cost with scipy's linear_sum_assignment.

    Args:
        cost_matrix: Cost matrix given to the solver
        assignment: Solver output (column per row, -1 for unassigned)

    Returns:
        ReferenceCheck instance
    """
    cost = np.asarray(cost_matrix, dtype=float)
    solver_cost = assignment_cost(cost, assignment)

    if cost.size == 0:
        reference_cost = 0.0
    else:
        rows, cols = linear_sum_assignment(cost)
        reference_cost = float(cost[rows, cols].sum())

    check = ReferenceCheck(
        solver_cost=solver_cost,
        reference_cost=reference_cost,
        assigned_rows=int(np.sum(np.asarray(assignment) >= 0))
    )
    if not check.matches_reference:
        logger.warning(
            f"Solver cost {solver_cost:.6f} differs from reference cost {reference_cost:.6f}"
        )
    return check


def create_match_evaluation(
    seekers: Sequence[Seeker],
    hosts: Sequence[Host],
    records: Sequence[MatchRecord],
    cost_matrix: Optional[np.ndarray] = None,
    assignment: Optional[np.ndarray] = None,
    quantiles: Sequence[float] = (0.1, 0.25, 0.5, 0.75, 0.9)
) -> MatchEvaluation:
    """
    Create a complete evaluation report.

    Args:
        seekers: All students
        hosts: All preceptors
        records: Assembled match records
        cost_matrix: Cost matrix given to the solver (for the reference check)
        assignment: Solver output (for the reference check)
        quantiles: Quantiles to compute

    Returns:
        MatchEvaluation instance
    """
    counts = {kind.value: sum(1 for r in records if r.kind is kind) for kind in MatchKind}
    matched_hosts = {r.host_index for r in records if r.host_index is not None}

    scores = np.array([r.quality for r in records if r.quality is not None], dtype=float)
    dist_stats = compute_score_distribution_stats(scores, quantiles)

    reference = None
    if cost_matrix is not None and assignment is not None:
        reference = check_against_reference(cost_matrix, assignment)

    return MatchEvaluation(
        counts=counts,
        idle_preceptors=len(hosts) - len(matched_hosts),
        distribution_stats=dist_stats,
        first_choice_rates=compute_first_choice_rates(seekers, hosts, records),
        constraints=compute_constraint_satisfaction(seekers, hosts, records),
        reference_check=reference
    )
