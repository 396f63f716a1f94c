"""
Result assembly.

Merges pre-matched pairs and the solver's assignment into one ordered list
of MatchRecords:

1. every pre-matched pair, in student input order
2. every other student, in input order, tagged algorithmic or unmatched

Students that could not be parsed completely still appear, unmatched.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..assignment.hungarian import UNASSIGNED
from ..profiles.schema import Host, Seeker
from ..reconciliation.prematch import ReconciliationResult
from ..scoring.compatibility import CompatibilityScorer

logger = logging.getLogger(__name__)


class MatchKind(Enum):
    """How a student ended up with (or without) a preceptor."""
    PRE = "pre"
    ALGORITHMIC = "algorithmic"
    UNMATCHED = "unmatched"


@dataclass(frozen=True)
class MatchRecord:
    """
    One line of the pairing result.

    Attributes:
        seeker_name: Student name ("Last, First")
        host_name: Preceptor name, or None when unmatched
        kind: MatchKind of the pairing
        quality: Compatibility score, or None when not scored
        seeker_index: Position of the student in the input
        host_index: Position of the preceptor in the input, or None
    """
    seeker_name: str
    host_name: Optional[str]
    kind: MatchKind
    quality: Optional[float]
    seeker_index: int
    host_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seeker_name": self.seeker_name,
            "host_name": self.host_name,
            "kind": self.kind.value,
            "quality": None if self.quality is None else float(self.quality),
            "seeker_index": self.seeker_index,
            "host_index": self.host_index
        }


def assemble_results(
    seekers: Sequence[Seeker],
    hosts: Sequence[Host],
    reconciliation: ReconciliationResult,
    pool_seekers: Sequence[int],
    pool_hosts: Sequence[int],
    assignment: np.ndarray,
    scorer: CompatibilityScorer
) -> List[MatchRecord]:
    """
    Bind the solver's pairs and build the ordered result list.

    Args:
        seekers: All students, in input order
        hosts: All preceptors, in input order
        reconciliation: Pre-match result; its binding table receives the
            solver's pairs as well
        pool_seekers: Student indices forming the cost matrix rows
        pool_hosts: Preceptor indices forming the cost matrix columns
        assignment: Solver output, one column (or -1) per row
        scorer: Scorer used to report the quality of each pair

    Returns:
        MatchRecords, pre-matched pairs first
    """
    bindings = reconciliation.bindings
    quality: Dict[int, float] = {}

    for row, column in enumerate(assignment):
        if column == UNASSIGNED:
            continue
        s = pool_seekers[row]
        h = pool_hosts[int(column)]
        bindings.bind(s, h)
        quality[s] = scorer.score(seekers[s], hosts[h])

    records: List[MatchRecord] = []
    pre_matched = set()

    for s, h in reconciliation.pre_matched:
        seeker, host = seekers[s], hosts[h]
        score = scorer.score(seeker, host) if seeker.pairable and host.pairable else None
        records.append(MatchRecord(
            seeker_name=seeker.name,
            host_name=host.name,
            kind=MatchKind.PRE,
            quality=score,
            seeker_index=s,
            host_index=h
        ))
        pre_matched.add(s)

    for s, seeker in enumerate(seekers):
        if s in pre_matched:
            continue
        h = bindings.host_for(s)
        if h is None:
            records.append(MatchRecord(
                seeker_name=seeker.name,
                host_name=None,
                kind=MatchKind.UNMATCHED,
                quality=None,
                seeker_index=s
            ))
        else:
            records.append(MatchRecord(
                seeker_name=seeker.name,
                host_name=hosts[h].name,
                kind=MatchKind.ALGORITHMIC,
                quality=quality[s],
                seeker_index=s,
                host_index=h
            ))

    counts = {kind: sum(1 for r in records if r.kind is kind) for kind in MatchKind}
    logger.info(
        f"Assembled {len(records)} records: {counts[MatchKind.PRE]} pre-matched, "
        f"{counts[MatchKind.ALGORITHMIC]} algorithmic, {counts[MatchKind.UNMATCHED]} unmatched"
    )
    return records
