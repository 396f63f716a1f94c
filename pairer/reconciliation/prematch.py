"""
Pre-match reconciliation.

Some students and preceptors arrive already paired by an outside
agreement: each names the other in its pre-match field. Those pairs bypass
scoring and optimization entirely. This module finds them, binds them, and
returns the remaining pools for the optimizer.

A pre-match must be reciprocal. A name that resolves to nobody, to more
than one profile, or to someone who names a different counterpart means
the dataset is inconsistent; that aborts the run rather than being
silently resolved one way or the other.

Pairings are recorded by index in a BindingTable, never as references
between profile objects.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..exceptions import BindingError, PreMatchError
from ..profiles.schema import Host, Profile, Seeker, normalize_identity

logger = logging.getLogger(__name__)


class BindingTable:
    """
    Bind-once relation between seeker indices and host indices.

    Indices refer to positions in the full student and preceptor lists.
    """

    def __init__(self):
        self._host_for: Dict[int, int] = {}
        self._seeker_for: Dict[int, int] = {}

    def bind(self, seeker_index: int, host_index: int) -> None:
        """
        Record that a seeker and a host are paired.

        Raises:
            BindingError: If either side is already bound
        """
        if seeker_index in self._host_for:
            raise BindingError(
                f"Student {seeker_index} is already bound to preceptor {self._host_for[seeker_index]}"
            )
        if host_index in self._seeker_for:
            raise BindingError(
                f"Preceptor {host_index} is already bound to student {self._seeker_for[host_index]}"
            )
        self._host_for[seeker_index] = host_index
        self._seeker_for[host_index] = seeker_index

    def host_for(self, seeker_index: int) -> Optional[int]:
        return self._host_for.get(seeker_index)

    def seeker_for(self, host_index: int) -> Optional[int]:
        return self._seeker_for.get(host_index)

    def is_seeker_bound(self, seeker_index: int) -> bool:
        return seeker_index in self._host_for

    def is_host_bound(self, host_index: int) -> bool:
        return host_index in self._seeker_for

    def pairs(self) -> List[Tuple[int, int]]:
        """All (seeker index, host index) pairs, ordered by seeker index."""
        return sorted(self._host_for.items())

    def __len__(self) -> int:
        return len(self._host_for)

    def __contains__(self, pair: Tuple[int, int]) -> bool:
        seeker_index, host_index = pair
        return self._host_for.get(seeker_index) == host_index


@dataclass
class ReconciliationResult:
    """
    Outcome of pre-match reconciliation.

    Attributes:
        bindings: Table holding every pre-matched pair
        pre_matched: (seeker index, host index) pairs in student input order
        residual_seekers: Indices of students left for optimization
        residual_hosts: Indices of preceptors left for optimization
    """
    bindings: BindingTable
    pre_matched: List[Tuple[int, int]] = field(default_factory=list)
    residual_seekers: List[int] = field(default_factory=list)
    residual_hosts: List[int] = field(default_factory=list)


def _resolve(target: str, pool: Sequence[Profile], kind: str, named_by: str) -> int:
    """
    Find the single profile in a pool that a pre-match name refers to.

    Raises:
        PreMatchError: If no profile or more than one profile matches
    """
    key = normalize_identity(target)
    candidates = [i for i, profile in enumerate(pool) if key in profile.identity_keys()]
    if not candidates:
        raise PreMatchError(
            f"{named_by} is pre-matched with {kind} {target!r}, but no such {kind} exists"
        )
    if len(candidates) > 1:
        raise PreMatchError(
            f"{named_by} is pre-matched with {kind} {target!r}, which names "
            f"{len(candidates)} different {kind}s"
        )
    return candidates[0]


def reconcile_pre_matches(
    seekers: Sequence[Seeker],
    hosts: Sequence[Host],
    bindings: Optional[BindingTable] = None
) -> ReconciliationResult:
    """
    Bind every reciprocal pre-match and return the remaining pools.

    A directive overrides insufficiency: an unpairable profile that is
    pre-matched is still bound. Profiles without a directive pass through
    unchanged, whether pairable or not; the caller decides which of them
    enter the optimization pool.

    Args:
        seekers: All students, in input order
        hosts: All preceptors, in input order
        bindings: Table to record pairs in (a new one if None)

    Returns:
        ReconciliationResult with the bound pairs and residual indices

    Raises:
        PreMatchError: If any directive is missing its counterpart or is
            not reciprocated
    """
    bindings = bindings if bindings is not None else BindingTable()
    pre_matched: List[Tuple[int, int]] = []

    for s, seeker in enumerate(seekers):
        if not seeker.has_pre_match:
            continue

        h = _resolve(seeker.pre_match, hosts, "preceptor", f"Student {seeker.name}")
        host = hosts[h]

        if not host.has_pre_match:
            raise PreMatchError(
                f"Student {seeker.name} is pre-matched with preceptor {host.name}, "
                f"but the preceptor names no pre-match"
            )
        if normalize_identity(host.pre_match) not in seeker.identity_keys():
            raise PreMatchError(
                f"Student {seeker.name} is pre-matched with preceptor {host.name}, "
                f"but the preceptor is pre-matched with {host.pre_match!r}"
            )

        bindings.bind(s, h)
        pre_matched.append((s, h))
        logger.info(f"Pre-matched student {seeker.name} with preceptor {host.name}")

    # Every host directive must have been consumed by a reciprocal seeker
    for h, host in enumerate(hosts):
        if host.has_pre_match and not bindings.is_host_bound(h):
            s = _resolve(host.pre_match, seekers, "student", f"Preceptor {host.name}")
            raise PreMatchError(
                f"Preceptor {host.name} is pre-matched with student {seekers[s].name}, "
                f"but the student does not name the preceptor back"
            )

    residual_seekers = [s for s in range(len(seekers)) if not bindings.is_seeker_bound(s)]
    residual_hosts = [h for h in range(len(hosts)) if not bindings.is_host_bound(h)]

    logger.info(
        f"Reconciled {len(pre_matched)} pre-matched pairs; "
        f"{len(residual_seekers)} students and {len(residual_hosts)} preceptors remain"
    )

    return ReconciliationResult(
        bindings=bindings,
        pre_matched=pre_matched,
        residual_seekers=residual_seekers,
        residual_hosts=residual_hosts
    )
