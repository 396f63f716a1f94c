"""Cost matrix construction and the minimum-cost assignment solver."""

from .cost_matrix import build_cost_matrix
from .hungarian import UNASSIGNED, assignment_cost, solve_assignment

__all__ = [
    "UNASSIGNED",
    "assignment_cost",
    "build_cost_matrix",
    "solve_assignment"
]
