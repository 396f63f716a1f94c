"""
Rectangular minimum-cost assignment (Hungarian method).

Given an R x C cost matrix, find a one-to-one assignment of rows to columns
minimizing the total assigned cost:

- R <= C: every row is assigned and C - R columns stay free
- R > C: exactly C rows are assigned and R - C rows get -1

The solver is the shortest augmenting path form of the Kuhn-Munkres
algorithm with row and column potentials (dual variables). Rows are added
one at a time; for each new row a Dijkstra-like scan over reduced costs
finds the cheapest augmenting path to a free column, the potentials are
shifted so every reduced cost stays non-negative, and the path is flipped.
With n = min(R, C) and m = max(R, C) this takes O(n^2 * m) time; each scan
is vectorized over columns with numpy.

Ties are broken deterministically: rows are inserted in index order and
``np.argmin`` picks the lowest column index among equal candidates.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)

UNASSIGNED = -1


def _solve_wide(cost: np.ndarray) -> np.ndarray:
    """
    Solve a matrix with at least as many columns as rows.

    Uses 1-based internal indexing: column 0 is a virtual column that
    holds the row currently being inserted.

    Args:
        cost: Array of shape (n, m) with n <= m

    Returns:
        Array of length n with the column assigned to each row
    """
    n, m = cost.shape

    u = np.zeros(n + 1)                       # row potentials
    v = np.zeros(m + 1)                       # column potentials
    row_of = np.zeros(m + 1, dtype=int)       # row (1-based) owning each column, 0 = free
    way = np.zeros(m + 1, dtype=int)          # previous column on the shortest path

    for i in range(1, n + 1):
        row_of[0] = i
        j0 = 0
        min_reduced = np.full(m + 1, np.inf)
        used = np.zeros(m + 1, dtype=bool)

        # Grow the shortest-path tree until it reaches a free column
        while True:
            used[j0] = True
            i0 = row_of[j0]

            free = ~used[1:]
            reduced = cost[i0 - 1] - u[i0] - v[1:]
            improves = free & (reduced < min_reduced[1:])
            min_reduced[1:][improves] = reduced[improves]
            way[1:][improves] = j0

            candidates = np.where(free, min_reduced[1:], np.inf)
            j1 = int(np.argmin(candidates)) + 1
            delta = candidates[j1 - 1]

            tree = np.nonzero(used)[0]
            u[row_of[tree]] += delta
            v[tree] -= delta
            min_reduced[1:][free] -= delta

            j0 = j1
            if row_of[j0] == 0:
                break

        # Flip the augmenting path back to the virtual column
        while True:
            j1 = way[j0]
            row_of[j0] = row_of[j1]
            j0 = j1
            if j0 == 0:
                break

    assignment = np.full(n, UNASSIGNED, dtype=int)
    for j in range(1, m + 1):
        if row_of[j] != 0:
            assignment[row_of[j] - 1] = j - 1
    return assignment


def solve_assignment(cost_matrix) -> np.ndarray:
    """
    Find a minimum-cost one-to-one assignment of rows to columns.

    Args:
        cost_matrix: Array-like of shape (R, C) with finite entries

    Returns:
        Integer array of length R; entry i is the column assigned to row i,
        or -1 if the row is left unassigned

    Raises:
        ValueError: If the input is not a 2-D matrix of finite numbers
    """
    cost = np.asarray(cost_matrix, dtype=float)
    if cost.ndim != 2:
        raise ValueError(f"Cost matrix must be 2-D, got shape {cost.shape}")

    n_rows, n_cols = cost.shape
    if n_rows == 0 or n_cols == 0:
        return np.full(n_rows, UNASSIGNED, dtype=int)

    if not np.all(np.isfinite(cost)):
        raise ValueError("Cost matrix contains non-finite entries")

    if n_rows <= n_cols:
        assignment = _solve_wide(cost)
    else:
        # Solve columns against rows, then invert the mapping
        column_assignment = _solve_wide(cost.T)
        assignment = np.full(n_rows, UNASSIGNED, dtype=int)
        assignment[column_assignment] = np.arange(n_cols)

    logger.debug(
        f"Solved {n_rows}x{n_cols} assignment: "
        f"{int(np.sum(assignment != UNASSIGNED))} rows assigned, "
        f"total cost {assignment_cost(cost, assignment):.6f}"
    )
    return assignment


def assignment_cost(cost_matrix, assignment) -> float:
    """
    Total cost of the assigned cells.

    Args:
        cost_matrix: Array-like of shape (R, C)
        assignment: Column per row, -1 for unassigned rows

    Returns:
        Sum of cost[i, assignment[i]] over assigned rows
    """
    cost = np.asarray(cost_matrix, dtype=float)
    assignment = np.asarray(assignment, dtype=int)
    rows = np.nonzero(assignment != UNASSIGNED)[0]
    if len(rows) == 0:
        return 0.0
    return float(cost[rows, assignment[rows]].sum())
