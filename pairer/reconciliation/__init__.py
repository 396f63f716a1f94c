"""Pre-match reconciliation and the seeker/host binding table."""

from .prematch import BindingTable, ReconciliationResult, reconcile_pre_matches

__all__ = ["BindingTable", "ReconciliationResult", "reconcile_pre_matches"]
