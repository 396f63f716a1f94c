"""
Preceptor Pairing Pipeline

This package pairs students with preceptors by maximizing total preference
compatibility, after honoring pairs agreed in advance.

Key Design Decisions:
- Per-record problems make a profile unpairable instead of aborting the run
- Pre-matches must be reciprocal; any inconsistency aborts the run
- Compatibility is a weighted sum of independent sub-scores in [0, 1]
- Assignment minimizes total inverse compatibility with a rectangular
  Hungarian solver, so unequal pool sizes need no padding
"""

__version__ = "1.0.0"
