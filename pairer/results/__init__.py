"""Result assembly and report rendering."""

from .assembler import MatchKind, MatchRecord, assemble_results
from .report import (
    REPORT_COLUMNS,
    format_table,
    records_to_frame,
    unmatched_hosts,
    write_csv,
    write_table
)

__all__ = [
    "MatchKind",
    "MatchRecord",
    "assemble_results",
    "REPORT_COLUMNS",
    "format_table",
    "records_to_frame",
    "unmatched_hosts",
    "write_csv",
    "write_table"
]
