"""
Report rendering for pairing results.

Turns MatchRecords into a pandas DataFrame with one row per student and
renders it either as a human-readable table or as a ';'-delimited CSV.
Preceptor details (location, category, preferred day) come from the Host
profiles.
"""

import logging
from pathlib import Path
from typing import List, Sequence

import pandas as pd

from ..profiles.schema import Host
from ..reconciliation.prematch import BindingTable
from .assembler import MatchRecord

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "name",
    "match_kind",
    "counterpart",
    "location",
    "category",
    "preferred_day",
    "quality",
]

CSV_DELIMITER = ";"


def records_to_frame(records: Sequence[MatchRecord], hosts: Sequence[Host]) -> pd.DataFrame:
    """
    Build the report table.

    Args:
        records: Ordered match records
        hosts: All preceptors, indexed by MatchRecord.host_index

    Returns:
        DataFrame with REPORT_COLUMNS, one row per record, in record order
    """
    rows = []
    for record in records:
        host = hosts[record.host_index] if record.host_index is not None else None
        rows.append({
            "name": record.seeker_name,
            "match_kind": record.kind.value,
            "counterpart": host.name if host else "",
            "location": host.location if host else "",
            "category": host.practice_type if host else "",
            "preferred_day": host.preferred_day if host else "",
            "quality": round(record.quality, 4) if record.quality is not None else None,
        })
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)


def format_table(frame: pd.DataFrame) -> str:
    """Render the report as a fixed-width text table."""
    if frame.empty:
        return "No students to report."
    display = frame.copy()
    display["counterpart"] = display["counterpart"].replace("", "None")
    display["quality"] = display["quality"].map(
        lambda q: "" if pd.isna(q) else f"{q:.4f}"
    )
    return display.to_string(index=False)


def write_csv(frame: pd.DataFrame, path: str) -> Path:
    """
    Write the report as a ';'-delimited CSV file.

    Args:
        frame: Report DataFrame from records_to_frame
        path: Destination file

    Returns:
        Path of the written file
    """
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output, sep=CSV_DELIMITER, index=False, encoding="utf-8")
    logger.info(f"Wrote {len(frame)} rows to {output}")
    return output


def write_table(frame: pd.DataFrame, path: str) -> Path:
    """Write the fixed-width table to a UTF-8 text file, creating parent directories."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(format_table(frame) + "\n", encoding="utf-8")
    logger.info(f"Wrote report table to {output}")
    return output


def unmatched_hosts(hosts: Sequence[Host], bindings: BindingTable) -> List[str]:
    """Names of preceptors left without a student, in input order."""
    return [host.name for h, host in enumerate(hosts) if not bindings.is_host_bound(h)]
