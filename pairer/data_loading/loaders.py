"""
Data loading functions for the pairing pipeline.

This module reads the raw student and preceptor exports. Each file is
';'-delimited text whose first line holds the field headers. No parsing is
done here - records are returned as raw lines and handed to the profile
parsers.
"""

import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def load_records(filepath: str, encoding: str = "utf-8") -> List[str]:
    """
    Load raw records from a delimited export.

    The first line is treated as a header and skipped. Blank lines are
    dropped.

    Args:
        filepath: Path to the export file
        encoding: Text encoding of the file

    Returns:
        List of raw record lines, in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file has no header line
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Record file not found: {filepath}")

    logger.info(f"Loading records from {filepath}")
    # Strip a leading byte-order mark
    if encoding.lower().replace("_", "-") == "utf-8":
        encoding = "utf-8-sig"
    lines = path.read_text(encoding=encoding).splitlines()

    if not lines:
        raise ValueError(f"Record file has no lines of data: {filepath}")

    header, body = lines[0], lines[1:]
    records = [line for line in body if line.strip()]

    logger.info(f"Loaded {len(records)} records with header: {header.strip()}")
    return records


def load_student_records(filepath: str) -> List[str]:
    """Load raw student records."""
    records = load_records(filepath)
    logger.info(f"Found {len(records)} student records")
    return records


def load_preceptor_records(filepath: str) -> List[str]:
    """Load raw preceptor records."""
    records = load_records(filepath)
    logger.info(f"Found {len(records)} preceptor records")
    return records
