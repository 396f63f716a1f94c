"""
Main pipeline runner for preceptor pairing.

This is the single entrypoint for pairing a student export with a preceptor
export.

Usage:
    python -m pairer.run students.csv preceptors.csv --config configs/config.yaml

The pipeline performs the following steps:
1. Load and validate configuration
2. Load raw records
3. Parse student and preceptor profiles
4. Reconcile pre-matched pairs
5. Build the cost matrix for the remaining pairable profiles
6. Solve the assignment problem
7. Assemble, evaluate and output the results
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Sequence

import numpy as np

from .exceptions import PairingError
from .profiles.schema import Host, Seeker
from .reconciliation.prematch import BindingTable, ReconciliationResult, reconcile_pre_matches
from .assignment import build_cost_matrix, solve_assignment
from .results.assembler import MatchRecord, assemble_results
from .scoring.compatibility import CompatibilityScorer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


@dataclass
class MatchingOutcome:
    """
    Everything produced by one matching run.

    Attributes:
        records: Ordered match records (pre-matched first)
        bindings: Every seeker/host pair, pre-matched and algorithmic
        reconciliation: Pre-match reconciliation result
        pool_seekers: Student indices forming the cost matrix rows
        pool_hosts: Preceptor indices forming the cost matrix columns
        cost_matrix: Cost matrix given to the solver
        assignment: Solver output, one column (or -1) per row
    """
    records: List[MatchRecord]
    bindings: BindingTable
    reconciliation: ReconciliationResult
    pool_seekers: List[int] = field(default_factory=list)
    pool_hosts: List[int] = field(default_factory=list)
    cost_matrix: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    assignment: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=int))


def _pairable_pool(profiles: Sequence, indices: Sequence[int], kind: str) -> List[int]:
    """Keep the pairable profiles among the residual indices."""
    pool = []
    for i in indices:
        profile = profiles[i]
        if profile.pairable:
            pool.append(i)
        else:
            logger.warning(f"Removing {kind} {profile.name} from matching matrix")
    return pool


def match_profiles(
    seekers: Sequence[Seeker],
    hosts: Sequence[Host],
    scorer: CompatibilityScorer
) -> MatchingOutcome:
    """
    Pair parsed students with parsed preceptors.

    Pre-matched pairs are bound first. The remaining pairable profiles are
    scored against each other and assigned by minimizing total inverse
    compatibility. No I/O is performed.

    Args:
        seekers: All students, in input order
        hosts: All preceptors, in input order
        scorer: Compatibility scorer

    Returns:
        MatchingOutcome with the ordered records and the binding table

    Raises:
        PreMatchError: If pre-match directives are inconsistent
    """
    reconciliation = reconcile_pre_matches(seekers, hosts)

    pool_seekers = _pairable_pool(seekers, reconciliation.residual_seekers, "student")
    pool_hosts = _pairable_pool(hosts, reconciliation.residual_hosts, "preceptor")

    cost_matrix = build_cost_matrix(
        [seekers[s] for s in pool_seekers],
        [hosts[h] for h in pool_hosts],
        scorer
    )
    assignment = solve_assignment(cost_matrix)

    records = assemble_results(
        seekers, hosts, reconciliation, pool_seekers, pool_hosts, assignment, scorer
    )

    return MatchingOutcome(
        records=records,
        bindings=reconciliation.bindings,
        reconciliation=reconciliation,
        pool_seekers=pool_seekers,
        pool_hosts=pool_hosts,
        cost_matrix=cost_matrix,
        assignment=assignment
    )


def run_pipeline(
    students_path: str,
    preceptors_path: str,
    config_path: Optional[str] = None,
    output_path: Optional[str] = None,
    output_format: Optional[str] = None,
    log_level: Optional[str] = None
) -> Dict[str, Any]:
    """
    Run the complete pairing pipeline.

    Args:
        students_path: Path to the student export
        preceptors_path: Path to the preceptor export
        config_path: Path to the configuration YAML file (defaults if None)
        output_path: If provided, write the report here instead of stdout
        output_format: "table" or "csv" (overrides config)
        log_level: Logging level (overrides config)

    Returns:
        Dictionary with the report, records and evaluation
    """
    from .configs import load_config, validate_config, get_config_value
    from .data_loading import load_student_records, load_preceptor_records
    from .profiles import (
        PreceptorLayout,
        StudentLayout,
        parse_preceptor_records,
        parse_student_records
    )
    from .scoring import create_scorer_from_config
    from .results import format_table, records_to_frame, unmatched_hosts, write_csv, write_table
    from .results.report import CSV_DELIMITER
    from .evaluation import create_match_evaluation

    # =========================================================================
    # 1. Load and validate configuration
    # =========================================================================
    logger.info("=" * 60)
    logger.info("PRECEPTOR PAIRING")
    logger.info("=" * 60)

    config = load_config(config_path)
    issues = validate_config(config)
    if issues:
        for issue in issues:
            logger.warning(f"Config issue: {issue}")

    setup_logging(log_level or get_config_value(config, "global.log_level", "INFO"))

    output_format = output_format or get_config_value(config, "output.format", "table")
    output_path = output_path or get_config_value(config, "output.path")

    # =========================================================================
    # 2. Load and parse records
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 1: Loading Profiles")
    logger.info("=" * 60)

    seekers = parse_student_records(
        load_student_records(students_path), StudentLayout.from_config(config)
    )
    hosts = parse_preceptor_records(
        load_preceptor_records(preceptors_path), PreceptorLayout.from_config(config)
    )

    # =========================================================================
    # 3. Match
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 2: Matching")
    logger.info("=" * 60)

    scorer = create_scorer_from_config(config)
    outcome = match_profiles(seekers, hosts, scorer)

    # =========================================================================
    # 4. Evaluation
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 3: Evaluation")
    logger.info("=" * 60)

    verify = get_config_value(config, "evaluation.verify_with_reference", True)
    evaluation = create_match_evaluation(
        seekers,
        hosts,
        outcome.records,
        cost_matrix=outcome.cost_matrix if verify else None,
        assignment=outcome.assignment if verify else None,
        quantiles=get_config_value(config, "evaluation.quantiles", (0.1, 0.25, 0.5, 0.75, 0.9))
    )
    logger.info("\n" + evaluation.summary())

    idle = unmatched_hosts(hosts, outcome.bindings)
    if idle:
        logger.info(f"Preceptors without a student: {', '.join(idle)}")

    # =========================================================================
    # 5. Output
    # =========================================================================
    frame = records_to_frame(outcome.records, hosts)

    if output_format == "csv":
        if output_path:
            write_csv(frame, output_path)
        else:
            print(frame.to_csv(sep=CSV_DELIMITER, index=False), end="")
    elif output_path:
        write_table(frame, output_path)
    else:
        print(format_table(frame))

    logger.info("\n" + "=" * 60)
    logger.info("PAIRING COMPLETE")
    logger.info("=" * 60)

    return {
        "success": True,
        "records": outcome.records,
        "report": frame,
        "evaluation": evaluation,
        "unmatched_preceptors": idle
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the pipeline."""
    parser = argparse.ArgumentParser(
        description="Pair students with preceptors by preference compatibility"
    )
    parser.add_argument(
        "students",
        type=str,
        help="Path to the student export (';'-delimited, header line first)"
    )
    parser.add_argument(
        "preceptors",
        type=str,
        help="Path to the preceptor export (';'-delimited, header line first)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (built-in defaults if omitted)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write the report to this file instead of stdout"
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["table", "csv"],
        default=None,
        help="Report format (overrides config)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (overrides config)"
    )

    args = parser.parse_args(argv)

    try:
        result = run_pipeline(
            args.students,
            args.preceptors,
            config_path=args.config,
            output_path=args.output,
            output_format=args.format,
            log_level=args.log_level
        )
        if result["success"]:
            logger.info("\nPairing completed successfully!")
            return 0
        else:
            logger.error("\nPairing failed!")
            return 1
    except PairingError as e:
        logger.error(f"Pairing aborted ({e.code}): {e}")
        return 1
    except Exception as e:
        logger.exception(f"Pipeline failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
