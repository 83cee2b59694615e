#!/usr/bin/env python3
"""
Audit a Solana program or transaction from the command line.

Prints the audit result as JSON on stdout (logs go to stderr).

Usage:
  py -m backend_solaudit.tools.audit_cli program <program_id>
  py -m backend_solaudit.tools.audit_cli transaction <signature>
  py -m backend_solaudit.tools.audit_cli batch subjects.csv   # columns: subject_type,identifier
"""

from __future__ import annotations

import argparse
import csv
import json
import sys
from pathlib import Path
from typing import Any

from backend_solaudit.analytics.audit_pipeline import audit, audit_many
from backend_solaudit.audit_logging import get_logger
from backend_solaudit.config import get_settings
from backend_solaudit.config.env import mask_rpc_url
from backend_solaudit.core.exceptions import InvalidSubjectType
from backend_solaudit.evidence.collector import SolanaEvidenceCollector
from backend_solaudit.evidence.models import AuditSubjectType

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2


def _read_subjects_csv(path: Path) -> list[tuple[str, str]]:
    """Read (subject_type, identifier) rows; blank identifiers are skipped."""
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames or not {"subject_type", "identifier"} <= set(reader.fieldnames):
            raise ValueError("CSV must have 'subject_type' and 'identifier' columns")
        rows = []
        for row in reader:
            identifier = row.get("identifier") or ""
            if identifier.strip():
                rows.append(((row.get("subject_type") or "").strip(), identifier))
        return rows


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Heuristic risk audit for a Solana program or transaction.")
    parser.add_argument("--rpc-url", default=None, help="RPC endpoint (default: SOLANA_RPC_URL / network default)")
    parser.add_argument("--compact", action="store_true", help="Print JSON on one line")
    sub = parser.add_subparsers(dest="command", required=True)
    for kind in AuditSubjectType:
        p = sub.add_parser(kind.value, help=f"Audit a {kind.value}")
        p.add_argument("identifier", help="Program account key" if kind is AuditSubjectType.PROGRAM else "Transaction signature")
    p = sub.add_parser("batch", help="Audit subjects listed in a CSV file")
    p.add_argument("csv_path", type=Path, help="CSV with subject_type,identifier columns")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    rpc_url = (args.rpc_url or settings.solana_rpc_url).strip()
    logger.info("audit_cli_start", command=args.command, rpc=mask_rpc_url(rpc_url))
    collector = SolanaEvidenceCollector(rpc_url, commitment=settings.commitment)

    output: Any
    if args.command == "batch":
        try:
            subjects = _read_subjects_csv(args.csv_path)
            results = audit_many(subjects, collector=collector, concurrency=settings.concurrency)
        except (OSError, ValueError) as e:
            # InvalidSubjectType is a ValueError
            print(f"error: {e}", file=sys.stderr)
            return EXIT_USAGE
        output = [r.to_dict() for r in results]
    else:
        try:
            result = audit(args.command, args.identifier, collector=collector)
        except InvalidSubjectType as e:
            print(f"error: {e}", file=sys.stderr)
            return EXIT_USAGE
        output = result.to_dict()

    print(json.dumps(output, separators=(",", ":")) if args.compact else json.dumps(output, indent=2))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
