#!/usr/bin/env python3
"""
Check every contract ledger against its additions and modifications.

Loads the named configuration set, connects to its database, recomputes
committed value and current end date for each contract and prints the ones
that drifted.  Exit status is 1 when any contract drifted.

Usage:
    python3 scripts/verify_ledgers.py                 # default set
    python3 scripts/verify_ledgers.py --env test --create-tables
    DATABASE_URL=postgresql://... python3 scripts/verify_ledgers.py
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.split("\n\n")[0].strip())
    parser.add_argument("--env", default="default", help="configuration set name")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create missing tables before checking (fresh databases)",
    )
    args = parser.parse_args(argv)

    from oversight_config import get_active_config
    from oversight_config.bridges import init_engine_from_config
    from oversight_kernel.db.engine import create_tables, session_scope
    from oversight_kernel.selectors.ledger_selector import LedgerSelector

    config = get_active_config(args.env)
    init_engine_from_config(config)
    if args.create_tables:
        create_tables()

    with session_scope() as session:
        drifted = LedgerSelector(session).contracts_with_drift()

    print()
    print(f"  --- Ledger verification ({config.config_id}, {config.environment}) ---")
    if not drifted:
        print("  All contract ledgers match their line items.")
        print()
        return 0

    for result in drifted:
        print(f"  Contract {result.contract_id}")
        if result.stored_value != result.expected_value:
            print(f"    committed value: {result.stored_value:,}  expected {result.expected_value:,}")
        if result.stored_end_date != result.expected_end_date:
            print(f"    end date:        {result.stored_end_date}  expected {result.expected_end_date}")
    print()
    print(f"  {len(drifted)} contract(s) drifted.")
    print()
    return 1


if __name__ == "__main__":
    sys.exit(main())
