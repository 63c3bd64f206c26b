#!/usr/bin/env python3
"""Generate a synthetic loan book and export it.

Drives a lender's applications, approvals and repayments through the
lending workflow, then writes businesses, customers, products, loans,
payments and ledger entries to the console or to JSON files, followed by
a portfolio report and a ledger reconciliation summary.
"""

import argparse
import json
import logging
import sys
from datetime import date, timedelta
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from loan_ledger.config import LoanLedgerConfig, ScenarioConfig
from loan_ledger.logging import setup_logging
from loan_ledger.reports import build_business_report
from loan_ledger.scenarios import LoanBookScenario
from loan_ledger.sinks import ConsoleSink, JsonFileSink
from loan_ledger.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


def main() -> None:
    """Main entry point."""
    config = LoanLedgerConfig.from_env()

    parser = argparse.ArgumentParser(description="Generate a synthetic loan book")
    parser.add_argument(
        "--customers",
        type=int,
        default=50,
        help="Number of customers to onboard (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=config.seed if config.seed is not None else 42,
        help="Random seed for reproducibility (default: SEED or 42)",
    )
    parser.add_argument(
        "--approval-rate",
        type=float,
        default=0.80,
        help="Share of applications approved (default: 0.80)",
    )
    parser.add_argument(
        "--repayment-rate",
        type=float,
        default=0.70,
        help="Share of approved loans repaid in full (default: 0.70)",
    )
    parser.add_argument(
        "--output",
        choices=["console", "json"],
        default="console",
        help="Where to write the loan book (default: console)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=config.output.json_output_dir,
        help="Directory for JSON output (default: OUTPUT_DIR or ./output)",
    )
    parser.add_argument(
        "--report-days",
        type=int,
        default=90,
        help="Length of the portfolio report period in days (default: 90)",
    )
    args = parser.parse_args()

    setup_logging(config.log_level, config.log_format)

    scenario = LoanBookScenario(
        seed=args.seed,
        config=ScenarioConfig(
            name="loan_book",
            num_customers=args.customers,
            approval_rate=args.approval_rate,
            repayment_rate=args.repayment_rate,
        ),
        ledger_config=config.ledger,
    )
    store = scenario.generate()

    if args.output == "json":
        sink = JsonFileSink(args.output_dir, pretty=config.output.pretty_json)
    else:
        sink = ConsoleSink(pretty=True, max_records=3)
    scenario.export([sink])
    sink.close()

    today = date.today()
    for business_id in store.businesses:
        report = build_business_report(
            store,
            business_id,
            today - timedelta(days=args.report_days),
            today,
            config=config.ledger,
        )
        metrics = {"period": to_dict(report.period), "portfolio": to_dict(report.portfolio)}
        print(json.dumps(metrics, indent=2))

    print(json.dumps(scenario.get_book_summary(), indent=2))


if __name__ == "__main__":
    main()
