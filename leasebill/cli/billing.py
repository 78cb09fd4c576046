"""CLI entry point for the scheduled monthly rent run.

Runs the billing job system-wide (every organization), the same way the
scheduler does over HTTP, and prints the run summary as JSON.

Usage:
    leasebill-billing                       # current month
    leasebill-billing --month 3 --year 2025
    python -m leasebill.cli.billing --month 3 --year 2025

Exit Codes:
    0 - Success: run completed (paymentErrors may still need manual follow-up)
    1 - Failure: invalid period or structural error; rerunning is safe
"""

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

from leasebill.api.schemas import MonthlyRentResponse
from leasebill.config import get_settings
from leasebill.services.billing_service import MonthlyBillingService, SchedulerScope
from leasebill.services.logging import setup_server_logging
from leasebill.services.period_service import BillingPeriod

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    current = BillingPeriod.current()
    parser = argparse.ArgumentParser(description="Generate monthly rent charges")
    parser.add_argument("--month", type=int, default=current.month, help="Billing month (1-12)")
    parser.add_argument("--year", type=int, default=current.year, help="Billing year")
    parser.add_argument("--log-file", default=None, help="Log file (default: LOG_FILE)")
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    """
    Run one system-wide billing pass.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = parse_args(argv)
    setup_server_logging(args.log_file)

    try:
        period = BillingPeriod(month=args.month, year=args.year)
    except ValueError as e:
        logger.error("Invalid billing period: %s", e)
        return 1

    from leasebill.services import AsyncSessionLocal, async_engine

    try:
        service = MonthlyBillingService.from_settings(AsyncSessionLocal, get_settings())
        summary = await service.run_monthly_billing(SchedulerScope(), period)
    except Exception as e:
        logger.error("Billing run failed: %s", e, exc_info=True)
        return 1
    finally:
        await async_engine.dispose()

    response = MonthlyRentResponse.from_summary(summary)
    print(json.dumps(response.model_dump(by_alias=True, exclude_none=True), indent=2))
    return 0


def run() -> None:
    """Console-script wrapper."""
    load_dotenv()
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        logger.warning("Billing run interrupted by user")
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
