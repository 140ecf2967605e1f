"""Worker process for the year start carry-over job.

Wakes up daily and, for every company whose local date is the first day of
the leave year, carries unused allowance of the previous year over.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from timeoff_admin.config import get_settings
from timeoff_admin.db import session_scope
from timeoff_admin.models.company import Company
from timeoff_admin.models.user import User
from timeoff_admin.repository import SqlPolicyRepository
from timeoff_admin.services.carryover import calculate_carry_over_allowance

if TYPE_CHECKING:
    from datetime import date

    from timeoff_admin.repository import PolicyRepository

logger = logging.getLogger(__name__)

CARRY_OVER_INTERVAL_SECONDS = 86400  # 24 hours


async def run_year_start_carry_over(repository: PolicyRepository, today: date | None = None) -> int:
    """Carry over allowance for companies starting a new leave year.

    ``today`` overrides each company's local date. Returns the number of
    companies processed; a failing company is logged and skipped.
    """
    processed = 0
    company_ids = [company.id for company in await repository.find_all(Company, {})]
    for company_id in company_ids:
        # Reloaded per company; a rollback expires everything loaded before it
        company = await repository.find_one(Company, {"id": company_id})
        if company is None:
            continue
        local_today = today or company.get_today()
        if (local_today.month, local_today.day) != (1, 1) or company.carry_over <= 0:
            continue
        try:
            users = await repository.find_all(User, {"company_id": company_id})
            await calculate_carry_over_allowance(repository, company, users, year=local_today.year)
        except Exception:
            logger.exception("Carry-over run failed for company %s", company_id)
            await repository.rollback()
            continue
        processed += 1
    return processed


async def run_carry_over_loop() -> None:
    """Main worker loop running the carry-over check once a day."""
    logger.info("Carry-over worker started")
    while True:
        try:
            async with session_scope() as session:
                processed = await run_year_start_carry_over(SqlPolicyRepository(session))
            if processed:
                logger.info("Carry-over run complete: companies=%d", processed)
        except Exception:
            logger.exception("Carry-over run failed")

        await asyncio.sleep(CARRY_OVER_INTERVAL_SECONDS)


def main() -> None:
    """Entry point for the worker process."""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    asyncio.run(run_carry_over_loop())


if __name__ == "__main__":
    main()
