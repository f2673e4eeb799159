"""Example: drive one shift through the service layer (no Flask), in memory."""

import asyncio
from datetime import date

from src.timeclock.timeclock.container import build_container
from src.timeclock.timeclock.location.capture import StaticPositionProvider
from src.timeclock.timeclock.reports.service import MonthSelector
from src.timeclock.timeclock.users.model import AuthSession


async def run():
    container = build_container(store_backend="memory")
    session = AuthSession(user_id="demo-user")

    machine = container.state_machine(session, StaticPositionProvider(10.7769, 106.7009))
    await machine.activate()
    await machine.clock_in()
    await machine.clock_out()
    await machine.submit_report("Reviewed the onboarding checklist.")

    aggregator = container.report_aggregator()
    page = await aggregator.select_month(session.user_id, MonthSelector.of(date.today()))
    for row in page.rows:
        print(row.work_date, row.clock_in, row.clock_out, row.worked, row.daily_report)


def main():
    asyncio.run(run())


if __name__ == "__main__":
    main()
