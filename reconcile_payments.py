"""
Scheduled reconciliation run.

Matches pending top-ups against the bank statement, expires top-ups past the
payment deadline and fails verifications whose provider never answered.
Meant to be run from cron or a systemd timer.
"""
import argparse
import asyncio
import logging

from agegate.core.config import get_settings
from agegate.core.container import get_container
from agegate.core.logging import configure_logging
from agegate.infrastructure.database.session import dispose_engine
from agegate.modules.reconciliation import ReconciliationPoller
from agegate.modules.topups import TopupService
from agegate.modules.verifications import VerificationOrchestrator

logger = logging.getLogger("agegate.reconcile")


async def run(check: bool, expire: bool, fail_stale: bool) -> int:
    container = get_container()
    errored = 0

    if check:
        async with container.session_factory() as session:
            poller = ReconciliationPoller.with_session(session, container.bank_feed, container.settings)
            summary = await poller.check_all()
        print(
            f"[check] completed={summary.completed_count} "
            f"pending={summary.pending_count} errored={summary.errored_count}"
        )
        errored += summary.errored_count

    if expire:
        async with container.session_factory() as session:
            expired = await TopupService.with_session(session).expire_overdue()
            await session.commit()
        print(f"[expire] {expired} overdue top-ups failed")

    if fail_stale:
        async with container.session_factory() as session:
            orchestrator = VerificationOrchestrator.with_session(session, container.providers, container.settings)
            failed = await orchestrator.fail_stale()
        print(f"[stale] {failed} verifications failed and refunded")

    await dispose_engine()
    return errored


def main() -> None:
    parser = argparse.ArgumentParser(description="Reconcile top-up payments and sweep stale records")
    parser.add_argument("--skip-check", action="store_true", help="Do not query the bank feed")
    parser.add_argument("--skip-expire", action="store_true", help="Do not expire overdue top-ups")
    parser.add_argument("--skip-stale", action="store_true", help="Do not fail stale verifications")
    args = parser.parse_args()

    configure_logging(get_settings())
    errored = asyncio.run(run(not args.skip_check, not args.skip_expire, not args.skip_stale))
    if errored:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
