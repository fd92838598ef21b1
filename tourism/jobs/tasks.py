"""Background job tasks"""

import asyncio
import structlog

from tourism.jobs.celery_app import celery_app

logger = structlog.get_logger()


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


@celery_app.task(name="send_reservation_reminders")
def send_reservation_reminders():
    """Email clients whose reservation starts in a few days"""
    logger.info("Running reservation reminder sweep")

    async def _send():
        from tourism.database import SessionLocal, engine
        from tourism.services.alerts import dispatch_due_reminders
        from tourism.services.notifications import SmtpNotifier

        try:
            async with SessionLocal() as db:
                summary = await dispatch_due_reminders(db, SmtpNotifier())
        finally:
            # Pooled connections belong to this run's event loop
            await engine.dispose()
        return {"sent": summary.sent, "failed": summary.failed}

    return run_async(_send())


@celery_app.task(name="complete_checked_out_reservations")
def complete_checked_out_reservations():
    """Move reservations checked out long enough ago to Completed"""
    logger.info("Running checked-out reservation completion")

    async def _complete():
        from tourism.database import SessionLocal, engine
        from tourism.services.lifecycle import complete_checked_out

        try:
            async with SessionLocal() as db:
                return await complete_checked_out(db)
        finally:
            await engine.dispose()

    completed = run_async(_complete())
    return {"completed": completed}
