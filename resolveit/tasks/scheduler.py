"""Deferred case status transitions.

Each deferred transition is stored as a ScheduledTransition row and armed
as a cancellable asyncio task. If the process restarts, recover() re-arms
whatever is still pending, so a transition is never silently lost.
"""

import asyncio
from datetime import datetime, timezone
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resolveit.core.logging import log
from resolveit.db.models.case import Case
from resolveit.db.models.scheduled_transition import ScheduledTransition, TransitionState
from resolveit.events.broadcaster import EventBroadcaster, broadcaster as default_broadcaster
from resolveit.events.notify import publish_status_change


def as_utc(value: datetime) -> datetime:
    """SQLite hands datetimes back naive; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TransitionScheduler:
    """Arms, fires and recovers scheduled transitions."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        broadcaster: EventBroadcaster | None = None,
    ):
        self.session_factory = session_factory
        self.broadcaster = broadcaster or default_broadcaster
        self._tasks: dict[uuid.UUID, asyncio.Task] = {}
        self._lock = asyncio.Lock()

    def schedule(
        self,
        db: AsyncSession,
        case_id: uuid.UUID,
        from_status: str,
        to_status: str,
        due_at: datetime,
        reason: str | None = None,
    ) -> ScheduledTransition:
        """Record a pending transition in the caller's transaction.

        The caller arms it with arm() once the transaction has committed.
        """
        job = ScheduledTransition(
            id=uuid.uuid4(),
            case_id=case_id,
            from_status=from_status,
            to_status=to_status,
            due_at=due_at,
            state=TransitionState.PENDING.value,
            reason=reason,
        )
        db.add(job)
        return job

    def arm(self, job_id: uuid.UUID, due_at: datetime) -> asyncio.Task:
        """Start (or restart) the timer for a pending job."""
        existing = self._tasks.get(job_id)
        if existing and not existing.done():
            existing.cancel()

        delay = max(0.0, (as_utc(due_at) - datetime.now(timezone.utc)).total_seconds())
        task = asyncio.create_task(self._run(job_id, delay))
        self._tasks[job_id] = task
        task.add_done_callback(lambda t, key=job_id: self._forget(key, t))
        log.debug(f"Armed transition {job_id} in {delay:.2f}s")
        return task

    def _forget(self, job_id: uuid.UUID, task: asyncio.Task) -> None:
        if self._tasks.get(job_id) is task:
            del self._tasks[job_id]

    async def _run(self, job_id: uuid.UUID, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
            await self.fire(job_id)
        except asyncio.CancelledError:
            log.debug(f"Transition {job_id} timer cancelled")
            raise
        except Exception as e:
            # The row stays pending and is picked up again by recover().
            log.error(f"Scheduled transition {job_id} failed: {e}")

    async def fire(self, job_id: uuid.UUID) -> bool:
        """Apply a pending transition. Returns True only if the case changed.

        Firing an already completed, skipped or cancelled job is a no-op, and
        the case is only moved if it is still in the job's from_status.
        """
        async with self._lock:
            async with self.session_factory() as db:
                job = await db.get(ScheduledTransition, job_id)
                if job is None or job.state != TransitionState.PENDING.value:
                    return False

                now = datetime.now(timezone.utc)
                case = await db.get(Case, job.case_id)
                if case is None or case.status != job.from_status:
                    job.state = TransitionState.SKIPPED.value
                    job.completed_at = now
                    await db.commit()
                    log.info(
                        f"Skipped transition {job.from_status} -> {job.to_status} "
                        f"for case {job.case_id}"
                    )
                    return False

                case.status = job.to_status
                case.updated_at = now
                job.state = TransitionState.DONE.value
                job.completed_at = now
                await db.commit()
                case_id, to_status, reason = case.id, job.to_status, job.reason

        log.info(f"Case {case_id} moved to {to_status} ({reason or 'scheduled'})")
        await publish_status_change(
            self.broadcaster, case_id, to_status, automatic=True, reason=reason
        )
        return True

    async def cancel(self, job_id: uuid.UUID) -> bool:
        """Cancel the timer and mark the job cancelled if it is still pending."""
        task = self._tasks.pop(job_id, None)
        if task and not task.done():
            task.cancel()

        async with self._lock:
            async with self.session_factory() as db:
                job = await db.get(ScheduledTransition, job_id)
                if job is None or job.state != TransitionState.PENDING.value:
                    return False
                job.state = TransitionState.CANCELLED.value
                job.completed_at = datetime.now(timezone.utc)
                await db.commit()
        return True

    async def cancel_pending(self, case_id: uuid.UUID) -> int:
        """Cancel every pending job of a case, e.g. once it has been closed."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(ScheduledTransition.id).where(
                    ScheduledTransition.case_id == case_id,
                    ScheduledTransition.state == TransitionState.PENDING.value,
                )
            )
            job_ids = list(result.scalars().all())

        cancelled = 0
        for job_id in job_ids:
            if await self.cancel(job_id):
                cancelled += 1
        if cancelled:
            log.info(f"Cancelled {cancelled} pending transition(s) for case {case_id}")
        return cancelled

    async def recover(self) -> int:
        """Re-arm every pending job, e.g. after a restart. Overdue jobs fire at once."""
        async with self.session_factory() as db:
            result = await db.execute(
                select(ScheduledTransition)
                .where(ScheduledTransition.state == TransitionState.PENDING.value)
                .order_by(ScheduledTransition.due_at)
            )
            jobs = [(job.id, job.due_at) for job in result.scalars().all()]

        for job_id, due_at in jobs:
            self.arm(job_id, due_at)
        if jobs:
            log.info(f"Recovered {len(jobs)} pending transition(s)")
        return len(jobs)

    async def drain(self) -> None:
        """Wait for every armed timer to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)
            for job_id, task in list(self._tasks.items()):
                if task.done():
                    del self._tasks[job_id]

    async def shutdown(self) -> None:
        """Cancel in-flight timers; their rows stay pending for recover()."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    @property
    def armed_count(self) -> int:
        return len(self._tasks)


_scheduler: TransitionScheduler | None = None


def get_scheduler() -> TransitionScheduler:
    """Process-wide scheduler bound to the application database."""
    global _scheduler
    if _scheduler is None:
        from resolveit.db.session import async_session_factory

        _scheduler = TransitionScheduler(async_session_factory)
    return _scheduler
