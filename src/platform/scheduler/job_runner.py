"""
Periodic job loops guarded by the scheduler lock.

Each process runs the same loops; on every tick the process that wins the
``SchedulerLock`` lease runs the job, the others log and skip. The lease is
released on every path, including job failure.
"""

from datetime import datetime, timedelta, timezone
from enum import StrEnum
import time
from typing import Any, Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

import anyio

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.platform.observability.tracing import job_span
from src.platform.state.scheduler_lock import LockState, SchedulerLock


class JobOutcome(StrEnum):
    COMPLETED = 'completed'
    SKIPPED = 'skipped'
    FAILED = 'failed'


async def run_locked(
    *, lock: SchedulerLock, job_name: str, job: Callable[[], Awaitable[Any]]
) -> JobOutcome:
    """Run one tick of ``job`` if this process wins the lease for ``job_name``."""
    started = time.perf_counter()
    outcome = JobOutcome.FAILED
    try:
        async with lock.hold(job_name) as state:
            if state is LockState.ALREADY_HELD:
                outcome = JobOutcome.SKIPPED
            else:
                with job_span(job_name):
                    await job()
                outcome = JobOutcome.COMPLETED
    except Exception as e:
        # The next tick retries; the loop must outlive a failed run
        Logger.base.opt(exception=e).error(f'❌ [JOB] {job_name} failed: {e}')

    if outcome is JobOutcome.SKIPPED:
        Logger.base.debug(f'⏭️ [JOB] {job_name} skipped, lease held elsewhere')
        metrics.record_job_run(job=job_name, outcome=outcome)
    else:
        duration = time.perf_counter() - started
        if outcome is JobOutcome.COMPLETED:
            Logger.base.info(f'✅ [JOB] {job_name} completed in {duration:.3f}s')
        metrics.record_job_run(job=job_name, outcome=outcome, duration=duration)
    return outcome


def seconds_until_daily(
    *, hour: int, minute: int, tz_name: str, now: Optional[datetime] = None
) -> float:
    """Seconds from ``now`` until the next hour:minute wall-clock time in ``tz_name``."""
    tz = ZoneInfo(tz_name)
    local_now = (now or datetime.now(timezone.utc)).astimezone(tz)
    target = local_now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if target <= local_now:
        target += timedelta(days=1)
    # Same-tzinfo subtraction ignores offsets; compare in UTC
    return (target.astimezone(timezone.utc) - local_now.astimezone(timezone.utc)).total_seconds()


async def run_every(
    *, interval_seconds: float, lock: SchedulerLock, job_name: str, job: Callable[[], Awaitable[Any]]
) -> None:
    Logger.base.info(f'⏰ [JOB] {job_name} scheduled every {interval_seconds:.0f}s')
    while True:
        await anyio.sleep(interval_seconds)
        await run_locked(lock=lock, job_name=job_name, job=job)


async def run_daily_at(
    *,
    hour: int,
    minute: int,
    tz_name: str,
    lock: SchedulerLock,
    job_name: str,
    job: Callable[[], Awaitable[Any]],
) -> None:
    Logger.base.info(f'⏰ [JOB] {job_name} scheduled daily at {hour:02d}:{minute:02d} {tz_name}')
    while True:
        await anyio.sleep(seconds_until_daily(hour=hour, minute=minute, tz_name=tz_name))
        await run_locked(lock=lock, job_name=job_name, job=job)
