"""
Distributed scheduler lock backed by the relational store.

Every API process runs the same periodic jobs; a row per job name in
``scheduler_lock`` decides which process runs a given tick. The row counts as
held while ``is_running`` is set and ``updated_at`` is younger than the
staleness window, so a crashed holder blocks the job for at most one window.

Acquisition is a single upsert, so two processes can never both observe the
lock as free:

    INSERT ... ON CONFLICT (name) DO UPDATE SET is_running = true, ...
    WHERE scheduler_lock.is_running = false OR scheduler_lock.updated_at < :stale_before
    RETURNING owner
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import AsyncIterator, Callable, Optional
from uuid import uuid4

from sqlalchemy import or_, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.config.core_setting import settings
from src.platform.database.dialect_insert import dialect_insert
from src.platform.logging.loguru_io import Logger
from src.platform.state.scheduler_lock_model import SchedulerLockModel


class LockState(StrEnum):
    ACQUIRED = 'acquired'
    ALREADY_HELD = 'already_held'


class SchedulerLock:
    def __init__(
        self,
        *,
        session_factory: Callable[[], AsyncSession],
        staleness: Optional[timedelta] = None,
    ) -> None:
        self._session_factory = session_factory
        self.staleness = staleness or timedelta(seconds=settings.SCHEDULER_LOCK_STALENESS_SECONDS)
        # job name -> owner token of the lease this instance holds
        self._held: dict[str, str] = {}

    def owner_of(self, job_name: str) -> Optional[str]:
        return self._held.get(job_name)

    async def try_acquire(self, job_name: str, *, now: Optional[datetime] = None) -> LockState:
        now = now or datetime.now(timezone.utc)
        stale_before = now - self.staleness
        token = str(uuid4())
        table = SchedulerLockModel.__table__

        async with self._session_factory() as session:
            async with session.begin():
                stmt = (
                    dialect_insert(session, table)  # type: ignore[arg-type]
                    .values(name=job_name, is_running=True, updated_at=now, owner=token)
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=[table.c.name],
                    set_={'is_running': True, 'updated_at': now, 'owner': token},
                    where=or_(
                        table.c.is_running.is_(False),
                        table.c.updated_at < stale_before,
                    ),
                ).returning(table.c.owner)
                row = (await session.execute(stmt)).first()

        if row is None:
            Logger.base.debug(f'⏳ [LOCK] {job_name} already held by another process')
            return LockState.ALREADY_HELD

        self._held[job_name] = token
        Logger.base.debug(f'🔒 [LOCK] Acquired {job_name} (owner={token[:8]})')
        return LockState.ACQUIRED

    async def release(self, job_name: str, *, now: Optional[datetime] = None) -> bool:
        token = self._held.pop(job_name, None)
        if token is None:
            Logger.base.warning(f'⚠️ [LOCK] No lease to release for {job_name}')
            return False

        now = now or datetime.now(timezone.utc)
        table = SchedulerLockModel.__table__
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        update(table)
                        .where(table.c.name == job_name, table.c.owner == token)
                        .values(is_running=False, updated_at=now)
                        .returning(table.c.name)
                    )
                    released = result.first() is not None
        except Exception as e:
            # Lease lapses on its own after the staleness window
            Logger.base.error(f'❌ [LOCK] Error releasing {job_name}: {e}')
            return False

        if released:
            Logger.base.debug(f'🔓 [LOCK] Released {job_name}')
        else:
            Logger.base.warning(f'⚠️ [LOCK] {job_name} lease was taken over before release')
        return released

    @asynccontextmanager
    async def hold(self, job_name: str) -> AsyncIterator[LockState]:
        state = await self.try_acquire(job_name)
        try:
            yield state
        finally:
            if state is LockState.ACQUIRED:
                await self.release(job_name)
