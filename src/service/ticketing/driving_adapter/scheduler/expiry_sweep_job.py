from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.scheduler.job_runner import run_every


EXPIRY_SWEEP_JOB = 'expiry-sweep'


async def sweep_expired_tickets() -> None:
    await container.expire_tickets_use_case().execute()


async def start_expiry_sweep() -> None:
    await run_every(
        interval_seconds=settings.EXPIRY_SWEEP_INTERVAL_SECONDS,
        lock=container.scheduler_lock(),
        job_name=EXPIRY_SWEEP_JOB,
        job=sweep_expired_tickets,
    )
