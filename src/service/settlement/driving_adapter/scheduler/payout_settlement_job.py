from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.scheduler.job_runner import run_daily_at


PAYOUT_SETTLEMENT_JOB = 'payout-settlement'


async def settle_due_payouts() -> None:
    await container.settle_due_payouts_use_case().execute()


async def start_payout_settlement() -> None:
    await run_daily_at(
        hour=settings.PAYOUT_SETTLEMENT_HOUR,
        minute=settings.PAYOUT_SETTLEMENT_MINUTE,
        tz_name=settings.PAYOUT_SETTLEMENT_TIMEZONE,
        lock=container.scheduler_lock(),
        job_name=PAYOUT_SETTLEMENT_JOB,
        job=settle_due_payouts,
    )
