from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.settlement.app.interface.i_producer_account_query_repo import (
    IProducerAccountQueryRepo,
)
from src.service.settlement.driven_adapter.model.producer_account_model import (
    ProducerAccountModel,
)


class ProducerAccountQueryRepoImpl(IProducerAccountQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ) -> None:
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @Logger.io
    async def get_payment_account_id(self, *, producer_id: int) -> Optional[str]:
        async with self._get_session() as session:
            result = await session.execute(
                select(ProducerAccountModel.payment_account_id).where(
                    ProducerAccountModel.producer_id == producer_id
                )
            )
            return result.scalar_one_or_none()
