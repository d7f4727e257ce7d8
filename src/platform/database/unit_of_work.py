"""
Unit of Work: one database transaction shared by every repository it exposes.

Use cases open the unit of work, let the repositories (and the ticket ledger)
stage their writes on the shared session, then commit. Leaving the block
without a commit rolls everything back.

    async with uow:
        tickets = await ledger.reserve(uow, ...)
        await uow.commit()

A SqlAlchemyUnitOfWork may be entered repeatedly; each entry opens a fresh
session and therefore a fresh transaction.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Callable

from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from src.service.settlement.app.interface.i_payout_repo import IPayoutRepo
    from src.service.ticketing.app.interface.i_cart_repo import ICartRepo
    from src.service.ticketing.app.interface.i_event_inventory_repo import IEventInventoryRepo
    from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo


class AbstractUnitOfWork(abc.ABC):
    ticket_repo: ITicketRepo
    event_inventory_repo: IEventInventoryRepo
    cart_repo: ICartRepo
    payout_repo: IPayoutRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.settlement.driven_adapter.repo.payout_repo_impl import PayoutRepoImpl
        from src.service.ticketing.driven_adapter.repo.cart_repo_impl import CartRepoImpl
        from src.service.ticketing.driven_adapter.repo.event_inventory_repo_impl import (
            EventInventoryRepoImpl,
        )
        from src.service.ticketing.driven_adapter.repo.ticket_repo_impl import TicketRepoImpl

        self.session = self._session_factory()

        # Repositories share the unit of work's session
        self.ticket_repo = TicketRepoImpl(session=self.session)
        self.event_inventory_repo = EventInventoryRepoImpl(session=self.session)
        self.cart_repo = CartRepoImpl(session=self.session)
        self.payout_repo = PayoutRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self.session is not None:
                await self.session.close()
                self.session = None

    async def _commit(self) -> None:
        assert self.session is not None, 'commit() outside of "async with uow"'
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
