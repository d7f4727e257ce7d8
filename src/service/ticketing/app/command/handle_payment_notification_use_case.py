from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from pydantic import ValidationError

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.settlement.domain.entity.payout_entity import Payout
from src.service.shared_kernel.domain.value_object.money import fee_of
from src.service.ticketing.app.dto.payment_notification import (
    PaymentNotification,
    WebhookOutcome,
)
from src.service.ticketing.app.interface.i_notification_sender import INotificationSender
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.service.ticket_ledger import TicketLedger
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.value_object.payment import PaymentDetails, PaymentStatus


class HandlePaymentNotificationUseCase:
    """
    Ingest a payment processor notification.

    The notification only names a payment; its state is always fetched from the
    processor. Every delivery is acknowledged: the returned outcome is for logs
    and metrics, never an HTTP error, so the processor does not keep retrying.

    Approved payment (one unit of work):
    1. Confirm the order's held tickets (pending -> paid), idempotent on payment id
    2. Queue the producer payout (amount - marketplace fee, released after holdback)
    3. No held tickets left (holds lapsed) -> issue paid tickets from the metadata,
       unless the payout was already queued by another delivery
    4. Delete the buyer's cart
    Then one ticket notification per newly paid ticket.

    Rejected / cancelled / failed payment: held tickets -> refused, inventory restored.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        ticket_ledger: TicketLedger,
        payment_gateway: IPaymentGateway,
        notification_sender: INotificationSender,
    ) -> None:
        self.uow = uow
        self.ticket_ledger = ticket_ledger
        self.payment_gateway = payment_gateway
        self.notification_sender = notification_sender

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        ticket_ledger: TicketLedger = Depends(Provide[Container.ticket_ledger]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        notification_sender: INotificationSender = Depends(
            Provide[Container.notification_sender]
        ),
    ) -> Self:
        return cls(
            uow=uow,
            ticket_ledger=ticket_ledger,
            payment_gateway=payment_gateway,
            notification_sender=notification_sender,
        )

    async def execute(self, *, payload: Any, now: Optional[datetime] = None) -> WebhookOutcome:
        try:
            outcome = await self._handle(payload=payload, now=now or datetime.now(timezone.utc))
        except Exception as e:
            Logger.base.opt(exception=e).error(f'❌ [WEBHOOK] Failed to process notification: {e}')
            outcome = WebhookOutcome.FAILED

        metrics.record_webhook_outcome(outcome=outcome)
        return outcome

    async def _handle(self, *, payload: Any, now: datetime) -> WebhookOutcome:
        try:
            notification = PaymentNotification.model_validate(payload)
        except ValidationError as e:
            Logger.base.warning(f'⚠️ [WEBHOOK] Malformed notification: {e.errors()}')
            return WebhookOutcome.MALFORMED

        if notification.type != 'payment':
            Logger.base.info(f'⏭️ [WEBHOOK] Ignoring notification type {notification.type!r}')
            return WebhookOutcome.IGNORED

        payment = await self.payment_gateway.get_payment(payment_id=notification.data.id)
        if payment.metadata.is_donation:
            Logger.base.info(f'⏭️ [WEBHOOK] Payment {payment.id} is a donation, no tickets')
            return WebhookOutcome.IGNORED

        if payment.order_id is None:
            Logger.base.warning(f'⚠️ [WEBHOOK] Payment {payment.id} carries no order reference')
            return WebhookOutcome.IGNORED

        if payment.status == PaymentStatus.APPROVED:
            return await self._confirm(payment=payment, order_id=payment.order_id, now=now)

        if payment.status.is_refusal:
            async with self.uow:
                restore = await self.ticket_ledger.refuse(
                    self.uow, order_id=payment.order_id, now=now
                )
                await self.uow.commit()
            Logger.base.info(
                f'🚫 [WEBHOOK] Payment {payment.id} {payment.status}: order {payment.order_id} '
                f'refused, {restore.total} ticket(s) back on sale'
            )
            return WebhookOutcome.REFUSED

        Logger.base.info(f'⏳ [WEBHOOK] Payment {payment.id} is {payment.status}, waiting')
        return WebhookOutcome.PENDING

    async def _confirm(
        self, *, payment: PaymentDetails, order_id: str, now: datetime
    ) -> WebhookOutcome:
        metadata = payment.metadata

        async with self.uow:
            confirmation = await self.ticket_ledger.confirm_paid(
                self.uow, order_id=order_id, payment_id=payment.id, now=now
            )
            if confirmation.is_duplicate:
                Logger.base.info(f'🔁 [WEBHOOK] Payment {payment.id} already processed')
                return WebhookOutcome.DUPLICATE

            tickets: List[Ticket] = confirmation.newly_paid
            if tickets:
                await self._queue_payout(
                    payment=payment, order_id=order_id, event_id=tickets[0].event_id, now=now
                )
            else:
                if not metadata.line_items or metadata.user_id is None:
                    raise DomainError(
                        f'Approved payment {payment.id} has no held tickets and no line items'
                    )
                # The payout row is unique per order: a concurrent delivery waits on it here
                # and finds it taken, before either of them touches inventory
                claimed = await self._queue_payout(
                    payment=payment,
                    order_id=order_id,
                    event_id=metadata.line_items[0].event_id,
                    now=now,
                )
                if not claimed:
                    Logger.base.info(
                        f'🔁 [WEBHOOK] Payment {payment.id} already issued order {order_id}'
                    )
                    return WebhookOutcome.DUPLICATE

                Logger.base.warning(
                    f'⚠️ [WEBHOOK] Holds of order {order_id} are gone, issuing paid tickets'
                )
                tickets = await self.ticket_ledger.issue_paid(
                    self.uow,
                    user_id=metadata.user_id,
                    order_id=order_id,
                    payment_id=payment.id,
                    line_items=metadata.line_items,
                    now=now,
                )

            await self.uow.cart_repo.delete_by_user_id(user_id=tickets[0].user_id)
            await self.uow.commit()

        Logger.base.info(
            f'💰 [WEBHOOK] Payment {payment.id} confirmed order {order_id}: '
            f'{len(tickets)} ticket(s) paid'
        )
        await self._notify(tickets)
        return WebhookOutcome.CONFIRMED

    async def _queue_payout(
        self, *, payment: PaymentDetails, order_id: str, event_id: int, now: datetime
    ) -> bool:
        """Insert the order's payout; False when the order already has one."""
        metadata = payment.metadata
        producer_id = metadata.producer_id
        if producer_id is None:
            event = await self.uow.event_inventory_repo.get_by_id(event_id=event_id)
            if event is None:
                raise DomainError(f'Event {event_id} of order {order_id} is gone')
            producer_id = event.producer_id

        marketplace_fee = metadata.marketplace_fee
        if marketplace_fee is None:
            marketplace_fee = fee_of(payment.transaction_amount, settings.MARKETPLACE_FEE_RATE)

        return await self.uow.payout_repo.add_if_absent(
            payout=Payout.create(
                producer_id=producer_id,
                order_id=order_id,
                payment_id=payment.id,
                amount=max(payment.transaction_amount - marketplace_fee, 0),
                holdback=timedelta(days=settings.PAYOUT_HOLDBACK_DAYS),
                now=now,
            )
        )

    async def _notify(self, tickets: List[Ticket]) -> None:
        for ticket in tickets:
            try:
                await self.notification_sender.send_ticket(ticket=ticket)
            except Exception as e:
                # Delivery is best effort; the tickets are already paid
                Logger.base.opt(exception=e).error(
                    f'❌ [NOTIFY] Could not send ticket {ticket.id}: {e}'
                )
