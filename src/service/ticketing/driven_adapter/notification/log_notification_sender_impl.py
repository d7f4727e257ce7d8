from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_notification_sender import INotificationSender
from src.service.ticketing.domain.entity.ticket_entity import Ticket


class LogNotificationSenderImpl(INotificationSender):
    """Stand-in for the ticket e-mail service: records what would be delivered."""

    async def send_ticket(self, *, ticket: Ticket) -> None:
        Logger.base.info(
            f'📧 [NOTIFY] Ticket {ticket.id} ({ticket.fare_class}) for event {ticket.event_id} '
            f'sent to user {ticket.user_id}'
        )
