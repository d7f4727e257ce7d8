"""Application layer interfaces (Ports)"""

from src.service.ticketing.app.interface.i_cart_repo import ICartRepo
from src.service.ticketing.app.interface.i_event_inventory_repo import IEventInventoryRepo
from src.service.ticketing.app.interface.i_notification_sender import INotificationSender
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo

__all__ = [
    'ICartRepo',
    'IEventInventoryRepo',
    'INotificationSender',
    'IPaymentGateway',
    'ITicketRepo',
]
