from enum import StrEnum


class TicketStatus(StrEnum):
    PENDING = 'pending'
    PAID = 'paid'
    CANCELLED = 'cancelled'
    REFUSED = 'refused'
    EXPIRED = 'expired'
    REFUNDED = 'refunded'
