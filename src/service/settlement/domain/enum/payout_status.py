from enum import StrEnum


class PayoutStatus(StrEnum):
    PENDING = 'pending'
    PAID = 'paid'
    ERROR = 'error'  # fail-stop, needs manual follow-up
    REFUNDED = 'refunded'
