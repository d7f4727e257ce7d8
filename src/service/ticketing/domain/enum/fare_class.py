from enum import StrEnum


class FareClass(StrEnum):
    """Price category; each has its own inventory counter on the event."""

    FULL = 'full'
    HALF = 'half'
