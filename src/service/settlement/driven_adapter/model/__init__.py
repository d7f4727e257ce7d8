"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.settlement.driven_adapter.model.payout_model import PayoutModel
from src.service.settlement.driven_adapter.model.producer_account_model import (
    ProducerAccountModel,
)

__all__ = [
    'PayoutModel',
    'ProducerAccountModel',
]
