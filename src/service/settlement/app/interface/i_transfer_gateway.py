from abc import ABC, abstractmethod

from src.service.settlement.domain.value_object.transfer import TransferReceipt, TransferRequest


class ITransferGateway(ABC):
    @abstractmethod
    async def create_transfer(self, *, request: TransferRequest) -> TransferReceipt:
        pass
