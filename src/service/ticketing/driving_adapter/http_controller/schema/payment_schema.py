from pydantic import BaseModel


class PaymentWebhookAck(BaseModel):
    status: str = 'ok'
    outcome: str
