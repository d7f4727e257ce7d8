"""
Mercado Pago REST client

Thin httpx wrapper shared by the ticketing (payments, preferences, refunds) and
settlement (transfers) adapters. Transport errors and 5xx responses are retried
within a call, always re-sending the same idempotency key so the processor
executes a money movement at most once.
"""

from typing import Any, Optional

import anyio
import httpx
import orjson

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import PaymentGatewayError
from src.platform.logging.loguru_io import Logger


IDEMPOTENCY_HEADER = 'X-Idempotency-Key'


class MercadoPagoClient:
    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.PAYMENT_API_BASE_URL).rstrip('/')
        self._access_token = access_token or settings.PAYMENT_ACCESS_TOKEN.get_secret_value()
        self.timeout_seconds = timeout_seconds or settings.PAYMENT_API_TIMEOUT_SECONDS
        self.max_attempts = max(1, max_attempts or settings.PAYMENT_API_MAX_ATTEMPTS)
        self.backoff_seconds = backoff_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=self._transport,
            headers={
                'Authorization': f'Bearer {self._access_token}',
                'Content-Type': 'application/json',
            },
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[dict[str, Any]] = None,
        idempotency_key: Optional[str] = None,
    ) -> dict[str, Any]:
        headers = {IDEMPOTENCY_HEADER: idempotency_key} if idempotency_key else {}
        content = orjson.dumps(json_body) if json_body is not None else None
        last_error = ''
        last_status: Optional[int] = None
        last_body: Optional[str] = None

        async with self._client() as client:
            for attempt in range(1, self.max_attempts + 1):
                try:
                    response = await client.request(method, path, content=content, headers=headers)
                except httpx.TransportError as e:
                    last_error = f'{type(e).__name__}: {e}'
                    Logger.base.warning(
                        f'⚠️ [PAYMENT] {method} {path} attempt {attempt}/{self.max_attempts} '
                        f'failed: {last_error}'
                    )
                else:
                    if response.status_code < 400:
                        return orjson.loads(response.content) if response.content else {}

                    last_status, last_body = response.status_code, response.text
                    last_error = f'HTTP {response.status_code}'
                    if response.status_code < 500:
                        # Client errors are deterministic, retrying cannot help
                        break
                    Logger.base.warning(
                        f'⚠️ [PAYMENT] {method} {path} attempt {attempt}/{self.max_attempts} '
                        f'returned {response.status_code}'
                    )

                if attempt < self.max_attempts:
                    await anyio.sleep(self.backoff_seconds * 2 ** (attempt - 1))

        raise PaymentGatewayError(
            f'Payment processor call {method} {path} failed: {last_error}',
            response_status=last_status,
            body=last_body,
        )

    async def get_payment(self, *, payment_id: str) -> dict[str, Any]:
        return await self.request('GET', f'/v1/payments/{payment_id}')

    async def create_preference(self, *, body: dict[str, Any]) -> dict[str, Any]:
        return await self.request('POST', '/checkout/preferences', json_body=body)

    async def refund_payment(self, *, payment_id: str, idempotency_key: str) -> dict[str, Any]:
        return await self.request(
            'POST', f'/v1/payments/{payment_id}/refunds', json_body={}, idempotency_key=idempotency_key
        )

    async def create_transfer(self, *, body: dict[str, Any], idempotency_key: str) -> dict[str, Any]:
        return await self.request(
            'POST', settings.TRANSFER_API_PATH, json_body=body, idempotency_key=idempotency_key
        )
