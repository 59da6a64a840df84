"""Thin bridge to the Paystack transaction API.

One attempt per call, no retry.  A timeout is reported separately from
other failures (GatewayTimeoutError, 504) so the user can be told to try
again.  Non-2xx gateway responses keep the gateway's status code and
message.
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote

import httpx

from lms.core.config import SETTINGS
from lms.core.metrics import PAYMENT_GATEWAY_CALLS
from lms.services.errors import (
    ConfigurationError,
    GatewayTimeoutError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)

INITIALIZE_FAILED = "Failed to initialize payment"
VERIFY_FAILED = "Failed to verify payment"

# Paystack references: letters, digits and . _ = -, not starting with a dot
_REFERENCE = re.compile(r"[A-Za-z0-9_=-][A-Za-z0-9._=-]*")


class PaystackClient:
    def __init__(
        self,
        secret_key: str | None,
        *,
        base_url: str = "https://api.paystack.co",
        currency: str = "USD",
        timeout: float = 10.0,
        callback_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._currency = currency
        self._timeout = timeout
        self._callback_url = callback_url
        self._transport = transport  # injected in tests

    async def initialize(
        self,
        *,
        email: str,
        amount: int,
        reference: str | None = None,
        metadata: dict[str, Any] | None = None,
        callback_url: str | None = None,
    ) -> dict[str, Any]:
        """POST /transaction/initialize.  ``amount`` is in the minor unit."""
        body: dict[str, Any] = {
            "email": email,
            "amount": amount,
            "currency": self._currency,
        }
        if reference is not None:
            body["reference"] = reference
        if metadata is not None:
            body["metadata"] = metadata
        callback = callback_url or self._callback_url
        if callback is not None:
            body["callback_url"] = callback
        return await self._call(
            "initialize", "POST", "/transaction/initialize", INITIALIZE_FAILED, json=body
        )

    async def verify(self, reference: str) -> dict[str, Any]:
        """GET /transaction/verify/{reference}.

        The reference must be a single path segment; anything else is
        rejected before the gateway is contacted.
        """
        if not _REFERENCE.fullmatch(reference):
            logger.warning("Rejected malformed payment reference %r", reference)
            raise ValidationError("Invalid payment reference")
        return await self._call(
            "verify",
            "GET",
            f"/transaction/verify/{quote(reference, safe='')}",
            VERIFY_FAILED,
        )

    async def _call(
        self,
        operation: str,
        method: str,
        path: str,
        fallback_message: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        if not self._secret_key:
            raise ConfigurationError("Paystack secret key not configured")

        headers = {"Authorization": f"Bearer {self._secret_key}"}
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException:
            PAYMENT_GATEWAY_CALLS.labels(operation=operation, outcome="timeout").inc()
            logger.warning("Paystack %s timed out after %ss", operation, self._timeout)
            raise GatewayTimeoutError(
                "Payment gateway timed out, please try again"
            ) from None
        except httpx.HTTPError as e:
            PAYMENT_GATEWAY_CALLS.labels(operation=operation, outcome="error").inc()
            logger.error("Paystack %s transport error: %s", operation, e)
            raise UpstreamError(fallback_message) from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            PAYMENT_GATEWAY_CALLS.labels(operation=operation, outcome="rejected").inc()
            message = data.get("message") or fallback_message
            logger.warning(
                "Paystack %s rejected status=%d message=%s",
                operation,
                response.status_code,
                message,
            )
            raise UpstreamError(message, status_code=response.status_code)

        PAYMENT_GATEWAY_CALLS.labels(operation=operation, outcome="ok").inc()
        logger.info("Paystack %s ok", operation)
        return data


def get_paystack_client() -> PaystackClient:
    """FastAPI dependency; overridden in tests with a mock transport."""
    return PaystackClient(
        SETTINGS.paystack_secret_key,
        base_url=SETTINGS.paystack_base_url,
        currency=SETTINGS.paystack_currency,
        timeout=SETTINGS.paystack_timeout_seconds,
        callback_url=SETTINGS.paystack_callback_url,
    )
