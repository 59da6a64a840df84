from __future__ import annotations

import asyncio
import json

import httpx
import pytest
from prometheus_client import REGISTRY

from lms.services.errors import (
    ConfigurationError,
    GatewayTimeoutError,
    UpstreamError,
    ValidationError,
)
from lms.services.paystack_client import PaystackClient


def _calls(operation: str, outcome: str) -> float:
    return (
        REGISTRY.get_sample_value(
            "lms_payment_gateway_calls_total",
            {"operation": operation, "outcome": outcome},
        )
        or 0.0
    )


def _client(handler, **kwargs) -> PaystackClient:
    return PaystackClient(
        "sk_test_123",
        base_url="https://paystack.test",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_initialize_posts_body_with_currency() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"status": True, "data": {"authorization_url": "https://pay/x"}},
        )

    client = _client(handler, callback_url="https://app/cb")
    before = _calls("initialize", "ok")

    data = asyncio.run(
        client.initialize(email="ada@example.com", amount=5000, reference="ref-1")
    )

    assert data["data"]["authorization_url"] == "https://pay/x"
    assert seen["method"] == "POST"
    assert seen["path"] == "/transaction/initialize"
    assert seen["auth"] == "Bearer sk_test_123"
    assert seen["body"] == {
        "email": "ada@example.com",
        "amount": 5000,
        "currency": "USD",
        "reference": "ref-1",
        "callback_url": "https://app/cb",
    }
    assert _calls("initialize", "ok") - before == 1.0


def test_verify_hits_reference_path() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/transaction/verify/ref-9"
        return httpx.Response(200, json={"status": True, "data": {"status": "success"}})

    data = asyncio.run(_client(handler).verify("ref-9"))
    assert data["data"]["status"] == "success"


def test_gateway_rejection_keeps_status_and_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"status": False, "message": "Invalid key"})

    before = _calls("initialize", "rejected")
    with pytest.raises(UpstreamError, match="Invalid key") as excinfo:
        asyncio.run(_client(handler).initialize(email="a@b.c", amount=1))

    assert excinfo.value.status_code == 400
    assert _calls("initialize", "rejected") - before == 1.0


def test_rejection_without_message_uses_fallback() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="oops")

    with pytest.raises(UpstreamError, match="Failed to verify payment") as excinfo:
        asyncio.run(_client(handler).verify("ref"))
    assert excinfo.value.status_code == 500


def test_timeout_maps_to_gateway_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    before = _calls("verify", "timeout")
    with pytest.raises(GatewayTimeoutError) as excinfo:
        asyncio.run(_client(handler).verify("ref"))

    assert excinfo.value.status_code == 504
    assert _calls("verify", "timeout") - before == 1.0


def test_transport_error_is_generic_500() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    before = _calls("initialize", "error")
    with pytest.raises(UpstreamError, match="Failed to initialize payment") as excinfo:
        asyncio.run(_client(handler).initialize(email="a@b.c", amount=1))

    assert excinfo.value.status_code == 500
    assert not isinstance(excinfo.value, GatewayTimeoutError)
    assert _calls("initialize", "error") - before == 1.0


def test_missing_secret_key_is_configuration_error() -> None:
    client = PaystackClient(None)
    with pytest.raises(ConfigurationError):
        asyncio.run(client.verify("ref"))


def test_verify_reference_stays_one_path_segment() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={"status": True, "data": {}})

    asyncio.run(_client(handler).verify("T685_312.abc-9"))

    assert paths == ["/transaction/verify/T685_312.abc-9"]


@pytest.mark.parametrize(
    "reference",
    ["../../transaction", "..", ".", "ref/../../customer", "ref?perPage=100", "a b"],
)
def test_malformed_reference_never_reaches_gateway(reference: str) -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={"status": True, "data": []})

    with pytest.raises(ValidationError, match="Invalid payment reference") as excinfo:
        asyncio.run(_client(handler).verify(reference))

    assert excinfo.value.status_code == 400
    assert paths == []
