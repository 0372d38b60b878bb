from __future__ import annotations

import json

import httpx

from src.school_attendance.school_attendance.notifications.gateway import HttpSmsGateway, LoggingSmsGateway


def test_posts_json_with_bearer_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    gateway = HttpSmsGateway(
        "https://sms.example.test/send",
        api_key="k-123",
        sender="SCHOOL",
        transport=httpx.MockTransport(handler),
    )

    result = gateway.send("+15550100", "hello")

    assert result.success
    assert seen["auth"] == "Bearer k-123"
    assert seen["body"] == {"to": "+15550100", "message": "hello", "sender": "SCHOOL"}


def test_provider_error_becomes_failed_result():
    gateway = HttpSmsGateway(
        "https://sms.example.test/send",
        transport=httpx.MockTransport(lambda request: httpx.Response(402, text="no credit")),
    )

    result = gateway.send("+15550100", "hello")

    assert not result.success
    assert "402" in result.error
    assert "no credit" in result.error


def test_transport_error_becomes_failed_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    gateway = HttpSmsGateway("https://sms.example.test/send", transport=httpx.MockTransport(handler))

    result = gateway.send("+15550100", "hello")

    assert not result.success
    assert "connection refused" in result.error


def test_logging_gateway_always_succeeds():
    assert LoggingSmsGateway().send("+15550100", "hello").success
