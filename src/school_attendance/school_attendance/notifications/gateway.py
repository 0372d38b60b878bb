from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SmsResult:
    success: bool
    error: Optional[str] = None


class SmsGateway(Protocol):
    def send(self, phone: str, message: str) -> SmsResult:
        raise NotImplementedError


class HttpSmsGateway(SmsGateway):
    """Posts messages to an HTTP SMS provider.

    Failures are returned as ``SmsResult(success=False)``; nothing is raised.
    """

    def __init__(
        self,
        api_url: str,
        *,
        api_key: str = "",
        sender: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._api_url = api_url
        self._api_key = api_key
        self._sender = sender
        self._timeout = timeout
        self._transport = transport

    def send(self, phone: str, message: str) -> SmsResult:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        payload = {"to": phone, "message": message, "sender": self._sender}

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self._api_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("SMS transport error for %s: %s", phone, e)
            return SmsResult(success=False, error=str(e) or e.__class__.__name__)

        if response.is_success:
            logger.info("SMS sent to %s", phone)
            return SmsResult(success=True)

        logger.error("SMS provider rejected message: %s %s", response.status_code, response.text)
        return SmsResult(success=False, error=f"SMS provider error {response.status_code}: {response.text}")


class LoggingSmsGateway(SmsGateway):
    """Development gateway: logs the message instead of sending it."""

    def send(self, phone: str, message: str) -> SmsResult:
        logger.info("[sms] to=%s message=%s", phone, message)
        return SmsResult(success=True)
