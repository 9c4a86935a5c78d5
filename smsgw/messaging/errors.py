from __future__ import annotations

from typing import Any, Optional


class SmsGatewayError(Exception):
    """Base exception for everything the gateway client raises."""


class SerializationError(SmsGatewayError):
    """The outbound batch could not be encoded. Nothing was sent."""


class TransportError(SmsGatewayError):
    """DNS, connect, TLS or timeout failure. The request may not have reached the gateway."""


class StatusError(SmsGatewayError):
    """The gateway answered with something other than HTTP 200."""

    def __init__(self, status_code: int, body: str = "", error_payload: Optional[Any] = None):
        self.status_code = status_code
        self.body = body
        # Parsed JSON body when the gateway sent one, else None.
        self.error_payload = error_payload
        super().__init__(f"Status code: {status_code}")


class DeserializationError(SmsGatewayError):
    """HTTP 200 with a body that is not a valid sendMessages response."""

    def __init__(self, message: str, body: str = ""):
        self.body = body
        super().__init__(message)
