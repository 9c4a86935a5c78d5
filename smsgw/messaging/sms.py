from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, Optional, Tuple

import httpx

from smsgw.config.settings import GatewaySettings, get_settings
from smsgw.messaging.errors import StatusError, TransportError
from smsgw.messaging.models import GatewayResponse, MessageLike, build_request, decode_response, encode_request
from smsgw.utils.masking import dest_hint

log = logging.getLogger("smsgw.client")

SEND_MESSAGES_PATH = "/sendMessages"
REQUEST_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class _GatewayClientBase:
    """
    Holds the gateway configuration and the request/response handling shared
    by the sync and async clients. Configuration is read-only once built.
    """

    def __init__(
        self,
        base_url: str,
        service_id: int,
        username: str,
        password: str,
        *,
        timeout: Optional[float] = None,
    ):
        self._base_url = (base_url or "").rstrip("/")
        self._service_id = service_id
        self._username = username
        self._password = password
        self._timeout = timeout

    @classmethod
    def from_settings(cls, cfg: Optional[GatewaySettings] = None, **kwargs: Any):
        if cfg is None:
            cfg = get_settings()
        if not cfg.SMSGW_BASE_URL:
            raise RuntimeError("SMSGW_BASE_URL not configured")
        if kwargs.get("http_client") is None:
            kwargs.setdefault("timeout", cfg.SMSGW_TIMEOUT_SECONDS)
        return cls(cfg.SMSGW_BASE_URL, cfg.SMSGW_SERVICE_ID, cfg.SMSGW_USERNAME, cfg.SMSGW_PASSWORD, **kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def service_id(self) -> int:
        return self._service_id

    @property
    def username(self) -> str:
        return self._username

    @property
    def send_url(self) -> str:
        return f"{self._base_url}{SEND_MESSAGES_PATH}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={self._base_url!r}, service_id={self._service_id!r})"

    def _transport_kwargs(self) -> Dict[str, Any]:
        # httpx treats timeout=None as "never time out", so only pass it when configured.
        if self._timeout is None:
            return {}
        return {"timeout": self._timeout}

    def _prepare(self, messages: Iterable[MessageLike], batch_reference: Optional[str]) -> Tuple[bytes, Dict[str, Any]]:
        envelope = build_request(self._service_id, self._username, self._password, messages, batch_reference)
        body = encode_request(envelope)
        first = envelope.messages[0].recipient if envelope.messages else ""
        ctx = {
            "channel": "sms",
            "service_id": self._service_id,
            "messages": len(envelope.messages),
            "dest": dest_hint(first),
            "batch_reference": batch_reference or "",
        }
        return body, ctx

    def _log_attempt(self, ctx: Dict[str, Any]) -> None:
        log.info("sms_send_attempt", extra={"extra": {"event": "sms_send_attempt", **ctx}})

    def _transport_failed(self, exc: Exception, ctx: Dict[str, Any], t0: float) -> TransportError:
        dt_ms = int((time.time() - t0) * 1000)
        log.error(
            "sms_send_exception",
            extra={
                "extra": {
                    "event": "sms_send_exception",
                    **ctx,
                    "error_type": type(exc).__name__,
                    "message": str(exc),
                    "latency_ms": dt_ms,
                }
            },
            exc_info=True,
        )
        return TransportError(f"{type(exc).__name__}: {exc}")

    def _handle_response(self, r: httpx.Response, ctx: Dict[str, Any], t0: float) -> GatewayResponse:
        dt_ms = int((time.time() - t0) * 1000)
        log.info(
            "sms_send_result",
            extra={"extra": {"event": "sms_send_result", **ctx, "status_code": r.status_code, "latency_ms": dt_ms}},
        )

        if r.status_code != 200:
            try:
                payload = r.json()
            except ValueError:
                payload = None
            log.warning(
                "sms_send_failed",
                extra={"extra": {"event": "sms_send_failed", **ctx, "status_code": r.status_code, "resp": (r.text or "")[:500]}},
            )
            raise StatusError(r.status_code, body=r.text or "", error_payload=payload)

        return decode_response(r.content)


class SmsGatewayClient(_GatewayClientBase):
    """
    Sends batches of SMS messages through the gateway's sendMessages endpoint.

    One call to send() is exactly one HTTP POST: no retries, no caching. A single
    instance may be shared between threads; httpx.Client pools connections
    internally.

    Pass http_client to reuse an existing httpx.Client. It is not closed by
    close(), and timeout is ignored for it: configure the timeout on that client.
    A base_url httpx cannot parse is reported as TransportError on send().
    """

    def __init__(
        self,
        base_url: str,
        service_id: int,
        username: str,
        password: str,
        *,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
    ):
        super().__init__(base_url, service_id, username, password, timeout=timeout)
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.Client(**self._transport_kwargs())

    def send(self, messages: Iterable[MessageLike], *, batch_reference: Optional[str] = None) -> GatewayResponse:
        body, ctx = self._prepare(messages, batch_reference)

        t0 = time.time()
        self._log_attempt(ctx)
        try:
            r = self._http.post(self.send_url, content=body, headers=REQUEST_HEADERS)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise self._transport_failed(e, ctx, t0) from e
        return self._handle_response(r, ctx, t0)

    def close(self) -> None:
        if self._owns_http_client:
            self._http.close()

    def __enter__(self) -> "SmsGatewayClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AsyncSmsGatewayClient(_GatewayClientBase):
    """
    asyncio flavour of SmsGatewayClient. Cancelling the task awaiting send()
    abandons the in-flight request. http_client and timeout behave as in
    SmsGatewayClient.
    """

    def __init__(
        self,
        base_url: str,
        service_id: int,
        username: str,
        password: str,
        *,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, service_id, username, password, timeout=timeout)
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(**self._transport_kwargs())

    async def send(self, messages: Iterable[MessageLike], *, batch_reference: Optional[str] = None) -> GatewayResponse:
        body, ctx = self._prepare(messages, batch_reference)

        t0 = time.time()
        self._log_attempt(ctx)
        try:
            r = await self._http.post(self.send_url, content=body, headers=REQUEST_HEADERS)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise self._transport_failed(e, ctx, t0) from e
        return self._handle_response(r, ctx, t0)

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def __aenter__(self) -> "AsyncSmsGatewayClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
