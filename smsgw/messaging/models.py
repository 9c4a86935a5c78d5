"""
Wire model for the gateway's sendMessages endpoint.

Every optional field defaults to None and is left out of the JSON body
entirely when unset. The gateway treats a present key as an explicit
override of the service default, so sending null or an empty value is not
the same as not sending it.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticSerializationError

from smsgw.messaging.errors import DeserializationError, SerializationError


class _OutboundModel(BaseModel):
    # Unknown keys are rejected so a misspelt setting fails before the request is made.
    # Assignments are validated too, and instances are re-checked when the envelope is built.
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
        revalidate_instances="always",
    )


class _InboundModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _null_means_default(cls, data: Any) -> Any:
        # A null from the gateway decodes to the field default, same as a missing key.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class OriginatorSettings(_OutboundModel):
    # e.g. "Alphanumeric", "Numeric", "ShortCode". Interpreted by the gateway.
    originator_type: str
    # Depends on originator_type. Example: +4799999999, Intelecom, 1960.
    originator: str


class GasSettings(_OutboundModel):
    """Goods and services (CPA/GAS) transaction metadata."""

    service_code: str
    # May be printed on the end-user invoice together with the category.
    description: Optional[str] = None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SendWindow(_OutboundModel):
    """
    Deferred delivery window.

    Only start_date set means "send as soon as possible on that date".
    Timestamps go out as RFC 3339. Naive datetimes are taken to be UTC and a
    bare date is midnight UTC.
    """

    start_date: datetime
    start_time: Optional[datetime] = None
    stop_date: Optional[datetime] = None
    stop_time: Optional[datetime] = None

    @field_validator("start_date", "start_time", "stop_date", "stop_time", mode="before")
    @classmethod
    def _date_to_datetime(cls, value: Any) -> Any:
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        return value

    @field_serializer("start_date", "start_time", "stop_date", "stop_time")
    def _rfc3339(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return _as_utc(value).isoformat().replace("+00:00", "Z")


class MessageSettings(_OutboundModel):
    """Per-message overrides. Anything left as None uses the service value."""

    # 1: low (slower), 2: medium, 3: high (faster)
    priority: Optional[int] = None
    # Seconds before an undeliverable message times out.
    validity: Optional[int] = None
    # Free-form grouping key for statistics reports.
    differentiator: Optional[str] = None
    # CPA/GAS only. 0, 16 or 18; subscription services must use 18.
    age: Optional[int] = None
    new_session: Optional[bool] = None
    session_id: Optional[str] = None
    invoice_node: Optional[str] = None
    # Not used by the gateway. Kept for wire compatibility only.
    auto_detect_encoding: Optional[bool] = None
    safe_remove_non_gsm_characters: Optional[bool] = None
    originator_settings: Optional[OriginatorSettings] = None
    gas_settings: Optional[GasSettings] = None
    send_window: Optional[SendWindow] = None
    # Provider specific settings, e.g. binary message parameters. Passed through untouched.
    parameters: Optional[Dict[str, str]] = Field(default=None, alias="parameter")


class Message(_OutboundModel):
    # E.164 with a + prefix. Not validated here, see messaging.validation.
    recipient: str = ""
    content: str = ""
    # Cost to the recipient in the lowest monetary unit. Always sent, 0 included.
    price: int = 0
    client_reference: Optional[str] = None
    settings: Optional[MessageSettings] = None


class GatewayRequest(_OutboundModel):
    service_id: int
    username: str
    password: str = Field(repr=False)
    batch_reference: Optional[str] = None
    messages: List[Message] = Field(default_factory=list, alias="message")


class MessageStatus(_InboundModel):
    status_code: int = 0
    # Which parameter failed, etc.
    status_message: str = ""
    client_reference: Optional[str] = None
    # Canonicalised by the gateway's number parser: "+47 41 00 00 00" comes back as
    # "+4741000000". Match request and response on client_reference instead.
    recipient: str = ""
    # Reference for delivery reports.
    message_id: Optional[str] = None
    # Only set when a session was started or continued.
    session_id: Optional[str] = None
    # 1-based position in the request.
    sequence_index: int = 0


class GatewayResponse(_InboundModel):
    # Client supplied, or generated by the gateway.
    batch_reference: str = ""
    message_status: List[MessageStatus] = Field(default_factory=list)

    @field_validator("message_status", mode="before")
    @classmethod
    def _null_status_is_empty(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{} if item is None else item for item in value]
        return value


MessageLike = Union[Message, Mapping[str, Any]]


def build_request(
    service_id: int,
    username: str,
    password: str,
    messages: Iterable[MessageLike],
    batch_reference: Optional[str] = None,
) -> GatewayRequest:
    if isinstance(messages, Message):
        messages = [messages]
    try:
        items = [m if isinstance(m, Message) else Message.model_validate(m) for m in messages]
        return GatewayRequest(
            service_id=service_id,
            username=username,
            password=password,
            batch_reference=batch_reference,
            messages=items,
        )
    except (ValidationError, TypeError) as exc:
        raise SerializationError(f"Invalid message batch: {exc}") from exc


def encode_request(envelope: GatewayRequest) -> bytes:
    try:
        return envelope.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
    except PydanticSerializationError as exc:
        raise SerializationError(f"Could not encode request: {exc}") from exc


def decode_response(body: Union[bytes, str]) -> GatewayResponse:
    try:
        return GatewayResponse.model_validate_json(body)
    except ValidationError as exc:
        text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
        raise DeserializationError(f"Malformed gateway response: {exc}", body=text[:500]) from exc
