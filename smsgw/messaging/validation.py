"""
Optional pre-flight checks for outbound messages.

The client never runs these itself; the gateway is the authority on what it
accepts. They exist so callers can reject obviously bad input before spending
a request on it.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from smsgw.messaging.models import Message, SendWindow

# + then up to 15 digits, no leading zero. Whitespace is tolerated because the
# gateway's number parser strips it.
E164_RE = re.compile(r"^\+[1-9]\d{1,14}$")

VALID_AGES = (0, 16, 18)
MIN_PRIORITY, MAX_PRIORITY = 1, 3


class MessageValidationError(ValueError):
    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


def is_e164(recipient: str) -> bool:
    return bool(E164_RE.match(re.sub(r"\s", "", recipient or "")))


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _window_problems(window: SendWindow) -> List[str]:
    problems = []
    start = _utc(window.start_date)
    stop = _utc(window.stop_date)
    if stop is not None and stop.date() < start.date():
        problems.append("send_window.stop_date is before start_date")
    return problems


def validate_message(message: Message) -> List[str]:
    problems = []
    if not is_e164(message.recipient):
        problems.append(f"recipient {message.recipient!r} is not an E.164 number")
    if message.price < 0:
        problems.append("price must not be negative")

    s = message.settings
    if s is None:
        return problems
    if s.priority is not None and not MIN_PRIORITY <= s.priority <= MAX_PRIORITY:
        problems.append(f"priority must be between {MIN_PRIORITY} and {MAX_PRIORITY}")
    if s.age is not None and s.age not in VALID_AGES:
        problems.append(f"age must be one of {', '.join(str(a) for a in VALID_AGES)}")
    if s.validity is not None and s.validity <= 0:
        problems.append("validity must be a positive number of seconds")
    if s.send_window is not None:
        problems.extend(_window_problems(s.send_window))
    return problems


def validate_messages(messages: Iterable[Message]) -> List[str]:
    problems = []
    for idx, message in enumerate(messages, start=1):
        problems.extend(f"message {idx}: {p}" for p in validate_message(message))
    return problems


def ensure_valid(messages: Iterable[Message]) -> None:
    problems = validate_messages(messages)
    if problems:
        raise MessageValidationError(problems)
