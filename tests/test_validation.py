from datetime import date

import pytest

from smsgw.messaging.models import Message, MessageSettings, SendWindow
from smsgw.messaging.validation import MessageValidationError, ensure_valid, is_e164, validate_message, validate_messages


def test_is_e164():
    assert is_e164("+4741000000")
    assert is_e164("+47 41 00 00 00")
    assert not is_e164("4741000000")
    assert not is_e164("+0741000000")
    assert not is_e164("+1234567890123456")
    assert not is_e164("")


def test_valid_message_has_no_problems():
    msg = Message(recipient="+4741000000", content="hi", settings=MessageSettings(priority=1, age=16, validity=60))
    assert validate_message(msg) == []


def test_settings_out_of_range():
    msg = Message(
        recipient="+4741000000",
        price=-1,
        settings=MessageSettings(priority=4, age=12, validity=0),
    )
    problems = validate_message(msg)
    assert len(problems) == 4
    assert any("age" in p for p in problems)
    assert any("priority" in p for p in problems)


def test_send_window_stop_before_start():
    window = SendWindow(start_date=date(2024, 5, 2), stop_date=date(2024, 5, 1))
    problems = validate_message(Message(recipient="+4741000000", settings=MessageSettings(send_window=window)))
    assert problems == ["send_window.stop_date is before start_date"]


def test_validate_messages_prefixes_sequence_index():
    problems = validate_messages([Message(recipient="+4741000000"), Message(recipient="nope")])
    assert problems == ["message 2: recipient 'nope' is not an E.164 number"]


def test_ensure_valid_raises_with_all_problems():
    with pytest.raises(MessageValidationError) as info:
        ensure_valid([Message(recipient="x"), Message(recipient="y")])
    assert len(info.value.problems) == 2
    assert isinstance(info.value, ValueError)
    ensure_valid([])
