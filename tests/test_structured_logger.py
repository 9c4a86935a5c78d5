import json
import logging

from smsgw.ops.structured_logger import JsonFormatter, setup_logging
from smsgw.utils.masking import dest_hint, redact


def _record(extra):
    record = logging.LogRecord("smsgw.client", logging.INFO, __file__, 1, "sms_send_attempt", None, None)
    record.extra = extra
    return record


def test_json_formatter_merges_extra():
    out = json.loads(JsonFormatter().format(_record({"event": "sms_send_attempt", "messages": 2})))
    assert out["severity"] == "INFO"
    assert out["message"] == "sms_send_attempt"
    assert out["logger"] == "smsgw.client"
    assert out["messages"] == 2


def test_json_formatter_redacts_credentials():
    out = json.loads(JsonFormatter().format(_record({"password": "hunter2", "ctx": {"Username": "bob"}})))
    assert out["password"] == "***"
    assert out["ctx"]["Username"] == "***"


def test_redact_leaves_other_keys():
    assert redact({"dest": "...0000", "password": "x"}) == {"dest": "...0000", "password": "***"}


def test_dest_hint():
    assert dest_hint("+4741000000") == "...0000"
    assert dest_hint("123") == "123"
    assert dest_hint("") == ""


def test_setup_logging_installs_json_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
