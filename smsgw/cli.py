from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError

from smsgw.config.settings import GatewaySettings, get_settings
from smsgw.messaging.errors import SmsGatewayError
from smsgw.messaging.models import Message
from smsgw.messaging.sms import SmsGatewayClient
from smsgw.messaging.validation import validate_messages
from smsgw.ops.structured_logger import setup_logging


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _build_client(cfg: GatewaySettings) -> SmsGatewayClient:
    return SmsGatewayClient.from_settings(cfg)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Send one SMS through the gateway. Credentials come from SMSGW_* environment variables or .env."
    )
    parser.add_argument("--to", required=True, help="Recipient MSISDN in E.164 format, e.g. +4741000000")
    parser.add_argument("--content", required=True, help="Message text")
    parser.add_argument("--price", type=int, default=0, help="Price in lowest monetary unit (default: %(default)s)")
    parser.add_argument("--reference", default=None, help="Client reference echoed back in the status")
    parser.add_argument("--batch-reference", default=None, help="Batch reference for the request")
    parser.add_argument("--validate", action="store_true", help="Check the message locally before sending")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Log level (default: LOG_LEVEL from the environment, else INFO)",
    )
    args = parser.parse_args(argv)

    try:
        cfg = get_settings()
    except ValidationError as exc:
        sys.stderr.write(f"Configuration error: {exc}\n")
        return 2

    try:
        setup_logging(args.log_level or cfg.LOG_LEVEL)
    except ValueError as exc:
        sys.stderr.write(f"Configuration error: LOG_LEVEL {exc}\n")
        return 2

    message = Message(recipient=args.to, content=args.content, price=args.price, client_reference=args.reference)
    if args.validate:
        problems = validate_messages([message])
        if problems:
            for p in problems:
                sys.stderr.write(f"{p}\n")
            return 1

    try:
        with _build_client(cfg) as client:
            response = client.send([message], batch_reference=args.batch_reference)
    except RuntimeError as exc:
        sys.stderr.write(f"Configuration error: {exc}\n")
        return 2
    except SmsGatewayError as exc:
        sys.stderr.write(f"Send failed: {exc}\n")
        return 2

    sys.stdout.write(response.model_dump_json(by_alias=True, indent=2) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
