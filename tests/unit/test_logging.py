from __future__ import annotations

import json
import logging

from purchase_ledger.utils.logging import _json_formatter, configure_logging

EXPECTED_SEQUENCE = 3


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.sequence = EXPECTED_SEQUENCE
    record.identity = "did:hedera:testnet:0.0.1001"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["sequence"] == EXPECTED_SEQUENCE
    assert payload["identity"] == "did:hedera:testnet:0.0.1001"
    assert "lineno" not in payload


def test_configure_logging_sets_root_level() -> None:
    configure_logging(level="WARNING")

    assert logging.getLogger().level == logging.WARNING
    configure_logging(level="INFO", force=False)
    assert logging.getLogger().level == logging.WARNING
