from __future__ import annotations

import json
import logging

from floorops.api.middleware.request_id import request_id_context
from floorops.infrastructure.observability.logging_config import JsonFormatter


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="floorops.application.use_cases.table_lifecycle",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="table_transition_applied",
        args=None,
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


def test_formatter_emits_extra_fields_and_service() -> None:
    formatter = JsonFormatter(service="floorops-backend", environment="test")

    payload = json.loads(
        formatter.format(_record(table_id="tbl_001", from_status="AVAILABLE", to_status=None))
    )

    assert payload["message"] == "table_transition_applied"
    assert payload["level"] == "INFO"
    assert payload["service"] == "floorops-backend"
    assert payload["env"] == "test"
    assert payload["table_id"] == "tbl_001"
    assert payload["from_status"] == "AVAILABLE"
    assert "to_status" not in payload
    assert "request_id" not in payload
    assert "lineno" not in payload


def test_formatter_includes_current_request_id() -> None:
    formatter = JsonFormatter(service="floorops-backend", environment="test")
    token = request_id_context.set("req-42")
    try:
        payload = json.loads(formatter.format(_record()))
    finally:
        request_id_context.reset(token)

    assert payload["request_id"] == "req-42"
