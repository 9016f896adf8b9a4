from __future__ import annotations

import json
import sys
import time
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from floorops.application.ports.publisher import FLOOR_EVENTS_CHANNEL
from floorops.application.use_cases.context import TraceContext
from floorops.application.use_cases.table_lifecycle import AssignTable, ReleaseTable
from floorops.domain.common.ids import TableId
from floorops.infrastructure.cache.redis_client import get_redis_client, ping_redis
from floorops.infrastructure.db.session import get_engine
from floorops.infrastructure.db.unit_of_work import SqlAlchemyUnitOfWork
from floorops.infrastructure.messaging.redis_publisher import RedisEventPublisher


def test_table_assignment_is_published_to_redis() -> None:
    if not ping_redis(timeout_seconds=0.5):
        pytest.skip("redis is not reachable")

    pubsub = get_redis_client().pubsub()
    pubsub.subscribe(FLOOR_EVENTS_CHANNEL)
    pubsub.get_message(timeout=1.0)

    table_id = TableId("tbl_001")
    trace_ctx = TraceContext(trace_id=None, request_id="req-redis")
    AssignTable(SqlAlchemyUnitOfWork(get_engine()), RedisEventPublisher()).execute(
        table_id, trace_ctx
    )
    try:
        envelope = None
        deadline = time.monotonic() + 3
        while envelope is None and time.monotonic() < deadline:
            message = pubsub.get_message(ignore_subscribe_messages=True, timeout=0.5)
            if message is not None:
                envelope = json.loads(message["data"])
    finally:
        ReleaseTable(SqlAlchemyUnitOfWork(get_engine()), RedisEventPublisher()).execute(
            table_id, trace_ctx
        )
        pubsub.close()

    assert envelope is not None
    assert envelope["event_type"] == "table.status_changed"
    assert envelope["request_id"] == "req-redis"
    assert envelope["payload"]["tableId"] == "tbl_001"
    assert envelope["payload"]["status"] == "OCCUPIED"
