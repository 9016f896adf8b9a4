from __future__ import annotations

import json
import sys
from pathlib import Path

from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from event_recorder import RecordingPublisher

from floorops.api.main import app


def test_order_flow_is_persisted(publisher: RecordingPublisher) -> None:
    with TestClient(app) as client:
        not_seated = client.post(
            "/v1/orders",
            json={"tableId": "tbl_002", "lines": [{"itemId": "itm_001", "quantity": 1}]},
        )
        assert not_seated.status_code == 409
        assert not_seated.json()["error"]["code"] == "TABLE_NOT_OCCUPIED"

        assign_response = client.post("/v1/tables/tbl_002/assign")
        assert assign_response.status_code == 200
        assert assign_response.json()["status"] == "OCCUPIED"

        place_response = client.post(
            "/v1/orders",
            json={
                "tableId": "tbl_002",
                "lines": [
                    {"itemId": "itm_001", "quantity": 2},
                    {"itemId": "itm_002", "quantity": 1, "notes": "no ice"},
                ],
            },
            headers={"X-Waiter-Id": "w_db"},
        )
        assert place_response.status_code == 201
        order = place_response.json()
        assert order["total"]["amount"] == "34.50"
        order_id = order["orderId"]

        line_id = order["lines"][1]["lineId"]
        updated = client.put(f"/v1/orders/{order_id}/items/{line_id}", json={"quantity": 3})
        assert updated.status_code == 200
        assert updated.json()["order"]["total"]["amount"] == "41.50"
        assert updated.json()["line"]["notes"] == "no ice"

        removed = client.delete(f"/v1/orders/{order_id}/items/{line_id}")
        assert removed.status_code == 200
        assert removed.json()["total"]["amount"] == "31.00"

        last_line = removed.json()["lines"][0]["lineId"]
        undeletable = client.delete(f"/v1/orders/{order_id}/items/{last_line}")
        assert undeletable.status_code == 409
        assert undeletable.json()["error"]["code"] == "LAST_LINE_UNDELETABLE"

        for target in ("PREPARING", "READY", "DELIVERED"):
            step = client.put(f"/v1/orders/{order_id}/status", json={"status": target})
            assert step.status_code == 200
            assert step.json()["status"] == target

        get_response = client.get(f"/v1/orders/{order_id}")
        assert get_response.status_code == 200
        persisted = get_response.json()
        assert persisted["status"] == "DELIVERED"
        assert persisted["total"]["amountCents"] == 3100
        assert {line["status"] for line in persisted["lines"]} == {"DELIVERED"}

        listed = client.get("/v1/orders", params={"tableId": "tbl_002", "waiterId": "w_db"})
        assert [item["orderId"] for item in listed.json()["orders"]] == [order_id]

        release_response = client.post("/v1/tables/tbl_002/release")
        assert release_response.status_code == 200
        assert release_response.json()["status"] == "AVAILABLE"

        blocked_delete = client.delete("/v1/tables/tbl_002")
        assert blocked_delete.status_code == 409

    channels = {channel for channel, _ in publisher.messages}
    assert channels == {"events:floor"}
    first_order_event = next(
        json.loads(message)
        for _, message in publisher.messages
        if json.loads(message)["event_type"] == "order.created"
    )
    assert first_order_event["payload"]["orderId"] == order_id


def test_menu_lists_seeded_items() -> None:
    with TestClient(app) as client:
        response = client.get("/v1/menu/items", params={"availableOnly": "true"})

    assert response.status_code == 200
    item_ids = {item["itemId"] for item in response.json()["items"]}
    assert {"itm_001", "itm_002", "itm_003", "itm_005"} <= item_ids
    assert "itm_004" not in item_ids
