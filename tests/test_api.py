"""Tests for the customer-facing endpoints."""

from fastapi.testclient import TestClient

from cravin_orders.api.app import create_app


def _order_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "customer_name": "Asha",
        "lines": [
            {"item_id": 1, "quantity": 2, "instructions": "extra ginger"},
            {"item_id": 1, "sugar_free": True},
            {"item_id": 2},
        ],
    }
    payload.update(overrides)
    return payload


def test_health(container) -> None:
    client = TestClient(create_app(container))
    assert client.get("/health").json() == {"status": "ok"}


def test_menu_lists_items(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/menu", params={"available_only": "true"})

    assert response.status_code == 200
    items = response.json()["items"]
    assert [item["id"] for item in items] == [1, 2]
    assert items[0]["price"] == 2.5


def test_submit_order_and_track(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/orders", json=_order_payload())

    assert response.status_code == 201
    order = response.json()
    assert order["status"] == "sent"
    assert order["total_amount"] == 9.25
    assert len(order["items"]) == 3
    assert order["items"][0]["instructions"] == "extra ginger"

    tracking = client.get(f"/orders/{order['id']}")
    assert tracking.status_code == 200
    body = tracking.json()
    assert body["current_step"] == 0
    assert body["steps"] == ["Sent", "Brewing", "Ready"]


def test_submit_unavailable_item(container, order_repository) -> None:
    client = TestClient(create_app(container))

    response = client.post("/orders", json=_order_payload(lines=[{"item_id": 3}]))

    assert response.status_code == 409
    assert response.json()["detail"] == {"error": "item_unavailable", "item_id": 3}
    assert order_repository.orders == {}


def test_submit_empty_cart(container) -> None:
    client = TestClient(create_app(container))
    response = client.post("/orders", json=_order_payload(lines=[]))
    assert response.status_code == 400


def test_submit_partial_write(container, order_repository) -> None:
    order_repository.fail_items = True
    client = TestClient(create_app(container))

    response = client.post("/orders", json=_order_payload())

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["error"] == "partial_order"
    assert detail["order_id"] in order_repository.orders


def test_track_unknown_order(container) -> None:
    client = TestClient(create_app(container))
    assert client.get("/orders/missing").status_code == 404


def test_feedback(container) -> None:
    client = TestClient(create_app(container))

    ok = client.post("/feedback", json={"rating": 5, "comment": "Great"})
    bad = client.post("/feedback", json={"rating": 9})

    assert ok.status_code == 201
    assert bad.status_code == 422
    repository = container.feedback_service.repository
    assert repository.entries[0].customer_name == "Anonymous"
