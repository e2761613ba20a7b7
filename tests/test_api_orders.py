"""
API tests for the order endpoints.
"""
import pytest

from voice_order.models import Notification, Order
from voice_order.services import session as session_store


TEST_DEVICE_ID = "device-abc"
FULL_ORDER = "order 2 kg of rice delivered to 12 MG Road by tomorrow evening pay by cash"


def _create(client, headers, voice_command=FULL_ORDER, **extra):
    response = client.post(
        "/api/v1/orders/voice",
        json={"voice_command": voice_command, **extra},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def pending_order(client, user_headers):
    return _create(client, user_headers)["order"]


class TestVoiceOrderCreation:
    def test_full_utterance_creates_pending_order(self, client, user_headers):
        data = _create(client, user_headers)

        order = data["order"]
        assert order["status"] == "pending"
        assert order["user_id"] == "user-1"
        assert order["total_amount"] == 240.0
        assert order["items"][0]["product_name"] == "Basmati Rice"
        assert order["delivery"]["address"] == "12 MG Road"
        assert order["delivery"]["time"] == "tomorrow evening"
        assert order["payment"] == {"method": "cash_on_delivery", "split_count": None, "status": "pending"}
        assert order["voice_order"]["confirmation"]["confirmed"] is False
        assert order["voice_order"]["processed_command"]["type"] == "order"
        assert order["offline_mode"]["is_offline"] is False
        assert [e["status"] for e in order["timeline"]] == ["pending"]

        assert data["requires_confirmation"] is True
        assert data["processed_command"]["confidence"] == 1.0
        assert data["voice_response"].startswith("Please confirm your order")

    def test_partial_order_asks_back(self, client, user_headers, db_session):
        data = _create(client, user_headers, "order 2 kg of rice")

        assert data["order"] is None
        assert data["requires_confirmation"] is False
        assert data["voice_response"] == "I understood you want to order 2 kg of rice. Is that correct?"
        assert db_session.query(Order).count() == 0

    def test_session_carries_context_between_turns(self, client, user_headers):
        first = _create(client, user_headers, "order rice", session_id="s1")
        assert first["order"] is None

        second = _create(client, user_headers, "2 kg deliver to 12 MG Road pay by cash", session_id="s1")
        assert second["order"]["items"][0]["product_name"] == "Basmati Rice"
        assert second["order"]["total_amount"] == 240.0

    def test_no_drops_the_stored_session(self, client, user_headers):
        _create(client, user_headers, "order rice", session_id="s1")
        assert len(session_store.SESSION_CACHE) == 1

        data = _create(client, user_headers, "no", session_id="s1")
        assert data["order"] is None
        assert session_store.SESSION_CACHE == {}

        second = _create(client, user_headers, "2 kg deliver to 12 MG Road pay by cash", session_id="s1")
        assert second["order"] is None

    def test_without_session_turns_are_independent(self, client, user_headers):
        _create(client, user_headers, "order rice")
        second = _create(client, user_headers, "2 kg deliver to 12 MG Road pay by cash")

        assert second["order"] is None

    def test_hindi_request(self, client, user_headers):
        data = _create(client, user_headers, language="hindi")
        assert data["order"]["voice_order"]["language"] == "hindi"
        assert "चावल" in data["voice_response"]

    def test_device_request_stores_placeholder(self, client, user_headers):
        data = _create(client, user_headers, "order 2 kg of rice", device_id=TEST_DEVICE_ID)

        assert data["order"]["items"] == []
        assert data["order"]["offline_mode"]["synced"] is False
        assert data["requires_confirmation"] is False

    def test_unsupported_language_rejected(self, client, user_headers):
        response = client.post(
            "/api/v1/orders/voice",
            json={"voice_command": FULL_ORDER, "language": "french"},
            headers=user_headers,
        )
        assert response.status_code == 422

    def test_blank_command_rejected(self, client, user_headers):
        response = client.post("/api/v1/orders/voice", json={"voice_command": "   "}, headers=user_headers)
        assert response.status_code == 422

    def test_missing_user_header(self, client):
        response = client.post("/api/v1/orders/voice", json={"voice_command": FULL_ORDER})
        assert response.status_code == 401

    def test_creation_notification_is_stored(self, client, user_headers, db_session):
        _create(client, user_headers)

        notification = db_session.query(Notification).one()
        assert notification.user_id == "user-1"
        assert notification.type == "order_status"
        assert notification.data["status"] == "pending"


class TestConfirmAndCancel:
    def test_yes_confirms(self, client, user_headers, pending_order):
        response = client.post(
            f"/api/v1/orders/{pending_order['id']}/confirm",
            json={"confirmation_command": "yes"},
            headers=user_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["order"]["status"] == "confirmed"
        assert data["order"]["voice_order"]["confirmation"]["confirmed"] is True
        assert data["order"]["voice_order"]["confirmation"]["confirmation_command"] == "yes"
        assert data["message"] == "Order confirmed"
        assert f"order number is {pending_order['id']}" in data["voice_response"]

    def test_no_is_rejected(self, client, user_headers, pending_order):
        response = client.post(
            f"/api/v1/orders/{pending_order['id']}/confirm",
            json={"confirmation_command": "no"},
            headers=user_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Order confirmation failed"

        detail = client.get(f"/api/v1/orders/{pending_order['id']}", headers=user_headers).json()
        assert detail["status"] == "pending"

    def test_confirm_twice_conflicts(self, client, user_headers, pending_order):
        url = f"/api/v1/orders/{pending_order['id']}/confirm"
        assert client.post(url, json={"confirmation_command": "yes"}, headers=user_headers).status_code == 200
        assert client.post(url, json={"confirmation_command": "yes"}, headers=user_headers).status_code == 409

    def test_other_user_cannot_confirm(self, client, pending_order):
        response = client.post(
            f"/api/v1/orders/{pending_order['id']}/confirm",
            json={"confirmation_command": "yes"},
            headers={"X-User-ID": "user-2"},
        )
        assert response.status_code == 404

    def test_cancel(self, client, user_headers, pending_order):
        response = client.post(
            f"/api/v1/orders/{pending_order['id']}/cancel",
            json={"reason": "Ordered by mistake"},
            headers=user_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["order"]["status"] == "cancelled"
        assert data["order"]["timeline"][-1]["note"] == "Ordered by mistake"
        assert data["message"] == "Order cancelled"

    def test_cancel_unknown_order(self, client, user_headers):
        response = client.post("/api/v1/orders/999/cancel", json={}, headers=user_headers)
        assert response.status_code == 404


class TestOrderReads:
    def test_get_detail(self, client, user_headers, pending_order):
        response = client.get(f"/api/v1/orders/{pending_order['id']}", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["id"] == pending_order["id"]

    def test_other_users_order_is_hidden(self, client, pending_order):
        response = client.get(f"/api/v1/orders/{pending_order['id']}", headers={"X-User-ID": "user-2"})
        assert response.status_code == 404

    def test_list_paginates(self, client, user_headers):
        for _ in range(3):
            _create(client, user_headers)

        data = client.get("/api/v1/orders?page_size=2", headers=user_headers).json()
        assert data["total"] == 3
        assert len(data["items"]) == 2
        assert data["has_next"] is True
        assert data["items"][0]["item_count"] == 1

        data = client.get("/api/v1/orders?page=2&page_size=2", headers=user_headers).json()
        assert len(data["items"]) == 1
        assert data["has_next"] is False

    def test_list_filters_by_status(self, client, user_headers, pending_order):
        data = client.get("/api/v1/orders?status=confirmed", headers=user_headers).json()
        assert data["total"] == 0

        data = client.get("/api/v1/orders?status=pending", headers=user_headers).json()
        assert data["total"] == 1

    def test_list_rejects_unknown_status(self, client, user_headers):
        response = client.get("/api/v1/orders?status=lost", headers=user_headers)
        assert response.status_code == 422


class TestMerchantStatus:
    def _confirm(self, client, user_headers, order_id):
        client.post(
            f"/api/v1/orders/{order_id}/confirm",
            json={"confirmation_command": "yes"},
            headers=user_headers,
        )

    def test_progression(self, client, user_headers, merchant_auth, pending_order):
        order_id = pending_order["id"]
        self._confirm(client, user_headers, order_id)

        for status in ("preparing", "ready", "out_for_delivery", "delivered"):
            response = client.patch(
                f"/api/v1/orders/{order_id}/status", json={"status": status}, auth=merchant_auth,
            )
            assert response.status_code == 200, response.text
            assert response.json()["status"] == status

        timeline = response.json()["timeline"]
        assert len(timeline) == 6
        assert timeline[-1]["updated_by"] == "testmerchant"

    def test_skipping_a_step_conflicts(self, client, user_headers, merchant_auth, pending_order):
        self._confirm(client, user_headers, pending_order["id"])
        response = client.patch(
            f"/api/v1/orders/{pending_order['id']}/status", json={"status": "delivered"}, auth=merchant_auth,
        )
        assert response.status_code == 409

    def test_merchant_cancels_with_note(self, client, merchant_auth, pending_order):
        response = client.patch(
            f"/api/v1/orders/{pending_order['id']}/status",
            json={"status": "cancelled", "note": "Out of stock"},
            auth=merchant_auth,
        )
        assert response.status_code == 200
        assert response.json()["timeline"][-1]["note"] == "Out of stock"

    def test_bad_credentials(self, client, pending_order):
        response = client.patch(
            f"/api/v1/orders/{pending_order['id']}/status",
            json={"status": "preparing"},
            auth=("testmerchant", "wrong"),
        )
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Basic"

    def test_unconfigured_password(self, client, merchant_auth, pending_order, monkeypatch):
        import voice_order.config as config_mod
        monkeypatch.setattr(config_mod, "MERCHANT_PASSWORD", "")

        response = client.patch(
            f"/api/v1/orders/{pending_order['id']}/status", json={"status": "preparing"}, auth=merchant_auth,
        )
        assert response.status_code == 503

    def test_unknown_order(self, client, merchant_auth):
        response = client.patch("/api/v1/orders/999/status", json={"status": "preparing"}, auth=merchant_auth)
        assert response.status_code == 404


class TestOfflineSync:
    def test_sync(self, client, user_headers, db_session):
        response = client.post(
            "/api/v1/orders/sync",
            json={
                "deviceId": TEST_DEVICE_ID,
                "orders": [
                    {"voiceCommand": "order 2 kg of rice", "language": "english"},
                    {"voice_command": "order 3 kg of saffron"},
                ],
            },
            headers={**user_headers, "X-Device-ID": TEST_DEVICE_ID},
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["synced_count"] == 1
        assert data["dropped_count"] == 1
        assert data["message"] == "1 orders synced successfully"
        assert data["orders"][0]["offline_mode"]["synced"] is True
        assert data["orders"][0]["offline_mode"]["device_id"] == TEST_DEVICE_ID

        notification = db_session.query(Notification).filter(Notification.type == "offline_sync").one()
        assert notification.data == {"order_ids": [data["orders"][0]["id"]]}

    def test_sync_fills_placeholder(self, client, user_headers):
        placeholder = _create(client, user_headers, "order 2 kg of rice", device_id=TEST_DEVICE_ID)["order"]

        data = client.post(
            "/api/v1/orders/sync",
            json={
                "device_id": TEST_DEVICE_ID,
                "orders": [{"voice_command": "order 2 kg of rice", "order_id": placeholder["id"]}],
            },
            headers={**user_headers, "X-Device-ID": TEST_DEVICE_ID},
        ).json()

        assert data["orders"][0]["id"] == placeholder["id"]
        assert data["orders"][0]["total_amount"] == 240.0

    def test_device_header_mismatch(self, client, user_headers):
        response = client.post(
            "/api/v1/orders/sync",
            json={"device_id": TEST_DEVICE_ID, "orders": []},
            headers={**user_headers, "X-Device-ID": "someone-else"},
        )
        assert response.status_code == 400

    def test_device_header_required(self, client, user_headers):
        response = client.post(
            "/api/v1/orders/sync",
            json={"device_id": TEST_DEVICE_ID, "orders": []},
            headers=user_headers,
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Device ID is required"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert "X-Request-ID" in response.headers
