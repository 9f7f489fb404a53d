"""
WebSocket tests for /ws.

The ``with TestClient(app)`` block runs the lifespan, which starts the
broadcast loop on the services installed by the ``catalog`` fixture.
"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from main import app


def test_connection_without_user_id_is_rejected(catalog):
    with TestClient(app) as client:
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws"):
                pass
    assert exc_info.value.code == 1008


def test_message_is_echoed_with_user_id(catalog):
    with TestClient(app) as client:
        with client.websocket_connect("/ws?userId=alice") as ws:
            ws.send_json({"message": "hello", "timestamp": "2024-01-01T10:00:00Z"})
            assert ws.receive_json() == {
                "userId": "alice",
                "message": "hello",
                "timestamp": "2024-01-01T10:00:00Z",
            }


def test_late_joiner_gets_history_then_live_messages(catalog):
    with TestClient(app) as client:
        with client.websocket_connect("/ws?userId=alice") as alice:
            alice.send_json({"message": "first", "timestamp": "1"})
            assert alice.receive_json()["message"] == "first"

            with client.websocket_connect("/ws?userId=bob") as bob:
                assert bob.receive_json() == {
                    "userId": "alice",
                    "message": "first",
                    "timestamp": "1",
                }

                bob.send_json({"message": "second", "timestamp": "2"})
                assert alice.receive_json()["userId"] == "bob"
                assert bob.receive_json()["message"] == "second"

                assert client.get("/health-check").json()["realtime_clients"] == 2


def test_malformed_frame_closes_connection(catalog):
    with TestClient(app) as client:
        with client.websocket_connect("/ws?userId=mallory") as ws:
            ws.send_text("not json")
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()
    assert exc_info.value.code == 1003
    assert catalog.services.hub.history() == []
