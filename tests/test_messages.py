"""
Message routes and the chat bookkeeping done on every insert.
"""

from datetime import datetime, timezone
from unittest.mock import patch

from services.errors import InternalError
from services import store


def _parse(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestSendMessage:

    def test_unknown_chat_is_404(self, client):
        resp = client.post("/messages", json={"chatId": "ghost-chat", "content": "hi"})
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "Chat not found"
        assert body["details"]["chatId"] == "ghost-chat"

    def test_each_post_updates_chat(self, client, make_contact, post_message):
        chat_id = make_contact()["chatId"]
        ids = []
        for n in range(1, 4):
            ids.append(post_message(chat_id, f"msg {n}")["id"])
            chat = store.get_chat(chat_id)
            assert chat.unread_count == n
            assert chat.last_message == ids[-1]
            assert chat.message_ids == ids

    def test_response_shape(self, client, make_contact, post_message):
        chat_id = make_contact()["chatId"]
        message = post_message(chat_id, "  hola  ", isContactMessage=False)
        assert message["chatId"] == chat_id
        assert message["content"] == "hola"
        assert message["isContactMessage"] is False
        assert message["timestamp"].endswith("Z")
        assert message["createdAt"]

    def test_direction_defaults_to_a_bool(self, client, make_contact, post_message):
        chat_id = make_contact()["chatId"]
        with patch("models.random.random", return_value=0.9):
            assert post_message(chat_id)["isContactMessage"] is True
        with patch("models.random.random", return_value=0.1):
            assert post_message(chat_id)["isContactMessage"] is False

    def test_iso_timestamp_round_trips(self, client, make_contact, post_message):
        chat_id = make_contact()["chatId"]
        sent = post_message(chat_id, timestamp="2024-05-01T12:30:15.250+02:00")

        fetched = client.get(f"/messages/chat/{chat_id}").json()["data"][0]
        assert fetched["id"] == sent["id"]
        expected = datetime(2024, 5, 1, 10, 30, 15, 250000, tzinfo=timezone.utc)
        assert _parse(fetched["timestamp"]) == expected

    def test_missing_content_is_400(self, client, make_contact):
        chat_id = make_contact()["chatId"]
        resp = client.post("/messages", json={"chatId": chat_id})
        assert resp.status_code == 400
        assert [d["field"] for d in resp.json()["details"]] == ["content"]

    def test_chat_update_failure_keeps_message(self, client, make_contact):
        chat_id = make_contact()["chatId"]
        with patch("services.store.save_chat", side_effect=InternalError("Failed to save chat")):
            resp = client.post("/messages", json={"chatId": chat_id, "content": "lost counter"})
        assert resp.status_code == 201
        message_id = resp.json()["data"]["id"]

        assert store.get_message(message_id) is not None
        chat = store.get_chat(chat_id)
        assert chat.unread_count == 0
        assert chat.message_ids == []


class TestChatMessages:

    def test_lists_oldest_first_and_marks_read(self, client, make_contact, post_message):
        chat_id = make_contact()["chatId"]
        ids = [post_message(chat_id, text)["id"] for text in ("one", "two", "three")]

        body = client.get(f"/messages/chat/{chat_id}").json()
        assert body["count"] == 3
        assert body["chatId"] == chat_id
        assert [m["id"] for m in body["data"]] == ids
        assert store.get_chat(chat_id).unread_count == 0

    def test_empty_chat(self, client, make_contact):
        chat_id = make_contact()["chatId"]
        body = client.get(f"/messages/chat/{chat_id}").json()
        assert body == {"count": 0, "chatId": chat_id, "data": []}

    def test_unknown_chat_is_404(self, client):
        resp = client.get("/messages/chat/nope")
        assert resp.status_code == 404
        assert resp.json()["details"] == {"chatId": "nope"}
