"""Tests for the HTTP API: conversation routes, turn route, error envelope."""

from __future__ import annotations

import base64
from types import SimpleNamespace
from unittest.mock import patch

from api.features.chat.builder import DOCX_MIME_TYPE

CONVERSATIONS = "/api/v1/conversations/"
TURN = "/api/v1/chat/turn"


def _create(client, space=1, **extra):
    resp = client.post(CONVERSATIONS, json={"space": space, **extra})
    assert resp.status_code == 200
    return resp.json()["data"]["conversation"]


def _detail(client, conversation_id):
    resp = client.get(CONVERSATIONS, params={"id": conversation_id})
    assert resp.status_code == 200
    return resp.json()["data"]


# ── health ────────────────────────────────────────────────────────────────────

class TestHealth:
    def test_root_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_feature_health(self, client):
        for path in ("/api/v1/conversations/health", "/api/v1/chat/health"):
            resp = client.get(path)
            assert resp.status_code == 200
            assert resp.json()["data"]["status"] == "healthy"


# ── conversations ─────────────────────────────────────────────────────────────

class TestConversations:
    def test_create_and_list(self, client):
        conv = _create(client, space=2)
        assert conv["title"] == "New chat"
        assert conv["space"] == 2

        listed = client.get(CONVERSATIONS, params={"space": 2}).json()["data"]["conversations"]
        assert [c["id"] for c in listed] == [conv["id"]]
        assert client.get(CONVERSATIONS, params={"space": 1}).json()["data"]["conversations"] == []

    def test_list_defaults_to_first_space(self, client):
        conv = _create(client)
        listed = client.get(CONVERSATIONS).json()["data"]["conversations"]
        assert [c["id"] for c in listed] == [conv["id"]]

    def test_create_with_title(self, client):
        assert _create(client, title="Groceries")["title"] == "Groceries"

    def test_invalid_space(self, client):
        resp = client.post(CONVERSATIONS, json={"space": 9})
        assert resp.status_code == 400
        assert resp.json()["error_code"] == "VALIDATION_ERROR"

        resp = client.get(CONVERSATIONS, params={"space": 0})
        assert resp.status_code == 400

    def test_get_by_query_and_path(self, client):
        conv = _create(client)
        by_query = _detail(client, conv["id"])
        by_path = client.get(f"{CONVERSATIONS}{conv['id']}").json()["data"]
        assert by_query == by_path
        assert by_query["conversation"]["id"] == conv["id"]
        assert by_query["messages"] == []

    def test_get_unknown(self, client):
        resp = client.get(CONVERSATIONS, params={"id": "missing"})
        assert resp.status_code == 404
        body = resp.json()
        assert body["error_code"] == "CONVERSATION_NOT_FOUND"
        assert "missing" in body["error"]

    def test_delete_by_body(self, client):
        conv = _create(client)
        resp = client.request("DELETE", CONVERSATIONS, json={"conversation_id": conv["id"]})
        assert resp.status_code == 200
        assert resp.json()["data"] == {"ok": True}
        assert client.get(f"{CONVERSATIONS}{conv['id']}").status_code == 404

    def test_delete_by_camel_case_body(self, client):
        conv = _create(client)
        resp = client.request("DELETE", CONVERSATIONS, json={"conversationId": conv["id"]})
        assert resp.status_code == 200

    def test_delete_by_query(self, client):
        conv = _create(client)
        assert client.delete(CONVERSATIONS, params={"id": conv["id"]}).status_code == 200

    def test_delete_by_path(self, client):
        conv = _create(client)
        assert client.delete(f"{CONVERSATIONS}{conv['id']}").status_code == 200

    def test_delete_without_id(self, client):
        resp = client.delete(CONVERSATIONS)
        assert resp.status_code == 400
        assert resp.json()["error_code"] == "VALIDATION_ERROR"

    def test_delete_unknown(self, client):
        resp = client.delete(f"{CONVERSATIONS}missing")
        assert resp.status_code == 404


# ── turns ─────────────────────────────────────────────────────────────────────

class TestTurn:
    def test_first_message_sets_title(self, client, completion):
        conv = _create(client)

        resp = client.post(TURN, json={"conversation_id": conv["id"], "text": "Hi"})

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["output"] == "Hi! How can I help?"
        assert data["assistant_message"]["role"] == "assistant"
        assert data["assistant_message"]["conversation_id"] == conv["id"]

        detail = _detail(client, conv["id"])
        assert detail["conversation"]["title"] == "Hi"
        assert [(m["role"], m["text"]) for m in detail["messages"]] == [
            ("user", "Hi"),
            ("assistant", "Hi! How can I help?"),
        ]
        assert len(completion.calls) == 1

    def test_camel_case_conversation_id(self, client):
        conv = _create(client)
        resp = client.post(TURN, json={"conversationId": conv["id"], "text": "Hi"})
        assert resp.status_code == 200

    def test_turn_moves_conversation_to_top(self, client):
        first = _create(client)
        second = _create(client)
        client.post(TURN, json={"conversation_id": first["id"], "text": "bump"})

        listed = client.get(CONVERSATIONS, params={"space": 1}).json()["data"]["conversations"]
        assert [c["id"] for c in listed] == [first["id"], second["id"]]

    def test_empty_turn(self, client, completion):
        conv = _create(client)

        resp = client.post(TURN, json={"conversation_id": conv["id"], "text": "  "})

        assert resp.status_code == 400
        assert resp.json()["error_code"] == "EMPTY_TURN"
        assert completion.calls == []
        assert _detail(client, conv["id"])["messages"] == []

    def test_unknown_conversation(self, client, completion):
        resp = client.post(TURN, json={"conversation_id": "missing", "text": "Hi"})
        assert resp.status_code == 404
        assert resp.json()["error_code"] == "CONVERSATION_NOT_FOUND"
        assert completion.calls == []

    def test_missing_conversation_id(self, client):
        resp = client.post(TURN, json={"text": "Hi"})
        assert resp.status_code == 400
        assert resp.json()["error_code"] == "VALIDATION_ERROR"

    def test_malformed_body(self, client):
        resp = client.post(TURN, json={"conversation_id": "x", "images": "not-a-list"})
        assert resp.status_code == 400
        assert resp.json()["error_code"] == "VALIDATION_ERROR"

    def test_upstream_failure(self, client, completion):
        completion.error = RuntimeError("Incorrect API key provided")
        conv = _create(client)

        resp = client.post(TURN, json={"conversation_id": conv["id"], "text": "Hi"})

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Incorrect API key provided",
            "error_code": "UPSTREAM_ERROR",
        }
        messages = _detail(client, conv["id"])["messages"]
        assert [(m["role"], m["text"]) for m in messages] == [("user", "Hi")]

    def test_missing_api_key(self, client, completion):
        completion.is_configured = False
        conv = _create(client)

        resp = client.post(TURN, json={"conversation_id": conv["id"], "text": "Hi"})

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "OPENAI_API_KEY is not configured",
            "error_code": "UPSTREAM_ERROR",
        }
        assert _detail(client, conv["id"])["messages"] == []

    def test_non_string_fields_rejected(self, client, completion):
        conv = _create(client)
        for body in (
            {"text": 123},
            {"text": "Hi", "images": [42]},
            {"text": "Hi", "files": [{"name": "a.pdf"}]},
        ):
            resp = client.post(TURN, json={"conversation_id": conv["id"], **body})
            assert resp.status_code == 400
            assert resp.json()["error_code"] == "VALIDATION_ERROR"
        assert completion.calls == []
        assert _detail(client, conv["id"])["messages"] == []

    def test_pdf_forwarded_as_file(self, client, completion):
        conv = _create(client)
        pdf = {"name": "r.pdf", "type": "application/pdf", "data": "data:application/pdf;base64,JVBE"}

        resp = client.post(TURN, json={"conversation_id": conv["id"], "files": [pdf]})

        assert resp.status_code == 200
        assert completion.calls[0][-1]["content"] == [
            {"type": "input_file", "file_data": "JVBE", "filename": "r.pdf"}
        ]
        assert _detail(client, conv["id"])["conversation"]["title"] == "New chat"

    def test_docx_text_forwarded(self, client, completion):
        conv = _create(client)
        docx = {
            "name": "notes.docx",
            "type": DOCX_MIME_TYPE,
            "data": base64.b64encode(b"PK\x03\x04").decode("utf-8"),
        }

        with patch(
            "api.features.chat.builder.mammoth.extract_raw_text",
            return_value=SimpleNamespace(value="Meeting notes"),
        ):
            resp = client.post(
                TURN, json={"conversation_id": conv["id"], "text": "Summarize", "files": [docx]}
            )

        assert resp.status_code == 200
        assert completion.calls[0][-1]["content"] == [
            {"type": "input_text", "text": "Summarize"},
            {"type": "input_text", "text": "Contents of file notes.docx:\nMeeting notes"},
        ]

    def test_empty_docx_rejected_after_user_message_stored(self, client, completion):
        conv = _create(client)
        docx = {"name": "blank.docx", "type": DOCX_MIME_TYPE, "data": "UEsDBA=="}

        with patch(
            "api.features.chat.builder.mammoth.extract_raw_text",
            return_value=SimpleNamespace(value="  "),
        ):
            resp = client.post(TURN, json={"conversation_id": conv["id"], "files": [docx]})

        assert resp.status_code == 400
        assert resp.json()["error"] == "File blank.docx is empty or has no text"
        assert completion.calls == []
        assert [m["role"] for m in _detail(client, conv["id"])["messages"]] == ["user"]

    def test_unsupported_attachment(self, client, completion):
        conv = _create(client)
        sheet = {"name": "a.xlsx", "type": "application/vnd.ms-excel", "data": "AAAA"}

        resp = client.post(TURN, json={"conversation_id": conv["id"], "files": [sheet]})

        assert resp.status_code == 400
        assert resp.json()["error_code"] == "UNSUPPORTED_ATTACHMENT"
        assert completion.calls == []

    def test_deleted_conversation_rejects_turns(self, client, completion):
        conv = _create(client)
        client.delete(f"{CONVERSATIONS}{conv['id']}")

        resp = client.post(TURN, json={"conversation_id": conv["id"], "text": "Hi"})

        assert resp.status_code == 404
        assert completion.calls == []
