"""Tests for the webhook API and the Telegram channel."""

import asyncio
import json

import httpx
import pytest
from fastapi.testclient import TestClient

import api.services
from api.channels.base import ChannelProvider, ChannelResponse
from api.channels.telegram import TelegramChannel, parse_update, reply_markup
from api.main import app
from bot.menus import BACK_LABEL, build_keyboard
from bot.models import Forward, Reply, Turn
from bot.sessions import Mode
from bot.store import ANSWERS, COMMENTS, CURRENT_PROMPT, InMemoryDocumentStore

OPERATOR_ID = "100"


class FakeChannel(ChannelProvider):
    """Records every effect; fails sends to conversations listed in `failing`."""

    def __init__(self, failing=()):
        self.sent = []
        self.failing = set(failing)

    def _result(self, effect):
        self.sent.append(effect)
        if effect.conversation_id in self.failing:
            return ChannelResponse(success=False, error="blocked")
        return ChannelResponse(success=True, message_id=len(self.sent))

    async def send_message(self, reply):
        return self._result(reply)

    async def forward_message(self, forward):
        return self._result(forward)

    async def health_check(self):
        return True


def update(chat_id, text, message_id=1, username="tester"):
    return {
        "update_id": message_id,
        "message": {
            "message_id": message_id,
            "from": {"id": int(chat_id), "username": username},
            "chat": {"id": int(chat_id), "type": "private"},
            "text": text,
        },
    }


@pytest.fixture
def services(monkeypatch):
    fresh = api.services.Services()
    monkeypatch.setattr(api.services, "_services", fresh)
    store = InMemoryDocumentStore()
    asyncio.run(store.insert("admins", {"author_id": OPERATOR_ID}))
    asyncio.run(fresh.initialize(store=store, channel=FakeChannel()))
    return fresh


@pytest.fixture
def client(services):
    return TestClient(app)


# ── HTTP surface ──────────────────────────────────────

def test_root_endpoint(client):
    resp = client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["service"] == "Prompt Desk Bot"
    assert "version" in data


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["services"]["admins"] == 1


def test_metrics_endpoint(client):
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "promptdesk_turns_total" in resp.text


def test_webhook_start_sends_home_menu(client, services):
    resp = client.post("/telegram/webhook", json=update("200", "/start"))
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "handled": True, "effects": 1}

    [reply] = services.channel.sent
    assert reply.conversation_id == "200"
    assert reply.menu


def test_webhook_full_answer_flow(client, services):
    client.post("/telegram/webhook", json=update(OPERATOR_ID, "🖋 New question", 1))
    client.post("/telegram/webhook", json=update(OPERATOR_ID, "What is 6 x 7?", 2))
    client.post("/telegram/webhook", json=update("200", "✍️ Send an answer", 3))
    resp = client.post("/telegram/webhook", json=update("200", "42", 4, username="alice"))
    assert resp.json()["handled"] is True

    store = services.store
    [prompt] = asyncio.run(store.find_all(CURRENT_PROMPT))
    [answer] = asyncio.run(store.find_all(ANSWERS))
    assert answer["prompt_id"] == prompt["id"]
    assert answer["author_display_name"] == "alice"
    assert answer["source_message_id"] == 4


def test_webhook_ignores_non_text(client, services):
    resp = client.post("/telegram/webhook", json={
        "update_id": 9,
        "message": {"message_id": 9, "chat": {"id": 200}, "sticker": {}},
    })
    assert resp.json() == {"ok": True, "handled": False}
    assert services.channel.sent == []


def test_webhook_rejects_bad_secret(client, services):
    services.settings = services.settings.model_copy(update={"webhook_secret": "s3cret"})

    resp = client.post("/telegram/webhook", json=update("200", "/start"))
    assert resp.status_code == 401

    resp = client.post(
        "/telegram/webhook",
        json=update("200", "/start"),
        headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
    )
    assert resp.status_code == 200


def test_webhook_not_ready(monkeypatch):
    monkeypatch.setattr(api.services, "_services", api.services.Services())
    resp = TestClient(app).post("/telegram/webhook", json=update("200", "/start"))
    assert resp.status_code == 503


def test_webhook_failed_turn_is_acknowledged_without_effects(monkeypatch, flaky_store):
    fresh = api.services.Services()
    monkeypatch.setattr(api.services, "_services", fresh)
    asyncio.run(fresh.initialize(store=flaky_store, channel=FakeChannel()))
    client = TestClient(app)

    client.post("/telegram/webhook", json=update("200", "📖 Leave a comment", 1))
    sent_before = len(fresh.channel.sent)

    flaky_store.fail("insert", COMMENTS)
    resp = client.post("/telegram/webhook", json=update("200", "nice session", 2))
    assert resp.status_code == 200
    assert resp.json() == {"ok": False, "handled": True}
    assert len(fresh.channel.sent) == sent_before
    assert fresh.router.sessions.get("200").mode is Mode.COMMENT
    assert flaky_store.count(COMMENTS) == 0
    assert 'promptdesk_turns_total{outcome="failed"}' in client.get("/metrics").text

    # The kept session lets the next message through
    resp = client.post("/telegram/webhook", json=update("200", "nice session", 3))
    assert resp.json()["handled"] is True
    assert flaky_store.count(COMMENTS) == 1


def test_failed_delivery_does_not_stop_turn():
    channel = FakeChannel(failing={"200"})
    turn = Turn().forward("200", "300", 5).reply("200", "after").reply("201", "other")
    results = asyncio.run(channel.deliver(turn))
    assert [r.success for r in results] == [False, False, True]
    assert len(channel.sent) == 3


# ── Telegram translation ──────────────────────────────

class TestParseUpdate:
    def test_text_message(self):
        message = parse_update(update("200", "hello", 7, username="alice"))
        assert message.conversation_id == "200"
        assert message.author_id == "200"
        assert message.author_display_name == "alice"
        assert message.source_message_id == 7
        assert message.text == "hello"

    def test_missing_username(self):
        raw = update("200", "hello")
        del raw["message"]["from"]["username"]
        assert parse_update(raw).author_display_name == "Unknown User"

    def test_edited_message(self):
        raw = update("200", "fixed")
        raw["edited_message"] = raw.pop("message")
        assert parse_update(raw).text == "fixed"

    def test_non_text_updates(self):
        assert parse_update({"update_id": 1}) is None
        assert parse_update({"message": {"chat": {"id": 1}, "photo": []}}) is None


class TestKeyboards:
    def test_single_column_for_few_labels(self):
        assert build_keyboard(["a", "b", "c"], width=3) == [["a"], ["b"], ["c"]]

    def test_rows_for_many_labels(self):
        assert build_keyboard(list("abcdefg"), width=3) == [
            ["a", "b", "c"], ["d", "e", "f"], ["g"],
        ]
        assert build_keyboard(list("abcde"), width=2) == [["a", "b"], ["c", "d"], ["e"]]

    def test_wide_or_unit_width_is_single_column(self):
        assert build_keyboard(list("abcd"), width=4) == [["a"], ["b"], ["c"], ["d"]]
        assert build_keyboard(list("abcd"), width=1) == [["a"], ["b"], ["c"], ["d"]]

    def test_blank_labels_dropped(self):
        assert build_keyboard(["a", "", "  ", BACK_LABEL]) == [["a"], [BACK_LABEL]]

    def test_reply_markup(self):
        assert reply_markup([["a", "b"], ["c"]]) == {
            "keyboard": [[{"text": "a"}, {"text": "b"}], [{"text": "c"}]],
            "resize_keyboard": True,
        }


class TestTelegramChannel:
    def _channel(self, handler):
        return TelegramChannel("TOKEN", transport=httpx.MockTransport(handler))

    def test_send_message_payload(self):
        calls = []

        def handler(request):
            calls.append((request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 11}})

        channel = self._channel(handler)
        result = asyncio.run(channel.send_message(Reply("200", "hi", menu=[["x"]])))

        assert result.success and result.message_id == 11
        path, payload = calls[0]
        assert path == "/botTOKEN/sendMessage"
        assert payload["chat_id"] == "200"
        assert payload["text"] == "hi"
        assert payload["reply_markup"]["keyboard"] == [[{"text": "x"}]]

    def test_send_without_menu_has_no_markup(self):
        calls = []

        def handler(request):
            calls.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})

        asyncio.run(self._channel(handler).send_message(Reply("200", "plain")))
        assert "reply_markup" not in calls[0]

    def test_forward_message_payload(self):
        calls = []

        def handler(request):
            calls.append((request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 12}})

        result = asyncio.run(self._channel(handler).forward_message(Forward("100", "200", 4)))
        assert result.success
        assert calls == [(
            "/botTOKEN/forwardMessage",
            {"chat_id": "100", "from_chat_id": "200", "message_id": 4},
        )]

    def test_api_error_reported(self):
        def handler(request):
            return httpx.Response(200, json={"ok": False, "description": "chat not found"})

        result = asyncio.run(self._channel(handler).send_message(Reply("1", "x")))
        assert not result.success
        assert result.error == "chat not found"

    def test_http_error_reported(self):
        def handler(request):
            return httpx.Response(403, json={"ok": False})

        result = asyncio.run(self._channel(handler).send_message(Reply("1", "x")))
        assert not result.success

    def test_health_check(self):
        def handler(request):
            assert request.url.path == "/botTOKEN/getMe"
            return httpx.Response(200, json={"ok": True, "result": {}})

        assert asyncio.run(self._channel(handler).health_check()) is True
