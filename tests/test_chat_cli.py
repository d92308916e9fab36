from unittest.mock import MagicMock

import requests

import chat_cli
import config


def _response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    return response


def test_uses_configured_assistant_name():
    assert chat_cli.ASSISTANT_NAME == config.ASSISTANT_NAME


def test_send_message_returns_reply_and_keeps_session(monkeypatch):
    calls = []

    def fake_post(url, json, timeout):
        calls.append((url, json))
        return _response(200, {"response": "Check your certificate."})

    monkeypatch.setattr(chat_cli.requests, "post", fake_post)
    monkeypatch.setattr(chat_cli, "SESSION_ID", None)
    monkeypatch.setattr(chat_cli, "RESPONSE_STYLE", "concise")

    assert chat_cli.send_message("ssl?") == "Check your certificate."
    chat_cli.send_message("again")

    first, second = calls[0][1], calls[1][1]
    assert calls[0][0] == f"{chat_cli.BASE_URL}/api/chat"
    assert first["settings"] == {"responseStyle": "concise"}
    assert first["sessionId"] == second["sessionId"] == chat_cli.SESSION_ID


def test_send_message_reports_server_error(monkeypatch):
    monkeypatch.setattr(
        chat_cli.requests, "post",
        lambda *a, **kw: _response(500, {"error": "Failed to process message", "response": "Sorry"}),
    )
    assert chat_cli.send_message("hi") == "Error 500: Sorry"


def test_send_message_without_server(monkeypatch):
    def refuse(*args, **kwargs):
        raise requests.exceptions.ConnectionError()

    monkeypatch.setattr(chat_cli.requests, "post", refuse)
    assert chat_cli.send_message("hi").startswith("Cannot connect to backend")
