from __future__ import annotations

import json

import httpx

from welth.services.notifications import EmailSender


def test_send_posts_to_resend():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "email_123"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    sender = EmailSender(api_key="re_test", sender="Welth <hi@example.com>", api_url="https://mail.test/emails", client=client)

    result = sender.send("user@example.com", "Hello", "<p>Hi</p>")

    assert result == {"success": True, "data": {"id": "email_123"}}
    request = seen[0]
    assert request.headers["Authorization"] == "Bearer re_test"
    assert json.loads(request.content) == {
        "from": "Welth <hi@example.com>",
        "to": ["user@example.com"],
        "subject": "Hello",
        "html": "<p>Hi</p>",
    }


def test_send_reports_http_errors():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(500, json={})))
    sender = EmailSender(api_key="re_test", api_url="https://mail.test/emails", client=client)

    result = sender.send(["a@example.com"], "Hello", "<p>Hi</p>")

    assert result["success"] is False


def test_send_without_api_key_is_skipped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    sender = EmailSender(api_key="", client=httpx.Client(transport=httpx.MockTransport(handler)))

    assert sender.send("a@example.com", "Hello", "x") == {
        "success": False,
        "error": "Email delivery is not configured",
    }
