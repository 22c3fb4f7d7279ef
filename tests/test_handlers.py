import base64
import json

import pytest
import requests

from kidsgoodslab.handlers import contact, debug
from kidsgoodslab.handlers.contact import FormParseError, parse_form

WEBHOOK = "https://script.google.com/macros/s/abcdefghijklmnopqrstuvwxyz0123456789/exec"

MULTIPART = (
    "--XYZ\r\n"
    'Content-Disposition: form-data; name="name"\r\n\r\n'
    "山田花子\r\n"
    "--XYZ\r\n"
    'Content-Disposition: form-data; name="message"\r\n\r\n'
    "記事の内容について\r\n"
    "--XYZ--\r\n"
).encode("utf-8")


class FakeResponse:
    def __init__(self, status_code=200, text="ok"):
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = text


@pytest.fixture
def posted(monkeypatch):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json})
        return FakeResponse()

    monkeypatch.setattr(requests, "post", fake_post)
    return calls


def _event(method="POST", body="", content_type="application/x-www-form-urlencoded", b64=False):
    return {
        "httpMethod": method,
        "headers": {"content-type": content_type},
        "body": body,
        "isBase64Encoded": b64,
    }


def test_parse_form_urlencoded():
    fields = parse_form("name=%E5%B1%B1%E7%94%B0&tag=a&tag=b&empty=".encode(), "application/x-www-form-urlencoded")
    assert fields == {"name": "山田", "tag": "a", "empty": ""}


def test_parse_form_multipart():
    fields = parse_form(MULTIPART, "multipart/form-data; boundary=XYZ")
    assert fields == {"name": "山田花子", "message": "記事の内容について"}


def test_parse_form_multipart_unknown_charset(monkeypatch, posted):
    body = MULTIPART.replace(
        b'Content-Disposition: form-data; name="name"\r\n',
        b'Content-Disposition: form-data; name="name"\r\nContent-Type: text/plain; charset=x-bogus\r\n',
    )
    with pytest.raises(FormParseError):
        parse_form(body, "multipart/form-data; boundary=XYZ")

    monkeypatch.setenv("WEBHOOK_URL", WEBHOOK)
    event = _event(body=base64.b64encode(body).decode(), content_type="multipart/form-data; boundary=XYZ", b64=True)
    response = contact.handler(event, None)
    assert response["statusCode"] == 400
    assert posted == []


def test_parse_form_json():
    assert parse_form('{"email": "a@example.com"}'.encode(), "application/json; charset=utf-8") == {
        "email": "a@example.com"
    }
    with pytest.raises(FormParseError):
        parse_form(b"[1, 2]", "application/json")
    with pytest.raises(FormParseError):
        parse_form(b"{broken", "application/json")


def test_contact_forwards_and_redirects(monkeypatch, posted):
    monkeypatch.setenv("WEBHOOK_URL", WEBHOOK)
    body = base64.b64encode(MULTIPART).decode()

    response = contact.handler(_event(body=body, content_type="multipart/form-data; boundary=XYZ", b64=True), None)

    assert response["statusCode"] == 302
    assert response["headers"]["Location"] == "/contact-thanks.html"
    assert posted == [{"url": WEBHOOK, "json": {"name": "山田花子", "message": "記事の内容について"}}]


def test_contact_rejects_other_methods(monkeypatch, posted):
    monkeypatch.setenv("WEBHOOK_URL", WEBHOOK)
    response = contact.handler(_event(method="GET"), None)
    assert response["statusCode"] == 405
    assert response["headers"]["Allow"] == "POST"
    assert posted == []


def test_contact_without_webhook(monkeypatch, posted):
    monkeypatch.delenv("WEBHOOK_URL", raising=False)
    response = contact.handler(_event(body="name=a"), None)
    assert response["statusCode"] == 500
    assert json.loads(response["body"])["error"] == contact.MSG_NOT_CONFIGURED
    assert posted == []


def test_contact_empty_form(monkeypatch, posted):
    monkeypatch.setenv("WEBHOOK_URL", WEBHOOK)
    response = contact.handler(_event(body=""), None)
    assert response["statusCode"] == 400
    assert json.loads(response["body"])["error"] == contact.MSG_BAD_FORM


def test_contact_webhook_failure(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", WEBHOOK)
    monkeypatch.setattr(requests, "post", lambda *args, **kwargs: FakeResponse(500, "error"))
    response = contact.handler(_event(body="name=a"), None)
    assert response["statusCode"] == 500
    assert json.loads(response["body"])["error"] == contact.MSG_SEND_FAILED


def test_contact_webhook_unreachable(monkeypatch):
    monkeypatch.setenv("WEBHOOK_URL", WEBHOOK)

    def refuse(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "post", refuse)
    response = contact.handler(_event(body="name=a"), None)
    assert response["statusCode"] == 500


def test_contact_http_api_event(monkeypatch, posted):
    monkeypatch.setenv("WEBHOOK_URL", WEBHOOK)
    event = {
        "requestContext": {"http": {"method": "post"}},
        "headers": {"Content-Type": "application/json"},
        "body": '{"name": "a"}',
    }
    assert contact.handler(event, None)["statusCode"] == 302


def test_mask_url():
    assert debug.mask_url(None) == "not set"
    assert debug.mask_url(WEBHOOK) == WEBHOOK[:40] + "..."


def test_debug_without_webhook(monkeypatch, posted):
    monkeypatch.delenv("WEBHOOK_URL", raising=False)
    response = debug.handler({"httpMethod": "GET"}, None)
    body = json.loads(response["body"])
    assert response["statusCode"] == 200
    assert body["webhookUrl"] == "not set"
    assert body["testSent"] is False
    assert posted == []


def test_debug_sends_test_payload(monkeypatch, posted):
    monkeypatch.setenv("WEBHOOK_URL", WEBHOOK)
    body = json.loads(debug.handler({"httpMethod": "GET"}, None)["body"])
    assert body["testSent"] is True
    assert body["responseStatus"] == 200
    assert body["responseOk"] is True
    assert body["webhookUrl"].endswith("...")
    assert posted[0]["json"]["test"] is True
    assert "timestamp" in posted[0]["json"]


def test_debug_rejects_post():
    assert debug.handler({"httpMethod": "POST"}, None)["statusCode"] == 405
