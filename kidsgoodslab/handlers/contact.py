"""Contact form handler - forwards submissions to the webhook."""

import json
import logging
from email.parser import BytesParser
from email.policy import HTTP
from urllib.parse import parse_qs

import requests

from ..clients import WebhookClient
from ..config import ConfigError, require
from .http import get_body, get_header, get_method, json_response, method_not_allowed

logger = logging.getLogger(__name__)

THANKS_PAGE = "/contact-thanks.html"

MSG_NOT_CONFIGURED = "送信設定が完了していません。時間をおいて再度お試しください。"
MSG_BAD_FORM = "フォームの内容を読み取れませんでした。入力内容をご確認ください。"
MSG_SEND_FAILED = "送信に失敗しました。時間をおいて再度お試しください。"


class FormParseError(Exception):
    """Request body could not be read as a form."""
    pass


def _parse_multipart(body: bytes, content_type: str) -> dict:
    message = BytesParser(policy=HTTP).parsebytes(
        f"Content-Type: {content_type}\r\n\r\n".encode("utf-8") + body
    )
    if not message.is_multipart():
        raise FormParseError("multipart body without parts")

    fields = {}
    for part in message.iter_parts():
        name = part.get_param("name", header="content-disposition")
        if not name or part.get_filename():
            continue
        payload = part.get_payload(decode=True) or b""
        fields[name] = payload.decode(part.get_content_charset() or "utf-8")
    return fields


def parse_form(body: bytes, content_type: str) -> dict:
    """Form fields as a flat dict. Repeated urlencoded fields keep their first value."""
    media_type = content_type.split(";")[0].strip().lower()
    try:
        if media_type == "multipart/form-data":
            return _parse_multipart(body, content_type)
        text = body.decode("utf-8")
        if media_type == "application/json":
            data = json.loads(text)
            if not isinstance(data, dict):
                raise FormParseError("JSON body is not an object")
            return data
        return {key: values[0] for key, values in parse_qs(text, keep_blank_values=True).items()}
    except (UnicodeDecodeError, LookupError, ValueError) as e:
        raise FormParseError(str(e)) from e


def handler(event, context):
    """
    POST /api/contact

    Forwards the submitted form fields to WEBHOOK_URL as JSON and redirects
    to the thank-you page.
    """
    method = get_method(event)
    if method and method != "POST":
        return method_not_allowed("POST")

    try:
        webhook_url = require("WEBHOOK_URL")["WEBHOOK_URL"]
    except ConfigError as e:
        logger.warning(str(e))
        return json_response(500, {"error": MSG_NOT_CONFIGURED})

    try:
        fields = parse_form(get_body(event), get_header(event, "Content-Type"))
    except FormParseError as e:
        logger.warning(f"Unreadable contact form: {e}")
        return json_response(400, {"error": MSG_BAD_FORM})
    if not fields:
        return json_response(400, {"error": MSG_BAD_FORM})

    try:
        result = WebhookClient(webhook_url).post_json(fields)
    except requests.RequestException as e:
        logger.warning(f"Webhook request failed: {e}")
        return json_response(500, {"error": MSG_SEND_FAILED})

    if not result.ok:
        logger.warning(f"Webhook returned {result.status}: {result.text[:200]}")
        return json_response(500, {"error": MSG_SEND_FAILED})

    print(f"Contact form forwarded ({len(fields)} fields)", flush=True)
    return {
        "statusCode": 302,
        "headers": {"Location": THANKS_PAGE},
        "body": "",
    }
