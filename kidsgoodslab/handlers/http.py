"""Helpers for serverless HTTP events."""

import base64
import json


def get_method(event: dict) -> str:
    """HTTP method from a REST (v1) or HTTP API (v2) event."""
    method = event.get("httpMethod") or (
        (event.get("requestContext") or {}).get("http") or {}
    ).get("method")
    return (method or "").upper()


def get_header(event: dict, name: str) -> str:
    headers = event.get("headers") or {}
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value or ""
    return ""


def get_body(event: dict) -> bytes:
    """Raw request body, base64-decoded when the event says so."""
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body.encode("utf-8") if isinstance(body, str) else body


def json_response(status_code: int, payload: dict, headers: dict | None = None) -> dict:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json; charset=utf-8", **(headers or {})},
        "body": json.dumps(payload, ensure_ascii=False, indent=2),
    }


def method_not_allowed(allowed: str) -> dict:
    return json_response(405, {"error": "Method Not Allowed"}, {"Allow": allowed})
