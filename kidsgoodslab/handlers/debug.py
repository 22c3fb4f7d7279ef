"""Webhook diagnostics handler."""

import os
from datetime import datetime, timezone

import requests

from ..clients import WebhookClient
from .http import get_method, json_response, method_not_allowed


def mask_url(url: str | None) -> str:
    return f"{url[:40]}..." if url else "not set"


def handler(event, context):
    """
    GET /api/debug

    Reports whether WEBHOOK_URL is set and sends a test payload to it.
    """
    method = get_method(event)
    if method and method != "GET":
        return method_not_allowed("GET")

    webhook_url = os.getenv("WEBHOOK_URL")
    if not webhook_url:
        return json_response(200, {
            "webhookUrl": mask_url(webhook_url),
            "testSent": False,
            "error": "WEBHOOK_URL not set",
        })

    payload = {"test": True, "timestamp": datetime.now(timezone.utc).isoformat()}
    try:
        result = WebhookClient(webhook_url).post_json(payload)
    except requests.RequestException as e:
        return json_response(200, {
            "webhookUrl": mask_url(webhook_url),
            "testSent": False,
            "error": str(e),
        })

    return json_response(200, {
        "webhookUrl": mask_url(webhook_url),
        "testSent": True,
        "responseStatus": result.status,
        "responseOk": result.ok,
        "responseText": result.text[:200],
    })
