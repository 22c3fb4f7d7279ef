"""Outbound webhook client for contact-form forwarding."""

from dataclasses import dataclass

import requests


@dataclass
class WebhookResponse:
    """Result of a webhook POST."""

    status: int
    ok: bool
    text: str


class WebhookClient:
    """POSTs JSON payloads to a configured webhook URL."""

    def __init__(self, url: str, timeout: int = 10):
        self.url = url
        self.timeout = timeout

    def post_json(self, payload: dict) -> WebhookResponse:
        """Send payload as JSON. Network errors propagate as requests.RequestException."""
        response = requests.post(
            self.url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        return WebhookResponse(
            status=response.status_code,
            ok=response.ok,
            text=response.text,
        )
