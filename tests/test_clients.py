import time

import pytest
import requests

from kidsgoodslab.clients import amazon
from kidsgoodslab.clients.amazon import AmazonClient, image_url, product_url
from kidsgoodslab.clients.brave import BraveSearchClient, SearchError, extract_asin
from kidsgoodslab.clients.gemini import GeminiClient, GeminiError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text="", content=b""):
        self.status_code = status_code
        self.payload = payload or {}
        self.text = text
        self.content = content

    def json(self):
        return self.payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def _brave(**kwargs):
    return BraveSearchClient(api_key="test-key", min_interval=0, **kwargs)


def test_brave_search_parses_results(monkeypatch):
    seen = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        seen.update(params=params, headers=headers)
        return FakeResponse(payload={"web": {"results": [
            {"title": "メリーズ", "description": "人気", "url": "https://www.amazon.co.jp/dp/B0MERRIES1"},
        ]}})

    monkeypatch.setattr(requests, "get", fake_get)
    results = _brave().search("メリーズ", count=3)

    assert results[0].title == "メリーズ"
    assert results[0].as_context_line() == "- メリーズ: 人気"
    assert seen["params"] == {"q": "メリーズ", "count": 3, "search_lang": "jp", "country": "jp"}
    assert seen["headers"]["X-Subscription-Token"] == "test-key"


def test_brave_retries_after_rate_limit(monkeypatch):
    responses = [FakeResponse(429), FakeResponse(payload={"web": {"results": []}})]
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: responses.pop(0))
    assert _brave().search("メリーズ") == []
    assert responses == []


def test_brave_empty_payload(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(payload={}))
    assert _brave().search("メリーズ") == []


def test_brave_gives_up(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(500))
    with pytest.raises(SearchError):
        _brave(max_retries=2).search("メリーズ")


def test_brave_rate_limited_every_time(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(429))
    with pytest.raises(SearchError):
        _brave(max_retries=2).search("メリーズ")


def test_brave_no_wait_after_last_rate_limit(monkeypatch):
    sleeps = []
    monkeypatch.setattr(time, "sleep", sleeps.append)
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(429))
    with pytest.raises(SearchError):
        _brave(max_retries=3, rate_limit_wait=3.0).search("メリーズ")
    assert sleeps == [3.0, 6.0]


def test_extract_asin():
    assert extract_asin("https://www.amazon.co.jp/Merries/dp/B0MERRIES1/ref=sr_1_1") == "B0MERRIES1"
    assert extract_asin("https://www.amazon.co.jp/s?k=merries") is None


def test_amazon_urls():
    assert image_url("B0MERRIES1") == "https://m.media-amazon.com/images/P/B0MERRIES1.09.LZZZZZZZ.jpg"
    assert product_url("B0MERRIES1") == "https://www.amazon.co.jp/dp/B0MERRIES1?tag=kidsgoodslab-22"
    assert product_url(None, "メリーズ") == "https://www.amazon.co.jp/s?k=%E3%83%A1%E3%83%AA%E3%83%BC%E3%82%BA&tag=kidsgoodslab-22"


@pytest.mark.parametrize("text, expected", [
    ("<button>カートに入れる</button>", (True, "販売中")),
    ("お探しの商品は見つかりませんでした ¥", (False, "商品ページなし/取り扱い終了")),
    ("<html></html>", (False, "不明なページ状態")),
])
def test_check_product_page(monkeypatch, text, expected):
    monkeypatch.setattr(amazon.requests, "get", lambda *args, **kwargs: FakeResponse(text=text))
    assert AmazonClient().check_product_page("B0MERRIES1") == expected


def test_image_exists(monkeypatch):
    monkeypatch.setattr(requests, "head", lambda *args, **kwargs: FakeResponse(302))
    assert AmazonClient().image_exists("B0MERRIES1") is False
    monkeypatch.setattr(requests, "head", lambda *args, **kwargs: FakeResponse(200))
    assert AmazonClient().image_exists("B0MERRIES1") is True


def test_download_image(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *args, **kwargs: FakeResponse(content=b"jpeg"))
    assert AmazonClient().download_image("B0MERRIES1") == b"jpeg"

    def refuse(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", refuse)
    assert AmazonClient().download_image("B0MERRIES1") is None


class FakeUsage:
    prompt_token_count = 120
    candidates_token_count = 30


class FakeGenaiResponse:
    def __init__(self, text):
        self.text = text
        self.usage_metadata = FakeUsage()


class FakeModels:
    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls = 0

    def generate_content(self, model, contents, config):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return FakeGenaiResponse(outcome)


def _gemini(outcomes):
    client = GeminiClient(api_key="test-key")
    client.client = type("FakeClient", (), {"models": FakeModels(outcomes)})()
    return client


def test_gemini_call_tracks_tokens():
    gemini = _gemini(["本文", "はい"])
    assert gemini.call("prompt", label="ARTICLE") == "本文"
    assert gemini.ask_yes_no("質問") is True
    assert gemini.get_token_totals() == (240, 60)


def test_gemini_retries_transient_errors():
    gemini = _gemini([RuntimeError("503 UNAVAILABLE"), "本文"])
    assert gemini.call("prompt") == "本文"
    assert gemini.client.models.calls == 2


def test_gemini_raises_other_errors():
    gemini = _gemini([RuntimeError("400 INVALID_ARGUMENT")])
    with pytest.raises(RuntimeError):
        gemini.call("prompt")


def test_gemini_empty_text():
    with pytest.raises(GeminiError):
        _gemini([""]).call("prompt")


def test_ask_yes_no_negative():
    assert _gemini(["いいえ"]).ask_yes_no("質問") is False
