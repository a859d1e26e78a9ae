"""
Sentiment scorer tests.

- lexicon fallback is deterministic and clamped
- remote classifier scores are combined positive*1 + neutral*0.5
- every remote failure mode degrades to the lexicon score
"""

import json

import httpx
import pytest

from moodify import config, sentiment
from moodify.sentiment import classify_sentiment, score_sentiment, score_sentiment_local

HAPPY_TEXT = "I love this, it's the best day, so happy"
SAD_TEXT = "I hate this, it's the worst, so sad"


# ---------------------------------------------------------------------------
# Lexicon fallback
# ---------------------------------------------------------------------------

class TestLexiconScore:

    def test_three_positive_words(self):
        assert score_sentiment_local(HAPPY_TEXT) == pytest.approx(0.65)
        assert classify_sentiment(score_sentiment_local(HAPPY_TEXT)) == "positive"

    def test_three_negative_words(self):
        assert score_sentiment_local(SAD_TEXT) == pytest.approx(0.35)
        assert classify_sentiment(score_sentiment_local(SAD_TEXT)) == "negative"

    def test_empty_text_is_neutral(self):
        assert score_sentiment_local("") == 0.5
        assert score_sentiment_local("   ") == 0.5

    def test_case_insensitive(self):
        assert score_sentiment_local("HAPPY") == pytest.approx(0.55)

    def test_substring_match(self):
        # "goodness" contains "good"
        assert score_sentiment_local("goodness me") == pytest.approx(0.55)

    def test_each_word_counts_once(self):
        assert score_sentiment_local("happy happy happy") == pytest.approx(0.55)

    def test_clamped_at_one(self):
        text = " ".join(sentiment.POSITIVE_WORDS)
        assert score_sentiment_local(text) == 1.0

    def test_clamped_at_zero(self):
        text = " ".join(sentiment.NEGATIVE_WORDS)
        assert score_sentiment_local(text) == 0.0

    def test_mixed_words_cancel(self):
        assert score_sentiment_local("good and bad") == pytest.approx(0.5)

    def test_deterministic(self):
        assert score_sentiment_local(HAPPY_TEXT) == score_sentiment_local(HAPPY_TEXT)


class TestClassify:

    @pytest.mark.parametrize("score,label", [
        (0.61, "positive"), (0.6, "neutral"), (0.5, "neutral"), (0.4, "neutral"), (0.39, "negative"),
    ])
    def test_thresholds(self, score, label):
        assert classify_sentiment(score) == label


# ---------------------------------------------------------------------------
# Remote classifier
# ---------------------------------------------------------------------------

LABELS = [
    {"label": "positive", "score": 0.8},
    {"label": "neutral", "score": 0.1},
    {"label": "negative", "score": 0.1},
]


class TestRemoteScore:

    @pytest.fixture(autouse=True)
    def api_key(self, monkeypatch):
        monkeypatch.setattr(config, "HUGGINGFACE_API_KEY", "hf-test")

    @pytest.mark.asyncio
    async def test_batched_response(self, mock_http):
        seen = mock_http(sentiment, "_http_client", lambda req: httpx.Response(200, json=[LABELS]))
        assert await score_sentiment("nice weather") == pytest.approx(0.85)
        assert len(seen) == 1
        assert seen[0].method == "POST"
        assert seen[0].headers["authorization"] == "Bearer hf-test"
        assert json.loads(seen[0].content) == {"inputs": "nice weather"}

    @pytest.mark.asyncio
    async def test_flat_response(self, mock_http):
        mock_http(sentiment, "_http_client", lambda req: httpx.Response(200, json=LABELS))
        assert await score_sentiment("nice weather") == pytest.approx(0.85)

    @pytest.mark.asyncio
    async def test_labels_are_case_insensitive(self, mock_http):
        payload = [{"label": "NEGATIVE", "score": 0.9}, {"label": "Neutral", "score": 0.1}]
        mock_http(sentiment, "_http_client", lambda req: httpx.Response(200, json=payload))
        assert await score_sentiment("meh") == pytest.approx(0.05)

    @pytest.mark.asyncio
    async def test_server_error_falls_back(self, mock_http):
        mock_http(sentiment, "_http_client", lambda req: httpx.Response(503, json={"error": "loading"}))
        assert await score_sentiment(HAPPY_TEXT) == pytest.approx(0.65)

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self, mock_http):
        def boom(request):
            raise httpx.ReadTimeout("timed out", request=request)

        mock_http(sentiment, "_http_client", boom)
        assert await score_sentiment(SAD_TEXT) == pytest.approx(0.35)

    @pytest.mark.asyncio
    async def test_connection_error_falls_back(self, mock_http):
        def boom(request):
            raise httpx.ConnectError("no route", request=request)

        mock_http(sentiment, "_http_client", boom)
        assert await score_sentiment(HAPPY_TEXT) == pytest.approx(0.65)

    @pytest.mark.asyncio
    async def test_non_json_body_falls_back(self, mock_http):
        mock_http(sentiment, "_http_client", lambda req: httpx.Response(200, text="<html>oops</html>"))
        assert await score_sentiment(HAPPY_TEXT) == pytest.approx(0.65)

    @pytest.mark.asyncio
    async def test_unknown_labels_fall_back(self, mock_http):
        payload = [[{"label": "LABEL_0", "score": 0.9}]]
        mock_http(sentiment, "_http_client", lambda req: httpx.Response(200, json=payload))
        assert await score_sentiment(SAD_TEXT) == pytest.approx(0.35)

    @pytest.mark.asyncio
    async def test_unexpected_shape_falls_back(self, mock_http):
        mock_http(sentiment, "_http_client", lambda req: httpx.Response(200, json={"error": "nope"}))
        assert await score_sentiment("plain words") == 0.5


class TestNoCredential:

    @pytest.mark.asyncio
    async def test_no_key_skips_remote_call(self, mock_http):
        seen = mock_http(sentiment, "_http_client", lambda req: httpx.Response(200, json=[LABELS]))
        assert await score_sentiment(HAPPY_TEXT) == pytest.approx(0.65)
        assert seen == []
