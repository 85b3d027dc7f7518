import base64

import pytest
import requests

from domain.errors import ImageGenerationError
from services.image_generation import (
    BACKGROUND_PROMPT_PREFIX,
    MAX_PROMPT_LENGTH,
    NEGATIVE_PROMPT,
    HttpImageGenerator,
    build_background_prompt,
    classify_exception,
    classify_status,
    image_size_for_aspect,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b""):
        self.status_code = status_code
        self._payload = payload
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(response=self)


class FakeSession:
    def __init__(self, post_result, get_result=None):
        self.post_result = post_result
        self.get_result = get_result
        self.posts = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.posts.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if isinstance(self.post_result, Exception):
            raise self.post_result
        return self.post_result

    def get(self, url, timeout=None):
        return self.get_result


def _generator(session):
    return HttpImageGenerator(base_url="https://images.test/v1", api_key="k", model="m", timeout=5, session=session)


def test_size_by_aspect():
    assert image_size_for_aspect(1024, 768) == "1792x1024"
    assert image_size_for_aspect(768, 1024) == "1024x1792"
    assert image_size_for_aspect(1000, 1000) == "1024x1024"
    assert image_size_for_aspect(1300, 1000) == "1024x1024"


def test_background_prompt_prefix_and_truncation():
    prompt = build_background_prompt("a ruined castle at dusk")
    assert prompt.startswith(BACKGROUND_PROMPT_PREFIX)
    assert prompt.endswith("a ruined castle at dusk")
    assert len(build_background_prompt("x" * 5000)) == MAX_PROMPT_LENGTH


@pytest.mark.parametrize(
    "status, kind",
    [(429, "rate_limited"), (401, "auth"), (403, "auth"), (500, "unavailable"), (503, "unavailable"), (400, "bad_request"), (418, "unknown")],
)
def test_status_classification(status, kind):
    assert classify_status(status) == kind


def test_exception_classification():
    assert classify_exception(requests.Timeout()) == "timeout"
    assert classify_exception(requests.ConnectionError("Connection aborted.")) == "timeout"
    assert classify_exception(requests.ConnectionError("Connection refused")) == "unavailable"
    assert classify_exception(RuntimeError("boom")) == "unknown"


def test_generate_downloads_url_result():
    session = FakeSession(
        FakeResponse(payload={"data": [{"url": "https://cdn.test/img.png"}]}),
        FakeResponse(content=b"png-bytes"),
    )
    assert _generator(session).generate("castle", 1024, 768) == b"png-bytes"
    sent = session.posts[0]
    assert sent["url"] == "https://images.test/v1/images/generations"
    assert sent["json"]["size"] == "1792x1024"
    assert sent["json"]["model"] == "m"
    assert sent["headers"]["Authorization"] == "Bearer k"


def test_negative_prompt_is_sent_only_when_given():
    gen = HttpImageGenerator(api_key="k", session=FakeSession(None))
    assert "negative_prompt" not in gen.build_payload("castle", 1024, 768)
    payload = gen.build_payload("castle", 1024, 768, NEGATIVE_PROMPT)
    assert payload["negative_prompt"] == NEGATIVE_PROMPT

    session = FakeSession(FakeResponse(payload={"data": [{"b64_json": base64.b64encode(b"raw").decode()}]}))
    _generator(session).generate("castle", 1024, 768, negative_prompt="text, watermark")
    assert session.posts[0]["json"]["negative_prompt"] == "text, watermark"


def test_generate_decodes_inline_result():
    payload = {"data": [{"b64_json": base64.b64encode(b"raw").decode()}]}
    assert _generator(FakeSession(FakeResponse(payload=payload))).generate("castle", 768, 1024) == b"raw"


def test_http_errors_are_classified_without_transport_detail():
    with pytest.raises(ImageGenerationError) as exc:
        _generator(FakeSession(FakeResponse(status_code=429))).generate("castle", 1024, 768)
    assert exc.value.kind == "rate_limited"
    assert exc.value.status_code == 429
    assert exc.value.retryable
    assert "429" not in exc.value.message


def test_timeouts_are_classified():
    with pytest.raises(ImageGenerationError) as exc:
        _generator(FakeSession(requests.Timeout("read timed out"))).generate("castle", 1024, 768)
    assert exc.value.kind == "timeout"


def test_missing_image_data_is_unknown():
    with pytest.raises(ImageGenerationError) as exc:
        _generator(FakeSession(FakeResponse(payload={"data": []}))).generate("castle", 1024, 768)
    assert exc.value.kind == "unknown"


def test_missing_api_key_is_auth_error():
    gen = HttpImageGenerator(base_url="https://images.test/v1", api_key="", session=FakeSession(None))
    with pytest.raises(ImageGenerationError) as exc:
        gen.generate("castle", 1024, 768)
    assert exc.value.kind == "auth"
    assert not exc.value.retryable
