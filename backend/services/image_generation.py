"""
Image-generation collaborator.

The compositor never talks to a model directly; the card pipeline asks an
``ImageGenerator`` for background bytes. ``HttpImageGenerator`` speaks the
OpenAI-style ``/images/generations`` endpoint over requests and folds every
transport or status failure into an ``ImageGenerationError``.
"""

from __future__ import annotations

import base64
import logging
from typing import Optional, Protocol, Tuple

import requests

from domain.errors import ImageGenerationError
from settings import settings

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DOWNLOAD_TIMEOUT_SEC = 30.0
MAX_PROMPT_LENGTH = 1000

BACKGROUND_PROMPT_PREFIX = (
    "photorealistic background, cinematic lighting, epic atmosphere, wide angle view, "
    "detailed environment, no people, no faces, no characters, "
)
NEGATIVE_PROMPT = (
    "person, face, human, character, portrait, figure, body, hand, eye, cartoon, anime, "
    "illustration, childish, toy-like, flat colors, simple shading, low quality, blurry, "
    "distorted, ugly, deformed, text, watermark"
)

SIZE_LANDSCAPE = "1792x1024"
SIZE_PORTRAIT = "1024x1792"
SIZE_SQUARE = "1024x1024"


class ImageGenerator(Protocol):
    def generate(self, prompt: str, width: int, height: int, negative_prompt: Optional[str] = None) -> bytes:
        """Return encoded image bytes for ``prompt`` sized for a width x height canvas."""
        ...


def image_size_for_aspect(width: int, height: int) -> str:
    """Pick the closest supported output size for a canvas."""
    aspect = width / height
    if aspect > 1.3:
        return SIZE_LANDSCAPE
    if aspect < 0.77:
        return SIZE_PORTRAIT
    return SIZE_SQUARE


def truncate_prompt(prompt: str, limit: int = MAX_PROMPT_LENGTH) -> str:
    prompt = (prompt or "").strip()
    return prompt if len(prompt) <= limit else prompt[:limit]


def build_background_prompt(description: str) -> str:
    """Prefix a scene description so the model renders an empty, photographic backdrop."""
    return truncate_prompt(BACKGROUND_PROMPT_PREFIX + (description or "").strip())


def classify_status(status_code: Optional[int]) -> str:
    if status_code == 429:
        return ImageGenerationError.KIND_RATE_LIMITED
    if status_code in (401, 403):
        return ImageGenerationError.KIND_AUTH
    if status_code in (500, 503):
        return ImageGenerationError.KIND_UNAVAILABLE
    if status_code == 400:
        return ImageGenerationError.KIND_BAD_REQUEST
    return ImageGenerationError.KIND_UNKNOWN


def classify_exception(exc: BaseException) -> str:
    """Map a requests transport failure to an error kind."""
    if isinstance(exc, requests.Timeout):
        return ImageGenerationError.KIND_TIMEOUT
    if isinstance(exc, requests.ConnectionError):
        detail = str(exc).lower()
        if "aborted" in detail or "reset" in detail:
            return ImageGenerationError.KIND_TIMEOUT
        return ImageGenerationError.KIND_UNAVAILABLE
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return classify_status(exc.response.status_code)
    return ImageGenerationError.KIND_UNKNOWN


class HttpImageGenerator:
    """Generate images through an OpenAI-compatible HTTP endpoint."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.IMAGE_GEN_URL or DEFAULT_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.IMAGE_GEN_API_KEY
        self.model = model or settings.IMAGE_GEN_MODEL
        self.timeout = timeout if timeout is not None else settings.IMAGE_GEN_TIMEOUT
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/images/generations"

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def build_payload(self, prompt: str, width: int, height: int, negative_prompt: Optional[str] = None) -> dict:
        payload = {
            "model": self.model,
            "prompt": truncate_prompt(prompt),
            "n": 1,
            "size": image_size_for_aspect(width, height),
            "quality": "standard",
            "response_format": "url",
        }
        if negative_prompt:
            payload["negative_prompt"] = negative_prompt
        return payload

    def generate(self, prompt: str, width: int, height: int, negative_prompt: Optional[str] = None) -> bytes:
        """
        Request one image and return its bytes.

        Raises:
            ImageGenerationError: For auth, rate-limit, outage, rejected-request,
                timeout or malformed-response failures
        """
        if not self.api_key:
            logger.warning("[image-gen] IMAGE_GEN_API_KEY not set")
            raise ImageGenerationError(ImageGenerationError.KIND_AUTH)

        payload = self.build_payload(prompt, width, height, negative_prompt)
        logger.info("[image-gen] requesting %s (%s, prompt=%d chars)", payload["size"], self.model, len(payload["prompt"]))
        try:
            resp = self.session.post(self.endpoint, json=payload, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            kind = classify_exception(exc)
            logger.warning("[image-gen] request failed (%s): %s", kind, exc)
            raise ImageGenerationError(kind) from exc

        if resp.status_code != 200:
            kind = classify_status(resp.status_code)
            logger.warning("[image-gen] HTTP %s -> %s", resp.status_code, kind)
            raise ImageGenerationError(kind, status_code=resp.status_code)

        url, b64 = self._extract_image(resp)
        if b64:
            return base64.b64decode(b64)
        return self._download(url)

    def _extract_image(self, resp: requests.Response) -> Tuple[Optional[str], Optional[str]]:
        try:
            data = resp.json().get("data") or []
            first = data[0]
        except (ValueError, AttributeError, IndexError, TypeError) as exc:
            logger.warning("[image-gen] response carried no image data")
            raise ImageGenerationError(ImageGenerationError.KIND_UNKNOWN, status_code=resp.status_code) from exc
        url, b64 = first.get("url"), first.get("b64_json")
        if not url and not b64:
            logger.warning("[image-gen] response carried no image url")
            raise ImageGenerationError(ImageGenerationError.KIND_UNKNOWN, status_code=resp.status_code)
        return url, b64

    def _download(self, url: str) -> bytes:
        try:
            resp = self.session.get(url, timeout=DOWNLOAD_TIMEOUT_SEC)
            resp.raise_for_status()
        except requests.RequestException as exc:
            kind = classify_exception(exc)
            logger.warning("[image-gen] download failed (%s): %s", kind, exc)
            raise ImageGenerationError(kind, stage="download-image") from exc
        logger.info("[image-gen] downloaded %d bytes", len(resp.content))
        return resp.content
