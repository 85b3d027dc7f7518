"""
Error taxonomy for the card compositor.

Every error carries the pipeline ``stage`` that failed so callers can turn it
into a user-facing message without inspecting tracebacks.
"""
from typing import List, Optional


class CardError(Exception):
    """Base class for compositor failures."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class InvalidImageData(CardError, ValueError):
    """An input buffer was empty or could not be decoded."""


class UnknownVariant(CardError, ValueError):
    """Layout variant id outside the fixed catalogue."""


class UnknownPreset(CardError, ValueError):
    """Style or frame preset id outside its enumeration."""


class AssetNotFound(CardError, FileNotFoundError):
    """Frame tile missing under the asset root."""

    def __init__(self, path: str, stage: Optional[str] = "asset-load"):
        super().__init__(f"Asset not found: {path}", stage=stage)
        self.path = path


class UnsupportedAssetFormat(CardError, ValueError):
    """Frame tiles must be SVG or PNG."""


class FrameRenderError(CardError):
    """Unexpected failure while compositing frame tiles."""


class GeometryValidationWarning(UserWarning):
    """Border footprints collide or overflow the canvas. Advisory only."""

    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class GeometryValidationError(CardError):
    """Raised instead of warning when strict geometry mode is on."""

    def __init__(self, errors: List[str], stage: Optional[str] = "validate-borders"):
        super().__init__("Border geometry invalid: " + "; ".join(errors), stage=stage)
        self.errors = list(errors)


class ImageGenerationError(CardError):
    """
    Classified failure from the image-generation collaborator.

    ``kind`` is one of the KIND_* constants; ``message`` is safe to show users.
    """

    KIND_AUTH = "auth"
    KIND_RATE_LIMITED = "rate_limited"
    KIND_UNAVAILABLE = "unavailable"
    KIND_BAD_REQUEST = "bad_request"
    KIND_TIMEOUT = "timeout"
    KIND_UNKNOWN = "unknown"

    USER_MESSAGES = {
        KIND_AUTH: "Image service rejected our credentials. Please contact support.",
        KIND_RATE_LIMITED: "Image service is busy. Please retry in a moment.",
        KIND_UNAVAILABLE: "Image service is temporarily unavailable. Please retry.",
        KIND_BAD_REQUEST: "The image request was rejected. Try a different description.",
        KIND_TIMEOUT: "Image generation timed out. Please retry.",
        KIND_UNKNOWN: "Image generation failed. Please retry.",
    }

    def __init__(self, kind: str, stage: Optional[str] = "generate-image", status_code: Optional[int] = None):
        message = self.USER_MESSAGES.get(kind, self.USER_MESSAGES[self.KIND_UNKNOWN])
        super().__init__(message, stage=stage)
        self.kind = kind if kind in self.USER_MESSAGES else self.KIND_UNKNOWN
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.kind in (self.KIND_RATE_LIMITED, self.KIND_UNAVAILABLE, self.KIND_TIMEOUT)
