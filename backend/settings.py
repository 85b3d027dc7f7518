import os
from pathlib import Path

# Basic settings helper to read environment configuration.

BASE_DIR = Path(__file__).resolve().parent


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.CARD_ASSET_ROOT: Path = Path(os.getenv("CARD_ASSET_ROOT", str(BASE_DIR / "assets")))
        self.CARD_MEDIA_ROOT: Path = Path(os.getenv("CARD_MEDIA_ROOT", str(BASE_DIR / "media")))
        self.CARD_FONT_PATH: str | None = os.getenv("CARD_FONT_PATH") or None
        self.CARD_FALLBACK_FONT_PATH: str | None = os.getenv("CARD_FALLBACK_FONT_PATH") or None
        self.CARD_DEBUG_ARTIFACTS: bool = _as_bool(os.getenv("CARD_DEBUG_ARTIFACTS"), False)
        self.CARD_STRICT_GEOMETRY: bool = _as_bool(os.getenv("CARD_STRICT_GEOMETRY"), False)

        # Image generation collaborator
        self.IMAGE_GEN_URL: str = os.getenv("IMAGE_GEN_URL", "")
        self.IMAGE_GEN_API_KEY: str = os.getenv("IMAGE_GEN_API_KEY", "")
        self.IMAGE_GEN_MODEL: str = os.getenv("IMAGE_GEN_MODEL", "dall-e-3")
        self.IMAGE_GEN_TIMEOUT: float = _as_float(os.getenv("IMAGE_GEN_TIMEOUT"), 60.0)


settings = Settings()
