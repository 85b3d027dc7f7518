"""
Frame tile asset cache.

Maps an asset path (relative to the asset root) to rasterized PNG bytes.
SVG tiles go through Wand/ImageMagick once; PNG tiles are read as-is.
Entries are only dropped by ``clear()``.
"""
import io
import logging
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Union

from PIL import Image, UnidentifiedImageError

from domain.errors import AssetNotFound, InvalidImageData, UnsupportedAssetFormat
from settings import settings

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = {".svg": "svg", ".png": "png"}


def rasterize_svg(svg_bytes: bytes) -> bytes:
    """Render SVG markup to PNG bytes with a transparent background."""
    from wand.color import Color as WandColor
    from wand.image import Image as WandImage

    with WandImage(blob=svg_bytes, format="svg", background=WandColor("transparent")) as img:
        img.format = "png"
        return img.make_blob()


class AssetCache:
    """
    Thread-safe cache of decoded frame tiles.

    Concurrent misses for the same path may decode twice; the last write wins.
    The lock only guards the maps themselves.
    """

    def __init__(self, asset_root: Optional[Union[str, Path]] = None):
        self.asset_root = Path(asset_root) if asset_root is not None else Path(settings.CARD_ASSET_ROOT)
        self._lock = threading.Lock()
        self._assets: Dict[str, bytes] = {}
        self._load_times: Dict[str, float] = {}

    def full_path(self, asset_path: str) -> Path:
        return self.asset_root / asset_path

    def exists(self, asset_path: str) -> bool:
        if not asset_path or not asset_path.strip():
            return False
        return self.full_path(asset_path).is_file()

    def load(self, asset_path: str) -> bytes:
        """
        Return PNG bytes for an asset, decoding on first use.

        Raises:
            AssetNotFound: If the path does not exist under the asset root
            UnsupportedAssetFormat: If the file is neither SVG nor PNG
        """
        with self._lock:
            cached = self._assets.get(asset_path)
        if cached is not None:
            return cached

        started = time.perf_counter()
        if not self.exists(asset_path):
            raise AssetNotFound(asset_path)
        fmt = SUPPORTED_FORMATS.get(Path(asset_path).suffix.lower())
        if fmt is None:
            raise UnsupportedAssetFormat(
                f"Unsupported asset format: {asset_path} (only SVG and PNG)", stage="asset-load"
            )

        raw = self.full_path(asset_path).read_bytes()
        data = rasterize_svg(raw) if fmt == "svg" else raw
        elapsed_ms = (time.perf_counter() - started) * 1000

        with self._lock:
            self._assets[asset_path] = data
            self._load_times[asset_path] = elapsed_ms
        logger.debug("[asset-cache] loaded %s (%s) in %.1fms", asset_path, fmt, elapsed_ms)
        return data

    def load_image(self, asset_path: str) -> Image.Image:
        data = self.load(asset_path)
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise InvalidImageData(f"Asset could not be decoded: {asset_path}", stage="asset-load") from exc
        return img.convert("RGBA")

    def load_with_size(self, asset_path: str, width: int, height: int) -> Image.Image:
        """Load and stretch to exactly width x height (no aspect preservation)."""
        return self.load_image(asset_path).resize((int(width), int(height)), Image.Resampling.LANCZOS)

    def is_cached(self, asset_path: str) -> bool:
        with self._lock:
            return asset_path in self._assets

    def load_time(self, asset_path: str) -> Optional[float]:
        """Milliseconds spent decoding an asset, if it has been loaded."""
        with self._lock:
            return self._load_times.get(asset_path)

    def clear(self) -> None:
        with self._lock:
            self._assets.clear()
            self._load_times.clear()

    def stats(self) -> Dict[str, object]:
        with self._lock:
            return {"size": len(self._assets), "keys": list(self._assets.keys())}

    def preload(self, asset_paths: List[str]) -> List[Dict[str, object]]:
        """Warm the cache; failures are reported per path, never raised."""
        results: List[Dict[str, object]] = []
        for asset_path in asset_paths:
            try:
                self.load(asset_path)
                results.append({"path": asset_path, "success": True})
            except Exception as exc:
                logger.warning("[asset-cache] preload failed for %s: %s", asset_path, exc)
                results.append({"path": asset_path, "success": False, "error": str(exc)})
        return results
