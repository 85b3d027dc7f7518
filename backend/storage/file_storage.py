"""
File storage abstraction.

Provides a simple interface for storing and retrieving finished cards.
Currently uses local filesystem.
"""
import uuid
from pathlib import Path
from typing import Optional, Union

from settings import settings


class FileStorage:
    """
    Local file storage implementation.

    Files are organized as:
    - media/cards/{card_id}.png  - Finished cards
    """

    def __init__(self, media_root: Optional[Union[str, Path]] = None):
        self.media_root = Path(media_root) if media_root is not None else Path(settings.CARD_MEDIA_ROOT)
        self.media_root.mkdir(parents=True, exist_ok=True)

    def get_cards_dir(self) -> Path:
        """Get the directory holding finished cards."""
        path = self.media_root / "cards"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def save_card(self, png_bytes: bytes, card_id: Optional[str] = None) -> str:
        """
        Save a finished card.

        Args:
            png_bytes: Encoded PNG data
            card_id: Optional id used for naming; generated when omitted

        Returns:
            Relative path to the saved file
        """
        file_path = self.get_cards_dir() / f"{card_id or uuid.uuid4()}.png"
        file_path.write_bytes(png_bytes)
        return str(file_path.relative_to(self.media_root))

    def get_absolute_path(self, relative_path: str) -> Path:
        """Convert a relative path to absolute."""
        return self.media_root / relative_path

    def file_exists(self, relative_path: str) -> bool:
        """Check if a file exists."""
        return (self.media_root / relative_path).exists()

    def delete_file(self, relative_path: str) -> bool:
        """Delete a file. Returns True if deleted."""
        path = self.media_root / relative_path
        if path.exists():
            path.unlink()
            return True
        return False
