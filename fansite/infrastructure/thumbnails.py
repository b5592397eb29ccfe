"""Thumbnail generation for uploaded videos."""

from pathlib import Path
from typing import Optional, Protocol

import structlog
from PIL import Image

logger = structlog.get_logger(__name__)


class ThumbnailGenerator(Protocol):
    def generate(self, video_path: Path, output_path: Path) -> Optional[Path]:
        """Write a thumbnail for `video_path`; None if none could be made."""
        ...


class PlaceholderThumbnailGenerator:
    """Solid-color PNG placeholder; frame extraction can replace it later."""

    WIDTH = 320
    HEIGHT = 180
    BACKGROUND = (26, 26, 26)

    def generate(self, video_path: Path, output_path: Path) -> Optional[Path]:
        try:
            image = Image.new("RGB", (self.WIDTH, self.HEIGHT), self.BACKGROUND)
            image.save(output_path, format="PNG")
        except OSError as exc:
            logger.warning("thumbnail_generation_failed", video=str(video_path), error=str(exc))
            return None
        return output_path
