"""Image inspection utilities for uploaded files."""

import hashlib
import io
from pathlib import Path
from typing import Any, Dict

from PIL import Image, ImageOps, UnidentifiedImageError

from ..core.exceptions import ValidationError
from ..core.logger import get_logger

logger = get_logger(__name__)


class ImageProcessor:
    """Validates uploads and extracts the metadata stored with each photo."""

    SUPPORTED_FORMATS = {
        '.jpg', '.jpeg', '.png', '.gif', '.bmp', '.tiff', '.tif', '.webp', '.heic', '.heif'
    }

    def is_supported_image(self, filename: str) -> bool:
        """Check if a file name has a supported image extension."""
        return Path(filename).suffix.lower() in self.SUPPORTED_FORMATS

    def calculate_hash(self, content: bytes) -> str:
        """SHA-256 of the raw upload."""
        return hashlib.sha256(content).hexdigest()

    def get_image_info(self, content: bytes, filename: str) -> Dict[str, Any]:
        """Open an upload with Pillow and describe it."""
        if not self.is_supported_image(filename):
            raise ValidationError(f"Unsupported image format: {Path(filename).suffix or filename}")
        if not content:
            raise ValidationError(f"Empty upload: {filename}")

        try:
            with Image.open(io.BytesIO(content)) as img:
                img.load()
                # Apply EXIF orientation so width/height match what viewers show
                oriented = ImageOps.exif_transpose(img)
                width, height = oriented.size
                info = {
                    'filename': filename,
                    'format': img.format,
                    'mode': img.mode,
                    'width': width,
                    'height': height,
                    'file_size': len(content),
                    'file_hash': self.calculate_hash(content),
                }
        except UnidentifiedImageError:
            logger.warning(f"Rejected unreadable image upload {filename}")
            raise ValidationError(f"File is not a readable image: {filename}")
        except Image.DecompressionBombError as e:
            logger.warning(f"Rejected oversized image upload {filename}: {e}")
            raise ValidationError(f"Image is too large: {filename}")
        except OSError as e:
            # Truncated or corrupt data fails while Pillow decodes it
            logger.warning(f"Rejected corrupt image upload {filename}: {e}")
            raise ValidationError(f"File is corrupt or truncated: {filename}")

        aspect_ratio = width / height if height else 0
        info['aspect_ratio'] = aspect_ratio
        if abs(aspect_ratio - 1) < 0.1:
            info['orientation'] = 'square'
        else:
            info['orientation'] = 'landscape' if aspect_ratio > 1 else 'portrait'

        return info
