from __future__ import annotations

from pathlib import Path

from PIL import Image, UnidentifiedImageError

from pano_tour.work.errors import ImageValidationError

# panorama sources routinely exceed the decompression-bomb cap
Image.MAX_IMAGE_PIXELS = None


def check_equirectangular(image_path: Path) -> int:
    """
    Open the source image and require a 2:1 (equirectangular) aspect ratio.
    Returns the image width, which becomes the tile size cap for makepano.
    """
    try:
        with Image.open(image_path) as img:
            width, height = img.size
    except (UnidentifiedImageError, OSError) as e:
        raise ImageValidationError(f"cannot read image: {e}") from e

    if width != height * 2:
        raise ImageValidationError(f"image aspect ratio must be 2:1 (got {width}x{height})")
    return width
