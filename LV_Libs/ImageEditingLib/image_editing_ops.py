"""
Image decoding and export operations for Lumina Vision.

This module is the boundary between encoded bytes and the editing core.

Functions:
    decode_image: Decode an encoded raster into an EditorImage
    encode_png: Encode a Pillow image as PNG bytes
    save_export: Write an exported image into an output directory

Exceptions:
    ImageDecodeError: Raised when supplied bytes are not a decodable image
"""

from io import BytesIO
from pathlib import Path
from typing import Any
import logging

from LV_Libs.ImageEditingLib.image_models import EditorImage
from LV_Libs.constants import DEFAULT_EXPORT_FILENAME, DEFAULT_OUTPUT_FORMAT
from LV_Libs.pillow_compat import Image, ImageOps, UnidentifiedImageError

logger = logging.getLogger(__name__)


class ImageDecodeError(ValueError):
    """The supplied bytes could not be decoded into an image."""


def decode_image(data: bytes) -> EditorImage:
    """
    Decode an encoded raster (PNG, JPEG, ...) into an EditorImage.

    The image is fully loaded here so truncated or corrupt data fails now
    rather than on first pixel access. EXIF orientation is applied so the
    canonical size matches what a viewer shows.

    Args:
        data: Encoded image bytes

    Returns:
        EditorImage in RGBA at the image's native resolution

    Raises:
        ImageDecodeError: If the bytes are empty, not a supported image, or
            declare dimensions beyond Pillow's decompression bomb limit
    """
    if not data:
        raise ImageDecodeError("No image data supplied")

    try:
        with Image.open(BytesIO(data)) as opened:
            opened.load()
            oriented = ImageOps.exif_transpose(opened)
            image = EditorImage(oriented.convert("RGBA"))
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as exc:
        logger.warning(f"Failed to decode image ({len(data)} bytes): {exc}")
        raise ImageDecodeError(f"Cannot decode image: {exc}") from exc

    logger.info(f"Decoded image {image.width}x{image.height}")
    return image


def encode_png(image: Any) -> bytes:
    """
    Encode a Pillow image as PNG.

    Args:
        image: A PIL Image object

    Returns:
        PNG-encoded bytes
    """
    buffer = BytesIO()
    image.save(buffer, format=DEFAULT_OUTPUT_FORMAT)
    return buffer.getvalue()


def save_export(image: Any, output_dir: Path, filename: str = DEFAULT_EXPORT_FILENAME) -> Path:
    """
    Save an exported image to disk in PNG format.

    Args:
        image: A PIL Image object to save
        output_dir: Directory path where the image should be saved
        filename: Target file name

    Returns:
        Path of the written file

    Raises:
        OSError: If directory cannot be accessed or the file cannot be written
    """
    output_dir = Path(output_dir)
    if not output_dir.exists():
        raise OSError(f"Output directory does not exist: {output_dir}")

    if not output_dir.is_dir():
        raise OSError(f"Output path is not a directory: {output_dir}")

    save_path = output_dir / filename
    image.save(save_path, format=DEFAULT_OUTPUT_FORMAT)
    logger.info(f"Exported {image.width}x{image.height} image to {save_path}")
    return save_path
