"""
Pytest configuration and shared fixtures for Lumina Vision tests.

This module provides shared test fixtures and configuration
used across multiple test modules.
"""

from io import BytesIO
import struct
import zlib

import pytest
from PIL import Image

from LV_Libs.ImageEditingLib.coordinate_mapper import DisplayBox
from LV_Libs.SessionLib.session_controller import SessionController


def encode_image(width, height, color=(128, 128, 128, 255), image_format="PNG"):
    """Encode a solid-colour image of the given size."""
    mode = "RGB" if image_format == "JPEG" else "RGBA"
    image = Image.new(mode, (width, height), color[:3] if mode == "RGB" else color)
    buffer = BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


def encode_png_header(width, height):
    """Encode a PNG whose header declares ``width x height`` but carries no pixel rows."""
    def chunk(tag, payload):
        crc = zlib.crc32(tag + payload) & 0xFFFFFFFF
        return struct.pack(">I", len(payload)) + tag + payload + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", width, height, 8, 6, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", zlib.compress(b""))
        + chunk(b"IEND", b"")
    )


@pytest.fixture
def make_png():
    """
    Provide a factory for PNG-encoded test images.

    Returns:
        Callable (width, height, color) -> bytes
    """
    return encode_image


@pytest.fixture
def png_100():
    """A 100x100 opaque mid-grey PNG."""
    return encode_image(100, 100)


@pytest.fixture
def controller(png_100):
    """
    Provide a controller with a 100x100 image loaded and drawn 1:1 at the origin.

    Returns:
        SessionController whose display coordinates equal canonical coordinates
    """
    controller = SessionController()
    controller.load_image(png_100)
    controller.set_display_box(DisplayBox(0, 0, 100, 100))
    return controller


@pytest.fixture
def oversized_png():
    """A PNG header claiming 20000x20000, past Pillow's decompression bomb limit."""
    return encode_png_header(20000, 20000)
