"""
End-to-end demonstration of an editing session.

Loads an image (or generates a gradient when none is given), applies a few
filters, paints a stroke, places a caption and exports the flattened PNG.

Usage:
    python examples/edit_session_demo.py [input_image] [output_dir]
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
import time
from io import BytesIO

from PIL import Image

from LV_Libs.ImageEditingLib.coordinate_mapper import DisplayBox
from LV_Libs.SessionLib import EditorMode, SessionController


def gradient_png(width=640, height=480):
    """Encode a simple horizontal gradient as PNG."""
    image = Image.new("RGBA", (width, height))
    image.putdata([
        (int(255 * x / (width - 1)), 80, 255 - int(255 * x / (width - 1)), 255)
        for y in range(height)
        for x in range(width)
    ])
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def run_demo(input_path=None, output_dir=Path(".")):
    data = Path(input_path).read_bytes() if input_path else gradient_png()

    controller = SessionController()
    image = controller.load_image(data)
    width, height = image.size
    print(f"Loaded {width}x{height} image")

    # Pretend the image is drawn at half size in a viewport
    controller.set_layout_box(DisplayBox(0, 0, width / 2, height / 2))

    controller.set_filter("brightness", 120)
    controller.set_filter("saturate", 150)
    controller.set_filter("blur", 2)
    print(f"Filters: {controller.session.filters.to_dict()}")

    controller.set_mode(EditorMode.PAINT)
    controller.set_brush(color="#9d00ff", size=12)
    controller.pointer_down(width * 0.05, height * 0.05)
    for step in range(1, 11):
        controller.pointer_move(width * 0.05 * step, height * 0.04 * step)
    controller.pointer_up(width * 0.5, height * 0.4)

    controller.set_mode(EditorMode.TEXT)
    controller.set_text_input("Lumina", "#ffffff", 48)
    controller.pointer_down(width * 0.1, height * 0.4)
    controller.pointer_up(width * 0.1, height * 0.4)

    start = time.time()
    path = controller.save_export(Path(output_dir))
    print(f"Exported to {path} in {time.time() - start:.3f}s")
    return path


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    input_arg = sys.argv[1] if len(sys.argv) > 1 else None
    output_arg = sys.argv[2] if len(sys.argv) > 2 else "."
    run_demo(input_arg, output_arg)
