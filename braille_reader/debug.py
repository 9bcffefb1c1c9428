"""
Debug Utilities

Functions for saving annotated detection images and managing debug output.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from .result import BrailleCell


# Debug settings
DEBUG_DIR = Path("./debug")
MAX_DEBUG_IMAGES = 10

# Confidence thresholds for coloring
HIGH_CONFIDENCE = 0.95
MEDIUM_CONFIDENCE = 0.80

# Vertical space reserved above a box for its label
LABEL_OFFSET = 18


def get_confidence_color(confidence: float) -> str:
    """
    Get color code for confidence level.

    Args:
        confidence: Confidence value 0.0-1.0

    Returns:
        Hex color code string
    """
    if confidence >= HIGH_CONFIDENCE:
        return "#4CAF50"  # Green
    elif confidence >= MEDIUM_CONFIDENCE:
        return "#FFC107"  # Yellow
    else:
        return "#d32f2f"  # Red


def draw_cells(image: Image.Image, cells: Sequence[BrailleCell]) -> Image.Image:
    """
    Draw cell boxes and "<meaning> <pct>%" labels on a copy of the image.

    Args:
        image: Image in the same coordinate space as the cells
        cells: Cells to draw

    Returns:
        Annotated copy
    """
    annotated = image.convert("RGB")
    draw = ImageDraw.Draw(annotated)

    # Try to load a font, fall back to default
    try:
        font = ImageFont.truetype("arial.ttf", 14)
    except OSError:
        font = ImageFont.load_default()

    for cell in cells:
        color = get_confidence_color(cell.confidence)
        box = cell.box
        draw.rectangle([box.left, box.top, box.right, box.bottom], outline=color, width=2)

        label = f"{cell.meaning} {int(cell.confidence * 100)}%"
        draw.text((box.left, max(0, box.top - LABEL_OFFSET)), label, fill=color, font=font)

    return annotated


def save_annotated_image(
    image: Image.Image,
    cells: Sequence[BrailleCell],
    path: Optional[str] = None
) -> Path:
    """
    Save an annotated debug image showing detected cells.

    Args:
        image: Original PIL Image
        cells: Cells in image coordinates
        path: Output file path, defaults to a timestamped file in DEBUG_DIR
            (only the default location is pruned)

    Returns:
        Path the image was written to
    """
    if path is not None:
        output = Path(path)
        output.parent.mkdir(parents=True, exist_ok=True)
        draw_cells(image, cells).save(output, "PNG")
        return output

    # Ensure debug directory exists
    DEBUG_DIR.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")[:-3]
    output = DEBUG_DIR / f"annotated_{timestamp}.png"
    draw_cells(image, cells).save(output, "PNG")

    # Cleanup old debug images
    _cleanup_debug_images()
    return output


def _cleanup_debug_images() -> None:
    """Remove old annotated images, keeping only the most recent MAX_DEBUG_IMAGES."""
    if not DEBUG_DIR.exists():
        return

    # Get all annotated images sorted by modification time
    debug_files = sorted(
        DEBUG_DIR.glob("annotated_*.png"),
        key=lambda p: p.stat().st_mtime,
        reverse=True
    )

    # Remove old files
    for old_file in debug_files[MAX_DEBUG_IMAGES:]:
        try:
            old_file.unlink()
        except OSError:
            pass
