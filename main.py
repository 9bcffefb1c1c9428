"""
Braille Reader - Entry Point

Runs post-processing on a saved set of model detections and prints the
detection report and translated text.

Input file format (JSON):
    {
        "image_size": [1280, 960],
        "g1": [[x, y, w, h, conf, classId], ...],
        "g2": [[x, y, w, h, conf, classId], ...],
        "letterbox": {"scale": 0.5, "offset_x": 0, "offset_y": 80}
    }

Example:
    python main.py detections.json
    python main.py detections.json --model both --conf 0.4
    python main.py detections.json --image photo.jpg --debug  # Save annotated image
"""

import sys
import json
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, Optional

from PIL import Image

from braille_reader import BraillePipeline, LetterboxParams, PipelineConfig
from braille_reader.debug import save_annotated_image
from braille_reader.settings import apply_overrides, load_settings


# Configure logging - output to both console and file
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
    handlers=[
        logging.StreamHandler(),  # Console output
        logging.FileHandler("braille_reader.log", mode='w', encoding='utf-8')  # File output
    ]
)
logger = logging.getLogger(__name__)


def load_detections(path: Path) -> Dict[str, Any]:
    """
    Load a detections file.

    Args:
        path: JSON file path

    Returns:
        Parsed document

    Raises:
        ValueError: If the file is not a JSON object
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object with 'g1' and/or 'g2' lists")
    return data


def parse_letterbox(data: Optional[Dict[str, Any]]) -> Optional[LetterboxParams]:
    """Build LetterboxParams from the optional 'letterbox' section."""
    if not data:
        return None
    return LetterboxParams(
        scale=float(data["scale"]),
        offset_x=float(data.get("offset_x", 0.0)),
        offset_y=float(data.get("offset_y", 0.0)),
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Braille Reader - Translate Braille detection model output to text"
    )
    parser.add_argument("detections", type=Path, help="JSON file with raw detections")
    parser.add_argument(
        "--model", "-m",
        choices=["g1", "g2", "both"],
        help="Model mode (default: from config.json)"
    )
    parser.add_argument("--conf", type=float, help="Confidence threshold (0-1)")
    parser.add_argument("--iou", type=float, help="NMS IoU threshold (0-1)")
    parser.add_argument("--config", type=Path, help="Settings file (default: config.json)")
    parser.add_argument("--image", "-i", type=Path, help="Source image for annotation")
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug mode (verbose logging, save annotated image)"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Run post-processing for one detections file."""
    args = parse_args(argv)

    # CLI flags override saved settings
    settings = apply_overrides(
        load_settings(args.config),
        model=args.model,
        confidence_threshold=args.conf,
        nms_threshold=args.iou,
    )

    debug_mode = args.debug or settings.get("debug_enabled", False)
    if debug_mode:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = PipelineConfig.from_settings(settings)
        data = load_detections(args.detections)
        letterbox = parse_letterbox(data.get("letterbox"))
        image_size = tuple(data["image_size"]) if data.get("image_size") else None

        pipeline = BraillePipeline(config)
        result = pipeline.process_raw(
            data.get("g1", []),
            data.get("g2", []),
            image_size=image_size,
            letterbox=letterbox,
        )
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Failed to process {args.detections}: {e}")
        return 1

    for warning in result.warnings:
        logger.warning(warning)

    print(result.detection_text)
    print("Translated Braille:")
    print(result.translated_text)

    if debug_mode and args.image:
        image = Image.open(args.image)
        path = save_annotated_image(image, result.cells)
        logger.info(f"Annotated image saved: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
