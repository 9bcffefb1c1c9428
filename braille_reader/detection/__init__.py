"""
Detection Package - Box-level post-processing of model output.

Usage:
    from braille_reader.detection import non_max_suppression, ModelMerger

    kept = non_max_suppression(detections, iou_threshold=0.5)
    merged = ModelMerger().merge(g1_detections, g2_detections, 0.5)
"""

from .geometry import (
    DEFAULT_IOU_THRESHOLD,
    iou,
    non_max_suppression,
)
from .merger import (
    G2_CLASS_OFFSET,
    ModelMerger,
    is_g2_detection,
    local_class_id,
)
from .normalizer import (
    normalize,
    normalize_letterboxed,
    normalize_rescaled,
)
from .decode import CONFIDENCE_THRESHOLD, decode_yolo_output
from .preprocess import INPUT_SIZE, letterbox

__all__ = [
    # Geometry
    "DEFAULT_IOU_THRESHOLD",
    "iou",
    "non_max_suppression",
    # Merging
    "G2_CLASS_OFFSET",
    "ModelMerger",
    "is_g2_detection",
    "local_class_id",
    # Normalization
    "normalize",
    "normalize_letterboxed",
    "normalize_rescaled",
    # Model I/O
    "CONFIDENCE_THRESHOLD",
    "INPUT_SIZE",
    "decode_yolo_output",
    "letterbox",
]
