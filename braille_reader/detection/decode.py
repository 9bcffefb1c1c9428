"""
Model Output Decoding

Turns a YOLOv8-style output tensor into Detection records in model space.
"""

import logging
from typing import List

import numpy as np

from ..result import Detection

logger = logging.getLogger(__name__)

# Default confidence threshold for keeping an anchor
CONFIDENCE_THRESHOLD = 0.25

# Box coordinate rows before the class score rows
BOX_ROWS = 4


def decode_yolo_output(output: np.ndarray,
                       confidence_threshold: float = CONFIDENCE_THRESHOLD) -> List[Detection]:
    """
    Decode a transposed YOLOv8 output of shape [1, 4 + C, N] or [4 + C, N].

    Rows 0-3 hold center x, center y, width, height; the remaining rows
    hold one score per class. Each anchor keeps its best class.

    Args:
        output: Raw model output
        confidence_threshold: Minimum best-class score to keep an anchor

    Returns:
        List of Detections in model input coordinates

    Raises:
        ValueError: If the array does not have box rows plus at least one class row
    """
    data = np.asarray(output, dtype=np.float32)
    if data.ndim == 3:
        if data.shape[0] != 1:
            raise ValueError(f"Expected batch size 1, got output shape {data.shape}")
        data = data[0]

    if data.ndim != 2 or data.shape[0] <= BOX_ROWS:
        raise ValueError(f"Unexpected output shape {np.shape(output)}: need [4 + classes, anchors]")

    logger.debug(f"Output tensor shape: {data.shape}")

    scores = data[BOX_ROWS:]
    best_class = np.argmax(scores, axis=0)
    best_score = scores[best_class, np.arange(scores.shape[1])]

    keep = np.flatnonzero(best_score >= confidence_threshold)
    detections = [
        Detection(
            x=float(data[0, i]),
            y=float(data[1, i]),
            width=float(data[2, i]),
            height=float(data[3, i]),
            confidence=float(best_score[i]),
            class_id=int(best_class[i]),
        )
        for i in keep
    ]

    logger.debug(f"Found {len(detections)} valid detections")
    return detections
