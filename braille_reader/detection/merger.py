"""
Model Merger Module - Combines Grade 1 and Grade 2 detections into one set.

Grade 2 class ids are shifted by G2_CLASS_OFFSET so both models' classes
share one numeric space; a combined NMS pass then lets overlapping
detections from either model compete on confidence alone.
"""

import logging
from typing import List, Sequence

from ..result import Detection
from .geometry import DEFAULT_IOU_THRESHOLD, non_max_suppression

logger = logging.getLogger(__name__)

# Offset to distinguish G2 classes. Must exceed the largest local class id of either model.
G2_CLASS_OFFSET = 1000


def is_g2_detection(class_id: int, offset: int = G2_CLASS_OFFSET) -> bool:
    """Check if a combined class id came from the Grade 2 model."""
    return class_id >= offset


def local_class_id(class_id: int, offset: int = G2_CLASS_OFFSET) -> int:
    """Strip the Grade 2 offset from a combined class id."""
    return class_id - offset if is_g2_detection(class_id, offset) else class_id


class ModelMerger:
    """
    Merges per-model detection sets.

    Attributes:
        offset: Class id offset applied to Grade 2 detections
    """

    def __init__(self, offset: int = G2_CLASS_OFFSET):
        if offset <= 0:
            raise ValueError(f"Class offset must be positive, got {offset}")
        self.offset = offset

    def merge(
        self,
        g1_detections: Sequence[Detection],
        g2_detections: Sequence[Detection],
        nms_threshold: float = DEFAULT_IOU_THRESHOLD
    ) -> List[Detection]:
        """
        Relabel Grade 2 detections into the offset range and run combined NMS.

        Either input may be empty. Inputs are not modified.

        Args:
            g1_detections: Grade 1 detections with local class ids
            g2_detections: Grade 2 detections with local class ids
            nms_threshold: IoU threshold for the combined pass

        Returns:
            Surviving detections, descending confidence
        """
        logger.debug(
            f"Merging results: {len(g1_detections)} from G1, {len(g2_detections)} from G2"
        )

        combined = list(g1_detections)
        for detection in g2_detections:
            if detection.class_id >= self.offset:
                logger.warning(
                    f"G2 class id {detection.class_id} collides with offset {self.offset}"
                )
            combined.append(detection.with_class_id(detection.class_id + self.offset))

        merged = non_max_suppression(combined, nms_threshold)
        logger.debug(f"Merged to {len(merged)} detections after NMS")
        return merged
