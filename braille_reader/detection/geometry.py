"""
Box Geometry Module - IoU and non-maximum suppression over center-format boxes.
"""

import logging
from typing import List, Sequence

from ..result import Detection

logger = logging.getLogger(__name__)

# Default IoU threshold for suppression
DEFAULT_IOU_THRESHOLD = 0.5


def iou(a: Detection, b: Detection) -> float:
    """
    Calculate Intersection over Union between two center-format boxes.

    Args:
        a: First box
        b: Second box

    Returns:
        IoU in [0, 1]; 0 for disjoint or zero-area boxes
    """
    ax1, ay1, ax2, ay2 = a.corners
    bx1, by1, bx2, by2 = b.corners

    x_min = max(ax1, bx1)
    y_min = max(ay1, by1)
    x_max = min(ax2, bx2)
    y_max = min(ay2, by2)

    # Boxes don't intersect
    if x_max < x_min or y_max < y_min:
        return 0.0

    intersection = (x_max - x_min) * (y_max - y_min)

    # Areas from corners
    area_a = (ax2 - ax1) * (ay2 - ay1)
    area_b = (bx2 - bx1) * (by2 - by1)
    union = area_a + area_b - intersection

    if union <= 0:
        return 0.0
    return intersection / union


def non_max_suppression(
    boxes: Sequence[Detection],
    iou_threshold: float = DEFAULT_IOU_THRESHOLD
) -> List[Detection]:
    """
    Greedy non-maximum suppression.

    Boxes are visited in descending confidence (ties broken by input
    order). Each kept box removes every remaining box whose IoU with it
    is >= iou_threshold, regardless of class.

    Args:
        boxes: Candidate boxes
        iou_threshold: Overlap at or above which a box is suppressed

    Returns:
        Kept boxes in descending confidence order
    """
    if not boxes:
        return []

    order = sorted(range(len(boxes)), key=lambda i: (-boxes[i].confidence, i))
    ranked = [boxes[i] for i in order]
    active = [True] * len(ranked)
    selected = []

    for i, box in enumerate(ranked):
        if not active[i]:
            continue

        selected.append(box)

        for j in range(i + 1, len(ranked)):
            if active[j] and iou(box, ranked[j]) >= iou_threshold:
                active[j] = False

    logger.debug(f"NMS kept {len(selected)}/{len(boxes)} boxes (iou>={iou_threshold})")
    return selected
