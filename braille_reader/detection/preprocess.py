"""
Letterbox Preprocessing

Fits an image into the square model input without distorting it and
records the padding so detections can be mapped back.
"""

from typing import Tuple

import cv2
import numpy as np

from ..result import LetterboxParams

# Model native input size
INPUT_SIZE = 640

# Grey fill used for padding
PAD_VALUE = 114


def letterbox(image: np.ndarray, input_size: int = INPUT_SIZE,
              pad_value: int = PAD_VALUE) -> Tuple[np.ndarray, LetterboxParams]:
    """
    Scale an image so its longer side equals input_size and pad it to a square.

    Args:
        image: HxW or HxWxC image array
        input_size: Side length of the square model input
        pad_value: Fill value for padding

    Returns:
        Tuple of (padded image, LetterboxParams)
    """
    height, width = image.shape[:2]
    if height == 0 or width == 0:
        raise ValueError(f"Cannot letterbox empty image of shape {image.shape}")

    scale = min(input_size / width, input_size / height)
    new_w = max(1, int(round(width * scale)))
    new_h = max(1, int(round(height * scale)))

    resized = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_LINEAR)

    pad_x = (input_size - new_w) // 2
    pad_y = (input_size - new_h) // 2

    padded = cv2.copyMakeBorder(
        resized,
        pad_y, input_size - new_h - pad_y,
        pad_x, input_size - new_w - pad_x,
        cv2.BORDER_CONSTANT,
        value=(pad_value, pad_value, pad_value),
    )

    return padded, LetterboxParams(scale=scale, offset_x=float(pad_x), offset_y=float(pad_y))
