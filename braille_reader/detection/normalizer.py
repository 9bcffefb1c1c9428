"""
Detection Normalizer Module - Maps model-space boxes into display space.

Two modes:
    - rescale: the image was stretched to the model input; scale each axis
      by display / model size.
    - letterbox: the image was uniformly scaled and padded; subtract the
      padding offset and divide by the scale factor.
"""

from typing import Optional, Tuple

from ..result import CornerBox, Detection, LetterboxParams, NormalizedDetection


def _clamped_box(x: float, y: float, w: float, h: float,
                 display_width: float, display_height: float) -> CornerBox:
    """Corner box clamped to [0, display dimension]."""
    return CornerBox(
        left=max(0.0, x - w / 2),
        top=max(0.0, y - h / 2),
        right=min(display_width, x + w / 2),
        bottom=min(display_height, y + h / 2),
    )


def _check_positive(**dims: float) -> None:
    for name, value in dims.items():
        if value <= 0:
            raise ValueError(f"{name} must be positive, got {value}")


def normalize_rescaled(
    raw: Detection,
    model_width: float,
    model_height: float,
    display_width: float,
    display_height: float
) -> NormalizedDetection:
    """
    Rescale a model-space box to display space.

    Args:
        raw: Detection in model input coordinates
        model_width: Model input width
        model_height: Model input height
        display_width: Target width
        display_height: Target height

    Returns:
        NormalizedDetection in display coordinates
    """
    _check_positive(model_width=model_width, model_height=model_height,
                    display_width=display_width, display_height=display_height)

    ratio_w = display_width / model_width
    ratio_h = display_height / model_height

    x = raw.x * ratio_w
    y = raw.y * ratio_h
    w = raw.width * ratio_w
    h = raw.height * ratio_h

    return NormalizedDetection(
        x=x, y=y, width=w, height=h,
        confidence=raw.confidence,
        class_id=raw.class_id,
        box=_clamped_box(x, y, w, h, display_width, display_height),
    )


def normalize_letterboxed(
    raw: Detection,
    letterbox: LetterboxParams,
    image_width: float,
    image_height: float
) -> NormalizedDetection:
    """
    Undo letterbox padding and scaling to get original-image coordinates.

    Args:
        raw: Detection in padded model input coordinates
        letterbox: Scale factor and padding offsets used upstream
        image_width: Original image width (clamp bound)
        image_height: Original image height (clamp bound)

    Returns:
        NormalizedDetection in original image coordinates
    """
    _check_positive(image_width=image_width, image_height=image_height)

    x = (raw.x - letterbox.offset_x) / letterbox.scale
    y = (raw.y - letterbox.offset_y) / letterbox.scale
    w = raw.width / letterbox.scale
    h = raw.height / letterbox.scale

    return NormalizedDetection(
        x=x, y=y, width=w, height=h,
        confidence=raw.confidence,
        class_id=raw.class_id,
        box=_clamped_box(x, y, w, h, image_width, image_height),
    )


def normalize(
    raw: Detection,
    model_size: Tuple[float, float],
    display_size: Tuple[float, float],
    letterbox: Optional[LetterboxParams] = None
) -> NormalizedDetection:
    """
    Normalize a raw detection, choosing the mode from whether padding was applied.

    Args:
        raw: Detection in model input coordinates
        model_size: (width, height) of the model input
        display_size: (width, height) of the output space
        letterbox: Padding parameters, or None for plain rescaling

    Returns:
        NormalizedDetection
    """
    display_width, display_height = display_size
    if letterbox is not None:
        return normalize_letterboxed(raw, letterbox, display_width, display_height)

    model_width, model_height = model_size
    return normalize_rescaled(raw, model_width, model_height, display_width, display_height)
