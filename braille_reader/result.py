"""
Detection Result Dataclasses

Shared data structures passed between the detection and translation stages.
"""

import math
from dataclasses import dataclass, field, replace
from typing import List, Sequence, Tuple


# Number of values in a raw detection record: x, y, w, h, confidence, class id
RAW_DETECTION_SIZE = 6


class MalformedDetectionError(ValueError):
    """Raised when a raw detection record cannot be read."""


@dataclass(frozen=True)
class Detection:
    """
    Single candidate box produced by a detection model.

    Coordinates are center-format in whatever space the producer used
    (model input space for raw model output).

    Attributes:
        x: Center x
        y: Center y
        width: Box width
        height: Box height
        confidence: Score in [0, 1]
        class_id: Model-local class id (or combined id after merging)
    """
    x: float
    y: float
    width: float
    height: float
    confidence: float
    class_id: int

    @classmethod
    def from_raw(cls, values: Sequence[float]) -> 'Detection':
        """
        Create a Detection from a flat [x, y, w, h, conf, classId, ...] record.

        Trailing values beyond the first six are ignored.

        Args:
            values: Raw numeric record

        Returns:
            Detection instance

        Raises:
            MalformedDetectionError: If the record is too short or not numeric
        """
        if len(values) < RAW_DETECTION_SIZE:
            raise MalformedDetectionError(
                f"Malformed raw detection: expected at least {RAW_DETECTION_SIZE} "
                f"values [x, y, w, h, conf, classId], got {len(values)}"
            )

        try:
            x, y, w, h, conf = (float(v) for v in values[:5])
            class_value = float(values[5])
        except (TypeError, ValueError) as e:
            raise MalformedDetectionError(f"Malformed raw detection {list(values)!r}: {e}") from e

        if not all(math.isfinite(v) for v in (x, y, w, h, conf, class_value)):
            raise MalformedDetectionError(f"Malformed raw detection: non-finite value in {list(values)!r}")

        return cls(x=x, y=y, width=w, height=h, confidence=conf, class_id=int(class_value))

    def with_class_id(self, class_id: int) -> 'Detection':
        """Return a copy carrying a different class id."""
        return replace(self, class_id=class_id)

    @property
    def corners(self) -> Tuple[float, float, float, float]:
        """(x1, y1, x2, y2) corner coordinates."""
        half_w = self.width / 2
        half_h = self.height / 2
        return (self.x - half_w, self.y - half_h, self.x + half_w, self.y + half_h)

    def to_list(self) -> List[float]:
        """Flat [x, y, w, h, conf, classId] representation."""
        return [self.x, self.y, self.width, self.height, self.confidence, float(self.class_id)]


@dataclass(frozen=True)
class LetterboxParams:
    """
    Padding applied when an image was letterboxed into the model input.

    Attributes:
        scale: Uniform scale factor applied to the original image
        offset_x: Horizontal padding added on the left (model pixels)
        offset_y: Vertical padding added on the top (model pixels)
    """
    scale: float
    offset_x: float = 0.0
    offset_y: float = 0.0

    def __post_init__(self):
        if self.scale <= 0:
            raise ValueError(f"Letterbox scale must be positive, got {self.scale}")

    def content_size(self, input_width: int, input_height: int) -> Tuple[int, int]:
        """
        Original image size implied by the padded model input.

        Args:
            input_width: Padded model input width
            input_height: Padded model input height

        Returns:
            (width, height) of the original image, at least 1x1
        """
        content_w = input_width - 2 * self.offset_x
        content_h = input_height - 2 * self.offset_y
        return (max(1, int(content_w / self.scale)), max(1, int(content_h / self.scale)))


@dataclass(frozen=True)
class CornerBox:
    """Corner coordinates clamped to the display area."""
    left: float
    top: float
    right: float
    bottom: float


@dataclass(frozen=True)
class NormalizedDetection:
    """Detection mapped into display space, before class resolution."""
    x: float
    y: float
    width: float
    height: float
    confidence: float
    class_id: int
    box: CornerBox


@dataclass(frozen=True)
class BrailleCell:
    """
    Positioned Braille cell with its resolved meaning.

    Attributes:
        class_id: Class id as detected (combined id in dual-model mode)
        binary_pattern: Dot pattern, multi-cell entries joined by '-'
        meaning: Text the cell stands for (or a modifier name such as "capital")
        confidence: Detection confidence
        x: Center x in display space
        y: Center y in display space
        width: Width in display space
        height: Height in display space
        box: Clamped corner box for rendering
    """
    class_id: int
    binary_pattern: str
    meaning: str
    confidence: float
    x: float
    y: float
    width: float
    height: float
    box: CornerBox

    @property
    def left_edge(self) -> float:
        return self.x - self.width / 2

    @property
    def right_edge(self) -> float:
        return self.x + self.width / 2


@dataclass
class BrailleResult:
    """Complete post-processing result for one image."""
    cells: List[BrailleCell]             # Cells in reading order
    lines: List[List[BrailleCell]]       # Cells grouped by line
    detection_text: str                  # One report line per cell
    translated_text: str                 # Reconstructed text
    raw_count: int = 0                   # Detections received before filtering
    warnings: List[str] = field(default_factory=list)

    @property
    def cell_count(self) -> int:
        """Number of cells kept after NMS."""
        return len(self.cells)
