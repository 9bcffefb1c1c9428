"""
Braille Pipeline - Post-processing from raw detections to translated text.

Flow:
    raw detections -> confidence filter -> NMS per model
    -> [merge if both models] -> normalize -> resolve
    -> reading order -> detection report + translated text
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .detection.geometry import DEFAULT_IOU_THRESHOLD, non_max_suppression
from .detection.merger import G2_CLASS_OFFSET, ModelMerger
from .detection.normalizer import normalize
from .detection.preprocess import INPUT_SIZE
from .result import BrailleCell, BrailleResult, Detection, LetterboxParams
from .translation.braille_map import UNKNOWN_ENTRY, ModelGrade, load_braille_map
from .translation.reading_order import LINE_TOLERANCE_FACTOR, WORD_SPACING_FACTOR, ReadingOrderOrganizer
from .translation.resolver import ClassResolver
from .translation.transliterator import Transliterator

logger = logging.getLogger(__name__)

# Default confidence threshold for keeping detections
CONFIDENCE_THRESHOLD = 0.25


class ModelMode(Enum):
    """Which detection model(s) produced the input."""
    G1 = "g1"
    G2 = "g2"
    BOTH = "both"

    @classmethod
    def from_name(cls, name: str) -> 'ModelMode':
        """
        Look up a mode by its settings name.

        Raises:
            ValueError: If name is not a known mode
        """
        try:
            return cls(name.lower())
        except ValueError:
            available = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown model mode: {name}. Available: {available}") from None

    @property
    def grade2_enabled(self) -> bool:
        """True if Grade 2 contractions can appear in the output."""
        return self in (ModelMode.G2, ModelMode.BOTH)


@dataclass(frozen=True)
class PipelineConfig:
    """
    Post-processing parameters.

    Attributes:
        mode: Model(s) in use
        confidence_threshold: Minimum detection confidence
        nms_threshold: IoU threshold for NMS and merging
        input_size: Model native square input size
        class_offset: Combined-id offset for Grade 2 classes
        line_tolerance_factor: Line grouping tolerance (x average height)
        word_spacing_factor: Word gap threshold (x average width)
        braille_map_path: Optional JSON lookup table override
    """
    mode: ModelMode = ModelMode.G1
    confidence_threshold: float = CONFIDENCE_THRESHOLD
    nms_threshold: float = DEFAULT_IOU_THRESHOLD
    input_size: int = INPUT_SIZE
    class_offset: int = G2_CLASS_OFFSET
    line_tolerance_factor: float = LINE_TOLERANCE_FACTOR
    word_spacing_factor: float = WORD_SPACING_FACTOR
    braille_map_path: Optional[str] = None

    def __post_init__(self):
        for name in ("confidence_threshold", "nms_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        for name in ("input_size", "class_offset", "line_tolerance_factor", "word_spacing_factor"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> 'PipelineConfig':
        """
        Build a config from a settings dictionary.

        Args:
            settings: Dictionary from load_settings()

        Returns:
            PipelineConfig with defaults for missing keys
        """
        return cls(
            mode=ModelMode.from_name(settings.get("model", ModelMode.G1.value)),
            confidence_threshold=float(settings.get("confidence_threshold", CONFIDENCE_THRESHOLD)),
            nms_threshold=float(settings.get("nms_threshold", DEFAULT_IOU_THRESHOLD)),
            input_size=int(settings.get("input_size", INPUT_SIZE)),
            class_offset=int(settings.get("class_offset", G2_CLASS_OFFSET)),
            line_tolerance_factor=float(settings.get("line_tolerance_factor", LINE_TOLERANCE_FACTOR)),
            word_spacing_factor=float(settings.get("word_spacing_factor", WORD_SPACING_FACTOR)),
            braille_map_path=settings.get("braille_map_path"),
        )


def format_detection_report(cells: Sequence[BrailleCell]) -> str:
    """
    Format one report line per cell.

    Args:
        cells: Cells in reading order

    Returns:
        Report text starting with "Found N braille cells"
    """
    lines = [f"Found {len(cells)} braille cells", ""]
    for i, cell in enumerate(cells):
        lines.append(
            f"Cell {i}: {cell.meaning} ({int(cell.confidence * 100)}%), "
            f"Binary: {cell.binary_pattern}"
        )
    return "\n".join(lines) + "\n"


class BraillePipeline:
    """
    Runs post-processing for one model configuration.

    Holds no per-image state; one instance can process any number of
    images, including from several threads.

    Attributes:
        config: Pipeline parameters
        resolver: Class id lookup
        merger: Dual-model merger
        organizer: Reading order grouping
        transliterator: Text reconstruction
    """

    def __init__(self, config: Optional[PipelineConfig] = None,
                 resolver: Optional[ClassResolver] = None):
        self.config = config or PipelineConfig()

        if resolver is None:
            tables = load_braille_map(self.config.braille_map_path) if self.config.braille_map_path else None
            resolver = ClassResolver(tables, offset=self.config.class_offset)
        self.resolver = resolver

        self.merger = ModelMerger(offset=self.config.class_offset)
        self.organizer = ReadingOrderOrganizer(
            line_tolerance_factor=self.config.line_tolerance_factor,
            word_spacing_factor=self.config.word_spacing_factor,
        )
        self.transliterator = Transliterator(
            grade2_enabled=self.config.mode.grade2_enabled,
            organizer=self.organizer,
        )

    def process(
        self,
        g1_detections: Sequence[Detection] = (),
        g2_detections: Sequence[Detection] = (),
        image_size: Optional[Tuple[float, float]] = None,
        letterbox: Optional[LetterboxParams] = None
    ) -> BrailleResult:
        """
        Post-process one image's detections.

        Detections from a model not selected by the mode are ignored.

        Args:
            g1_detections: Grade 1 model output in model space
            g2_detections: Grade 2 model output in model space
            image_size: (width, height) of the display/original image;
                defaults to the letterbox content size, or the model
                input size without letterboxing
            letterbox: Padding parameters if the input was letterboxed

        Returns:
            BrailleResult with cells, report and translated text
        """
        start = time.perf_counter()
        mode = self.config.mode
        model_size = (self.config.input_size, self.config.input_size)
        if image_size is not None:
            display_size = image_size
        elif letterbox is not None:
            display_size = letterbox.content_size(self.config.input_size, self.config.input_size)
        else:
            display_size = model_size

        if mode == ModelMode.G1:
            g2_detections = ()
        elif mode == ModelMode.G2:
            g1_detections = ()
        raw_count = len(g1_detections) + len(g2_detections)

        g1_kept = self._filter_and_suppress(g1_detections, "G1")
        g2_kept = self._filter_and_suppress(g2_detections, "G2")

        if mode == ModelMode.BOTH:
            detections = self.merger.merge(g1_kept, g2_kept, self.config.nms_threshold)
        elif mode == ModelMode.G2:
            detections = g2_kept
        else:
            detections = g1_kept

        cells = []
        warnings = []
        for detection in detections:
            cell = self._build_cell(detection, model_size, display_size, letterbox)
            if cell.meaning == UNKNOWN_ENTRY.meaning and cell.binary_pattern == UNKNOWN_ENTRY.binary:
                warnings.append(f"Unknown class ID: {detection.class_id}")
            cells.append(cell)

        lines = self.organizer.group_into_lines(cells)
        ordered = [cell for line in lines for cell in line]

        result = BrailleResult(
            cells=ordered,
            lines=lines,
            detection_text=format_detection_report(ordered),
            translated_text=self.transliterator.translate_lines(lines),
            raw_count=raw_count,
            warnings=warnings,
        )

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            f"Processed {raw_count} detections -> {result.cell_count} cells "
            f"in {len(lines)} lines ({elapsed_ms:.1f}ms)"
        )
        return result

    def process_raw(
        self,
        g1_raw: Sequence[Sequence[float]] = (),
        g2_raw: Sequence[Sequence[float]] = (),
        image_size: Optional[Tuple[float, float]] = None,
        letterbox: Optional[LetterboxParams] = None
    ) -> BrailleResult:
        """
        Same as process() but from flat [x, y, w, h, conf, classId] records.

        Raises:
            MalformedDetectionError: If a record is malformed
        """
        return self.process(
            [Detection.from_raw(r) for r in g1_raw],
            [Detection.from_raw(r) for r in g2_raw],
            image_size=image_size,
            letterbox=letterbox,
        )

    def _filter_and_suppress(self, detections: Sequence[Detection], label: str) -> List[Detection]:
        """Confidence filter then NMS for one model's output."""
        confident = [d for d in detections if d.confidence >= self.config.confidence_threshold]
        kept = non_max_suppression(confident, self.config.nms_threshold)
        if detections:
            logger.debug(
                f"{label}: {len(detections)} raw, {len(confident)} above "
                f"{self.config.confidence_threshold}, {len(kept)} after NMS"
            )
        return kept

    def _build_cell(
        self,
        detection: Detection,
        model_size: Tuple[float, float],
        display_size: Tuple[float, float],
        letterbox: Optional[LetterboxParams]
    ) -> BrailleCell:
        """Normalize a detection and attach its Braille entry."""
        normalized = normalize(detection, model_size, display_size, letterbox)

        if self.config.mode == ModelMode.BOTH:
            _, _, entry = self.resolver.resolve_combined(detection.class_id)
        elif self.config.mode == ModelMode.G2:
            entry = self.resolver.resolve(detection.class_id, ModelGrade.GRADE2)
        else:
            entry = self.resolver.resolve(detection.class_id, ModelGrade.GRADE1)

        logger.debug(f"Cell: ClassID={detection.class_id}, Binary={entry.binary}, Meaning={entry.meaning}")

        return BrailleCell(
            class_id=detection.class_id,
            binary_pattern=entry.binary,
            meaning=entry.meaning,
            confidence=normalized.confidence,
            x=normalized.x,
            y=normalized.y,
            width=normalized.width,
            height=normalized.height,
            box=normalized.box,
        )
