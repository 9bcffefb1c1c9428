"""
Braille Reader - Post-processing for Braille cell detection models.

Turns raw Grade 1 / Grade 2 detection model output into ordered Braille
cells and translated text.

Public API:
    - Detection: Raw candidate box
    - BrailleCell: Positioned cell with resolved meaning
    - BrailleResult: Cells, detection report and translated text
    - BraillePipeline: End-to-end post-processing
    - PipelineConfig: Thresholds and model mode
    - ModelMode: g1, g2 or both

Usage:
    from braille_reader import BraillePipeline, PipelineConfig, ModelMode

    pipeline = BraillePipeline(PipelineConfig(mode=ModelMode.BOTH))
    result = pipeline.process_raw(g1_raw, g2_raw, image_size=(1280, 960))

    print(result.detection_text)
    print(result.translated_text)
"""

from .result import (
    BrailleCell,
    BrailleResult,
    CornerBox,
    Detection,
    LetterboxParams,
    MalformedDetectionError,
    NormalizedDetection,
)
from .pipeline import (
    BraillePipeline,
    ModelMode,
    PipelineConfig,
    format_detection_report,
)

__all__ = [
    # Records
    "BrailleCell",
    "BrailleResult",
    "CornerBox",
    "Detection",
    "LetterboxParams",
    "MalformedDetectionError",
    "NormalizedDetection",
    # Pipeline
    "BraillePipeline",
    "ModelMode",
    "PipelineConfig",
    "format_detection_report",
]
