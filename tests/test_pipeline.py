#!/usr/bin/env python3
"""
Test script for the end-to-end pipeline, settings and debug output.

Detections are given in model space (640x640) so that, without an
image size, coordinates pass through unchanged.

Usage:
    python tests/test_pipeline.py
    pytest tests/test_pipeline.py
"""

import json
import os
import sys
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from PIL import Image

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from braille_reader import (
    BraillePipeline,
    Detection,
    LetterboxParams,
    MalformedDetectionError,
    ModelMode,
    PipelineConfig,
)
from braille_reader import debug
from braille_reader.settings import DEFAULT_SETTINGS, apply_overrides, load_settings, save_settings

# Grade 1 class ids
A, B, CAPITAL, DOT_4, E, H, I, L, N, NUMBER, O = 37, 38, 40, 42, 43, 47, 48, 51, 53, 54, 55

# Grade 2 class ids
DOT_5, HAPON, IBIG, NOON, SANG_AYON, TALAGA = 19, 29, 31, 60, 74, 77


def det(class_id, x, y=100.0, conf=0.875, w=20.0, h=30.0):
    return Detection(x=x, y=y, width=w, height=h, confidence=conf, class_id=class_id)


def row(class_ids, start=100.0, y=100.0, conf=0.875):
    """Detections spaced closely enough to form one word."""
    return [det(c, start + i * 25.0, y, conf) for i, c in enumerate(class_ids)]


def pipeline(mode=ModelMode.G1, **kwargs):
    return BraillePipeline(PipelineConfig(mode=mode, **kwargs))


def banner(title):
    print("\n" + "=" * 60)
    print(f"TEST: {title}")
    print("=" * 60)


def test_grade1_mode():
    """Grade 1 detections become a report and plain text."""
    banner("Grade 1 Mode")

    result = pipeline().process(row([H, E, L, L, O]))
    print(result.detection_text)
    print(f"  Translated: {result.translated_text!r}")

    assert result.translated_text == "hello"
    assert result.cell_count == 5
    assert result.raw_count == 5
    assert result.warnings == []
    assert result.detection_text.startswith("Found 5 braille cells\n\n")
    assert "Cell 0: h (87%), Binary: 110010" in result.detection_text
    assert "Cell 4: o (87%), Binary: 101010" in result.detection_text
    assert [c.meaning for c in result.cells] == list("hello")

    print("  [PASS] Grade 1 mode tests")


def test_grade2_mode():
    """Grade 2 contractions and the dot 5 prefix."""
    banner("Grade 2 Mode")

    result = pipeline(ModelMode.G2).process(g2_detections=row([SANG_AYON, DOT_5, HAPON]))
    print(f"  Translated: {result.translated_text!r}")
    assert result.translated_text == "sang-ayon hapon"

    # Multi-cell contractions report their full pattern
    result = pipeline(ModelMode.G2).process(g2_detections=row([TALAGA]))
    assert "Cell 0: talaga (87%), Binary: 000010-011110" in result.detection_text
    assert result.cells[0].binary_pattern == "000010-011110"

    print("  [PASS] Grade 2 mode tests")


def test_both_mode():
    """Merged output resolves Grade 2 ids through the offset."""
    banner("Both Mode")

    result = pipeline(ModelMode.BOTH).process(
        g1_detections=[det(I, 100)],
        g2_detections=[det(IBIG, 125)],
    )
    print(f"  Translated: {result.translated_text!r}")
    assert result.translated_text == "iibig"
    assert [c.class_id for c in result.cells] == [I, 1000 + IBIG]

    # Prefixes across both models and two lines
    g1 = row([CAPITAL, A, DOT_4, N]) + row([NUMBER, B], y=200)
    g2 = row([DOT_5, NOON], start=300)
    result = pipeline(ModelMode.BOTH).process(g1, g2)
    print(f"  Translated: {result.translated_text!r}")
    assert result.translated_text == "Añ noon\n2"
    assert len(result.lines) == 2
    assert result.cell_count == 8

    print("  [PASS] Both mode tests")


def test_mode_ignores_other_model():
    """Detections from an unselected model are dropped."""
    banner("Mode Filtering")

    result = pipeline(ModelMode.G1).process(row([A]), row([HAPON], start=300))
    assert result.translated_text == "a"
    assert result.raw_count == 1

    result = pipeline(ModelMode.G2).process(row([A]), row([HAPON], start=300))
    assert result.translated_text == "hapon"
    assert result.raw_count == 1

    print("  [PASS] Mode filtering tests")


def test_confidence_and_nms():
    """Low-confidence and duplicate detections are removed."""
    banner("Confidence and NMS")

    detections = [det(A, 100, conf=0.875), det(B, 125, conf=0.125), det(E, 150, conf=0.25)]
    result = pipeline().process(detections)
    assert result.translated_text == "ae"
    assert result.raw_count == 3

    result = pipeline(confidence_threshold=0.5).process(detections)
    assert result.translated_text == "a"

    # Overlapping duplicates keep the most confident box
    duplicates = [det(HAPON, 100, conf=0.75), det(HAPON, 102, conf=0.875)]
    result = pipeline(ModelMode.G2).process(g2_detections=duplicates)
    assert result.cell_count == 1
    assert result.cells[0].confidence == 0.875
    assert result.cells[0].x == 102

    print("  [PASS] Confidence and NMS tests")


def test_unknown_class():
    """Unknown class ids render as '?' and produce a warning."""
    banner("Unknown Class")

    result = pipeline().process([det(A, 100), det(999, 125)])
    print(f"  Warnings: {result.warnings}")
    assert result.translated_text == "a?"
    assert result.warnings == ["Unknown class ID: 999"]
    assert "Cell 1: ? (87%), Binary: ??????" in result.detection_text

    result = pipeline(ModelMode.BOTH).process(g2_detections=[det(500, 100)])
    assert result.warnings == ["Unknown class ID: 1500"]

    print("  [PASS] Unknown class tests")


def test_empty_input():
    """No detections gives an empty report and no text."""
    banner("Empty Input")

    for mode in ModelMode:
        result = pipeline(mode).process()
        assert result.detection_text.startswith("Found 0 braille cells")
        assert result.translated_text == ""
        assert result.cells == []
        assert result.lines == []

    print("  [PASS] Empty input tests")


def test_coordinate_spaces():
    """Rescaled and letterboxed inputs map back to image coordinates."""
    banner("Coordinate Spaces")

    # Plain rescale from 640x640 to 1280x960
    result = pipeline().process([det(A, 100, 100)], image_size=(1280, 960))
    cell = result.cells[0]
    assert (cell.x, cell.y, cell.width, cell.height) == (200, 150, 40, 45)

    # Letterboxed: 1280x960 scaled by 0.5 and padded 80px top and bottom
    letterbox = LetterboxParams(scale=0.5, offset_y=80)
    result = pipeline().process([det(A, 100, 180)], image_size=(1280, 960), letterbox=letterbox)
    cell = result.cells[0]
    print(f"  Letterboxed cell: ({cell.x}, {cell.y}, {cell.width}, {cell.height})")
    assert (cell.x, cell.y, cell.width, cell.height) == (200, 200, 40, 60)
    assert (cell.box.left, cell.box.top, cell.box.right, cell.box.bottom) == (180, 170, 220, 230)

    # Without an image size the clamp bounds come from the letterbox content size
    result = pipeline().process([det(A, 600, 500, w=20, h=20)], letterbox=letterbox)
    cell = result.cells[0]
    assert (cell.x, cell.y) == (1200, 840)
    assert (cell.box.left, cell.box.top, cell.box.right, cell.box.bottom) == (1180, 820, 1220, 860)

    print("  [PASS] Coordinate space tests")


def test_process_raw():
    """Flat records are parsed before processing."""
    banner("Process Raw")

    raw = [d.to_list() for d in row([H, E, L, L, O])]
    assert pipeline().process_raw(raw).translated_text == "hello"

    with pytest.raises(MalformedDetectionError):
        pipeline().process_raw([[1, 2, 3]])

    with pytest.raises(ValueError):
        pipeline().process_raw([[1, 2, 3, 4, "x", 0]])

    print("  [PASS] Process raw tests")


def test_concurrent_use():
    """One pipeline gives identical results from several threads."""
    banner("Concurrent Use")

    p = pipeline(ModelMode.BOTH)
    g1 = row([CAPITAL, H, E, L, L, O]) + row([NUMBER, A, B], y=200)
    g2 = row([DOT_5, NOON], start=400)

    with ThreadPoolExecutor(max_workers=4) as pool:
        texts = list(pool.map(lambda _: p.process(g1, g2).translated_text, range(16)))

    assert set(texts) == {"Hello noon\n12"}

    print("  [PASS] Concurrent use tests")


def test_pipeline_config():
    """Config validation and construction from settings."""
    banner("Pipeline Config")

    for kwargs in ({"confidence_threshold": 1.5}, {"nms_threshold": -0.1},
                   {"input_size": 0}, {"word_spacing_factor": 0}):
        with pytest.raises(ValueError):
            PipelineConfig(**kwargs)

    config = PipelineConfig.from_settings({"model": "BOTH", "confidence_threshold": "0.4"})
    assert config.mode == ModelMode.BOTH
    assert config.confidence_threshold == 0.4
    assert config.nms_threshold == 0.5

    config = PipelineConfig.from_settings(DEFAULT_SETTINGS)
    assert config == PipelineConfig()

    with pytest.raises(ValueError, match="Available"):
        ModelMode.from_name("g3")

    assert not ModelMode.G1.grade2_enabled
    assert ModelMode.G2.grade2_enabled
    assert ModelMode.BOTH.grade2_enabled

    print("  [PASS] Pipeline config tests")


def test_braille_map_override():
    """A configured lookup table replaces the built-in one."""
    banner("Braille Map Override")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "map.json"
        path.write_text(
            json.dumps({"grade1": {str(A): {"binary": "100000", "meaning": "x"}}}),
            encoding="utf-8",
        )
        result = pipeline(braille_map_path=str(path)).process([det(A, 100)])
        assert result.translated_text == "x"

    print("  [PASS] Braille map override tests")


def test_settings():
    """Settings round-trip and fall back to defaults."""
    banner("Settings")

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "config.json"

        assert load_settings(path) == DEFAULT_SETTINGS

        settings = load_settings(path)
        settings["model"] = "both"
        save_settings(settings, path)
        loaded = load_settings(path)
        assert loaded["model"] == "both"
        assert loaded["nms_threshold"] == DEFAULT_SETTINGS["nms_threshold"]

        # Missing keys are filled from defaults
        path.write_text(json.dumps({"confidence_threshold": 0.6}), encoding="utf-8")
        loaded = load_settings(path)
        assert loaded["confidence_threshold"] == 0.6
        assert loaded["model"] == "g1"

        path.write_text("{not json", encoding="utf-8")
        assert load_settings(path) == DEFAULT_SETTINGS

        path.write_text("[1, 2]", encoding="utf-8")
        assert load_settings(path) == DEFAULT_SETTINGS

        # Unknown keys are dropped, optional ones kept
        path.write_text(json.dumps({"strategy_name": "greedy", "class_offset": 2000}), encoding="utf-8")
        loaded = load_settings(path)
        assert "strategy_name" not in loaded
        assert PipelineConfig.from_settings(loaded).class_offset == 2000

        save_settings(dict(loaded, scratch=1), path)
        assert "scratch" not in json.loads(path.read_text(encoding="utf-8"))

    # Overrides skip unset values
    merged = apply_overrides(DEFAULT_SETTINGS, model="both", confidence_threshold=None)
    assert merged["model"] == "both"
    assert merged["confidence_threshold"] == DEFAULT_SETTINGS["confidence_threshold"]
    assert DEFAULT_SETTINGS["model"] == "g1"
    with pytest.raises(ValueError):
        apply_overrides(DEFAULT_SETTINGS, strategy_name="greedy")

    print("  [PASS] Settings tests")


def test_debug_output():
    """Annotated images mark each cell."""
    banner("Debug Output")

    assert debug.get_confidence_color(0.95) == "#4CAF50"
    assert debug.get_confidence_color(0.8) == "#FFC107"
    assert debug.get_confidence_color(0.5) == "#d32f2f"

    cells = pipeline().process([det(A, 100)]).cells
    image = Image.new("RGB", (640, 640), "white")

    annotated = debug.draw_cells(image, cells)
    assert annotated.size == image.size
    assert annotated.getpixel((90, 100)) == (255, 193, 7)  # left edge
    assert image.getpixel((90, 100)) == (255, 255, 255)  # original untouched

    original_dir = debug.DEBUG_DIR
    with tempfile.TemporaryDirectory() as tmp:
        debug_dir = Path(tmp) / "debug"
        out_dir = Path(tmp) / "out"
        debug.DEBUG_DIR = debug_dir
        try:
            # Explicit paths leave the debug directory alone
            paths = [debug.save_annotated_image(image, cells, out_dir / f"annotated_{i}.png")
                     for i in range(debug.MAX_DEBUG_IMAGES + 2)]
            assert all(p.exists() for p in paths)
            assert len(list(out_dir.glob("annotated_*.png"))) == debug.MAX_DEBUG_IMAGES + 2
            assert not debug_dir.exists()

            # Default location is pruned to the most recent images
            debug_dir.mkdir()
            for i in range(debug.MAX_DEBUG_IMAGES + 2):
                old = debug_dir / f"annotated_old_{i}.png"
                image.save(old, "PNG")
                os.utime(old, (0, 0))
            path = debug.save_annotated_image(image, cells)
            assert path.parent == debug_dir
            assert path.exists()
            assert len(list(debug_dir.glob("annotated_*.png"))) == debug.MAX_DEBUG_IMAGES
        finally:
            debug.DEBUG_DIR = original_dir

    print("  [PASS] Debug output tests")


def main():
    """Run all tests."""
    print("\n" + "#" * 60)
    print("# PIPELINE TESTS")
    print("#" * 60)

    tests = [
        ("Grade 1 Mode", test_grade1_mode),
        ("Grade 2 Mode", test_grade2_mode),
        ("Both Mode", test_both_mode),
        ("Mode Filtering", test_mode_ignores_other_model),
        ("Confidence and NMS", test_confidence_and_nms),
        ("Unknown Class", test_unknown_class),
        ("Empty Input", test_empty_input),
        ("Coordinate Spaces", test_coordinate_spaces),
        ("Process Raw", test_process_raw),
        ("Concurrent Use", test_concurrent_use),
        ("Pipeline Config", test_pipeline_config),
        ("Braille Map Override", test_braille_map_override),
        ("Settings", test_settings),
        ("Debug Output", test_debug_output),
    ]

    results = []
    for name, test in tests:
        try:
            test()
            results.append((name, True))
        except AssertionError as e:
            print(f"  [FAIL] {e}")
            results.append((name, False))

    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    for name, passed in results:
        print(f"  {name}: [{'PASS' if passed else 'FAIL'}]")

    return 0 if all(passed for _, passed in results) else 1


if __name__ == "__main__":
    sys.exit(main())
