"""
Translation Package - Class resolution, reading order and transliteration.

Usage:
    from braille_reader.translation import ClassResolver, ModelGrade, Transliterator

    resolver = ClassResolver()
    entry = resolver.resolve(47, ModelGrade.GRADE1)  # BrailleEntry("110010", "h")

    text = Transliterator(grade2_enabled=True).translate(cells)
"""

from .braille_map import (
    G1_BRAILLE_MAP,
    G2_BRAILLE_MAP,
    PART_WORDS,
    UNKNOWN_ENTRY,
    WHOLE_WORDS,
    BrailleEntry,
    ModelGrade,
    ambiguous_contractions,
    get_braille_map,
    load_braille_map,
)
from .resolver import ClassResolver, is_prefix_pattern
from .reading_order import ReadingOrderOrganizer
from .transliterator import (
    TransliterationState,
    Transliterator,
    is_part_word,
    is_whole_word,
)

__all__ = [
    # Tables
    "G1_BRAILLE_MAP",
    "G2_BRAILLE_MAP",
    "PART_WORDS",
    "UNKNOWN_ENTRY",
    "WHOLE_WORDS",
    "BrailleEntry",
    "ModelGrade",
    "ambiguous_contractions",
    "get_braille_map",
    "load_braille_map",
    # Resolution
    "ClassResolver",
    "is_prefix_pattern",
    # Ordering
    "ReadingOrderOrganizer",
    # Transliteration
    "TransliterationState",
    "Transliterator",
    "is_part_word",
    "is_whole_word",
]
