"""
Class Resolver Module - Maps detected class ids to Braille entries.
"""

import logging
from typing import Dict, Mapping, Optional, Tuple

from ..detection.merger import G2_CLASS_OFFSET
from .braille_map import (
    PREFIX_PATTERNS,
    UNKNOWN_ENTRY,
    BrailleEntry,
    ModelGrade,
    get_braille_map,
)

logger = logging.getLogger(__name__)


def is_prefix_pattern(binary_pattern: str) -> bool:
    """
    Check if a pattern is a pure modifier cell.

    True for the capital sign, number sign, dot 4 and dot 5 prefixes.
    """
    return binary_pattern in PREFIX_PATTERNS


class ClassResolver:
    """
    Looks up Braille entries per grade.

    Tables are read-only and may be shared between resolvers and threads.
    Each grade is indexed by its own local class id, so the two models
    may have different class counts.

    Attributes:
        tables: Lookup table per grade
        offset: Combined-id offset marking Grade 2 classes
    """

    def __init__(
        self,
        tables: Optional[Mapping[ModelGrade, Mapping[int, BrailleEntry]]] = None,
        offset: int = G2_CLASS_OFFSET
    ):
        self.tables: Dict[ModelGrade, Mapping[int, BrailleEntry]] = {
            grade: get_braille_map(grade) for grade in ModelGrade
        }
        if tables:
            self.tables.update(tables)
        self.offset = offset

        largest = max((max(t, default=-1) for t in self.tables.values()), default=-1)
        if largest >= offset:
            raise ValueError(f"Class offset {offset} must exceed the largest local class id {largest}")

    def lookup(self, class_id: int, grade: ModelGrade) -> Optional[BrailleEntry]:
        """
        Direct table lookup.

        Returns:
            BrailleEntry, or None if the id is not in the grade's table
        """
        return self.tables[grade].get(class_id)

    def resolve(self, class_id: int, grade: ModelGrade) -> BrailleEntry:
        """
        Resolve a local class id for a known grade.

        Unknown ids resolve to UNKNOWN_ENTRY ("?" / "??????").

        Args:
            class_id: Model-local class id
            grade: Model grade the id belongs to

        Returns:
            BrailleEntry
        """
        entry = self.lookup(class_id, grade)
        if entry is None:
            logger.warning(f"Unknown G{grade.value} class ID: {class_id}")
            return UNKNOWN_ENTRY
        return entry

    def split_combined(self, combined_class_id: int) -> Tuple[ModelGrade, int]:
        """Decode a combined class id into (grade, local id)."""
        if combined_class_id >= self.offset:
            return ModelGrade.GRADE2, combined_class_id - self.offset
        return ModelGrade.GRADE1, combined_class_id

    def resolve_combined(self, combined_class_id: int) -> Tuple[ModelGrade, int, BrailleEntry]:
        """
        Resolve a class id from merged dual-model output.

        Args:
            combined_class_id: Class id, offset if it came from Grade 2

        Returns:
            Tuple of (grade, local id, entry)
        """
        grade, local_id = self.split_combined(combined_class_id)
        return grade, local_id, self.resolve(local_id, grade)
