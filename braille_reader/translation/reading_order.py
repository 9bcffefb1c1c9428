"""
Reading Order Module - Groups cells into lines and words.
"""

import logging
from typing import List, Optional, Sequence

from ..result import BrailleCell

logger = logging.getLogger(__name__)

# Line tolerance as a fraction of average cell height
LINE_TOLERANCE_FACTOR = 0.8

# Word gap threshold as a multiple of average cell width
WORD_SPACING_FACTOR = 1.5


class ReadingOrderOrganizer:
    """
    Orders cells top-to-bottom, left-to-right.

    Line assignment is a single greedy pass: a cell joins the first line
    whose running average y is within tolerance, not the closest one.

    Attributes:
        line_tolerance_factor: Multiplier on average cell height
        word_spacing_factor: Multiplier on average cell width
    """

    def __init__(self, line_tolerance_factor: float = LINE_TOLERANCE_FACTOR,
                 word_spacing_factor: float = WORD_SPACING_FACTOR):
        if line_tolerance_factor <= 0 or word_spacing_factor <= 0:
            raise ValueError("Reading order factors must be positive")
        self.line_tolerance_factor = line_tolerance_factor
        self.word_spacing_factor = word_spacing_factor

    def group_into_lines(self, cells: Sequence[BrailleCell],
                         tolerance: Optional[float] = None) -> List[List[BrailleCell]]:
        """
        Group cells into lines by vertical position.

        Args:
            cells: Cells in any order
            tolerance: Absolute y tolerance; defaults to
                line_tolerance_factor x average cell height

        Returns:
            Lines sorted by the y of their leftmost cell, each sorted by x
        """
        if not cells:
            return []

        if tolerance is None:
            avg_height = sum(c.height for c in cells) / len(cells)
            tolerance = avg_height * self.line_tolerance_factor

        lines: List[List[BrailleCell]] = []
        line_y_sums: List[float] = []

        for cell in cells:
            for index, line in enumerate(lines):
                avg_line_y = line_y_sums[index] / len(line)
                if abs(cell.y - avg_line_y) < tolerance:
                    line.append(cell)
                    line_y_sums[index] += cell.y
                    break
            else:
                lines.append([cell])
                line_y_sums.append(cell.y)

        for line in lines:
            line.sort(key=lambda c: c.x)
        lines.sort(key=lambda line: line[0].y)

        logger.debug(f"Grouped {len(cells)} cells into {len(lines)} lines (tolerance={tolerance:.2f})")
        return lines

    def group_into_words(self, line: Sequence[BrailleCell]) -> List[List[BrailleCell]]:
        """
        Split an x-sorted line into words at wide horizontal gaps.

        A new word starts when the gap between one cell's right edge and
        the next cell's left edge exceeds word_spacing_factor x average width.

        Args:
            line: Cells of one line, sorted by x

        Returns:
            Words, left to right
        """
        if not line:
            return []

        avg_width = sum(c.width for c in line) / len(line)
        threshold = avg_width * self.word_spacing_factor

        words: List[List[BrailleCell]] = []
        current: List[BrailleCell] = []

        for i, cell in enumerate(line):
            current.append(cell)

            is_last = i == len(line) - 1
            if is_last or line[i + 1].left_edge - cell.right_edge > threshold:
                words.append(current)
                current = []

        return words

    def reading_order(self, cells: Sequence[BrailleCell]) -> List[BrailleCell]:
        """Flatten cells into reading order."""
        return [cell for line in self.group_into_lines(cells) for cell in line]
