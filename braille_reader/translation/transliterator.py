"""
Transliterator Module - Converts ordered Braille cells into text.

Single pass over lines and words carrying two flags:
    - capitalize_next: set by the capital sign, consumed by the next letter
    - number_mode: set by the number sign, cleared at each line end

Modifier cells (capital, number, dot 4, dot 5) produce no text of their
own. Dot 4 followed by "n" composes "ñ". With Grade 2 enabled, whole-word
contractions become separate tokens while part-word contractions fuse
with the letters around them.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..result import BrailleCell
from .braille_map import (
    CAPITAL_MEANING,
    DOT4_PATTERN,
    DOT5_PATTERN,
    NUMBER_MEANING,
    PART_WORDS,
    WHOLE_WORDS,
)
from .reading_order import ReadingOrderOrganizer

logger = logging.getLogger(__name__)

# Letters a-j read as digits after the number sign
NUMBER_MAP: Dict[str, str] = {
    "a": "1", "b": "2", "c": "3", "d": "4", "e": "5",
    "f": "6", "g": "7", "h": "8", "i": "9", "j": "0",
}

TOKEN_SEPARATOR = " "
LINE_SEPARATOR = "\n"


@dataclass
class TransliterationState:
    """Flags carried across cells within one pass."""
    capitalize_next: bool = False
    number_mode: bool = False


def is_whole_word(text: str) -> bool:
    """Check if text is a standalone Grade 2 contraction."""
    return text in WHOLE_WORDS


def is_part_word(text: str) -> bool:
    """Check if text is a Grade 2 part-word contraction."""
    return text in PART_WORDS


class Transliterator:
    """
    Builds translated text from cells in reading order.

    Attributes:
        grade2_enabled: Apply whole-word contraction handling
        organizer: Line and word grouping
    """

    def __init__(self, grade2_enabled: bool = False,
                 organizer: Optional[ReadingOrderOrganizer] = None):
        self.grade2_enabled = grade2_enabled
        self.organizer = organizer or ReadingOrderOrganizer()

    def translate(self, cells: Sequence[BrailleCell]) -> str:
        """
        Translate unordered cells.

        Args:
            cells: Cells in any order

        Returns:
            Translated text, one output line per Braille line
        """
        return self.translate_lines(self.organizer.group_into_lines(cells))

    def translate_lines(self, lines: Sequence[Sequence[BrailleCell]]) -> str:
        """
        Translate cells already grouped into x-sorted lines.

        Args:
            lines: Lines in top-to-bottom order

        Returns:
            Translated text
        """
        state = TransliterationState()
        output_lines = []

        for line in lines:
            tokens: List[str] = []
            for word in self.organizer.group_into_words(line):
                self._translate_word(word, state, tokens)

            output_lines.append(TOKEN_SEPARATOR.join(tokens))

            # capitalize_next is not reset at line end
            state.number_mode = False

        text = LINE_SEPARATOR.join(output_lines)
        logger.debug(f"Translated {len(lines)} lines: {text!r}")
        return text

    def _translate_word(self, word: Sequence[BrailleCell],
                        state: TransliterationState, tokens: List[str]) -> None:
        """Append the tokens produced by one word group."""
        buffer: List[str] = []
        i = 0

        while i < len(word):
            cell = word[i]

            if cell.meaning == CAPITAL_MEANING:
                state.capitalize_next = True
                i += 1
                continue

            if cell.meaning == NUMBER_MEANING:
                state.number_mode = True
                i += 1
                continue

            if cell.binary_pattern == DOT4_PATTERN:
                next_cell = word[i + 1] if i + 1 < len(word) else None
                if next_cell is not None and next_cell.meaning in ("n", "N"):
                    if state.capitalize_next or next_cell.meaning == "N":
                        buffer.append("Ñ")
                        state.capitalize_next = False
                    else:
                        buffer.append("ñ")
                    i += 2
                    continue
                i += 1
                continue

            if cell.binary_pattern == DOT5_PATTERN:
                i += 1
                continue

            text = self._apply_modifiers(cell.meaning, state)

            if self.grade2_enabled and is_whole_word(text) and not is_part_word(text):
                if buffer:
                    tokens.append("".join(buffer))
                    buffer = []
                tokens.append(text)
            else:
                buffer.append(text)
            i += 1

        if buffer:
            tokens.append("".join(buffer))

    @staticmethod
    def _apply_modifiers(text: str, state: TransliterationState) -> str:
        """Apply number mode or pending capitalization to a cell's text."""
        if state.number_mode and text in NUMBER_MAP:
            return NUMBER_MAP[text]

        if state.capitalize_next and text:
            state.capitalize_next = False
            return text[0].upper() + text[1:]

        return text
