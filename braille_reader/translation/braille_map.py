"""
Braille Map - Static class id to Braille entry tables.

Class ids follow the detection models' class lists, which are sorted by
class name. Dot positions are encoded as six characters, dot 1 first:

    Dot 1: 100000    Dot 4: 000100
    Dot 2: 010000    Dot 5: 000010
    Dot 3: 001000    Dot 6: 000001

Multi-cell entries join the cells with '-'.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Union

logger = logging.getLogger(__name__)


class ModelGrade(Enum):
    """Braille grade a detection model was trained on."""
    GRADE1 = 1
    GRADE2 = 2


@dataclass(frozen=True)
class BrailleEntry:
    """Dot pattern and meaning for one class."""
    binary: str
    meaning: str


# Modifier cells
CAPITAL_PATTERN = "000001"
NUMBER_PATTERN = "001111"
DOT4_PATTERN = "000100"
DOT5_PATTERN = "000010"

PREFIX_PATTERNS: FrozenSet[str] = frozenset({
    CAPITAL_PATTERN,
    NUMBER_PATTERN,
    DOT4_PATTERN,
    DOT5_PATTERN,
})

CAPITAL_MEANING = "capital"
NUMBER_MEANING = "number"

# Returned for class ids missing from a table
UNKNOWN_ENTRY = BrailleEntry(binary="??????", meaning="?")


G1_BRAILLE_MAP: Mapping[int, BrailleEntry] = MappingProxyType({
    # Punctuation
    0: BrailleEntry("001011", '"'),
    1: BrailleEntry("001000", "'"),
    2: BrailleEntry("011011", "("),
    3: BrailleEntry("011011", ")"),
    4: BrailleEntry("010000", ","),
    5: BrailleEntry("001001", "-"),
    6: BrailleEntry("010011", "."),
    7: BrailleEntry("001100", "/"),
    8: BrailleEntry("010010", ":"),
    9: BrailleEntry("011000", ";"),
    10: BrailleEntry("011001", "?"),
    # Capital letters (capital sign + letter)
    11: BrailleEntry("000001-100000", "A"),
    12: BrailleEntry("000001-110000", "B"),
    13: BrailleEntry("000001-100100", "C"),
    14: BrailleEntry("000001-100110", "D"),
    15: BrailleEntry("000001-100010", "E"),
    16: BrailleEntry("000001-110100", "F"),
    17: BrailleEntry("000001-110110", "G"),
    18: BrailleEntry("000001-110010", "H"),
    19: BrailleEntry("000001-010100", "I"),
    20: BrailleEntry("000001-010110", "J"),
    21: BrailleEntry("000001-101000", "K"),
    22: BrailleEntry("000001-111000", "L"),
    23: BrailleEntry("000001-101100", "M"),
    24: BrailleEntry("000001-101110", "N"),
    25: BrailleEntry("000001-101010", "O"),
    26: BrailleEntry("000001-111100", "P"),
    27: BrailleEntry("000001-111110", "Q"),
    28: BrailleEntry("000001-111010", "R"),
    29: BrailleEntry("000001-011100", "S"),
    30: BrailleEntry("000001-011110", "T"),
    31: BrailleEntry("000001-101001", "U"),
    32: BrailleEntry("000001-111001", "V"),
    33: BrailleEntry("000001-010111", "W"),
    34: BrailleEntry("000001-101101", "X"),
    35: BrailleEntry("000001-101111", "Y"),
    36: BrailleEntry("000001-101011", "Z"),
    # Letters and composition signs
    37: BrailleEntry("100000", "a"),
    38: BrailleEntry("110000", "b"),
    39: BrailleEntry("100100", "c"),
    40: BrailleEntry(CAPITAL_PATTERN, CAPITAL_MEANING),
    41: BrailleEntry("100110", "d"),
    42: BrailleEntry(DOT4_PATTERN, "dot_4"),
    43: BrailleEntry("100010", "e"),
    44: BrailleEntry("011010", "exclamation"),
    45: BrailleEntry("110100", "f"),
    46: BrailleEntry("110110", "g"),
    47: BrailleEntry("110010", "h"),
    48: BrailleEntry("010100", "i"),
    49: BrailleEntry("010110", "j"),
    50: BrailleEntry("101000", "k"),
    51: BrailleEntry("111000", "l"),
    52: BrailleEntry("101100", "m"),
    53: BrailleEntry("101110", "n"),
    54: BrailleEntry(NUMBER_PATTERN, NUMBER_MEANING),
    55: BrailleEntry("101010", "o"),
    56: BrailleEntry("111100", "p"),
    57: BrailleEntry("111110", "q"),
    58: BrailleEntry("111010", "r"),
    59: BrailleEntry("011100", "s"),
    60: BrailleEntry("011110", "t"),
    61: BrailleEntry("101001", "u"),
    62: BrailleEntry("111001", "v"),
    63: BrailleEntry("010111", "w"),
    64: BrailleEntry("101101", "x"),
    65: BrailleEntry("101111", "y"),
    66: BrailleEntry("101011", "z"),
})


G2_BRAILLE_MAP: Mapping[int, BrailleEntry] = MappingProxyType({
    0: BrailleEntry("010101", "ako"),
    1: BrailleEntry("000010-111101", "alam"),
    2: BrailleEntry("100011", "an"),
    3: BrailleEntry("100011", "anak"),
    4: BrailleEntry("011101", "ang"),
    5: BrailleEntry("000010-011101", "anggi"),
    6: BrailleEntry("001110", "ar"),
    7: BrailleEntry("001110", "araw"),
    8: BrailleEntry("001111", "at"),
    9: BrailleEntry("010101", "aw"),
    10: BrailleEntry("111101", "ay"),
    11: BrailleEntry("000010-101111", "ayaw"),
    12: BrailleEntry("111001", "bagaman"),
    13: BrailleEntry("110000", "bakit"),
    14: BrailleEntry("000010-110000", "binata"),
    15: BrailleEntry("000010-111001", "buhay"),
    16: BrailleEntry("000010-001111", "bulaklak"),
    17: BrailleEntry("100110", "dahil"),
    18: BrailleEntry("000010-100110", "dalaga"),
    19: BrailleEntry(DOT5_PATTERN, "dot_5"),
    20: BrailleEntry("000010-101101", "eksamen"),
    21: BrailleEntry("110111", "er"),
    22: BrailleEntry("000010-100010", "ewan"),
    23: BrailleEntry("110110", "ganoon"),
    24: BrailleEntry("000010-110110", "gunita"),
    25: BrailleEntry("010110", "hakbang"),
    26: BrailleEntry("000010-010110", "halaman"),
    27: BrailleEntry("111011", "han"),
    28: BrailleEntry("111011", "hanggang"),
    29: BrailleEntry("000010-110010", "hapon"),
    30: BrailleEntry("110010", "hindi"),
    31: BrailleEntry("001100", "ibig"),
    32: BrailleEntry("010100", "ikaw"),
    33: BrailleEntry("001101", "ing"),
    34: BrailleEntry("001101", "ingay"),
    35: BrailleEntry("000010-010100", "isip"),
    36: BrailleEntry("101101", "ito"),
    37: BrailleEntry("000010-100001", "kabila"),
    38: BrailleEntry("111110", "kailan"),
    39: BrailleEntry("000010-101000", "kailangan"),
    40: BrailleEntry("100001", "kanila"),
    41: BrailleEntry("100100", "kaniya"),
    42: BrailleEntry("000010-100100", "karaniwan"),
    43: BrailleEntry("101000", "kaya"),
    44: BrailleEntry("000010-111110", "kislap"),
    45: BrailleEntry("111000", "lamang"),
    46: BrailleEntry("000010-111000", "larawan"),
    47: BrailleEntry("000010-101100", "mabuti"),
    48: BrailleEntry("100101", "mag"),
    49: BrailleEntry("100101", "maging"),
    50: BrailleEntry("111111", "mahal"),
    51: BrailleEntry("000010-100101", "masama"),
    52: BrailleEntry("101100", "mga"),
    53: BrailleEntry("011111", "na"),
    54: BrailleEntry("110101", "nag"),
    55: BrailleEntry("110101", "naging"),
    56: BrailleEntry("000010-110101", "nawa"),
    57: BrailleEntry("110001", "ng"),
    58: BrailleEntry("101110", "ngayon"),
    59: BrailleEntry("000010-110001", "ngunit"),
    60: BrailleEntry("000010-101110", "noon"),
    61: BrailleEntry("000010-101010", "opo"),
    62: BrailleEntry("110100", "paano"),
    63: BrailleEntry("100111", "pag"),
    64: BrailleEntry("000010-100111", "panahon"),
    65: BrailleEntry("000010-110100", "papaano"),
    66: BrailleEntry("111100", "para"),
    67: BrailleEntry("000010-111100", "patuloy"),
    68: BrailleEntry("110111", "raw"),
    69: BrailleEntry("111010", "rin"),
    70: BrailleEntry("000010-111010", "roon"),
    71: BrailleEntry("101011", "sa"),
    72: BrailleEntry("000010-100011", "sabi"),
    73: BrailleEntry("000010-101011", "salita"),
    74: BrailleEntry("011100", "sang-ayon"),
    75: BrailleEntry("000010-001100", "sinta"),
    76: BrailleEntry("000010-011100", "subalit"),
    77: BrailleEntry("000010-011110", "talaga"),
    78: BrailleEntry("011110", "tayo"),
    79: BrailleEntry("110011", "tu"),
    80: BrailleEntry("110011", "tunay"),
    81: BrailleEntry("000010-110011", "tungkol"),
    82: BrailleEntry("000010-101001", "ugali"),
    83: BrailleEntry("000010-001101", "ukol"),
    84: BrailleEntry("101001", "upang"),
    85: BrailleEntry("000010-010101", "wakas"),
    86: BrailleEntry("010111", "wala"),
    87: BrailleEntry("000010-010111", "wasto"),
    88: BrailleEntry("101111", "yaman"),
})


# Grade 2 contractions that stand alone as a word
WHOLE_WORDS: FrozenSet[str] = frozenset({
    # One-cell (alphabet and non-alphabet)
    "bakit", "kaniya", "dahil", "paano", "ganoon", "hindi", "ikaw", "hakbang", "kaya",
    "lamang", "mga", "ngayon", "para", "kailan", "rin", "sang-ayon", "tayo", "upang",
    "bagaman", "wala", "ito", "yaman", "sa", "ako", "anak", "ang", "araw", "at",
    "ay", "hanggang", "raw", "tunay", "kanila", "maging", "mahal", "na", "naging",
    "ng", "ibig", "ingay",
    # Two-cell (alphabet)
    "binata", "karaniwan", "dalaga", "ewan", "papaano", "gunita", "hapon", "isip",
    "halaman", "kailangan", "larawan", "mabuti", "noon", "opo", "patuloy", "kislap",
    "roon", "subalit", "talaga", "ugali", "buhay", "wasto", "eksamen", "ayaw", "salita",
    # Two-cell (non-alphabet)
    "alam", "anggi", "bulaklak", "kabila", "masama", "nawa", "ngunit", "panahon",
    "sabi", "sinta", "tungkol", "ukol", "wakas",
})

# Grade 2 contractions that fuse with neighbouring letters
PART_WORDS: FrozenSet[str] = frozenset({
    "an", "ang", "ar", "at", "aw", "er", "han", "ibig", "ing", "mag",
    "mahal", "nag", "ng", "pag", "tu",
})


def ambiguous_contractions() -> FrozenSet[str]:
    """Contractions listed as both whole words and part words (treated as part words)."""
    return WHOLE_WORDS & PART_WORDS


def get_braille_map(grade: ModelGrade) -> Mapping[int, BrailleEntry]:
    """Built-in table for a grade."""
    return G1_BRAILLE_MAP if grade == ModelGrade.GRADE1 else G2_BRAILLE_MAP


def _parse_table(grade_key: str, raw: Dict[str, dict]) -> Mapping[int, BrailleEntry]:
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid braille map section {grade_key!r}: expected an object")

    table = {}
    for key, value in raw.items():
        try:
            table[int(key)] = BrailleEntry(binary=str(value["binary"]), meaning=str(value["meaning"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid braille map entry {grade_key}[{key!r}]: {e}") from e
    return MappingProxyType(table)


def load_braille_map(path: Union[str, Path]) -> Dict[ModelGrade, Mapping[int, BrailleEntry]]:
    """
    Load replacement lookup tables from JSON.

    Expected format:
        {"grade1": {"0": {"binary": "100000", "meaning": "a"}, ...},
         "grade2": {...}}

    A grade missing from the file keeps its built-in table.

    Args:
        path: JSON file path

    Returns:
        Dict of grade to table

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or an entry is malformed
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid braille map file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Invalid braille map file {path}: top level must be an object")

    tables = {}
    for grade, key in ((ModelGrade.GRADE1, "grade1"), (ModelGrade.GRADE2, "grade2")):
        if key in data:
            tables[grade] = _parse_table(key, data[key])
        else:
            tables[grade] = get_braille_map(grade)

    logger.debug(
        f"Loaded braille map from {path}: "
        f"{len(tables[ModelGrade.GRADE1])} G1, {len(tables[ModelGrade.GRADE2])} G2"
    )
    return tables
