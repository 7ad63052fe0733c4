"""
schema.py - Named column layout of the roster spreadsheet

Rows arrive as bare lists of strings. Instead of indexing them with magic
numbers all over the mapper, every column is declared once here with its
name, position, whether it must be filled in, and its default.

Changing the sheet layout means changing ROSTER_SCHEMA and bumping
SCHEMA_VERSION; rostersync.yaml pins the version it was written for and
config loading refuses a mismatch.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence


SCHEMA_VERSION = 1


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    index: int
    required: bool = False
    default: str = ""

    @property
    def letter(self) -> str:
        """Spreadsheet column letter (A, B, ... Z, AA, ...)"""
        n = self.index + 1
        letters = ""
        while n:
            n, rem = divmod(n - 1, 26)
            letters = chr(ord("A") + rem) + letters
        return letters


class SheetSchema:
    """
    An ordered set of ColumnSpecs with a version number.

    Raises ValueError at construction if two columns share a name or a
    position.
    """

    def __init__(self, columns: Iterable[ColumnSpec], version: int = SCHEMA_VERSION):
        self.version = version
        self.columns: List[ColumnSpec] = sorted(columns, key=lambda c: c.index)
        self._by_name: Dict[str, ColumnSpec] = {}

        seen_index = set()
        for column in self.columns:
            if column.index < 0:
                raise ValueError(f"Column {column.name!r} has a negative index")
            if column.name in self._by_name:
                raise ValueError(f"Duplicate column name: {column.name!r}")
            if column.index in seen_index:
                raise ValueError(f"Duplicate column index {column.index} ({column.name!r})")
            self._by_name[column.name] = column
            seen_index.add(column.index)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def column(self, name: str) -> ColumnSpec:
        return self._by_name[name]

    @property
    def names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def required(self) -> List[str]:
        return [c.name for c in self.columns if c.required]

    def decode(self, row: Sequence[str]) -> Optional[Dict[str, str]]:
        """
        Turn a positional row into a name -> value dict.

        Short rows are padded with column defaults. Values are kept as
        given except that an empty cell falls back to the default.

        Returns:
            The decoded dict, or None if a required column is blank.
        """
        values: Dict[str, str] = {}
        for column in self.columns:
            raw = row[column.index] if column.index < len(row) else ""
            if column.required and not raw.strip():
                return None
            values[column.name] = raw if raw else column.default
        return values


# Roster tab, columns A-O
ROSTER_SCHEMA = SheetSchema([
    ColumnSpec("assigned_teacher", 0),
    ColumnSpec("student_name", 1, required=True),
    ColumnSpec("contract", 2),
    ColumnSpec("level", 3),
    ColumnSpec("finished_activities", 4),
    ColumnSpec("workplace", 5),
    ColumnSpec("role", 6, default="Student"),
    ColumnSpec("nationality", 7),
    ColumnSpec("location", 8),
    ColumnSpec("email", 9),
    ColumnSpec("whatsapp", 10),
    ColumnSpec("image_url", 11),
    ColumnSpec("class_link", 12),
    ColumnSpec("vocabulary_url", 13),
    ColumnSpec("learning_objective", 14),
])
