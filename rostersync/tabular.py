"""
tabular.py - Parse the spreadsheet CSV export into rows of strings

The export is read line by line. Each line is scanned with an in-quotes
toggle; a doubled quote inside a quoted field is a literal quote. The
parser never rejects input: unbalanced quotes simply run to the end of
the line.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class ParsedTable:
    header: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)


def parse_line(line: str) -> List[str]:
    """Split one line into fields, honoring double-quoted values."""
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current))
    return fields


def parse_table(text: str) -> ParsedTable:
    """
    Parse export text into a header row and data rows.

    The first line is always the header. Lines that are blank after
    trimming are skipped.
    """
    lines = text.split("\n")
    table = ParsedTable()

    first = lines[0].strip()
    if first:
        table.header = parse_line(first)
    for raw in lines[1:]:
        line = raw.strip()
        if not line:
            continue
        table.rows.append(parse_line(line))
    return table
