"""
records.py - Map roster rows to Student and Teacher records

A Student is one roster row with a non-blank student name. A Teacher is
every row that shares the same assigned-teacher value, in first-seen
order. Rows with a blank name are dropped here and never reach the
engine.

Derived values (WhatsApp link, class-link icon, embedded vocabulary URL,
finished-activity titles) are computed from the raw cells; escaping for
HTML happens later in pages.py, not here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence
from urllib.parse import parse_qsl, unquote, urlencode, urlsplit, urlunsplit

from rostersync.artifacts import STUDENT_PAGE, TEACHER_DASHBOARD
from rostersync.schema import ROSTER_SCHEMA, SheetSchema


WHATSAPP_BASE = "https://wa.me/"

# Checked in order; first substring hit wins
CLASS_LINK_ICONS = [
    ("teams", "🎥"),
    ("zoom", "📹"),
    ("meet", "💻"),
]
GENERIC_LINK_ICON = "🔗"

SHEETS_URL_MARKER = "docs.google.com/spreadsheets"
EMBED_PARAMS_REMOVED = ("usp", "embedded", "rm", "chrome", "headers")
EMBED_PARAMS = [
    ("rm", "minimal"),
    ("embedded", "true"),
    ("chrome", "false"),
    ("headers", "false"),
    ("widget", "true"),
    ("single", "true"),
]

_WEB_EXTENSION_RE = re.compile(r"\.(html?|php|asp|jsp)$", re.IGNORECASE)
_SEPARATOR_RE = re.compile(r"[-_]")
_WHITESPACE_RE = re.compile(r"\s+")
_NON_DIGIT_RE = re.compile(r"[^0-9]")


# =============================================================================
# Derived values
# =============================================================================

def digits_only(value: str) -> str:
    return _NON_DIGIT_RE.sub("", value or "")


def whatsapp_link(phone: str) -> str:
    """https://wa.me/<digits>, or "" when the cell has no digits."""
    digits = digits_only(phone)
    return f"{WHATSAPP_BASE}{digits}" if digits else ""


def class_link_icon(class_link: str) -> str:
    """Pick an icon for the class meeting link by platform."""
    if not class_link or not class_link.strip():
        return ""
    lowered = class_link.lower()
    for marker, icon in CLASS_LINK_ICONS:
        if marker in lowered:
            return icon
    return GENERIC_LINK_ICON


def embed_vocabulary_url(url: str) -> str:
    """
    Rewrite a Google Sheets link to its minimal embedded view.

    Any other URL is returned stripped but otherwise unchanged, as is a
    Sheets URL that cannot be parsed.
    """
    if not url or not url.strip():
        return ""
    url = url.strip()
    if SHEETS_URL_MARKER not in url:
        return url

    try:
        parts = urlsplit(url)
        query = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if key not in EMBED_PARAMS_REMOVED and key not in ("widget", "single")
        ]
    except ValueError as e:
        print(f"[records:warn] Failed to process vocabulary URL {url!r}: {e}")
        return url

    query.extend(EMBED_PARAMS)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" ") if word)


def activity_title(link: str, position: int) -> str:
    """
    Human-readable title from the last path segment of an activity URL.

    Args:
        link: Activity URL
        position: 1-based position in the displayed (newest first) list

    Returns:
        e.g. "Past Simple Quiz" for .../past-simple_quiz.html, or
        "Activity <position>" when nothing usable is left.
    """
    fallback = f"Activity {position}"
    try:
        path = urlsplit(link).path if "://" in link else link
    except ValueError:
        return fallback

    last = unquote(path.split("/")[-1])
    if not last:
        return fallback

    title = _WEB_EXTENSION_RE.sub("", last)
    title = _SEPARATOR_RE.sub(" ", title)
    title = _WHITESPACE_RE.sub(" ", title).strip()
    title = title_case(title)
    return title or fallback


@dataclass(frozen=True)
class FinishedActivity:
    title: str
    url: str


def parse_finished_activities(value: str) -> List[FinishedActivity]:
    """
    Split the comma-joined activity cell into cards, newest first.

    The sheet appends new links at the end, so the list is reversed
    before numbering.
    """
    if not value:
        return []
    links = [part.strip() for part in value.split(",")]
    links = [link for link in links if link]
    links.reverse()
    return [
        FinishedActivity(title=activity_title(link, position), url=link)
        for position, link in enumerate(links, start=1)
    ]


# =============================================================================
# Records
# =============================================================================

@dataclass
class Student:
    name: str
    assigned_teacher: str = ""
    contract: str = ""
    level: str = ""
    workplace: str = ""
    role: str = "Student"
    nationality: str = ""
    location: str = ""
    email: str = ""
    phone: str = ""
    image_url: str = ""
    class_link: str = ""
    vocabulary_url: str = ""
    learning_objective: str = ""
    finished_activities: str = ""

    @property
    def file_name(self) -> str:
        return STUDENT_PAGE.file_name(self.name)

    @property
    def artifact_key(self) -> str:
        return STUDENT_PAGE.key(self.name)

    @property
    def phone_clean(self) -> str:
        return digits_only(self.phone)

    @property
    def whatsapp_link(self) -> str:
        return whatsapp_link(self.phone)

    @property
    def class_link_icon(self) -> str:
        return class_link_icon(self.class_link)

    @property
    def vocabulary_embed_url(self) -> str:
        return embed_vocabulary_url(self.vocabulary_url)

    @property
    def activities(self) -> List[FinishedActivity]:
        return parse_finished_activities(self.finished_activities)


@dataclass
class Teacher:
    name: str
    students: List[Student] = field(default_factory=list)

    @property
    def file_name(self) -> str:
        return TEACHER_DASHBOARD.file_name(self.name)

    @property
    def artifact_key(self) -> str:
        return TEACHER_DASHBOARD.key(self.name)

    @property
    def total_students(self) -> int:
        return len(self.students)

    @property
    def active_classes(self) -> int:
        return sum(1 for s in self.students if s.class_link.strip())

    @property
    def platforms(self) -> List[str]:
        """Distinct contract values of this teacher's students, first seen first."""
        seen: List[str] = []
        for student in self.students:
            contract = student.contract.strip()
            if contract and contract not in seen:
                seen.append(contract)
        return seen


# =============================================================================
# Row mapping
# =============================================================================

def student_from_values(values: Dict[str, str]) -> Student:
    return Student(
        name=values["student_name"].strip(),
        assigned_teacher=values["assigned_teacher"].strip(),
        contract=values["contract"],
        level=values["level"],
        workplace=values["workplace"],
        role=values["role"],
        nationality=values["nationality"],
        location=values["location"],
        email=values["email"],
        phone=values["whatsapp"],
        image_url=values["image_url"],
        class_link=values["class_link"],
        vocabulary_url=values["vocabulary_url"],
        learning_objective=values["learning_objective"],
        finished_activities=values["finished_activities"],
    )


def map_student_row(row: Sequence[str], schema: SheetSchema = ROSTER_SCHEMA) -> Optional[Student]:
    """Map one row to a Student, or None if the student name is blank."""
    values = schema.decode(row)
    if values is None:
        return None
    return student_from_values(values)


def map_students(rows: Iterable[Sequence[str]], schema: SheetSchema = ROSTER_SCHEMA) -> List[Student]:
    students = []
    for row in rows:
        student = map_student_row(row, schema)
        if student is not None:
            students.append(student)
    return students


def group_teachers(students: Iterable[Student]) -> List[Teacher]:
    """
    Group students under their assigned teacher.

    Students with no assigned teacher are left out. Teachers keep the order
    in which they first appear in the sheet.
    """
    teachers: Dict[str, Teacher] = {}
    for student in students:
        teacher_name = student.assigned_teacher.strip()
        if not teacher_name:
            continue
        if teacher_name not in teachers:
            teachers[teacher_name] = Teacher(name=teacher_name)
        teachers[teacher_name].students.append(student)
    return list(teachers.values())


def map_teachers(rows: Iterable[Sequence[str]], schema: SheetSchema = ROSTER_SCHEMA) -> List[Teacher]:
    return group_teachers(map_students(rows, schema))


def find_by_name(records: Iterable, name: str):
    """Case-insensitive lookup used by the single-record commands."""
    wanted = name.strip().lower()
    for record in records:
        if record.name.lower() == wanted:
            return record
    return None
