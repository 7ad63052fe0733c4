# rostersync/tests/test_records.py
"""
Tests for records.py
"""
import pytest

from rostersync.records import (
    activity_title,
    class_link_icon,
    embed_vocabulary_url,
    find_by_name,
    map_student_row,
    map_students,
    map_teachers,
    parse_finished_activities,
    whatsapp_link,
)
from rostersync.tabular import parse_table


JOHN_DOE_ROW = [
    "Ms. Smith", "John Doe", "Preply", "", "", "", "Student", "", "",
    "j@x.com", "15551234567", "http://img", "http://class", "", "",
]


class TestStudentMapping:
    """Tests for turning rows into Student records"""

    def test_john_doe_row(self):
        student = map_student_row(JOHN_DOE_ROW)
        assert student.name == "John Doe"
        assert student.file_name == "John-Doe-Page.html"
        assert student.whatsapp_link == "https://wa.me/15551234567"
        assert student.assigned_teacher == "Ms. Smith"
        assert student.class_link == "http://class"

    def test_blank_name_dropped(self):
        rows = [["T", "  "], ["T"], [], ["T", "Ann"]]
        students = map_students(rows)
        assert [s.name for s in students] == ["Ann"]

    @pytest.mark.parametrize("name", ["", " ", "\t"])
    def test_never_emits_empty_name(self, name):
        assert map_student_row(["Teacher", name, "Preply"]) is None

    def test_name_is_trimmed(self):
        assert map_student_row(["", "  Ann Lee  "]).name == "Ann Lee"

    def test_missing_role_defaults_to_student(self):
        assert map_student_row(["", "Ann"]).role == "Student"

    def test_find_by_name_ignores_case(self, roster_csv):
        students = map_students(parse_table(roster_csv).rows)
        assert find_by_name(students, "jane roe").name == "Jane Roe"
        assert find_by_name(students, "Nobody") is None


class TestDerivedValues:
    """Tests for values computed from raw cells"""

    def test_whatsapp_link_strips_formatting(self):
        assert whatsapp_link("+44 7700-900 123") == "https://wa.me/447700900123"

    def test_whatsapp_link_empty(self):
        assert whatsapp_link("n/a") == ""

    @pytest.mark.parametrize("link,icon", [
        ("https://teams.microsoft.com/l/x", "🎥"),
        ("https://zoom.us/j/1", "📹"),
        ("https://meet.google.com/abc", "💻"),
        ("https://example.com/room", "🔗"),
        ("", ""),
        ("https://zoom.us/teams", "🎥"),
    ])
    def test_class_link_icon(self, link, icon):
        assert class_link_icon(link) == icon

    def test_vocabulary_url_embedded(self):
        url = "https://docs.google.com/spreadsheets/d/abc/edit?usp=sharing&gid=5&rm=demo"
        result = embed_vocabulary_url(url)
        assert result.startswith("https://docs.google.com/spreadsheets/d/abc/edit?")
        assert "usp=" not in result
        assert "gid=5" in result
        assert "rm=minimal" in result
        assert "rm=demo" not in result
        assert "embedded=true" in result
        assert "chrome=false" in result
        assert "headers=false" in result
        assert "widget=true" in result
        assert "single=true" in result

    def test_vocabulary_url_other_host_unchanged(self):
        assert embed_vocabulary_url(" https://quizlet.com/set/1 ") == "https://quizlet.com/set/1"

    def test_vocabulary_url_empty(self):
        assert embed_vocabulary_url("") == ""


class TestFinishedActivities:
    """Tests for the finished-activities cell"""

    def test_reversed_with_titles(self):
        activities = parse_finished_activities("http://x/a-b.html,http://x/Second-One.php")
        assert [a.title for a in activities] == ["Second One", "A B"]
        assert activities[0].url == "http://x/Second-One.php"

    def test_blank_entries_skipped(self):
        activities = parse_finished_activities("http://x/one.html, ,,http://x/two.html")
        assert [a.title for a in activities] == ["Two", "One"]

    def test_empty_cell(self):
        assert parse_finished_activities("") == []

    def test_title_fallback_uses_position(self):
        assert activity_title("http://x/folder/", 3) == "Activity 3"

    def test_title_decodes_and_collapses(self):
        assert activity_title("http://x/past%20simple__QUIZ.htm", 1) == "Past Simple Quiz"


class TestTeacherMapping:
    """Tests for grouping students under teachers"""

    def test_groups_in_first_seen_order(self, roster_csv):
        teachers = map_teachers(parse_table(roster_csv).rows)
        assert [t.name for t in teachers] == ["Ms. Smith", "Mr. Brown"]
        smith = teachers[0]
        assert smith.total_students == 2
        assert smith.active_classes == 2
        assert smith.platforms == ["Preply", "Italki"]
        assert smith.file_name == "Ms-Smith-Teacher-Dashboard.html"

    def test_rows_without_teacher_left_out(self):
        teachers = map_teachers([["", "Ann"], ["  ", "Bob"], ["T", "Cy"]])
        assert [t.name for t in teachers] == ["T"]
        assert teachers[0].students[0].name == "Cy"

    def test_duplicate_contracts_once(self):
        teachers = map_teachers([["T", "A", "Preply"], ["T", "B", "Preply"], ["T", "C", ""]])
        assert teachers[0].platforms == ["Preply"]
