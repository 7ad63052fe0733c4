# rostersync/tests/test_artifacts.py
"""
Tests for artifacts.py
"""
import pytest

from rostersync.artifacts import STUDENT_PAGE, TEACHER_DASHBOARD, ArtifactStore, normalize_name
from rostersync.errors import ArtifactWriteError


class TestNormalizeName:
    """Tests for file-name normalization"""

    @pytest.mark.parametrize("name,expected", [
        ("John Doe", "John-Doe"),
        ("Mary O'Neil", "Mary-ONeil"),
        ("  Ana   Lima ", "Ana-Lima"),
        ("Ms. Smith", "Ms-Smith"),
        ("José", "Jos"),
        ("Jean-Luc  Picard", "Jean-Luc-Picard"),
        ("!!!", ""),
    ])
    def test_examples(self, name, expected):
        assert normalize_name(name) == expected

    @pytest.mark.parametrize("name", [
        "John Doe", "Mary O'Neil", " a - b ", "x--y", "Dr. Who?", "tab\tname", "-lead", "",
    ])
    def test_idempotent(self, name):
        once = normalize_name(name)
        assert normalize_name(once) == once


class TestArtifactKind:
    """Tests for file naming per page kind"""

    def test_file_names(self):
        assert STUDENT_PAGE.file_name("John Doe") == "John-Doe-Page.html"
        assert TEACHER_DASHBOARD.file_name("Ms. Smith") == "Ms-Smith-Teacher-Dashboard.html"

    def test_name_from_file_is_approximate(self):
        assert STUDENT_PAGE.name_from_file("Mary-ONeil-Page.html") == "Mary ONeil"

    def test_matches(self):
        assert STUDENT_PAGE.matches("John-Doe-Page.html")
        assert not STUDENT_PAGE.matches("Template.html")
        assert not STUDENT_PAGE.matches("-Page.html")


class TestArtifactStore:
    """Tests for the on-disk store"""

    def test_enumerate_filters_by_suffix(self, temp_site_dir):
        (temp_site_dir / "John-Doe-Page.html").write_text("x")
        (temp_site_dir / "Ms-Smith-Teacher-Dashboard.html").write_text("x")
        (temp_site_dir / "notes.txt").write_text("x")
        store = ArtifactStore(temp_site_dir, STUDENT_PAGE)
        assert store.enumerate() == {"John-Doe": "John Doe"}

    def test_enumerate_missing_directory(self, tmp_path):
        assert ArtifactStore(tmp_path / "nope", STUDENT_PAGE).enumerate() == {}

    def test_write_overwrites(self, temp_site_dir):
        store = ArtifactStore(temp_site_dir, STUDENT_PAGE)
        store.write("John Doe", "first")
        path = store.write("John-Doe", "second")
        assert path.name == "John-Doe-Page.html"
        assert path.read_text() == "second"

    def test_write_creates_directory(self, tmp_path):
        store = ArtifactStore(tmp_path / "pages", STUDENT_PAGE)
        assert store.write("Ann", "x").is_file()

    def test_write_empty_key_raises(self, temp_site_dir):
        with pytest.raises(ArtifactWriteError):
            ArtifactStore(temp_site_dir, STUDENT_PAGE).write("???", "x")

    def test_delete_existing(self, temp_site_dir):
        store = ArtifactStore(temp_site_dir, STUDENT_PAGE)
        store.write("John Doe", "x")
        assert store.delete("John Doe") is True
        assert not store.exists("John Doe")

    def test_delete_missing_returns_false(self, temp_site_dir):
        assert ArtifactStore(temp_site_dir, STUDENT_PAGE).delete("Nobody") is False

    def test_delete_template_refused(self, temp_site_dir):
        """Deleting "Template" must never touch the template file"""
        (temp_site_dir / "Template-Page.html").write_text("x")
        store = ArtifactStore(temp_site_dir, STUDENT_PAGE)
        assert store.delete("Template") is False
        assert store.refusal_reason("Template") is not None
        assert (temp_site_dir / "Template.html").exists()
        assert (temp_site_dir / "Template-Page.html").exists()

    def test_delete_configured_protected_name(self, temp_site_dir):
        (temp_site_dir / "Index-Page.html").write_text("x")
        store = ArtifactStore(temp_site_dir, STUDENT_PAGE, protected_names=["Index.html"])
        assert store.delete("Index") is False
        assert (temp_site_dir / "Index-Page.html").exists()

    def test_delete_empty_key_refused(self, temp_site_dir):
        assert ArtifactStore(temp_site_dir, STUDENT_PAGE).delete("../..") is False

    def test_delete_does_not_raise_on_os_error(self, temp_site_dir, mocker):
        store = ArtifactStore(temp_site_dir, STUDENT_PAGE)
        store.write("Ann", "x")
        mocker.patch("pathlib.Path.unlink", side_effect=PermissionError("denied"))
        assert store.delete("Ann") is False
        assert store.exists("Ann")
