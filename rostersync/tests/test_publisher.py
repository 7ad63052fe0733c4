# rostersync/tests/test_publisher.py
"""
Tests for publisher.py (a recording fake for most cases, a real repository for staging)
"""
import re
import shutil
import subprocess

import pytest

from conftest import FakeGit, FakeSource
from rostersync.config_utils import get_config
from rostersync.errors import PublishError
from rostersync.managers import build_combined_manager, build_student_manager, build_teacher_manager
from rostersync.publisher import ChangedFile, CommitPublisher, PublishTarget, parse_porcelain


class TestParsePorcelain:
    """Tests for reading `git status --porcelain`"""

    def test_status_codes(self):
        changes = parse_porcelain(" M a.html\n?? b c.html\nD  gone.html\n\n")
        assert changes == [
            ChangedFile("M", "a.html"),
            ChangedFile("??", "b c.html"),
            ChangedFile("D", "gone.html", staged_only=True),
        ]

    def test_rename_reports_new_path(self):
        change, = parse_porcelain("R  old.html -> new.html")
        assert change.path == "new.html"
        assert change.commit_paths == ["new.html", "old.html"]

    def test_icons(self):
        assert ChangedFile("??", "x").icon == "🆕"
        assert ChangedFile("M", "x").icon == "📝"


class TestCommitPublisher:
    """Tests for the stage/commit/push transaction"""

    def _publisher(self, repo, runner, **kwargs):
        return CommitPublisher(repo, [repo / "Students"], label="Students", runner=runner, **kwargs)

    def test_clean_tree_does_nothing(self, tmp_path):
        git = FakeGit(status_output="")
        result = self._publisher(tmp_path, git).publish()
        assert result.pushed is False
        assert result.reason == "no changes"
        assert git.verbs() == ["status"]

    def test_status_limited_to_paths(self, tmp_path, fake_git):
        self._publisher(tmp_path, fake_git).pending_changes()
        assert fake_git.commands[0] == [
            "git", "status", "--porcelain", "--untracked-files=all", "--", "Students",
        ]

    def test_dirty_tree_stages_commits_pushes(self, tmp_path, fake_git):
        publisher = self._publisher(tmp_path, fake_git, remote="students", branch="master")
        result = publisher.publish("3 pages")
        assert fake_git.verbs() == ["status", "add", "commit", "push"]
        assert fake_git.commands[1] == [
            "git", "add", "--",
            ":(top,literal)John-Doe-Page.html", ":(top,literal)Jane-Roe-Page.html",
        ]
        assert fake_git.commands[2][4:] == [
            "--", ":(top,literal)John-Doe-Page.html", ":(top,literal)Jane-Roe-Page.html",
        ]
        assert fake_git.commands[3] == ["git", "push", "students", "master"]
        assert result.pushed is True
        assert result.files_count == 2

        message = fake_git.commands[2][3]
        assert re.fullmatch(r"Students update: \d{4}-\d\d-\d\d \d\d:\d\d:\d\d - 3 pages", message)
        assert result.timestamp in message

    def test_default_description(self, tmp_path, fake_git):
        publisher = self._publisher(tmp_path, fake_git, description="Student pages updated")
        publisher.publish()
        assert fake_git.commands[2][3].endswith(" - Student pages updated")

    @pytest.mark.parametrize("step", ["add", "commit", "push"])
    def test_failed_step_raises(self, tmp_path, step):
        git = FakeGit(status_output=" M a.html\n", fail_on=step)
        with pytest.raises(PublishError) as exc_info:
            self._publisher(tmp_path, git).publish()
        assert exc_info.value.context["command"].startswith(f"git {step}")
        assert "rejected" in exc_info.value.context["output"]
        assert git.verbs()[-1] == step

    def test_missing_git_binary(self, tmp_path):
        def runner(*args, **kwargs):
            raise FileNotFoundError("git")

        with pytest.raises(PublishError):
            self._publisher(tmp_path, runner).has_changes()

    def test_pattern_targets_use_glob_pathspecs(self, tmp_path, fake_git):
        publisher = CommitPublisher(
            tmp_path,
            [PublishTarget(tmp_path, "*-Page.html"), PublishTarget(tmp_path / "Teachers", "*-Teacher-Dashboard.html")],
            label="Roster",
            runner=fake_git,
        )
        assert publisher.pathspecs == [":(glob)*-Page.html", ":(glob)Teachers/*-Teacher-Dashboard.html"]

    def test_already_staged_changes_skip_add(self, tmp_path):
        git = FakeGit(status_output="D  Students/Gone-Page.html\n")
        result = self._publisher(tmp_path, git).publish()
        assert git.verbs() == ["status", "commit", "push"]
        assert git.commands[1][-1] == ":(top,literal)Students/Gone-Page.html"
        assert result.files_count == 1


def _git(repo, *args):
    return subprocess.run(
        ["git", *args], cwd=str(repo), check=True, capture_output=True, text=True,
    ).stdout


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
class TestCommitPublisherWithGit:
    """Tests against a real repository pushing to a local bare remote"""

    @pytest.fixture
    def site(self, tmp_path, monkeypatch):
        for var in ("GIT_AUTHOR_NAME", "GIT_COMMITTER_NAME"):
            monkeypatch.setenv(var, "Roster Bot")
        for var in ("GIT_AUTHOR_EMAIL", "GIT_COMMITTER_EMAIL"):
            monkeypatch.setenv(var, "bot@example.com")

        remote = tmp_path / "remote.git"
        site = tmp_path / "site"
        site.mkdir()
        _git(tmp_path, "init", "--bare", str(remote))
        _git(site, "init")
        _git(site, "symbolic-ref", "HEAD", "refs/heads/main")
        _git(site, "remote", "add", "origin", str(remote))

        (site / "rostersync.yaml").write_text("sheet_id: abc\n")
        (site / "Template.html").write_text("<p>{{STUDENT_NAME}}</p>")
        (site / "Teacher-Template.html").write_text("<p>{{TEACHER_NAME}}</p>")
        _git(site, "add", "-A")
        _git(site, "commit", "-m", "initial")
        return site

    def _committed(self, site):
        return sorted(_git(site, "show", "--name-only", "--format=", "HEAD").split())

    def test_student_publish_commits_only_student_pages(self, site):
        (site / "rostersync.yaml").write_text("sheet_id: changed\n")
        (site / "Ms-Smith-Teacher-Dashboard.html").write_text("dashboard")
        (site / "notes.txt").write_text("notes")
        (site / "John-Doe-Page.html").write_text("page")

        manager = build_student_manager(get_config(site), FakeSource(""))
        result = manager.publish()

        assert result.pushed is True
        assert self._committed(site) == ["John-Doe-Page.html"]
        pending = _git(site, "status", "--porcelain")
        assert "Ms-Smith-Teacher-Dashboard.html" in pending
        assert "rostersync.yaml" in pending
        assert "John-Doe-Page.html" not in pending
        assert _git(site, "ls-remote", "origin", "main")

    def test_teacher_publish_ignores_student_pages(self, site):
        (site / "John-Doe-Page.html").write_text("page")
        (site / "Ms-Smith-Teacher-Dashboard.html").write_text("dashboard")

        result = build_teacher_manager(get_config(site), FakeSource("")).publish()

        assert result.files_count == 1
        assert self._committed(site) == ["Ms-Smith-Teacher-Dashboard.html"]

    def test_deleted_page_is_committed(self, site):
        (site / "John-Doe-Page.html").write_text("page")
        manager = build_student_manager(get_config(site), FakeSource(""))
        manager.publish()

        (site / "John-Doe-Page.html").unlink()
        result = manager.publish()

        assert result.files_count == 1
        assert "John-Doe-Page.html" not in _git(site, "ls-files")

    def test_combined_publish_without_dashboards(self, site):
        (site / "Jane-Roe-Page.html").write_text("page")
        (site / "notes.txt").write_text("notes")

        result = build_combined_manager(get_config(site)).publisher.publish()

        assert result.pushed is True
        assert self._committed(site) == ["Jane-Roe-Page.html"]
