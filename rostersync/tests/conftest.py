# rostersync/tests/conftest.py
"""
Pytest configuration and shared fixtures for rostersync tests
"""
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest

from rostersync.artifacts import STUDENT_PAGE, TEACHER_DASHBOARD, ArtifactStore
from rostersync.pages import StudentPageBuilder, TeacherDashboardBuilder
from rostersync.reconciler import ReconcilerEngine


HEADER = (
    "Assigned Teacher,Student Name,Contract,Level,Finished Activities,Workplace,Role,"
    "Nationality,Location,Email,WhatsApp,Image,Class Link,Vocabulary,Learning Objective"
)

ROSTER_CSV = "\n".join([
    HEADER,
    'Ms. Smith,John Doe,Preply,B1,"http://x/a-b.html,http://x/Second-One.php",Acme,Student,,,j@x.com,15551234567,http://img,http://class,,',
    'Ms. Smith,Jane Roe,Italki,A2,,,,,,jane@x.com,+44 7700 900123,,https://zoom.us/j/1,,Speak confidently',
    'Mr. Brown,Ana Lima,Preply,C1,,,Manager,Brazil,Recife,ana@x.com,,,,,',
    "",
])

STUDENT_TEMPLATE = (
    "<h1>{{STUDENT_NAME}}</h1><p>{{LEVEL}}</p><a href=\"{{WHATSAPP_LINK}}\">wa</a>"
    "<img src=\"{{STUDENT_PHOTO}}\">{{FINISHED_ACTIVITIES_HTML}}"
)

TEACHER_TEMPLATE = """<html><head>
<!-- TEACHER CONFIGURATION -->
<script>
    const TEACHER_CONFIG = {};
</script>
</head><body><h1>{{TEACHER_NAME}}</h1><p>{{TOTAL_STUDENTS}} / {{ACTIVE_CLASSES}}</p></body></html>
"""


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path_factory):
    """Keep real user config and ROSTER_* variables out of every test"""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    for name in (
        "ROSTER_SITE_DIR",
        "ROSTER_SHEET_ID",
        "ROSTER_SHEET_GID",
        "ROSTER_GIT_REMOTE",
        "ROSTER_GIT_BRANCH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_site_dir() -> Generator[Path, None, None]:
    """Create a temporary site directory with both templates"""
    tmpdir = Path(tempfile.mkdtemp())
    (tmpdir / "Template.html").write_text(STUDENT_TEMPLATE, encoding="utf-8")
    (tmpdir / "Teacher-Template.html").write_text(TEACHER_TEMPLATE, encoding="utf-8")

    yield tmpdir

    shutil.rmtree(tmpdir)


@pytest.fixture
def roster_csv() -> str:
    return ROSTER_CSV


class FakeSource:
    """Stands in for SheetSource: returns queued texts, or raises queued errors"""

    def __init__(self, *responses):
        self.responses: List = list(responses)
        self.calls = 0

    def fetch(self) -> str:
        self.calls += 1
        response = self.responses[0] if len(self.responses) == 1 else self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_source(roster_csv):
    return FakeSource(roster_csv)


@pytest.fixture
def student_engine(temp_site_dir, fake_source) -> ReconcilerEngine:
    builder = StudentPageBuilder(temp_site_dir / "Template.html")
    store = ArtifactStore(temp_site_dir, STUDENT_PAGE)
    return ReconcilerEngine(fake_source, builder, store, label="student")


@pytest.fixture
def teacher_engine(temp_site_dir, fake_source) -> ReconcilerEngine:
    builder = TeacherDashboardBuilder(temp_site_dir / "Teacher-Template.html", sheet_edit_url="https://sheet/edit")
    store = ArtifactStore(temp_site_dir, TEACHER_DASHBOARD)
    return ReconcilerEngine(fake_source, builder, store, label="teacher dashboard")


class FakeGit:
    """Records git invocations; answers `status` with a canned porcelain listing"""

    def __init__(self, status_output: str = "", fail_on: str = ""):
        self.status_output = status_output
        self.fail_on = fail_on
        self.commands: List[List[str]] = []

    def __call__(self, command, cwd=None, capture_output=False, text=False, check=False):
        self.commands.append(list(command))
        verb = command[1]
        if verb == self.fail_on:
            raise subprocess.CalledProcessError(1, command, output="", stderr=f"{verb} rejected")
        stdout = self.status_output if verb == "status" else ""
        return subprocess.CompletedProcess(command, 0, stdout=stdout, stderr="")

    def verbs(self) -> List[str]:
        return [c[1] for c in self.commands]


@pytest.fixture
def fake_git():
    return FakeGit(status_output=" M John-Doe-Page.html\n?? Jane-Roe-Page.html\n")
