"""
managers.py - The things the CLI drives

RosterManager     one kind of generated page (student pages or teacher
                  dashboards): a ReconcilerEngine plus a CommitPublisher
                  plus the single-record operations (create/delete/info/list)
CombinedManager   both kinds from one fetch, published together
FolderManager     publish-only: a hand-maintained folder of HTML files

Use the build_* functions to get managers wired from a RosterConfig.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from rostersync.artifacts import ArtifactKind, ArtifactStore, STUDENT_PAGE, TEACHER_DASHBOARD
from rostersync.config_utils import RosterConfig, get_sheet_id
from rostersync.fetch import SheetSource
from rostersync.icons import CREATE, log, log_error, log_success
from rostersync.pages import PageBuilder, StudentPageBuilder, TeacherDashboardBuilder
from rostersync.publisher import ChangedFile, CommitPublisher, PublishResult, PublishTarget
from rostersync.reconciler import ReconcilerEngine, SyncTally
from rostersync.records import find_by_name


Runner = Callable[..., subprocess.CompletedProcess]


def tally_description(label: str, tally: SyncTally) -> str:
    return (
        f"{label} synced ({tally.created} created, {tally.updated} updated, "
        f"{tally.deleted} deleted)"
    )


class RosterManager:
    def __init__(self, name: str, engine: ReconcilerEngine, publisher: CommitPublisher):
        self.name = name
        self.engine = engine
        self.publisher = publisher

    @property
    def builder(self) -> PageBuilder:
        return self.engine.builder

    @property
    def store(self) -> ArtifactStore:
        return self.engine.store

    # ------------------------------------------------------------------
    # Whole-roster operations
    # ------------------------------------------------------------------

    def sync(self) -> SyncTally:
        return self.engine.run_cycle()

    def sync_and_publish(self) -> Tuple[SyncTally, PublishResult]:
        """One scheduled cycle: sync pages, then publish whatever changed."""
        tally = self.sync()
        result = self.publisher.publish(tally_description(self.name, tally))
        return tally, result

    def fetch_records(self) -> list:
        return self.engine.load_records(self.engine.source.fetch())

    def list_records(self) -> List[Tuple[object, bool]]:
        """Every record in the sheet with whether its page is tracked."""
        return [
            (record, record.artifact_key in self.engine.inventory)
            for record in self.fetch_records()
        ]

    # ------------------------------------------------------------------
    # Single-record operations
    # ------------------------------------------------------------------

    def info(self, name: str):
        return find_by_name(self.fetch_records(), name)

    def create(self, name: str) -> Optional[Path]:
        """
        Render and write the page for one record from a fresh fetch.

        Returns the written path, or None if no record has that name.

        Raises:
            FetchError, TemplateReadError, ArtifactWriteError
        """
        record = self.info(name)
        if record is None:
            print(log_error(f"{name!r} not found in the roster sheet", self.engine.log_prefix))
            return None
        template = self.builder.load_template()
        path = self.store.write(record.artifact_key, self.builder.render(template, record))
        self.engine.inventory.add(record.artifact_key, record.name)
        print(log(CREATE, f"Created: {path.name}", self.engine.log_prefix))
        return path

    def delete(self, name: str) -> bool:
        """Delete one page through the store's safety gate."""
        deleted = self.store.delete(name)
        if deleted:
            self.engine.inventory.discard(self.store.kind.key(name))
        return deleted

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def status(self) -> List[ChangedFile]:
        return self.publisher.pending_changes()

    def publish(self, description: Optional[str] = None) -> PublishResult:
        return self.publisher.publish(description)


class CombinedManager:
    """Student pages and teacher dashboards from a single fetch."""

    def __init__(
        self,
        source: SheetSource,
        students: RosterManager,
        teachers: RosterManager,
        publisher: CommitPublisher,
    ):
        self.source = source
        self.students = students
        self.teachers = teachers
        self.publisher = publisher

    def sync(self) -> Tuple[SyncTally, SyncTally]:
        text = self.source.fetch()
        student_tally = self.students.engine.run_cycle(text)
        teacher_tally = self.teachers.engine.run_cycle(text)
        print(log_success(
            f"Combined sync complete: {student_tally.total} student pages, "
            f"{teacher_tally.total} teacher dashboards",
            "sync",
        ))
        return student_tally, teacher_tally

    def sync_and_publish(self) -> Tuple[SyncTally, SyncTally, PublishResult]:
        student_tally, teacher_tally = self.sync()
        description = (
            f"{tally_description('Students', student_tally)}; "
            f"{tally_description('Teachers', teacher_tally)}"
        )
        return student_tally, teacher_tally, self.publisher.publish(description)


class FolderManager:
    """A folder of hand-edited HTML that only needs committing and pushing."""

    def __init__(self, directory: Path, publisher: CommitPublisher):
        self.directory = Path(directory)
        self.publisher = publisher

    def list_files(self) -> List[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(p for p in self.directory.iterdir() if p.is_file() and p.suffix == ".html")

    def status(self) -> List[ChangedFile]:
        return self.publisher.pending_changes()

    def publish(self) -> PublishResult:
        return self.publisher.publish()


# =============================================================================
# Wiring from configuration
# =============================================================================

def build_source(config: RosterConfig) -> SheetSource:
    """
    Raises:
        ConfigurationError: no sheet id configured
    """
    get_sheet_id(config)
    return SheetSource(config.export_url, timeout=config.timeout)


def artifact_target(directory: Path, kind: ArtifactKind) -> PublishTarget:
    """Publish only the pages of one kind inside directory."""
    return PublishTarget(directory, f"*{kind.file_suffix}")


def _protected_names(config: RosterConfig) -> List[str]:
    return [config.student_template, config.teacher_template]


def build_student_manager(
    config: RosterConfig,
    source: Optional[SheetSource] = None,
    runner: Runner = subprocess.run,
) -> RosterManager:
    source = source or build_source(config)
    builder = StudentPageBuilder(config.student_template_path, placeholder_photo=config.placeholder_photo)
    store = ArtifactStore(config.students_path, STUDENT_PAGE, protected_names=_protected_names(config))
    engine = ReconcilerEngine(source, builder, store, label="student")
    publisher = CommitPublisher(
        config.site_dir,
        [artifact_target(config.students_path, STUDENT_PAGE)],
        label="Students",
        remote=config.git_remote,
        branch=config.git_branch,
        description="Student pages updated",
        runner=runner,
    )
    return RosterManager("Students", engine, publisher)


def build_teacher_manager(
    config: RosterConfig,
    source: Optional[SheetSource] = None,
    runner: Runner = subprocess.run,
) -> RosterManager:
    source = source or build_source(config)
    builder = TeacherDashboardBuilder(
        config.teacher_template_path,
        sheet_edit_url=config.edit_url,
        settings=config.dashboard,
    )
    store = ArtifactStore(config.teachers_path, TEACHER_DASHBOARD, protected_names=_protected_names(config))
    engine = ReconcilerEngine(source, builder, store, label="teacher dashboard")
    publisher = CommitPublisher(
        config.site_dir,
        [artifact_target(config.teachers_path, TEACHER_DASHBOARD)],
        label="Teachers",
        remote=config.git_remote,
        branch=config.git_branch,
        description="Teacher dashboards updated",
        runner=runner,
    )
    return RosterManager("Teachers", engine, publisher)


def build_combined_manager(config: RosterConfig, runner: Runner = subprocess.run) -> CombinedManager:
    source = build_source(config)
    students = build_student_manager(config, source, runner)
    teachers = build_teacher_manager(config, source, runner)
    publisher = CommitPublisher(
        config.site_dir,
        [
            artifact_target(config.students_path, STUDENT_PAGE),
            artifact_target(config.teachers_path, TEACHER_DASHBOARD),
        ],
        label="Roster",
        remote=config.git_remote,
        branch=config.git_branch,
        description="Student pages and teacher dashboards updated",
        runner=runner,
    )
    return CombinedManager(source, students, teachers, publisher)


def build_folder_manager(
    config: RosterConfig,
    directory: Path,
    runner: Runner = subprocess.run,
) -> FolderManager:
    directory = Path(directory)
    if not directory.is_absolute():
        directory = config.site_dir / directory
    publisher = CommitPublisher(
        config.site_dir,
        [directory],
        label=directory.name or "Folder",
        remote=config.git_remote,
        branch=config.git_branch,
        description=f"{directory.name} files updated",
        runner=runner,
    )
    return FolderManager(directory, publisher)
