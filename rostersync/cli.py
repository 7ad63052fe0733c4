# cli.py - Command line interface for rostersync
"""
rostersync CLI - keep a static site of student pages and teacher
dashboards in sync with a roster spreadsheet

COMMANDS:
    Roster pages (same commands for both groups):
        rostersync students sync                 Sync student pages once
        rostersync students auto [MINUTES]       Sync + publish on an interval
        rostersync students list                 List students in the sheet
        rostersync students create NAME          Write one student page
        rostersync students delete NAME          Delete one student page
        rostersync students info NAME            Show one student's details
        rostersync students status               Show unpublished page changes
        rostersync students publish              Commit and push page changes
        rostersync teachers ...                  Same, for teacher dashboards

    Combined:
        rostersync all sync                      Students + teachers from one fetch
        rostersync all auto [MINUTES]            ... and publish on an interval

    Hand-maintained folders:
        rostersync folder status DIR             Show uncommitted changes
        rostersync folder list DIR               List the folder's HTML files
        rostersync folder publish DIR            Commit and push the folder
        rostersync folder auto DIR [MINUTES]     Publish on an interval

    Other:
        rostersync init [--sheet-id ID]          Create rostersync.yaml + templates
        rostersync info                          Show resolved configuration
        rostersync version                       Show version information

EXAMPLES:
    rostersync init --sheet-id 1AbC...
    rostersync students sync
    rostersync teachers auto 10
    rostersync students info "Jane Smith"
    rostersync folder auto Classes 5
"""

import functools
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional

import click

from rostersync import __version__
from rostersync.artifacts import STUDENT_PAGE, TEACHER_DASHBOARD, ArtifactStore
from rostersync.config_utils import (
    CONFIG_FILE_NAME,
    RosterConfig,
    create_config_template,
    get_config,
)
from rostersync.errors import RosterSyncError
from rostersync.icons import (
    ERROR,
    FILE,
    FOLDER,
    STUDENT,
    SUCCESS,
    TEACHER,
    WARNING,
    exists_icon,
)
from rostersync.managers import (
    CombinedManager,
    FolderManager,
    RosterManager,
    build_combined_manager,
    build_folder_manager,
    build_student_manager,
    build_teacher_manager,
)
from rostersync.records import Student, Teacher
from rostersync.scheduler import SyncScheduler


TEMPLATES_DIR = Path(__file__).parent / "templates"


# ============================================================================
# Context & Helpers
# ============================================================================

class RosterContext:
    """Shared context for CLI commands"""

    def __init__(self, site_dir: Optional[Path] = None, runner: Callable = subprocess.run):
        self.site_dir = site_dir
        self.runner = runner
        self._config: Optional[RosterConfig] = None

    @property
    def config(self) -> RosterConfig:
        if self._config is None:
            self._config = get_config(self.site_dir)
        return self._config

    def student_manager(self) -> RosterManager:
        return build_student_manager(self.config, runner=self.runner)

    def teacher_manager(self) -> RosterManager:
        return build_teacher_manager(self.config, runner=self.runner)

    def combined_manager(self) -> CombinedManager:
        return build_combined_manager(self.config, runner=self.runner)

    def folder_manager(self, directory: Path) -> FolderManager:
        return build_folder_manager(self.config, directory, runner=self.runner)


class LenientGroup(click.Group):
    """Unknown commands print usage and exit 0 instead of failing."""

    def resolve_command(self, ctx, args):
        try:
            return super().resolve_command(ctx, args)
        except click.UsageError:
            if not args or args[0].startswith("-"):
                raise
            click.echo(f"{ERROR} Unknown command: {args[0]}", err=True)
            click.echo(ctx.get_help())
            ctx.exit(0)


def handle_errors(func):
    """Print a RosterSyncError as its formatted message and exit 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except RosterSyncError as e:
            click.echo(e.format_message(), err=True)
            sys.exit(1)
    return wrapper


def _require_name(name: str, noun: str) -> str:
    if not name.strip():
        raise click.UsageError(f"Please provide a {noun} name")
    return name


def _run_scheduled(job: Callable, minutes: float, name: str) -> None:
    SyncScheduler(job, minutes * 60, name=name).run_forever()


def _echo_changes(changes, label: str) -> None:
    if not changes:
        click.echo(f"{SUCCESS} No pending changes in {label}")
        return
    click.echo(f"\n{FILE} Pending changes in {label} ({len(changes)}):")
    for change in changes:
        click.echo(f"   {change.icon} {change.path}")
    click.echo()


def _echo_publish_result(result, label: str) -> None:
    if result.pushed:
        click.echo(f"{SUCCESS} {label}: pushed {result.files_count} files at {result.timestamp}")
    else:
        click.echo(f"{SUCCESS} {label}: nothing to publish ({result.reason})")


# ============================================================================
# Record formatting
# ============================================================================

def _list_line(index: int, record, tracked: bool) -> str:
    marker = exists_icon(tracked)
    if isinstance(record, Teacher):
        platforms = ", ".join(record.platforms) or "No platforms"
        return f"   {index}. {marker} {record.name} - {record.total_students} students ({platforms})"
    return f"   {index}. {marker} {record.name} ({record.level or 'No level'}) - {record.file_name}"


def _echo_student_info(student: Student) -> None:
    def field(value: str, missing: str = "Not provided") -> str:
        return value.strip() or missing

    click.echo(f"\n{STUDENT} Student Info: {student.name}")
    click.echo(f"   Email: {field(student.email)}")
    click.echo(f"   Phone: {field(student.phone)}")
    click.echo(f"   Workplace: {field(student.workplace)}")
    click.echo(f"   Level: {field(student.level)}")
    click.echo(f"   Objective: {field(student.learning_objective)}")
    click.echo(f"   Teacher: {field(student.assigned_teacher, 'Not assigned')}")
    click.echo(f"   Contract: {field(student.contract)}")
    click.echo(f"   Class link: {field(student.class_link)}")
    click.echo(f"   Finished activities: {len(student.activities)}")
    click.echo(f"   File: {student.file_name}")
    click.echo()


def _echo_teacher_info(teacher: Teacher) -> None:
    click.echo(f"\n{TEACHER} Teacher Info: {teacher.name}")
    click.echo(f"   Students: {teacher.total_students}")
    click.echo(f"   Active classes: {teacher.active_classes}")
    click.echo(f"   Platforms: {', '.join(teacher.platforms) or 'No platforms'}")
    click.echo(f"   File: {teacher.file_name}")
    for student in teacher.students:
        click.echo(f"     - {student.name} ({student.level or 'No level'})")
    click.echo()


# ============================================================================
# Click Group Setup
# ============================================================================

@click.group(cls=LenientGroup)
@click.option(
    "--site-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Site directory (default: ROSTER_SITE_DIR or the current directory)",
)
@click.pass_context
def cli(ctx, site_dir: Optional[Path]):
    """
    rostersync - Roster spreadsheet to static site pages

    Generates one page per student and one dashboard per teacher from a
    Google Sheets roster, and publishes them with git.
    """
    if ctx.obj is None:
        ctx.obj = RosterContext(site_dir)


# ============================================================================
# Roster groups (students / teachers)
# ============================================================================

def make_roster_group(
    name: str,
    noun: str,
    get_manager: Callable[[RosterContext], RosterManager],
    get_interval: Callable[[RosterConfig], float],
    icon: str,
) -> click.Group:
    """Build the students/teachers command group around one kind of manager."""

    @click.group(name=name, cls=LenientGroup, help=f"Manage {noun} pages generated from the roster sheet")
    def group():
        pass

    @group.command()
    @click.pass_obj
    @handle_errors
    def sync(ctx: RosterContext):
        """Sync all pages with the sheet once"""
        get_manager(ctx).sync()

    @group.command()
    @click.argument("minutes", type=click.FloatRange(min=0, min_open=True), required=False)
    @click.pass_obj
    @handle_errors
    def auto(ctx: RosterContext, minutes: Optional[float]):
        """Sync and publish now, then every MINUTES"""
        manager = get_manager(ctx)
        _run_scheduled(manager.sync_and_publish, minutes or get_interval(ctx.config), f"{name} auto-sync")

    @group.command("list")
    @click.pass_obj
    @handle_errors
    def list_records(ctx: RosterContext):
        """List every record in the sheet"""
        entries = get_manager(ctx).list_records()
        click.echo(f"\n{icon} {noun.capitalize()}s in Google Sheets ({len(entries)}):")
        for index, (record, tracked) in enumerate(entries, start=1):
            click.echo(_list_line(index, record, tracked))
        click.echo()

    @group.command()
    @click.argument("record_name", metavar="NAME")
    @click.pass_obj
    @handle_errors
    def create(ctx: RosterContext, record_name: str):
        """Write the page for one record"""
        _require_name(record_name, noun)
        if get_manager(ctx).create(record_name) is None:
            click.echo(f"{ERROR} {noun.capitalize()} '{record_name}' not found in Google Sheets", err=True)
            sys.exit(1)

    @group.command()
    @click.argument("record_name", metavar="NAME")
    @click.pass_obj
    @handle_errors
    def delete(ctx: RosterContext, record_name: str):
        """Delete the page for one record"""
        _require_name(record_name, noun)
        if not get_manager(ctx).delete(record_name):
            sys.exit(1)

    @group.command()
    @click.argument("record_name", metavar="NAME")
    @click.pass_obj
    @handle_errors
    def info(ctx: RosterContext, record_name: str):
        """Show details for one record"""
        _require_name(record_name, noun)
        record = get_manager(ctx).info(record_name)
        if record is None:
            click.echo(f"{ERROR} {noun.capitalize()} '{record_name}' not found", err=True)
            sys.exit(1)
        if isinstance(record, Teacher):
            _echo_teacher_info(record)
        else:
            _echo_student_info(record)

    @group.command()
    @click.pass_obj
    @handle_errors
    def status(ctx: RosterContext):
        """Show page changes not yet published"""
        _echo_changes(get_manager(ctx).status(), f"{noun} pages")

    @group.command()
    @click.pass_obj
    @handle_errors
    def publish(ctx: RosterContext):
        """Commit and push page changes"""
        manager = get_manager(ctx)
        _echo_publish_result(manager.publish(), manager.name)

    return group


cli.add_command(make_roster_group(
    "students",
    "student",
    RosterContext.student_manager,
    lambda config: config.interval_students,
    STUDENT,
))
cli.add_command(make_roster_group(
    "teachers",
    "teacher",
    RosterContext.teacher_manager,
    lambda config: config.interval_teachers,
    TEACHER,
))


# ============================================================================
# Combined sync
# ============================================================================

@cli.group("all", cls=LenientGroup)
def all_group():
    """Student pages and teacher dashboards together"""


@all_group.command("sync")
@click.pass_obj
@handle_errors
def all_sync(ctx: RosterContext):
    """Sync both kinds of page from one fetch"""
    ctx.combined_manager().sync()


@all_group.command("auto")
@click.argument("minutes", type=click.FloatRange(min=0, min_open=True), required=False)
@click.pass_obj
@handle_errors
def all_auto(ctx: RosterContext, minutes: Optional[float]):
    """Sync both kinds and publish, now and then every MINUTES"""
    manager = ctx.combined_manager()
    _run_scheduled(manager.sync_and_publish, minutes or ctx.config.interval_all, "combined auto-sync")


# ============================================================================
# Folder publishing
# ============================================================================

@cli.group("folder", cls=LenientGroup)
def folder_group():
    """Publish hand-maintained folders (lessons, grammar pages)"""


folder_dir_argument = click.argument("directory", type=click.Path(file_okay=False, path_type=Path))


@folder_group.command("status")
@folder_dir_argument
@click.pass_obj
@handle_errors
def folder_status(ctx: RosterContext, directory: Path):
    """Show uncommitted changes in DIRECTORY"""
    manager = ctx.folder_manager(directory)
    _echo_changes(manager.status(), manager.directory.name)


@folder_group.command("list")
@folder_dir_argument
@click.pass_obj
@handle_errors
def folder_list(ctx: RosterContext, directory: Path):
    """List the HTML files in DIRECTORY"""
    manager = ctx.folder_manager(directory)
    files = manager.list_files()
    click.echo(f"\n{FOLDER} {manager.directory.name} files ({len(files)}):\n")
    for index, path in enumerate(files, start=1):
        click.echo(f"   {index}. {path.name}")
    click.echo()


@folder_group.command("publish")
@folder_dir_argument
@click.pass_obj
@handle_errors
def folder_publish(ctx: RosterContext, directory: Path):
    """Commit and push DIRECTORY"""
    manager = ctx.folder_manager(directory)
    _echo_publish_result(manager.publish(), manager.directory.name)


@folder_group.command("auto")
@folder_dir_argument
@click.argument("minutes", type=click.FloatRange(min=0, min_open=True), required=False)
@click.pass_obj
@handle_errors
def folder_auto(ctx: RosterContext, directory: Path, minutes: Optional[float]):
    """Publish DIRECTORY now, then every MINUTES"""
    manager = ctx.folder_manager(directory)
    _run_scheduled(manager.publish, minutes or ctx.config.interval_folder, f"{manager.directory.name} auto-sync")


# ============================================================================
# Init / Info
# ============================================================================

@cli.command()
@click.option("--sheet-id", help="Google Sheets id of the roster")
@click.pass_obj
@handle_errors
def init(ctx: RosterContext, sheet_id: Optional[str]):
    """
    Set up a site directory

    Writes rostersync.yaml and the default page templates. Existing files
    are left alone.

    Examples:
        rostersync init
        rostersync init --sheet-id 1AbC...
    """
    site_dir = Path(ctx.site_dir) if ctx.site_dir else ctx.config.site_dir
    site_dir.mkdir(parents=True, exist_ok=True)
    click.echo(f"{FOLDER} Initializing rostersync in: {site_dir}")

    yaml_path = site_dir / CONFIG_FILE_NAME
    if yaml_path.exists():
        click.echo(f"{WARNING} {CONFIG_FILE_NAME} already exists, leaving it alone")
    else:
        yaml_path.write_text(create_config_template(sheet_id), encoding="utf-8")
        click.echo(f"{SUCCESS} Created {CONFIG_FILE_NAME}")

    for template in sorted(TEMPLATES_DIR.glob("*.html")):
        target = site_dir / template.name
        if target.exists():
            click.echo(f"{WARNING} {template.name} already exists, leaving it alone")
            continue
        shutil.copyfile(template, target)
        click.echo(f"{SUCCESS} Created {template.name}")

    click.echo()
    click.echo("Next steps:")
    click.echo(f"  1. Set sheet_id in {CONFIG_FILE_NAME} (if not set)")
    click.echo("  2. Share the sheet as 'Anyone with the link can view'")
    click.echo("  3. Run: rostersync all sync")
    click.echo("  4. Run: rostersync all auto")


@cli.command()
@click.pass_obj
@handle_errors
def info(ctx: RosterContext):
    """Show resolved configuration and page counts"""
    config = ctx.config

    def source(attr: str) -> str:
        return config._sources.get(attr, "default")

    click.echo("rostersync configuration\n")
    click.echo("=" * 60)
    click.echo(f"Site dir: {config.site_dir} [{source('site_dir')}]")
    click.echo(f"Sheet id: {config.sheet_id or 'Not set'} [{source('sheet_id')}]")
    click.echo(f"Sheet gid: {config.sheet_gid} [{source('sheet_gid')}]")
    click.echo(f"Schema version: {config.schema_version}")
    click.echo(f"Students dir: {config.students_path} [{source('students_dir')}]")
    click.echo(f"Teachers dir: {config.teachers_path} [{source('teachers_dir')}]")
    click.echo(f"Git: {config.git_remote}/{config.git_branch}")
    click.echo(
        "Intervals (min): "
        f"students {config.interval_students:g}, teachers {config.interval_teachers:g}, "
        f"all {config.interval_all:g}, folder {config.interval_folder:g}"
    )

    click.echo("\nPages")
    click.echo("-" * 60)
    students = ArtifactStore(config.students_path, STUDENT_PAGE).enumerate()
    teachers = ArtifactStore(config.teachers_path, TEACHER_DASHBOARD).enumerate()
    click.echo(f"Student pages: {len(students)}")
    click.echo(f"Teacher dashboards: {len(teachers)}")

    click.echo("\nQuick Check")
    click.echo("-" * 60)
    checks = []
    if not config.sheet_id:
        checks.append(f"{WARNING} Sheet id not configured")
    for template in (config.student_template_path, config.teacher_template_path):
        if not template.is_file():
            checks.append(f"{WARNING} Template not found: {template}")
    if checks:
        for check in checks:
            click.echo(check)
    else:
        click.echo(f"{SUCCESS} All checks passed")


@cli.command()
def version():
    """Show rostersync version"""
    click.echo(f"rostersync v{__version__}")
    click.echo("Roster spreadsheet to static site pages")


# ============================================================================
# Entry Point
# ============================================================================

if __name__ == "__main__":
    cli()
