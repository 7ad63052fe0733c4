# config_utils.py - YAML Configuration System for rostersync
"""
rostersync configuration utilities with YAML file support.

Configuration Resolution Order (highest to lowest priority):
1. Environment variables (ROSTER_SHEET_ID, ROSTER_SITE_DIR, etc.)
2. rostersync.yaml in the site directory
3. ~/.rostersync/config.yaml (global defaults)

Usage:
    from rostersync.config_utils import get_config, get_sheet_id

    config = get_config()
    print(config.export_url)
    print(config.students_path)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Tuple

import yaml

from rostersync.errors import ConfigurationError, missing_sheet_id_error
from rostersync.schema import SCHEMA_VERSION


CONFIG_FILE_NAME = "rostersync.yaml"

DEFAULT_PLATFORMS = ["MIM", "Linked", "Italki", "Preply"]


@dataclass
class DashboardSettings:
    """Static values written into every teacher dashboard configuration"""
    teacher_title: str = "English Teacher"
    website_url: str = "https://www.mimlanguageservices.com/"
    website_logo: str = "https://static.wixstatic.com/media/593d03_21d7db92a5cc4b1c9633f867764de873~mv2.png"
    pages_base_url: str = "https://mimlanguageservices.github.io/Students/"
    default_platforms: List[str] = field(default_factory=lambda: list(DEFAULT_PLATFORMS))
    avatar_url: str = "https://ui-avatars.com/api/?name={name}&size=300&background=667eea&color=ffffff"


@dataclass
class RosterConfig:
    """Complete rostersync configuration"""
    # Spreadsheet
    sheet_id: Optional[str] = None
    sheet_gid: str = "0"
    schema_version: int = SCHEMA_VERSION

    # Site layout (relative to site_dir)
    site_dir: Path = field(default_factory=Path.cwd)
    students_dir: str = "."
    teachers_dir: str = "."
    student_template: str = "Template.html"
    teacher_template: str = "Teacher-Template.html"
    placeholder_photo: str = "https://via.placeholder.com/100x100?text=Student"

    # Publishing
    git_remote: str = "origin"
    git_branch: str = "main"

    # Scheduler intervals in minutes
    interval_students: float = 1.0
    interval_teachers: float = 5.0
    interval_all: float = 2.0
    interval_folder: float = 5.0

    # HTTP timeouts in seconds
    connect_timeout: float = 10.0
    read_timeout: float = 30.0

    dashboard: DashboardSettings = field(default_factory=DashboardSettings)

    # Extra settings from config file
    extra: Dict[str, Any] = field(default_factory=dict)

    # Track where values came from (for `rostersync info`)
    _sources: Dict[str, str] = field(default_factory=dict)

    @property
    def export_url(self) -> str:
        return (
            f"https://docs.google.com/spreadsheets/d/{self.sheet_id}"
            f"/export?format=csv&gid={self.sheet_gid}"
        )

    @property
    def edit_url(self) -> str:
        return f"https://docs.google.com/spreadsheets/d/{self.sheet_id}/edit"

    @property
    def timeout(self) -> Tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)

    @property
    def students_path(self) -> Path:
        return self.site_dir / self.students_dir

    @property
    def teachers_path(self) -> Path:
        return self.site_dir / self.teachers_dir

    @property
    def student_template_path(self) -> Path:
        return self.site_dir / self.student_template

    @property
    def teacher_template_path(self) -> Path:
        return self.site_dir / self.teacher_template


class ConfigLoader:
    """Load configuration from multiple sources"""

    def __init__(self, site_dir: Optional[Path] = None):
        env_site = os.environ.get("ROSTER_SITE_DIR")
        if site_dir:
            self.site_dir = Path(site_dir)
        elif env_site:
            self.site_dir = Path(env_site).expanduser()
        else:
            self.site_dir = Path.cwd()
        self.config = RosterConfig(site_dir=self.site_dir)
        if env_site and not site_dir:
            self.config._sources["site_dir"] = "env:ROSTER_SITE_DIR"

    def load(self) -> RosterConfig:
        """Load configuration from all sources in priority order"""
        # Lowest priority first, higher overwrites
        self._load_global_config()
        self._load_site_config()
        self._load_env_vars()
        self._validate()
        return self.config

    def _load_global_config(self):
        """Load ~/.rostersync/config.yaml if it exists"""
        global_config = Path.home() / ".rostersync" / "config.yaml"
        if global_config.exists():
            self._load_yaml_file(global_config, "global")

    def _load_site_config(self):
        """Load rostersync.yaml from the site directory"""
        yaml_path = self.site_dir / CONFIG_FILE_NAME
        if yaml_path.exists():
            self._load_yaml_file(yaml_path, CONFIG_FILE_NAME)

    def _load_yaml_file(self, path: Path, source_name: str):
        """Load settings from a YAML file"""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            print(f"[config:warn] Failed to parse {path}: {e}")
            return

        if not isinstance(data, dict):
            print(f"[config:warn] Ignoring {path}: expected a mapping at top level")
            return

        mappings = {
            "sheet_id": "sheet_id",
            "sheet_gid": "sheet_gid",
            "schema_version": "schema_version",
            "students_dir": "students_dir",
            "teachers_dir": "teachers_dir",
            "student_template": "student_template",
            "teacher_template": "teacher_template",
            "placeholder_photo": "placeholder_photo",
        }

        for yaml_key, attr in mappings.items():
            if yaml_key in data and data[yaml_key] is not None:
                value = data[yaml_key]
                if attr == "schema_version":
                    value = int(value)
                elif attr in ("sheet_id", "sheet_gid"):
                    value = str(value)
                setattr(self.config, attr, value)
                self.config._sources[attr] = source_name

        # Nested git settings
        git = data.get("git")
        if isinstance(git, dict):
            if git.get("remote"):
                self.config.git_remote = str(git["remote"])
                self.config._sources["git_remote"] = source_name
            if git.get("branch"):
                self.config.git_branch = str(git["branch"])
                self.config._sources["git_branch"] = source_name

        # Nested interval settings (minutes)
        intervals = data.get("intervals")
        if isinstance(intervals, dict):
            for name in ("students", "teachers", "all", "folder"):
                if name in intervals:
                    setattr(self.config, f"interval_{name}", float(intervals[name]))
                    self.config._sources[f"interval_{name}"] = source_name

        # Nested fetch settings
        fetch = data.get("fetch")
        if isinstance(fetch, dict):
            if "connect_timeout" in fetch:
                self.config.connect_timeout = float(fetch["connect_timeout"])
                self.config._sources["connect_timeout"] = source_name
            if "read_timeout" in fetch:
                self.config.read_timeout = float(fetch["read_timeout"])
                self.config._sources["read_timeout"] = source_name

        # Nested dashboard settings
        dashboard = data.get("dashboard")
        if isinstance(dashboard, dict):
            for key in ("teacher_title", "website_url", "website_logo", "pages_base_url", "avatar_url"):
                if dashboard.get(key):
                    setattr(self.config.dashboard, key, str(dashboard[key]))
                    self.config._sources[f"dashboard.{key}"] = source_name
            platforms = dashboard.get("default_platforms")
            if isinstance(platforms, list) and platforms:
                self.config.dashboard.default_platforms = [str(p) for p in platforms]
                self.config._sources["dashboard.default_platforms"] = source_name

        # Store any extra settings
        known_keys = set(mappings) | {"git", "intervals", "fetch", "dashboard"}
        for key, value in data.items():
            if key not in known_keys:
                self.config.extra[key] = value

    def _load_env_vars(self):
        """Load from environment variables (highest priority)"""
        env_map = {
            "ROSTER_SHEET_ID": "sheet_id",
            "ROSTER_SHEET_GID": "sheet_gid",
            "ROSTER_GIT_REMOTE": "git_remote",
            "ROSTER_GIT_BRANCH": "git_branch",
        }
        for env_name, attr in env_map.items():
            value = os.environ.get(env_name)
            if value:
                setattr(self.config, attr, value)
                self.config._sources[attr] = f"env:{env_name}"

    def _validate(self):
        """Reject settings the rest of the package cannot work with"""
        if self.config.schema_version != SCHEMA_VERSION:
            raise ConfigurationError(
                message=f"Unsupported schema_version: {self.config.schema_version}",
                suggestion=(
                    f"This version of rostersync reads roster schema version {SCHEMA_VERSION}.\n"
                    "  Update the sheet layout and rostersync.yaml together"
                ),
                context={"source": self.config._sources.get("schema_version", "default")}
            )
        for name in ("students", "teachers", "all", "folder"):
            if getattr(self.config, f"interval_{name}") <= 0:
                raise ConfigurationError(
                    message=f"intervals.{name} must be a positive number of minutes",
                    context={"source": self.config._sources.get(f"interval_{name}", "default")}
                )


# ============================================================================
# Public API
# ============================================================================

def get_config(site_dir: Optional[Path] = None) -> RosterConfig:
    """
    Get complete rostersync configuration.

    Args:
        site_dir: Site directory (defaults to ROSTER_SITE_DIR, then cwd)

    Returns:
        RosterConfig with all settings resolved
    """
    loader = ConfigLoader(site_dir)
    return loader.load()


def get_sheet_id(config: Optional[RosterConfig] = None) -> str:
    """
    Get the spreadsheet id or fail with a helpful error.

    Raises:
        ConfigurationError: If no sheet id is configured anywhere
    """
    if config is None:
        config = get_config()
    if config.sheet_id:
        return config.sheet_id
    raise missing_sheet_id_error([
        "ROSTER_SHEET_ID environment variable",
        str(config.site_dir / CONFIG_FILE_NAME),
        "~/.rostersync/config.yaml",
    ])


def create_config_template(sheet_id: Optional[str] = None, include_comments: bool = True) -> str:
    """
    Generate a rostersync.yaml template.

    Args:
        sheet_id: Spreadsheet id to fill in, if known
        include_comments: Whether to include explanatory comments

    Returns:
        YAML string ready to write to file
    """
    sheet_value = sheet_id or "REPLACE_WITH_YOUR_SHEET_ID"
    if include_comments:
        return f'''# rostersync configuration file

# Google Sheets id of the roster (the long id in the sheet URL)
sheet_id: {sheet_value}
sheet_gid: "0"
schema_version: {SCHEMA_VERSION}

# Where generated pages live, relative to this file
students_dir: .
teachers_dir: .
student_template: Template.html
teacher_template: Teacher-Template.html

# Where auto-sync pushes to
git:
  remote: origin
  branch: main

# Auto-sync intervals in minutes
intervals:
  students: 1
  teachers: 5
  all: 2
  folder: 5

# HTTP timeouts in seconds
fetch:
  connect_timeout: 10
  read_timeout: 30
'''
    return f'''sheet_id: {sheet_value}
sheet_gid: "0"
schema_version: {SCHEMA_VERSION}
git:
  remote: origin
  branch: main
'''
