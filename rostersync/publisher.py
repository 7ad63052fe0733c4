"""
publisher.py - Stage, commit and push generated pages

One CommitPublisher covers a fixed set of targets inside one working tree.
A target is a directory, optionally narrowed to a file-name glob such as
"*-Page.html" so that page kinds sharing a directory are published apart.
publish() does nothing when `git status --porcelain` reports no change
under those targets; otherwise it stages exactly the reported files, commits with

    "<Label> update: <local timestamp> - <description>"

and pushes to the configured remote/branch. A failing step raises
PublishError and nothing is retried within the call.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional, Sequence, Union

from rostersync.errors import publish_step_error
from rostersync.icons import COMMIT, CLOCK, PUBLISH, REPORT, STAGE, change_icon, log, log_success


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class ChangedFile:
    status: str
    path: str
    staged_only: bool = False
    renamed_from: Optional[str] = None

    @property
    def icon(self) -> str:
        return change_icon(self.status)

    @property
    def commit_paths(self) -> List[str]:
        paths = [self.path]
        if self.renamed_from:
            paths.append(self.renamed_from)
        return paths


@dataclass
class PublishResult:
    pushed: bool
    reason: Optional[str] = None
    files_count: int = 0
    timestamp: Optional[str] = None


def parse_porcelain(output: str) -> List[ChangedFile]:
    """
    Parse `git status --porcelain` (v1) output.

    Each line is "XY path": X is the index column, Y the work tree column.
    Renames ("R  old -> new") are reported under the new path.
    """
    changes = []
    for line in output.splitlines():
        if len(line) < 4 or not line.strip():
            continue
        code, path = line[:2], line[3:].strip()
        renamed_from = None
        if " -> " in path:
            renamed_from, path = path.split(" -> ", 1)
            renamed_from = renamed_from.strip('"')
        changes.append(ChangedFile(
            status=code.strip(),
            path=path.strip('"'),
            staged_only=code != "??" and code[1] == " ",
            renamed_from=renamed_from,
        ))
    return changes


def _literal(path: str) -> str:
    # porcelain paths are relative to the repository root
    return f":(top,literal){path}"


class PublishTarget(NamedTuple):
    directory: Path
    pattern: Optional[str] = None


class CommitPublisher:
    def __init__(
        self,
        repo_dir: Path,
        paths: Sequence[Union[Path, PublishTarget]],
        label: str,
        remote: str = "origin",
        branch: str = "main",
        description: str = "files updated",
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        log_prefix: str = "publish",
    ):
        self.repo_dir = Path(repo_dir)
        self.targets = [
            p if isinstance(p, PublishTarget) else PublishTarget(Path(p))
            for p in paths
        ]
        self.label = label
        self.remote = remote
        self.branch = branch
        self.description = description
        self.runner = runner
        self.log_prefix = log_prefix

    def _relative(self, directory: Path) -> str:
        try:
            return Path(directory).resolve().relative_to(self.repo_dir.resolve()).as_posix()
        except ValueError:
            return str(directory)

    @property
    def pathspecs(self) -> List[str]:
        """
        Git pathspecs for the targets.

        A target with a pattern becomes a `:(glob)` pathspec, where `*`
        does not cross directory boundaries, so "*-Page.html" never picks
        up dashboards or files in subdirectories.
        """
        specs = []
        for target in self.targets:
            relative = self._relative(target.directory)
            if target.pattern is None:
                specs.append(relative)
            elif relative == ".":
                specs.append(f":(glob){target.pattern}")
            else:
                specs.append(f":(glob){relative}/{target.pattern}")
        return specs

    def _git(self, step: str, *args: str) -> str:
        command = ["git", *args]
        try:
            completed = self.runner(
                command,
                cwd=str(self.repo_dir),
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            output = "\n".join(part for part in (e.stdout, e.stderr) if part)
            raise publish_step_error(step, command, output, e) from e
        except OSError as e:
            raise publish_step_error(step, command, cause=e) from e
        return completed.stdout or ""

    def pending_changes(self) -> List[ChangedFile]:
        """Files under the publish targets with uncommitted changes."""
        output = self._git(
            "check", "status", "--porcelain", "--untracked-files=all", "--", *self.pathspecs
        )
        return parse_porcelain(output)

    def has_changes(self) -> bool:
        return bool(self.pending_changes())

    def commit_message(self, timestamp: str, description: Optional[str] = None) -> str:
        return f"{self.label} update: {timestamp} - {description or self.description}"

    def publish(self, description: Optional[str] = None) -> PublishResult:
        """
        Commit and push pending changes under the publish targets.

        Only the files reported by status are staged and committed, so
        anything else already in the index is left alone.

        Raises:
            PublishError: status, add, commit or push failed
        """
        changes = self.pending_changes()
        if not changes:
            print(log_success(f"No changes to commit in {self.label}", self.log_prefix))
            return PublishResult(pushed=False, reason="no changes")

        print(log(REPORT, f"Changes detected in {self.label}:", self.log_prefix))
        for change in changes:
            print(f"   {change.icon} {change.path}")

        print(log(STAGE, "Staging changes...", self.log_prefix))
        unstaged = [_literal(change.path) for change in changes if not change.staged_only]
        if unstaged:
            self._git("stage", "add", "--", *unstaged)
        files = [_literal(path) for change in changes for path in change.commit_paths]

        timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        print(log(COMMIT, "Creating commit...", self.log_prefix))
        self._git("commit", "commit", "-m", self.commit_message(timestamp, description), "--", *files)

        print(log(PUBLISH, f"Pushing to {self.remote}/{self.branch}...", self.log_prefix))
        self._git("push", "push", self.remote, self.branch)

        print(log_success(f"{self.label} pushed: {len(changes)} files", self.log_prefix))
        print(f"   {CLOCK} Timestamp: {timestamp}")
        return PublishResult(pushed=True, files_count=len(changes), timestamp=timestamp)
