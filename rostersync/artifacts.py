"""
artifacts.py - Generated pages on disk

Every generated page is named <Key><suffix>.html where Key is the
normalized record name. Because the suffix is fixed per kind, the store
can list a shared directory and recover (approximately) which records
the pages belong to, and it can refuse to touch anything else.

    normalize_name("Mary O'Neil")   -> "Mary-ONeil"
    STUDENT_PAGE.file_name(...)     -> "Mary-ONeil-Page.html"
    STUDENT_PAGE.name_from_file()   -> "Mary ONeil"   (lossy)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional

from rostersync.errors import artifact_delete_error, artifact_write_error
from rostersync.icons import DELETE, PROTECTED, log, log_error, log_warning
from rostersync.security_utils import is_safe_path


_STRIP_RE = re.compile(r"[^A-Za-z0-9\s-]")
_SEPARATOR_RE = re.compile(r"[\s-]+")

# Stems that are never deleted even though they carry a page suffix
DEFAULT_PROTECTED_STEMS = frozenset({"template", "teacher-template"})


def normalize_name(name: str) -> str:
    """
    Filesystem-safe key for a record name.

    Drops everything outside A-Z, a-z, 0-9, whitespace and hyphens, then
    collapses each run of whitespace/hyphens into one hyphen. Applying it
    twice gives the same result as applying it once.
    """
    cleaned = _STRIP_RE.sub("", name or "")
    return _SEPARATOR_RE.sub("-", cleaned).strip("-")


@dataclass(frozen=True)
class ArtifactKind:
    suffix: str
    label: str
    extension: str = ".html"

    @property
    def file_suffix(self) -> str:
        return f"{self.suffix}{self.extension}"

    def key(self, name: str) -> str:
        return normalize_name(name)

    def file_name(self, name: str) -> str:
        return f"{self.key(name)}{self.file_suffix}"

    def matches(self, file_name: str) -> bool:
        return file_name.endswith(self.file_suffix) and len(file_name) > len(self.file_suffix)

    def key_from_file(self, file_name: str) -> str:
        return file_name[: -len(self.file_suffix)]

    def name_from_file(self, file_name: str) -> str:
        """Best-effort record name; punctuation in the original is lost."""
        return self.key_from_file(file_name).replace("-", " ")


STUDENT_PAGE = ArtifactKind(suffix="-Page", label="student page")
TEACHER_DASHBOARD = ArtifactKind(suffix="-Teacher-Dashboard", label="teacher dashboard")


class ArtifactStore:
    """
    Pages of one kind inside one directory.

    Keys passed to the public methods may be either record names or
    already-normalized keys; both resolve to the same file.
    """

    def __init__(
        self,
        directory: Path,
        kind: ArtifactKind,
        protected_names: Iterable[str] = (),
        log_prefix: str = "store",
    ):
        self.directory = Path(directory)
        self.kind = kind
        self.log_prefix = log_prefix
        self.protected_stems = set(DEFAULT_PROTECTED_STEMS)
        for name in protected_names:
            self.protected_stems.add(normalize_name(Path(name).stem).lower())

    def path_for(self, key: str) -> Path:
        return self.directory / self.kind.file_name(key)

    def enumerate(self) -> Dict[str, str]:
        """
        List pages of this kind currently on disk.

        Returns:
            {artifact key: reconstructed record name}
        """
        found: Dict[str, str] = {}
        if not self.directory.is_dir():
            return found
        for entry in sorted(self.directory.iterdir()):
            if not entry.is_file() or not self.kind.matches(entry.name):
                continue
            found[self.kind.key_from_file(entry.name)] = self.kind.name_from_file(entry.name)
        return found

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def write(self, key: str, content: str) -> Path:
        """
        Write (fully overwrite) the page for key.

        Raises:
            ArtifactWriteError: empty key or any filesystem failure
        """
        path = self.path_for(key)
        if not self.kind.key(key):
            raise artifact_write_error(path, ValueError(f"name {key!r} has no usable characters"))
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise artifact_write_error(path, e) from e
        return path

    def refusal_reason(self, key: str) -> Optional[str]:
        """Why delete(key) would be refused, or None if it is allowed."""
        stem = self.kind.key(key)
        file_name = self.kind.file_name(key)
        if not stem:
            return f"name {key!r} has no usable characters"
        if not file_name.endswith(self.kind.file_suffix):
            return f"{file_name} is not a {self.kind.label}"
        if stem.lower() in self.protected_stems:
            return f"{file_name} is a protected name"
        if not is_safe_path(self.directory, self.directory / file_name):
            return f"{file_name} resolves outside {self.directory}"
        return None

    def delete(self, key: str) -> bool:
        """
        Delete the page for key.

        Never raises. Returns False when the safety gate refuses, when the
        file does not exist, or when the filesystem call fails.
        """
        reason = self.refusal_reason(key)
        if reason:
            print(log(PROTECTED, f"PROTECTED: Refusing to delete: {reason}", self.log_prefix))
            return False

        path = self.path_for(key)
        if not path.is_file():
            print(log_warning(f"File not found: {path.name}", self.log_prefix))
            return False

        try:
            path.unlink()
        except OSError as e:
            print(log_error(artifact_delete_error(path, e).short(), self.log_prefix))
            return False

        print(log(DELETE, f"Deleted: {path.name}", self.log_prefix))
        return True
