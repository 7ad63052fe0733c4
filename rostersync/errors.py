# errors.py
"""
Custom exception classes with improved error messages for rostersync

All exceptions include:
- Clear error description
- Actionable suggestions
- Relevant context

Where each one is raised and handled:
- FetchError, ParseError, TemplateReadError abort a sync cycle and leave
  the engine's inventory untouched
- ArtifactWriteError is caught per record; the cycle carries on
- ArtifactDeleteError is logged by the store; the key stays tracked
- PublishError surfaces to the scheduler after the filesystem is updated
"""
from pathlib import Path
from typing import Optional, Dict, Any, Sequence


class RosterSyncError(Exception):
    """Base exception for all rostersync errors"""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        self.cause = cause
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error with all details"""
        lines = [
            "",
            "=" * 70,
            f"❌ {self.__class__.__name__}",
            "=" * 70,
            "",
            self.message,
        ]

        if self.context:
            lines.append("")
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestion:
            lines.append("")
            lines.append("💡 Suggestion:")
            lines.append(f"  {self.suggestion}")

        if self.cause:
            lines.append("")
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        lines.append("")
        lines.append("=" * 70)
        lines.append("")

        return "\n".join(lines)

    def short(self) -> str:
        """One-line form for log output"""
        if self.cause:
            return f"{self.message} ({type(self.cause).__name__}: {self.cause})"
        return self.message


class ConfigurationError(RosterSyncError):
    """Configuration is missing or invalid"""
    pass


class FetchError(RosterSyncError):
    """Spreadsheet export could not be downloaded"""
    pass


class ParseError(RosterSyncError):
    """Export text could not be turned into rows"""
    pass


class TemplateReadError(RosterSyncError):
    """Page template is missing or unreadable"""
    pass


class ArtifactWriteError(RosterSyncError):
    """A generated page could not be written"""
    pass


class ArtifactDeleteError(RosterSyncError):
    """A generated page could not be removed"""
    pass


class PublishError(RosterSyncError):
    """Stage, commit or push failed"""
    pass


# Specific error factory functions

def missing_sheet_id_error(checked: Sequence[str]) -> ConfigurationError:
    """Create error for a missing spreadsheet id"""
    return ConfigurationError(
        message="Spreadsheet id not configured",
        suggestion=(
            "Set the spreadsheet id using one of these methods:\n\n"
            "1. Environment variable:\n"
            "   export ROSTER_SHEET_ID=1AbC...\n\n"
            "2. rostersync.yaml in the site directory:\n"
            "   sheet_id: 1AbC...\n\n"
            "Run 'rostersync init' to create a starter rostersync.yaml"
        ),
        context={"checked_locations": list(checked)}
    )


def fetch_status_error(url: str, status_code: int, reason: str = "") -> FetchError:
    """Create error for a non-2xx export response"""
    return FetchError(
        message=f"Spreadsheet export returned HTTP {status_code} {reason}".rstrip(),
        suggestion=(
            "Check that the spreadsheet is shared as 'Anyone with the link can view'\n"
            "  and that sheet_id / sheet_gid point at the roster tab"
        ),
        context={"url": url, "status_code": status_code}
    )


def template_read_error(template_path: Path, cause: Optional[Exception] = None) -> TemplateReadError:
    """Create error for an unreadable page template"""
    return TemplateReadError(
        message=f"Failed to read template: {template_path.name}",
        suggestion=(
            f"Make sure {template_path} exists and is readable.\n"
            "  Run 'rostersync init' to restore the default templates"
        ),
        context={"template": str(template_path)},
        cause=cause
    )


def artifact_write_error(file_path: Path, cause: Optional[Exception] = None) -> ArtifactWriteError:
    """Create error for a failed page write"""
    return ArtifactWriteError(
        message=f"Error writing {file_path.name}",
        context={"file": str(file_path)},
        cause=cause
    )


def artifact_delete_error(file_path: Path, cause: Optional[Exception] = None) -> ArtifactDeleteError:
    """Create error for a failed page delete"""
    return ArtifactDeleteError(
        message=f"Error deleting {file_path.name}",
        suggestion="The page is still tracked and the delete will be retried next cycle",
        context={"file": str(file_path)},
        cause=cause
    )


def publish_step_error(
    step: str,
    command: Sequence[str],
    output: str = "",
    cause: Optional[Exception] = None
) -> PublishError:
    """Create error for a failed git step"""
    context: Dict[str, Any] = {"step": step, "command": " ".join(command)}
    if output.strip():
        context["output"] = output.strip()
    return PublishError(
        message=f"Failed to {step} changes",
        suggestion=(
            "Files on disk are already up to date; the next cycle will try to publish again.\n"
            "  Check the remote/branch settings and credentials with 'git push' by hand"
        ),
        context=context,
        cause=cause
    )
