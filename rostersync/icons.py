#!/usr/bin/env python3
"""
icons.py - Centralized icon/emoji definitions for rostersync console output

Usage:
    from rostersync.icons import log_error, log_success
    print(log_success("Created: John-Doe-Page.html", prefix="sync"))
    print(log_error("Sync failed: connection refused", prefix="sync"))

Every unicode symbol printed by rostersync is defined here once. Other
modules import the constants (or the log helpers) instead of embedding
emoji directly.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Icons:
    """
    Centralized icon definitions.

    Categories:
    - Status: SUCCESS, ERROR, WARNING, SKIP, PROTECTED
    - Actions: SYNC, CREATE, UPDATE, DELETE, PUBLISH, STAGE, COMMIT, REDIRECT
    - Subjects: STUDENT, TEACHER, FOLDER, FILE, LINK
    - Misc: CLOCK, STOP, REPORT, UNTRACKED
    """

    # =========================================================================
    # Status Icons
    # =========================================================================
    SUCCESS: str = "✅"      # operation succeeded
    ERROR: str = "❌"        # operation failed
    WARNING: str = "⚠️"      # recoverable problem
    SKIP: str = "⏭️"         # skipped
    PROTECTED: str = "🛡️"    # refused by a safety gate

    # =========================================================================
    # Action Icons
    # =========================================================================
    SYNC: str = "🔄"
    CREATE: str = "➕"
    UPDATE: str = "📝"
    DELETE: str = "🗑️"
    PUBLISH: str = "🚀"
    STAGE: str = "📦"
    COMMIT: str = "💾"
    REDIRECT: str = "↪️"

    # =========================================================================
    # Subject Icons
    # =========================================================================
    STUDENT: str = "🎓"
    TEACHER: str = "👥"
    FOLDER: str = "📁"
    FILE: str = "📄"
    LINK: str = "🔗"

    # =========================================================================
    # Misc Icons
    # =========================================================================
    CLOCK: str = "⏰"
    STOP: str = "🛑"
    REPORT: str = "📈"
    UNTRACKED: str = "🆕"


# Global singleton instance
icons = Icons()

SUCCESS = icons.SUCCESS
ERROR = icons.ERROR
WARNING = icons.WARNING
SKIP = icons.SKIP
PROTECTED = icons.PROTECTED
SYNC = icons.SYNC
CREATE = icons.CREATE
UPDATE = icons.UPDATE
DELETE = icons.DELETE
PUBLISH = icons.PUBLISH
STAGE = icons.STAGE
COMMIT = icons.COMMIT
REDIRECT = icons.REDIRECT
STUDENT = icons.STUDENT
TEACHER = icons.TEACHER
FOLDER = icons.FOLDER
FILE = icons.FILE
LINK = icons.LINK
CLOCK = icons.CLOCK
STOP = icons.STOP
REPORT = icons.REPORT
UNTRACKED = icons.UNTRACKED


# =========================================================================
# Helper Functions
# =========================================================================

def exists_icon(exists: bool) -> str:
    """Marker used by the list commands for artifacts on disk."""
    return SUCCESS if exists else ERROR


def change_icon(porcelain_status: str) -> str:
    """Return an icon for a `git status --porcelain` status code."""
    if "M" in porcelain_status:
        return UPDATE
    if "A" in porcelain_status:
        return CREATE
    if "D" in porcelain_status:
        return DELETE
    if "?" in porcelain_status:
        return UNTRACKED
    return FILE


# =========================================================================
# Fallback Mode (for terminals that don't support unicode)
# =========================================================================

class AsciiIcons:
    """ASCII-only fallback icons for limited terminals."""

    SUCCESS = "[OK]"
    ERROR = "[X]"
    WARNING = "[!]"
    SKIP = "[>>]"
    PROTECTED = "[#]"
    SYNC = "[~]"
    CREATE = "[+]"
    UPDATE = "[*]"
    DELETE = "[-]"
    PUBLISH = "[^]"
    STAGE = "[=]"
    COMMIT = "[c]"
    REDIRECT = "[->]"
    STUDENT = "[S]"
    TEACHER = "[T]"
    FOLDER = "[D]"
    FILE = "[F]"
    LINK = "[L]"
    CLOCK = "[t]"
    STOP = "[.]"
    REPORT = "[r]"
    UNTRACKED = "[?]"


_ICON_NAMES = [
    "SUCCESS", "ERROR", "WARNING", "SKIP", "PROTECTED",
    "SYNC", "CREATE", "UPDATE", "DELETE", "PUBLISH", "STAGE", "COMMIT", "REDIRECT",
    "STUDENT", "TEACHER", "FOLDER", "FILE", "LINK",
    "CLOCK", "STOP", "REPORT", "UNTRACKED",
]


def use_ascii_icons():
    """
    Switch to ASCII-only icons globally.

    Set ROSTER_ASCII_ICONS=1 (or call this directly) if unicode icons
    garble the terminal or a log collector.
    """
    global icons
    ascii_icons = AsciiIcons()
    icons = ascii_icons
    module_globals = globals()
    for name in _ICON_NAMES:
        module_globals[name] = getattr(ascii_icons, name)


# =========================================================================
# Output Helper Functions
# =========================================================================

def log(icon: str, message: str, prefix: str = "") -> str:
    """
    Format a log message with icon.

    Args:
        icon: Icon to display (use constants from this module)
        message: Message text
        prefix: Optional component tag like "sync" or "publish"

    Returns:
        Formatted string like "✅ Done!" or "[sync] ✅ Done!"
    """
    if prefix:
        return f"[{prefix}] {icon} {message}"
    return f"{icon} {message}"


def log_success(message: str, prefix: str = "") -> str:
    """Format a success message."""
    return log(SUCCESS, message, prefix)


def log_error(message: str, prefix: str = "") -> str:
    """Format an error message."""
    return log(ERROR, message, prefix)


def log_warning(message: str, prefix: str = "") -> str:
    """Format a warning message."""
    return log(WARNING, message, prefix)


# Constants are imported by value elsewhere, so the switch has to happen
# before any other rostersync module is imported.
if os.environ.get("ROSTER_ASCII_ICONS", "").strip().lower() in ("1", "true", "yes", "on"):
    use_ascii_icons()
