#!/usr/bin/env python3
"""
security_utils.py (rostersync)

Shared helpers for everything that crosses a trust boundary: spreadsheet
values going into HTML, URLs going into href/src attributes, and paths
handed to the artifact store.

Every value in the roster sheet is editable by anyone with edit access to
the sheet, so pages are built on the assumption that any cell may contain
markup or a javascript: URL.
"""

from __future__ import annotations

import html
import json
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit


# ============================================================================
# HTML Output
# ============================================================================

def escape_html(value: str | None) -> str:
    """
    Escape a value for HTML text or a quoted attribute.

    Covers & < > " and '. None and empty values become "".
    """
    if not value:
        return ""
    return html.escape(value, quote=True)


def json_for_script(value: Any, indent: int | None = None) -> str:
    """
    JSON-encode a value for embedding inside a <script> element.

    "</" is escaped so a value can never terminate the surrounding script
    element.
    """
    return json.dumps(value, ensure_ascii=False, indent=indent).replace("</", "<\\/")


# ============================================================================
# URL Validation
# ============================================================================

ALLOWED_URL_SCHEMES = {"http", "https"}

# Placeholder used in place of any rejected URL
UNSAFE_URL = "#"

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x20\x7f]")


def is_safe_url(url: str | None) -> bool:
    """
    Check that a URL is well formed and uses http or https.

    Args:
        url: Candidate URL (already stripped of surrounding whitespace)

    Returns:
        True if the URL may be placed in an href/src attribute
    """
    if not url:
        return False
    if _CONTROL_CHARS_RE.search(url):
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme.lower() in ALLOWED_URL_SCHEMES and bool(parts.netloc)


def safe_url(url: str | None) -> str:
    """
    Return the URL if it is safe for an attribute, else UNSAFE_URL.

    A blank value stays blank, so an empty src or href never points back
    at the page itself.

    The result is not HTML-escaped; pass it through escape_html() before
    placing it inside a quoted attribute.
    """
    candidate = (url or "").strip()
    if not candidate or is_safe_url(candidate):
        return candidate
    return UNSAFE_URL


# ============================================================================
# Path Validation
# ============================================================================

def is_safe_path(base_dir: Path, target_path: Path) -> bool:
    """
    Check if target_path is safely within base_dir (no symlink escape).

    Args:
        base_dir: The allowed base directory
        target_path: The path to validate

    Returns:
        True if target is within base (safe), False otherwise
    """
    try:
        base_resolved = base_dir.resolve()
        target_resolved = target_path.resolve()
        target_resolved.relative_to(base_resolved)
        return True
    except ValueError:
        return False


# ============================================================================
# Request Timeout Constants
# ============================================================================

# Default timeouts for HTTP requests (connect, read)
DEFAULT_TIMEOUT = (10, 30)  # 10s connect, 30s read
