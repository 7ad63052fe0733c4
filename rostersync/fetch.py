"""
fetch.py - Download the roster CSV export

Google answers the export URL with a redirect to a short-lived download
host. Redirects are handled by hand so exactly one extra hop is allowed;
a second redirect is treated as a failure like any other non-2xx status.

Every request carries a (connect, read) timeout so a stalled download
fails the cycle instead of hanging the scheduler.
"""

from __future__ import annotations

from typing import Optional, Tuple
from urllib.parse import urljoin

import requests

from rostersync.errors import FetchError, fetch_status_error
from rostersync.icons import REDIRECT, log
from rostersync.security_utils import DEFAULT_TIMEOUT


REDIRECT_STATUSES = {301, 302, 303, 307, 308}


class SheetSource:
    """The spreadsheet export behind one URL."""

    def __init__(
        self,
        url: str,
        timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, url: str) -> requests.Response:
        try:
            return self.session.get(url, timeout=self.timeout, allow_redirects=False)
        except requests.exceptions.Timeout as e:
            raise FetchError(
                message="Timed out downloading the spreadsheet export",
                suggestion="Check the network connection, or raise fetch.read_timeout in rostersync.yaml",
                context={"url": url, "timeout": self.timeout},
                cause=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise FetchError(
                message="Could not download the spreadsheet export",
                context={"url": url},
                cause=e,
            ) from e

    def fetch(self) -> str:
        """
        Return the export body as text.

        Raises:
            FetchError: network failure, timeout, or a non-2xx final response
        """
        response = self._get(self.url)
        final_url = self.url

        if response.status_code in REDIRECT_STATUSES and response.headers.get("Location"):
            final_url = urljoin(self.url, response.headers["Location"])
            print(log(REDIRECT, "Following redirect", "fetch"))
            response = self._get(final_url)

        if not 200 <= response.status_code < 300:
            raise fetch_status_error(final_url, response.status_code, response.reason or "")

        return response.content.decode("utf-8-sig", errors="replace")
