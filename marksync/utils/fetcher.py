"""Remote bookmark database source.

Fetches the current revision marker from the GitHub commits API and the
raw database document from raw.githubusercontent.com (public, no auth
needed).
"""

import json
import logging
import urllib.error
import urllib.request
from typing import Any, Dict, Optional

from ..operations.errors import FetchUnavailable
from ..version import __version__
from .config import get_source_config

logger = logging.getLogger(__name__)


def _open(url: str, timeout: float, accept: Optional[str] = None) -> bytes:
    request = urllib.request.Request(url)
    if accept:
        request.add_header("Accept", accept)
    request.add_header("User-Agent", f"marksync/{__version__}")

    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = getattr(response, "status", 200)
            if not 200 <= status < 300:
                raise FetchUnavailable(f"{url} returned HTTP {status}")
            return response.read()
    except urllib.error.HTTPError as e:
        raise FetchUnavailable(f"{url} returned HTTP {e.code}") from e
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        raise FetchUnavailable(f"Could not reach {url}: {e}") from e


def extract_sha(payload: Any) -> str:
    """Pull the revision sha out of a commit object or a list of commits."""
    if isinstance(payload, list):
        payload = payload[0] if payload else {}
    sha = payload.get("sha") if isinstance(payload, dict) else None
    if not isinstance(sha, str) or not sha:
        raise FetchUnavailable("Version check response has no 'sha'")
    return sha


class RemoteSource:
    """Version marker and document endpoints for the published database."""

    def __init__(self, marker_url: str, document_url: str, timeout: float = 30):
        self.marker_url = marker_url
        self.document_url = document_url
        self.timeout = timeout

    @classmethod
    def from_config(cls, settings: Optional[Dict[str, Any]] = None) -> "RemoteSource":
        settings = settings or get_source_config()
        return cls(
            marker_url=settings["marker_url"],
            document_url=settings["document_url"],
            timeout=float(settings.get("timeout", 30)),
        )

    def fetch_marker(self) -> str:
        """Return the sha identifying the current document revision."""
        body = _open(self.marker_url, self.timeout, accept="application/vnd.github+json")
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise FetchUnavailable(f"Version check returned invalid JSON: {e}") from e
        sha = extract_sha(payload)
        logger.debug("Remote database revision is %s", sha)
        return sha

    def fetch_document(self) -> str:
        """Return the raw database text."""
        body = _open(self.document_url, self.timeout)
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FetchUnavailable(f"Document is not valid UTF-8: {e}") from e
