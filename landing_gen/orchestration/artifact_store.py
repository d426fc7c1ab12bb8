"""
Session-local store of generated pages addressed by ``blob:`` URLs.
"""

import logging
import uuid
from typing import Dict, List, Optional

from landing_gen.errors import ArtifactNotFoundError

logger = logging.getLogger(__name__)


class ArtifactStore:
    """
    Holds generated HTML in memory behind ephemeral URLs.

    Every URL returned by create_url() stays resolvable until it is passed to
    release_url(). The owner is responsible for releasing a URL before it
    drops its reference to it.
    """

    def __init__(self, session_id: Optional[str] = None):
        """
        Initialize the store.

        Args:
            session_id: Identifier embedded in every URL (random if omitted).
        """
        self.session_id = session_id or uuid.uuid4().hex
        self._artifacts: Dict[str, str] = {}

    def create_url(self, html_content: str) -> str:
        """
        Allocate a new URL for HTML content.

        Args:
            html_content: Final page HTML.

        Returns:
            URL of the form ``blob:<session>/<uuid>``.
        """
        url = f"blob:{self.session_id}/{uuid.uuid4()}"
        self._artifacts[url] = html_content
        logger.debug("Allocated artifact %s (%d chars)", url, len(html_content))
        return url

    def release_url(self, url: Optional[str]) -> bool:
        """
        Release a URL. Unknown, empty or already released URLs are ignored.

        Returns:
            True if a live URL was released.
        """
        if not url:
            return False
        released = self._artifacts.pop(url, None) is not None
        if released:
            logger.debug("Released artifact %s", url)
        return released

    def resolve(self, url: str) -> str:
        """Return the HTML behind a live URL."""
        try:
            return self._artifacts[url]
        except KeyError:
            raise ArtifactNotFoundError(url) from None

    def release_all(self) -> int:
        count = len(self._artifacts)
        self._artifacts.clear()
        return count

    @property
    def live_urls(self) -> List[str]:
        return list(self._artifacts)

    @property
    def live_count(self) -> int:
        return len(self._artifacts)
