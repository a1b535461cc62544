"""
Read the wikitext of pages from a MediaWiki installation so that we can check them for straight quotes

We only read from the wiki. Corrections for wiki pages are reported and need to be applied manually.
"""
import logging
from typing import Any, Dict, Final

import requests


class WikiError(RuntimeError):
    """Retrieving something from the wiki failed"""


class WikiLib:
    TIMEOUT: Final[int] = 30           # seconds per request
    CONNECT_RETRIES: Final[int] = 3    # attempts in case of timeouts

    def __init__(self, base_url: str, scriptpath: str = "/mediawiki"):
        """
        @param base_url: e.g. https://wiki.example.org
        @param scriptpath: Where the mediawiki system is installed (where to find api.php)
        """
        self.api_url: Final[str] = f"{base_url.rstrip('/')}{scriptpath}/api.php"
        self.logger = logging.getLogger('smartquotes.wikilib')
        self._session = requests.Session()

    def _query(self, **params: str) -> Dict[str, Any]:
        """
        Send a query to the API and return the decoded answer.
        Timeouts are retried, all other problems raise a WikiError
        """
        params.update(action="query", format="json", formatversion="2")
        for attempt in range(1, self.CONNECT_RETRIES + 1):
            try:
                response = self._session.get(self.api_url, params=params, timeout=self.TIMEOUT)
                response.raise_for_status()
                self.logger.debug(f"Queried {params}: {response.status_code}")
                return response.json()
            except requests.exceptions.Timeout:
                self.logger.warning(f"Query to {self.api_url} timed out (attempt {attempt} of "
                                    f"{self.CONNECT_RETRIES})")
            except requests.exceptions.JSONDecodeError as e:
                raise WikiError(f"Invalid answer from {self.api_url}: {e}") from e
            except requests.exceptions.RequestException as e:
                raise WikiError(f"Couldn't query {self.api_url}: {e}") from e
        raise WikiError(f"Giving up on {self.api_url} after {self.CONNECT_RETRIES} timeouts")

    def get_page_source(self, title: str) -> str:
        """
        Return the wikitext of the current revision of a page.
        Raises WikiError if the page doesn't exist or we didn't get its content
        """
        answer = self._query(prop="revisions", rvprop="content", rvslots="main", titles=title)
        try:
            page = answer["query"]["pages"][0]
            if page.get("missing", False) or page.get("invalid", False):
                raise WikiError(f"Page {title} doesn't exist")
            return page["revisions"][0]["slots"]["main"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise WikiError(f"Couldn't retrieve source of page {title}") from e
