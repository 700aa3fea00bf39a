"""HTTP client for the Google Books catalog search."""
import requests
from typing import Optional, Dict, Any, List
import logging

from src.errors import SearchFailure
from src.models import CatalogEntry
from src.parse import parse_search_response

logger = logging.getLogger(__name__)

# Google Books caps maxResults at 40
API_MAX_RESULTS = 40
DEFAULT_PAGE_LIMIT = 20


def build_search_params(query: str, page_limit: int, api_key: Optional[str] = None) -> Dict[str, Any]:
    """Query parameters for a single first-page volume search."""
    params = {
        "q": query,
        "maxResults": max(1, min(page_limit, API_MAX_RESULTS))
    }
    if api_key:
        params["key"] = api_key
    return params


class CatalogSearchClient:
    """Client for Google Books volume search with a fixed page limit."""

    BASE_URL = "https://www.googleapis.com/books/v1/volumes"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: int = 10,
        page_limit: int = DEFAULT_PAGE_LIMIT
    ):
        """
        Initialize catalog search client.

        Args:
            api_key: Optional API key (increases rate limits)
            timeout: Request timeout in seconds
            page_limit: Maximum number of entries returned per search
        """
        self.api_key = api_key
        self.timeout = timeout
        self.page_limit = max(1, min(page_limit, API_MAX_RESULTS))

        # Create session for connection pooling
        self.session = requests.Session()

    def search(self, query: str) -> List[CatalogEntry]:
        """
        Search the catalog.

        Args:
            query: Free-text search string

        Returns:
            Up to ``page_limit`` catalog entries; empty for a blank query

        Raises:
            SearchFailure: on transport errors, bad statuses or bad JSON
        """
        query = (query or "").strip()
        if not query:
            logger.debug("Blank search query, skipping request")
            return []

        params = build_search_params(query, self.page_limit, self.api_key)

        try:
            logger.info(f"Searching catalog: {query}")
            response = self.session.get(self.BASE_URL, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Search request failed: {e}")
            raise SearchFailure(f"Search request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Search returned status {response.status_code}: {response.text}")
            raise SearchFailure(f"Search returned status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Search returned invalid JSON: {e}")
            raise SearchFailure("Search returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise SearchFailure("Search returned an unexpected payload")

        entries = parse_search_response(payload, limit=self.page_limit)
        logger.info(f"Found {len(entries)} catalog entries for: {query}")
        return entries

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
