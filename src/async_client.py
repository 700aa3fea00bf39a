"""Async HTTP client for the Google Books catalog search."""
import httpx
from typing import List, Optional
import logging

from src.client import API_MAX_RESULTS, DEFAULT_PAGE_LIMIT, build_search_params
from src.errors import SearchFailure
from src.models import CatalogEntry
from src.parse import parse_search_response

logger = logging.getLogger(__name__)


class AsyncCatalogSearchClient:
    """Async counterpart of CatalogSearchClient."""

    BASE_URL = "https://www.googleapis.com/books/v1/volumes"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: int = 10,
        page_limit: int = DEFAULT_PAGE_LIMIT,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            api_key: Optional API key
            timeout: Request timeout
            page_limit: Maximum number of entries returned per search
            transport: Optional httpx transport (used by tests)
        """
        self.api_key = api_key
        self.timeout = timeout
        self.page_limit = max(1, min(page_limit, API_MAX_RESULTS))

        # Create async HTTP client
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def search(self, query: str) -> List[CatalogEntry]:
        """
        Search the catalog asynchronously.

        Args:
            query: Free-text search string

        Returns:
            Up to ``page_limit`` catalog entries; empty for a blank query

        Raises:
            SearchFailure: on transport errors, bad statuses or bad JSON
        """
        query = (query or "").strip()
        if not query:
            return []

        params = build_search_params(query, self.page_limit, self.api_key)

        try:
            logger.info(f"Async search: {query}")
            response = await self.client.get(self.BASE_URL, params=params)
        except httpx.HTTPError as e:
            logger.error(f"Async search failed: {e}")
            raise SearchFailure(f"Search request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Status {response.status_code} for query: {query}")
            raise SearchFailure(f"Search returned status {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise SearchFailure("Search returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise SearchFailure("Search returned an unexpected payload")

        return parse_search_response(payload, limit=self.page_limit)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
