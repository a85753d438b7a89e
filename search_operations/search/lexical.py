"""
Lexical Search Operations

This module provides full-text search over the document store. Lexical
search is the baseline of hybrid search: it has no fallback, so its errors
propagate to the caller.
"""

import time
import logging

from search_hub_exceptions import SearchHubError
from ..core.models import SearchResponse, SearchResultItem
from ..core.search_ops_exceptions import LexicalSearchError
from ..config.validation import SearchQuery
from ..providers.base import DocumentStore

logger = logging.getLogger(__name__)


class LexicalSearch:
    """
    Full-text search returning a paginated ``SearchResponse``.

    Example:
        >>> lexical = LexicalSearch(store)
        >>> response = await lexical.search(SearchQuery(tenant_id="t1", q="invoices"))
    """

    def __init__(self, store: DocumentStore):
        """
        Initialize lexical search.

        Args:
            store: Document store providing full-text search
        """
        self._store = store

    async def search(self, query: SearchQuery) -> SearchResponse:
        """
        Run full-text search for one offset/limit window.

        Args:
            query: Validated lexical query

        Returns:
            SearchResponse with ``page = offset // limit + 1``

        Raises:
            LexicalSearchError: If the full-text backend fails
        """
        start_time = time.time()
        try:
            result = await self._store.lexical_search(
                query.tenant_id,
                query.q,
                query.limit,
                query.offset
            )
        except SearchHubError:
            raise
        except Exception as e:
            logger.error(f"Lexical search failed for tenant {query.tenant_id}: {str(e)}")
            raise LexicalSearchError(f"Lexical search failed: {str(e)}") from e

        items = [
            SearchResultItem(
                id=row.id,
                title=row.title,
                snippet=row.snippet or None,
                score=row.score,
                url=row.url,
            )
            for row in result.items
        ]

        logger.debug(
            f"Lexical search completed - tenant: {query.tenant_id}, "
            f"total: {result.total}, returned: {len(items)}, "
            f"took: {(time.time() - start_time) * 1000:.2f}ms"
        )

        return SearchResponse(
            total=result.total,
            items=items,
            page=query.offset // query.limit + 1,
            page_size=query.limit,
        )
