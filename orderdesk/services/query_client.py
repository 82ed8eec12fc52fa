"""
orderdesk/services/query_client.py

Purpose: Per-resource query cache

- One cache entry per resource key ("orders", "products", ...)
- Concurrent loads of the same key share a single in-flight fetch
- Invalidation marks a key stale and refetches that key only
- A forced fetch supersedes the one in flight; older results are discarded
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from orderdesk.core.logging import get_logger

logger = get_logger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
QueryListener = Callable[[str], None]


@dataclass
class Query:
    """Cache state for one resource key."""
    key: str
    fetcher: Fetcher
    data: Any = None
    error: Optional[Exception] = None
    is_stale: bool = True
    fetch_count: int = 0
    updated_at: Optional[datetime] = None
    generation: int = 0
    _in_flight: Optional["asyncio.Future[Any]"] = field(default=None, repr=False)

    @property
    def is_loading(self) -> bool:
        """True only for the first load, before any data is cached."""
        return self._in_flight is not None and self.data is None

    @property
    def is_fetching(self) -> bool:
        return self._in_flight is not None


class QueryClient:
    """
    Owns every cached collection.

    Failed fetches keep the previously cached data; the error is recorded on
    the query and re-raised to whoever awaited the fetch.
    """

    def __init__(self):
        self._queries: Dict[str, Query] = {}
        self._listeners: List[QueryListener] = []

    def register(self, key: str, fetcher: Fetcher) -> Query:
        query = self._queries.get(key)
        if query is None:
            query = Query(key=key, fetcher=fetcher)
            self._queries[key] = query
        else:
            query.fetcher = fetcher
        return query

    def get_query(self, key: str) -> Optional[Query]:
        return self._queries.get(key)

    def get_query_data(self, key: str) -> Any:
        query = self._queries.get(key)
        return query.data if query else None

    def set_query_data(self, key: str, data: Any) -> None:
        query = self._require(key)
        query.data = data
        query.is_stale = False
        query.updated_at = datetime.now(timezone.utc)
        self._emit(key)

    async def ensure_query_data(self, key: str) -> Any:
        """Returns cached data, fetching first when nothing fresh is cached."""
        query = self._require(key)
        if query.data is not None and not query.is_stale:
            return query.data
        return await self.fetch_query(key)

    async def fetch_query(self, key: str, force: bool = False) -> Any:
        """
        Fetches the key, joining the in-flight fetch when there is one.

        With force=True a new fetch always starts; the fetch it supersedes
        still resolves for its own callers but no longer writes the cache.

        Raises:
            Whatever the fetcher raised; cached data is left as it was
        """
        query = self._require(key)

        if query._in_flight is not None and not force:
            return await asyncio.shield(query._in_flight)

        loop = asyncio.get_running_loop()
        future = loop.create_future()
        query.generation += 1
        generation = query.generation
        query._in_flight = future

        try:
            data = await query.fetcher()
        except Exception as e:
            if generation == query.generation:
                query.error = e
            logger.warning(f"Fetching '{key}' failed: {e}", extra={"resource": key})
            future.set_exception(e)
            # Mark retrieved so an unjoined failure is not reported by asyncio
            future.exception()
            raise
        else:
            future.set_result(data)
        finally:
            if query._in_flight is future:
                query._in_flight = None
            if not future.done():
                future.cancel()

        if generation != query.generation:
            logger.debug(f"Discarding superseded fetch of '{key}'", extra={"resource": key})
            return data

        query.data = data
        query.error = None
        query.is_stale = False
        query.fetch_count += 1
        query.updated_at = datetime.now(timezone.utc)
        logger.debug(f"Fetched '{key}' ({query.fetch_count})", extra={"resource": key})

        self._emit(key)
        return data

    async def invalidate_queries(self, key: str) -> None:
        """
        Marks one key stale and refetches it. A fetch already in flight
        started before the change, so a new one always replaces it.

        A failed refetch is logged and swallowed; the stale data stays cached.
        """
        query = self._queries.get(key)
        if query is None:
            return

        query.is_stale = True
        try:
            await self.fetch_query(key, force=True)
        except Exception as e:
            logger.warning(f"Refetch after invalidating '{key}' failed: {e}", extra={"resource": key})

    def clear(self) -> None:
        """Drops all cached data (used on logout)."""
        for query in self._queries.values():
            query.data = None
            query.error = None
            query.is_stale = True
            query.generation += 1
            query._in_flight = None
        logger.debug("Query cache cleared")

    def subscribe(self, listener: QueryListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _require(self, key: str) -> Query:
        query = self._queries.get(key)
        if query is None:
            raise KeyError(f"No query registered for '{key}'")
        return query

    def _emit(self, key: str) -> None:
        for listener in list(self._listeners):
            listener(key)
