"""
In-process cache of rendered dashboard pages.

Pages are cached under their request path, including the query string
(e.g. "/dashboard/invoices?query=acme&page=2"). After any write that changes
what a page shows, the writer calls revalidate_path() so the next request
recomputes the page from the database.

The cache holds at most `max_entries` pages; the least recently used page is
dropped first. It is only touched from the event loop, so no locking is needed.
"""

import logging
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar
from urllib.parse import urlencode

from invoice_dashboard.utils.constants import PAGE_CACHE_MAX_ENTRIES

logger = logging.getLogger(__name__)

T = TypeVar("T")


def page_key(path: str, query_string: str = "") -> str:
    """Build the cache key for a path and its (already encoded) query string."""
    return f"{path}?{query_string}" if query_string else path


def list_page_key(path: str, query: str, page: int) -> str:
    """
    Cache key for a list page built from its validated parameters only.

    Unknown query parameters and their order never produce a distinct key.
    """
    return page_key(path, urlencode({"query": query, "page": page}))


def _path_of(key: str) -> str:
    return key.partition("?")[0]


class PageCache:
    """Bounded LRU cache of computed page payloads keyed by path."""

    def __init__(self, max_entries: int = PAGE_CACHE_MAX_ENTRIES) -> None:
        self._pages: "OrderedDict[str, Any]" = OrderedDict()
        self._max_entries = max_entries
        # Bumped by revalidate_path(); a load that started under an older
        # generation is returned to its caller but not stored.
        self._generations: Dict[str, int] = {}

    def get(self, key: str) -> Optional[Any]:
        if key not in self._pages:
            return None
        self._pages.move_to_end(key)
        return self._pages[key]

    def set(self, key: str, value: Any) -> None:
        self._pages[key] = value
        self._pages.move_to_end(key)
        while len(self._pages) > self._max_entries:
            evicted, _ = self._pages.popitem(last=False)
            logger.debug(f"Page cache full; dropped {evicted}")

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        """
        Return the cached page for `key`, or await `loader` and cache its result.

        A loader that raises leaves the cache untouched. If the path is
        revalidated while the loader is running, the loaded page may already
        be stale: it is returned but not cached.
        """
        if key in self._pages:
            logger.debug(f"Page cache hit: {key}")
            return self.get(key)

        logger.debug(f"Page cache miss: {key}")
        path = _path_of(key)
        generation = self._generations.get(path, 0)

        value = await loader()

        if self._generations.get(path, 0) == generation:
            self.set(key, value)
        else:
            logger.debug(f"Discarded page loaded across a revalidation: {key}")
        return value

    def revalidate_path(self, path: str) -> int:
        """
        Mark the page at `path` stale.

        Evicts the entry for `path` itself and every entry for the same path
        with a query string. Other paths (including sub-paths) are kept.
        Loads of `path` still in flight will not be cached.

        Returns:
            Number of evicted entries (0 if nothing was cached).
        """
        self._generations[path] = self._generations.get(path, 0) + 1

        stale = [key for key in self._pages if _path_of(key) == path]
        for key in stale:
            del self._pages[key]

        logger.info(f"Revalidated {path} ({len(stale)} cached page(s) evicted)")
        return len(stale)

    def clear(self) -> None:
        self._pages.clear()

    def __len__(self) -> int:
        return len(self._pages)


page_cache = PageCache()


def revalidate_path(path: str) -> int:
    """Mark `path` stale in the application page cache."""
    return page_cache.revalidate_path(path)
