"""Catalog stores.

Provides:
- AbstractCatalog: interface the search service and agent depend on
- CuratedCatalog: the in-process demo catalog, ready from construction
- FeedCatalog: fetches and parses the remote CSV feed once, with single-flight loading
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Dict, List, Optional, Sequence

import httpx

from .config import CATALOG_FEED_URL, CATALOG_SOURCE, FEED_MAX_PRICE, FEED_TIMEOUT_SEC
from .demo_catalog import get_demo_catalog
from .errors import CatalogUnavailableError
from .feed import parse_feed
from .models import Product

logger = logging.getLogger("fin.catalog")


class CatalogState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class AbstractCatalog:
    """Interface for catalog stores."""

    @property
    def state(self) -> CatalogState:
        raise NotImplementedError

    @property
    def is_ready(self) -> bool:
        return self.state is CatalogState.READY

    async def load(self) -> List[Product]:
        #Return the full product list, materializing it on first use
        raise NotImplementedError

    def reset(self) -> None:
        #Forget any materialized products
        raise NotImplementedError

    async def get_many(self, product_ids: Sequence[str]) -> List[Product]:
        """Resolve ids in order; unknown and repeated ids are dropped."""
        by_id: Dict[str, Product] = {p.id: p for p in await self.load()}
        resolved: List[Product] = []
        seen: set[str] = set()
        for pid in product_ids:
            product = by_id.get(pid)
            if product is None or pid in seen:
                continue
            seen.add(pid)
            resolved.append(product)
        return resolved


class CuratedCatalog(AbstractCatalog):
    """Hand-authored catalog; always ready."""

    def __init__(self, products: Optional[Sequence[Product]] = None) -> None:
        self._products: List[Product] = list(products) if products is not None else get_demo_catalog()

    @property
    def state(self) -> CatalogState:
        return CatalogState.READY

    async def load(self) -> List[Product]:
        return list(self._products)

    def reset(self) -> None:
        # Nothing to refetch; the fixture list is the catalog.
        pass


class FeedCatalog(AbstractCatalog):
    """Remote CSV feed, fetched at most once until reset().

    Concurrent load() calls while a fetch is in flight all await the same task.
    A failed fetch raises CatalogUnavailableError to every waiter and leaves the
    store uninitialized.
    """

    def __init__(
        self,
        url: str = CATALOG_FEED_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = FEED_TIMEOUT_SEC,
        max_price: float = FEED_MAX_PRICE,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.max_price = max_price
        self._client = client
        self._products: Optional[List[Product]] = None
        self._pending: Optional[asyncio.Task] = None

    @property
    def state(self) -> CatalogState:
        if self._products is not None:
            return CatalogState.READY
        if self._pending is not None:
            return CatalogState.LOADING
        return CatalogState.UNINITIALIZED

    async def load(self) -> List[Product]:
        if self._products is not None:
            return self._products
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._fetch_and_parse())
        pending = self._pending
        try:
            return await asyncio.shield(pending)
        except asyncio.CancelledError:
            # The shared fetch was cancelled by reset(), not this caller.
            if pending.cancelled():
                raise CatalogUnavailableError("Catalog load was reset before it finished") from None
            raise
        finally:
            if pending.done() and self._pending is pending:
                self._pending = None

    def reset(self) -> None:
        self._products = None
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _fetch_and_parse(self) -> List[Product]:
        logger.info("Fetching catalog feed from %s", self.url)
        start = time.perf_counter()
        text = await self._fetch_text()
        products = await asyncio.to_thread(parse_feed, text, self.max_price)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("Loaded %d products in %.0fms", len(products), elapsed_ms)
        self._products = products
        return products

    async def _fetch_text(self) -> str:
        try:
            if self._client is not None:
                resp = await self._client.get(self.url, timeout=self.timeout, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    resp = await client.get(self.url)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Catalog feed fetch failed: %s", e)
            raise CatalogUnavailableError(f"Catalog feed unavailable: {e}") from e
        return resp.text


def build_catalog(source: str = CATALOG_SOURCE) -> AbstractCatalog:
    """Catalog store for the configured source ("curated" or "feed")."""
    if source == "feed":
        return FeedCatalog()
    if source != "curated":
        logger.warning("Unknown catalog source %r, using curated catalog", source)
    return CuratedCatalog()
