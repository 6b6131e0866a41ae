"""Product search over a catalog store.

Provides:
- filter_products: the ordered filter pipeline (type -> subcategory -> modifiers -> price -> cap)
- ProductSearchService: loads the catalog, times the search, reports cache state
"""

import logging
import time
from collections import Counter
from typing import List, Sequence, Tuple

from .catalog import AbstractCatalog
from .models import CatalogStats, Product, SearchOptions, SearchResult
from .utils import extract_query_terms, searchable_text

logger = logging.getLogger("fin.search")


def filter_products(catalog: Sequence[Product], options: SearchOptions) -> Tuple[List[Product], int]:
    """Apply the search filters in order and return (truncated products, total matches).

    Each stage works on the previous stage's output:
    1. product type from the query is a hard filter
    2. explicit subcategory only narrows when something survives
    3. modifiers only narrow when something matches
    4. a query with no product type and no modifier hit returns nothing
    5. price bounds (inclusive)
    6-7. count, then truncate
    """
    results = list(catalog)
    terms = extract_query_terms(options.query) if options.query else None

    if terms and terms.required_subcategories is not None:
        required = set(terms.required_subcategories)
        results = [p for p in results if p.subcategory in required]

    if options.subcategory:
        narrowed = [p for p in results if p.subcategory == options.subcategory]
        if narrowed:
            results = narrowed

    modifier_hit = False
    if terms and terms.modifiers:
        matched = [
            p for p in results
            if any(m in searchable_text(p) for m in terms.modifiers)
        ]
        if matched:
            results = matched
            modifier_hit = True

    # Unrecognized query: never fall through to the whole catalog.
    if terms and terms.required_subcategories is None and not modifier_hit:
        return [], 0

    if options.min_price is not None:
        results = [p for p in results if p.price >= options.min_price]
    if options.max_price is not None:
        results = [p for p in results if p.price <= options.max_price]

    total_matches = len(results)
    if options.max_results is not None:
        results = results[: max(options.max_results, 0)]
    return results, total_matches


class ProductSearchService:
    """Keyword search, subcategory listing and stats over one catalog store."""

    def __init__(self, catalog: AbstractCatalog) -> None:
        self.catalog = catalog

    async def search(self, options: SearchOptions) -> SearchResult:
        start = time.perf_counter()
        from_cache = self.catalog.is_ready
        products = await self.catalog.load()
        matches, total = filter_products(products, options)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "search query=%r subcategory=%r -> %d/%d in %.1fms",
            options.query, options.subcategory, len(matches), total, elapsed_ms,
        )
        return SearchResult(
            products=matches,
            total_matches=total,
            search_time_ms=elapsed_ms,
            from_cache=from_cache,
        )

    async def subcategories(self) -> List[str]:
        products = await self.catalog.load()
        return sorted({p.subcategory for p in products})

    async def catalog_stats(self) -> CatalogStats:
        products = await self.catalog.load()
        counts = Counter(p.subcategory for p in products)
        prices = [p.price for p in products]
        price_range = (min(prices), max(prices)) if prices else (0.0, 0.0)
        return CatalogStats(
            total_products=len(products),
            subcategories=dict(counts),
            price_range=price_range,
        )
