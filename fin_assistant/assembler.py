"""Turns a classifier reply into the FinResponse the presentation layer renders."""

import logging
import time
from typing import Dict, List, Optional

from .catalog import AbstractCatalog
from .classifier import ClassifierReply
from .config import FALLBACK_RESULTS
from .models import (
    ConversationMode,
    Decision,
    FinResponse,
    FollowUp,
    Intent,
    IntentType,
    Latency,
    LLMResponse,
    Product,
    ProductSearch,
    Reasoning,
    RecommendedProduct,
    RendererType,
    SearchOptions,
    SessionStateUpdate,
    ShoppingContext,
    SupportContext,
)
from .recommender import ProductSearchService

logger = logging.getLogger("fin.assembler")

# Upstream intent tags -> IntentType. Anything else degrades to DEFAULT_INTENT.
INTENT_MAP: Dict[str, IntentType] = {
    "shopping": IntentType.SHOPPING_DISCOVERY,
    "shopping_discovery": IntentType.SHOPPING_DISCOVERY,
    "product_detail": IntentType.SHOPPING_DISCOVERY,
    "add_to_cart": IntentType.SHOPPING_DISCOVERY,
    "support": IntentType.SUPPORT,
    "clarify": IntentType.AMBIGUOUS,
    "ambiguous": IntentType.AMBIGUOUS,
    "refine": IntentType.REFINEMENT,
    "refinement": IntentType.REFINEMENT,
}
DEFAULT_INTENT = IntentType.SHOPPING_DISCOVERY

# Confidence reported for each classifier source.
SOURCE_CONFIDENCE = {"llm": 0.95, "local": 0.6}


def normalize_intent(raw: str) -> IntentType:
    return INTENT_MAP.get((raw or "").strip().lower(), DEFAULT_INTENT)


def normalize_renderer(raw: str, product_count: int) -> RendererType:
    """Text-only without products; unknown hints pick by product count."""
    if product_count == 0:
        return RendererType.TEXT_ONLY
    try:
        renderer = RendererType((raw or "").strip().lower())
    except ValueError:
        renderer = None
    if renderer is None or renderer is RendererType.TEXT_ONLY:
        return RendererType.SINGLE_CARD if product_count == 1 else RendererType.CAROUSEL
    return renderer


def normalize_mode(raw: str) -> ConversationMode:
    try:
        return ConversationMode((raw or "").strip().lower())
    except ValueError:
        return ConversationMode.SHOPPING


def build_session_update(
    reply: ClassifierReply,
    intent: IntentType,
    message: str,
    products: List[RecommendedProduct],
) -> Optional[SessionStateUpdate]:
    if reply.session_update is None:
        return None
    mode = normalize_mode(reply.session_update.mode)
    if intent is IntentType.SUPPORT:
        return SessionStateUpdate(
            conversation_mode=mode,
            support_context=SupportContext(issue_type="general", resolved=False),
        )
    subcategory = ""
    if reply.product_search and reply.product_search.subcategory:
        subcategory = reply.product_search.subcategory
    elif products:
        subcategory = products[0].product.subcategory
    constraints = (reply.session_update.context,) if reply.session_update.context else ()
    return SessionStateUpdate(
        conversation_mode=mode,
        shopping_context=ShoppingContext(subcategory=subcategory, query=message, constraints=constraints),
    )


def attach_reasons(products: List[Product], card_reasons: Dict[str, str]) -> List[RecommendedProduct]:
    """Pair products with their card reason; catalog records are not modified."""
    return [RecommendedProduct(product=p, ai_reasoning=card_reasons.get(p.id) or None) for p in products]


def _fallback_text(intent: IntentType, has_products: bool) -> str:
    if has_products:
        return "Here are some options that might work for you."
    if intent is IntentType.SUPPORT:
        return "I can help with that! Could you share a few more details?"
    if intent is IntentType.AMBIGUOUS:
        return "Could you tell me a bit more about what you're looking for?"
    return "How can I help you today?"


async def assemble_response(
    reply: ClassifierReply,
    message: str,
    catalog: AbstractCatalog,
    search: ProductSearchService,
    started_at: float,
    classified_at: float,
    source: str = "llm",
) -> FinResponse:
    """Resolve products, normalize the reply and measure latency.

    started_at / classified_at are time.perf_counter() readings taken before
    classification and right after it.
    """
    intent = normalize_intent(reply.intent)
    products: List[RecommendedProduct] = []
    recovered = False

    if reply.show_products and reply.product_ids:
        resolved = await catalog.get_many(reply.product_ids)
        products = attach_reasons(resolved, reply.card_reasons)

    search_query = message
    search_subcategory: Optional[str] = None
    if reply.product_search:
        search_query = reply.product_search.query or message
        search_subcategory = reply.product_search.subcategory

    # Referenced ids missing from the catalog: one local keyword search before giving up.
    if reply.show_products and not products:
        logger.warning("No classifier product ids resolved, trying local search for %r", search_query)
        result = await search.search(
            SearchOptions(
                query=search_query,
                subcategory=search_subcategory,
                max_results=FALLBACK_RESULTS,
                min_price=reply.product_search.min_price if reply.product_search else None,
                max_price=reply.product_search.max_price if reply.product_search else None,
            )
        )
        products = attach_reasons(result.products, reply.card_reasons)
        recovered = bool(products)

    response_text = reply.response_text.strip()
    if reply.show_products and not products:
        response_text = (
            f"I couldn't find any products matching \"{search_query}\". "
            "Could you tell me a bit more about what you're looking for?"
        )
    elif not response_text:
        response_text = _fallback_text(intent, bool(products))

    signals = [source]
    if reply.intent:
        signals.append(reply.intent)
    if recovered:
        signals.append("local_search_recovery")

    if recovered:
        selection = f"Recovered {len(products)} products with a local keyword search"
    elif products:
        selection = f"Selected {len(products)} products from the catalog"
    else:
        selection = "No products shown"

    llm_response = LLMResponse(
        intent=Intent(
            primary=intent,
            confidence=SOURCE_CONFIDENCE.get(source, 0.5),
            signals=signals,
        ),
        decision=Decision(
            show_products=bool(products),
            renderer=normalize_renderer(reply.renderer, len(products)),
            item_count=len(products),
            needs_clarification=intent is IntentType.AMBIGUOUS,
        ),
        reasoning=Reasoning(
            intent_explanation=f"{source} classified the message as {reply.intent!r}",
            selection_reasoning=selection,
        ),
        product_search=(
            ProductSearch(query=search_query, subcategory=search_subcategory) if products else None
        ),
        session_state_update=build_session_update(reply, intent, message, products),
        suggested_follow_ups=[
            FollowUp(label=f.label, query=f.query)
            for f in reply.follow_ups
            if f.label.strip() and f.query.strip()
        ],
    )

    finished_at = time.perf_counter()
    total_ms = max(finished_at - started_at, 0.0) * 1000
    classification_ms = min(max(classified_at - started_at, 0.0) * 1000, total_ms)
    return FinResponse(
        llm_response=llm_response,
        products=products,
        response_text=response_text,
        latency=Latency(
            total_ms=total_ms,
            classification_ms=classification_ms,
            search_ms=total_ms - classification_ms,
        ),
    )
