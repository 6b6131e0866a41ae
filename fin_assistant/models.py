# Data models for catalog, search, session and turn results.
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


CATEGORIES = (
    "lighting", "furniture", "clothing", "electronics", "food", "beauty",
    "sports", "kids", "pets", "kitchen", "garden", "books",
)

VARIANT_TYPES = ("color", "size", "material", "flavor", "scent", "format")

PRODUCT_TAGS = (
    "sale", "new", "bestseller", "limited", "eco-friendly", "organic",
    "vegan", "gluten-free", "handmade", "premium", "educational",
)


@dataclass(frozen=True)
class ProductVariant:
    type: str  # one of VARIANT_TYPES
    options: Tuple[str, ...]

    def __post_init__(self) -> None:
        if self.type not in VARIANT_TYPES:
            raise ValueError(f"Unknown variant type: {self.type!r}")
        if not self.options:
            raise ValueError(f"{self.type} variant has no options")


@dataclass(frozen=True)
class Product:
    """Canonical catalog record. Never mutated after the catalog is loaded."""

    id: str
    name: str
    price: float
    currency: str
    image: str
    rating: float  # 0-5
    review_count: int
    description: str
    category: str  # one of CATEGORIES
    subcategory: str
    brand: str
    in_stock: bool = True
    original_price: Optional[float] = None  # set for sale items, > price
    images: Tuple[str, ...] = ()
    variants: Tuple[ProductVariant, ...] = ()
    tags: Tuple[str, ...] = ()
    attributes: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if self.price <= 0:
            raise ValueError(f"Product {self.id}: price must be positive, got {self.price}")
        if self.original_price is not None and self.original_price <= self.price:
            raise ValueError(f"Product {self.id}: original_price must exceed price")
        if not 0 <= self.rating <= 5:
            raise ValueError(f"Product {self.id}: rating {self.rating} outside 0-5")
        if self.category not in CATEGORIES:
            raise ValueError(f"Product {self.id}: unknown category {self.category!r}")
        unknown_tags = [t for t in self.tags if t not in PRODUCT_TAGS]
        if unknown_tags:
            raise ValueError(f"Product {self.id}: unknown tags {unknown_tags}")
        if any(not url for url in self.images):
            raise ValueError(f"Product {self.id}: blank image url")
        # Frozen means read-only all the way down.
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def variant_options(self, variant_type: str) -> Tuple[str, ...]:
        options: Tuple[str, ...] = ()
        for variant in self.variants:
            if variant.type == variant_type:
                options += tuple(variant.options)
        return options


@dataclass(frozen=True)
class RecommendedProduct:
    """A catalog product paired with the per-turn rationale shown on its card."""

    product: Product
    ai_reasoning: Optional[str] = None


@dataclass
class SearchOptions:
    """Per-request search parameters."""

    query: Optional[str] = None
    subcategory: Optional[str] = None  # advisory, dropped when it would empty the results
    max_results: Optional[int] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None


@dataclass
class SearchResult:
    products: List[Product]
    total_matches: int  # matches before truncation
    search_time_ms: float
    from_cache: bool  # catalog was already materialized before the call


@dataclass
class QueryTerms:
    """Product-type and modifier tokens extracted from a free-text query."""

    required_subcategories: Optional[List[str]]
    modifiers: List[str]


@dataclass
class CatalogStats:
    total_products: int
    subcategories: Dict[str, int]
    price_range: Tuple[float, float]


# Session state


class ConversationMode(str, Enum):
    NEUTRAL = "neutral"
    SHOPPING = "shopping"
    SUPPORT = "support"


@dataclass(frozen=True)
class SupportContext:
    issue_type: str
    resolved: bool = False


@dataclass(frozen=True)
class ShoppingContext:
    subcategory: str
    query: str
    constraints: Tuple[str, ...] = ()


@dataclass(frozen=True)
class SessionStateUpdate:
    """Replacement values for mode and contexts, produced once per turn."""

    conversation_mode: ConversationMode
    support_context: Optional[SupportContext] = None
    shopping_context: Optional[ShoppingContext] = None


@dataclass(frozen=True)
class SessionState:
    conversation_mode: ConversationMode = ConversationMode.NEUTRAL
    support_context: Optional[SupportContext] = None
    shopping_context: Optional[ShoppingContext] = None
    products_shown_this_session: Tuple[str, ...] = ()  # history log, duplicates kept


# Per-turn classification result


class IntentType(str, Enum):
    SHOPPING_DISCOVERY = "shopping_discovery"
    SUPPORT = "support"
    AMBIGUOUS = "ambiguous"
    REFINEMENT = "refinement"


class RendererType(str, Enum):
    TEXT_ONLY = "text_only"
    SINGLE_CARD = "single_card"
    CAROUSEL = "carousel"
    LIST = "list"
    GRID = "grid"


@dataclass
class Intent:
    primary: IntentType
    confidence: float  # 0-1
    signals: List[str] = field(default_factory=list)


@dataclass
class Decision:
    show_products: bool
    renderer: RendererType
    item_count: int
    needs_clarification: bool


@dataclass
class ProductSearch:
    query: str
    subcategory: Optional[str] = None


@dataclass
class Reasoning:
    intent_explanation: str
    selection_reasoning: str


@dataclass
class FollowUp:
    """Quick-reply suggestion: button label plus the message it sends."""

    label: str
    query: str


@dataclass
class LLMResponse:
    """Structured classification output for one turn."""

    intent: Intent
    decision: Decision
    reasoning: Reasoning
    product_search: Optional[ProductSearch] = None
    session_state_update: Optional[SessionStateUpdate] = None
    suggested_follow_ups: List[FollowUp] = field(default_factory=list)


@dataclass
class Latency:
    total_ms: float
    classification_ms: float
    search_ms: float  # total_ms - classification_ms


@dataclass
class FinResponse:
    """Everything the presentation layer needs to render one agent turn."""

    llm_response: LLMResponse
    products: List[RecommendedProduct]
    response_text: str
    latency: Latency

    @property
    def intent(self) -> IntentType:
        return self.llm_response.intent.primary

    @property
    def renderer(self) -> RendererType:
        return self.llm_response.decision.renderer

    @property
    def follow_ups(self) -> List[FollowUp]:
        return self.llm_response.suggested_follow_ups

    @property
    def session_state_update(self) -> Optional[SessionStateUpdate]:
        return self.llm_response.session_state_update

    @property
    def product_ids(self) -> List[str]:
        return [item.product.id for item in self.products]
