"""Utility functions for Fin: query keyword matching and render-contract serialization."""
import string
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from .models import FinResponse, Product, QueryTerms, RecommendedProduct, SessionStateUpdate

# Plain-English product words -> catalog subcategories. Keys are matched as whole tokens.
PRODUCT_TYPE_KEYWORDS: Dict[str, List[str]] = {
    # Tops & tees
    "tee": ["t-shirts"],
    "tees": ["t-shirts"],
    "t-shirt": ["t-shirts"],
    "t-shirts": ["t-shirts"],
    "tshirt": ["t-shirts"],
    "tshirts": ["t-shirts"],
    "top": ["tops", "t-shirts"],
    "tops": ["tops", "t-shirts"],
    "tank": ["tops"],
    "tanks": ["tops"],
    "vest": ["tops"],
    "shirt": ["shirts"],
    "shirts": ["shirts"],
    "blouse": ["blouses"],
    "blouses": ["blouses"],
    # Outerwear & knits
    "jacket": ["jackets"],
    "jackets": ["jackets"],
    "coat": ["coats"],
    "coats": ["coats"],
    "blazer": ["blazers"],
    "blazers": ["blazers"],
    "jumper": ["jumpers"],
    "jumpers": ["jumpers"],
    "sweater": ["jumpers"],
    "sweaters": ["jumpers"],
    "cardigan": ["cardigans"],
    "cardigans": ["cardigans"],
    "hoodie": ["hoodies"],
    "hoodies": ["hoodies"],
    "sweatshirt": ["sweatshirts"],
    "sweatshirts": ["sweatshirts"],
    # Dresses & bottoms
    "dress": ["dresses"],
    "dresses": ["dresses"],
    "skirt": ["skirts"],
    "skirts": ["skirts"],
    "jeans": ["jeans"],
    "trousers": ["trousers"],
    "trouser": ["trousers"],
    "pants": ["trousers"],
    "chinos": ["trousers"],
    "joggers": ["trousers"],
    "shorts": ["shorts"],
    # Footwear
    "trainer": ["trainers"],
    "trainers": ["trainers"],
    "sneaker": ["trainers"],
    "sneakers": ["trainers"],
    "shoe": ["trainers", "boots", "heels", "sandals", "loafers", "flats"],
    "shoes": ["trainers", "boots", "heels", "sandals", "loafers", "flats"],
    "footwear": ["trainers", "boots", "heels", "sandals", "loafers", "flats"],
    "boot": ["boots"],
    "boots": ["boots"],
    "heels": ["heels"],
    "sandals": ["sandals"],
    "loafers": ["loafers"],
    "flats": ["flats"],
    # Accessories
    "bag": ["bags", "backpacks"],
    "bags": ["bags", "backpacks"],
    "handbag": ["bags"],
    "backpack": ["backpacks"],
    "backpacks": ["backpacks"],
    "scarf": ["scarves"],
    "scarves": ["scarves"],
    "hat": ["hats"],
    "hats": ["hats"],
    "cap": ["hats"],
    "beanie": ["hats"],
    "belt": ["belts"],
    "belts": ["belts"],
    "sunglasses": ["sunglasses"],
    "jewellery": ["jewellery"],
    "jewelry": ["jewellery"],
    "necklace": ["jewellery"],
    "bracelet": ["jewellery"],
    # Home
    "sofa": ["sofas"],
    "sofas": ["sofas"],
    "couch": ["sofas"],
    "couches": ["sofas"],
    "settee": ["sofas"],
}

_TOKEN_PUNCTUATION = string.punctuation + "‘’“”"


def tokenize(text: str) -> List[str]:
    """Lower-case, split on whitespace, strip edge punctuation, drop tokens of 2 chars or fewer."""
    tokens = (t.strip(_TOKEN_PUNCTUATION) for t in text.lower().split())
    return [t for t in tokens if len(t) > 2]


def extract_query_terms(query: str) -> QueryTerms:
    """Split a query into the first recognized product type and the remaining modifiers."""
    tokens = tokenize(query)
    required: Optional[List[str]] = None
    for token in tokens:
        if token in PRODUCT_TYPE_KEYWORDS:
            required = list(PRODUCT_TYPE_KEYWORDS[token])
            break
    modifiers = [t for t in tokens if t not in PRODUCT_TYPE_KEYWORDS]
    return QueryTerms(required_subcategories=required, modifiers=modifiers)


def searchable_text(p: Product) -> str:
    """Text that query modifiers are matched against."""
    colors = " ".join(p.variant_options("color"))
    return f"{p.name} {p.description} {p.brand} {colors}".lower()


def serialize_product(item: RecommendedProduct) -> Dict[str, Any]:
    """Convert a recommended product to the camelCase dict the UI renders."""
    p = item.product
    data: Dict[str, Any] = {
        "id": p.id,
        "name": p.name,
        "price": p.price,
        "currency": p.currency,
        "image": p.image,
        "rating": p.rating,
        "reviewCount": p.review_count,
        "description": p.description,
        "category": p.category,
        "subcategory": p.subcategory,
        "brand": p.brand,
        "inStock": p.in_stock,
        "variants": [{"type": v.type, "options": list(v.options)} for v in p.variants],
        "tags": list(p.tags),
        "attributes": dict(p.attributes),
    }
    if p.original_price is not None:
        data["originalPrice"] = p.original_price
    if p.images:
        data["images"] = list(p.images)
    if item.ai_reasoning:
        data["aiReasoning"] = item.ai_reasoning
    return data


def serialize_session_update(update: Optional[SessionStateUpdate]) -> Optional[Dict[str, Any]]:
    if update is None:
        return None
    support = update.support_context
    shopping = update.shopping_context
    return {
        "conversationMode": update.conversation_mode.value,
        "supportContext": (
            {"issueType": support.issue_type, "resolved": support.resolved} if support else None
        ),
        "shoppingContext": (
            {
                "subcategory": shopping.subcategory,
                "query": shopping.query,
                "constraints": list(shopping.constraints),
            }
            if shopping
            else None
        ),
    }


def serialize_response(response: FinResponse) -> Dict[str, Any]:
    """Render contract consumed by the presentation layer."""
    return {
        "products": [serialize_product(item) for item in response.products],
        "intent": response.intent.value,
        "renderer": response.renderer.value,
        "followUps": [asdict(f) for f in response.follow_ups],
        "responseText": response.response_text,
        "latency": {
            "total": response.latency.total_ms,
            "llm": response.latency.classification_ms,
            "search": response.latency.search_ms,
        },
        "sessionStateUpdate": serialize_session_update(response.session_state_update),
    }
