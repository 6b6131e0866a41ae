"""Turn classification for Fin.

A classifier reads the user message (plus history and session context) and
returns a ClassifierReply: intent, reply text, which catalog products to show,
how to render them, follow-ups, per-card reasons and a session update.

Two implementations:
1. OpenAIClassifier asks a chat-completion model for the reply as a JSON object
2. LocalClassifier is a deterministic keyword heuristic used when no API key is
   configured or the remote call fails
"""

import json
import logging
import re
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError, field_validator

from .catalog import AbstractCatalog
from .config import (
    CATALOG_SUMMARY_LIMIT,
    FALLBACK_RESULTS,
    LLM_TEMPERATURE,
    LLM_TIMEOUT_SEC,
    MODEL_NAME,
    OPENAI_API_KEY,
)
from .errors import ClassificationError
from .models import Product, SearchOptions
from .recommender import ProductSearchService

logger = logging.getLogger("fin.classifier")


# Wire contract


class FollowUpPayload(BaseModel):
    label: str
    query: str


class SessionUpdatePayload(BaseModel):
    mode: str = "shopping"
    context: str = ""


class ProductSearchPayload(BaseModel):
    query: str = ""
    subcategory: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None


class ClassifierReply(BaseModel):
    """JSON object the classifier model must return."""

    intent: str
    response_text: str
    show_products: bool
    product_ids: List[str] = Field(default_factory=list)
    renderer: str = "carousel"
    follow_ups: List[FollowUpPayload] = Field(default_factory=list)
    card_reasons: Dict[str, str] = Field(default_factory=dict)
    session_update: Optional[SessionUpdatePayload] = None
    product_search: Optional[ProductSearchPayload] = None

    @field_validator("product_ids", "follow_ups", mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("card_reasons", mode="before")
    @classmethod
    def _null_dict(cls, value: Any) -> Any:
        return {} if value is None else value


SYSTEM_PROMPT = """You are Fin, a smart shopping assistant that also handles customer support.

## Catalog

{catalog}

## Output JSON

{{
  "intent": "shopping" | "support" | "clarify" | "product_detail" | "add_to_cart" | "refine",
  "response_text": "2-3 sentences max",
  "show_products": true | false,
  "product_ids": ["gs-1", ...],
  "product_search": {{"query": "what to search for", "subcategory": "optional"}},
  "renderer": "carousel" | "single_card" | "text_only",
  "follow_ups": [{{"label": "Short label", "query": "What user would say"}}],
  "card_reasons": {{"gs-1": "10-15 word reason"}},
  "session_update": {{"mode": "neutral" | "shopping" | "support", "context": "brief"}}
}}

## Rules

1. Stay within ONE vertical per response
2. For broad category queries ("show me gym tees"), show 6-8 products
3. For specific queries ("tell me about the 530"), show 1 product as single_card
4. Keep responses SHORT, 2-3 sentences. Cards do the selling.
5. card_reasons: unique per product, what makes THIS one different from the others shown
6. For product_detail intent, show 1 product as single_card
7. For add_to_cart, acknowledge and confirm, set show_products to false
8. follow_ups: 2-3 options that make sense as next steps
9. For refine: user wants to adjust previous results ("something cheaper", "oversized fit")
10. Only use product ids listed in the catalog. If the catalog lists subcategories instead of
    products, leave product_ids empty and fill product_search instead
11. For support (orders, returns, refunds, delivery, account): answer helpfully, show_products false"""


def build_catalog_summary(products: Sequence[Product], limit: int = CATALOG_SUMMARY_LIMIT) -> str:
    """Catalog section of the system prompt: every product when small, subcategory counts otherwise."""
    if not products:
        return "The catalog is empty."

    if len(products) > limit:
        counts = Counter(p.subcategory for p in products)
        lines = [f"{len(products)} products in these subcategories:"]
        lines += [f"- {subcat} ({n})" for subcat, n in sorted(counts.items())]
        return "\n".join(lines)

    sections: Dict[str, List[str]] = {}
    for p in products:
        heading = f"{p.brand} - {p.subcategory}"
        blurb = p.description.split(". ")[0].rstrip(".")
        sections.setdefault(heading, []).append(
            f"{p.id}: {p.name} {p.currency} {p.price:g} ({blurb})"
        )
    return "\n\n".join(
        f"### {heading}\n" + "\n".join(lines) for heading, lines in sections.items()
    )


class AbstractClassifier:
    """Interface for turn classifiers."""

    source = "unknown"

    async def classify(
        self,
        message: str,
        history: Sequence[Dict[str, str]] = (),
        context: Optional[Dict[str, Any]] = None,
    ) -> ClassifierReply:
        raise NotImplementedError


class OpenAIClassifier(AbstractClassifier):
    """Chat-completion classifier. Any failure surfaces as ClassificationError."""

    source = "llm"

    def __init__(
        self,
        catalog: AbstractCatalog,
        client: Optional[AsyncOpenAI] = None,
        model: str = MODEL_NAME,
        temperature: float = LLM_TEMPERATURE,
        timeout: float = LLM_TIMEOUT_SEC,
        api_key: str = OPENAI_API_KEY,
    ) -> None:
        self.catalog = catalog
        self.model = model
        self.temperature = temperature
        # One-shot call: failures fall back locally instead of retrying.
        self._client = client or AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def build_messages(
        self,
        message: str,
        history: Sequence[Dict[str, str]] = (),
        context: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, str]]:
        products = await self.catalog.load()
        system = SYSTEM_PROMPT.format(catalog=build_catalog_summary(products))
        messages: List[Dict[str, str]] = [{"role": "system", "content": system}]
        if context:
            messages.append(
                {"role": "system", "content": f"Current context: {json.dumps(context, ensure_ascii=False)}"}
            )
        messages.extend({"role": m["role"], "content": m["content"]} for m in history)
        messages.append({"role": "user", "content": message})
        return messages

    async def classify(
        self,
        message: str,
        history: Sequence[Dict[str, str]] = (),
        context: Optional[Dict[str, Any]] = None,
    ) -> ClassifierReply:
        messages = await self.build_messages(message, history, context)
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
            content = completion.choices[0].message.content
        except OpenAIError as e:
            raise ClassificationError(f"Classifier request failed: {e}") from e
        except (IndexError, AttributeError) as e:
            raise ClassificationError("Classifier returned no choices") from e

        if not content:
            raise ClassificationError("Classifier returned empty content")
        try:
            return ClassifierReply.model_validate(json.loads(content))
        except json.JSONDecodeError as e:
            raise ClassificationError(f"Classifier returned invalid JSON: {e}") from e
        except ValidationError as e:
            raise ClassificationError(f"Classifier reply has unexpected shape: {e}") from e


SUPPORT_RE = re.compile(
    r"\b(returns?|returning|refunds?|orders?|tracking|track|broken|wrong|deliver(?:y|ies|ed)|account|password)\b",
    re.IGNORECASE,
)


class LocalClassifier(AbstractClassifier):
    """Keyword heuristic: support words, then catalog search, then a clarifying question."""

    source = "local"

    def __init__(self, search: ProductSearchService, max_results: int = FALLBACK_RESULTS) -> None:
        self.search = search
        self.max_results = max_results

    async def classify(
        self,
        message: str,
        history: Sequence[Dict[str, str]] = (),
        context: Optional[Dict[str, Any]] = None,
    ) -> ClassifierReply:
        if SUPPORT_RE.search(message):
            return ClassifierReply(
                intent="support",
                response_text=(
                    "I can help with that! Could you share your order number so I can look into this for you?"
                ),
                show_products=False,
                renderer="text_only",
                follow_ups=[
                    FollowUpPayload(label="Track my order", query="Where is my order?"),
                    FollowUpPayload(label="Start a return", query="I want to return an item"),
                ],
                session_update=SessionUpdatePayload(mode="support", context="support inquiry"),
            )

        result = await self.search.search(SearchOptions(query=message, max_results=self.max_results))
        if result.products:
            first = result.products[0]
            subcat = first.subcategory
            return ClassifierReply(
                intent="shopping",
                response_text=f"Here are some {subcat} from {first.brand} that match what you're looking for.",
                show_products=True,
                product_ids=[p.id for p in result.products],
                renderer="single_card" if len(result.products) == 1 else "carousel",
                follow_ups=[
                    FollowUpPayload(label="Tell me more", query=f"Tell me more about the {first.name}"),
                    FollowUpPayload(label="Something different", query=f"Show me different {subcat}"),
                ],
                session_update=SessionUpdatePayload(mode="shopping", context=f"{first.brand} {subcat}"),
            )

        stats = await self.search.catalog_stats()
        top = [subcat for subcat, _ in Counter(stats.subcategories).most_common(3)]
        if len(top) > 1:
            joiner = ", or " if len(top) > 2 else " or "
            options = ", ".join(top[:-1]) + joiner + top[-1]
            question = f"Are you looking for {options}?"
        elif top:
            question = f"Are you looking for {top[0]}?"
        else:
            question = "What are you looking for today?"
        return ClassifierReply(
            intent="clarify",
            response_text=f"I can help you find what you need! {question}",
            show_products=False,
            renderer="text_only",
            follow_ups=[
                FollowUpPayload(label=subcat.capitalize(), query=f"Show me {subcat}") for subcat in top
            ],
            session_update=SessionUpdatePayload(mode="neutral", context=""),
        )


def build_classifier(catalog: AbstractCatalog, api_key: str = OPENAI_API_KEY) -> Optional[OpenAIClassifier]:
    """Remote classifier when credentials are configured, otherwise None."""
    if not api_key:
        logger.info("No OpenAI API key configured, using local classification")
        return None
    return OpenAIClassifier(catalog, api_key=api_key)
