import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import openai
import pytest

from fin_assistant.classifier import (
    ClassifierReply,
    OpenAIClassifier,
    build_catalog_summary,
    build_classifier,
)
from fin_assistant.demo_catalog import get_demo_catalog
from fin_assistant.errors import ClassificationError

VALID_REPLY = {
    "intent": "shopping",
    "response_text": "Here are some classic trainers.",
    "show_products": True,
    "product_ids": ["tr-3", "tr-4"],
    "renderer": "carousel",
    "follow_ups": [{"label": "Cheaper", "query": "Show me cheaper trainers"}],
    "card_reasons": {"tr-3": "Gum sole terrace icon"},
    "session_update": {"mode": "shopping", "context": "adidas trainers"},
}


def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def stub_client(**create_kwargs):
    create = AsyncMock(**create_kwargs)
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create))), create


class TestClassifierReply:

    def test_defaults(self):
        reply = ClassifierReply.model_validate(
            {"intent": "clarify", "response_text": "Which one?", "show_products": False}
        )
        assert reply.product_ids == []
        assert reply.renderer == "carousel"
        assert reply.card_reasons == {}
        assert reply.session_update is None

    def test_nulls_become_empty(self):
        reply = ClassifierReply.model_validate(
            {**VALID_REPLY, "product_ids": None, "follow_ups": None, "card_reasons": None}
        )
        assert reply.product_ids == []
        assert reply.follow_ups == []
        assert reply.card_reasons == {}


class TestBuildCatalogSummary:

    def test_lists_products_by_brand_and_subcategory(self):
        summary = build_catalog_summary(get_demo_catalog())
        assert "### Nike - trainers" in summary
        assert "tr-1: Nike Dunk Low Retro USD 120" in summary
        assert "### Kave Home - sofas" in summary

    def test_large_catalog_lists_subcategories(self):
        summary = build_catalog_summary(get_demo_catalog(), limit=5)
        assert summary.startswith("30 products in these subcategories:")
        assert "- trainers (10)" in summary
        assert "tr-1" not in summary

    def test_empty(self):
        assert build_catalog_summary([]) == "The catalog is empty."


class TestOpenAIClassifier:

    def test_parses_reply_and_sends_context(self, curated_catalog):
        client, create = stub_client(return_value=completion(json.dumps(VALID_REPLY)))
        classifier = OpenAIClassifier(curated_catalog, client=client, model="test-model")
        history = [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "Hello!"}]

        reply = asyncio.run(
            classifier.classify("show me adidas trainers", history, {"conversationMode": "neutral"})
        )

        assert reply.product_ids == ["tr-3", "tr-4"]
        assert reply.card_reasons["tr-3"] == "Gum sole terrace icon"
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["response_format"] == {"type": "json_object"}
        messages = kwargs["messages"]
        assert messages[0]["role"] == "system"
        assert "tr-3: Adidas Samba OG" in messages[0]["content"]
        assert messages[1]["content"].startswith("Current context: ")
        assert messages[2:4] == history
        assert messages[-1] == {"role": "user", "content": "show me adidas trainers"}

    def test_no_context_message_without_context(self, curated_catalog):
        client, create = stub_client(return_value=completion(json.dumps(VALID_REPLY)))
        classifier = OpenAIClassifier(curated_catalog, client=client)
        asyncio.run(classifier.classify("trainers"))
        messages = create.call_args.kwargs["messages"]
        assert [m["role"] for m in messages] == ["system", "user"]

    @pytest.mark.parametrize("content", [
        "not json",
        json.dumps({"intent": "shopping"}),
        json.dumps({**VALID_REPLY, "show_products": "maybe"}),
        "",
        None,
    ])
    def test_bad_content_raises(self, curated_catalog, content):
        client, _ = stub_client(return_value=completion(content))
        classifier = OpenAIClassifier(curated_catalog, client=client)
        with pytest.raises(ClassificationError):
            asyncio.run(classifier.classify("trainers"))

    def test_no_choices_raises(self, curated_catalog):
        client, _ = stub_client(return_value=SimpleNamespace(choices=[]))
        classifier = OpenAIClassifier(curated_catalog, client=client)
        with pytest.raises(ClassificationError):
            asyncio.run(classifier.classify("trainers"))

    def test_api_error_raises(self, curated_catalog):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        client, create = stub_client(side_effect=openai.APIConnectionError(request=request))
        classifier = OpenAIClassifier(curated_catalog, client=client)
        with pytest.raises(ClassificationError):
            asyncio.run(classifier.classify("trainers"))
        create.assert_awaited_once()


class TestBuildClassifier:

    def test_without_key(self, curated_catalog):
        assert build_classifier(curated_catalog, api_key="") is None

    def test_with_key(self, curated_catalog):
        classifier = build_classifier(curated_catalog, api_key="sk-test")
        assert isinstance(classifier, OpenAIClassifier)
        assert classifier.source == "llm"


class TestLocalClassifier:

    def test_support(self, local_classifier):
        reply = asyncio.run(local_classifier.classify("Where is my order?"))
        assert reply.intent == "support"
        assert reply.show_products is False
        assert reply.session_update.mode == "support"
        assert [f.label for f in reply.follow_ups] == ["Track my order", "Start a return"]

    def test_support_needs_whole_word(self, local_classifier):
        reply = asyncio.run(local_classifier.classify("show me trainers for a disorderly weekend"))
        assert reply.intent == "shopping"

    def test_search_hit(self, local_classifier):
        reply = asyncio.run(local_classifier.classify("show me trainers"))
        assert reply.intent == "shopping"
        assert reply.show_products is True
        assert reply.product_ids == ["tr-1", "tr-2", "tr-3", "tr-4", "tr-5", "tr-6"]
        assert reply.renderer == "carousel"
        assert reply.response_text.startswith("Here are some trainers from Nike")
        assert reply.session_update.mode == "shopping"

    def test_single_hit_uses_single_card(self, local_classifier):
        reply = asyncio.run(local_classifier.classify("samba"))
        assert reply.product_ids == ["tr-3"]
        assert reply.renderer == "single_card"

    def test_clarify(self, local_classifier):
        reply = asyncio.run(local_classifier.classify("something comfortable"))
        assert reply.intent == "clarify"
        assert reply.show_products is False
        assert reply.response_text.endswith("Are you looking for trainers, sofas, or t-shirts?")
        assert [f.query for f in reply.follow_ups] == [
            "Show me trainers",
            "Show me sofas",
            "Show me t-shirts",
        ]
        assert reply.session_update.mode == "neutral"
