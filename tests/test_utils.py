from fin_assistant.demo_catalog import get_demo_product
from fin_assistant.models import (
    ConversationMode,
    RecommendedProduct,
    SessionStateUpdate,
    ShoppingContext,
)
from fin_assistant.utils import (
    extract_query_terms,
    searchable_text,
    serialize_product,
    serialize_session_update,
    tokenize,
)


class TestTokenize:

    def test_lowercases_and_drops_short_tokens(self):
        assert tokenize("Show me Nike trainers") == ["show", "nike", "trainers"]

    def test_strips_edge_punctuation(self):
        assert tokenize("trainers, please!") == ["trainers", "please"]

    def test_keeps_inner_hyphens(self):
        assert tokenize("black t-shirts") == ["black", "t-shirts"]

    def test_empty(self):
        assert tokenize("") == []
        assert tokenize("a an of") == []


class TestExtractQueryTerms:

    def test_product_type_and_modifiers(self):
        terms = extract_query_terms("black nike trainers")
        assert terms.required_subcategories == ["trainers"]
        assert terms.modifiers == ["black", "nike"]

    def test_first_product_type_wins(self):
        terms = extract_query_terms("comfy sofa or couch")
        assert terms.required_subcategories == ["sofas"]
        assert terms.modifiers == ["comfy"]

    def test_shoes_expand_to_several_subcategories(self):
        terms = extract_query_terms("shoes")
        assert "trainers" in terms.required_subcategories
        assert "boots" in terms.required_subcategories

    def test_no_product_type(self):
        terms = extract_query_terms("something nice")
        assert terms.required_subcategories is None
        assert terms.modifiers == ["something", "nice"]


class TestSearchableText:

    def test_includes_brand_and_colors(self):
        text = searchable_text(get_demo_product("tr-3"))
        assert "adidas" in text
        assert "green/gum" in text
        assert "gum sole" in text


class TestSerializeProduct:

    def test_camel_case_keys_and_reason(self):
        item = RecommendedProduct(product=get_demo_product("gs-1"), ai_reasoning="Built for lifting")
        data = serialize_product(item)
        assert data["id"] == "gs-1"
        assert data["reviewCount"] == 482
        assert data["inStock"] is True
        assert data["aiReasoning"] == "Built for lifting"
        assert len(data["images"]) == 3
        assert "originalPrice" not in data
        assert {v["type"] for v in data["variants"]} == {"size", "color"}

    def test_reason_omitted_when_absent(self):
        data = serialize_product(RecommendedProduct(product=get_demo_product("sofa-1")))
        assert "aiReasoning" not in data


class TestSerializeSessionUpdate:

    def test_none(self):
        assert serialize_session_update(None) is None

    def test_shopping(self):
        update = SessionStateUpdate(
            conversation_mode=ConversationMode.SHOPPING,
            shopping_context=ShoppingContext(subcategory="trainers", query="show me trainers"),
        )
        data = serialize_session_update(update)
        assert data["conversationMode"] == "shopping"
        assert data["supportContext"] is None
        assert data["shoppingContext"] == {
            "subcategory": "trainers",
            "query": "show me trainers",
            "constraints": [],
        }
