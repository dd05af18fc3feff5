"""
Unit tests for product metadata prompt building and reply validation.

Run: pytest backend/tests/test_product_tagger.py -v
"""

import pytest

from app.schemas.enrichment import MAX_KEYWORDS
from app.services.json_extract import JSONExtractionError
from app.services.llm_client import LLMError
from app.services.product_store import ProductRecord
from app.services.product_tagger import ProductTagger, build_prompt, normalize_metadata
from conftest import TAGS_REPLY

VALID_SEASONS = {"SUMMER", "WINTER", "ALL_SEASON"}
VALID_BEST_FOR = {"DATE", "CASUAL", "OFFICIAL_PURPOSE", "FESTIVE", "PARTY"}


class TestNormalizeMetadata:

    def test_keywords_cleaned(self):
        meta = normalize_metadata({"keywords": ["  Cotton ", "", "   ", 7, None, "SUMMER Wear"]})
        assert meta.keywords == ["cotton", "summer wear"]

    def test_keywords_truncated(self):
        meta = normalize_metadata({"keywords": [f"kw{i}" for i in range(40)]})
        assert len(meta.keywords) == MAX_KEYWORDS
        assert meta.keywords[0] == "kw0"

    def test_keywords_not_a_list(self):
        assert normalize_metadata({"keywords": "wool, warm"}).keywords == []

    @pytest.mark.parametrize("season", ["SUMMER", "WINTER", "ALL_SEASON"])
    def test_valid_season_kept(self, season):
        assert normalize_metadata({"season": season}).season == season

    @pytest.mark.parametrize("season", [None, "summer", "SPRING", 3, ["WINTER"]])
    def test_invalid_season_defaults(self, season):
        assert normalize_metadata({"season": season}).season == "ALL_SEASON"

    def test_best_for_filtered_and_truncated(self):
        meta = normalize_metadata({
            "bestFor": ["PARTY", "BRUNCH", "date", "DATE", "CASUAL", "FESTIVE", "OFFICIAL_PURPOSE", "PARTY"],
        })
        assert meta.best_for == ["PARTY", "DATE", "CASUAL", "FESTIVE", "OFFICIAL_PURPOSE"]

    @pytest.mark.parametrize("best_for", [None, [], ["BRUNCH"], "CASUAL"])
    def test_best_for_defaults_to_casual(self, best_for):
        assert normalize_metadata({"bestFor": best_for}).best_for == ["CASUAL"]

    def test_rejects_non_object(self):
        with pytest.raises(JSONExtractionError):
            normalize_metadata(["cotton"])

    @pytest.mark.parametrize("raw", [
        {},
        {"keywords": ["A"] * 30, "season": "x", "bestFor": ["x"] * 9},
        {"keywords": [" ", "B "], "season": "WINTER", "bestFor": ["PARTY"] * 8},
    ])
    def test_output_invariants(self, raw):
        meta = normalize_metadata(raw)
        assert len(meta.keywords) <= 15
        assert all(k and k == k.lower() for k in meta.keywords)
        assert meta.season in VALID_SEASONS
        assert 1 <= len(meta.best_for) <= 5
        assert set(meta.best_for) <= VALID_BEST_FOR

    def test_dump_uses_wire_names(self):
        dumped = normalize_metadata({"bestFor": ["DATE"]}).model_dump(by_alias=True)
        assert dumped == {"keywords": [], "season": "ALL_SEASON", "bestFor": ["DATE"]}


class TestBuildPrompt:

    def test_short_description(self):
        prompt = build_prompt("Linen Shirt", "Breezy linen shirt", "shirts")
        assert 'Product Name: "Linen Shirt"' in prompt
        assert 'Category: "shirts"' in prompt
        assert 'Description: "Breezy linen shirt"\n' in prompt

    def test_long_description_truncated(self):
        description = "x" * 600
        prompt = build_prompt("Coat", description, "outerwear")
        assert f'Description: "{"x" * 500}" ...' in prompt
        assert "x" * 501 not in prompt


class TestProductTagger:

    @pytest.fixture
    def product(self):
        return ProductRecord(id="p1", name="Linen Shirt", description="Breezy", category="shirts")

    @pytest.mark.asyncio
    async def test_generate(self, mock_llm, product):
        mock_llm.complete.return_value = TAGS_REPLY
        meta = await ProductTagger(mock_llm).generate(product)

        assert meta.keywords == ["linen", "breathable", "beach"]
        assert meta.season == "SUMMER"
        assert meta.best_for == ["CASUAL", "DATE"]

        kwargs = mock_llm.complete.call_args.kwargs
        assert kwargs["temperature"] == 0.5
        assert kwargs["max_tokens"] == 300
        assert 'Product Name: "Linen Shirt"' in kwargs["user"]

    @pytest.mark.asyncio
    async def test_missing_fields_use_empty_strings(self, mock_llm):
        mock_llm.complete.return_value = TAGS_REPLY
        await ProductTagger(mock_llm).generate(ProductRecord(id="p2"))
        assert 'Product Name: ""' in mock_llm.complete.call_args.kwargs["user"]

    @pytest.mark.asyncio
    async def test_unparseable_reply_raises(self, mock_llm, product):
        mock_llm.complete.return_value = "I cannot help with that."
        with pytest.raises(JSONExtractionError):
            await ProductTagger(mock_llm).generate(product)

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, mock_llm, product):
        mock_llm.complete.side_effect = LLMError("429 rate limited")
        with pytest.raises(LLMError):
            await ProductTagger(mock_llm).generate(product)
