"""Tests for keyword category classification and taxonomy loading."""

from pathlib import Path

import pytest
import yaml

from billscan.extraction.category import (
    classify,
    classify_item,
    classify_service,
    classify_subcategory,
    score_categories,
)
from billscan.extraction.taxonomy import (
    DEFAULT_TAXONOMY,
    ITEM_KEYWORDS,
    KNOWN_VENDORS,
    SERVICE_KEYWORDS,
    SERVICE_SUBCATEGORIES,
    ItemCategory,
    ServiceCategory,
    load_taxonomy,
)


class TestScoreCategories:
    """Tests for the keyword scorer."""

    def test_long_keywords_weigh_more(self) -> None:
        scores = score_categories("natural gas", SERVICE_KEYWORDS)
        # "natural gas" (11) plus "gas" (3)
        assert scores[ServiceCategory.UTILITIES] == 14

    def test_keywords_are_whole_words(self) -> None:
        scores = score_categories("gasoline", SERVICE_KEYWORDS)
        assert scores[ServiceCategory.UTILITIES] == 0

    def test_every_category_scored(self) -> None:
        scores = score_categories("", ITEM_KEYWORDS)
        assert set(scores) == set(ITEM_KEYWORDS)
        assert all(score == 0 for score in scores.values())


class TestClassifyService:
    """Tests for bill service classification."""

    def test_utilities(self) -> None:
        result = classify_service("Electric service, 850 kWh used")
        assert result.value == ServiceCategory.UTILITIES
        assert result.confidence == 1.0

    def test_vendor_name_contributes(self) -> None:
        result = classify_service("Monthly statement", vendor_name="Comcast")
        assert result.value == ServiceCategory.INTERNET_TELECOM
        assert result.confidence == pytest.approx(0.7)

    @pytest.mark.parametrize("text", ["", "zzz qqq", "12345"])
    def test_defaults_to_other(self, text: str) -> None:
        result = classify_service(text)
        assert result.value == ServiceCategory.OTHER
        assert result.confidence == 0.0

    def test_deterministic(self) -> None:
        text = "Cable internet and home insurance premium"
        assert classify_service(text) == classify_service(text)

    def test_tie_keeps_table_order(self) -> None:
        table = {
            ServiceCategory.UTILITIES: ("abc",),
            ServiceCategory.INSURANCE: ("xyz",),
        }
        result = classify("xyz abc", table, ServiceCategory.OTHER)
        assert result.value == ServiceCategory.UTILITIES
        assert result.confidence == pytest.approx(0.3)

    def test_alternate_table(self) -> None:
        table = {ServiceCategory.HEALTHCARE: ("vet",)}
        result = classify_service("Vet visit", table=table)
        assert result.value == ServiceCategory.HEALTHCARE

    @pytest.mark.parametrize(
        "text", ["", "Total Due", "!!!", "electric water internet", "x" * 500]
    )
    def test_always_in_closed_set(self, text: str) -> None:
        result = classify_service(text)
        assert result.value in set(ServiceCategory)
        assert 0.0 <= result.confidence <= 1.0


class TestClassifySubcategory:
    """Tests for service subcategories."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Electric service, 850 kWh used", "Electricity"),
            ("Water and sewer charges", "Water/Sewer"),
            ("Natural gas delivery, 42 therms", "Gas"),
            ("Verizon Wireless monthly statement", "Mobile Phone"),
            ("Fiber internet 500 Mbps", "Internet Service"),
        ],
    )
    def test_subcategory_from_text(self, text: str, expected: str) -> None:
        assert classify_service(text).subcategory == expected

    def test_no_subcategory_keyword(self) -> None:
        result = classify_service("Monthly statement", vendor_name="Comcast")
        assert result.value == ServiceCategory.INTERNET_TELECOM
        assert result.subcategory is None

    def test_other_has_no_subcategory(self) -> None:
        assert classify_service("zzz qqq").subcategory is None

    def test_category_without_table(self) -> None:
        assert classify_subcategory("water", ServiceCategory.OTHER) is None

    def test_every_subcategory_belongs_to_a_category(self) -> None:
        assert set(SERVICE_SUBCATEGORIES) <= set(SERVICE_KEYWORDS)

    def test_alternate_table(self) -> None:
        subcategories = {ServiceCategory.UTILITIES: {"Irrigation": ("sprinkler",)}}
        result = classify_service(
            "Water for sprinkler zones", subcategories=subcategories
        )
        assert result.value == ServiceCategory.UTILITIES
        assert result.subcategory == "Irrigation"


class TestClassifyItem:
    """Tests for receipt item classification."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Apples", ItemCategory.PRODUCE),
            ("Chicken Breast", ItemCategory.MEAT_SEAFOOD),
            ("Whole Milk", ItemCategory.DAIRY_EGGS),
            ("Bread", ItemCategory.PANTRY),
            ("Dish Soap", ItemCategory.HOUSEHOLD),
            ("Gift Card Holder", ItemCategory.OTHER),
        ],
    )
    def test_categories(self, name: str, expected: ItemCategory) -> None:
        assert classify_item(name) == expected


class TestLoadTaxonomy:
    """Tests for YAML taxonomy overrides."""

    def test_none_gives_default(self) -> None:
        assert load_taxonomy(None) is DEFAULT_TAXONOMY

    def test_missing_file_gives_default(self, tmp_path: Path) -> None:
        assert load_taxonomy(tmp_path / "absent.yaml") is DEFAULT_TAXONOMY

    def test_override(self, tmp_path: Path) -> None:
        path = tmp_path / "taxonomy.yaml"
        path.write_text(
            yaml.dump(
                {
                    "service_categories": {"Utilities": ["Lemonade Stand"]},
                    "known_vendors": [{"name": "Acme Power", "confidence": 0.9}],
                }
            )
        )
        taxonomy = load_taxonomy(path)
        assert dict(taxonomy.service_keywords) == {
            ServiceCategory.UTILITIES: ("lemonade stand",)
        }
        assert taxonomy.known_vendors == (("Acme Power", 0.9),)
        assert taxonomy.item_keywords is ITEM_KEYWORDS
        assert taxonomy.known_stores == DEFAULT_TAXONOMY.known_stores

    def test_subcategory_override(self, tmp_path: Path) -> None:
        path = tmp_path / "taxonomy.yaml"
        path.write_text(
            yaml.dump({"service_subcategories": {"Utilities": {"Heat": ["Steam"]}}})
        )
        taxonomy = load_taxonomy(path)
        subcategories = taxonomy.service_subcategories
        assert list(subcategories) == [ServiceCategory.UTILITIES]
        assert dict(subcategories[ServiceCategory.UTILITIES]) == {"Heat": ("steam",)}
        assert taxonomy.service_keywords is SERVICE_KEYWORDS

    def test_unknown_subcategory_parent_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "taxonomy.yaml"
        path.write_text(yaml.dump({"service_subcategories": {"Pets": {"Vet": []}}}))
        with pytest.raises(ValueError, match="Pets"):
            load_taxonomy(path)

    def test_unknown_category_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "taxonomy.yaml"
        path.write_text(yaml.dump({"item_categories": {"Weapons": ["sword"]}}))
        with pytest.raises(ValueError, match="Weapons"):
            load_taxonomy(path)

    def test_builtin_tables_are_immutable(self) -> None:
        with pytest.raises(TypeError):
            SERVICE_KEYWORDS[ServiceCategory.OTHER] = ("x",)  # type: ignore[index]

    def test_cuc_listed_first(self) -> None:
        assert KNOWN_VENDORS[0] == ("CUC", 0.95)
