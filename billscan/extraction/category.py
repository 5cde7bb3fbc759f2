"""Keyword-weighted category classification.

Each category owns a keyword list. A keyword contributes its length
times its number of occurrences, so long specific keywords ("natural
gas") outweigh short incidental ones ("gas"). The same scorer classifies
whole bills, their service subcategory and individual receipt item names.
"""

import re
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

from billscan.utils.logger import get_logger

from .candidates import FieldResult, clamp
from .taxonomy import (
    ITEM_KEYWORDS,
    SERVICE_KEYWORDS,
    SERVICE_SUBCATEGORIES,
    ItemCategory,
    KeywordTable,
    ServiceCategory,
    SubcategoryTable,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ServiceClassification(FieldResult[StrEnum]):
    """Service category with its confidence and optional subcategory."""

    subcategory: str | None = None


@lru_cache(maxsize=2048)
def _keyword_pattern(keyword: str) -> re.Pattern:
    # Word-bounded, tolerant of a plural suffix ("apple" matches "Apples").
    return re.compile(
        r"(?<![a-z0-9])" + re.escape(keyword.lower()) + r"(?:s|es)?(?![a-z0-9])"
    )


def score_categories(text: str, table: KeywordTable) -> dict[str, int]:
    """Score every category in ``table`` against ``text``.

    Args:
        text: Text to classify.
        table: Mapping of category to keywords.

    Returns:
        Score per category, in table order.
    """
    lowered = (text or "").lower()
    scores: dict[str, int] = {}
    for category, keywords in table.items():
        score = 0
        for keyword in keywords:
            occurrences = len(_keyword_pattern(keyword).findall(lowered))
            score += occurrences * len(keyword)
        scores[category] = score
    return scores


def _top_score(scores: dict[str, int]) -> tuple[str | None, int]:
    # Strictly greater, so ties keep the earlier entry.
    best, best_score = None, 0
    for category, score in scores.items():
        if score > best_score:
            best, best_score = category, score
    return best, best_score


def classify(
    text: str, table: KeywordTable, default: StrEnum
) -> FieldResult[StrEnum]:
    """Pick the highest-scoring category for ``text``.

    Ties keep the earlier category in ``table``. When every category
    scores zero the ``default`` is returned with confidence 0.

    Args:
        text: Text to classify.
        table: Mapping of category to keywords.
        default: Category used when nothing matches.

    Returns:
        Winning category with confidence ``min(score / 10, 1)``.
    """
    best_category, best_score = _top_score(score_categories(text, table))
    if best_category is None:
        return FieldResult(default, 0.0)
    return FieldResult(best_category, clamp(best_score / 10))


def classify_subcategory(
    text: str,
    category: StrEnum,
    subcategories: SubcategoryTable = SERVICE_SUBCATEGORIES,
) -> str | None:
    """Pick the subcategory of ``category`` whose keywords best fit ``text``.

    Returns:
        Subcategory name, or ``None`` when the category has no
        subcategories or none of their keywords occur.
    """
    table = subcategories.get(category)
    if not table:
        return None
    return _top_score(score_categories(text, table))[0]


def classify_service(
    text: str,
    vendor_name: str | None = None,
    table: KeywordTable = SERVICE_KEYWORDS,
    subcategories: SubcategoryTable = SERVICE_SUBCATEGORIES,
) -> ServiceClassification:
    """Classify a bill's service category from its text and vendor name."""
    combined = f"{text} {vendor_name}" if vendor_name else text
    result = classify(combined, table, ServiceCategory.OTHER)
    subcategory = (
        classify_subcategory(combined, result.value, subcategories)
        if result.found
        else None
    )
    logger.debug(
        "Service category %s / %s (%.2f)",
        result.value,
        subcategory,
        result.confidence,
    )
    return ServiceClassification(result.value, result.confidence, subcategory)


def classify_item(name: str, table: KeywordTable = ITEM_KEYWORDS) -> StrEnum:
    """Classify a receipt item name, ``Other`` when nothing matches."""
    return classify(name, table, ItemCategory.OTHER).value
