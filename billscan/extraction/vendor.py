"""Vendor and store name extraction.

A vendor name has no single reliable marker: sometimes it is a known
brand, sometimes a labelled or suffixed company line, sometimes just the
first line of the document. Extraction therefore runs an ordered chain
of strategies and stops at the first one that finds a name.
"""

import re
from collections.abc import Collection, Iterator, Sequence
from typing import Protocol

from billscan.preprocessing.normalizer import RawDocumentText
from billscan.utils.logger import get_logger

from .candidates import FieldResult, clamp
from .taxonomy import CASE_SENSITIVE_VENDORS, DEFAULT_TAXONOMY, Taxonomy

logger = get_logger(__name__)

UNKNOWN_COMPANY = "Unknown Company"
UNKNOWN_STORE = "Unknown Store"

_CORPORATE_SUFFIX = (
    r"(?:Inc|LLC|Corp|Corporation|Ltd|Limited|Company|Co\.|Services|Group|Holdings)"
)

COMPANY_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"([A-Z][a-zA-Z &.,'-]+" + _CORPORATE_SUFFIX + r"\.?)"),
    re.compile(r"([A-Z][a-zA-Z &.,'-]{2,40})(?:\s+" + _CORPORATE_SUFFIX + r"\.?)?"),
)
LABELLED_COMPANY = re.compile(
    r"\b(?:from|billed\s*by|service\s*provider|company|vendor)\s*:?\s*"
    r"([A-Za-z][a-zA-Z &.,'-]{2,40})",
    re.IGNORECASE,
)

_BILL_VOCABULARY = re.compile(
    r"\b(?:date|time|phone|fax|e-?mail|total|amount|tax|due|invoice|statement"
    r"|account|balance|payment)\b",
    re.IGNORECASE,
)
_COMMON_WORD = re.compile(
    r"^(?:page|of|the|and|or|to|from|for|with|by)$", re.IGNORECASE
)
_STREET_ADDRESS = re.compile(
    r"\b\d+\s+\w+\s+(?:street|st|avenue|ave|road|rd|drive|dr|lane|ln|boulevard"
    r"|blvd|circle|cir|court|ct|place|pl)\b",
    re.IGNORECASE,
)
_PO_BOX = re.compile(r"\b(?:p\.?\s*o\.?\s*box|box\s*\d+)", re.IGNORECASE)
_ZIP_CODE = re.compile(r"\b\d{5}(?:-\d{4})?\b")
_SUITE = re.compile(r"\b(?:suite|ste|apt|apartment|unit)\s*#?\s*\d+", re.IGNORECASE)
_NUMBER_AND_WORD = re.compile(r"^\d+\s+\w+$")
_CITY_STATE = re.compile(r"^[A-Za-z .'-]+,\s*[A-Z]{2}\b")
_CITY_STATE_WORDS = re.compile(r"\b(?:city|state|province)\b", re.IGNORECASE)

_POSITIONAL_VOCABULARY = re.compile(
    r"\b(?:invoice|bill|statement|receipt|date|time|account|total)", re.IGNORECASE
)
_LONG_DIGITS = re.compile(r"\d{3,}")

_KEEP_UPPER = frozenset({"LLC", "LLP", "PLC", "USA"})


def _title_case_word(match: re.Match) -> str:
    word = match.group(0)
    return word if word in _KEEP_UPPER else word.capitalize()


def clean_name(name: str) -> str:
    """Tidy an extracted vendor or item name.

    Collapses whitespace, drops symbols other than ``& ' . -``, removes
    embedded product codes of eight or more digits and title-cases
    ALL-CAPS words.

    Args:
        name: Raw name text.

    Returns:
        Cleaned name, possibly empty.
    """
    cleaned = re.sub(r"\s+", " ", name)
    cleaned = re.sub(r"[^\w\s&'.-]", "", cleaned)
    cleaned = re.sub(r"\b\d{8,}\b", "", cleaned)
    cleaned = re.sub(r"\b[A-Z]{3,}\b", _title_case_word, cleaned)
    return re.sub(r"\s+", " ", cleaned).strip(" -")


def is_false_positive_vendor(candidate: str) -> bool:
    """Reject candidates that look like bill terms or address lines."""
    if len(candidate) < 3 or len(candidate) > 50:
        return True
    return bool(
        candidate.isdigit()
        or _BILL_VOCABULARY.search(candidate)
        or _COMMON_WORD.match(candidate)
        or _STREET_ADDRESS.search(candidate)
        or _PO_BOX.search(candidate)
        or _ZIP_CODE.search(candidate)
        or _SUITE.search(candidate)
        or _NUMBER_AND_WORD.match(candidate)
        or _CITY_STATE.match(candidate)
        or ("," in candidate and _CITY_STATE_WORDS.search(candidate))
    )


class NameStrategy(Protocol):
    """One tier of the name extraction chain."""

    def __call__(self, doc: RawDocumentText) -> FieldResult[str] | None: ...


def _entity_pattern(name: str, case_sensitive: bool) -> re.Pattern:
    if case_sensitive:
        spelled = re.escape(name) + "|" + re.escape(name.upper())
        return re.compile(r"(?<![A-Za-z0-9])(?:" + spelled + r")(?![A-Za-z0-9])")
    return re.compile(
        r"(?<![A-Za-z0-9])" + re.escape(name) + r"(?![A-Za-z0-9])", re.IGNORECASE
    )


class KnownEntityStrategy:
    """Whole-word lookup of known vendor names.

    Matching ignores case, except for names in ``case_sensitive`` which
    must appear as written or fully capitalized.
    """

    def __init__(
        self,
        entities: Sequence[tuple[str, float]],
        case_sensitive: Collection[str] = CASE_SENSITIVE_VENDORS,
    ) -> None:
        self.entities = [
            (name, confidence, _entity_pattern(name, name in case_sensitive))
            for name, confidence in entities
        ]

    def __call__(self, doc: RawDocumentText) -> FieldResult[str] | None:
        for name, confidence, pattern in self.entities:
            if pattern.search(doc.text):
                logger.debug("Known vendor match: %s", name)
                return FieldResult(name, confidence)
        return None


def store_line_strength(line: str, store_name: str) -> float:
    """Strength of a known-store hit on a header line."""
    strength = 0.3
    if line.lower() == store_name.lower():
        strength += 0.4
    strength += 0.2
    if len(line) < 30:
        strength += 0.1
    if re.fullmatch(r"[A-Z\s&'.-]+", line):
        strength += 0.1
    return clamp(strength)


class KnownStoreStrategy:
    """Best known retail chain among the first header lines of a receipt."""

    def __init__(self, stores: Sequence[tuple[str, str]], max_lines: int = 8) -> None:
        self.stores = [
            (re.compile(r"\b" + fragment + r"\b", re.IGNORECASE), name)
            for fragment, name in stores
        ]
        self.max_lines = max_lines

    def __call__(self, doc: RawDocumentText) -> FieldResult[str] | None:
        best: FieldResult[str] | None = None
        for line in doc.lines[: self.max_lines]:
            for pattern, name in self.stores:
                if not pattern.search(line):
                    continue
                strength = store_line_strength(line, name)
                if best is None or strength > best.confidence:
                    best = FieldResult(name, strength)
        return best


class PatternStrategy:
    """Company-looking lines, filtered against address and bill terms."""

    def __init__(self, confidence: float = 0.6) -> None:
        self.confidence = confidence

    def _candidates(self, doc: RawDocumentText) -> Iterator[str]:
        for pattern in COMPANY_PATTERNS:
            for line in doc.lines:
                match = pattern.fullmatch(line)
                if match:
                    yield match.group(1).strip()
        for line in doc.lines:
            for match in LABELLED_COMPANY.finditer(line):
                yield match.group(1).strip()

    def __call__(self, doc: RawDocumentText) -> FieldResult[str] | None:
        for candidate in self._candidates(doc):
            if is_false_positive_vendor(candidate):
                continue
            name = clean_name(candidate)
            if name:
                return FieldResult(name, self.confidence)
        return None


class PositionalStrategy:
    """First short header line that reads like a name."""

    def __init__(self, max_lines: int = 5, confidence: float = 0.4) -> None:
        self.max_lines = max_lines
        self.confidence = confidence

    def __call__(self, doc: RawDocumentText) -> FieldResult[str] | None:
        for line in doc.lines[: self.max_lines]:
            if not 3 <= len(line) <= 40 or not line[0].isalpha():
                continue
            if _LONG_DIGITS.search(line) or _POSITIONAL_VOCABULARY.search(line):
                continue
            name = clean_name(line)
            if name:
                return FieldResult(name, self.confidence)
        return None


def run_strategies(
    doc: RawDocumentText, strategies: Sequence[NameStrategy], default: str
) -> FieldResult[str]:
    """Run ``strategies`` in order and return the first success.

    Args:
        doc: Normalized document.
        strategies: Ordered extraction tiers.
        default: Name returned with confidence 0 if every tier fails.

    Returns:
        The first tier's result, or the default.
    """
    for strategy in strategies:
        result = strategy(doc)
        if result is not None:
            logger.debug(
                "Name '%s' from %s (%.2f)",
                result.value,
                type(strategy).__name__,
                result.confidence,
            )
            return result
    return FieldResult(default, 0.0)


def vendor_strategies(taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> list[NameStrategy]:
    return [
        KnownEntityStrategy(taxonomy.known_vendors),
        PatternStrategy(),
        PositionalStrategy(),
    ]


def store_strategies(taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> list[NameStrategy]:
    return [
        KnownStoreStrategy(taxonomy.known_stores),
        PatternStrategy(),
        PositionalStrategy(),
    ]


def extract_vendor(
    doc: RawDocumentText, taxonomy: Taxonomy = DEFAULT_TAXONOMY
) -> FieldResult[str]:
    """Extract the bill's vendor, ``Unknown Company`` when nothing fits."""
    return run_strategies(doc, vendor_strategies(taxonomy), UNKNOWN_COMPANY)


def extract_store_name(
    doc: RawDocumentText, taxonomy: Taxonomy = DEFAULT_TAXONOMY
) -> FieldResult[str]:
    """Extract the receipt's store, ``Unknown Store`` when nothing fits."""
    return run_strategies(doc, store_strategies(taxonomy), UNKNOWN_STORE)
