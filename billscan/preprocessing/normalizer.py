"""OCR text normalization.

Corrects the character confusions Tesseract-style engines commonly make
on photographed bills (``|``/``I``, ``0``/``O``, ``1``/``l``/``I``,
``5``/``S``, ``8``/``B``) using the class of the neighbouring characters,
then strips non-printable characters and collapses whitespace while
keeping the line structure the line-based extractors depend on.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from billscan.utils.logger import get_logger

logger = get_logger(__name__)

_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n\t]")
_HORIZONTAL_SPACE = re.compile(r"[ \t]+")
_ZERO_OR_O = re.compile(r"[0O]")
_I_BETWEEN_CAPS = re.compile(r"(?<=[A-Z])[l1](?=[A-Z])")
_ONE_AT_WORD_START = re.compile(r"\b1(?=[a-z]{3})")
_I_AT_WORD_END = re.compile(r"(?<=[a-z])I\b")
_DIGIT_BETWEEN_LETTERS = re.compile(r"(?<=[A-Za-z])[58](?=[A-Za-z])")
# Four letters so unit suffixes such as "5lbs" or "8oz" are left alone.
_DIGIT_AT_WORD_START = re.compile(r"(?<![A-Za-z0-9])[58](?=[A-Za-z]{4})")

_LETTER_FOR_DIGIT = {"5": "S", "8": "B"}


@dataclass
class RawDocumentText:
    """Normalized text plus its line view for one parse call."""

    text: str
    lines: tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


@dataclass
class WordConfidence:
    """A single OCR word with the engine's 0-100 confidence."""

    text: str
    confidence: float


@dataclass
class WordConfidenceSummary:
    """Diagnostic count of OCR words above a confidence threshold."""

    high_confidence: int
    total: int

    @property
    def ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.high_confidence / self.total


def _fix_zero_or_o(match: re.Match) -> str:
    source = match.string
    start, end = match.start(), match.end()
    before = source[start - 1] if start > 0 else ""
    after = source[end] if end < len(source) else ""

    if before.isdigit() or after.isdigit():
        return "0"
    if before.isalpha() or after.isalpha():
        return "O"
    return match.group(0)


def _fix_digit_between_letters(match: re.Match) -> str:
    letter = _LETTER_FOR_DIGIT[match.group(0)]
    before = match.string[match.start() - 1]
    return letter.lower() if before.islower() else letter


def correct_ocr_confusions(text: str) -> str:
    """Apply the ordered glyph-confusion corrections to ``text``.

    Args:
        text: Raw OCR text.

    Returns:
        Text with ambiguous glyphs resolved from their neighbours.
    """
    text = text.replace("|", "I")
    text = _ZERO_OR_O.sub(_fix_zero_or_o, text)
    text = _I_BETWEEN_CAPS.sub("I", text)
    text = _ONE_AT_WORD_START.sub("I", text)
    text = _I_AT_WORD_END.sub("l", text)
    text = _DIGIT_BETWEEN_LETTERS.sub(_fix_digit_between_letters, text)
    text = _DIGIT_AT_WORD_START.sub(lambda m: _LETTER_FOR_DIGIT[m.group(0)], text)
    return text


def collapse_whitespace(text: str) -> str:
    """Collapse space runs, strip each line and drop blank lines."""
    lines = (_HORIZONTAL_SPACE.sub(" ", line).strip() for line in text.splitlines())
    return "\n".join(line for line in lines if line)


def normalize_text(text: str | None) -> str:
    """Run the full normalization pass over raw OCR text.

    Never raises. ``None`` becomes an empty string and whitespace-only
    input is returned unchanged so that downstream extractors simply find
    nothing.

    Args:
        text: Raw OCR text, possibly ``None``.

    Returns:
        Normalized text.
    """
    if text is None:
        return ""
    if not text.strip():
        return text

    cleaned = _NON_PRINTABLE.sub("", text)
    cleaned = correct_ocr_confusions(cleaned)
    cleaned = collapse_whitespace(cleaned)

    logger.debug("Normalized text: %d -> %d chars", len(text), len(cleaned))
    return cleaned


def prepare_document(text: str | None) -> RawDocumentText:
    """Normalize text and build the line view used by the extractors.

    Args:
        text: Raw OCR text.

    Returns:
        Normalized document text with non-empty, stripped lines.
    """
    normalized = normalize_text(text)
    lines = tuple(line.strip() for line in normalized.splitlines() if line.strip())
    return RawDocumentText(text=normalized, lines=lines)


def summarize_word_confidence(
    words: Iterable[WordConfidence] | None, threshold: float = 70.0
) -> WordConfidenceSummary:
    """Count OCR words whose confidence exceeds ``threshold``.

    Only used as a logged diagnostic; extraction never depends on it.

    Args:
        words: Per-word OCR output, may be ``None``.
        threshold: Minimum confidence (0-100) to count as high.

    Returns:
        Summary with the high-confidence and total word counts.
    """
    word_list = list(words or [])
    high = sum(1 for w in word_list if w.confidence > threshold)
    summary = WordConfidenceSummary(high_confidence=high, total=len(word_list))
    if word_list:
        logger.debug(
            "High confidence words: %d/%d", summary.high_confidence, summary.total
        )
    return summary
