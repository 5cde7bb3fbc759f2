"""Document, due and transaction date extraction.

Candidate dates must be real calendar dates. Document and transaction
dates must also fall inside a window around the reference year, which
rejects OCR misreads and phone or account numbers that happen to look
like dates.
"""

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import date

from billscan.utils.config import DateConfig
from billscan.utils.logger import get_logger

from .candidates import FieldResult, clamp

logger = get_logger(__name__)

MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_MONTH_NAME = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?"
    r"|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\.?"
)
_NUMERIC = r"\d{1,2}[/\-.]\d{1,2}[/\-.]\d{2,4}"
_ISO = r"\d{4}[/\-]\d{1,2}[/\-]\d{1,2}"
_MONTH_FIRST = _MONTH_NAME + r"\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}"
_DAY_FIRST = r"\d{1,2}(?:st|nd|rd|th)?\s+" + _MONTH_NAME + r",?\s+\d{4}"
_ANY_DATE = "|".join((_ISO, _NUMERIC, _MONTH_FIRST, _DAY_FIRST))

_DOCUMENT_LABEL = (
    r"(?:bill\s*date|invoice\s*date|statement\s*date|service\s*date"
    r"|billing\s*period|billing|period|from|(?<!due\s)(?<!due)date)"
)
_DUE_LABEL = r"(?:due\s*(?:date|by|on)|payment\s*due|pay\s*by)"

DOCUMENT_DATE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\b" + _DOCUMENT_LABEL + r"\s*:?\s*(" + _NUMERIC + r")", re.IGNORECASE),
    re.compile(r"\b" + _DOCUMENT_LABEL + r"\s*:?\s*(" + _ISO + r")", re.IGNORECASE),
    re.compile(
        r"\b" + _DOCUMENT_LABEL + r"\s*:?\s*(" + _MONTH_FIRST + "|" + _DAY_FIRST + r")",
        re.IGNORECASE,
    ),
    re.compile(r"\b(" + _MONTH_FIRST + r")", re.IGNORECASE),
    re.compile(r"\b(" + _DAY_FIRST + r")", re.IGNORECASE),
    re.compile(r"(?<![\d/\-.])(" + _ISO + r")(?![\d/\-])"),
    re.compile(r"(?<![\d/\-.])(" + _NUMERIC + r")(?![\d/\-])"),
)

DUE_DATE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\b" + _DUE_LABEL + r"\s*:?\s*(" + _ANY_DATE + r")", re.IGNORECASE),
)

_ANY_DATE_PATTERN = re.compile(
    r"(?<![\d/\-.])(" + _ANY_DATE + r")(?![\d/\-])", re.IGNORECASE
)

_ISO_PARTS = re.compile(r"^(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})$")
_NUMERIC_PARTS = re.compile(r"^(\d{1,2})([/\-.])(\d{1,2})[/\-.](\d{2,4})$")
_MONTH_FIRST_PARTS = re.compile(
    r"^([a-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})$", re.IGNORECASE
)
_DAY_FIRST_PARTS = re.compile(
    r"^(\d{1,2})(?:st|nd|rd|th)?\s+([a-z]+)\.?,?\s+(\d{4})$", re.IGNORECASE
)


@dataclass(frozen=True)
class DateExtraction:
    """Document date, due date and the combined date confidence."""

    document_date: date | None
    due_date: date | None
    confidence: float


def _expand_year(year: int) -> int:
    if year >= 100:
        return year
    return 2000 + year if year < 50 else 1900 + year


def _month_number(name: str) -> int | None:
    return MONTHS.get(name[:3].lower())


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(raw: str) -> date | None:
    """Parse one matched date string into a calendar date.

    Numeric ``a/b/y`` dates are read month first; if that is impossible
    but day first is valid, day first is used. Dotted ``d.m.y`` dates
    are read day first. Two-digit years map into 1950-2049.

    Args:
        raw: Matched date text.

    Returns:
        The date, or ``None`` if the text is not a real calendar date.
    """
    text = raw.strip()

    match = _ISO_PARTS.match(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _safe_date(year, month, day)

    match = _NUMERIC_PARTS.match(text)
    if match:
        first, separator, second, year = match.groups()
        a, b, y = int(first), int(second), _expand_year(int(year))
        if separator == ".":
            return _safe_date(y, b, a) or _safe_date(y, a, b)
        return _safe_date(y, a, b) or _safe_date(y, b, a)

    match = _MONTH_FIRST_PARTS.match(text)
    if match:
        month = _month_number(match.group(1))
        if month is None:
            return None
        return _safe_date(int(match.group(3)), month, int(match.group(2)))

    match = _DAY_FIRST_PARTS.match(text)
    if match:
        month = _month_number(match.group(2))
        if month is None:
            return None
        return _safe_date(int(match.group(3)), month, int(match.group(1)))

    return None


def in_year_window(
    value: date, reference: date, config: DateConfig | None = None
) -> bool:
    """Check ``value`` falls in ``[ref.year - back, ref.year + forward]``."""
    config = config or DateConfig()
    return (
        reference.year - config.years_back
        <= value.year
        <= reference.year + config.years_forward
    )


def _iter_dates(text: str, patterns: Sequence[re.Pattern]) -> Iterator[date]:
    for pattern in patterns:
        for match in pattern.finditer(text):
            parsed = parse_date(match.group(1))
            if parsed is None:
                logger.debug("Failed to parse date: %s", match.group(1))
                continue
            yield parsed


def _blank_due_dates(text: str) -> str:
    for pattern in DUE_DATE_PATTERNS:
        text = pattern.sub(lambda match: " " * len(match.group(0)), text)
    return text


def find_document_date(
    text: str, reference: date, config: DateConfig | None = None
) -> date | None:
    """Return the first in-window date found by the document patterns.

    Dates anchored by a due-date label are never document dates, even
    when an unlabelled pattern would otherwise pick them up.
    """
    for candidate in _iter_dates(_blank_due_dates(text), DOCUMENT_DATE_PATTERNS):
        if in_year_window(candidate, reference, config):
            return candidate
    return None


def find_due_date(text: str) -> date | None:
    """Return the first valid date anchored by a due-date label."""
    return next(_iter_dates(text, DUE_DATE_PATTERNS), None)


def extract_dates(
    text: str,
    reference: date | None = None,
    config: DateConfig | None = None,
) -> DateExtraction:
    """Extract the document date and due date from bill text.

    Args:
        text: Normalized document text.
        reference: Date the year window is centred on, today by default.
        config: Year window settings.

    Returns:
        Both dates (either may be ``None``) and a confidence that gains
        0.3 for a document date and 0.2 for a due date.
    """
    reference = reference or date.today()
    document_date = find_document_date(text, reference, config)
    due_date = find_due_date(text)

    confidence = 0.0
    if document_date is not None:
        confidence += 0.3
    if due_date is not None:
        confidence += 0.2

    logger.debug("Dates: document=%s due=%s", document_date, due_date)
    return DateExtraction(document_date, due_date, clamp(confidence))


def recency_strength(value: date, reference: date) -> float:
    """Strength of a receipt date: 1 today, fading to 0.1 over a year."""
    days = abs((reference - value).days)
    if days >= 365:
        return 0.1
    return max(0.1, 1 - days / 365)


def extract_transaction_date(
    lines: Sequence[str],
    reference: date | None = None,
    config: DateConfig | None = None,
) -> FieldResult[date | None]:
    """Pick the receipt transaction date closest to the reference date.

    Args:
        lines: Normalized receipt lines.
        reference: Date used for the window and recency, today by default.
        config: Year window settings.

    Returns:
        The strongest in-window date and its recency strength, or
        ``None`` with strength 0.
    """
    reference = reference or date.today()
    best: FieldResult[date | None] = FieldResult(None, 0.0)

    for line in lines:
        for candidate in _iter_dates(line, (_ANY_DATE_PATTERN,)):
            if not in_year_window(candidate, reference, config):
                continue
            strength = recency_strength(candidate, reference)
            if strength > best.confidence:
                best = FieldResult(candidate, strength)

    return best
