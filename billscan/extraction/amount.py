"""Amount extraction for bills and receipt totals.

Bills usually show several dollar figures (subtotal, tax, previous
balance, amount due), so every pattern match becomes a ranked candidate
instead of taking the first match. Patterns run from most specific
("total amount due") to least specific (any number on a line that
mentions a total).
"""

import re
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation

from billscan.utils.config import AmountScoringConfig
from billscan.utils.logger import get_logger

from .candidates import (
    ContextRule,
    FieldResult,
    PatternCandidate,
    PatternSpec,
    apply_context_rules,
    clamp,
    rank_candidates,
)

logger = get_logger(__name__)

_CENTS = Decimal("0.01")

# Comma-grouped thousands or a plain digit run, optional cents. Digits glued to
# a slash or hyphen are part of a date or phone number, never an amount.
NUMBER = (
    r"(?<![\d.,/\-])"
    r"(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)"
    r"(?![\d/\-]|\.\d)"
)

AMOUNT_PATTERNS: tuple[PatternSpec, ...] = (
    PatternSpec(
        "total_due",
        re.compile(
            r"\b(?:total\s*(?:amount\s*)?(?:due|owed|payable)?"
            r"|amount\s*(?:due|owed|payable)?|balance\s*(?:due|owed)?"
            r"|pay\s*this\s*amount|payment\s*amount|grand\s*total|final\s*amount)"
            r"\s*:?\s*\$?\s?" + NUMBER,
            re.IGNORECASE,
        ),
        10,
    ),
    PatternSpec(
        "current_charges",
        re.compile(
            r"\b(?:current\s*charges|new\s*charges|this\s*month|monthly\s*total)"
            r"\s*:?\s*\$?\s?" + NUMBER,
            re.IGNORECASE,
        ),
        9,
    ),
    PatternSpec(
        "currency_prefixed",
        re.compile(r"\$\s?" + NUMBER + r"(?:\s*(?:USD|CAD|EUR))?"),
        8,
    ),
    PatternSpec("usd_prefixed", re.compile(r"\bUSD\s*" + NUMBER, re.IGNORECASE), 7),
    PatternSpec(
        "currency_suffixed",
        re.compile(
            NUMBER + r"[ \t]*(?:\$|(?:USD|CAD|EUR|dollars?|total|due|owed)\b)",
            re.IGNORECASE,
        ),
        6,
    ),
    PatternSpec(
        "charge_context",
        re.compile(
            r"\b(?:pay|owe|charge[ds]?|bill(?:ed)?|costs?|priced?|fees?)"
            r"\s*(?:of|for|is|was)?\s*:?\s*\$?\s?" + NUMBER,
            re.IGNORECASE,
        ),
        5,
    ),
    PatternSpec(
        "labelled_line",
        re.compile(
            r"^[^\n]*?\b(?:total|amount|balance|due|pay)\b[^\n]*?\$?"
            + NUMBER
            + r"[^\d\n]*$",
            re.IGNORECASE | re.MULTILINE,
        ),
        4,
    ),
)

RECEIPT_TOTAL_PATTERNS: tuple[PatternSpec, ...] = (
    PatternSpec(
        "receipt_total",
        re.compile(
            r"\b(?:grand\s*total|final\s*total|sub\s*-?\s*total|total|amount\s*due)"
            r"\s*:?\s*\$?\s?" + NUMBER,
            re.IGNORECASE,
        ),
    ),
    PatternSpec(
        "receipt_balance",
        re.compile(
            r"\b(?:balance|due|pay|owed)\s*:?\s*\$?\s?" + NUMBER, re.IGNORECASE
        ),
    ),
    PatternSpec(
        "receipt_currency",
        re.compile(
            r"\$\s?" + NUMBER + r"\s*(?:total|due|owed|balance)?", re.IGNORECASE
        ),
    ),
    PatternSpec(
        "receipt_trailing_label",
        re.compile(
            r"^.*?\$?" + NUMBER + r".*\b(?:total|final|due)\b.*$", re.IGNORECASE
        ),
    ),
)

_PHONE_DIGITS = re.compile(r"\d{10}")
_SUBTOTAL = re.compile(r"sub\s*-?\s*total", re.IGNORECASE)


def parse_money(raw: str | None) -> Decimal | None:
    """Parse a matched money string into a cent-quantized ``Decimal``.

    Args:
        raw: Text such as ``"$1,234.56"``, ``"245"`` or ``"245.6"``.

    Returns:
        Parsed amount padded to cents, or ``None`` if the text is not a number.
    """
    if not raw:
        return None
    cleaned = re.sub(r"[$,\s]", "", raw)
    if not cleaned:
        return None
    try:
        return Decimal(cleaned).quantize(_CENTS)
    except InvalidOperation:
        return None


def context_rules(scoring: AmountScoringConfig) -> tuple[ContextRule, ...]:
    """Build the keyword bonuses for amount contexts from configuration."""
    return (
        ContextRule(("total", "amount due"), scoring.total_bonus),
        ContextRule(("balance", "pay"), scoring.balance_bonus),
        ContextRule(("current charges",), scoring.current_charges_bonus),
    )


def score_amount_priority(
    base_priority: float,
    context: str,
    raw_number: str,
    value: Decimal,
    scoring: AmountScoringConfig,
) -> float:
    """Compute the final priority of one amount candidate.

    Args:
        base_priority: Priority given by the pattern's rank.
        context: Full matched text of the pattern.
        raw_number: Matched numeric string with separators removed.
        value: Parsed amount.
        scoring: Bonus and penalty settings.

    Returns:
        Adjusted priority; higher is better and may be negative.
    """
    priority = apply_context_rules(base_priority, context, context_rules(scoring))

    if _PHONE_DIGITS.search(raw_number) and value > Decimal(
        str(scoring.phone_value_threshold)
    ):
        priority -= scoring.phone_penalty
    if value < Decimal(str(scoring.small_value_threshold)):
        priority -= scoring.small_value_penalty
    if value > Decimal(str(scoring.large_value_threshold)):
        priority -= scoring.large_value_penalty

    return priority


def find_amount_candidates(
    text: str,
    scoring: AmountScoringConfig | None = None,
    patterns: Sequence[PatternSpec] = AMOUNT_PATTERNS,
) -> list[PatternCandidate[Decimal]]:
    """Collect every positive amount matched by ``patterns`` in ``text``.

    Args:
        text: Normalized document text.
        scoring: Scoring settings, defaults when omitted.
        patterns: Ordered pattern list.

    Returns:
        Unranked candidates in pattern order, then text order.
    """
    scoring = scoring or AmountScoringConfig()
    candidates: list[PatternCandidate[Decimal]] = []

    for spec in patterns:
        for match in spec.regex.finditer(text):
            raw_number = match.group(1).replace(",", "")
            value = parse_money(raw_number)
            if value is None or value <= 0:
                continue
            priority = score_amount_priority(
                spec.base_priority, match.group(0), raw_number, value, scoring
            )
            candidates.append(
                PatternCandidate(
                    value=value,
                    priority=priority,
                    pattern_name=spec.name,
                    matched_text=match.group(0),
                    span=match.span(),
                )
            )
    return candidates


def extract_amount(
    text: str, scoring: AmountScoringConfig | None = None
) -> FieldResult[Decimal]:
    """Extract the amount due from bill text.

    Args:
        text: Normalized document text.
        scoring: Scoring settings, defaults when omitted.

    Returns:
        Best amount with confidence ``top_priority / divisor`` clamped to
        ``[0, 1]``, or ``0`` with confidence 0 when nothing matched.
    """
    scoring = scoring or AmountScoringConfig()
    ranked = rank_candidates(find_amount_candidates(text, scoring))
    if not ranked:
        logger.debug("No amount candidates found")
        return FieldResult(Decimal("0"), 0.0)

    best = ranked[0]
    confidence = clamp(best.priority / scoring.confidence_divisor)
    logger.debug(
        "Amount %s from %s (priority=%.1f, %d candidates)",
        best.value,
        best.pattern_name,
        best.priority,
        len(ranked),
    )
    return FieldResult(best.value, confidence)


def score_receipt_total(context: str, value: Decimal) -> float:
    """Strength of a receipt total candidate from its label and size."""
    lowered = context.lower()
    strength = 0.3
    if "total" in lowered:
        strength += 0.4
    if "grand" in lowered or "final" in lowered:
        strength += 0.2
    if "due" in lowered or "balance" in lowered:
        strength += 0.2
    if _SUBTOTAL.search(context):
        strength -= 0.3
    if value < 1:
        strength -= 0.3
    if value > 1000:
        strength -= 0.1
    return clamp(strength)


def extract_receipt_total(
    lines: Sequence[str], max_total: Decimal = Decimal("10000")
) -> FieldResult[Decimal]:
    """Extract the total paid from receipt lines.

    The first candidate with the strictly highest strength wins, so a
    labelled "TOTAL" line beats the subtotal and bare prices.

    Args:
        lines: Normalized, non-empty receipt lines.
        max_total: Exclusive upper bound for a plausible total.

    Returns:
        Total amount and its strength, or ``0`` with strength 0.
    """
    best: PatternCandidate[Decimal] | None = None

    for line in lines:
        for spec in RECEIPT_TOTAL_PATTERNS:
            for match in spec.regex.finditer(line):
                value = parse_money(match.group(1))
                if value is None or not (0 < value < max_total):
                    continue
                strength = score_receipt_total(match.group(0), value)
                if best is None or strength > best.priority:
                    best = PatternCandidate(
                        value=value,
                        priority=strength,
                        pattern_name=spec.name,
                        matched_text=match.group(0),
                        span=match.span(),
                    )

    if best is None:
        return FieldResult(Decimal("0"), 0.0)

    logger.debug("Receipt total %s from '%s'", best.value, best.matched_text)
    return FieldResult(best.value, best.priority)
