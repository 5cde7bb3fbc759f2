"""Overall confidence for bill and receipt records.

Confidence is a heuristic review signal, not a calibrated probability.
Every coefficient comes from the weights models in
:mod:`billscan.utils.config`.
"""

from billscan.extraction.candidates import clamp
from billscan.utils.config import ConfidenceWeights, ReceiptConfidenceWeights


def bill_confidence(
    amount: float,
    date: float,
    vendor: float,
    category: float,
    text_length: int,
    has_account: bool,
    weights: ConfidenceWeights | None = None,
) -> float:
    """Weighted sum of the bill field confidences.

    Args:
        amount: Amount extractor confidence.
        date: Date extractor confidence.
        vendor: Vendor extractor confidence.
        category: Category classifier confidence.
        text_length: Length of the normalized text.
        has_account: Whether an account number was found.
        weights: Field weights and cap.

    Returns:
        Confidence in ``[0, weights.cap]``.
    """
    weights = weights or ConfidenceWeights()
    score = (
        weights.amount * amount
        + weights.date * date
        + weights.vendor * vendor
        + weights.category * category
    )
    if text_length > weights.long_text_threshold:
        score += weights.long_text_bonus
    else:
        score += weights.short_text_bonus
    if has_account:
        score += weights.account_bonus
    return clamp(score, 0.0, weights.cap)


def receipt_confidence(
    store: float,
    date: float,
    total: float,
    item_bonus: float,
    weights: ReceiptConfidenceWeights | None = None,
) -> float:
    """Weighted sum of the receipt field strengths plus the item bonus."""
    weights = weights or ReceiptConfidenceWeights()
    score = (
        weights.base
        + weights.store * store
        + weights.date * date
        + weights.total * total
        + item_bonus
    )
    return clamp(score, 0.0, weights.cap)
