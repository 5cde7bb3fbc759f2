"""Tests for overall confidence aggregation.

The weights used here are the current tuned defaults; recalibrate them
against a labelled corpus when one is available.
"""

import pytest

from billscan.pipeline.aggregator import bill_confidence, receipt_confidence
from billscan.utils.config import ConfidenceWeights, ReceiptConfidenceWeights


class TestBillConfidence:
    """Tests for the bill confidence formula."""

    def test_weighted_sum(self) -> None:
        confidence = bill_confidence(
            amount=1.0,
            date=0.5,
            vendor=0.8,
            category=1.0,
            text_length=150,
            has_account=True,
        )
        assert confidence == pytest.approx(0.30 + 0.10 + 0.16 + 0.15 + 0.10 + 0.05)

    def test_short_text_bonus(self) -> None:
        confidence = bill_confidence(0.0, 0.0, 0.0, 0.0, 40, False)
        assert confidence == pytest.approx(0.05)

    def test_length_threshold_is_exclusive(self) -> None:
        assert bill_confidence(0.0, 0.0, 0.0, 0.0, 100, False) == pytest.approx(0.05)
        assert bill_confidence(0.0, 0.0, 0.0, 0.0, 101, False) == pytest.approx(0.10)

    def test_capped(self) -> None:
        assert bill_confidence(1.0, 1.0, 1.0, 1.0, 500, True) == 0.99

    def test_floored_at_zero(self) -> None:
        weights = ConfidenceWeights(short_text_bonus=-1.0)
        assert bill_confidence(0.0, 0.0, 0.0, 0.0, 0, False, weights) == 0.0


class TestReceiptConfidence:
    """Tests for the receipt confidence formula."""

    def test_weighted_sum(self) -> None:
        confidence = receipt_confidence(store=1.0, date=1.0, total=0.7, item_bonus=0.18)
        assert confidence == pytest.approx(0.20 + 0.15 + 0.14 + 0.18)

    def test_nothing_found(self) -> None:
        assert receipt_confidence(0.0, 0.0, 0.0, 0.0) == 0.0

    def test_capped(self) -> None:
        assert receipt_confidence(1.0, 1.0, 1.0, 1.0) == 0.95

    def test_configurable_base(self) -> None:
        weights = ReceiptConfidenceWeights(base=0.5)
        assert receipt_confidence(0.0, 0.0, 0.0, 0.0, weights) == 0.5
