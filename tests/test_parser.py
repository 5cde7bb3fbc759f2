"""End-to-end tests for the document parser."""

import logging
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from billscan import (
    DocumentParser,
    ExtractedBillRecord,
    ExtractedReceiptRecord,
    parse_bill,
    parse_receipt,
)
from billscan.extraction.taxonomy import ItemCategory, ServiceCategory
from billscan.pipeline.parser import DocumentType
from billscan.preprocessing.normalizer import WordConfidence
from billscan.utils.config import AppConfig, ConfidenceWeights, ParserConfig

ADVERSARIAL_TEXTS = [
    "",
    "   ",
    "!!!!!!!!!!!!!!",
    "$" * 200,
    "TOTAL TOTAL TOTAL 99999999999999",
    "0O0O0O0O0O 1l1l1l1l 5S5S8B8B",
    "\x00\x01\x02 garbage \x7f\x80 text",
    "Total: $-5.00\nDue: 02/30/2024\n" * 50,
]


class TestParseBill:
    """Tests for bill parsing."""

    def setup_method(self) -> None:
        self.parser = DocumentParser()

    def test_minimal_verizon_scenario(self) -> None:
        text = (
            "Verizon Wireless\n"
            "Invoice Date: 03/15/2024\n"
            "Total Amount Due: $245.67"
        )
        record = self.parser.parse_bill(text, reference_date=date(2024, 6, 1))
        assert record.amount == Decimal("245.67")
        assert record.vendor_name == "Verizon"
        assert record.document_date == date(2024, 3, 15)
        assert record.service_category == ServiceCategory.INTERNET_TELECOM
        assert record.confidence > 0.5

    def test_full_bill(self, sample_bill_text: str, reference_date: date) -> None:
        record = self.parser.parse_bill(sample_bill_text, reference_date=reference_date)
        assert record.vendor_name == "Verizon"
        assert record.amount == Decimal("245.67")
        assert record.document_date == date(2024, 3, 15)
        assert record.due_date == date(2024, 4, 10)
        assert record.service_category == ServiceCategory.INTERNET_TELECOM
        assert record.service_subcategory == "Mobile Phone"
        assert record.account_number == "123456789"
        assert record.previous_balance == Decimal("210.00")
        assert record.current_charges == Decimal("245.67")
        assert record.contact_info is not None
        assert record.contact_info.website == "www.verizon.com"
        # 0.30 + 0.20*0.5 + 0.20*0.8 + 0.15 + long text 0.10 + account 0.05
        assert record.confidence == pytest.approx(0.86)

    def test_known_entity_short_circuits(self) -> None:
        record = self.parser.parse_bill(
            "Caribbean power bill\nPayable to CUC\nAmount Due: $180.25"
        )
        assert record.vendor_name == "CUC"
        assert record.service_category == ServiceCategory.UTILITIES
        assert record.service_subcategory == "Electricity"

    def test_ocr_noise_is_corrected(self) -> None:
        text = "Verizon Wireless\nT0TAL AMOUNT DUE: $1O5.5O"
        assert self.parser.parse_bill(text).amount == Decimal("105.50")

    def test_empty_input_gives_defaults(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            record = self.parser.parse_bill("")
        assert record == ExtractedBillRecord()
        assert record.confidence == 0.0
        assert record.vendor_name == "Unknown Company"
        assert record.amount == Decimal("0")
        assert record.service_category == ServiceCategory.OTHER
        assert record.service_subcategory is None
        assert "manual entry required" in caplog.text

    @pytest.mark.parametrize("text", [None, "Hi there", " \n\t "])
    def test_unparseable_input_gives_defaults(self, text: str | None) -> None:
        assert self.parser.parse_bill(text) == ExtractedBillRecord()

    def test_word_confidences_are_diagnostic_only(self, sample_bill_text: str) -> None:
        words = [WordConfidence("Verizon", 96.0), WordConfidence("Tota1", 41.0)]
        reference = date(2024, 3, 20)
        with_words = self.parser.parse_bill(sample_bill_text, words, reference)
        without = self.parser.parse_bill(sample_bill_text, reference_date=reference)
        assert with_words == without

    def test_weights_from_config(self, sample_bill_text: str) -> None:
        parser = DocumentParser(AppConfig(bill_weights=ConfidenceWeights(cap=0.5)))
        assert parser.parse_bill(sample_bill_text).confidence <= 0.5

    def test_taxonomy_from_config(self, tmp_path: Path) -> None:
        path = tmp_path / "taxonomy.yaml"
        path.write_text(
            yaml.dump({"known_vendors": [{"name": "Acme Power", "confidence": 0.9}]})
        )
        config = AppConfig(parser=ParserConfig(taxonomy_path=str(path)))
        record = DocumentParser(config).parse_bill("ACME POWER\nAmount Due: $80.00")
        assert record.vendor_name == "Acme Power"

    def test_to_dict(self, sample_bill_text: str, reference_date: date) -> None:
        data = self.parser.parse_bill(sample_bill_text, reference_date=reference_date)
        result = data.to_dict()
        assert result["amount"] == "245.67"
        assert result["document_date"] == "2024-03-15"
        assert result["service_category"] == "Internet/Telecom"
        assert result["service_subcategory"] == "Mobile Phone"
        assert result["contact_info"]["phone"] == "800-922-0204"
        assert result["service_details"] is None


class TestParseReceipt:
    """Tests for receipt parsing."""

    def setup_method(self) -> None:
        self.parser = DocumentParser()

    def test_full_receipt(self, sample_receipt_text: str, reference_date: date) -> None:
        record = self.parser.parse_receipt(
            sample_receipt_text, reference_date=reference_date
        )
        assert record.store_name == "Walmart"
        assert record.transaction_date == date(2024, 3, 15)
        assert record.total_amount == Decimal("13.64")
        assert [item.name for item in record.items] == [
            "Apples",
            "Whole Milk",
            "Bread",
            "Bananas",
        ]
        assert record.items[0].quantity == 2
        assert record.items[0].category == ItemCategory.PRODUCE
        # store 0.2 + date 0.15*recency + total 0.2*0.7 + items 0.08 + match 0.1
        expected = 0.2 + 0.15 * (1 - 5 / 365) + 0.14 + 0.08 + 0.1
        assert record.confidence == pytest.approx(expected)

    def test_items_are_a_tuple(self, sample_receipt_text: str) -> None:
        record = self.parser.parse_receipt(sample_receipt_text)
        assert isinstance(record.items, tuple)

    def test_empty_input_gives_defaults(self) -> None:
        record = self.parser.parse_receipt("")
        assert record == ExtractedReceiptRecord()
        assert record.store_name == "Unknown Store"
        assert record.items == ()
        assert record.confidence == 0.0

    def test_to_dict(self, sample_receipt_text: str, reference_date: date) -> None:
        record = self.parser.parse_receipt(
            sample_receipt_text, reference_date=reference_date
        )
        result = record.to_dict()
        assert result["total_amount"] == "13.64"
        assert result["transaction_date"] == "2024-03-15"
        assert result["items"][0] == {
            "name": "Apples",
            "quantity": 2,
            "price": "4.99",
            "category": "Produce & Fresh",
        }


class TestParseDispatch:
    """Tests for document type dispatch and module-level helpers."""

    def test_parse_receipt_type(self, sample_receipt_text: str) -> None:
        record = DocumentParser().parse(sample_receipt_text, "receipt")
        assert isinstance(record, ExtractedReceiptRecord)

    def test_parse_bill_type(self, sample_bill_text: str) -> None:
        record = DocumentParser().parse(sample_bill_text, DocumentType.BILL)
        assert isinstance(record, ExtractedBillRecord)

    def test_unknown_type(self) -> None:
        with pytest.raises(ValueError):
            DocumentParser().parse("Some text here", "invoice")

    def test_module_level_helpers(
        self, sample_bill_text: str, sample_receipt_text: str
    ) -> None:
        assert parse_bill(sample_bill_text).vendor_name == "Verizon"
        assert parse_receipt(sample_receipt_text).store_name == "Walmart"


class TestConfidenceBounds:
    """Confidence stays in range for any input."""

    @pytest.mark.parametrize("text", ADVERSARIAL_TEXTS)
    def test_bill_bounds(self, text: str) -> None:
        record = parse_bill(text)
        assert 0.0 <= record.confidence <= 0.99
        assert record.amount >= 0

    @pytest.mark.parametrize("text", ADVERSARIAL_TEXTS)
    def test_receipt_bounds(self, text: str) -> None:
        record = parse_receipt(text)
        assert 0.0 <= record.confidence <= 0.95
        assert all(0 < item.price < 1000 for item in record.items)
