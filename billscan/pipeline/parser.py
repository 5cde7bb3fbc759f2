"""Document parser: normalize, run the field extractors, assemble a record.

The parser holds only immutable configuration and keyword tables, so a
single instance can be shared by any number of threads.
"""

from collections.abc import Iterable
from datetime import date
from enum import StrEnum
from pathlib import Path

from billscan.extraction.amount import extract_amount, extract_receipt_total
from billscan.extraction.category import classify_service
from billscan.extraction.dates import extract_dates, extract_transaction_date
from billscan.extraction.line_items import extract_line_items, line_item_confidence
from billscan.extraction.metadata import extract_metadata
from billscan.extraction.taxonomy import load_taxonomy
from billscan.extraction.vendor import (
    UNKNOWN_COMPANY,
    UNKNOWN_STORE,
    run_strategies,
    store_strategies,
    vendor_strategies,
)
from billscan.preprocessing.normalizer import (
    RawDocumentText,
    WordConfidence,
    prepare_document,
    summarize_word_confidence,
)
from billscan.utils.config import AppConfig
from billscan.utils.logger import get_logger

from .aggregator import bill_confidence, receipt_confidence
from .records import ExtractedBillRecord, ExtractedReceiptRecord

logger = get_logger(__name__)


class DocumentType(StrEnum):
    BILL = "bill"
    RECEIPT = "receipt"


class DocumentParser:
    """Parses OCR text of bills and receipts into records.

    Args:
        config: Application configuration. Defaults are used when omitted.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        taxonomy_path = self.config.parser.taxonomy_path
        self.taxonomy = load_taxonomy(Path(taxonomy_path) if taxonomy_path else None)
        self._vendor_strategies = vendor_strategies(self.taxonomy)
        self._store_strategies = store_strategies(self.taxonomy)

    def _prepare(
        self, text: str | None, words: Iterable[WordConfidence] | None
    ) -> RawDocumentText | None:
        """Normalize ``text``; ``None`` when it is too short to parse."""
        doc = prepare_document(text)
        summarize_word_confidence(words, self.config.parser.word_confidence_threshold)

        if len(doc.text.strip()) < self.config.parser.min_text_length:
            logger.warning(
                "Text too short to parse (%d chars), manual entry required",
                len(doc.text.strip()),
            )
            return None
        return doc

    def parse_bill(
        self,
        text: str | None,
        words: Iterable[WordConfidence] | None = None,
        reference_date: date | None = None,
    ) -> ExtractedBillRecord:
        """Extract the fields of a bill.

        Args:
            text: Raw OCR text.
            words: Optional per-word OCR confidences, used as a diagnostic.
            reference_date: Date the accepted year window is centred on.
                Defaults to today.

        Returns:
            A fully populated record. Unparseable input yields the default
            record with confidence 0.
        """
        doc = self._prepare(text, words)
        if doc is None:
            return ExtractedBillRecord()

        amount = extract_amount(doc.text, self.config.amount)
        dates = extract_dates(doc.text, reference_date, self.config.dates)
        vendor = run_strategies(doc, self._vendor_strategies, UNKNOWN_COMPANY)
        category = classify_service(
            doc.text,
            vendor.value if vendor.found else None,
            self.taxonomy.service_keywords,
            self.taxonomy.service_subcategories,
        )
        metadata = extract_metadata(doc.text)

        confidence = bill_confidence(
            amount=amount.confidence,
            date=dates.confidence,
            vendor=vendor.confidence,
            category=category.confidence,
            text_length=len(doc.text),
            has_account=metadata.account_number is not None,
            weights=self.config.bill_weights,
        )

        record = ExtractedBillRecord(
            vendor_name=vendor.value,
            amount=amount.value,
            document_date=dates.document_date,
            due_date=dates.due_date,
            service_category=category.value,
            service_subcategory=category.subcategory,
            account_number=metadata.account_number,
            tax_amount=metadata.tax_amount,
            previous_balance=metadata.previous_balance,
            current_charges=metadata.current_charges,
            contact_info=metadata.contact_info,
            service_details=metadata.service_details,
            confidence=confidence,
        )
        logger.info(
            "Parsed bill: %s, $%s, %s, confidence %.2f",
            record.vendor_name,
            record.amount,
            record.service_category,
            record.confidence,
        )
        return record

    def parse_receipt(
        self,
        text: str | None,
        words: Iterable[WordConfidence] | None = None,
        reference_date: date | None = None,
    ) -> ExtractedReceiptRecord:
        """Extract the store, date, total and line items of a receipt.

        Args:
            text: Raw OCR text.
            words: Optional per-word OCR confidences, used as a diagnostic.
            reference_date: Date used for the year window and recency.
                Defaults to today.

        Returns:
            A fully populated record. Unparseable input yields the default
            record with confidence 0.
        """
        doc = self._prepare(text, words)
        if doc is None:
            return ExtractedReceiptRecord()

        store = run_strategies(doc, self._store_strategies, UNKNOWN_STORE)
        transaction_date = extract_transaction_date(
            doc.lines, reference_date, self.config.dates
        )
        total = extract_receipt_total(doc.lines)
        items = extract_line_items(
            doc.lines, self.config.line_items, self.taxonomy.item_keywords
        )

        confidence = receipt_confidence(
            store=store.confidence,
            date=transaction_date.confidence,
            total=total.confidence,
            item_bonus=line_item_confidence(
                items, total.value, self.config.line_items
            ),
            weights=self.config.receipt_weights,
        )

        record = ExtractedReceiptRecord(
            store_name=store.value,
            transaction_date=transaction_date.value,
            total_amount=total.value,
            items=tuple(items),
            confidence=confidence,
        )
        logger.info(
            "Parsed receipt: %s, %d items, total $%s, confidence %.2f",
            record.store_name,
            len(record.items),
            record.total_amount,
            record.confidence,
        )
        return record

    def parse(
        self,
        text: str | None,
        document_type: DocumentType | str = DocumentType.BILL,
        words: Iterable[WordConfidence] | None = None,
        reference_date: date | None = None,
    ) -> ExtractedBillRecord | ExtractedReceiptRecord:
        """Parse ``text`` as the given document type.

        Raises:
            ValueError: If ``document_type`` is not ``bill`` or ``receipt``.
        """
        if DocumentType(document_type) is DocumentType.RECEIPT:
            return self.parse_receipt(text, words, reference_date)
        return self.parse_bill(text, words, reference_date)


_default_parser: DocumentParser | None = None


def _get_default_parser() -> DocumentParser:
    global _default_parser
    if _default_parser is None:
        _default_parser = DocumentParser()
    return _default_parser


def parse_bill(
    text: str | None,
    words: Iterable[WordConfidence] | None = None,
    reference_date: date | None = None,
) -> ExtractedBillRecord:
    """Parse a bill with the default configuration."""
    return _get_default_parser().parse_bill(text, words, reference_date)


def parse_receipt(
    text: str | None,
    words: Iterable[WordConfidence] | None = None,
    reference_date: date | None = None,
) -> ExtractedReceiptRecord:
    """Parse a receipt with the default configuration."""
    return _get_default_parser().parse_receipt(text, words, reference_date)
