"""Bill and receipt parsing from OCR text.

Turns noisy OCR output from photographed bills and retail receipts into
structured, confidence-scored records: vendor, amount, dates, service
category, account metadata and, for receipts, categorized line items.
"""

from billscan.pipeline.parser import DocumentParser, parse_bill, parse_receipt
from billscan.pipeline.records import ExtractedBillRecord, ExtractedReceiptRecord

__all__ = [
    "DocumentParser",
    "ExtractedBillRecord",
    "ExtractedReceiptRecord",
    "parse_bill",
    "parse_receipt",
]
