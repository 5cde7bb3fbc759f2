"""Result records returned by the document parser.

Records are always fully populated: a field that could not be extracted
holds its default, never a partially built object. Callers decide from
``confidence`` whether a document needs manual review.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum

from billscan.extraction.line_items import ReceiptLineItem
from billscan.extraction.metadata import ContactInfo, ServiceDetails
from billscan.extraction.taxonomy import ServiceCategory
from billscan.extraction.vendor import UNKNOWN_COMPANY, UNKNOWN_STORE

__all__ = [
    "ExtractedBillRecord",
    "ExtractedReceiptRecord",
    "ReceiptLineItem",
]


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value else None


def _money(value: Decimal | None) -> str | None:
    return str(value) if value is not None else None


@dataclass(frozen=True)
class ExtractedBillRecord:
    """Structured fields of a utility or service bill."""

    vendor_name: str = UNKNOWN_COMPANY
    amount: Decimal = Decimal("0")
    document_date: date | None = None
    due_date: date | None = None
    service_category: StrEnum = ServiceCategory.OTHER
    service_subcategory: str | None = None
    account_number: str | None = None
    tax_amount: Decimal | None = None
    previous_balance: Decimal | None = None
    current_charges: Decimal | None = None
    contact_info: ContactInfo | None = None
    service_details: ServiceDetails | None = None
    confidence: float = 0.0

    def to_dict(self) -> dict:
        """JSON-friendly view with ISO dates and string amounts."""
        return {
            "vendor_name": self.vendor_name,
            "amount": _money(self.amount),
            "document_date": _iso(self.document_date),
            "due_date": _iso(self.due_date),
            "service_category": str(self.service_category),
            "service_subcategory": self.service_subcategory,
            "account_number": self.account_number,
            "tax_amount": _money(self.tax_amount),
            "previous_balance": _money(self.previous_balance),
            "current_charges": _money(self.current_charges),
            "contact_info": (
                {
                    "phone": self.contact_info.phone,
                    "email": self.contact_info.email,
                    "website": self.contact_info.website,
                }
                if self.contact_info
                else None
            ),
            "service_details": (
                {
                    "plan_name": self.service_details.plan_name,
                    "usage": self.service_details.usage,
                    "billing_period": self.service_details.billing_period,
                }
                if self.service_details
                else None
            ),
            "confidence": round(self.confidence, 4),
        }


@dataclass(frozen=True)
class ExtractedReceiptRecord:
    """Structured fields of a retail receipt."""

    store_name: str = UNKNOWN_STORE
    transaction_date: date | None = None
    total_amount: Decimal = Decimal("0")
    items: tuple[ReceiptLineItem, ...] = ()
    confidence: float = 0.0

    def to_dict(self) -> dict:
        """JSON-friendly view with ISO dates and string amounts."""
        return {
            "store_name": self.store_name,
            "transaction_date": _iso(self.transaction_date),
            "total_amount": _money(self.total_amount),
            "items": [item.to_dict() for item in self.items],
            "confidence": round(self.confidence, 4),
        }
