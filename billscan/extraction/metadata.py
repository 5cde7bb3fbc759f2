"""Opportunistic account, contact and charge details.

Each sub-extractor is independent and returns ``None`` when it finds
nothing. None of these fields is load-bearing; only the account number
feeds the overall confidence.
"""

import re
from dataclasses import dataclass
from decimal import Decimal

from billscan.utils.logger import get_logger

from .amount import parse_money

logger = get_logger(__name__)

_MONEY = r"\$?\s?(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)(?!\d|\.\d)"
# At least one digit so labels followed by plain words are skipped.
_IDENTIFIER = r"((?=[A-Z\-]*\d)[A-Z0-9][A-Z0-9\-]{5,19})\b"

ACCOUNT_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(
        r"\b(?:account\s*(?:number|#|no\.?)|acct\.?\s*(?:#|no\.?|number)?"
        r"|customer\s*(?:#|no\.?|id))\s*:?\s*" + _IDENTIFIER,
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?:policy\s*(?:number|#|no\.?)|ref\s*(?:#|no\.?))\s*:?\s*" + _IDENTIFIER,
        re.IGNORECASE,
    ),
)
_PHONE_NUMBER = r"\(?\d{3}\)?[\s.\-]*\d{3}[\s.\-]*\d{4}"
LABELLED_PHONE = re.compile(
    r"\b(?:phone|tel|call|contact)\.?\s*:?\s*(" + _PHONE_NUMBER + r")", re.IGNORECASE
)
BARE_PHONE = re.compile(r"(?<![\d\-])(\(?\d{3}\)?[\s.\-]\d{3}[\s.\-]\d{4})(?!\d)")
EMAIL = re.compile(r"([A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,})")
EXPLICIT_WEBSITE = re.compile(
    r"((?:https?://|www\.)[A-Za-z0-9](?:[A-Za-z0-9\-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9\-]+)*\.[A-Za-z]{2,}(?:/[^\s]*)?)",
    re.IGNORECASE,
)
BARE_DOMAIN = re.compile(
    r"(?<![@\w.\-])([A-Za-z0-9](?:[A-Za-z0-9\-]{0,61}[A-Za-z0-9])?"
    r"\.(?:com|net|org|gov|edu|biz|info|io|co|us|ca|ky|uk))\b",
    re.IGNORECASE,
)
TAX = re.compile(r"\b(?:sales\s*tax|tax(?:es)?|vat)\s*:?\s*" + _MONEY, re.IGNORECASE)
PREVIOUS_BALANCE = re.compile(
    r"\b(?:previous|prior|last)\s*(?:balance|amount)\s*:?\s*" + _MONEY, re.IGNORECASE
)
CURRENT_CHARGES = re.compile(
    r"\b(?:current|new)\s*charges\s*:?\s*" + _MONEY, re.IGNORECASE
)
PLAN = re.compile(r"\b(?:plan|package)(?:\s*name)?\s*:\s*([^\n]{2,60})", re.IGNORECASE)
LABELLED_USAGE = re.compile(r"\busage\s*:\s*([^\n]{2,60})", re.IGNORECASE)
USAGE_QUANTITY = re.compile(
    r"(\d[\d,]*(?:\.\d+)?\s*(?:kwh|gb|mb|minutes|mins|gallons|therms|ccf|texts))\b",
    re.IGNORECASE,
)
_PERIOD_DATE = (
    r"(?:\d{1,2}/\d{1,2}/\d{2,4}|\d{4}-\d{2}-\d{2}"
    r"|[A-Z][a-z]{2,8}\.?\s\d{1,2},?\s\d{4})"
)
BILLING_PERIOD = re.compile(
    r"\b(?:billing|service)\s*period\s*:?\s*("
    + _PERIOD_DATE
    + r"\s*(?:-|to|through)\s*"
    + _PERIOD_DATE
    + r")",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ContactInfo:
    """Vendor contact details found on a bill."""

    phone: str | None = None
    email: str | None = None
    website: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.phone or self.email or self.website)


@dataclass(frozen=True)
class ServiceDetails:
    """Plan, usage and billing period strings found on a bill."""

    plan_name: str | None = None
    usage: str | None = None
    billing_period: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.plan_name or self.usage or self.billing_period)


@dataclass(frozen=True)
class BillMetadata:
    """All optional enrichment fields of a bill."""

    account_number: str | None = None
    tax_amount: Decimal | None = None
    previous_balance: Decimal | None = None
    current_charges: Decimal | None = None
    contact_info: ContactInfo | None = None
    service_details: ServiceDetails | None = None


def _first_group(pattern: re.Pattern, text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1).strip() if match else None


def _first_money(pattern: re.Pattern, text: str) -> Decimal | None:
    return parse_money(_first_group(pattern, text))


def extract_account_number(text: str) -> str | None:
    """Account, customer or policy number following its label."""
    for pattern in ACCOUNT_PATTERNS:
        value = _first_group(pattern, text)
        if value:
            return value
    return None


def extract_phone(text: str) -> str | None:
    """Labelled phone number, else the first separated digit group."""
    return _first_group(LABELLED_PHONE, text) or _first_group(BARE_PHONE, text)


def extract_email(text: str) -> str | None:
    return _first_group(EMAIL, text)


def extract_website(text: str) -> str | None:
    """``http``/``www`` address, else a bare domain that is not an email."""
    return _first_group(EXPLICIT_WEBSITE, text) or _first_group(BARE_DOMAIN, text)


def extract_tax_amount(text: str) -> Decimal | None:
    return _first_money(TAX, text)


def extract_previous_balance(text: str) -> Decimal | None:
    return _first_money(PREVIOUS_BALANCE, text)


def extract_current_charges(text: str) -> Decimal | None:
    return _first_money(CURRENT_CHARGES, text)


def extract_contact_info(text: str) -> ContactInfo | None:
    """Phone, email and website, or ``None`` if none were found."""
    info = ContactInfo(
        phone=extract_phone(text),
        email=extract_email(text),
        website=extract_website(text),
    )
    return None if info.is_empty else info


def extract_service_details(text: str) -> ServiceDetails | None:
    """Plan name, usage and billing period, or ``None`` if none were found."""
    details = ServiceDetails(
        plan_name=_first_group(PLAN, text),
        usage=(
            _first_group(LABELLED_USAGE, text) or _first_group(USAGE_QUANTITY, text)
        ),
        billing_period=_first_group(BILLING_PERIOD, text),
    )
    return None if details.is_empty else details


def extract_metadata(text: str) -> BillMetadata:
    """Run every metadata sub-extractor over normalized bill text.

    Args:
        text: Normalized document text.

    Returns:
        Metadata with ``None`` for every field that was not found.
    """
    metadata = BillMetadata(
        account_number=extract_account_number(text),
        tax_amount=extract_tax_amount(text),
        previous_balance=extract_previous_balance(text),
        current_charges=extract_current_charges(text),
        contact_info=extract_contact_info(text),
        service_details=extract_service_details(text),
    )
    logger.debug(
        "Metadata: account=%s tax=%s previous=%s",
        metadata.account_number,
        metadata.tax_amount,
        metadata.previous_balance,
    )
    return metadata
