"""Tests for account, contact and charge metadata extraction."""

from decimal import Decimal

import pytest

from billscan.extraction.metadata import (
    extract_account_number,
    extract_contact_info,
    extract_email,
    extract_metadata,
    extract_phone,
    extract_service_details,
    extract_tax_amount,
    extract_website,
)
from billscan.preprocessing.normalizer import normalize_text


class TestAccountNumber:
    """Tests for account number extraction."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Account Number: 123456789", "123456789"),
            ("Acct #: AB-123456", "AB-123456"),
            ("Customer ID: 99887766", "99887766"),
            ("Policy No. HX-2024-551", "HX-2024-551"),
        ],
    )
    def test_labelled(self, text: str, expected: str) -> None:
        assert extract_account_number(text) == expected

    def test_identifier_needs_a_digit(self) -> None:
        assert extract_account_number("Account Number: Pending") is None


class TestContactInfo:
    """Tests for phone, email and website extraction."""

    def test_labelled_phone(self) -> None:
        assert extract_phone("Call 800-922-0204 today") == "800-922-0204"

    def test_bare_phone(self) -> None:
        assert extract_phone("Questions: (345) 949-5200") == "(345) 949-5200"

    def test_email(self) -> None:
        assert extract_email("Email billing@acme-power.com") == "billing@acme-power.com"

    def test_email_is_not_a_website(self) -> None:
        assert extract_website("Email billing@acme-power.com") is None

    def test_explicit_website(self) -> None:
        url = "https://www.cuc.ky/pay"
        assert extract_website(f"Visit {url}") == url

    def test_bare_domain(self) -> None:
        assert extract_website("Pay online at acmepower.ky") == "acmepower.ky"

    def test_empty_contact_info_is_none(self) -> None:
        assert extract_contact_info("Nothing useful") is None


class TestCharges:
    """Tests for tax and balance amounts."""

    def test_tax(self) -> None:
        assert extract_tax_amount("Sales Tax: $12.34") == Decimal("12.34")

    def test_no_tax(self) -> None:
        assert extract_tax_amount("Total: $5.00") is None

    def test_single_decimal_digit_keeps_cents(self) -> None:
        assert extract_tax_amount("Tax: $12.5") == Decimal("12.50")
        metadata = extract_metadata("Previous Balance: $1,210.5")
        assert metadata.previous_balance == Decimal("1210.50")


class TestServiceDetails:
    """Tests for plan, usage and billing period extraction."""

    def test_labelled_fields(self) -> None:
        text = (
            "Plan: Unlimited Plus\n"
            "Usage: 12.5 GB\n"
            "Billing Period: 02/01/2024 - 02/29/2024"
        )
        details = extract_service_details(text)
        assert details is not None
        assert details.plan_name == "Unlimited Plus"
        assert details.usage == "12.5 GB"
        assert details.billing_period == "02/01/2024 - 02/29/2024"

    def test_usage_quantity(self) -> None:
        details = extract_service_details("You used 850 kWh this month")
        assert details is not None
        assert details.usage == "850 kWh"
        assert details.plan_name is None

    def test_nothing_found(self) -> None:
        assert extract_service_details("Total 5") is None


class TestExtractMetadata:
    """Tests for the combined metadata pass."""

    def test_sample_bill(self, sample_bill_text: str) -> None:
        metadata = extract_metadata(normalize_text(sample_bill_text))
        assert metadata.account_number == "123456789"
        assert metadata.previous_balance == Decimal("210.00")
        assert metadata.current_charges == Decimal("245.67")
        assert metadata.tax_amount is None
        assert metadata.contact_info is not None
        assert metadata.contact_info.phone == "800-922-0204"
        assert metadata.contact_info.website == "www.verizon.com"
        assert metadata.contact_info.email is None
        assert metadata.service_details is None

    def test_empty_text(self) -> None:
        metadata = extract_metadata("")
        assert metadata.account_number is None
        assert metadata.contact_info is None
        assert metadata.service_details is None
