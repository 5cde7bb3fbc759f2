"""Shared test fixtures for the bill and receipt parser test suite."""

from datetime import date
from pathlib import Path

import pytest

SAMPLE_BILL = """Verizon Wireless
PO Box 489
Newark, NJ 07101
Account Number: 123456789
Invoice Date: 03/15/2024
Due Date: 04/10/2024
Previous Balance: $210.00
Current Charges: $245.67
Total Amount Due: $245.67
Questions? Call 800-922-0204 or visit www.verizon.com
"""

SAMPLE_RECEIPT = """WALMART
03/15/2024 14:32
Bananas 3 x 0.59
2 Apples 4.99
Whole Milk 3.49
Bread 2.50
SUBTOTAL 12.75
TAX 0.89
TOTAL 13.64
CASH 20.00
CHANGE 6.36
Thank you for shopping
"""


@pytest.fixture
def sample_bill_text() -> str:
    """OCR text of a typical telecom bill."""
    return SAMPLE_BILL


@pytest.fixture
def sample_receipt_text() -> str:
    """OCR text of a short grocery receipt."""
    return SAMPLE_RECEIPT


@pytest.fixture
def reference_date() -> date:
    """Fixed 'today' so year-window checks do not depend on the clock."""
    return date(2024, 3, 20)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
