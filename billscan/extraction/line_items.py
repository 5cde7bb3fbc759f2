"""Receipt line-item extraction.

Every receipt line that survives the rejection rules is tried against an
ordered list of item shapes; the first shape that matches decides the
name, quantity and price. The sum of the items is later compared with
the separately extracted total, which is the most trustworthy signal a
receipt offers.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from billscan.utils.config import LineItemConfig
from billscan.utils.logger import get_logger

from .amount import parse_money
from .category import classify_item
from .taxonomy import ITEM_KEYWORDS, ItemCategory, KeywordTable
from .vendor import clean_name

logger = get_logger(__name__)

EXCLUDED_TERMS: tuple[str, ...] = (
    "total",
    "subtotal",
    "tax",
    "change",
    "tender",
    "cash",
    "card",
    "credit",
    "debit",
    "thank you",
    "receipt",
    "store",
    "phone",
    "address",
    "visit",
    "www",
    "customer",
    "cashier",
    "register",
    "transaction",
    "approved",
    "account",
    "balance",
    "due",
    "refund",
    "return",
    "policy",
    "survey",
    "save",
    "rewards",
    "member",
    "number",
)

_EXCLUDED = re.compile(
    r"\b(?:"
    + "|".join(re.escape(term).replace(r"\ ", r"\s+") for term in EXCLUDED_TERMS)
    + r")\b",
    re.IGNORECASE,
)
_DIGITS_ONLY = re.compile(r"^[\d\s\-().,/:#*$]+$")
_CAPS_HEADER = re.compile(r"^[A-Z\s]{10,}$")

_PRICE = r"\$?(\d+(?:\.\d+)?)"


@dataclass(frozen=True)
class ItemShape:
    """One item-line layout and the roles of its capture groups."""

    name: str
    regex: re.Pattern
    name_group: int
    price_group: int
    quantity_group: int | None = None
    unit_price: bool = False


ITEM_SHAPES: tuple[ItemShape, ...] = (
    ItemShape(
        "qty_name_price",
        re.compile(r"^(\d{1,2})\s+(.+?)\s+" + _PRICE + r"\s*$"),
        name_group=2,
        price_group=3,
        quantity_group=1,
    ),
    ItemShape(
        "name_qty_unit",
        re.compile(r"^(.+?)\s+(\d{1,2})\s*[x@]\s*" + _PRICE + r"\s*$", re.IGNORECASE),
        name_group=1,
        price_group=3,
        quantity_group=2,
        unit_price=True,
    ),
    ItemShape(
        "name_code_price",
        re.compile(r"^(.+?)\s+\d{8,}\s+" + _PRICE + r"\s*$"),
        name_group=1,
        price_group=2,
    ),
    ItemShape(
        "name_sale_price",
        re.compile(
            r"^(.+?)\s+(?:sale|reg|discount)\s*" + _PRICE + r"\s*$", re.IGNORECASE
        ),
        name_group=1,
        price_group=2,
    ),
    ItemShape(
        "name_price",
        re.compile(r"^(.{3,40}?)\s+" + _PRICE + r"\s*$"),
        name_group=1,
        price_group=2,
    ),
)


@dataclass(frozen=True)
class ReceiptLineItem:
    """One product line of a receipt."""

    name: str
    quantity: int
    price: Decimal
    category: StrEnum = ItemCategory.OTHER

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "price": str(self.price),
            "category": str(self.category),
        }


def is_candidate_line(line: str, config: LineItemConfig | None = None) -> bool:
    """Reject totals, payment lines, bare numbers and all-caps headers."""
    config = config or LineItemConfig()
    if not config.min_line_length <= len(line) <= config.max_line_length:
        return False
    return not (
        _EXCLUDED.search(line) or _DIGITS_ONLY.match(line) or _CAPS_HEADER.match(line)
    )


def parse_item_line(
    line: str,
    config: LineItemConfig | None = None,
    table: KeywordTable = ITEM_KEYWORDS,
) -> ReceiptLineItem | None:
    """Parse a single receipt line into an item.

    Args:
        line: One normalized receipt line.
        config: Length and price limits.
        table: Item category keywords.

    Returns:
        The item, or ``None`` if the line is rejected, matches no shape
        or yields an implausible name or price.
    """
    config = config or LineItemConfig()
    if not is_candidate_line(line, config):
        return None

    for shape in ITEM_SHAPES:
        match = shape.regex.match(line)
        if match:
            break
    else:
        return None

    raw_name = match.group(shape.name_group).strip()
    price = parse_money(match.group(shape.price_group))
    quantity = 1
    if shape.quantity_group is not None:
        quantity = max(1, int(match.group(shape.quantity_group)))
    if price is not None and shape.unit_price:
        price = price * quantity

    if price is None or not (0 < price < Decimal(str(config.max_price))):
        return None
    if len(raw_name) <= 2:
        return None
    name = clean_name(raw_name)
    if not name:
        return None

    return ReceiptLineItem(
        name=name,
        quantity=quantity,
        price=price,
        category=classify_item(name, table),
    )


def extract_line_items(
    lines: Sequence[str],
    config: LineItemConfig | None = None,
    table: KeywordTable = ITEM_KEYWORDS,
) -> list[ReceiptLineItem]:
    """Extract the unique items of a receipt, most expensive first.

    Items are deduplicated by case-insensitive name keeping the first
    occurrence, then sorted by price descending and capped.

    Args:
        lines: Normalized receipt lines.
        config: Item limits.
        table: Item category keywords.

    Returns:
        At most ``config.max_items`` items.
    """
    config = config or LineItemConfig()
    seen: set[str] = set()
    items: list[ReceiptLineItem] = []

    for line in lines:
        item = parse_item_line(line, config, table)
        if item is None:
            continue
        key = item.name.lower()
        if key in seen:
            continue
        seen.add(key)
        items.append(item)

    items.sort(key=lambda item: item.price, reverse=True)
    logger.debug("Parsed %d unique line items", len(items))
    return items[: config.max_items]


def items_match_total(
    items: Sequence[ReceiptLineItem], total: Decimal, tolerance: float = 0.2
) -> bool:
    """Check the item prices add up to within ``tolerance`` of ``total``."""
    if not items or total <= 0:
        return False
    items_total = sum((item.price for item in items), Decimal("0"))
    return abs(total - items_total) / total < Decimal(str(tolerance))


def line_item_confidence(
    items: Sequence[ReceiptLineItem],
    total: Decimal,
    config: LineItemConfig | None = None,
) -> float:
    """Confidence contributed by the items of a receipt.

    Args:
        items: Unique items.
        total: Extracted receipt total.
        config: Bonus settings.

    Returns:
        A capped per-item bonus, plus a fixed bonus when the items add
        up to the total.
    """
    config = config or LineItemConfig()
    bonus = min(config.item_bonus * len(items), config.item_bonus_cap)
    if items_match_total(items, total, config.total_tolerance):
        bonus += config.total_match_bonus
    return bonus
