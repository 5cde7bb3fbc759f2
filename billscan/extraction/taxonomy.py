"""Category keyword tables and known vendor/store lists.

The built-in tables are immutable module data. A YAML file can replace
any of them (see :func:`load_taxonomy`); the classifier and vendor
strategies always receive the tables as explicit arguments.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType

import yaml

from billscan.utils.logger import get_logger

logger = get_logger(__name__)


class ServiceCategory(StrEnum):
    """Closed set of bill service categories."""

    INTERNET_TELECOM = "Internet/Telecom"
    UTILITIES = "Utilities"
    INSURANCE = "Insurance"
    SOFTWARE_SAAS = "Software/SaaS"
    OFFICE_SUPPLIES = "Office Supplies"
    PROFESSIONAL_SERVICES = "Professional Services"
    HEALTHCARE = "Healthcare"
    MAINTENANCE_REPAIRS = "Maintenance/Repairs"
    FINANCIAL_SERVICES = "Financial Services"
    OTHER = "Other"


class ItemCategory(StrEnum):
    """Closed set of receipt line-item categories."""

    PRODUCE = "Produce & Fresh"
    MEAT_SEAFOOD = "Meat & Seafood"
    DAIRY_EGGS = "Dairy & Eggs"
    PANTRY = "Pantry & Dry Goods"
    BEVERAGES = "Beverages"
    SNACKS = "Snacks & Candy"
    FROZEN = "Frozen Foods"
    HEALTH_BEAUTY = "Health & Beauty"
    HOUSEHOLD = "Household & Cleaning"
    BABY_PET = "Baby & Pet"
    OTHER = "Other"


KeywordTable = Mapping[str, tuple[str, ...]]

SERVICE_KEYWORDS: KeywordTable = MappingProxyType(
    {
        ServiceCategory.INTERNET_TELECOM: (
            "internet", "broadband", "wifi", "fiber", "dsl", "cable", "phone",
            "mobile", "cellular", "wireless", "telecom", "telecommunications",
            "verizon", "att", "at&t", "sprint", "tmobile", "t-mobile", "comcast",
            "xfinity", "spectrum", "cox", "optimum", "frontier", "centurylink",
            "dish", "directv", "satellite", "digicel", "flow",
        ),
        ServiceCategory.UTILITIES: (
            "electric", "electricity", "gas", "natural gas", "water", "sewer",
            "utility", "utilities", "power", "energy", "pge", "pacific gas",
            "edison", "duke energy", "florida power", "xcel energy", "coned",
            "consolidated edison", "national grid", "pepco", "dominion",
            "entergy", "progress energy", "ameren", "kwh", "cuc",
        ),
        ServiceCategory.INSURANCE: (
            "insurance", "policy", "premium", "coverage", "auto insurance",
            "car insurance", "health insurance", "life insurance",
            "home insurance", "property insurance", "liability", "geico",
            "state farm", "allstate", "progressive", "farmers", "usaa",
            "nationwide", "liberty mutual", "travelers",
        ),
        ServiceCategory.SOFTWARE_SAAS: (
            "software", "subscription", "license", "saas", "cloud", "microsoft",
            "office 365", "adobe", "google", "aws", "amazon web services",
            "salesforce", "hubspot", "slack", "zoom", "dropbox", "netflix",
            "spotify", "apple", "icloud", "github", "figma", "canva", "notion",
        ),
        ServiceCategory.OFFICE_SUPPLIES: (
            "office", "supplies", "staples", "office depot", "best buy", "amazon",
            "paper", "printer", "ink", "toner", "pens", "pencils", "folders",
            "binders", "desk", "chair", "furniture", "equipment",
        ),
        ServiceCategory.PROFESSIONAL_SERVICES: (
            "consulting", "legal", "attorney", "lawyer", "accounting",
            "bookkeeping", "cpa", "tax prep", "professional", "marketing",
            "advertising", "design", "development", "freelance",
        ),
        ServiceCategory.HEALTHCARE: (
            "medical", "healthcare", "doctor", "physician", "dentist", "dental",
            "hospital", "clinic", "pharmacy", "prescription", "medicine",
            "therapy", "treatment", "lab", "laboratory", "imaging",
        ),
        ServiceCategory.MAINTENANCE_REPAIRS: (
            "maintenance", "repair", "fix", "cleaning", "hvac", "plumbing",
            "electrical", "roofing", "landscaping", "pest control", "security",
            "garage door", "appliance repair",
        ),
        ServiceCategory.FINANCIAL_SERVICES: (
            "bank", "banking", "credit card", "loan", "mortgage", "investment",
            "financial", "payment processing", "paypal", "stripe", "square",
            "quickbooks", "accounting software", "tax software",
        ),
    }
)

SubcategoryTable = Mapping[str, KeywordTable]

# Subcategories per service category; a bill gets the subcategory whose
# keywords score highest, or none when no keyword occurs.
SERVICE_SUBCATEGORIES: SubcategoryTable = MappingProxyType(
    {
        ServiceCategory.INTERNET_TELECOM: MappingProxyType(
            {
                "Internet Service": (
                    "internet", "broadband", "wifi", "fiber", "dsl", "modem",
                ),
                "Mobile Phone": (
                    "mobile", "wireless", "cellular", "smartphone", "data plan",
                ),
                "Landline": ("landline", "home phone", "long distance"),
                "Cable TV": (
                    "cable tv", "television", "tv", "channels", "directv", "dish",
                    "satellite",
                ),
            }
        ),
        ServiceCategory.UTILITIES: MappingProxyType(
            {
                "Electricity": ("electric", "electricity", "power", "kwh"),
                "Gas": ("gas", "natural gas", "therm", "ccf"),
                "Water/Sewer": ("water", "sewer", "wastewater", "gallons"),
                "Waste Management": ("trash", "waste", "garbage", "recycling"),
                "Solar": ("solar",),
            }
        ),
        ServiceCategory.INSURANCE: MappingProxyType(
            {
                "Health Insurance": ("health insurance", "health", "medical"),
                "Business Insurance": (
                    "business insurance", "commercial insurance", "workers comp",
                ),
                "Professional Liability": ("professional liability", "liability"),
                "Property Insurance": (
                    "property insurance", "home insurance", "homeowners", "renters",
                ),
                "Auto Insurance": (
                    "auto insurance", "car insurance", "auto", "vehicle",
                ),
                "Life Insurance": ("life insurance",),
            }
        ),
        ServiceCategory.SOFTWARE_SAAS: MappingProxyType(
            {
                "Productivity Software": (
                    "microsoft", "office 365", "notion", "google workspace",
                ),
                "Design Software": ("adobe", "figma", "canva"),
                "Communication": ("slack", "zoom"),
                "Cloud Storage": ("dropbox", "icloud", "cloud storage", "backup"),
                "Development Tools": ("github", "aws", "amazon web services"),
                "Streaming": ("netflix", "spotify", "streaming"),
            }
        ),
        ServiceCategory.OFFICE_SUPPLIES: MappingProxyType(
            {
                "Stationery": (
                    "paper", "pens", "pencils", "folders", "binders", "notebook",
                ),
                "Printer Supplies": ("printer", "ink", "toner", "cartridge"),
                "Furniture": ("desk", "chair", "furniture"),
                "Electronics": ("electronics", "computer", "monitor", "laptop"),
                "General Supplies": ("supplies", "equipment"),
            }
        ),
        ServiceCategory.PROFESSIONAL_SERVICES: MappingProxyType(
            {
                "Legal Services": ("legal", "attorney", "lawyer"),
                "Accounting/Tax": ("accounting", "bookkeeping", "cpa", "tax prep"),
                "Consulting": ("consulting", "consultant", "advisory"),
                "Marketing Services": ("marketing", "advertising"),
                "Design Services": ("design", "development", "freelance"),
            }
        ),
        ServiceCategory.HEALTHCARE: MappingProxyType(
            {
                "Medical Visits": (
                    "doctor", "physician", "clinic", "hospital", "medical",
                ),
                "Dental": ("dentist", "dental"),
                "Pharmacy": ("pharmacy", "prescription", "medicine"),
                "Lab & Imaging": ("lab", "laboratory", "imaging"),
                "Therapy": ("therapy", "treatment"),
            }
        ),
        ServiceCategory.MAINTENANCE_REPAIRS: MappingProxyType(
            {
                "HVAC": ("hvac", "heating", "air conditioning"),
                "Plumbing": ("plumbing", "plumber"),
                "Electrical": ("electrical", "electrician", "wiring"),
                "Cleaning": ("cleaning", "janitorial"),
                "Landscaping": ("landscaping", "lawn", "pest control"),
                "General Repairs": (
                    "repair", "fix", "roofing", "garage door", "appliance repair",
                ),
            }
        ),
        ServiceCategory.FINANCIAL_SERVICES: MappingProxyType(
            {
                "Banking": ("bank", "banking"),
                "Credit Card": ("credit card",),
                "Loans & Mortgage": ("loan", "mortgage"),
                "Payment Processing": (
                    "payment processing", "paypal", "stripe", "square",
                ),
                "Investment": ("investment", "brokerage"),
                "Accounting Software": (
                    "quickbooks", "accounting software", "tax software",
                ),
            }
        ),
    }
)

ITEM_KEYWORDS: KeywordTable = MappingProxyType(
    {
        ItemCategory.PRODUCE: (
            "banana", "apple", "orange", "grape", "berry", "berries", "strawberry",
            "peach", "pear", "plum", "cherry", "cherries", "melon", "watermelon",
            "cantaloupe", "pineapple", "mango", "avocado", "lime", "lemon", "kiwi",
            "papaya", "coconut", "fig", "raisin", "cranberry", "blueberry", "raspberry",
            "blackberry", "lettuce", "spinach", "kale", "arugula", "cabbage",
            "broccoli", "cauliflower", "carrot", "celery", "onion", "garlic",
            "potato", "potatoes", "tomato", "tomatoes", "cucumber", "bell pepper",
            "jalapeno", "mushroom", "zucchini", "squash", "eggplant", "asparagus",
            "corn", "peas", "radish", "beet", "turnip", "parsley", "cilantro",
            "basil", "herb", "organic", "fresh", "produce", "fruit", "vegetable",
        ),
        ItemCategory.MEAT_SEAFOOD: (
            "beef", "chicken", "pork", "turkey", "lamb", "fish", "salmon", "tuna",
            "shrimp", "crab", "lobster", "bacon", "ham", "sausage", "ground beef",
            "steak", "chop", "fillet", "wing", "breast", "thigh", "roast", "deli",
            "lunch meat",
        ),
        ItemCategory.DAIRY_EGGS: (
            "milk", "cheese", "yogurt", "butter", "cream", "sour cream",
            "cottage cheese", "egg", "eggs", "half and half", "heavy cream",
            "whipped cream", "mozzarella", "cheddar", "swiss", "parmesan", "feta",
            "goat cheese",
        ),
        ItemCategory.PANTRY: (
            "bread", "pasta", "rice", "flour", "sugar", "salt", "spice", "sauce",
            "oil", "vinegar", "cereal", "oats", "quinoa", "barley", "lentil",
            "beans", "almond", "peanut butter", "walnut", "cashew", "pistachio",
            "seed", "honey", "maple syrup", "vanilla", "baking", "baking powder",
        ),
        ItemCategory.BEVERAGES: (
            "water", "juice", "soda", "cola", "pepsi", "coke", "sprite", "beer",
            "wine", "coffee", "tea", "energy drink", "sports drink",
            "vitamin water", "kombucha", "smoothie", "lemonade", "almond milk",
            "soy milk", "coconut milk",
        ),
        ItemCategory.SNACKS: (
            "chip", "chips", "cracker", "cookie", "cookies", "candy", "chocolate",
            "gum", "popcorn", "pretzel", "trail mix", "granola", "snack",
            "granola bar",
        ),
        ItemCategory.FROZEN: (
            "frozen", "ice cream", "pizza", "burrito", "frozen dinner", "waffle",
            "frozen meal", "frozen yogurt", "frozen vegetables",
        ),
        ItemCategory.HEALTH_BEAUTY: (
            "shampoo", "conditioner", "soap", "lotion", "toothpaste",
            "toothbrush", "deodorant", "perfume", "cologne", "makeup", "vitamin",
            "medicine", "bandage", "pain relief", "allergy", "cough", "cold",
        ),
        ItemCategory.HOUSEHOLD: (
            "paper towel", "toilet paper", "tissue", "detergent", "cleaner",
            "disinfectant", "bleach", "fabric softener", "dryer sheet",
            "trash bag", "aluminum foil", "plastic wrap", "storage bag",
            "light bulb", "battery", "batteries", "dish soap",
        ),
        ItemCategory.BABY_PET: (
            "diaper", "baby", "formula", "wipes", "pet", "dog", "cat", "dog food",
            "cat food", "treat", "toy", "litter",
        ),
    }
)

# (name, confidence). Earlier entries win, CUC is checked first. Brands that
# are also everyday words go last.
KNOWN_VENDORS: tuple[tuple[str, float], ...] = (
    ("CUC", 0.95),
    ("Caribbean Utilities", 0.8),
    ("Digicel", 0.8),
    ("Foster's", 0.8),
    ("Kirks", 0.8),
    ("Hurleys", 0.8),
    ("Verizon", 0.8),
    ("AT&T", 0.8),
    ("Sprint", 0.8),
    ("T-Mobile", 0.8),
    ("Comcast", 0.8),
    ("Xfinity", 0.8),
    ("Spectrum", 0.8),
    ("Cox", 0.8),
    ("Flow", 0.8),
    ("Logic", 0.8),
)

# Matched only as written or in capitals, so "cash flow" is not a vendor.
CASE_SENSITIVE_VENDORS: frozenset[str] = frozenset({"Flow", "Logic"})

# (regex fragment, display name) for retail chains on receipts.
KNOWN_STORES: tuple[tuple[str, str], ...] = (
    (r"wal-?mart", "Walmart"),
    (r"target", "Target"),
    (r"kroger", "Kroger"),
    (r"safeway", "Safeway"),
    (r"whole\s*foods", "Whole Foods Market"),
    (r"costco", "Costco Wholesale"),
    (r"sam'?s\s*club", "Sam's Club"),
    (r"trader\s*joe'?s?", "Trader Joe's"),
    (r"publix", "Publix"),
    (r"harris\s*teeter", "Harris Teeter"),
    (r"food\s*lion", "Food Lion"),
    (r"giant", "Giant"),
    (r"stop\s*&\s*shop", "Stop & Shop"),
    (r"meijer", "Meijer"),
    (r"wegmans", "Wegmans"),
    (r"aldi", "ALDI"),
    (r"lidl", "Lidl"),
    (r"home\s*depot", "The Home Depot"),
    (r"lowe'?s", "Lowe's"),
    (r"menards", "Menards"),
    (r"best\s*buy", "Best Buy"),
    (r"office\s*depot", "Office Depot"),
    (r"staples", "Staples"),
    (r"cvs", "CVS Pharmacy"),
    (r"walgreens", "Walgreens"),
    (r"rite\s*aid", "Rite Aid"),
    (r"amazon", "Amazon"),
    (r"dollar\s*tree", "Dollar Tree"),
    (r"dollar\s*general", "Dollar General"),
    (r"family\s*dollar", "Family Dollar"),
)


@dataclass(frozen=True)
class Taxonomy:
    """The full set of tables used by one parser instance."""

    service_keywords: KeywordTable = field(default_factory=lambda: SERVICE_KEYWORDS)
    service_subcategories: SubcategoryTable = field(
        default_factory=lambda: SERVICE_SUBCATEGORIES
    )
    item_keywords: KeywordTable = field(default_factory=lambda: ITEM_KEYWORDS)
    known_vendors: tuple[tuple[str, float], ...] = KNOWN_VENDORS
    known_stores: tuple[tuple[str, str], ...] = KNOWN_STORES


DEFAULT_TAXONOMY = Taxonomy()


def _freeze_keywords(
    raw: Mapping[str, list[str]], categories: type[StrEnum]
) -> KeywordTable:
    table: dict[str, tuple[str, ...]] = {}
    for name, keywords in raw.items():
        try:
            category = categories(name)
        except ValueError as exc:
            raise ValueError(f"Unknown category in taxonomy: {name}") from exc
        table[category] = tuple(str(k).lower() for k in keywords or [])
    return MappingProxyType(table)


def _freeze_subcategories(
    raw: Mapping[str, Mapping[str, list[str]]],
) -> SubcategoryTable:
    table: dict[str, KeywordTable] = {}
    for name, subcategories in raw.items():
        try:
            category = ServiceCategory(name)
        except ValueError as exc:
            raise ValueError(f"Unknown category in taxonomy: {name}") from exc
        table[category] = MappingProxyType(
            {
                str(sub): tuple(str(k).lower() for k in keywords or [])
                for sub, keywords in (subcategories or {}).items()
            }
        )
    return MappingProxyType(table)


def load_taxonomy(path: Path | None) -> Taxonomy:
    """Load category tables and entity lists from a YAML file.

    Keys that are absent keep the built-in table. Missing files fall
    back to :data:`DEFAULT_TAXONOMY`.

    Args:
        path: Path to a YAML file with any of ``service_categories``,
            ``service_subcategories``, ``item_categories``,
            ``known_vendors`` and ``known_stores``.

    Returns:
        Immutable taxonomy.

    Raises:
        ValueError: If a category name is not in the closed set.
    """
    if path is None or not path.exists():
        logger.debug("No taxonomy file at %s, using built-in tables", path)
        return DEFAULT_TAXONOMY

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    taxonomy = Taxonomy(
        service_keywords=(
            _freeze_keywords(data["service_categories"], ServiceCategory)
            if "service_categories" in data
            else SERVICE_KEYWORDS
        ),
        service_subcategories=(
            _freeze_subcategories(data["service_subcategories"])
            if "service_subcategories" in data
            else SERVICE_SUBCATEGORIES
        ),
        item_keywords=(
            _freeze_keywords(data["item_categories"], ItemCategory)
            if "item_categories" in data
            else ITEM_KEYWORDS
        ),
        known_vendors=(
            tuple(
                (v["name"], float(v.get("confidence", 0.8)))
                for v in data["known_vendors"]
            )
            if "known_vendors" in data
            else KNOWN_VENDORS
        ),
        known_stores=(
            tuple((s["pattern"], s["name"]) for s in data["known_stores"])
            if "known_stores" in data
            else KNOWN_STORES
        ),
    )
    logger.info("Loaded taxonomy from %s", path)
    return taxonomy
