"""Configuration management for the bill and receipt parser.

All scoring coefficients used by the extractors and the confidence
aggregator live here as pydantic models with defaults, so they can be
tuned from a YAML file instead of being edited in code.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class AmountScoringConfig(BaseModel):
    """Priority adjustments applied to amount candidates."""

    total_bonus: int = 5
    balance_bonus: int = 3
    current_charges_bonus: int = 2
    phone_penalty: int = 8
    phone_value_threshold: float = 1_000_000
    small_value_penalty: int = 5
    small_value_threshold: float = 1.0
    large_value_penalty: int = 3
    large_value_threshold: float = 50_000
    confidence_divisor: float = 15.0


class DateConfig(BaseModel):
    """Accepted year window for document and transaction dates."""

    years_back: int = 3
    years_forward: int = 1


class LineItemConfig(BaseModel):
    """Limits and confidence contributions for receipt line items."""

    min_line_length: int = 3
    max_line_length: int = 80
    max_price: float = 1000.0
    max_items: int = 25
    item_bonus: float = 0.02
    item_bonus_cap: float = 0.2
    total_tolerance: float = 0.2
    total_match_bonus: float = 0.1


class ConfidenceWeights(BaseModel):
    """Per-field weights for the overall bill confidence."""

    amount: float = 0.30
    date: float = 0.20
    vendor: float = 0.20
    category: float = 0.15
    long_text_bonus: float = 0.10
    short_text_bonus: float = 0.05
    long_text_threshold: int = 100
    account_bonus: float = 0.05
    cap: float = 0.99


class ReceiptConfidenceWeights(BaseModel):
    """Per-field weights for the overall receipt confidence."""

    base: float = 0.0
    store: float = 0.20
    date: float = 0.15
    total: float = 0.20
    cap: float = 0.95


class ParserConfig(BaseModel):
    """Settings for the document parser itself."""

    min_text_length: int = 10
    word_confidence_threshold: float = 70.0
    taxonomy_path: str | None = None


class AppConfig(BaseModel):
    """Top-level application configuration."""

    parser: ParserConfig = Field(default_factory=ParserConfig)
    amount: AmountScoringConfig = Field(default_factory=AmountScoringConfig)
    dates: DateConfig = Field(default_factory=DateConfig)
    line_items: LineItemConfig = Field(default_factory=LineItemConfig)
    bill_weights: ConfidenceWeights = Field(default_factory=ConfidenceWeights)
    receipt_weights: ReceiptConfidenceWeights = Field(
        default_factory=ReceiptConfidenceWeights
    )
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.

    Raises:
        yaml.YAMLError: If the file is not valid YAML.
        pydantic.ValidationError: If a value has the wrong type.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
