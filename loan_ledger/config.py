"""Configuration management for loan-ledger."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from loan_ledger.exceptions import ConfigurationError


@dataclass
class LedgerConfig:
    """Calendar and tolerance settings used around the finance engine."""

    days_per_month: int = 30
    weeks_per_month: int = 4
    bad_loan_tolerance: Decimal = Decimal("10")

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict."""
        return {
            "days_per_month": self.days_per_month,
            "weeks_per_month": self.weeks_per_month,
            "bad_loan_tolerance": str(self.bad_loan_tolerance),
        }


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class ScenarioConfig:
    """Configuration for loan book scenario execution."""

    name: str
    num_customers: int = 50
    approval_rate: float = 0.80
    repayment_rate: float = 0.70
    fee_rate: float = 0.05
    labels: dict[str, Any] = field(default_factory=dict)


@dataclass
class LoanLedgerConfig:
    """Main configuration for loan-ledger."""

    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    scenario: ScenarioConfig | None = None
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "LoanLedgerConfig":
        """Create config from environment variables."""
        import os

        ledger = LedgerConfig(
            days_per_month=_parse_int("DAYS_PER_MONTH", os.getenv("DAYS_PER_MONTH", "30")),
            weeks_per_month=_parse_int("WEEKS_PER_MONTH", os.getenv("WEEKS_PER_MONTH", "4")),
            bad_loan_tolerance=_parse_decimal(
                "BAD_LOAN_TOLERANCE", os.getenv("BAD_LOAN_TOLERANCE", "10")
            ),
        )

        if ledger.days_per_month <= 0 or ledger.weeks_per_month <= 0:
            raise ConfigurationError("DAYS_PER_MONTH and WEEKS_PER_MONTH must be positive")

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        seed = os.getenv("SEED")

        return cls(
            ledger=ledger,
            output=output,
            seed=_parse_int("SEED", seed) if seed else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _parse_decimal(name: str, raw: str) -> Decimal:
    try:
        value = Decimal(raw)
    except InvalidOperation as e:
        raise ConfigurationError(f"{name} must be a decimal, got {raw!r}") from e
    if not value.is_finite():
        raise ConfigurationError(f"{name} must be finite, got {raw!r}")
    return value
