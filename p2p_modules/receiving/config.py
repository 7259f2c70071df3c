"""
Receiving Configuration Schema.

Defines the structure and sensible defaults for receiving settings.
Actual values are loaded from company configuration at runtime.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any, Self

import yaml

from p2p_kernel.logging_config import get_logger
from p2p_modules.receiving.models import POStatus

logger = get_logger("modules.receiving.config")


@dataclass
class ReceivingConfig:
    """
    Configuration schema for the receiving workflow.

    Field defaults represent common industry practices.
    Override at instantiation with company-specific values:

        config = ReceivingConfig(
            over_receipt_tolerance_percent=Decimal("5"),
            payment_terms_days=45,
        )
    """

    # PO states from which goods may be received
    receivable_statuses: frozenset[POStatus] = field(
        default_factory=lambda: frozenset(
            {POStatus.SENT, POStatus.ACKNOWLEDGED, POStatus.PARTIAL}
        )
    )

    # Receiving
    over_receipt_tolerance_percent: Decimal = Decimal("10")

    # AP bill creation
    payment_terms_days: int = 30
    expense_account_code: str = "5001"
    prevent_duplicate_bills: bool = True

    # Inventory posting fan-out (1 = sequential)
    max_posting_workers: int = 1

    def __post_init__(self):
        if self.over_receipt_tolerance_percent < 0:
            raise ValueError("over_receipt_tolerance_percent cannot be negative")
        if self.payment_terms_days < 0:
            raise ValueError("payment_terms_days cannot be negative")
        if self.max_posting_workers < 1:
            raise ValueError("max_posting_workers must be at least 1")

        logger.info(
            "receiving_config_initialized",
            extra={
                "receivable_statuses": sorted(s.value for s in self.receivable_statuses),
                "over_receipt_tolerance_percent": str(self.over_receipt_tolerance_percent),
                "payment_terms_days": self.payment_terms_days,
                "expense_account_code": self.expense_account_code,
                "prevent_duplicate_bills": self.prevent_duplicate_bills,
                "max_posting_workers": self.max_posting_workers,
            },
        )

    @property
    def over_receipt_tolerance(self) -> Decimal:
        """Tolerance as a fraction of ordered quantity (10% -> 0.10)."""
        return self.over_receipt_tolerance_percent / Decimal("100")

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with industry-standard defaults."""
        logger.info("receiving_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary (e.g., loaded from database/file)."""
        logger.info(
            "receiving_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        data = dict(data)
        if "receivable_statuses" in data:
            data["receivable_statuses"] = frozenset(
                POStatus(s) for s in data["receivable_statuses"]
            )
        if "over_receipt_tolerance_percent" in data:
            data["over_receipt_tolerance_percent"] = Decimal(
                str(data["over_receipt_tolerance_percent"])
            )
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: Path | str) -> Self:
        """
        Load config from a YAML file.

        The file may hold the settings at top level or under a
        ``receiving:`` key.

        Raises:
            FileNotFoundError: if the file does not exist.
            yaml.YAMLError: if the file contains invalid YAML.
        """
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if "receiving" in data:
            data = data["receiving"] or {}
        return cls.from_dict(data)
