"""Settings helpers for the ledger engine."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import os

from finledger.domain.constants import (
    DEFAULT_ALERT_THRESHOLD,
    DEFAULT_WARNING_PERCENT,
)
from finledger.infrastructure.logging.logger import get_app_logger


@dataclass(frozen=True)
class LedgerSettings:
    """Tunable thresholds of the budget views.

    Attributes:
        budget_alert_threshold: Utilization percentage raising budget alerts.
        budget_warning_percent: Projected utilization raising a warning in
            the pre-transaction budget check.
    """

    budget_alert_threshold: Decimal = DEFAULT_ALERT_THRESHOLD
    budget_warning_percent: Decimal = DEFAULT_WARNING_PERCENT

    @classmethod
    def from_env(cls) -> "LedgerSettings":
        """Build settings from environment variables.

        Returns:
            LedgerSettings: Settings sourced from environment variables.
        """
        logger = get_app_logger()
        return cls(
            budget_alert_threshold=cls._percentage(
                "LEDGER_BUDGET_ALERT_THRESHOLD",
                DEFAULT_ALERT_THRESHOLD,
                logger=logger,
            ),
            budget_warning_percent=cls._percentage(
                "LEDGER_BUDGET_WARNING_PERCENT",
                DEFAULT_WARNING_PERCENT,
                logger=logger,
            ),
        )

    @staticmethod
    def _percentage(name: str, default: Decimal, logger) -> Decimal:
        """Read a percentage between 0 and 100 from the environment.

        Args:
            name: Environment variable name.
            default: Value used when the variable is unset or invalid.
            logger: Logger used for warnings.

        Returns:
            Decimal: Parsed percentage.
        """
        raw = os.getenv(name, "").strip()
        if not raw:
            return default
        try:
            value = Decimal(raw)
        except InvalidOperation:
            logger.warning(f"Ignoring non-numeric {name}={raw!r}")
            return default
        if not value.is_finite() or not 0 <= value <= 100:
            logger.warning(f"Ignoring out-of-range {name}={raw!r}")
            return default
        return value


__all__ = ["LedgerSettings"]
