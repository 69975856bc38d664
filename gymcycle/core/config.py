"""
Billing Engine Configuration.

Policy constants for the billing-cycle engine, overridable through the
environment (``BILLING_`` prefix) or a ``.env`` file.
Source: https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BillingSettings(BaseSettings):
    """
    Billing-cycle policy settings.

    Date math never depends on these values; they only move the thresholds
    the eligibility gate and lifecycle rules compare against.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="BILLING_",
    )

    # =========================================================================
    # Eligibility Policy
    # =========================================================================
    PAYMENT_WINDOW_DAYS: int = Field(
        default=7,
        ge=0,
        description="Days before the due date from which a renewal may be recorded",
    )
    REJOIN_MAX_BACKDATE_DAYS: int = Field(
        default=15,
        ge=0,
        description="How far in the past a reactivation start date may be",
    )
    REMINDER_DAYS_AHEAD: int = Field(
        default=3,
        ge=0,
        description="Look-ahead used when listing upcoming payment reminders",
    )
    INSTALLMENT_LOOKAHEAD_DAYS: int = Field(
        default=7,
        ge=0,
        description="Look-ahead used when listing upcoming installments",
    )
    INSTALLMENT_FREQUENCY_DAYS: int = Field(
        default=30,
        ge=1,
        description="Default spacing between installment due dates",
    )

    # =========================================================================
    # Logging
    # =========================================================================
    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_JSON: bool = Field(default=False, description="Emit JSON log lines")
    LOG_FILE: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case and validate the log level name."""
        level = v.strip().upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


_billing_settings: Optional[BillingSettings] = None


def get_billing_settings() -> BillingSettings:
    """
    Get cached billing settings instance.

    Returns:
        BillingSettings instance
    """
    global _billing_settings
    if _billing_settings is None:
        _billing_settings = BillingSettings()
    return _billing_settings
