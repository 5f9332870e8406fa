"""Configuration and standalone preferences for the mortgage planner.

Pydantic Settings-based configuration with environment variable support.
The calculator never reads settings on its own: callers build a
``CalculatorPreferences`` once per recompute and pass it in.

Usage:
    from mortgage_core.config import MortgagePlannerConfig

    config = MortgagePlannerConfig()
    report = AffordabilityCalculator().calculate(state, config.preferences)
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Any

import structlog
from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .policy import DEFAULT_BROKER_FEE_RATE, DEFAULT_LEGAL_FEE_RATE

logger = structlog.get_logger()


class ReturnPowerFraction(str, Enum):
    """Share of residual income that may go to the mortgage payment."""

    ONE_THIRD = "1/3"
    FORTY_PERCENT = "0.4"

    @property
    def multiplier(self) -> Decimal:
        if self is ReturnPowerFraction.ONE_THIRD:
            return Decimal(1) / Decimal(3)
        return Decimal("0.4")


# Stored values seen in older snapshots, mapped to the enumeration.
# 33 is the legacy whole-percent encoding of one third.
_FRACTION_ALIASES = {
    "1/3": ReturnPowerFraction.ONE_THIRD,
    "33": ReturnPowerFraction.ONE_THIRD,
    "0.4": ReturnPowerFraction.FORTY_PERCENT,
    "40": ReturnPowerFraction.FORTY_PERCENT,
}


def parse_return_power_fraction(value: Any) -> ReturnPowerFraction:
    """Map a stored preference value onto the two allowed fractions.

    Any value that is not one of them is normalised to one third.
    """
    if isinstance(value, ReturnPowerFraction):
        return value
    if value is None:
        return ReturnPowerFraction.ONE_THIRD

    text = str(value).strip()
    if text in _FRACTION_ALIASES:
        return _FRACTION_ALIASES[text]

    try:
        number = Decimal(text)
    except ArithmeticError:
        number = None

    if number is not None and number.is_finite():
        if abs(number - ReturnPowerFraction.ONE_THIRD.multiplier) < Decimal("0.0001"):
            return ReturnPowerFraction.ONE_THIRD
        if number in (Decimal("0.4"), Decimal("40")):
            return ReturnPowerFraction.FORTY_PERCENT
        if number == Decimal("33"):
            return ReturnPowerFraction.ONE_THIRD

    logger.warning("return_power_fraction_normalised", stored=text, used=ReturnPowerFraction.ONE_THIRD.value)
    return ReturnPowerFraction.ONE_THIRD


class CalculatorPreferences(BaseSettings):
    """Standalone numeric preferences used by the affordability calculator.

    Environment Variables:
        MORTGAGE_PREFS_RETURN_POWER_FRACTION: "1/3" or "0.4"
        MORTGAGE_PREFS_LEGAL_FEE_RATE: Lawyer fee, percent of price
        MORTGAGE_PREFS_BROKER_FEE_RATE: Broker fee, percent of price
    """

    model_config = SettingsConfigDict(
        env_prefix="MORTGAGE_PREFS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    return_power_fraction: ReturnPowerFraction = Field(
        default=ReturnPowerFraction.ONE_THIRD,
        description="Share of residual income available for the mortgage payment",
    )
    legal_fee_rate: Decimal = Field(
        default=DEFAULT_LEGAL_FEE_RATE,
        ge=0,
        le=100,
        description="Lawyer fee as a percentage of the purchase price",
    )
    broker_fee_rate: Decimal = Field(
        default=DEFAULT_BROKER_FEE_RATE,
        ge=0,
        le=100,
        description="Broker fee as a percentage of the purchase price",
    )

    @field_validator("return_power_fraction", mode="before")
    @classmethod
    def normalise_return_power_fraction(cls, v: Any) -> ReturnPowerFraction:
        """Accept legacy stored encodings of the fraction."""
        return parse_return_power_fraction(v)


class MortgagePlannerConfig(BaseSettings):
    """Root configuration for the mortgage planner.

    Environment Variables:
        MORTGAGE_PLANNER_ENV: Environment name (development, staging, production, test)
        MORTGAGE_PLANNER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)

    Example:
        config = MortgagePlannerConfig(
            preferences=CalculatorPreferences(broker_fee_rate=Decimal("1.5")),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="MORTGAGE_PLANNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    preferences: CalculatorPreferences = Field(default_factory=CalculatorPreferences)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"


def configure_logging(config: MortgagePlannerConfig) -> None:
    """Configure structlog from the planner configuration.

    Events below ``config.log_level`` are dropped. Production renders JSON
    lines; other environments render human-readable console output.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if config.is_production
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(config.log_level)),
    )
    logger.debug("logging_configured", env=config.env, log_level=config.log_level)


def load_preferences(stored: dict[str, Any]) -> CalculatorPreferences:
    """Build preferences from values read out of the preference store.

    Keys are the persisted names (``return-power-percentage``,
    ``lawyer-percentage``, ``broker-percentage``). A missing key takes the
    built-in default; ``MORTGAGE_PREFS_*`` environment variables and
    ``.env`` are not consulted.

    Raises:
        ConfigurationError: If a fee rate is not a number within 0-100
    """
    values: dict[str, Any] = {
        "return_power_fraction": stored.get("return-power-percentage"),
        "legal_fee_rate": stored.get("lawyer-percentage"),
        "broker_fee_rate": stored.get("broker-percentage"),
    }
    if values["return_power_fraction"] is None:
        values["return_power_fraction"] = ReturnPowerFraction.ONE_THIRD
    if values["legal_fee_rate"] is None:
        values["legal_fee_rate"] = DEFAULT_LEGAL_FEE_RATE
    if values["broker_fee_rate"] is None:
        values["broker_fee_rate"] = DEFAULT_BROKER_FEE_RATE

    try:
        return CalculatorPreferences(**values)
    except PydanticValidationError as e:
        first = e.errors()[0]
        key = str(first["loc"][0]) if first.get("loc") else None
        raise ConfigurationError(
            f"Invalid preference value: {first['msg']}",
            config_key=key,
            expected="number between 0 and 100",
            actual=first.get("input"),
        ) from e
