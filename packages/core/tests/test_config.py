"""Tests for the configuration system."""

from decimal import Decimal

import pytest
import structlog
import structlog.testing

from mortgage_core.config import (
    CalculatorPreferences,
    MortgagePlannerConfig,
    ReturnPowerFraction,
    configure_logging,
    load_preferences,
    parse_return_power_fraction,
)
from mortgage_core.exceptions import ConfigurationError


class TestReturnPowerFraction:
    """Test suite for ReturnPowerFraction enum."""

    def test_fraction_values(self):
        """ReturnPowerFraction should have expected values."""
        assert ReturnPowerFraction.ONE_THIRD.value == "1/3"
        assert ReturnPowerFraction.FORTY_PERCENT.value == "0.4"

    def test_multipliers(self):
        assert ReturnPowerFraction.FORTY_PERCENT.multiplier == Decimal("0.4")
        assert ReturnPowerFraction.ONE_THIRD.multiplier == Decimal(1) / Decimal(3)

    @pytest.mark.parametrize(
        "stored, expected",
        [
            ("1/3", ReturnPowerFraction.ONE_THIRD),
            (1 / 3, ReturnPowerFraction.ONE_THIRD),
            ("0.3333333333333333", ReturnPowerFraction.ONE_THIRD),
            (33, ReturnPowerFraction.ONE_THIRD),
            ("0.4", ReturnPowerFraction.FORTY_PERCENT),
            (0.4, ReturnPowerFraction.FORTY_PERCENT),
            (40, ReturnPowerFraction.FORTY_PERCENT),
            (ReturnPowerFraction.FORTY_PERCENT, ReturnPowerFraction.FORTY_PERCENT),
            (None, ReturnPowerFraction.ONE_THIRD),
        ],
    )
    def test_stored_values(self, stored, expected):
        """Current and legacy stored encodings map onto the enumeration."""
        assert parse_return_power_fraction(stored) == expected

    @pytest.mark.parametrize("stored", [0.5, "half", "nan", 25])
    def test_unknown_values_normalised_to_one_third(self, stored):
        assert parse_return_power_fraction(stored) == ReturnPowerFraction.ONE_THIRD


class TestCalculatorPreferences:
    """Test suite for CalculatorPreferences."""

    def test_default_values(self):
        """CalculatorPreferences should have sensible defaults."""
        preferences = CalculatorPreferences()

        assert preferences.return_power_fraction == ReturnPowerFraction.ONE_THIRD
        assert preferences.legal_fee_rate == Decimal("0.5")
        assert preferences.broker_fee_rate == Decimal("2")

    def test_custom_values(self):
        """CalculatorPreferences should accept custom values."""
        preferences = CalculatorPreferences(
            return_power_fraction="0.4",
            legal_fee_rate=Decimal("0.75"),
            broker_fee_rate=Decimal("1.5"),
        )

        assert preferences.return_power_fraction == ReturnPowerFraction.FORTY_PERCENT
        assert preferences.legal_fee_rate == Decimal("0.75")
        assert preferences.broker_fee_rate == Decimal("1.5")

    def test_legacy_fraction_accepted(self):
        preferences = CalculatorPreferences(return_power_fraction=33)
        assert preferences.return_power_fraction == ReturnPowerFraction.ONE_THIRD

    def test_fee_rate_validation(self):
        """Fee rates should be percentages between 0 and 100."""
        CalculatorPreferences(legal_fee_rate=Decimal("0"))
        CalculatorPreferences(broker_fee_rate=Decimal("100"))

        with pytest.raises(ValueError):
            CalculatorPreferences(legal_fee_rate=Decimal("-0.1"))

        with pytest.raises(ValueError):
            CalculatorPreferences(broker_fee_rate=Decimal("100.5"))

    def test_frozen(self):
        """Preferences are passed by value and cannot be changed in place."""
        preferences = CalculatorPreferences()
        with pytest.raises(ValueError):
            preferences.broker_fee_rate = Decimal("1")

    def test_from_environment(self, monkeypatch):
        """CalculatorPreferences should load from environment variables."""
        monkeypatch.setenv("MORTGAGE_PREFS_RETURN_POWER_FRACTION", "0.4")
        monkeypatch.setenv("MORTGAGE_PREFS_LEGAL_FEE_RATE", "1")
        monkeypatch.setenv("MORTGAGE_PREFS_BROKER_FEE_RATE", "1.25")

        preferences = CalculatorPreferences()

        assert preferences.return_power_fraction == ReturnPowerFraction.FORTY_PERCENT
        assert preferences.legal_fee_rate == Decimal("1")
        assert preferences.broker_fee_rate == Decimal("1.25")


class TestLoadPreferences:
    """Test suite for building preferences from the preference store."""

    def test_stored_keys(self):
        preferences = load_preferences(
            {
                "return-power-percentage": 33,
                "lawyer-percentage": "1",
                "broker-percentage": "1.5",
            }
        )

        assert preferences.return_power_fraction == ReturnPowerFraction.ONE_THIRD
        assert preferences.legal_fee_rate == Decimal("1")
        assert preferences.broker_fee_rate == Decimal("1.5")

    def test_missing_keys_take_defaults(self):
        preferences = load_preferences({"return-power-percentage": None})

        assert preferences.return_power_fraction == ReturnPowerFraction.ONE_THIRD
        assert preferences.broker_fee_rate == Decimal("2")

    def test_missing_keys_ignore_environment(self, monkeypatch):
        """Defaults for absent keys come from the code, not MORTGAGE_PREFS_*."""
        monkeypatch.setenv("MORTGAGE_PREFS_RETURN_POWER_FRACTION", "0.4")
        monkeypatch.setenv("MORTGAGE_PREFS_BROKER_FEE_RATE", "1.25")

        preferences = load_preferences({"lawyer-percentage": "1"})

        assert preferences.return_power_fraction == ReturnPowerFraction.ONE_THIRD
        assert preferences.legal_fee_rate == Decimal("1")
        assert preferences.broker_fee_rate == Decimal("2")

    def test_invalid_fee_raises_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_preferences({"broker-percentage": "150"})

        assert exc_info.value.config_key == "broker_fee_rate"
        assert str(exc_info.value.actual) == "150"

    def test_non_numeric_fee_raises_configuration_error(self):
        with pytest.raises(ConfigurationError):
            load_preferences({"lawyer-percentage": "a lot"})


class TestMortgagePlannerConfig:
    """Test suite for MortgagePlannerConfig."""

    def test_default_values(self):
        """MortgagePlannerConfig should have sensible defaults."""
        config = MortgagePlannerConfig()

        assert config.env == "development"
        assert config.log_level == "INFO"
        assert config.preferences.return_power_fraction == ReturnPowerFraction.ONE_THIRD

    def test_custom_nested_preferences(self):
        """Should accept custom nested preferences."""
        config = MortgagePlannerConfig(
            preferences=CalculatorPreferences(broker_fee_rate=Decimal("1.5")),
        )
        assert config.preferences.broker_fee_rate == Decimal("1.5")

    def test_environment_validation(self):
        """Environment should be validated."""
        MortgagePlannerConfig(env="development")
        MortgagePlannerConfig(env="staging")
        MortgagePlannerConfig(env="production")
        MortgagePlannerConfig(env="test")

        with pytest.raises(ValueError):
            MortgagePlannerConfig(env="invalid")

    def test_environment_case_insensitive(self):
        """Environment should be case-insensitive."""
        config = MortgagePlannerConfig(env="PRODUCTION")
        assert config.env == "production"

    def test_log_level_validation(self):
        """Log level should be validated."""
        MortgagePlannerConfig(log_level="DEBUG")
        MortgagePlannerConfig(log_level="CRITICAL")

        with pytest.raises(ValueError):
            MortgagePlannerConfig(log_level="INVALID")

    def test_log_level_case_insensitive(self):
        config = MortgagePlannerConfig(log_level="Warning")
        assert config.log_level == "WARNING"

    def test_is_production_property(self):
        """is_production should return True only in production."""
        assert MortgagePlannerConfig(env="production").is_production is True
        assert MortgagePlannerConfig(env="development").is_production is False

    def test_from_environment(self, monkeypatch):
        """MortgagePlannerConfig should load from environment variables."""
        monkeypatch.setenv("MORTGAGE_PLANNER_ENV", "production")
        monkeypatch.setenv("MORTGAGE_PLANNER_LOG_LEVEL", "WARNING")

        config = MortgagePlannerConfig()

        assert config.env == "production"
        assert config.log_level == "WARNING"

    def test_loads_from_dotenv_file(self, tmp_path, monkeypatch):
        """MortgagePlannerConfig should load from .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text(
            "MORTGAGE_PLANNER_ENV=staging\n"
            "MORTGAGE_PLANNER_LOG_LEVEL=ERROR\n"
            "MORTGAGE_PREFS_RETURN_POWER_FRACTION=40\n"
            "MORTGAGE_PREFS_BROKER_FEE_RATE=1.5\n"
        )

        # Change to temp directory so .env is found
        monkeypatch.chdir(tmp_path)

        config = MortgagePlannerConfig()

        assert config.env == "staging"
        assert config.log_level == "ERROR"
        assert config.preferences.return_power_fraction == ReturnPowerFraction.FORTY_PERCENT
        assert config.preferences.broker_fee_rate == Decimal("1.5")


class TestConfigureLogging:
    """Test suite for configure_logging."""

    @pytest.fixture(autouse=True)
    def reset_structlog(self):
        """Restore structlog defaults after each test."""
        yield
        structlog.reset_defaults()

    def test_events_below_level_are_dropped(self):
        configure_logging(MortgagePlannerConfig(log_level="WARNING"))

        with structlog.testing.capture_logs() as captured:
            structlog.get_logger().info("tax_bracket_added")
            structlog.get_logger().warning("return_power_fraction_normalised")

        assert [entry["event"] for entry in captured] == ["return_power_fraction_normalised"]

    def test_debug_level_keeps_everything(self):
        configure_logging(MortgagePlannerConfig(log_level="DEBUG"))

        with structlog.testing.capture_logs() as captured:
            structlog.get_logger().debug("affordability_calculation_step")

        assert len(captured) == 1

    def test_production_renders_json(self):
        configure_logging(MortgagePlannerConfig(env="production"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_development_renders_console(self):
        configure_logging(MortgagePlannerConfig(env="development"))

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
