"""Mortgage Core - Household mortgage affordability calculations."""

__version__ = "0.1.0"

from .calculator import AffordabilityCalculator, calculate_affordability
from .config import (
    CalculatorPreferences,
    MortgagePlannerConfig,
    ReturnPowerFraction,
    configure_logging,
    load_preferences,
)
from .exceptions import (
    ConfigurationError,
    MortgagePlannerError,
    SnapshotError,
    ValidationError,
)
from .migration import (
    dump_household_state,
    load_household_state,
    reset_household_state,
    upgrade_document,
)
from .models import (
    AffordabilityReport,
    AssetStatus,
    AuditEntry,
    BracketTaxLine,
    CapacityBreakdown,
    DebtObligation,
    HouseholdFinancialState,
    IncomeSample,
    LiquidAsset,
    OneTimeExpense,
    PaymentComparison,
    ProfessionalFee,
    PurchaseTaxPolicy,
    TaxBracket,
)
from .policy import (
    POLICY_VERSION,
    default_purchase_tax_policy,
    get_default_brackets,
    get_default_expenses,
)
from .purchase_tax import bracket_tax, bracket_tax_breakdown

__all__ = [
    # Calculator
    "AffordabilityCalculator",
    "calculate_affordability",
    # Configuration
    "CalculatorPreferences",
    "MortgagePlannerConfig",
    "ReturnPowerFraction",
    "configure_logging",
    "load_preferences",
    # Exceptions
    "MortgagePlannerError",
    "ValidationError",
    "SnapshotError",
    "ConfigurationError",
    # Snapshot handling
    "upgrade_document",
    "load_household_state",
    "dump_household_state",
    "reset_household_state",
    # Household models
    "AssetStatus",
    "IncomeSample",
    "DebtObligation",
    "LiquidAsset",
    "OneTimeExpense",
    "TaxBracket",
    "PurchaseTaxPolicy",
    "HouseholdFinancialState",
    # Result models
    "AffordabilityReport",
    "AuditEntry",
    "BracketTaxLine",
    "CapacityBreakdown",
    "PaymentComparison",
    "ProfessionalFee",
    # Policy
    "POLICY_VERSION",
    "default_purchase_tax_policy",
    "get_default_brackets",
    "get_default_expenses",
    # Purchase tax
    "bracket_tax",
    "bracket_tax_breakdown",
]
