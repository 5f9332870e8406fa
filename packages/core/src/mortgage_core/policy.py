"""Lending and purchase-tax policy constants.

The multipliers and percentages here are domain conventions, not derived
values: they describe how a conservative lender and the purchase-tax
authority treat a household buying a home. Change them here and nowhere
else.

Updated: 2025 purchase-tax schedule
"""

from decimal import Decimal

from .models import (
    OPEN_ENDED_CEILING,
    OneTimeExpense,
    PurchaseTaxPolicy,
    TaxBracket,
)


# =============================================================================
# VERSION TRACKING
# =============================================================================

POLICY_VERSION = "2025.1"


def get_policy_version() -> str:
    """Return current policy version."""
    return POLICY_VERSION


# =============================================================================
# BORROWING POLICY
# =============================================================================

# Debts with at least this many months left count toward monthly debt service.
LONG_TERM_DEBT_MIN_MONTHS = 18

# Mortgage allowed per unit of net liquid funds.
SAVINGS_LEVERAGE_MULTIPLIER = Decimal("4")

# Maximum financing as a percentage of the purchase price.
FIRST_HOME_FINANCING_PCT = Decimal("75")
ADDITIONAL_HOME_FINANCING_PCT = Decimal("50")

# A monthly payment gap is expressed as this many months of extra income.
ADDITIONAL_INCOME_MONTHS = Decimal("3")


def get_financing_percentage(is_first_home: bool) -> Decimal:
    """Maximum loan-to-price percentage for the home type."""
    return FIRST_HOME_FINANCING_PCT if is_first_home else ADDITIONAL_HOME_FINANCING_PCT


# =============================================================================
# SAVINGS AND FEES
# =============================================================================

# Capital-gains rate assumed for savings recorded before the rate was tracked.
DEFAULT_ASSET_TAX_RATE = Decimal("25")

# Statutory surcharge charged on top of professional fees.
PROFESSIONAL_FEE_SURCHARGE_PCT = Decimal("18")

DEFAULT_LEGAL_FEE_RATE = Decimal("0.5")
DEFAULT_BROKER_FEE_RATE = Decimal("2")


# =============================================================================
# PURCHASE TAX BRACKETS
# =============================================================================
# (ceiling, rate %) pairs, ascending. The last ceiling is open-ended.

MAX_TAX_BRACKETS = 6

FIRST_HOME_TAX_BRACKETS = (
    (Decimal("1978745"), Decimal("0")),
    (Decimal("2347040"), Decimal("3.5")),
    (Decimal("6055070"), Decimal("5")),
    (Decimal("20183565"), Decimal("8")),
    (OPEN_ENDED_CEILING, Decimal("10")),
)

ADDITIONAL_HOME_TAX_BRACKETS = (
    (Decimal("6055070"), Decimal("8")),
    (OPEN_ENDED_CEILING, Decimal("10")),
)


def get_default_brackets(is_first_home: bool) -> tuple[TaxBracket, ...]:
    """Canonical bracket schedule for the home type.

    Args:
        is_first_home: True for the household's only home

    Returns:
        Ascending brackets ending in the open-ended one
    """
    table = FIRST_HOME_TAX_BRACKETS if is_first_home else ADDITIONAL_HOME_TAX_BRACKETS
    return tuple(TaxBracket(ceiling=ceiling, rate=rate) for ceiling, rate in table)


def default_purchase_tax_policy(is_first_home: bool = True) -> PurchaseTaxPolicy:
    """Purchase-tax policy seeded with the canonical schedule."""
    return PurchaseTaxPolicy(
        is_first_home=is_first_home,
        brackets=get_default_brackets(is_first_home),
    )


# =============================================================================
# DEFAULT ONE-TIME EXPENSES
# =============================================================================
# Typical costs of closing on and moving into a home.

DEFAULT_EXPENSES = (
    ("Moving", Decimal("8000")),
    ("Furnishing", Decimal("20000")),
    ("Air conditioning", Decimal("20000")),
    ("Renovation", Decimal("50000")),
    ("Mortgage advisor", Decimal("8000")),
    ("Appraiser", Decimal("4000")),
    ("Home inspection", Decimal("2000")),
    ("Surveyor", Decimal("7000")),
    ("Notary", Decimal("500")),
    ("Land registry extract", Decimal("17")),
    ("Condominium file", Decimal("38")),
    ("Land authority fee", Decimal("83")),
    ("Land registry recording", Decimal("43")),
    ("Developer rights registration", Decimal("85")),
    ("Mortgage file opening fee", Decimal("2500")),
    ("Utility account transfers", Decimal("3000")),
    ("Lien registration fee", Decimal("119")),
    ("Document preparation fee", Decimal("1000")),
)


def get_default_expenses() -> tuple[OneTimeExpense, ...]:
    """Seed list of one-time purchase expenses."""
    return tuple(OneTimeExpense(name=name, amount=amount) for name, amount in DEFAULT_EXPENSES)
