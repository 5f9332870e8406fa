"""Pure affordability formulas.

Every function here is deterministic and side-effect free. Degenerate input
(no valid samples, zero rate, non-positive price or term) resolves to a
defined value instead of raising, so the calculator can run on any
snapshot the household has typed in so far.
"""

from decimal import Decimal
from typing import Iterable, Sequence

from .models import (
    DebtObligation,
    IncomeSample,
    LiquidAsset,
    OneTimeExpense,
    ProfessionalFee,
)
from .policy import (
    DEFAULT_BROKER_FEE_RATE,
    DEFAULT_LEGAL_FEE_RATE,
    LONG_TERM_DEBT_MIN_MONTHS,
    PROFESSIONAL_FEE_SURCHARGE_PCT,
    SAVINGS_LEVERAGE_MULTIPLIER,
    get_financing_percentage,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
MONTHS_PER_YEAR = Decimal("12")


# =============================================================================
# INCOME
# =============================================================================

def average_income(samples: Iterable[IncomeSample]) -> Decimal:
    """Mean of the positive income samples, or 0 when there are none."""
    valid = [s.amount for s in samples if s.amount is not None and s.amount > 0]
    if not valid:
        return ZERO
    return sum(valid, ZERO) / len(valid)


def household_average_income(
    member1: Iterable[IncomeSample],
    member2: Iterable[IncomeSample],
) -> Decimal:
    """Sum of both members' independently averaged income."""
    return average_income(member1) + average_income(member2)


# =============================================================================
# DEBTS
# =============================================================================

def long_term_debt_service(debts: Iterable[DebtObligation]) -> Decimal:
    """Monthly payments of debts running 18 months or more."""
    return sum(
        (d.periodic_payment for d in debts if d.term_months >= LONG_TERM_DEBT_MIN_MONTHS),
        ZERO,
    )


def eligible_buying_power(debts: Iterable[DebtObligation]) -> Decimal:
    """Principal of debts whose proceeds count as purchase funds."""
    return sum((d.principal for d in debts if d.credit_eligible), ZERO)


# =============================================================================
# SAVINGS
# =============================================================================

def asset_tax(asset: LiquidAsset) -> Decimal:
    """Tax owed on an asset's gain; the principal is never taxed."""
    if not asset.taxable:
        return ZERO
    return asset.total_gain * asset.tax_rate / HUNDRED


def net_liquid_assets(assets: Iterable[LiquidAsset]) -> Decimal:
    """Open assets' total amount less the tax on their taxable gains."""
    open_assets = [a for a in assets if a.is_open]
    total = sum((a.total_amount for a in open_assets), ZERO)
    tax = sum((asset_tax(a) for a in open_assets), ZERO)
    return total - tax


# =============================================================================
# ANNUITY MATH
# =============================================================================

def monthly_rate(annual_rate: Decimal) -> Decimal:
    """Convert an annual percentage (5 for 5%) to a monthly fraction."""
    return annual_rate / HUNDRED / MONTHS_PER_YEAR


def annuity_present_value(payment: Decimal, rate: Decimal, months: Decimal) -> Decimal:
    """Principal a fixed monthly payment services over ``months``.

    PV = PMT * [1 - (1 + r)^-n] / r, or PMT * n when r is zero.
    """
    if rate == 0:
        return payment * months
    return payment * (1 - (1 + rate) ** -months) / rate


def amortized_payment(principal: Decimal, rate: Decimal, months: Decimal) -> Decimal:
    """Fixed monthly payment that retires ``principal`` over ``months``.

    PMT = P * r(1 + r)^n / [(1 + r)^n - 1], or P / n when r is zero.
    """
    if months <= 0:
        return ZERO
    if rate == 0:
        return principal / months
    growth = (1 + rate) ** months
    return principal * (rate * growth) / (growth - 1)


def monthly_payment(principal: Decimal, term_years: Decimal, annual_rate: Decimal) -> Decimal:
    """Monthly payment for a mortgage, 0 for any non-positive input."""
    if principal <= 0 or term_years <= 0 or annual_rate <= 0:
        return ZERO
    return amortized_payment(principal, monthly_rate(annual_rate), term_years * MONTHS_PER_YEAR)


# =============================================================================
# BORROWING CAPACITY
# =============================================================================

def monthly_allowance(
    total_average_income: Decimal,
    debt_service: Decimal,
    fraction: Decimal,
) -> Decimal:
    """Share of income left after debt service that may go to the mortgage."""
    return (total_average_income - debt_service) * fraction


def capacity_from_residual_income(
    allowance: Decimal,
    term_years: Decimal,
    annual_rate: Decimal,
) -> Decimal:
    """Largest mortgage the monthly allowance can service."""
    if allowance <= 0 or term_years <= 0 or annual_rate <= 0:
        return ZERO
    return annuity_present_value(allowance, monthly_rate(annual_rate), term_years * MONTHS_PER_YEAR)


def capacity_from_net_assets(net_assets: Decimal, buying_power: Decimal) -> Decimal:
    """Mortgage supported by the household's own funds (leverage of 4)."""
    return (net_assets + buying_power) * SAVINGS_LEVERAGE_MULTIPLIER


def capacity_from_purchase_price(purchase_price: Decimal, is_first_home: bool) -> Decimal:
    """Financing cap as a share of the price: 75% first home, 50% otherwise."""
    if purchase_price <= 0:
        return ZERO
    return purchase_price * get_financing_percentage(is_first_home) / HUNDRED


def recommend(capacities: Sequence[Decimal]) -> Decimal:
    """The most restrictive positive capacity, or 0 if none is positive."""
    positive = [c for c in capacities if c > 0]
    return min(positive) if positive else ZERO


# =============================================================================
# EXPENSES
# =============================================================================

def professional_fee(purchase_price: Decimal, rate: Decimal) -> ProfessionalFee:
    """Percentage-of-price fee plus the 18% surcharge on it."""
    base = purchase_price * rate / HUNDRED
    surcharge = base * PROFESSIONAL_FEE_SURCHARGE_PCT / HUNDRED
    return ProfessionalFee(rate=rate, base=base, surcharge=surcharge, total=base + surcharge)


def itemized_expenses(items: Iterable[OneTimeExpense]) -> Decimal:
    return sum((item.amount for item in items), ZERO)


def total_expenses(
    items: Iterable[OneTimeExpense],
    purchase_price: Decimal,
    legal_fee_rate: Decimal = DEFAULT_LEGAL_FEE_RATE,
    broker_fee_rate: Decimal = DEFAULT_BROKER_FEE_RATE,
) -> Decimal:
    """Itemized one-time costs plus the legal and broker fees."""
    legal = professional_fee(purchase_price, legal_fee_rate)
    broker = professional_fee(purchase_price, broker_fee_rate)
    return itemized_expenses(items) + legal.total + broker.total
