"""Core data models for household mortgage-affordability calculations.

Input records mirror the persisted household snapshot: each field has a
snake_case name and accepts the camelCase key the snapshot is stored with
(``loanAmount``, ``totalRevenue``, ``taxLevels`` ...). All input models are
frozen; the engine derives new values and never mutates what it is given.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


# Ceiling value that marks the "and above" bracket of a tax schedule.
OPEN_ENDED_CEILING = Decimal("999999999")


def _utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMERATIONS
# =============================================================================

class AssetStatus(str, Enum):
    """Whether a savings instrument can still be drawn on."""
    OPEN = "open"
    CLOSED = "closed"


# =============================================================================
# HOUSEHOLD INPUT MODELS
# =============================================================================

class IncomeSample(BaseModel):
    """A single observed monthly income figure for one household member.

    Samples are ordered most recent first; the oldest may cover an
    incomplete month. Zero, negative and missing amounts are ignored when
    averaging.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    amount: Optional[Decimal] = None

    @field_validator("amount", mode="before")
    @classmethod
    def blank_is_missing(cls, v):
        """Treat an untyped form cell as a missing sample."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class DebtObligation(BaseModel):
    """An existing loan held by the household.

    ``credit_eligible`` decides whether the principal counts as purchase
    funds; the payment counts toward debt service whenever the term is long
    enough, eligible or not.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    name: str = ""
    principal: Decimal = Field(default=Decimal("0"), alias="loanAmount")
    term_months: int = Field(default=0, alias="durationMonths")
    periodic_payment: Decimal = Field(default=Decimal("0"), alias="monthlyPayment")
    credit_eligible: bool = Field(alias="availableAsBuyingPower")


class LiquidAsset(BaseModel):
    """A savings instrument (deposit, fund, policy).

    Tax applies to ``total_gain`` only, and only when ``taxable``.
    ``taxable`` and ``tax_rate`` have no model default: snapshots written
    before they existed are upgraded by ``migration.upgrade_document``.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    name: str = ""
    total_amount: Decimal = Field(default=Decimal("0"), alias="totalAmount")
    total_gain: Decimal = Field(default=Decimal("0"), alias="totalRevenue")
    status: AssetStatus = Field(default=AssetStatus.OPEN, alias="state")
    taxable: bool
    tax_rate: Decimal = Field(alias="taxPercentage")

    @property
    def is_open(self) -> bool:
        return self.status == AssetStatus.OPEN


class OneTimeExpense(BaseModel):
    """A flat purchase-related cost (moving, furnishing, filing fees)."""

    model_config = {"frozen": True, "populate_by_name": True}

    name: str = ""
    amount: Decimal = Decimal("0")


class TaxBracket(BaseModel):
    """One slice of the progressive purchase-tax schedule.

    The last bracket of a schedule carries the open-ended ceiling and is
    capped at the purchase price when tax is computed.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    ceiling: Decimal = Field(alias="maxTaxableAmount")
    rate: Decimal = Field(alias="taxPercentage")

    @property
    def is_open_ended(self) -> bool:
        """True for the "and above" bracket."""
        return self.ceiling >= OPEN_ENDED_CEILING


class PurchaseTaxPolicy(BaseModel):
    """Home type and the bracket schedule that applies to it."""

    model_config = {"frozen": True, "populate_by_name": True}

    is_first_home: bool = Field(default=True, alias="isFirstHome")
    brackets: tuple[TaxBracket, ...] = Field(default=(), alias="taxLevels")


class HouseholdFinancialState(BaseModel):
    """Complete snapshot of the household's purchase scenario.

    This is the only input the affordability engine consumes besides the
    standalone preferences. Numbers default to zero and lists to empty, so
    there is no partial state.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    purchase_price: Decimal = Field(default=Decimal("0"), alias="homePrice")
    term_years: Decimal = Field(default=Decimal("0"), alias="mortgageDurationYears")
    annual_rate: Decimal = Field(default=Decimal("0"), alias="averageYearlyRate")

    member1_income: tuple[IncomeSample, ...] = Field(default=(), alias="spouse1Salaries")
    member2_income: tuple[IncomeSample, ...] = Field(default=(), alias="spouse2Salaries")
    assets: tuple[LiquidAsset, ...] = Field(default=(), alias="savings")
    debts: tuple[DebtObligation, ...] = Field(default=(), alias="loans")
    expenses: tuple[OneTimeExpense, ...] = ()

    purchase_tax_policy: PurchaseTaxPolicy = Field(
        default_factory=PurchaseTaxPolicy,
        alias="buyingTaxConfig",
    )


# =============================================================================
# CALCULATION RESULT MODELS
# =============================================================================

class AuditEntry(BaseModel):
    """Audit log entry for calculation transparency."""
    timestamp: datetime = Field(default_factory=_utc_now)
    step: str
    input_value: str
    output_value: str
    source: str
    notes: Optional[str] = None


class CapacityBreakdown(BaseModel):
    """The three independent borrowing limits."""
    from_residual_income: Decimal
    from_net_assets: Decimal
    from_purchase_price: Decimal

    def as_list(self) -> list[Decimal]:
        return [self.from_residual_income, self.from_net_assets, self.from_purchase_price]


class ProfessionalFee(BaseModel):
    """A percentage-of-price fee (lawyer, broker) with its surcharge."""
    rate: Decimal
    base: Decimal
    surcharge: Decimal
    total: Decimal


class BracketTaxLine(BaseModel):
    """Tax charged on the slice of the price that falls in one bracket."""
    bracket_index: int
    lower: Decimal
    upper: Decimal
    taxable_amount: Decimal
    rate: Decimal
    tax: Decimal


class PaymentComparison(BaseModel):
    """Recommended payment set against the price-cap mortgage and the allowance.

    ``payment_difference`` is positive when the price-cap mortgage would
    cost more per month than the recommended one.
    """
    price_cap_capacity: Decimal
    price_cap_monthly_payment: Decimal
    payment_difference: Decimal
    income_needed_for_price_cap: Decimal
    allowance_surplus: Decimal


class AffordabilityReport(BaseModel):
    """Complete result of one affordability calculation."""

    # Headline figures
    recommended_capacity: Decimal
    monthly_payment: Decimal
    total_available_funds: Decimal
    shortfall_or_surplus: Decimal  # positive = shortfall
    total_buying_power: Decimal
    has_enough_buying_power: bool
    monthly_allowance: Decimal
    additional_monthly_amount_needed: Decimal
    additional_income_needed: Decimal

    # Income and debt
    total_average_income: Decimal
    long_term_debt_service: Decimal

    # Funds
    net_assets: Decimal
    eligible_buying_power: Decimal
    capacities: CapacityBreakdown

    # Purchase costs
    purchase_tax: Decimal
    purchase_tax_lines: list[BracketTaxLine] = Field(default_factory=list)
    itemized_expenses: Decimal
    legal_fee: ProfessionalFee
    broker_fee: ProfessionalFee
    total_expenses: Decimal

    payment_comparison: PaymentComparison

    # Full Audit Trail
    audit_log: list[AuditEntry]

    # Methodology
    policy_version: str
    calculated_at: datetime = Field(default_factory=_utc_now)

    warnings: list[str] = Field(default_factory=list)

    def headline(self) -> dict[str, object]:
        """The output record the presentation layer formats."""
        return self.model_dump(
            include={
                "recommended_capacity",
                "monthly_payment",
                "total_available_funds",
                "shortfall_or_surplus",
                "total_buying_power",
                "has_enough_buying_power",
                "monthly_allowance",
                "additional_income_needed",
            }
        )
