"""Tests for household and report models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from mortgage_core.models import (
    OPEN_ENDED_CEILING,
    AssetStatus,
    AuditEntry,
    DebtObligation,
    HouseholdFinancialState,
    IncomeSample,
    LiquidAsset,
    PurchaseTaxPolicy,
    TaxBracket,
)


class TestPersistedAliases:
    """Models accept the camelCase keys snapshots are stored with."""

    def test_debt_from_persisted_keys(self):
        debt = DebtObligation.model_validate(
            {
                "name": "Car loan",
                "loanAmount": "60000",
                "durationMonths": 36,
                "monthlyPayment": "1900",
                "availableAsBuyingPower": True,
            }
        )

        assert debt.principal == Decimal("60000")
        assert debt.term_months == 36
        assert debt.periodic_payment == Decimal("1900")
        assert debt.credit_eligible is True

    def test_asset_from_persisted_keys(self):
        asset = LiquidAsset.model_validate(
            {
                "name": "Fund",
                "totalAmount": 90000,
                "totalRevenue": 30000,
                "state": "closed",
                "taxable": True,
                "taxPercentage": 15,
            }
        )

        assert asset.status == AssetStatus.CLOSED
        assert asset.is_open is False
        assert asset.total_gain == Decimal("30000")
        assert asset.tax_rate == Decimal("15")

    def test_dump_by_alias(self):
        bracket = TaxBracket(ceiling=Decimal("1978745"), rate=Decimal("0"))
        assert set(bracket.model_dump(by_alias=True)) == {"maxTaxableAmount", "taxPercentage"}


class TestRequiredFields:
    """Fields whose defaults belong to the snapshot upgrade, not the model."""

    def test_debt_requires_eligibility(self):
        with pytest.raises(ValidationError):
            DebtObligation(name="Loan", principal=Decimal("1000"))

    def test_asset_requires_tax_fields(self):
        with pytest.raises(ValidationError):
            LiquidAsset(name="Deposit", total_amount=Decimal("1000"))


class TestHouseholdFinancialState:
    """Test suite for HouseholdFinancialState."""

    def test_defaults(self):
        state = HouseholdFinancialState()

        assert state.purchase_price == Decimal("0")
        assert state.member1_income == ()
        assert state.purchase_tax_policy == PurchaseTaxPolicy()
        assert state.purchase_tax_policy.is_first_home is True

    def test_frozen(self):
        state = HouseholdFinancialState()
        with pytest.raises(ValidationError):
            state.purchase_price = Decimal("1")

    def test_blank_income_is_missing(self):
        assert IncomeSample(amount="").amount is None
        assert IncomeSample(amount="  ").amount is None
        assert IncomeSample(amount="9500").amount == Decimal("9500")


class TestTaxBracket:
    """Test suite for TaxBracket."""

    def test_open_ended(self):
        assert TaxBracket(ceiling=OPEN_ENDED_CEILING, rate=Decimal("10")).is_open_ended
        assert not TaxBracket(ceiling=Decimal("6055070"), rate=Decimal("5")).is_open_ended


class TestAuditEntry:
    """Test suite for AuditEntry."""

    def test_timestamp_is_utc(self):
        entry = AuditEntry(step="net_assets", input_value="2 assets", output_value="675000", source="test")

        assert entry.timestamp.tzinfo is not None
        assert entry.notes is None
