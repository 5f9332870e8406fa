"""Household mortgage-affordability calculation.

AffordabilityCalculator runs the whole pipeline on one snapshot:

1. Average income per household member
2. Long-term debt service and buying-power-eligible debt
3. Three independent borrowing limits (residual income, own funds, price)
4. Recommended mortgage: the most restrictive positive limit
5. Progressive purchase tax
6. One-time expenses and professional fees
7. Funding gap and monthly payment affordability

Every step is recorded in the report's audit log.
"""

from decimal import Decimal
from typing import Optional

import structlog

from .config import CalculatorPreferences
from .formulas import (
    ZERO,
    capacity_from_net_assets,
    capacity_from_purchase_price,
    capacity_from_residual_income,
    eligible_buying_power,
    household_average_income,
    itemized_expenses,
    long_term_debt_service,
    monthly_allowance,
    monthly_payment,
    net_liquid_assets,
    professional_fee,
    recommend,
)
from .models import (
    AffordabilityReport,
    AuditEntry,
    CapacityBreakdown,
    HouseholdFinancialState,
    PaymentComparison,
)
from .policy import ADDITIONAL_INCOME_MONTHS, POLICY_VERSION, get_financing_percentage
from .purchase_tax import bracket_tax_breakdown

logger = structlog.get_logger()


class AffordabilityCalculator:
    """
    Calculate how much mortgage a household can take on and whether its
    funds cover the purchase.

    Each call builds its own audit log and warnings, so one instance can
    serve concurrent callers; equal inputs give equal figures.
    """

    @staticmethod
    def _log_step(
        audit_log: list[AuditEntry],
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        entry = AuditEntry(
            step=step,
            input_value=input_value,
            output_value=output_value,
            source=source,
            notes=notes,
        )
        audit_log.append(entry)
        logger.info(
            "affordability_calculation_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def calculate(
        self,
        state: HouseholdFinancialState,
        preferences: CalculatorPreferences,
    ) -> AffordabilityReport:
        """
        Run the full affordability pipeline.

        Args:
            state: Household snapshot, already upgraded to the current schema
            preferences: Return-power fraction and fee rates, read by the caller

        Returns:
            AffordabilityReport with headline figures, breakdown and audit trail
        """
        audit_log: list[AuditEntry] = []
        warnings: list[str] = []

        price = state.purchase_price
        term_years = state.term_years
        annual_rate = state.annual_rate
        policy = state.purchase_tax_policy

        # Step 1: Income
        total_income = household_average_income(state.member1_income, state.member2_income)
        self._log_step(
            audit_log,
            step="total_average_income",
            input_value=f"{len(state.member1_income)} + {len(state.member2_income)} income samples",
            output_value=str(total_income),
            source="Average of positive samples per member",
        )

        # Step 2: Debts
        debt_service = long_term_debt_service(state.debts)
        buying_power = eligible_buying_power(state.debts)
        self._log_step(
            audit_log,
            step="long_term_debt_service",
            input_value=f"{len(state.debts)} debts",
            output_value=str(debt_service),
            source="Payments of debts with 18+ months remaining",
        )
        self._log_step(
            audit_log,
            step="eligible_buying_power",
            input_value=f"{sum(1 for d in state.debts if d.credit_eligible)} eligible debts",
            output_value=str(buying_power),
            source="Principal of debts available as buying power",
        )

        # Step 3a: Residual income limit
        fraction = preferences.return_power_fraction
        allowance = monthly_allowance(total_income, debt_service, fraction.multiplier)
        from_income = capacity_from_residual_income(allowance, term_years, annual_rate)
        self._log_step(
            audit_log,
            step="monthly_allowance",
            input_value=f"({total_income} - {debt_service}) * {fraction.value}",
            output_value=str(allowance),
            source="Return power",
        )
        self._log_step(
            audit_log,
            step="capacity_from_residual_income",
            input_value=f"allowance={allowance}, years={term_years}, rate={annual_rate}%",
            output_value=str(from_income),
            source="Annuity present value",
        )
        if allowance <= 0:
            warnings.append(
                "Income after long-term debt payments leaves nothing for a mortgage payment."
            )

        # Step 3b: Own funds limit
        net_assets = net_liquid_assets(state.assets)
        from_assets = capacity_from_net_assets(net_assets, buying_power)
        self._log_step(
            audit_log,
            step="net_assets",
            input_value=f"{sum(1 for a in state.assets if a.is_open)} open of {len(state.assets)} assets",
            output_value=str(net_assets),
            source="Open savings less tax on taxable gains",
        )
        self._log_step(
            audit_log,
            step="capacity_from_net_assets",
            input_value=f"({net_assets} + {buying_power}) * 4",
            output_value=str(from_assets),
            source="Own-funds leverage",
        )

        # Step 3c: Price limit
        from_price = capacity_from_purchase_price(price, policy.is_first_home)
        self._log_step(
            audit_log,
            step="capacity_from_purchase_price",
            input_value=f"{price} * {get_financing_percentage(policy.is_first_home)}%",
            output_value=str(from_price),
            source="First home" if policy.is_first_home else "Additional home",
        )

        # Step 4: Recommendation
        capacities = CapacityBreakdown(
            from_residual_income=from_income,
            from_net_assets=from_assets,
            from_purchase_price=from_price,
        )
        recommended = recommend(capacities.as_list())
        self._log_step(
            audit_log,
            step="recommended_capacity",
            input_value=", ".join(str(c) for c in capacities.as_list()),
            output_value=str(recommended),
            source="Minimum of positive capacities",
        )
        if recommended == 0:
            warnings.append("No borrowing limit is positive; no mortgage can be recommended.")

        # Step 5: Purchase tax
        tax_lines = bracket_tax_breakdown(price, policy.brackets)
        purchase_tax = sum((line.tax for line in tax_lines), ZERO)
        self._log_step(
            audit_log,
            step="purchase_tax",
            input_value=f"price={price}, {len(policy.brackets)} brackets",
            output_value=str(purchase_tax),
            source="Progressive bracket schedule",
            notes=f"{len(tax_lines)} brackets reached",
        )

        # Step 6: Expenses
        itemized = itemized_expenses(state.expenses)
        legal = professional_fee(price, preferences.legal_fee_rate)
        broker = professional_fee(price, preferences.broker_fee_rate)
        expenses_total = itemized + legal.total + broker.total
        self._log_step(
            audit_log,
            step="total_expenses",
            input_value=f"itemized={itemized}, legal={legal.total}, broker={broker.total}",
            output_value=str(expenses_total),
            source="One-time expenses plus professional fees with 18% surcharge",
        )

        # Step 7: Funding gap
        available_funds = net_assets + buying_power - expenses_total - purchase_tax
        total_buying_power = recommended + available_funds
        has_enough = total_buying_power >= price
        shortfall = price - recommended - available_funds
        self._log_step(
            audit_log,
            step="funding_gap",
            input_value=f"price={price}, mortgage={recommended}, funds={available_funds}",
            output_value=f"shortfall_or_surplus={shortfall}",
            source="Price less mortgage less available funds",
        )
        if not has_enough:
            warnings.append(f"Funds fall short of the purchase price by {shortfall}.")

        payment = monthly_payment(recommended, term_years, annual_rate)
        gap_payment = ZERO if has_enough else monthly_payment(price - total_buying_power, term_years, annual_rate)
        additional_monthly = max(ZERO, payment + gap_payment - allowance)
        additional_income = additional_monthly * ADDITIONAL_INCOME_MONTHS
        self._log_step(
            audit_log,
            step="additional_income_needed",
            input_value=f"payment={payment}, gap_payment={gap_payment}, allowance={allowance}",
            output_value=str(additional_income),
            source="Monthly shortfall * 3",
        )

        comparison = self._compare_payments(audit_log, from_price, payment, allowance, term_years, annual_rate)

        return AffordabilityReport(
            recommended_capacity=recommended,
            monthly_payment=payment,
            total_available_funds=available_funds,
            shortfall_or_surplus=shortfall,
            total_buying_power=total_buying_power,
            has_enough_buying_power=has_enough,
            monthly_allowance=allowance,
            additional_monthly_amount_needed=additional_monthly,
            additional_income_needed=additional_income,
            total_average_income=total_income,
            long_term_debt_service=debt_service,
            net_assets=net_assets,
            eligible_buying_power=buying_power,
            capacities=capacities,
            purchase_tax=purchase_tax,
            purchase_tax_lines=tax_lines,
            itemized_expenses=itemized,
            legal_fee=legal,
            broker_fee=broker,
            total_expenses=expenses_total,
            payment_comparison=comparison,
            audit_log=audit_log,
            policy_version=POLICY_VERSION,
            warnings=warnings,
        )

    def _compare_payments(
        self,
        audit_log: list[AuditEntry],
        price_cap: Decimal,
        payment: Decimal,
        allowance: Decimal,
        term_years: Decimal,
        annual_rate: Decimal,
    ) -> PaymentComparison:
        """Set the recommended payment against the price-cap mortgage's payment."""
        cap_payment = monthly_payment(price_cap, term_years, annual_rate)
        difference = cap_payment - payment
        comparison = PaymentComparison(
            price_cap_capacity=price_cap,
            price_cap_monthly_payment=cap_payment,
            payment_difference=difference,
            income_needed_for_price_cap=max(ZERO, difference) * ADDITIONAL_INCOME_MONTHS,
            allowance_surplus=allowance - payment,
        )
        self._log_step(
            audit_log,
            step="payment_comparison",
            input_value=f"price_cap_payment={cap_payment}, payment={payment}",
            output_value=f"difference={difference}",
            source="Price-cap mortgage payment comparison",
        )
        return comparison


def calculate_affordability(
    state: HouseholdFinancialState,
    preferences: CalculatorPreferences,
) -> AffordabilityReport:
    """Standalone function for a one-off affordability calculation."""
    return AffordabilityCalculator().calculate(state, preferences)
