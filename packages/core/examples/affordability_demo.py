#!/usr/bin/env python3
"""
Mortgage Affordability Demonstration

This script walks through a complete affordability check:
1. Load a household snapshot saved before savings tax and loan eligibility were tracked
2. Run the affordability calculation
3. Print the headline figures and the audit trail

Run: python examples/affordability_demo.py
"""

import json

from mortgage_core import (
    AffordabilityCalculator,
    CalculatorPreferences,
    MortgagePlannerConfig,
    ReturnPowerFraction,
    configure_logging,
    dump_household_state,
    load_household_state,
)


# A schema 1 snapshot: no schemaVersion, savings without taxable/taxPercentage,
# loans without availableAsBuyingPower.
LEGACY_SNAPSHOT = {
    "homePrice": 2200000,
    "mortgageDurationYears": 25,
    "averageYearlyRate": 5,
    "spouse1Salaries": [{"amount": 14000}, {"amount": 13500}, {"amount": 6000}],
    "spouse2Salaries": [{"amount": 9000}, {"amount": 9400}],
    "savings": [
        {"name": "Study fund", "totalAmount": 180000, "totalRevenue": 40000, "state": "open"},
        {"name": "Bank deposit", "totalAmount": 320000, "totalRevenue": 0, "state": "open"},
        {"name": "Pension policy", "totalAmount": 90000, "totalRevenue": 30000, "state": "closed"},
    ],
    "loans": [
        {"name": "Car loan", "loanAmount": 60000, "durationMonths": 36, "monthlyPayment": 1900},
        {"name": "Family loan", "loanAmount": 150000, "durationMonths": 12, "monthlyPayment": 0,
         "availableAsBuyingPower": True},
    ],
    "expenses": [
        {"name": "Moving", "amount": 8000},
        {"name": "Furnishing", "amount": 20000},
        {"name": "Home inspection", "amount": 2000},
    ],
    "buyingTaxConfig": {
        "isFirstHome": True,
        "taxLevels": [
            {"maxTaxableAmount": 1978745, "taxPercentage": 0},
            {"maxTaxableAmount": 2347040, "taxPercentage": 3.5},
            {"maxTaxableAmount": 6055070, "taxPercentage": 5},
            {"maxTaxableAmount": 20183565, "taxPercentage": 8},
            {"maxTaxableAmount": 999999999, "taxPercentage": 10},
        ],
    },
}


def main():
    """Run the affordability demonstration."""
    configure_logging(MortgagePlannerConfig(log_level="WARNING"))

    print("=" * 70)
    print("MORTGAGE PLANNER - Affordability Demo")
    print("=" * 70)
    print()

    # Step 1: Load the snapshot
    print("Step 1: Loading household snapshot...")
    state = load_household_state(LEGACY_SNAPSHOT)
    print(f"  - Purchase price: {state.purchase_price:,.2f}")
    print(f"  - Term: {state.term_years} years at {state.annual_rate}%")
    print(f"  - Savings accounts: {len(state.assets)}, loans: {len(state.debts)}")
    print()

    # Step 2: Run calculations
    print("Step 2: Running affordability calculation...")
    preferences = CalculatorPreferences(return_power_fraction=ReturnPowerFraction.ONE_THIRD)
    result = AffordabilityCalculator().calculate(state, preferences)
    print(f"  - Average household income: {result.total_average_income:,.2f}")
    print(f"  - Monthly allowance: {result.monthly_allowance:,.2f}")
    print(f"  - Limit from income: {result.capacities.from_residual_income:,.2f}")
    print(f"  - Limit from own funds: {result.capacities.from_net_assets:,.2f}")
    print(f"  - Limit from price: {result.capacities.from_purchase_price:,.2f}")
    print(f"  - Recommended mortgage: {result.recommended_capacity:,.2f}")
    print(f"  - Monthly payment: {result.monthly_payment:,.2f}")
    print(f"  - Purchase tax: {result.purchase_tax:,.2f}")
    print(f"  - Total expenses: {result.total_expenses:,.2f}")
    print(f"  - Available funds: {result.total_available_funds:,.2f}")
    print(f"  - Shortfall (+) / surplus (-): {result.shortfall_or_surplus:,.2f}")
    print(f"  - Additional income needed: {result.additional_income_needed:,.2f}")
    for warning in result.warnings:
        print(f"  ! {warning}")
    print()

    # Step 3: Audit trail
    print("Step 3: Audit trail")
    for entry in result.audit_log:
        print(f"  {entry.step:<32} {entry.output_value}")

    print()
    print("-" * 70)
    print("Upgraded snapshot:")
    print(json.dumps(dump_household_state(state), indent=2, ensure_ascii=False)[:600])

    print()
    print("=" * 70)
    print("Demo complete!")
    print("=" * 70)


if __name__ == "__main__":
    main()
