"""
Vietnamese personal income tax (monthly, progressive) and VAT.

Insurance contributions are taken from a capped salary base before the family
deductions; the remainder is taxed bracket by bracket.
"""

from __future__ import annotations

from typing import Any

from .errors import CalculationError

VAT_RATES = {
    "vat_10": {"name": "VAT 10%", "rate": 10},
    "vat_8": {"name": "VAT 8%", "rate": 8},
    "vat_5": {"name": "VAT 5%", "rate": 5},
}

# (lower bound, upper bound or None for open, rate %)
PIT_BRACKETS = (
    (0, 5_000_000, 5),
    (5_000_000, 10_000_000, 10),
    (10_000_000, 18_000_000, 15),
    (18_000_000, 32_000_000, 20),
    (32_000_000, 52_000_000, 25),
    (52_000_000, 80_000_000, 30),
    (80_000_000, None, 35),
)

PERSONAL_DEDUCTION = 11_000_000
DEPENDENT_DEDUCTION = 4_400_000
SOCIAL_INSURANCE_RATE = 8.0
HEALTH_INSURANCE_RATE = 1.5
UNEMPLOYMENT_INSURANCE_RATE = 1.0
MAX_INSURANCE_SALARY = 36_000_000


def progressive_tax(taxable_income: float) -> tuple[float, list[dict[str, Any]]]:
    remaining = taxable_income
    total = 0.0
    details = []
    for lower, upper, rate in PIT_BRACKETS:
        if remaining <= 0:
            break
        span = remaining if upper is None else min(remaining, upper - lower)
        tax = span * rate / 100
        total += tax
        details.append(
            {
                "from": lower,
                "to": upper or 0,
                "rate": rate,
                "taxable_amount": round(span, 2),
                "tax_amount": round(tax, 2),
            }
        )
        remaining -= span
    return total, details


def calculate_pit(monthly_income: float, dependents: int = 0) -> dict[str, Any]:
    monthly_income = float(monthly_income)
    if monthly_income < 0:
        raise CalculationError("Income cannot be negative.", code="invalid_income")
    dependents = max(int(dependents), 0)

    insurance_base = min(monthly_income, MAX_INSURANCE_SALARY)
    social = insurance_base * SOCIAL_INSURANCE_RATE / 100
    health = insurance_base * HEALTH_INSURANCE_RATE / 100
    unemployment = insurance_base * UNEMPLOYMENT_INSURANCE_RATE / 100
    total_insurance = social + health + unemployment
    income_after_insurance = monthly_income - total_insurance

    dependent_deduction = DEPENDENT_DEDUCTION * dependents
    total_deduction = PERSONAL_DEDUCTION + dependent_deduction
    taxable_income = income_after_insurance - total_deduction

    result: dict[str, Any] = {
        "monthly_income": round(monthly_income, 2),
        "insurance_base": round(insurance_base, 2),
        "social_insurance": round(social, 2),
        "health_insurance": round(health, 2),
        "unemployment_insurance": round(unemployment, 2),
        "total_insurance": round(total_insurance, 2),
        "income_after_insurance": round(income_after_insurance, 2),
        "personal_deduction": PERSONAL_DEDUCTION,
        "dependent_deduction": dependent_deduction,
        "num_dependents": dependents,
        "total_deduction": total_deduction,
        "tax_type": "pitt",
    }
    if taxable_income <= 0:
        result.update(taxable_income=0, tax_amount=0, net_income=round(income_after_insurance, 2), brackets=[])
        return result

    tax, brackets = progressive_tax(taxable_income)
    result.update(
        taxable_income=round(taxable_income, 2),
        tax_amount=round(tax, 2),
        net_income=round(income_after_insurance - tax, 2),
        brackets=brackets,
    )
    return result


def calculate_vat(amount: float, tax_rate: float, calculation_type: str = "add") -> dict[str, Any]:
    """``add`` puts VAT on top of a net amount; anything else extracts it from a gross amount."""
    amount = float(amount)
    if amount <= 0:
        raise CalculationError("Amount must be greater than 0.", code="invalid_amount")
    if tax_rate < 0 or tax_rate > 100:
        raise CalculationError("Tax rate must be between 0% and 100%.", code="invalid_rate")

    if calculation_type == "add":
        tax_amount = amount * tax_rate / 100
        return {
            "amount_before_tax": round(amount, 2),
            "tax_rate": tax_rate,
            "tax_amount": round(tax_amount, 2),
            "total_with_tax": round(amount + tax_amount, 2),
            "calculation_type": "add",
            "tax_type": "vat",
        }
    before_tax = amount * 100 / (100 + tax_rate)
    return {
        "total_with_tax": round(amount, 2),
        "tax_rate": tax_rate,
        "tax_amount": round(amount - before_tax, 2),
        "amount_before_tax": round(before_tax, 2),
        "calculation_type": "extract",
        "tax_type": "vat",
    }
