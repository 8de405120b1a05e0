"""Split a bill: each person pays their own items plus an equal share of the rest."""

from __future__ import annotations

from typing import Any, Sequence

from .errors import CalculationError


def split_bill(total_bill: float, individual_amounts: Sequence[float]) -> dict[str, Any]:
    total_bill = float(total_bill)
    if total_bill <= 0:
        raise CalculationError("Total bill must be greater than 0.", code="invalid_amount")
    if not individual_amounts:
        raise CalculationError("Enter an amount for at least one person.", code="invalid_amounts")

    amounts: list[float] = []
    for index, raw in enumerate(individual_amounts, start=1):
        amount = float(raw)
        if amount < 0:
            raise CalculationError(f"Amount for person {index} cannot be negative.", code="invalid_individual_amount")
        amounts.append(amount)

    total_individual = sum(amounts)
    shared_fee = total_bill - total_individual
    if shared_fee < 0:
        raise CalculationError("Individual amounts cannot exceed the total bill.", code="amount_exceeds_total")

    num_people = len(amounts)
    per_person = shared_fee / num_people
    people = []
    total_final = 0.0
    for index, amount in enumerate(amounts, start=1):
        final_amount = amount + per_person
        people.append(
            {
                "person_number": index,
                "individual_amount": round(amount, 2),
                "shared_fee": round(per_person, 2),
                "final_amount": round(final_amount, 2),
            }
        )
        total_final += final_amount

    return {
        "total_bill": round(total_bill, 2),
        "num_people": num_people,
        "total_individual": round(total_individual, 2),
        "shared_fee": round(shared_fee, 2),
        "shared_fee_per_person": round(per_person, 2),
        "people": people,
        "total_final": round(total_final, 2),
    }
