#!/usr/bin/env python3
"""
Command-line front end for the bill splitter, PIT / VAT calculators and the
scientific calculator.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[3]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from business_tools.bill_splitter import split_bill  # noqa: E402
from business_tools.calculator import apply_function, evaluate  # noqa: E402
from business_tools.errors import CalculationError  # noqa: E402
from business_tools.log import setup_logger  # noqa: E402
from business_tools.money import format_vnd  # noqa: E402
from business_tools.tax_calculator import calculate_pit, calculate_vat  # noqa: E402


def print_split(data: dict[str, Any]) -> None:
    print(f"Total bill:            {format_vnd(data['total_bill'])}")
    print(f"Individual items:      {format_vnd(data['total_individual'])}")
    print(f"Shared fee:            {format_vnd(data['shared_fee'])}")
    print(f"Shared fee per person: {format_vnd(data['shared_fee_per_person'])}")
    for person in data["people"]:
        print(
            f"  Person {person['person_number']}: {format_vnd(person['individual_amount'])} + "
            f"{format_vnd(person['shared_fee'])} = {format_vnd(person['final_amount'])}"
        )
    print(f"Total:                 {format_vnd(data['total_final'])}")


def print_pit(data: dict[str, Any]) -> None:
    print(f"Monthly income:         {format_vnd(data['monthly_income'])}")
    print(f"Insurance (10.5%):      {format_vnd(data['total_insurance'])}")
    print(f"Income after insurance: {format_vnd(data['income_after_insurance'])}")
    print(f"Deductions:             {format_vnd(data['total_deduction'])} ({data['num_dependents']} dependents)")
    print(f"Taxable income:         {format_vnd(data['taxable_income'])}")
    for index, bracket in enumerate(data["brackets"], start=1):
        print(f"  Bracket {index}: {bracket['rate']}% of {format_vnd(bracket['taxable_amount'])}"
              f" = {format_vnd(bracket['tax_amount'])}")
    print(f"Tax:                    {format_vnd(data['tax_amount'])}")
    print(f"Net income:             {format_vnd(data['net_income'])}")


def print_vat(data: dict[str, Any]) -> None:
    print(f"Before tax: {format_vnd(data['amount_before_tax'])}")
    print(f"VAT {data['tax_rate']:g}%:   {format_vnd(data['tax_amount'])}")
    print(f"With tax:   {format_vnd(data['total_with_tax'])}")


def main() -> int:
    p = argparse.ArgumentParser(description="Vietnamese business calculators.")
    p.add_argument("--json", action="store_true", help="Print the raw result as JSON")
    p.add_argument("--log-level", default=os.getenv("BUSINESS_TOOLS_LOG_LEVEL", "WARNING"))
    sub = p.add_subparsers(dest="command", required=True)

    split = sub.add_parser("split", help="Split a bill")
    split.add_argument("total", type=float)
    split.add_argument("amounts", type=float, nargs="+", help="Each person's own items")

    pit = sub.add_parser("pit", help="Monthly personal income tax")
    pit.add_argument("income", type=float)
    pit.add_argument("--dependents", type=int, default=0)

    vat = sub.add_parser("vat", help="Add or extract VAT")
    vat.add_argument("amount", type=float)
    vat.add_argument("--rate", type=float, default=10)
    vat.add_argument("--extract", action="store_true", help="Treat the amount as VAT-inclusive")

    calc = sub.add_parser("calc", help="Evaluate an expression or apply a function")
    calc.add_argument("expression")
    calc.add_argument("--function", help="Apply sin/cos/tan/ln/log/sqrt/factorial/reciprocal/exp to the result")
    calc.add_argument("--radians", action="store_true")
    args = p.parse_args()

    setup_logger(args.log_level, tool="calculators")
    try:
        if args.command == "split":
            data: Any = split_bill(args.total, args.amounts)
            printer = print_split
        elif args.command == "pit":
            data = calculate_pit(args.income, args.dependents)
            printer = print_pit
        elif args.command == "vat":
            data = calculate_vat(args.amount, args.rate, "extract" if args.extract else "add")
            printer = print_vat
        else:
            degrees = not args.radians
            value = evaluate(args.expression, degrees)
            if args.function:
                value = apply_function(args.function, value, degrees)
            data = {"expression": args.expression, "result": value}
            printer = lambda d: print(f"{d['expression']} = {d['result']:g}")  # noqa: E731
    except CalculationError as exc:
        print(f"Error [{exc.code}]: {exc.message}")
        return 2

    if args.json:
        print(json.dumps(data, indent=2, ensure_ascii=False))
    else:
        printer(data)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
