import math

import pytest

from business_tools.bill_splitter import split_bill
from business_tools.calculator import apply_function, evaluate
from business_tools.errors import CalculationError
from business_tools.money import format_vnd
from business_tools.tax_calculator import calculate_pit, calculate_vat


def test_split_bill_shares_the_remainder_equally():
    result = split_bill(100000, [29000, 30000, 31000])

    assert result["num_people"] == 3
    assert result["total_individual"] == 90000
    assert result["shared_fee"] == 10000
    assert result["shared_fee_per_person"] == 3333.33
    assert [p["final_amount"] for p in result["people"]] == [32333.33, 33333.33, 34333.33]
    assert [p["person_number"] for p in result["people"]] == [1, 2, 3]
    assert result["total_final"] == 100000


@pytest.mark.parametrize(
    "total, amounts, code",
    [
        (0, [10], "invalid_amount"),
        (100, [], "invalid_amounts"),
        (100, [10, -5], "invalid_individual_amount"),
        (100, [60, 50], "amount_exceeds_total"),
    ],
)
def test_split_bill_rejects_bad_input(total, amounts, code):
    with pytest.raises(CalculationError) as excinfo:
        split_bill(total, amounts)
    assert excinfo.value.code == code


def test_negative_amount_names_the_person():
    with pytest.raises(CalculationError, match="person 2"):
        split_bill(100, [10, -5])


def test_pit_single_bracket_with_dependent():
    result = calculate_pit(20_000_000, 1)

    assert result["insurance_base"] == 20_000_000
    assert result["social_insurance"] == 1_600_000
    assert result["health_insurance"] == 300_000
    assert result["unemployment_insurance"] == 200_000
    assert result["total_insurance"] == 2_100_000
    assert result["total_deduction"] == 15_400_000
    assert result["taxable_income"] == 2_500_000
    assert result["tax_amount"] == 125_000
    assert result["net_income"] == 17_775_000
    assert result["brackets"] == [
        {"from": 0, "to": 5_000_000, "rate": 5, "taxable_amount": 2_500_000, "tax_amount": 125_000}
    ]


def test_pit_walks_all_brackets_and_caps_insurance():
    result = calculate_pit(100_000_000)

    assert result["insurance_base"] == 36_000_000
    assert result["total_insurance"] == 3_780_000
    assert result["taxable_income"] == 85_220_000
    assert [b["rate"] for b in result["brackets"]] == [5, 10, 15, 20, 25, 30, 35]
    assert result["brackets"][-1]["to"] == 0
    assert result["brackets"][-1]["taxable_amount"] == 5_220_000
    assert result["tax_amount"] == 19_977_000
    assert result["net_income"] == 96_220_000 - 19_977_000


def test_pit_below_threshold_pays_nothing():
    result = calculate_pit(10_000_000, dependents=-2)

    assert result["num_dependents"] == 0
    assert result["taxable_income"] == 0
    assert result["tax_amount"] == 0
    assert result["net_income"] == 8_950_000
    assert result["brackets"] == []


def test_pit_rejects_negative_income():
    with pytest.raises(CalculationError) as excinfo:
        calculate_pit(-1)
    assert excinfo.value.code == "invalid_income"


def test_vat_add_and_extract():
    added = calculate_vat(1_000_000, 10)
    assert added["tax_amount"] == 100_000
    assert added["total_with_tax"] == 1_100_000
    assert added["calculation_type"] == "add"

    extracted = calculate_vat(1_100_000, 10, "extract")
    assert extracted["amount_before_tax"] == 1_000_000
    assert extracted["tax_amount"] == 100_000
    assert extracted["calculation_type"] == "extract"


@pytest.mark.parametrize("amount, rate, code", [(0, 10, "invalid_amount"), (100, 120, "invalid_rate"), (100, -1, "invalid_rate")])
def test_vat_rejects_bad_input(amount, rate, code):
    with pytest.raises(CalculationError) as excinfo:
        calculate_vat(amount, rate)
    assert excinfo.value.code == code


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("2×3+4÷2", 8),
        ("2^10", 1024),
        ("50%", 0.5),
        ("-(3 - 5) * 2", 4),
        ("π", math.pi),
        ("e", math.e),
        ("sqrt(16) + 1", 5),
    ],
)
def test_evaluate(expression, expected):
    assert evaluate(expression) == pytest.approx(expected)


def test_trig_respects_angle_mode():
    assert evaluate("sin(30)") == pytest.approx(0.5)
    assert apply_function("cos", math.pi, degrees=False) == pytest.approx(-1)
    assert apply_function("tan", 45) == pytest.approx(1)


def test_apply_function():
    assert apply_function("factorial", 5.7) == 120
    assert apply_function("log", 1000) == pytest.approx(3)
    assert apply_function("ln", math.e) == pytest.approx(1)
    assert apply_function("reciprocal", 4) == 0.25
    assert apply_function("exp", 0) == 1


@pytest.mark.parametrize(
    "expression",
    ["", "1/0", "2 +", "__import__('os')", "(-8)^0.5", "10^400", "abc"],
)
def test_invalid_expressions(expression):
    with pytest.raises(CalculationError) as excinfo:
        evaluate(expression)
    assert excinfo.value.code == "invalid_expression"


@pytest.mark.parametrize("name, value", [("factorial", 171), ("ln", 0), ("sqrt", -1), ("reciprocal", 0), ("cube", 2)])
def test_invalid_functions(name, value):
    with pytest.raises(CalculationError):
        apply_function(name, value)


def test_format_vnd():
    assert format_vnd(1234567) == "1.234.567 VNĐ"
    assert format_vnd(999.6) == "1.000 VNĐ"
    assert format_vnd(0) == "0 VNĐ"
