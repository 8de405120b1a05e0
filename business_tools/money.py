from __future__ import annotations


def format_vnd(amount: float) -> str:
    """1234567 -> '1.234.567 VNĐ' (rounded to whole dong, dot thousands separator)."""
    value = int(round(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{abs(value):,}".replace(",", ".") + " VNĐ"
