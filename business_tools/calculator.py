"""
Scientific calculator.

Expressions are parsed with ``ast`` and walked over a small whitelist of nodes,
so nothing but arithmetic, the constants ``pi``/``e`` and the functions in
FUNCTIONS can run.
"""

from __future__ import annotations

import ast
import math
import operator
from typing import Callable

from .errors import CalculationError

MAX_FACTORIAL = 170

SYMBOLS = {"×": "*", "÷": "/", "π": "pi", "^": "**", "%": "/100"}
CONSTANTS = {"pi": math.pi, "e": math.e}
BINARY_OPS: dict[type, Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Pow: operator.pow,
}
UNARY_OPS: dict[type, Callable[[float], float]] = {ast.UAdd: operator.pos, ast.USub: operator.neg}


def _invalid(detail: str = "") -> CalculationError:
    message = "Invalid expression" + (f": {detail}" if detail else "")
    return CalculationError(message, code="invalid_expression")


def factorial(value: float) -> float:
    n = math.floor(value)
    if n < 0 or n > MAX_FACTORIAL:
        raise _invalid(f"factorial is defined for 0..{MAX_FACTORIAL}")
    return float(math.factorial(n))


def _trig(fn: Callable[[float], float]) -> Callable[[float, bool], float]:
    def wrapped(value: float, degrees: bool) -> float:
        return fn(math.radians(value) if degrees else value)

    return wrapped


FUNCTIONS: dict[str, Callable[[float, bool], float]] = {
    "sin": _trig(math.sin),
    "cos": _trig(math.cos),
    "tan": _trig(math.tan),
    "ln": lambda v, _: math.log(v),
    "log": lambda v, _: math.log10(v),
    "sqrt": lambda v, _: math.sqrt(v),
    "factorial": lambda v, _: factorial(v),
    "reciprocal": lambda v, _: 1 / v,
    "exp": lambda v, _: math.exp(v),
}


def _finite(value: float) -> float:
    if math.isnan(value) or math.isinf(value):
        raise _invalid("result is not a finite number")
    return value


def apply_function(name: str, value: float, degrees: bool = True) -> float:
    fn = FUNCTIONS.get(name)
    if fn is None:
        raise _invalid(f"unknown function {name!r}")
    try:
        return _finite(float(fn(float(value), degrees)))
    except (ValueError, ZeroDivisionError, OverflowError) as exc:
        raise _invalid(str(exc)) from exc


def _eval(node: ast.AST, degrees: bool) -> float:
    if isinstance(node, ast.Expression):
        return _eval(node.body, degrees)
    if isinstance(node, ast.Constant) and isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
        return float(node.value)
    if isinstance(node, ast.Name) and node.id in CONSTANTS:
        return CONSTANTS[node.id]
    if isinstance(node, ast.BinOp) and type(node.op) in BINARY_OPS:
        return BINARY_OPS[type(node.op)](_eval(node.left, degrees), _eval(node.right, degrees))
    if isinstance(node, ast.UnaryOp) and type(node.op) in UNARY_OPS:
        return UNARY_OPS[type(node.op)](_eval(node.operand, degrees))
    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in FUNCTIONS
        and len(node.args) == 1
        and not node.keywords
    ):
        return apply_function(node.func.id, _eval(node.args[0], degrees), degrees)
    raise _invalid(f"unsupported element {type(node).__name__}")


def evaluate(expression: str, degrees: bool = True) -> float:
    text = (expression or "").strip()
    if not text:
        raise _invalid("empty expression")
    for symbol, replacement in SYMBOLS.items():
        text = text.replace(symbol, replacement)
    try:
        tree = ast.parse(text, mode="eval")
    except SyntaxError as exc:
        raise _invalid(exc.msg) from exc
    try:
        result = float(_eval(tree, degrees))
    except (ZeroDivisionError, OverflowError, ValueError, TypeError) as exc:
        raise _invalid(str(exc)) from exc
    return _finite(result)
