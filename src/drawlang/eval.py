"""Expression evaluation over the AST."""

from __future__ import annotations

import math
from dataclasses import dataclass

from drawlang.ast import (
    BinaryExpr,
    ColorNameExpr,
    ConstExpr,
    Expr,
    FuncCallExpr,
    ParamExpr,
    UnaryExpr,
)
from drawlang.symbols import Color, ColorTable
from drawlang.tokens import KeywordId


@dataclass
class EvalEnv:
    """Evaluation environment; ``t`` is the live loop parameter."""

    t: float = 0.0


def value(expr: Expr, env: EvalEnv) -> float:
    """Compute the numeric value of *expr*. Never raises for bad arithmetic."""
    match expr:
        case ConstExpr(value=v):
            return v
        case ParamExpr():
            return env.t
        case UnaryExpr(op=op, operand=operand):
            v = value(operand, env)
            return -v if op is KeywordId.MINUS else v
        case BinaryExpr(op=op, left=left, right=right):
            return _binary(op, value(left, env), value(right, env))
        case FuncCallExpr(function=fn, argument=arg):
            if fn is None:
                return 0.0
            return fn(value(arg, env))
        case ColorNameExpr():
            return 0.0
    raise TypeError(f"not an expression node: {type(expr).__name__}")


def _binary(op: KeywordId, a: float, b: float) -> float:
    if op is KeywordId.PLUS:
        return a + b
    if op is KeywordId.MINUS:
        return a - b
    if op is KeywordId.MUL:
        return a * b
    if op is KeywordId.DIV:
        if b == 0.0:
            return 0.0
        return a / b
    if op is KeywordId.POWER:
        return _power(a, b)
    raise ValueError(f"not a binary operator: {op.name}")


def _power(base: float, exponent: float) -> float:
    # math.pow stays real: a negative base with a fractional exponent is NaN
    try:
        return math.pow(base, exponent)
    except ValueError:
        if base == 0.0:
            return math.inf
        return math.nan
    except OverflowError:
        if base < 0 and exponent == int(exponent) and int(exponent) % 2:
            return -math.inf
        return math.inf


def color_of(node: ColorNameExpr, colors: ColorTable) -> Color:
    """Resolve a color name; unknown names give red."""
    return colors.lookup(node.name)
