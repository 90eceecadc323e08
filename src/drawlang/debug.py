"""--debug AST dump, --tokens listing, and source rendering of AST nodes."""

from __future__ import annotations

import sys
from typing import TextIO

from drawlang.ast import (
    BinaryExpr,
    ColorNameExpr,
    ColorStmt,
    ConstExpr,
    Expr,
    ForDrawStmt,
    FuncCallExpr,
    OriginStmt,
    ParamExpr,
    Program,
    RotStmt,
    ScaleStmt,
    SizeStmt,
    Statement,
    UnaryExpr,
)
from drawlang.tokens import KeywordId, LexicalFault, LiteralValue, Token

_OP_TEXT: dict[KeywordId, str] = {
    KeywordId.PLUS: "+",
    KeywordId.MINUS: "-",
    KeywordId.MUL: "*",
    KeywordId.DIV: "/",
    KeywordId.POWER: "**",
}


def dump_ast(program: Program, *, file: TextIO = sys.stderr) -> None:
    """Print a human-readable AST tree to *file*."""
    file.write(f"Program ({len(program.statements)} statements)\n")
    for stmt in program.statements:
        _dump_statement(stmt, 1, file)


def dump_tokens(tokens: list[Token], *, file: TextIO = sys.stdout) -> None:
    """Print one token per line: location, category and lexeme."""
    for tok in tokens:
        line = f"{tok.location}\t{tok.category.name}\t{tok.lexeme!r}"
        if tok.payload is not None:
            line += f"\t{_payload_text(tok)}"
        file.write(line + "\n")


def _payload_text(tok: Token) -> str:
    payload = tok.payload
    if isinstance(payload, KeywordId):
        return payload.name
    if isinstance(payload, LiteralValue):
        return f"{payload.kind.name} {payload.value!r}"
    if isinstance(payload, LexicalFault):
        return f"{payload.kind.name} {payload.message}"
    return ""


def _indent(depth: int) -> str:
    return "  " * depth


def _dump_statement(stmt: Statement, depth: int, f: TextIO) -> None:
    f.write(f"{_indent(depth)}{type(stmt).__name__} @ {stmt.location.line}:{stmt.location.column}\n")
    for expr in stmt.exprs:
        _dump_expr(expr, depth + 1, f)


def _dump_expr(expr: Expr, depth: int, f: TextIO) -> None:
    pad = _indent(depth)
    match expr:
        case ConstExpr(value=v, lexeme=lexeme):
            f.write(f"{pad}Const {v!r} ({lexeme})\n")
        case ParamExpr():
            f.write(f"{pad}Param T\n")
        case ColorNameExpr(name=name):
            f.write(f"{pad}ColorName {name or '?'}\n")
        case UnaryExpr(op=op, operand=operand):
            f.write(f"{pad}Unary {_OP_TEXT[op]}\n")
            _dump_expr(operand, depth + 1, f)
        case BinaryExpr(op=op, left=left, right=right):
            f.write(f"{pad}Binary {_OP_TEXT[op]}\n")
            _dump_expr(left, depth + 1, f)
            _dump_expr(right, depth + 1, f)
        case FuncCallExpr(name=name, function=fn, argument=arg):
            unbound = "" if fn is not None else " (unbound)"
            f.write(f"{pad}Call {name}{unbound}\n")
            _dump_expr(arg, depth + 1, f)


# ------------------------------------------------------------------
# Source rendering
# ------------------------------------------------------------------


def to_source(node: Program | Statement | Expr) -> str:
    """Render *node* back to DrawLang text, fully parenthesised."""
    match node:
        case Program(statements=statements):
            return "".join(to_source(s) + ";\n" for s in statements)
        case OriginStmt():
            return f"ORIGIN IS ({to_source(node.x)}, {to_source(node.y)})"
        case ScaleStmt():
            return f"SCALE IS ({to_source(node.x)}, {to_source(node.y)})"
        case RotStmt():
            return f"ROT IS {to_source(node.angle)}"
        case ForDrawStmt():
            return (
                f"FOR T FROM {to_source(node.start)} TO {to_source(node.end)} "
                f"STEP {to_source(node.step)} DRAW ({to_source(node.x)}, {to_source(node.y)})"
            )
        case ColorStmt(exprs=exprs):
            if node.color_name is not None:
                return f"COLOR IS {node.color_name.name}"
            return "COLOR IS (" + ", ".join(to_source(e) for e in exprs) + ")"
        case SizeStmt(exprs=exprs):
            if len(exprs) == 1:
                return f"SIZE IS {to_source(exprs[0])}"
            return "SIZE IS (" + ", ".join(to_source(e) for e in exprs) + ")"
        case ConstExpr(lexeme=lexeme):
            return lexeme
        case ParamExpr():
            return "T"
        case ColorNameExpr(name=name):
            return name
        case UnaryExpr(op=op, operand=operand):
            return f"({_OP_TEXT[op]}{to_source(operand)})"
        case BinaryExpr(op=op, left=left, right=right):
            return f"({to_source(left)} {_OP_TEXT[op]} {to_source(right)})"
        case FuncCallExpr(name=name, argument=arg):
            return f"{name}({to_source(arg)})"
    raise TypeError(f"not an AST node: {type(node).__name__}")
