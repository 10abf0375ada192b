"""Syntactic checks for generated engine expressions.

The compiler never evaluates expressions; it only guarantees they are well
formed: balanced parentheses, known characters, and known identifiers.
"""

from __future__ import annotations

import re

from brandr.core.errors import InvalidExpression

# Engine functions the compiler and graph renderer emit
KNOWN_FUNCTIONS = frozenset(
    {
        "abs",
        "alpha",
        "b",
        "between",
        "clip",
        "cos",
        "eq",
        "exp",
        "g",
        "gt",
        "gte",
        "if",
        "lt",
        "lte",
        "max",
        "min",
        "pow",
        "r",
        "roth",
        "rotw",
        "sin",
    }
)

# Free symbols: time, frame and overlay sizes, pixel coordinates, constants
KNOWN_SYMBOLS = frozenset({"t", "T", "W", "H", "w", "h", "X", "Y", "iw", "ih", "PI"})

_TOKEN_RE = re.compile(r"\s*(?:(\d+(?:\.\d*)?|\.\d+)|([A-Za-z_][A-Za-z_0-9]*)|(.))")
_OPERATORS = set("+-*/^(),")


def validate_expression(expr: str) -> str:
    """Validate an expression and return it unchanged.

    Args:
        expr: Expression text

    Returns:
        The same expression, for call chaining

    Raises:
        InvalidExpression: If the expression is empty, has unbalanced
            parentheses, or uses unknown characters or identifiers

    Example:
        >>> validate_expression("min(max((t-0.5)/1,0),1)")
        'min(max((t-0.5)/1,0),1)'
    """
    if not expr or not expr.strip():
        raise InvalidExpression(expr, "empty expression")

    depth = 0
    tokens = [m for m in _TOKEN_RE.finditer(expr) if m.group(0).strip()]
    for i, match in enumerate(tokens):
        number, ident, other = match.groups()
        if ident is not None:
            next_tok = tokens[i + 1].group(3) if i + 1 < len(tokens) else None
            if next_tok == "(":
                if ident not in KNOWN_FUNCTIONS:
                    raise InvalidExpression(expr, f"unknown function '{ident}'")
            elif ident not in KNOWN_SYMBOLS:
                raise InvalidExpression(expr, f"undefined symbol '{ident}'")
        elif other is not None:
            if other not in _OPERATORS:
                raise InvalidExpression(expr, f"unexpected character '{other}'")
            if other == "(":
                depth += 1
            elif other == ")":
                depth -= 1
                if depth < 0:
                    raise InvalidExpression(expr, "unbalanced parentheses")

    if depth != 0:
        raise InvalidExpression(expr, "unbalanced parentheses")
    return expr
