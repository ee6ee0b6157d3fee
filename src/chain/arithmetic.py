"""Checked uint256 arithmetic.

Python integers never wrap, so the width is enforced explicitly: every value
that lands in storage passes through these helpers and an out-of-range result
is a hard ``ArithmeticOverflow``, never a silent truncation.
"""

from __future__ import annotations

from .errors import ArithmeticOverflow

UINT256_MAX: int = 2**256 - 1
UINT8_MAX: int = 2**8 - 1
UINT96_MAX: int = 2**96 - 1


def checked_add(a: int, b: int) -> int:
    """Add two uint256 values, failing on overflow."""
    result = a + b
    if result > UINT256_MAX:
        raise ArithmeticOverflow(f"uint256 overflow: {a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    """Subtract two uint256 values, failing on underflow."""
    if b > a:
        raise ArithmeticOverflow(f"uint256 underflow: {a} - {b}")
    return a - b


def checked_mul(a: int, b: int) -> int:
    """Multiply two uint256 values, failing on overflow."""
    result = a * b
    if result > UINT256_MAX:
        raise ArithmeticOverflow(f"uint256 overflow: {a} * {b}")
    return result


def checked_sum(values: list[int]) -> int:
    """Sum a list of uint256 values with overflow-checked accumulation."""
    total = 0
    for value in values:
        total = checked_add(total, value)
    return total


def require_uint(value: int, name: str = "value", maximum: int = UINT256_MAX) -> int:
    """Validate that ``value`` is an unsigned integer within ``maximum``."""
    # bool is an int subclass; reject it as an amount
    if not isinstance(value, int) or isinstance(value, bool):
        raise ArithmeticOverflow(
            f"{name} must be an integer, got {type(value).__name__}",
            provided=repr(value),
        )
    if value < 0 or value > maximum:
        raise ArithmeticOverflow(f"{name} out of range: {value}", provided=value)
    return value
