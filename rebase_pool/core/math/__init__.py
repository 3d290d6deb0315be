"""
Core math modules для rebase-pool

Целочисленные примитивы и fixed-point decimal с гарантией детерминизма.
"""

# Checked uint256 arithmetic
from rebase_pool.core.math.checked_math import (
    UINT256_BITS,
    UINT256_MAX,
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    mul_div,
    validate_uint,
)

# Fixed-point decimal
from rebase_pool.core.math.fixed_point import (
    DEFAULT_DECIMAL_PRECISION,
    WIRE_KIND,
    FixedPointDecimal,
    Numberish,
    decimal,
    to_scaled_int,
)

__all__ = [
    # Checked Math: Constants
    "UINT256_BITS",
    "UINT256_MAX",
    # Checked Math: Functions
    "checked_add",
    "checked_div",
    "checked_mul",
    "checked_sub",
    "mul_div",
    "validate_uint",
    # Fixed Point: Constants
    "DEFAULT_DECIMAL_PRECISION",
    "WIRE_KIND",
    # Fixed Point: Types
    "FixedPointDecimal",
    "Numberish",
    # Fixed Point: Functions
    "decimal",
    "to_scaled_int",
]
