"""
Core types for cartflow.

Re-exports from kungfu + checkout-wide type aliases.
"""

from __future__ import annotations

from decimal import Decimal

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail."""

type Remote[T, E] = Lazy[T, E]
"""Lazy remote call. Nothing is sent until it is awaited."""

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Amount = int
"""Whole currency units. All totals are integers."""

type Percentage = Decimal
"""Discount rate in percent, 0 < p <= 100."""

# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Type aliases
    "Lazy",
    "Remote",
    "Amount",
    "Percentage",
)
