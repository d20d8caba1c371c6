"""
Lift — helpers for lifting values and remote calls into LazyCoroResult.

Re-exports from combinators.lift with cartflow-specific additions.

    from cartflow import lift

    results = await lift.wait_all([client.get_product(1), client.get_product(2)])
    # Ok([Ok(ProductOut), Error(ApiError)]) — never fails fast
"""

from __future__ import annotations

from collections.abc import Sequence

from combinators import parallel
from combinators.lift import catching_async, fail, pure
from kungfu import LazyCoroResult, Ok, Result


def from_result[T, E](result: Result[T, E]) -> LazyCoroResult[T, E]:
    """Lift a Result into LazyCoroResult."""
    async def _run() -> Result[T, E]:
        return result
    return LazyCoroResult(_run)


def settled[T, E](computation: LazyCoroResult[T, E]) -> LazyCoroResult[Result[T, E], str]:
    """
    Turn a fallible computation into one that succeeds with its own Result.

    Note: Lets parallel() wait for every branch instead of stopping at
    the first Error. Only an unexpected exception fails the branch.
    """
    async def _run() -> Result[T, E]:
        return await computation
    return catching_async(_run, on_error=str)


def wait_all[T, E](
    computations: Sequence[LazyCoroResult[T, E]],
) -> LazyCoroResult[list[Result[T, E]], str]:
    """Run computations concurrently, collect every outcome in input order."""
    if not computations:
        return from_result(Ok([]))
    return parallel(*(settled(c) for c in computations))


__all__ = (
    # From combinators.lift
    "pure",
    "fail",
    "catching_async",
    # cartflow additions
    "from_result",
    "settled",
    "wait_all",
)
