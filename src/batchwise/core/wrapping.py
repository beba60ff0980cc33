"""
Helpers shared by the runner factories.

Every factory accepts the operation and its policy in either order:

    make_retry_runner(op)
    make_retry_runner(op, policy)
    make_retry_runner(policy)(op)

    @make_retry_runner
    async def my_func(arg): ...
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol, TypeVar

P = TypeVar("P")
R = TypeVar("R")
P_contra = TypeVar("P_contra", contravariant=True)
R_co = TypeVar("R_co", covariant=True)


class Operation(Protocol[P_contra, R_co]):
    """An async callable taking exactly one argument."""

    def __call__(self, arg: P_contra, /) -> Awaitable[R_co]: ...


AsyncCallable = Callable[..., Awaitable[Any]]
Sleep = Callable[[float], Awaitable[Any]]


def resolve_arguments(first: Any, second: Any) -> tuple[Callable[..., Any] | None, Any]:
    """Split factory arguments into (operation, policy).

    The operation is whichever of the two arguments is callable; the
    other one is the policy. When neither is callable the operation
    is None and the factory should return a decorator.

    Raises:
        TypeError: If both arguments are callable
    """
    if callable(first):
        if callable(second):
            raise TypeError("Expected one operation and one policy, got two callables")
        return first, second
    if second is not None and not callable(second):
        raise TypeError(
            f"Expected an operation after the policy, got {type(second).__name__}"
        )
    return second, first


def ensure_operation(op: Any) -> None:
    """Raise TypeError unless op can be called."""
    if not callable(op):
        raise TypeError(f"Operation must be callable, got {type(op).__name__}")
