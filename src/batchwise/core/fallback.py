"""
Soft-fail wrapper.

Turns failures of an async operation into a fallback result, so a
single bad input does not abort a whole batch.
"""

from __future__ import annotations

import functools
import inspect
from typing import TYPE_CHECKING, Any

from .logging import describe_operation, get_contextual_logger
from .wrapping import AsyncCallable, ensure_operation

if TYPE_CHECKING:
    from .logging import ContextualLogger


class SoftFailRunner:
    """An async operation whose failures resolve to a fallback value.

    If ``fallback`` is callable it is called with the exception (and
    awaited if it returns an awaitable); otherwise it is returned as-is.
    Exceptions outside ``catch`` propagate.
    """

    def __init__(
        self,
        op: AsyncCallable,
        fallback: Any = None,
        *,
        catch: tuple[type[BaseException], ...] = (Exception,),
    ) -> None:
        ensure_operation(op)
        functools.update_wrapper(self, op, updated=())
        self.op = op
        self.fallback = fallback
        self.catch = catch
        self.name = describe_operation(op)
        self._logger: ContextualLogger = get_contextual_logger(
            "fallback", runner="soft-fail", operation=self.name
        )

    async def __call__(self, *args: Any, **kwargs: Any) -> Any:
        try:
            return await self.op(*args, **kwargs)
        except self.catch as e:
            self._logger.warning("%s failed, using fallback: %r", self.name, e)
            if not callable(self.fallback):
                return self.fallback
            result = self.fallback(e)
            if inspect.isawaitable(result):
                result = await result
            return result

    def __repr__(self) -> str:
        return f"SoftFailRunner({self.name}, fallback={self.fallback!r})"


def make_soft_fail_runner(
    fallback: Any = None,
    op: AsyncCallable | None = None,
    /,
    *,
    catch: tuple[type[BaseException], ...] | None = None,
) -> Any:
    """Wrap an async operation so its failures return a fallback instead.

    The fallback always comes first, so callable fallbacks are never
    mistaken for the operation:

        safe_fetch = make_soft_fail_runner(None, fetch)
        safe_fetch = make_soft_fail_runner(lambda e: {"error": str(e)})(fetch)

    Args:
        fallback: Value to return, or callable taking the exception
        op: The operation (omit to get a decorator)
        catch: Exception types to replace (default: Exception)

    Returns:
        A SoftFailRunner, or a decorator producing one
    """
    def decorator(fn: AsyncCallable) -> SoftFailRunner:
        return SoftFailRunner(
            fn,
            fallback,
            catch=(Exception,) if catch is None else catch,
        )

    if op is not None:
        return decorator(op)
    return decorator
