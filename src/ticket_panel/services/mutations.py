"""
Mutation wrapper

Runs one kind of write and tracks whether any call is still in flight,
so the view can disable the matching buttons while it is pending.
"""

import logging
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")

SuccessHook = Callable[[Any, Any], None]
ErrorHook = Callable[[Exception, Any], None]


class Mutation(Generic[V]):
    """
    A named write operation with success/error hooks.

    Hooks registered on the mutation run on every call; the per-call
    `on_success` runs after them and only for that call.
    """

    def __init__(
        self,
        name: str,
        mutation_fn: Callable[[V], Awaitable[Any]],
        on_success: Optional[SuccessHook] = None,
        on_error: Optional[ErrorHook] = None,
    ):
        self.name = name
        self._mutation_fn = mutation_fn
        self._on_success = on_success
        self._on_error = on_error
        self._in_flight = 0

    @property
    def is_pending(self) -> bool:
        """True while at least one call has not finished."""
        return self._in_flight > 0

    async def mutate(self, variables: V, on_success: Optional[SuccessHook] = None) -> Any:
        """
        Run the write.

        Args:
            variables: Input passed to the mutation function
            on_success: Extra hook for this call only

        Returns:
            The mutation function's result

        Raises:
            Whatever the mutation function raised, after the error hook ran
        """
        self._in_flight += 1
        try:
            result = await self._mutation_fn(variables)
        except Exception as e:
            logger.debug(f"Mutation '{self.name}' failed: {e}")
            if self._on_error is not None:
                self._on_error(e, variables)
            raise
        finally:
            self._in_flight -= 1

        if self._on_success is not None:
            self._on_success(result, variables)
        if on_success is not None:
            on_success(result, variables)
        return result
