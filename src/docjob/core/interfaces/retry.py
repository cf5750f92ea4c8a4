from typing import Protocol, Any, Awaitable, Callable

from docjob.core.models.state import RetryState

class RetryPort(Protocol):
    """Abstract retry interface for async operations.

    Implementations re-run a callable while the RetryPolicy allows it. The
    contract keeps the core decoupled from a specific library (tenacity).
    """
    async def execute(self, func: Callable[..., Awaitable[Any]], state: RetryState, *args, **kwargs) -> Any:  # pragma: no cover - protocol
        """Execute an async callable with retry semantics.

        Args:
            func: Async callable returning a result.
            state: RetryState of the current logical invocation; updated in place.
            *args/**kwargs: Passed to the callable.
        Returns:
            Result of the successful invocation.
        Raises:
            Propagates the last exception once the policy says stop.
        """
        ...
