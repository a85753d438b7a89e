"""
Timeout Module

Bounded waits for remote calls so that a hung backend cannot stall a request.
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from search_hub_exceptions import OperationTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar('T')


async def run_with_timeout(
    awaitable: Awaitable[T],
    timeout: Optional[float],
    operation: str = "operation"
) -> T:
    """
    Await a call with an upper bound on its duration.

    Args:
        awaitable: Coroutine or awaitable to run
        timeout: Maximum seconds to wait; None or a non-positive value disables the bound
        operation: Operation name used in the error message

    Returns:
        Result of the awaitable

    Raises:
        OperationTimeoutError: If the call does not complete within ``timeout``
    """
    if timeout is None or timeout <= 0:
        return await awaitable

    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.warning(f"{operation} timed out after {timeout}s")
        raise OperationTimeoutError(f"{operation} timed out after {timeout} seconds") from e
