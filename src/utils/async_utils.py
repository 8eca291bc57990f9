"""
c0rd - Async Utilities
======================

Concurrent fan-out over keyed jobs, with failures logged and left out.

Usage:
    from src.utils.async_utils import gather_keyed

    channels = await gather_keyed(
        {key: resolve(key) for key in keys},
        context="Topology Reconcile",
    )
"""

import asyncio
from typing import Any, Awaitable, Dict, Mapping, Optional, TypeVar

from src.core.logger import logger

K = TypeVar("K")
V = TypeVar("V")


async def gather_keyed(
    jobs: Mapping[K, Awaitable[Optional[V]]],
    context: Optional[str] = None,
) -> Dict[K, V]:
    """
    Await every job concurrently and collect the ones that produced a value.

    A job that raises is logged as a warning and skipped; a job that
    returns None is skipped silently. Other jobs are never cancelled.

    Returns:
        Results by key, in the order of ``jobs``.
    """
    keys = list(jobs)
    results = await asyncio.gather(*jobs.values(), return_exceptions=True)

    collected: Dict[K, V] = {}
    failed = 0
    for key, result in zip(keys, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            failed += 1
            details = [
                ("Key", str(getattr(key, "value", key))),
                ("Error Type", type(result).__name__),
                ("Error", str(result)[:100]),
            ]
            if context:
                details.insert(0, ("Context", context))
            logger.warning("Async Job Failed", details)
        elif result is not None:
            collected[key] = result

    if failed:
        logger.debug(f"{context or 'gather_keyed'}: {failed}/{len(keys)} jobs failed")
    return collected


__all__ = ["gather_keyed"]
