"""
Bounded deadline for blocking storage calls.

Services are synchronous SQLAlchemy code. Route handlers run them in the
threadpool and stop waiting after ``request_timeout_seconds``; expiry is
reported as a storage failure so the caller can refresh and retry.

Expiry stops the wait, not the worker. Callables passed here open and close
their own session (see PickController), and the database enforces the same
limit on the statement itself (see DatabaseManager).
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Optional, TypeVar

from fastapi.concurrency import run_in_threadpool

from picklist.config import get_settings
from picklist.core import exceptions


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_with_deadline(
    func: Callable[..., T],
    *args: Any,
    timeout: Optional[float] = None,
    **kwargs: Any
) -> T:
    """
    Run ``func`` in the threadpool, bounded by a deadline.

    Args:
        func: Blocking callable (usually a service method)
        timeout: Seconds to wait (defaults to settings.request_timeout_seconds)

    Raises:
        StorageUnavailable: If the deadline expires
    """
    if timeout is None:
        timeout = get_settings().request_timeout_seconds

    call = functools.partial(func, *args, **kwargs)
    try:
        return await asyncio.wait_for(run_in_threadpool(call), timeout=timeout)
    except asyncio.TimeoutError:
        name = getattr(func, "__qualname__", repr(func))
        logger.error(f"⏱️ {name} exceeded deadline of {timeout}s")
        raise exceptions.storage_unavailable("Storage did not respond in time")
