"""
Async utilities for wrapping blocking calls in FastAPI route handlers.

Extraction runs and artifact encoding are synchronous (curl_cffi requests,
Pillow, openpyxl, python-docx); wrap them with run_sync() so the asyncio
event loop keeps serving progress polls.
"""
from __future__ import annotations

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar, Callable

T = TypeVar("T")

# Shared executor for blocking route calls.
# ExtractManager runs the pipeline on its own worker thread.
_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="api-sync")


async def run_sync(fn: Callable[..., T], *args, **kwargs) -> T:
    """Run a synchronous blocking function in the thread pool executor.

    Usage:
        result = await run_sync(blocking_function, arg1, arg2)
        result = await run_sync(obj.method, arg1, kwarg=value)
    """
    loop = asyncio.get_running_loop()
    if kwargs:
        call = functools.partial(fn, *args, **kwargs)
        return await loop.run_in_executor(_executor, call)
    return await loop.run_in_executor(_executor, fn, *args)
