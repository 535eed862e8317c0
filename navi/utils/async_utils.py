import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

# Shared pool for blocking OS calls (process listing, app scans, launches)
_executor: Optional[ThreadPoolExecutor] = None
_MAX_WORKERS = 4

T = TypeVar('T')


def get_executor() -> ThreadPoolExecutor:
    """Return the shared pool, recreating it after ``cleanup_executor``."""
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(
            max_workers=_MAX_WORKERS,
            thread_name_prefix="navi_io"
        )
    return _executor


async def run_in_executor(func: Callable[..., T], *args, **kwargs) -> T:
    """
    Run a blocking function in the shared thread pool.

    Usage:
        processes = await run_in_executor(pm.list_running_processes)
        await run_in_executor(subprocess.run, cmd, check=True)
    """
    loop = asyncio.get_running_loop()
    call = partial(func, *args, **kwargs) if kwargs else partial(func, *args)

    try:
        return await loop.run_in_executor(get_executor(), call)
    except Exception as e:
        name = getattr(func, "__name__", repr(func))
        logger.error(f"Error executing {name} in executor: {e}")
        raise


def cleanup_executor():
    """
    Shut the pool down. Call this when the application stops.
    """
    global _executor
    if _executor:
        logger.info("Shutting down async executor...")
        _executor.shutdown(wait=True)
        _executor = None
        logger.info("Executor shutdown complete")
