import asyncio
import logging
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def fetch_or_default(label: str, func: Callable[..., T], *args: Any, default: T, **kwargs: Any) -> T:
    """
    Run a blocking fetch in a worker thread and await it.

    A failing fetch is logged and replaced by `default`, so one slow or broken
    query degrades a single figure instead of the whole response.
    """
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except Exception as e:
        logger.warning(f"⚠️ {label} failed, using default {default!r}: {e}")
        return default
