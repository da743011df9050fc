"""
Media classification and adapter call helpers.
"""

import asyncio
import os
from typing import Callable, Optional, Type, TypeVar

from around.core.errors import AdapterError

T = TypeVar("T")

# Extension -> media kind
MEDIA_TYPES = {
    ".jpeg": "image",
    ".jpg": "image",
    ".gif": "image",
    ".png": "image",
    ".mov": "video",
    ".mp4": "video",
    ".avi": "video",
    ".flv": "video",
    ".wmv": "video",
}


def classify_media(filename: Optional[str]) -> str:
    """
    Media kind for ``filename`` based on its extension.

    >>> classify_media("a.JPG")
    'image'
    >>> classify_media("clip.mp4")
    'video'
    >>> classify_media("notes")
    'unknown'
    """
    _, ext = os.path.splitext(filename or "")
    return MEDIA_TYPES.get(ext.lower(), "unknown")


async def call_adapter(
    fn: Callable[..., T],
    *args,
    timeout: float,
    error_cls: Type[AdapterError],
    step: str,
    **kwargs,
) -> T:
    """
    Run a blocking adapter call in a worker thread with a deadline.

    Adapter errors propagate unchanged. Expiry of ``timeout`` is reported
    as ``error_cls``; no retry is attempted. The worker thread is not
    stopped on expiry, so only calls without side effects go through
    here. Writes rely on the client's own timeout instead.
    """
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(fn, *args, **kwargs),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise error_cls(f"{step} timed out after {timeout:g}s", timed_out=True) from e
