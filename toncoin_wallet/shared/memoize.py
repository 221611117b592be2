"""Session-scoped request de-duplication for async calls.

Concurrent callers with identical arguments share one in-flight task and
observe the same result. Successful results stay cached until ``clear()``;
failures are evicted so the next call goes upstream again.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict, is_dataclass
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _default(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, bytes):
        return value.hex()
    return str(value)


def make_cache_key(name: str, args: tuple, kwargs: dict[str, Any]) -> str:
    return json.dumps([name, list(args), kwargs], sort_keys=True, default=_default)


class RequestCache:
    def __init__(self) -> None:
        self._entries: dict[str, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    async def call(
        self,
        name: str,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        **kwargs: Any,
    ) -> T:
        key = make_cache_key(name, args, kwargs)
        future = self._entries.get(key)
        if future is None:
            future = asyncio.ensure_future(func(*args, **kwargs))
            self._entries[key] = future
        else:
            logger.debug("Request cache hit: %s", name)

        try:
            return await future
        except Exception:
            if self._entries.get(key) is future:
                del self._entries[key]
            raise

    def clear(self) -> None:
        self._entries.clear()
