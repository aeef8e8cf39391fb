# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Bounded, time-expiring cache of compiled templates.

Entries are keyed by ``(format, name)``. The cache knows nothing about
formats or resources; it only tracks age and capacity.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..utils import ReadWriteLock

logger = logging.getLogger(__name__)

DEFAULT_CACHE_CAPACITY = 100
DEFAULT_CACHE_EXPIRY_SECONDS = 30 * 60.0

CacheKey = tuple[str, str]


@dataclass
class CacheEntry:
    template: Any
    created_at: float
    size: int = 0


class TemplateCache:
    """
    Args:
        max_size: maximum number of entries; non-positive values fall back to the default
        expiry_seconds: maximum entry age; non-positive values fall back to the default
        clock: monotonic time source, injectable for tests
    """

    def __init__(
        self,
        max_size: int = DEFAULT_CACHE_CAPACITY,
        expiry_seconds: float = DEFAULT_CACHE_EXPIRY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_size = max_size if max_size and max_size > 0 else DEFAULT_CACHE_CAPACITY
        self.expiry_seconds = expiry_seconds if expiry_seconds and expiry_seconds > 0 else DEFAULT_CACHE_EXPIRY_SECONDS
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = ReadWriteLock()

    def _expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.created_at > self.expiry_seconds

    def get(self, key: CacheKey) -> Optional[CacheEntry]:
        """Return the live entry for ``key``, or None. Expired entries are dropped."""
        with self._lock.read_locked():
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._expired(entry):
                return entry

        with self._lock.write_locked():
            entry = self._entries.get(key)
            if entry is not None and self._expired(entry):
                del self._entries[key]
                logger.debug(f"Template cache entry expired: {key[0]}/{key[1]}")
                return None
            return entry

    def set(self, key: CacheKey, template: Any, size: int = 0) -> None:
        with self._lock.write_locked():
            if len(self._entries) >= self.max_size:
                self._evict_oldest()
            self._entries[key] = CacheEntry(template=template, created_at=self._clock(), size=size)

    def _evict_oldest(self) -> None:
        if not self._entries:
            return
        oldest = min(self._entries, key=lambda k: self._entries[k].created_at)
        del self._entries[oldest]
        logger.debug(f"Template cache evicted: {oldest[0]}/{oldest[1]}")

    def clear(self) -> None:
        with self._lock.write_locked():
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        with self._lock.read_locked():
            return key in self._entries
