# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Shared helpers for generator modules."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, Optional, Union

from iacgen.exceptions import ConfigurationError


class TemplateFormat(Enum):
    terraform = "terraform"
    crossplane = "crossplane"

    @property
    def extension(self) -> str:
        return ".tf" if self is TemplateFormat.terraform else ".yaml"

    @property
    def default_filename(self) -> str:
        stem = "main" if self is TemplateFormat.terraform else "resources"
        return stem + self.extension

    def __str__(self) -> str:
        return self.value


DEFAULT_FORMAT = TemplateFormat.terraform


def normalize_format(
    fmt: Optional[Union[str, TemplateFormat]], default: TemplateFormat = DEFAULT_FORMAT
) -> TemplateFormat:
    """Normalize format names to TemplateFormat members with a fallback."""
    if isinstance(fmt, TemplateFormat):
        return fmt
    if not fmt:
        return default
    key = str(fmt).strip().lower()
    try:
        return TemplateFormat(key)
    except ValueError:
        raise ConfigurationError(f"Unsupported template format: {fmt}") from None


_TRUE_WORDS = frozenset({"true", "yes", "on", "1"})
_FALSE_WORDS = frozenset({"false", "no", "off", "0"})


def coerce_bool(value: Any, default: Optional[bool] = None) -> Optional[bool]:
    """Interpret a YAML or command-line flag value; unrecognized words are a ConfigurationError."""
    if value is None:
        return default
    if isinstance(value, (bool, int)):
        return bool(value)
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ConfigurationError(f"Expected a boolean value, got {value!r}")


class ReadWriteLock:
    """
    Many concurrent readers or a single writer.

    Once a writer is waiting, new readers block until it has run. Not
    reentrant: a thread holding the read side must not acquire it again.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    def acquire_read(self) -> None:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self) -> None:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True

    def release_write(self) -> None:
        with self._cond:
            self._writer = False
            self._cond.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
