# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Template loading and compilation.

The manager reads template bodies from a catalog, compiles them with the
shared function library, and keeps compiled templates in a TemplateCache.
Partials under ``<format>/_common/`` can be preloaded once per format into a
base environment so every template compiled afterwards can include them.
"""

import logging
import re
from typing import Any, Optional, Union

from jinja2 import BaseLoader, DictLoader, Environment, StrictUndefined, Template, TemplateSyntaxError

from iacgen.exceptions import (
    ConfigurationError,
    IacGenError,
    TemplateExecutionError,
    TemplateNotFoundError,
    TemplateParseError,
)

from ..utils import ReadWriteLock, TemplateFormat, normalize_format
from .cache import TemplateCache
from .catalog import COMMON_NAMESPACE, default_catalog, is_template_file, list_paths, read_source
from .functions import install_functions

logger = logging.getLogger(__name__)


def create_environment(loader: Optional[BaseLoader] = None) -> Environment:
    env = Environment(
        loader=loader,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    return install_functions(env)


def compile_template(env: Environment, source: str, name: str) -> Template:
    """Compile ``source`` as ``name`` against ``env`` without registering it there."""
    try:
        code = env.compile(source, name=name, filename=name)
    except TemplateSyntaxError as e:
        raise TemplateParseError(name, f"failed to parse template {name}: {e}") from e
    return env.template_class.from_code(env, code, env.make_globals(None))


def execute_template(template: Template, name: str, data: dict[str, Any]) -> str:
    try:
        return template.render(data)
    except Exception as e:
        raise TemplateExecutionError(name, f"failed to render template {name}: {e}") from e


class TemplateManager:
    """
    Args:
        catalog: Jinja2 loader holding ``<format>/<name>`` template bodies;
            defaults to the bundled templates directory
        cache: compiled-template cache; a default-sized one is created if omitted
    """

    def __init__(self, catalog: Optional[BaseLoader] = None, cache: Optional[TemplateCache] = None):
        self.catalog = catalog if catalog is not None else default_catalog()
        self.cache = cache if cache is not None else TemplateCache()
        self._plain_envs = {fmt: create_environment() for fmt in TemplateFormat}
        self._base_envs: dict[TemplateFormat, Environment] = {}
        self._lock = ReadWriteLock()

    def preload_common_templates(self) -> None:
        """
        Compile every ``<format>/_common`` partial into a per-format base environment.

        A format without partials is skipped. A syntax error in any partial
        aborts the preload.
        """
        for fmt in TemplateFormat:
            root = f"{fmt.value}/{COMMON_NAMESPACE}"
            partials = {
                f"{COMMON_NAMESPACE}/{name}": read_source(self.catalog, f"{root}/{name}")
                for name in list_paths(self.catalog, root)
                if is_template_file(name)
            }
            if not partials:
                logger.debug(f"No common templates for {fmt.value}")
                continue

            env = create_environment(DictLoader(partials))
            for name in partials:
                try:
                    env.get_template(name)
                except TemplateSyntaxError as e:
                    raise TemplateParseError(name, f"failed to parse common template {fmt.value}/{name}: {e}") from e

            with self._lock.write_locked():
                self._base_envs[fmt] = env
            logger.debug(f"Preloaded {len(partials)} common templates for {fmt.value}")

    def _environment_for(self, fmt: TemplateFormat) -> Environment:
        with self._lock.read_locked():
            return self._base_envs.get(fmt, self._plain_envs[fmt])

    def get_template(self, fmt: Union[str, TemplateFormat], name: str) -> Template:
        fmt = normalize_format(fmt)
        key = (fmt.value, name)
        entry = self.cache.get(key)
        if entry is not None:
            logger.debug(f"Template cache hit: {fmt.value}/{name}")
            return entry.template

        path = f"{fmt.value}/{name}"
        source = read_source(self.catalog, path)
        template = compile_template(self._environment_for(fmt), source, name)
        self.cache.set(key, template, len(source.encode("utf-8")))
        logger.debug(f"Loaded template {path}")
        return template

    def get_template_with_pattern(self, fmt: Union[str, TemplateFormat], pattern: str) -> tuple[Template, str]:
        """Return the first listed template whose name matches ``pattern`` and loads cleanly."""
        fmt = normalize_format(fmt)
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise ConfigurationError(f"invalid template pattern {pattern!r}: {e}") from e

        for name in self.list_templates(fmt):
            if not regex.search(name):
                continue
            try:
                return self.get_template(fmt, name), name
            except IacGenError as e:
                logger.debug(f"Skipping {fmt.value}/{name} for pattern {pattern!r}: {e}")
        raise TemplateNotFoundError(f"no template matching pattern {pattern!r} for format {fmt.value}")

    def list_templates(self, fmt: Union[str, TemplateFormat]) -> list[str]:
        fmt = normalize_format(fmt)
        common = COMMON_NAMESPACE + "/"
        return [
            name
            for name in list_paths(self.catalog, fmt.value)
            if not name.startswith(common) and is_template_file(name)
        ]

    def refresh_cache(self) -> None:
        self.cache.clear()
        logger.debug("Template cache cleared")
