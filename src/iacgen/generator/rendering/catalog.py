# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Template catalog access.

A catalog is any Jinja2 loader implementing ``get_source`` and
``list_templates``. Paths look like ``<format>/<name>``, with shared partials
under ``<format>/_common/``.
"""

from pathlib import Path
from typing import Optional

from jinja2 import BaseLoader, Environment, FileSystemLoader, TemplateNotFound

from iacgen.exceptions import TemplateNotFoundError

_BASE_DIR = Path(__file__).resolve().parent
BUILTIN_TEMPLATES_DIR = (_BASE_DIR.parent / "templates").resolve()

COMMON_NAMESPACE = "_common"
TEMPLATE_SUFFIXES = (".tmpl", ".gotmpl", ".j2")

# get_source on the stock loaders never consults the environment
_SOURCE_ENV = Environment()


def default_catalog(templates_dir: Optional[str] = None) -> BaseLoader:
    """Filesystem catalog rooted at ``templates_dir``, or the bundled templates."""
    root = Path(templates_dir) if templates_dir else BUILTIN_TEMPLATES_DIR
    if not root.is_dir():
        raise TemplateNotFoundError(f"Templates directory not found: {root}")
    return FileSystemLoader(str(root))


def read_source(catalog: BaseLoader, path: str) -> str:
    try:
        source, _, _ = catalog.get_source(_SOURCE_ENV, path)
    except TemplateNotFound as e:
        raise TemplateNotFoundError(f"failed to read template {path}") from e
    return source


def list_paths(catalog: BaseLoader, prefix: str) -> list[str]:
    """All catalog paths below ``prefix/``, relative to it, in listing order."""
    root = prefix.rstrip("/") + "/"
    return [path[len(root) :] for path in catalog.list_templates() if path.startswith(root)]


def is_template_file(name: str) -> bool:
    return name.endswith(TEMPLATE_SUFFIXES)
