# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Template rendering engine.

The renderer ties selection, loading and execution together. It holds the
global render context shared by every render; each execution works on its
own copy of that context with the resource bound into it.
"""

import logging
import os
from collections.abc import Iterable
from typing import Any, Optional, Union

from iacgen.exceptions import IacGenError, TemplateExecutionError, TemplateNotFoundError
from iacgen.models import Resource, ResourceType

from ..artifacts import ArtifactWriter
from ..utils import ReadWriteLock, TemplateFormat, normalize_format
from .manager import TemplateManager, execute_template
from .selector import DefaultTemplateSelector, TemplateSelector
from .validator import format_rendered_content

logger = logging.getLogger(__name__)


def build_render_data(global_context: dict[str, Any], resource: Resource) -> dict[str, Any]:
    """
    Per-resource template data.

    Keys, later ones winning: the global context, each property by name,
    then ``Name``, ``Type``, ``Properties``, ``DependsOn`` and ``Resource``.
    """
    data = dict(global_context)
    data.update(resource.property_map())
    data.update(
        {
            "Name": resource.name,
            "Type": resource.type_name,
            "Properties": resource.property_map(),
            "DependsOn": list(resource.depends_on),
            "Resource": resource,
        }
    )
    return data


class TemplateRenderer:
    """
    Args:
        manager: source of compiled templates
        selector: resource-to-template selector; DefaultTemplateSelector if omitted
    """

    def __init__(self, manager: TemplateManager, selector: Optional[TemplateSelector] = None):
        self.manager = manager
        self.selector = selector if selector is not None else DefaultTemplateSelector()
        self._global_context: dict[str, Any] = {}
        self._lock = ReadWriteLock()

    def set_global_context(self, key: str, value: Any) -> None:
        with self._lock.write_locked():
            self._global_context[key] = value

    def global_context(self) -> dict[str, Any]:
        """Snapshot of the current global context."""
        with self._lock.read_locked():
            return dict(self._global_context)

    def register_resource_template(
        self, fmt: Union[str, TemplateFormat], resource_type: Union[str, ResourceType], name: str
    ) -> None:
        self.selector.register_template(fmt, resource_type, name)

    def register_pattern_template(self, fmt: Union[str, TemplateFormat], pattern: str, name: str) -> None:
        self.selector.register_pattern_template(fmt, pattern, name)

    def render_resource(self, fmt: Union[str, TemplateFormat], resource: Resource) -> str:
        fmt = normalize_format(fmt)
        name = self.selector.select_template(fmt, resource)
        template = self.manager.get_template(fmt, name)
        data = build_render_data(self.global_context(), resource)
        return execute_template(template, name, data)

    def _render_optional(self, fmt: TemplateFormat, name: str) -> Optional[str]:
        try:
            template = self.manager.get_template(fmt, name)
        except TemplateNotFoundError:
            logger.debug(f"No optional template {fmt.value}/{name}")
            return None
        except IacGenError as e:
            logger.warning(f"Failed to load optional template {fmt.value}/{name}: {e}")
            return None
        try:
            return execute_template(template, name, self.global_context())
        except TemplateExecutionError as e:
            logger.warning(f"Failed to render optional template {fmt.value}/{name}: {e}")
            return None

    def render_resources(self, fmt: Union[str, TemplateFormat], resources: Iterable[Resource]) -> str:
        """
        Render a full document: header, every resource in order, footer.

        The header and footer (``<format>_header.tmpl``/``<format>_footer.tmpl``)
        are optional and never fail the call. Any resource failure aborts it.
        """
        fmt = normalize_format(fmt)
        parts: list[str] = []

        header = self._render_optional(fmt, f"{fmt.value}_header.tmpl")
        if header is not None:
            parts.append(header + "\n")

        for resource in resources:
            parts.append(self.render_resource(fmt, resource) + "\n")

        footer = self._render_optional(fmt, f"{fmt.value}_footer.tmpl")
        if footer is not None:
            parts.append(footer)

        return "".join(parts)

    def render_resource_to_file(
        self, fmt: Union[str, TemplateFormat], resource: Resource, path: str
    ) -> None:
        fmt = normalize_format(fmt)
        content = format_rendered_content(fmt, self.render_resource(fmt, resource))
        writer = ArtifactWriter(output_dir=os.path.dirname(path) or ".")
        writer.write({os.path.basename(path): content})

    def validate_template(self, fmt: Union[str, TemplateFormat], resource: Resource) -> None:
        """Dry run: render ``resource`` and discard the output."""
        self.render_resource(fmt, resource)
