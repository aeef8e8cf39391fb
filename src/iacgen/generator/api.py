# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
High-level generator API.

``build_renderer`` wires a manager, cache and selector from a
GeneratorConfig; ``generate`` runs a whole model through render, format,
validate and write.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional, Union

from prettytable import PrettyTable

from iacgen.config import GeneratorConfig
from iacgen.exceptions import ValidationError
from iacgen.models import InfrastructureModel

from .artifacts import ArtifactWriter
from .rendering import (
    DefaultTemplateSelector,
    TemplateCache,
    TemplateManager,
    TemplateRenderer,
    ValidationLevel,
    ValidationOptions,
    ValidationResult,
    default_catalog,
    format_rendered_content,
    validate_rendered_content,
)
from .utils import TemplateFormat, normalize_format

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    format: TemplateFormat
    content: str
    path: Optional[str] = None
    validation: Optional[ValidationResult] = None
    validation_error: Optional[ValidationError] = None

    @property
    def valid(self) -> bool:
        return self.validation_error is None


def build_renderer(config: Optional[GeneratorConfig] = None, catalog=None) -> TemplateRenderer:
    """
    Construct a ready-to-use renderer.

    Args:
        config: generator settings; defaults apply when omitted
        catalog: Jinja2 loader overriding ``config.templates_dir`` and the bundled templates
    """
    config = config or GeneratorConfig()
    if catalog is None:
        catalog = default_catalog(config.templates_dir)
    cache = TemplateCache(max_size=config.cache_capacity, expiry_seconds=config.cache_expiry_seconds)
    manager = TemplateManager(catalog=catalog, cache=cache)
    if config.preload_common:
        manager.preload_common_templates()

    renderer = TemplateRenderer(manager, DefaultTemplateSelector())
    renderer.set_global_context("region", config.aws_region)
    renderer.set_global_context("provider_version", config.provider_version)
    return renderer


def validation_options(config: GeneratorConfig, level: Optional[str] = None) -> ValidationOptions:
    return ValidationOptions(
        level=ValidationLevel.parse(level or config.validation_level),
        tool_timeout=config.tool_timeout,
        terraform_bin=config.terraform_bin,
    )


def generate(
    model: InfrastructureModel,
    fmt: Union[str, TemplateFormat, None] = None,
    config: Optional[GeneratorConfig] = None,
    renderer: Optional[TemplateRenderer] = None,
    output_dir: Optional[str] = None,
    write: bool = True,
) -> GenerationResult:
    """
    Render every resource of ``model`` into one document and write it out.

    Validation runs at ``config.validation_level``. A failed validation is
    logged and recorded on the result; the document is still written.

    Args:
        model: resources to render, in output order
        fmt: target format; ``config.default_format`` if omitted
        config: generator settings
        renderer: prebuilt renderer; built from ``config`` if omitted
        output_dir: destination directory; ``config.output_dir`` if omitted
        write: when False, nothing is written and ``path`` stays None

    Returns:
        GenerationResult with the formatted content and validation outcome
    """
    config = config or GeneratorConfig()
    fmt = normalize_format(fmt or config.default_format)
    renderer = renderer or build_renderer(config)

    region = model.region(config.aws_region)
    if region != config.aws_region:
        renderer.set_global_context("region", region)

    content = format_rendered_content(fmt, renderer.render_resources(fmt, model.resources))
    result = GenerationResult(format=fmt, content=content)

    try:
        result.validation = validate_rendered_content(fmt, content, validation_options(config))
        if result.validation.message:
            logger.info(result.validation.message)
    except ValidationError as e:
        result.validation_error = e
        logger.warning(f"Generated {fmt.value} output failed validation: {e}")
        if e.tool_output:
            logger.warning(e.tool_output)

    if write:
        target_dir = os.path.abspath(output_dir or config.output_dir)
        writer = ArtifactWriter(output_dir=target_dir)
        result.path = writer.write({fmt.default_filename: content})[0]
    return result


def build_templates_table(manager: TemplateManager, fmt: Union[str, TemplateFormat]) -> PrettyTable:
    """Catalog listing for one format with each template's cache state."""
    fmt = normalize_format(fmt)
    table = PrettyTable()
    table.field_names = ["Template", "Format", "Cached"]
    table.align["Template"] = "l"
    rows_added = False
    for name in manager.list_templates(fmt):
        cached = (fmt.value, name) in manager.cache
        table.add_row([name, fmt.value, "yes" if cached else ""])
        rows_added = True
    if not rows_added:
        table.add_row(["-", fmt.value, "-"])
    return table
