# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Template selection, caching, rendering and validation.

This module exposes a single import surface so callers do not need to know
where the cache, manager, selector or validators live internally.
"""

from .cache import CacheEntry, TemplateCache
from .catalog import BUILTIN_TEMPLATES_DIR, default_catalog
from .engine import TemplateRenderer, build_render_data
from .functions import TEMPLATE_FUNCTIONS
from .manager import TemplateManager, create_environment
from .selector import DefaultTemplateSelector, TemplateSelector
from .validator import (
    HCLValidator,
    ValidationLevel,
    ValidationOptions,
    ValidationResult,
    ValidationStatus,
    YAMLValidator,
    analyze_template,
    format_rendered_content,
    get_validator,
    validate_rendered_content,
    validate_resource_template,
)

__all__ = [
    "BUILTIN_TEMPLATES_DIR",
    "CacheEntry",
    "DefaultTemplateSelector",
    "HCLValidator",
    "TEMPLATE_FUNCTIONS",
    "TemplateCache",
    "TemplateManager",
    "TemplateRenderer",
    "TemplateSelector",
    "ValidationLevel",
    "ValidationOptions",
    "ValidationResult",
    "ValidationStatus",
    "YAMLValidator",
    "analyze_template",
    "build_render_data",
    "create_environment",
    "default_catalog",
    "format_rendered_content",
    "get_validator",
    "validate_rendered_content",
    "validate_resource_template",
]
