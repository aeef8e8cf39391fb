# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Error types raised by the template engine and its collaborators.

Each error also derives from the closest built-in exception so callers that
only know about ``FileNotFoundError``/``ValueError``/``OSError`` keep working.
"""

from typing import Optional


class IacGenError(Exception):
    """Base class for all iacgen errors."""


class TemplateNotFoundError(IacGenError, FileNotFoundError):
    """A template, catalog path or pattern match does not exist."""


class TemplateParseError(IacGenError):
    """A template body failed to compile."""

    def __init__(self, template_name: str, message: str):
        super().__init__(message)
        self.template_name = template_name


class TemplateExecutionError(IacGenError):
    """A compiled template failed while rendering against its data."""

    def __init__(self, template_name: str, message: str):
        super().__init__(message)
        self.template_name = template_name


class ValidationError(IacGenError, ValueError):
    """Rendered content failed syntax, structural or external-tool checks."""

    def __init__(self, message: str, content: Optional[str] = None, tool_output: Optional[str] = None):
        super().__init__(message)
        self.content = content
        self.tool_output = tool_output


class ConfigurationError(IacGenError, ValueError):
    """Unsupported format, invalid pattern, or bad configuration value."""


class ArtifactWriteError(IacGenError, OSError):
    """Writing a rendered artifact to its destination failed."""

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path
