# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Generator configuration.

Settings come from defaults, an optional YAML file (``.iacgen.yaml`` in the
working directory or the home directory) and command-line overrides, in
increasing order of precedence.
"""

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import yaml

from .exceptions import ConfigurationError
from .generator.rendering.cache import DEFAULT_CACHE_CAPACITY, DEFAULT_CACHE_EXPIRY_SECONDS
from .generator.utils import coerce_bool

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".iacgen.yaml"
_VALIDATION_LEVELS = ("none", "basic", "strict")
_LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass
class GeneratorConfig:
    """
    Attributes:
        cache_capacity (int): maximum number of compiled templates kept in memory
        cache_expiry_seconds (float): age after which a cached template is reloaded
        validation_level (str): one of none, basic, strict
        templates_dir (str): catalog directory overriding the bundled templates
        preload_common (bool): compile ``_common`` partials at startup
        aws_region (str): exposed to templates as ``region``
        provider_version (str): exposed to templates as ``provider_version``
        output_dir (str): where generated files are written
        default_format (str): format used when none is requested
        log_level (str): root logging level for the CLI
        terraform_bin (str): terraform executable used by strict validation
        tool_timeout (float): seconds allowed per terraform invocation
    """

    cache_capacity: int = DEFAULT_CACHE_CAPACITY
    cache_expiry_seconds: float = DEFAULT_CACHE_EXPIRY_SECONDS
    validation_level: str = "basic"
    templates_dir: Optional[str] = None
    preload_common: bool = True
    aws_region: str = "us-east-1"
    provider_version: str = "~> 5.0"
    output_dir: str = "."
    default_format: str = "terraform"
    log_level: str = "info"
    terraform_bin: str = "terraform"
    tool_timeout: float = 300

    def __post_init__(self):
        if not self.cache_capacity or self.cache_capacity <= 0:
            self.cache_capacity = DEFAULT_CACHE_CAPACITY
        if not self.cache_expiry_seconds or self.cache_expiry_seconds <= 0:
            self.cache_expiry_seconds = DEFAULT_CACHE_EXPIRY_SECONDS
        self.preload_common = coerce_bool(self.preload_common, default=True)
        self.validation_level = str(self.validation_level).strip().lower()
        if self.validation_level not in _VALIDATION_LEVELS:
            raise ConfigurationError(f"Unsupported validation level: {self.validation_level}")
        self.log_level = str(self.log_level).strip().lower()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"Unsupported log level: {self.log_level}")

    def with_overrides(self, **overrides: Any) -> "GeneratorConfig":
        """Copy of this config with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(changes) - {f.name for f in dataclasses.fields(self)}
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **changes)


def load_config(path: str) -> GeneratorConfig:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, encoding="utf-8") as f:
        payload = yaml.safe_load(f) or {}
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config file must contain a mapping: {path}")

    known = {f.name for f in dataclasses.fields(GeneratorConfig)}
    unknown = set(payload) - known
    if unknown:
        raise ConfigurationError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")
    logger.debug(f"Loaded config from {path}")
    return GeneratorConfig(**payload)


def find_config_file() -> Optional[str]:
    candidates = (os.path.join(os.getcwd(), CONFIG_FILENAME), os.path.join(os.path.expanduser("~"), CONFIG_FILENAME))
    for candidate in candidates:
        if os.path.isfile(candidate):
            return candidate
    return None
