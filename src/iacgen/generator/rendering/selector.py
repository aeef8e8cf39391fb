# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Resource-to-template selection.

Selection order for a resource:

1. direct mapping by resource type,
2. fallback patterns tested against the type string, in registration order,
3. the generic name ``<type>.tmpl``.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Optional, Union

from iacgen.exceptions import ConfigurationError
from iacgen.models import Resource, ResourceType

from ..utils import ReadWriteLock, TemplateFormat, normalize_format

logger = logging.getLogger(__name__)

DEFAULT_MAPPINGS: dict[ResourceType, str] = {
    ResourceType.vpc: "vpc.tmpl",
    ResourceType.subnet: "subnet.tmpl",
    ResourceType.internet_gateway: "internet_gateway.tmpl",
    ResourceType.nat_gateway: "nat_gateway.tmpl",
    ResourceType.eks_cluster: "eks_cluster.tmpl",
    ResourceType.eks_node_group: "eks_node_group.tmpl",
    ResourceType.ec2_instance: "ec2_instance.tmpl",
    ResourceType.s3_bucket: "s3_bucket.tmpl",
    ResourceType.security_group: "security_group.tmpl",
    ResourceType.iam_role: "iam_role.tmpl",
    ResourceType.lambda_function: "lambda.tmpl",
    ResourceType.dynamodb: "dynamodb.tmpl",
    ResourceType.cloudwatch: "cloudwatch.tmpl",
    ResourceType.rds_instance: "rds_instance.tmpl",
}

DEFAULT_PATTERNS: list[tuple[str, str]] = [
    ("^ec2_", "ec2_resource.tmpl"),
    ("^rds_", "rds_resource.tmpl"),
    ("^lambda_", "lambda_resource.tmpl"),
    ("^iam_", "iam_resource.tmpl"),
    ("^s3_", "s3_resource.tmpl"),
    ("^dynamo_", "dynamo_resource.tmpl"),
    ("^eks_", "eks_resource.tmpl"),
    ("^vpc_", "vpc_resource.tmpl"),
]


class TemplateSelector(ABC):
    """Interface every selector plugged into the renderer implements."""

    @abstractmethod
    def select_template(self, fmt: Union[str, TemplateFormat], resource: Resource) -> str:
        """Return the template name to render ``resource`` with."""

    @abstractmethod
    def register_template(
        self, fmt: Union[str, TemplateFormat], resource_type: Union[str, ResourceType], name: str
    ) -> None:
        """Map a resource type directly to a template name."""

    @abstractmethod
    def register_pattern_template(self, fmt: Union[str, TemplateFormat], pattern: str, name: str) -> None:
        """Add a fallback rule mapping matching type strings to a template name."""


def _compile(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"invalid template pattern {pattern!r}: {e}") from e


class DefaultTemplateSelector(TemplateSelector):
    """
    Table-driven selector.

    Args:
        mappings: per-format direct mappings; both formats get DEFAULT_MAPPINGS if omitted
        patterns: per-format ordered fallback rules; every format in ``mappings`` gets
            DEFAULT_PATTERNS if omitted

    A format is selectable only once it has a direct-mapping table, even an
    empty one; fallback rules alone do not register it.
    """

    def __init__(
        self,
        mappings: Optional[dict[TemplateFormat, dict[ResourceType, str]]] = None,
        patterns: Optional[dict[TemplateFormat, list[tuple[str, str]]]] = None,
    ):
        if mappings is None:
            mappings = {fmt: dict(DEFAULT_MAPPINGS) for fmt in TemplateFormat}
        if patterns is None:
            patterns = {fmt: list(DEFAULT_PATTERNS) for fmt in mappings}

        self._mappings: dict[TemplateFormat, dict[ResourceType, str]] = {}
        self._patterns: dict[TemplateFormat, list[tuple[re.Pattern, str]]] = {}
        self._lock = ReadWriteLock()

        for fmt, table in mappings.items():
            self._mappings[normalize_format(fmt)] = {ResourceType.parse(t): n for t, n in table.items()}
        for fmt, rules in patterns.items():
            self._patterns[normalize_format(fmt)] = [(_compile(p), n) for p, n in rules]

    def select_template(self, fmt: Union[str, TemplateFormat], resource: Resource) -> str:
        fmt = normalize_format(fmt)
        with self._lock.read_locked():
            table = self._mappings.get(fmt)
            rules = self._patterns.get(fmt)
            if table is None:
                raise ConfigurationError(f"no template mappings registered for format {fmt.value}")

            if resource.type in table:
                return table[resource.type]

            type_name = resource.type_name
            for regex, name in rules or ():
                if regex.search(type_name):
                    return name

        name = f"{type_name}.tmpl"
        logger.debug(f"No mapping for {type_name} in {fmt.value}, using generic template {name}")
        return name

    def register_template(
        self, fmt: Union[str, TemplateFormat], resource_type: Union[str, ResourceType], name: str
    ) -> None:
        fmt = normalize_format(fmt)
        resource_type = ResourceType.parse(resource_type)
        with self._lock.write_locked():
            self._mappings.setdefault(fmt, {})[resource_type] = name

    def register_pattern_template(self, fmt: Union[str, TemplateFormat], pattern: str, name: str) -> None:
        fmt = normalize_format(fmt)
        regex = _compile(pattern)
        with self._lock.write_locked():
            rules = self._patterns.setdefault(fmt, [])
            for i, (existing, _) in enumerate(rules):
                if existing.pattern == pattern:
                    rules[i] = (regex, name)
                    return
            rules.append((regex, name))
