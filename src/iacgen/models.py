# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Infrastructure resource model consumed by the template engine.

Resources are plain records: a type tag, a unique name, ordered name/value
properties and the names of the resources they depend on.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

import yaml

from .exceptions import ConfigurationError


class ResourceType(Enum):
    """Supported AWS resource kinds."""

    ec2_instance = "ec2_instance"
    s3_bucket = "s3_bucket"
    rds_instance = "rds_instance"
    vpc = "vpc"
    subnet = "subnet"
    security_group = "security_group"
    iam_role = "iam_role"
    lambda_function = "lambda"
    dynamodb = "dynamodb"
    cloudwatch = "cloudwatch"
    internet_gateway = "internet_gateway"
    nat_gateway = "nat_gateway"
    eks_cluster = "eks_cluster"
    eks_node_group = "eks_node_group"

    @classmethod
    def parse(cls, value: Union[str, "ResourceType"]) -> "ResourceType":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        try:
            return cls(key)
        except ValueError:
            pass
        if key in cls.__members__:
            return cls.__members__[key]
        raise ConfigurationError(f"Unsupported resource type: {value}")

    def __str__(self) -> str:
        return self.value


@dataclass
class Property:
    name: str
    value: Any


@dataclass
class Resource:
    """
    One infrastructure resource.

    Attributes:
        type (ResourceType): resource kind; strings are coerced on construction
        name (str): unique resource name, used as the label in generated output
        properties (list[Property]): ordered name/value pairs
        depends_on (list[str]): names of resources this one depends on
    """

    type: ResourceType
    name: str
    properties: list[Property] = field(default_factory=list)
    depends_on: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.type = ResourceType.parse(self.type)

    @property
    def type_name(self) -> str:
        return self.type.value

    def add_property(self, name: str, value: Any) -> "Resource":
        self.properties.append(Property(name, value))
        return self

    def add_dependency(self, resource_name: str) -> "Resource":
        if resource_name not in self.depends_on:
            self.depends_on.append(resource_name)
        return self

    def get_property(self, name: str, default: Any = None) -> Any:
        for prop in self.properties:
            if prop.name == name:
                return prop.value
        return default

    def has_property(self, name: str) -> bool:
        return any(prop.name == name for prop in self.properties)

    def property_map(self) -> dict[str, Any]:
        """Properties as a mapping; for duplicate names the first occurrence wins."""
        out: dict[str, Any] = {}
        for prop in self.properties:
            out.setdefault(prop.name, prop.value)
        return out


@dataclass
class InfrastructureModel:
    resources: list[Resource] = field(default_factory=list)

    def add_resource(self, resource: Resource) -> "InfrastructureModel":
        self.resources.append(resource)
        return self

    def find(self, name: str) -> Optional[Resource]:
        for resource in self.resources:
            if resource.name == name:
                return resource
        return None

    def region(self, default: str = "us-east-1") -> str:
        """First string-valued ``region`` property found on any resource."""
        for resource in self.resources:
            for prop in resource.properties:
                if "region" in prop.name.lower() and isinstance(prop.value, str):
                    return prop.value
        return default


def _parse_properties(raw: Any, resource_name: str) -> list[Property]:
    if raw is None:
        return []
    if isinstance(raw, dict):
        return [Property(str(k), v) for k, v in raw.items()]
    if isinstance(raw, list):
        props: list[Property] = []
        for item in raw:
            if not isinstance(item, dict) or "name" not in item:
                raise ConfigurationError(f"Invalid property entry on resource '{resource_name}': {item!r}")
            props.append(Property(str(item["name"]), item.get("value")))
        return props
    raise ConfigurationError(f"Properties of resource '{resource_name}' must be a mapping or a list")


def model_from_dict(payload: dict[str, Any]) -> InfrastructureModel:
    """
    Build an InfrastructureModel from a decoded YAML/JSON document.

    Properties may be given either as a mapping or as a list of
    ``{name, value}`` entries; the list form preserves duplicate names.
    """
    if not isinstance(payload, dict):
        raise ConfigurationError("Model document must be a mapping with a 'resources' list")
    entries = payload.get("resources") or []
    if not isinstance(entries, list):
        raise ConfigurationError("'resources' must be a list")
    model = InfrastructureModel()
    seen: set[str] = set()
    for entry in entries:
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Invalid resource entry: {entry!r}")
        name = entry.get("name")
        if not name or "type" not in entry:
            raise ConfigurationError(f"Resource entries need 'type' and 'name': {entry!r}")
        name = str(name)
        if name in seen:
            raise ConfigurationError(f"Duplicate resource name: {name}")
        seen.add(name)
        depends_on = entry.get("depends_on") or []
        if isinstance(depends_on, str):
            depends_on = [depends_on]
        model.add_resource(
            Resource(
                type=entry["type"],
                name=name,
                properties=_parse_properties(entry.get("properties"), name),
                depends_on=[str(d) for d in depends_on],
            )
        )
    return model


def load_model(path: str) -> InfrastructureModel:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Model file not found: {path}")
    with open(path, encoding="utf-8") as f:
        payload = yaml.safe_load(f) or {}
    return model_from_dict(payload)
