# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Helper functions injected into every template environment.

Everything here is pure. Helpers are exposed both as filters
(``{{ name | snake }}``) and as globals (``{{ snake(name) }}``). Jinja2
built-ins such as ``title``, ``lower``, ``upper``, ``join``, ``replace``,
``trim`` and ``indent`` are left untouched.
"""

import re
from collections.abc import Mapping
from typing import Any, Callable, Optional

import yaml
from jinja2 import Environment, Undefined

from iacgen.models import Resource

_WORD_SPLIT = re.compile(r"[^0-9A-Za-z]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_YAML_SPECIAL = (":", "{", "}", "[", "]", "#")
_HCL_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


def _words(s: str) -> list[str]:
    s = _CAMEL_BOUNDARY.sub(" ", str(s).strip())
    return [w for w in _WORD_SPLIT.split(s) if w]


def camel(s: str) -> str:
    words = _words(s)
    if not words:
        return str(s).strip()
    return words[0].lower() + "".join(w.capitalize() for w in words[1:])


def snake(s: str) -> str:
    words = _words(s)
    if not words:
        return str(s).strip()
    return "_".join(w.lower() for w in words)


def kebab(s: str) -> str:
    words = _words(s)
    if not words:
        return str(s).strip()
    return "-".join(w.lower() for w in words)


def quote(s: Any) -> str:
    return f'"{s}"'


def indent_prefix(s: str, prefix: str) -> str:
    """Prefix every non-empty line of ``s``."""
    return "\n".join(prefix + line if line else line for line in str(s).split("\n"))


def contains(s: str, sub: str) -> bool:
    return sub in s


def has_prefix(s: str, prefix: str) -> bool:
    return str(s).startswith(prefix)


def has_suffix(s: str, suffix: str) -> bool:
    return str(s).endswith(suffix)


def split(s: str, sep: str) -> list[str]:
    return str(s).split(sep)


def make_map(*values: Any) -> dict[str, Any]:
    if len(values) % 2 != 0:
        raise ValueError("make_map requires an even number of arguments")
    out: dict[str, Any] = {}
    for key, value in zip(values[::2], values[1::2]):
        if not isinstance(key, str):
            raise ValueError("make_map keys must be strings")
        out[key] = value
    return out


def merge_map(*maps: Optional[Mapping]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for m in maps:
        if m:
            out.update(m)
    return out


def make_slice(*items: Any) -> list[Any]:
    return list(items)


def filter_slice(items: Optional[list], predicate: Callable[[Any], bool]) -> Optional[list]:
    if items is None:
        return None
    return [item for item in items if predicate(item)]


def map_slice(items: Optional[list], transform: Callable[[Any], Any]) -> Optional[list]:
    if items is None:
        return None
    return [transform(item) for item in items]


def unique(items: Optional[list]) -> Optional[list]:
    if items is None:
        return None
    out: list[Any] = []
    for item in items:
        if item not in out:
            out.append(item)
    return out


def default_value(value: Any, default: Any) -> Any:
    if value is None or isinstance(value, Undefined):
        return default
    if isinstance(value, (str, list, tuple, dict)) and len(value) == 0:
        return default
    return value


def ternary(condition: Any, true_value: Any, false_value: Any) -> Any:
    return true_value if condition else false_value


def _escape_yaml(s: str) -> str:
    return (
        s.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    )


def _escape_hcl(s: str) -> str:
    return s.replace("\\", "\\\\").replace('"', '\\"').replace("${", "$${")


def to_yaml(value: Any) -> str:
    """Serialize ``value`` as a YAML fragment without document markers."""
    if isinstance(value, str) and "\n" not in value:
        if any(ch in value for ch in _YAML_SPECIAL) or value.startswith(" "):
            return f'"{_escape_yaml(value)}"'
        return value
    text = yaml.safe_dump(value, default_flow_style=False, sort_keys=False, allow_unicode=True)
    if text.endswith("\n...\n"):
        text = text[: -len("...\n")]
    return text.rstrip("\n")


def to_hcl(value: Any) -> str:
    """Serialize ``value`` as an HCL expression."""
    if value is None or isinstance(value, Undefined):
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        if "\n" in value:
            return f"<<-EOT\n{value}\nEOT"
        return f'"{_escape_hcl(value)}"'
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        lines = []
        for k, v in value.items():
            rendered = to_hcl(v).replace("\n", "\n  ")
            lines.append(f"{_hcl_key(k)} = {rendered}")
        return "{\n  " + "\n  ".join(lines) + "\n}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        items = [to_hcl(item) for item in value]
        if len(items) > 3 or any("\n" in item for item in items):
            return "[\n  " + ",\n  ".join(item.replace("\n", "\n  ") for item in items) + "\n]"
        return "[" + ", ".join(items) + "]"
    return str(value)


def format_yaml(content: str) -> str:
    """Canonical layout for a multi-document YAML stream."""
    if not content.startswith("---"):
        content = "---\n" + content
    while "\n\n---" in content:
        content = content.replace("\n\n---", "\n---")
    if not content.endswith("\n"):
        content += "\n"
    return content


_HCL_TOP_LEVEL = ("resource", "provider", "module", "variable", "output", "locals", "data", "terraform")


def format_hcl(content: str) -> str:
    """Canonical spacing for an HCL document."""
    content = content.replace("\r\n", "\n")
    while "\n\n\n" in content:
        content = content.replace("\n\n\n", "\n\n")
    content = re.sub(r"\{\n(?:[ \t]*\n)+", "{\n", content)
    content = re.sub(r"\n(?:[ \t]*\n)+([ \t]*\})", r"\n\1", content)
    for keyword in _HCL_TOP_LEVEL:
        content = content.replace("}\n" + keyword, "}\n\n" + keyword)
    return content


def get_property(resource: Optional[Resource], name: str, default: Any = None) -> Any:
    if resource is None or isinstance(resource, Undefined):
        return default
    return resource.get_property(name, default)


def has_property(resource: Optional[Resource], name: str) -> bool:
    if resource is None or isinstance(resource, Undefined):
        return False
    return resource.has_property(name)


def get_tags(resource: Optional[Resource]) -> dict[str, str]:
    """Tags from ``tag.<key>`` properties plus a default ``Name`` tag."""
    if resource is None or isinstance(resource, Undefined):
        return {}
    tags: dict[str, str] = {}
    for prop in resource.properties:
        if prop.name.startswith("tag."):
            value = prop.value
            tags[prop.name[len("tag.") :]] = value if isinstance(value, str) else str(value)
    if "Name" not in tags and resource.name:
        tags["Name"] = resource.name
    return tags


def _hcl_key(key: str) -> str:
    key = str(key)
    return key if _HCL_IDENTIFIER.match(key) else f'"{_escape_hcl(key)}"'


def tf_tags(tags: Optional[Mapping[str, str]]) -> str:
    if not tags:
        return ""
    lines = [f'    {_hcl_key(k)} = "{_escape_hcl(str(v))}"' for k, v in tags.items()]
    return "  tags = {\n" + "\n".join(lines) + "\n  }"


def cp_tags(tags: Optional[Mapping[str, str]]) -> str:
    if not tags:
        return "    tags: []"
    lines = [
        f'    - key: "{_escape_yaml(str(k))}"\n      value: "{_escape_yaml(str(v))}"' for k, v in tags.items()
    ]
    return "    tags:\n" + "\n".join(lines)


def resource_ref(resource_type: Any, name: str, attribute: str) -> str:
    return f"${{{resource_type}.{name}.{attribute}}}"


def yaml_ref(api_version: str, kind: str, name: str, attribute: str) -> str:
    return f"$(resources.{api_version}.{kind}.{name}.{attribute})"


def cidr_subnet(base_cidr: str, netnum: int, newbits: int) -> str:
    """Terraform ``cidrsubnet`` expression; no address arithmetic happens here."""
    return f'${{cidrsubnet("{base_cidr}", {newbits}, {netnum})}}'


TEMPLATE_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "camel": camel,
    "snake": snake,
    "kebab": kebab,
    "quote": quote,
    "indent_prefix": indent_prefix,
    "contains": contains,
    "has_prefix": has_prefix,
    "has_suffix": has_suffix,
    "split": split,
    "to_yaml": to_yaml,
    "to_hcl": to_hcl,
    "format_yaml": format_yaml,
    "format_hcl": format_hcl,
    "make_map": make_map,
    "merge_map": merge_map,
    "slice": make_slice,
    "filter_slice": filter_slice,
    "map_slice": map_slice,
    "unique": unique,
    "default_value": default_value,
    "ternary": ternary,
    "get_property": get_property,
    "has_property": has_property,
    "resource_ref": resource_ref,
    "yaml_ref": yaml_ref,
    "cidr_subnet": cidr_subnet,
    "get_tags": get_tags,
    "tf_tags": tf_tags,
    "cp_tags": cp_tags,
}


def install_functions(env: Environment) -> Environment:
    for name, fn in TEMPLATE_FUNCTIONS.items():
        env.filters[name] = fn
        env.globals[name] = fn
    return env
