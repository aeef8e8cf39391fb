# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Validation and canonical formatting of rendered output.

Two validators, chosen by format:

- ``HCLValidator`` parses Terraform configuration with python-hcl2. In strict
  mode it also runs ``terraform init`` and ``terraform validate`` in a
  throwaway directory; a missing binary yields a SKIPPED result.
- ``YAMLValidator`` parses Crossplane manifests with PyYAML. In strict mode
  every document whose ``apiVersion`` belongs to a ``crossplane.io`` group
  must carry ``kind``, ``metadata`` and ``spec``.

Validation failures raise ``ValidationError``; validators never modify the
content they are given.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

import hcl2
import yaml
from jinja2 import TemplateSyntaxError, meta, nodes

from iacgen.exceptions import ConfigurationError, TemplateParseError, ValidationError
from iacgen.models import Resource

from ..utils import TemplateFormat, normalize_format
from .functions import format_hcl, format_yaml
from .manager import TemplateManager, create_environment, execute_template

logger = logging.getLogger(__name__)

CROSSPLANE_API_SUFFIX = ".crossplane.io"
CROSSPLANE_REQUIRED_FIELDS = ("kind", "metadata", "spec")


class ValidationLevel(Enum):
    none = "none"
    basic = "basic"
    strict = "strict"

    @classmethod
    def parse(cls, value: Union[str, "ValidationLevel", None]) -> "ValidationLevel":
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.basic
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(f"Unsupported validation level: {value}") from None


class ValidationStatus(Enum):
    PASSED = "passed"
    SKIPPED = "skipped"


@dataclass
class ValidationOptions:
    level: ValidationLevel = ValidationLevel.basic
    temp_dir: Optional[str] = None
    tool_timeout: float = 300
    terraform_bin: str = "terraform"


@dataclass
class ValidationResult:
    status: ValidationStatus
    level: ValidationLevel
    formatted: Optional[str] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (ValidationStatus.PASSED, ValidationStatus.SKIPPED)


def _skipped(level: ValidationLevel, message: str) -> ValidationResult:
    return ValidationResult(status=ValidationStatus.SKIPPED, level=level, message=message)


class HCLValidator:
    def validate(self, content: str, options: Optional[ValidationOptions] = None) -> ValidationResult:
        options = options or ValidationOptions()
        if options.level is ValidationLevel.none:
            return _skipped(options.level, "validation disabled")

        try:
            parsed = hcl2.loads(content)
        except Exception as e:
            raise ValidationError(f"invalid HCL syntax: {e}", content=content) from e

        formatted = self._formatted(parsed)
        if options.level is ValidationLevel.basic:
            return ValidationResult(status=ValidationStatus.PASSED, level=options.level, formatted=formatted)

        return self._run_terraform(content, formatted, options)

    @staticmethod
    def _formatted(parsed: dict[str, Any]) -> Optional[str]:
        try:
            return hcl2.writes(hcl2.reverse_transform(parsed))
        except Exception as e:
            logger.debug(f"Could not produce formatted HCL: {e}")
            return None

    def _run_terraform(
        self, content: str, formatted: Optional[str], options: ValidationOptions
    ) -> ValidationResult:
        binary = shutil.which(options.terraform_bin)
        if binary is None:
            logger.info(f"{options.terraform_bin} not found, skipping strict validation")
            result = _skipped(options.level, f"{options.terraform_bin} not found; strict validation skipped")
            result.formatted = formatted
            return result

        with tempfile.TemporaryDirectory(prefix="terraform-validate-", dir=options.temp_dir) as work_dir:
            with open(os.path.join(work_dir, "main.tf"), "w", encoding="utf-8") as f:
                f.write(content)
            for args in (["init", "-no-color", "-input=false", "-backend=false"], ["validate", "-no-color"]):
                step = args[0]
                try:
                    proc = subprocess.run(
                        [binary, *args],
                        cwd=work_dir,
                        capture_output=True,
                        text=True,
                        timeout=options.tool_timeout,
                    )
                except subprocess.TimeoutExpired as e:
                    raise ValidationError(
                        f"terraform {step} timed out after {options.tool_timeout}s", content=content
                    ) from e
                if proc.returncode != 0:
                    output = (proc.stdout or "") + (proc.stderr or "")
                    raise ValidationError(f"terraform {step} failed", content=content, tool_output=output)

        return ValidationResult(status=ValidationStatus.PASSED, level=options.level, formatted=formatted)


class YAMLValidator:
    def validate(self, content: str, options: Optional[ValidationOptions] = None) -> ValidationResult:
        options = options or ValidationOptions()
        if options.level is ValidationLevel.none:
            return _skipped(options.level, "validation disabled")

        try:
            documents = list(yaml.safe_load_all(content))
        except yaml.YAMLError as e:
            raise ValidationError(f"invalid YAML syntax: {e}", content=content) from e

        if options.level is ValidationLevel.strict:
            for index, doc in enumerate(documents):
                self._check_crossplane_document(index, doc, content)

        return ValidationResult(status=ValidationStatus.PASSED, level=options.level)

    @staticmethod
    def _check_crossplane_document(index: int, doc: Any, content: str) -> None:
        if not isinstance(doc, dict):
            return
        api_version = doc.get("apiVersion")
        if not isinstance(api_version, str) or CROSSPLANE_API_SUFFIX not in api_version:
            return
        for field_name in CROSSPLANE_REQUIRED_FIELDS:
            if field_name not in doc:
                raise ValidationError(
                    f"document {index}: Crossplane resource ({api_version}) is missing '{field_name}'",
                    content=content,
                )


_VALIDATORS = {
    TemplateFormat.terraform: HCLValidator,
    TemplateFormat.crossplane: YAMLValidator,
}


def get_validator(fmt: Union[str, TemplateFormat]):
    return _VALIDATORS[normalize_format(fmt)]()


def validate_rendered_content(
    fmt: Union[str, TemplateFormat], content: str, options: Optional[ValidationOptions] = None
) -> ValidationResult:
    return get_validator(fmt).validate(content, options)


def format_rendered_content(fmt: Union[str, TemplateFormat], content: str) -> str:
    """Apply the canonicalizing pass for ``fmt``."""
    fmt = normalize_format(fmt)
    if fmt is TemplateFormat.terraform:
        return format_hcl(content)
    return format_yaml(content)


def validate_resource_template(
    manager: TemplateManager, fmt: Union[str, TemplateFormat], name: str, resource: Resource
) -> ValidationResult:
    """
    Render template ``name`` with only ``Resource`` bound and basic-validate the output.

    Raises TemplateNotFoundError, TemplateParseError, TemplateExecutionError
    or ValidationError depending on which step fails.
    """
    fmt = normalize_format(fmt)
    template = manager.get_template(fmt, name)
    output = execute_template(template, name, {"Resource": resource})
    return validate_rendered_content(fmt, output, ValidationOptions(level=ValidationLevel.basic))


def analyze_template(source: str, name: str = "<template>") -> dict[str, list[str]]:
    """
    Static summary of a template body.

    Returns a mapping with ``variables`` (names the template reads from its
    data), ``conditionals`` (source lines of ``if`` tests) and ``properties``
    (literal names passed to ``has_property``).
    """
    env = create_environment()
    try:
        ast = env.parse(source, name=name)
    except TemplateSyntaxError as e:
        raise TemplateParseError(name, f"failed to parse template {name}: {e}") from e

    lines = source.splitlines()
    conditionals = []
    for node in ast.find_all(nodes.If):
        line = lines[node.lineno - 1].strip() if 0 < node.lineno <= len(lines) else ""
        if line not in conditionals:
            conditionals.append(line)

    properties = []
    for node in ast.find_all((nodes.Call, nodes.Filter)):
        if isinstance(node, nodes.Call):
            target = node.node.name if isinstance(node.node, nodes.Name) else None
            args = node.args[1:]
        else:
            target = node.name
            args = node.args
        if target != "has_property" or not args or not isinstance(args[0], nodes.Const):
            continue
        if args[0].value not in properties:
            properties.append(args[0].value)

    variables = sorted(meta.find_undeclared_variables(ast) - set(env.globals))
    return {"variables": variables, "conditionals": conditionals, "properties": properties}
