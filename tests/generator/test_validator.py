# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for rendered-output validation and formatting.

Strict Terraform validation is exercised with ``shutil.which`` and
``subprocess.run`` patched; no terraform binary is needed.
"""

import os
import subprocess
from unittest.mock import patch

import pytest

from iacgen.exceptions import ConfigurationError, TemplateExecutionError, TemplateParseError, ValidationError
from iacgen.generator.rendering import (
    HCLValidator,
    ValidationLevel,
    ValidationOptions,
    ValidationStatus,
    YAMLValidator,
    analyze_template,
    format_rendered_content,
    get_validator,
    validate_rendered_content,
    validate_resource_template,
)
from iacgen.models import Resource

pytestmark = pytest.mark.unit

VALID_HCL = 'resource "aws_vpc" "main-vpc" {\n  cidr_block = "10.0.0.0/16"\n}\n'
INVALID_HCL = 'resource "aws_vpc" "main-vpc" {\n  cidr_block = "10.0.0.0/16"\n'

CROSSPLANE_VPC = (
    "---\n"
    "apiVersion: ec2.aws.crossplane.io/v1beta1\n"
    "kind: VPC\n"
    "metadata:\n"
    "  name: main-vpc\n"
    "spec:\n"
    "  forProvider:\n"
    "    cidrBlock: 10.0.0.0/16\n"
)

WHICH = "iacgen.generator.rendering.validator.shutil.which"
RUN = "iacgen.generator.rendering.validator.subprocess.run"


def _strict(**kwargs) -> ValidationOptions:
    return ValidationOptions(level=ValidationLevel.strict, **kwargs)


class TestValidationLevel:
    @pytest.mark.parametrize(
        "value,expected",
        [("none", ValidationLevel.none), ("BASIC", ValidationLevel.basic), (" strict ", ValidationLevel.strict)],
    )
    def test_parse(self, value, expected):
        assert ValidationLevel.parse(value) is expected

    def test_parse_none_defaults_to_basic(self):
        assert ValidationLevel.parse(None) is ValidationLevel.basic

    def test_parse_rejects_unknown(self):
        with pytest.raises(ConfigurationError):
            ValidationLevel.parse("paranoid")


class TestHCLValidator:
    """Test Terraform configuration validation."""

    def test_basic_accepts_valid_hcl(self):
        result = HCLValidator().validate(VALID_HCL)

        assert result.status is ValidationStatus.PASSED
        assert result.level is ValidationLevel.basic
        assert result.ok

    def test_basic_rejects_invalid_hcl(self):
        with pytest.raises(ValidationError) as exc_info:
            HCLValidator().validate(INVALID_HCL)

        assert exc_info.value.content == INVALID_HCL
        assert "HCL" in str(exc_info.value)

    def test_level_none_skips_everything(self):
        result = HCLValidator().validate("this is { not hcl", ValidationOptions(level=ValidationLevel.none))

        assert result.status is ValidationStatus.SKIPPED
        assert result.ok

    def test_validation_does_not_modify_input(self):
        content = VALID_HCL
        HCLValidator().validate(content)
        assert content == VALID_HCL

    def test_strict_without_terraform_is_skipped(self):
        with patch(WHICH, return_value=None), patch(RUN) as run:
            result = HCLValidator().validate(VALID_HCL, _strict())

        assert result.status is ValidationStatus.SKIPPED
        assert result.level is ValidationLevel.strict
        assert "not found" in result.message
        run.assert_not_called()

    def test_strict_runs_init_then_validate(self, tmp_path):
        seen = []

        def fake_run(cmd, cwd, **kwargs):
            with open(os.path.join(cwd, "main.tf"), encoding="utf-8") as f:
                seen.append((cmd[1], f.read()))
            return subprocess.CompletedProcess(cmd, 0, stdout="ok", stderr="")

        with patch(WHICH, return_value="/usr/bin/terraform"), patch(RUN, side_effect=fake_run) as run:
            result = HCLValidator().validate(VALID_HCL, _strict(temp_dir=str(tmp_path), tool_timeout=12))

        assert result.status is ValidationStatus.PASSED
        assert [step for step, _ in seen] == ["init", "validate"]
        assert all(content == VALID_HCL for _, content in seen)
        assert run.call_args.kwargs["timeout"] == 12
        assert "-no-color" in run.call_args.args[0]
        assert list(tmp_path.iterdir()) == []

    def test_strict_failure_carries_tool_output(self):
        def fake_run(cmd, cwd, **kwargs):
            code = 1 if cmd[1] == "validate" else 0
            return subprocess.CompletedProcess(cmd, code, stdout="", stderr="Error: Unsupported argument")

        with patch(WHICH, return_value="/usr/bin/terraform"), patch(RUN, side_effect=fake_run):
            with pytest.raises(ValidationError) as exc_info:
                HCLValidator().validate(VALID_HCL, _strict())

        assert "validate" in str(exc_info.value)
        assert "Unsupported argument" in exc_info.value.tool_output

    def test_strict_failing_init_stops_before_validate(self):
        with patch(WHICH, return_value="/usr/bin/terraform"), patch(
            RUN, return_value=subprocess.CompletedProcess(["terraform"], 1, stdout="init failed", stderr="")
        ) as run:
            with pytest.raises(ValidationError, match="init"):
                HCLValidator().validate(VALID_HCL, _strict())

        assert run.call_count == 1

    def test_strict_timeout_is_a_validation_error(self):
        with patch(WHICH, return_value="/usr/bin/terraform"), patch(
            RUN, side_effect=subprocess.TimeoutExpired(cmd="terraform", timeout=1)
        ):
            with pytest.raises(ValidationError, match="timed out"):
                HCLValidator().validate(VALID_HCL, _strict(tool_timeout=1))

    def test_strict_still_checks_syntax_first(self):
        with patch(WHICH, return_value=None):
            with pytest.raises(ValidationError):
                HCLValidator().validate(INVALID_HCL, _strict())


class TestYAMLValidator:
    """Test Crossplane manifest validation."""

    def test_basic_accepts_multi_document_yaml(self):
        result = YAMLValidator().validate(CROSSPLANE_VPC + CROSSPLANE_VPC)
        assert result.status is ValidationStatus.PASSED

    def test_basic_rejects_invalid_yaml(self):
        with pytest.raises(ValidationError) as exc_info:
            YAMLValidator().validate("key: [unclosed\n")

        assert exc_info.value.content == "key: [unclosed\n"

    def test_strict_accepts_complete_crossplane_document(self):
        assert YAMLValidator().validate(CROSSPLANE_VPC, _strict()).status is ValidationStatus.PASSED

    @pytest.mark.parametrize("missing", ["kind", "metadata", "spec"])
    def test_strict_requires_crossplane_fields(self, missing):
        doc = {
            "kind": "kind: VPC\n",
            "metadata": "metadata:\n  name: main-vpc\n",
            "spec": "spec:\n  forProvider: {}\n",
        }
        content = "apiVersion: ec2.aws.crossplane.io/v1beta1\n" + "".join(v for k, v in doc.items() if k != missing)

        with pytest.raises(ValidationError, match=missing):
            YAMLValidator().validate(content, _strict())

    def test_basic_does_not_check_crossplane_fields(self):
        content = "apiVersion: ec2.aws.crossplane.io/v1beta1\nkind: VPC\n"
        assert YAMLValidator().validate(content).status is ValidationStatus.PASSED

    def test_strict_skips_non_crossplane_documents(self):
        content = CROSSPLANE_VPC + "---\napiVersion: v1\nkind: ConfigMap\ndata:\n  a: b\n---\n"
        assert YAMLValidator().validate(content, _strict()).status is ValidationStatus.PASSED

    def test_level_none(self):
        result = YAMLValidator().validate(": : :", ValidationOptions(level=ValidationLevel.none))
        assert result.status is ValidationStatus.SKIPPED


class TestValidatorSelection:
    def test_get_validator_by_format(self):
        assert isinstance(get_validator("terraform"), HCLValidator)
        assert isinstance(get_validator("crossplane"), YAMLValidator)

    def test_unknown_format(self):
        with pytest.raises(ConfigurationError):
            get_validator("ansible")

    def test_validate_rendered_content_defaults_to_basic(self):
        assert validate_rendered_content("crossplane", CROSSPLANE_VPC).level is ValidationLevel.basic


class TestFormatRenderedContent:
    def test_hcl_spacing(self):
        content = 'resource "a" "b" {\n\n  x = 1\n\n}\nresource "c" "d" {\n  y = 2\n}\n\n\n\n'

        formatted = format_rendered_content("terraform", content)

        assert formatted == 'resource "a" "b" {\n  x = 1\n}\n\nresource "c" "d" {\n  y = 2\n}\n\n'

    def test_hcl_line_endings(self):
        assert format_rendered_content("terraform", "a = 1\r\nb = 2\r\n") == "a = 1\nb = 2\n"

    def test_yaml_adds_marker_and_trailing_newline(self):
        assert format_rendered_content("crossplane", "kind: VPC") == "---\nkind: VPC\n"

    def test_yaml_collapses_blank_lines_before_separator(self):
        content = "---\na: 1\n\n\n---\nb: 2\n"
        assert format_rendered_content("crossplane", content) == "---\na: 1\n---\nb: 2\n"


class TestValidateResourceTemplate:
    def test_renders_with_resource_binding_only(self, manager, catalog_sources, vpc_resource):
        catalog_sources["terraform/by_resource.tmpl"] = (
            'resource "aws_vpc" "{{ Resource.name }}" {\n'
            '  cidr_block = "{{ get_property(Resource, "cidr_block") }}"\n'
            "}\n"
        )

        result = validate_resource_template(manager, "terraform", "by_resource.tmpl", vpc_resource)

        assert result.status is ValidationStatus.PASSED

    def test_flat_bindings_are_not_available(self, manager, vpc_resource):
        with pytest.raises(TemplateExecutionError):
            validate_resource_template(manager, "terraform", "vpc.tmpl", vpc_resource)

    def test_invalid_output_fails_validation(self, manager, catalog_sources, vpc_resource):
        catalog_sources["terraform/unbalanced.tmpl"] = 'resource "aws_vpc" "{{ Resource.name }}" {\n'

        with pytest.raises(ValidationError):
            validate_resource_template(manager, "terraform", "unbalanced.tmpl", vpc_resource)


class TestAnalyzeTemplate:
    def test_reports_variables_conditionals_and_properties(self):
        source = (
            'resource "aws_subnet" "{{ Name }}" {\n'
            '  cidr_block = "{{ cidr_block }}"\n'
            "{% if has_property(Resource, 'availability_zone') %}\n"
            '  availability_zone = "{{ availability_zone }}"\n'
            "{% endif %}\n"
            "{% if Resource | has_property('map_public_ip_on_launch') %}\n"
            "  map_public_ip_on_launch = true\n"
            "{% endif %}\n"
            "}\n"
        )

        analysis = analyze_template(source)

        assert analysis["variables"] == ["Name", "Resource", "availability_zone", "cidr_block"]
        assert analysis["conditionals"] == [
            "{% if has_property(Resource, 'availability_zone') %}",
            "{% if Resource | has_property('map_public_ip_on_launch') %}",
        ]
        assert analysis["properties"] == ["availability_zone", "map_public_ip_on_launch"]

    def test_syntax_error(self):
        with pytest.raises(TemplateParseError):
            analyze_template("{% if %}", name="bad.tmpl")
