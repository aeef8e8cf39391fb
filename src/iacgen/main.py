# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse
import logging
import sys
from typing import Any, Optional

import yaml

from iacgen import __version__
from iacgen.config import GeneratorConfig, find_config_file, load_config
from iacgen.exceptions import IacGenError, ValidationError
from iacgen.generator.api import build_renderer, build_templates_table, generate, validation_options
from iacgen.generator.rendering import validate_rendered_content
from iacgen.generator.utils import TemplateFormat
from iacgen.models import load_model

logger = logging.getLogger(__name__)

_FORMAT_CHOICES = [fmt.value for fmt in TemplateFormat]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _cast_literal(s: str) -> Any:
    """Cast ``--set-context`` values to bool/int/float via the YAML loader."""
    try:
        return yaml.safe_load(s)
    except yaml.YAMLError:
        return s


def parse_context_overrides(items: list[str]) -> dict[str, Any]:
    context: dict[str, Any] = {}
    for item in items:
        if "=" not in item:
            raise IacGenError(f"Invalid --set-context value (expected KEY=VALUE): {item}")
        key, val = item.split("=", 1)
        context[key.strip()] = _cast_literal(val)
    return context


def _resolve_config(path: Optional[str]) -> GeneratorConfig:
    path = path or find_config_file()
    if path is None:
        return GeneratorConfig()
    return load_config(path)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to an .iacgen.yaml configuration file")
    parser.add_argument("--templates-dir", help="Template catalog directory overriding the bundled templates")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")


def configure_render_parser(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--model", required=True, help="Infrastructure model file (YAML or JSON)")
    parser.add_argument("--format", choices=_FORMAT_CHOICES, help="Output format")
    parser.add_argument("--output", help="Directory to write the generated file into")
    parser.add_argument("--validation", choices=["none", "basic", "strict"], help="Validation level")
    parser.add_argument(
        "--set-context",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra global template context (repeatable)",
    )
    parser.add_argument("--stdout", action="store_true", help="Print the generated document instead of writing it")
    _add_common_arguments(parser)


def _run_render(extra_args: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="iacgen render", description="Render an infrastructure model")
    configure_render_parser(parser)
    args = parser.parse_args(extra_args)

    config = _resolve_config(args.config).with_overrides(
        templates_dir=args.templates_dir,
        validation_level=args.validation,
        output_dir=args.output,
        default_format=args.format,
        log_level="debug" if args.debug else None,
    )
    _configure_logging(config.log_level)

    model = load_model(args.model)
    renderer = build_renderer(config)
    for key, value in parse_context_overrides(args.set_context).items():
        renderer.set_global_context(key, value)

    result = generate(model, config=config, renderer=renderer, write=not args.stdout)
    if args.stdout:
        sys.stdout.write(result.content)
    else:
        print(f"Generated {result.path}")

    if result.validation_error is not None:
        print(f"Validation failed: {result.validation_error}", file=sys.stderr)
        return 1
    return 0


def _run_list_templates(extra_args: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="iacgen list-templates", description="List catalog templates")
    parser.add_argument("--format", choices=_FORMAT_CHOICES, help="Only list one format")
    _add_common_arguments(parser)
    args = parser.parse_args(extra_args)

    config = _resolve_config(args.config).with_overrides(
        templates_dir=args.templates_dir, log_level="debug" if args.debug else None
    )
    _configure_logging(config.log_level)

    manager = build_renderer(config).manager
    formats = [TemplateFormat(args.format)] if args.format else list(TemplateFormat)
    for fmt in formats:
        print(f"{fmt.value} templates:\n{build_templates_table(manager, fmt)}")
    return 0


def _run_validate(extra_args: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="iacgen validate", description="Validate a generated file")
    parser.add_argument("file", help="File to validate")
    parser.add_argument("--format", choices=_FORMAT_CHOICES, help="Format of the file; guessed from its extension")
    parser.add_argument("--validation", choices=["none", "basic", "strict"], help="Validation level")
    parser.add_argument("--config", help="Path to an .iacgen.yaml configuration file")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args(extra_args)

    config = _resolve_config(args.config).with_overrides(log_level="debug" if args.debug else None)
    _configure_logging(config.log_level)

    fmt = args.format
    if fmt is None:
        tf = TemplateFormat.terraform
        fmt = tf.value if args.file.endswith(tf.extension) else TemplateFormat.crossplane.value

    with open(args.file, encoding="utf-8") as f:
        content = f.read()
    try:
        result = validate_rendered_content(fmt, content, validation_options(config, args.validation))
    except ValidationError as e:
        print(f"{args.file}: INVALID - {e}", file=sys.stderr)
        if e.tool_output:
            print(e.tool_output, file=sys.stderr)
        return 1
    suffix = f" ({result.message})" if result.message else ""
    print(f"{args.file}: {result.status.value}{suffix}")
    return 0


def _show_version(extra_args: list[str]) -> int:
    print(f"iacgen {__version__}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="iacgen", description="Generate Terraform or Crossplane output from templates"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run", required=True)

    render_parser = subparsers.add_parser("render", help="Render a model to Terraform or Crossplane", add_help=False)
    render_parser.set_defaults(handler=_run_render)

    list_parser = subparsers.add_parser("list-templates", help="List catalog templates", add_help=False)
    list_parser.set_defaults(handler=_run_list_templates)

    validate_parser = subparsers.add_parser("validate", help="Validate a generated file", add_help=False)
    validate_parser.set_defaults(handler=_run_validate)

    version_parser = subparsers.add_parser("version", help="Show version information", add_help=False)
    version_parser.set_defaults(handler=_show_version)

    args, extras = parser.parse_known_args(argv)

    # extras contains the arguments for the selected sub-command
    handler = getattr(args, "handler", None)
    if handler is None:
        parser.error("No sub-command handler registered.")
    try:
        return handler(extras)
    except (IacGenError, FileNotFoundError) as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
