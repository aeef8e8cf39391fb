# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest
from jinja2 import DictLoader

from iacgen.generator.rendering import TemplateCache, TemplateManager, TemplateRenderer

VPC_TF = 'resource "aws_vpc" "{{ Name }}" {\n  cidr_block = "{{ cidr_block }}"\n}\n'

SUBNET_TF = (
    'resource "aws_subnet" "{{ Name }}" {\n'
    '  vpc_id     = "{{ resource_ref("aws_vpc", vpc_id, "id") }}"\n'
    '  cidr_block = "{{ cidr_block }}"\n'
    "}\n"
)

TAGGED_VPC_TF = (
    'resource "aws_vpc" "{{ Name }}" {\n'
    '  cidr_block = "{{ cidr_block }}"\n'
    '{% include "_common/tags.tmpl" %}\n'
    "}\n"
)

VPC_XP = (
    "---\n"
    "apiVersion: ec2.aws.crossplane.io/v1beta1\n"
    "kind: VPC\n"
    "metadata:\n"
    "  name: {{ Name }}\n"
    "spec:\n"
    "  forProvider:\n"
    "    region: {{ region }}\n"
    "    cidrBlock: {{ cidr_block }}\n"
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog_sources():
    """Template bodies keyed by catalog path; tests may add entries before building a catalog."""
    return {
        "terraform/vpc.tmpl": VPC_TF,
        "terraform/subnet.tmpl": SUBNET_TF,
        "terraform/tagged_vpc.tmpl": TAGGED_VPC_TF,
        "terraform/_common/tags.tmpl": "{{ tf_tags(get_tags(Resource)) }}\n",
        "terraform/README.md": "not a template",
        "crossplane/vpc.tmpl": VPC_XP,
    }


@pytest.fixture
def catalog(catalog_sources):
    return DictLoader(catalog_sources)


@pytest.fixture
def cache(clock):
    return TemplateCache(max_size=10, expiry_seconds=60, clock=clock)


@pytest.fixture
def manager(catalog, cache):
    return TemplateManager(catalog=catalog, cache=cache)


@pytest.fixture
def renderer(manager):
    return TemplateRenderer(manager)
