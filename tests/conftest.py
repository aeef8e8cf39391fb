# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Global pytest configuration and fixtures.

Module-specific fixtures are located in their respective conftest.py files:
- tests/generator/conftest.py - in-memory catalogs, managers and renderers
- tests/cli/conftest.py - model and config files for CLI runs
"""

import pytest

from iacgen.models import Resource


@pytest.fixture
def vpc_resource():
    """The canonical main-vpc resource."""
    return Resource(type="vpc", name="main-vpc").add_property("cidr_block", "10.0.0.0/16")


@pytest.fixture
def subnet_resource():
    return (
        Resource(type="subnet", name="public-subnet-1")
        .add_property("vpc_id", "main-vpc")
        .add_property("cidr_block", "10.0.1.0/24")
        .add_property("availability_zone", "us-east-1a")
        .add_dependency("main-vpc")
    )
