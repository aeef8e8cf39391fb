# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest

MODEL_YAML = """\
resources:
  - type: vpc
    name: main_vpc
    properties:
      cidr_block: 10.0.0.0/16
  - type: subnet
    name: public_a
    properties:
      vpc_id: main_vpc
      cidr_block: 10.0.1.0/24
    depends_on: [main_vpc]
"""


@pytest.fixture(autouse=True)
def isolated_cli(tmp_path, monkeypatch):
    """Run every CLI test from an empty directory with no config discovery and no root logging setup."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setattr("iacgen.main._configure_logging", lambda level: None)
    return work


@pytest.fixture
def model_file(isolated_cli):
    path = isolated_cli / "model.yaml"
    path.write_text(MODEL_YAML, encoding="utf-8")
    return str(path)
