# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from iacgen.exceptions import ArtifactWriteError

logger = logging.getLogger(__name__)


@dataclass
class ArtifactWriter:
    output_dir: str

    def write(self, artifacts: dict[str, str]) -> list[str]:
        """Write each ``name -> content`` pair below ``output_dir``; return the paths written."""
        written = []
        for artifact_name, content in artifacts.items():
            destination = os.path.join(self.output_dir, artifact_name)
            self._emit_file(destination, content)
            written.append(destination)
        return written

    def _emit_file(self, path: str, content: str) -> None:
        try:
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise ArtifactWriteError(path, f"failed to write {path}: {e}") from e
        logger.info(f"Wrote {path}")
