#!/usr/bin/env python3
# ==============================================================================
# adapters/go.py - Go version adapter
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Version locations for Go modules. go.mod carries no version, so the
#   adapter rewrites a `const Version = "..."` declaration in the usual
#   version.go locations.
#
# ==============================================================================

from pathlib import Path
from typing import List

# Support both direct script execution and module import
try:
    from .base import BaseVersionAdapter
    from ..models import VersionTarget
except ImportError:
    from adapters.base import BaseVersionAdapter
    from models import VersionTarget


VERSION_FILES = [
    'version.go',
    'internal/version/version.go',
    'pkg/version/version.go',
]


class GoVersionAdapter(BaseVersionAdapter):
    """const Version in version.go files of a Go module."""

    @property
    def name(self) -> str:
        return "Go"

    @staticmethod
    def detect(project_root: Path) -> bool:
        return (project_root / 'go.mod').exists()

    def targets(self, project_root: Path) -> List[VersionTarget]:
        if not self.detect(project_root):
            return []
        return [
            VersionTarget(
                path=path,
                pattern=r'const\s+Version\s*=\s*"[^"]*"',
                replacement='const Version = "{version}"',
                description=f'{path} (Go)',
            )
            for path in VERSION_FILES
        ]
