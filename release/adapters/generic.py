#!/usr/bin/env python3
# ==============================================================================
# adapters/generic.py - Generic manifest version adapter
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Version locations shared across ecosystems: Cargo.toml, pyproject.toml,
#   setup.py, and plain VERSION / version.txt files.
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


TOML_VERSION_PATTERN = r'^version\s*=\s*"[^"]*"'
PLAIN_VERSION_FILES = ['VERSION', 'version.txt']


class GenericVersionAdapter(BaseVersionAdapter):
    """Rust, Python, and plain-text version files."""

    @property
    def name(self) -> str:
        return "Generic"

    @staticmethod
    def detect(project_root: Path) -> bool:
        names = ['Cargo.toml', 'pyproject.toml', 'setup.py'] + PLAIN_VERSION_FILES
        return any((project_root / name).exists() for name in names)

    def targets(self, project_root: Path) -> List[VersionTarget]:
        targets = [
            VersionTarget(
                path='Cargo.toml',
                pattern=TOML_VERSION_PATTERN,
                replacement='version = "{version}"',
                description='Cargo.toml (Rust)',
                first_only=True,
            ),
            VersionTarget(
                path='pyproject.toml',
                pattern=TOML_VERSION_PATTERN,
                replacement='version = "{version}"',
                description='pyproject.toml (Python)',
                first_only=True,
            ),
            VersionTarget(
                path='setup.py',
                pattern=r'version=\s*[\'"][^\'"]*[\'"]',
                replacement="version='{version}'",
                description='setup.py (Python)',
            ),
        ]
        targets.extend(
            VersionTarget(path=name, description=name, whole_file=True)
            for name in PLAIN_VERSION_FILES
        )
        return targets
