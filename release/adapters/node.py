#!/usr/bin/env python3
# ==============================================================================
# adapters/node.py - Node.js version adapter
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Version location for Node.js/JavaScript projects (package.json).
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


class NodeVersionAdapter(BaseVersionAdapter):
    """package.json "version" field."""

    @property
    def name(self) -> str:
        return "Node"

    @staticmethod
    def detect(project_root: Path) -> bool:
        return (project_root / 'package.json').exists()

    def targets(self, project_root: Path) -> List[VersionTarget]:
        # Only the first occurrence: nested "version" keys belong to other objects
        return [
            VersionTarget(
                path='package.json',
                pattern=r'"version"\s*:\s*"[^"]*"',
                replacement='"version": "{version}"',
                description='package.json (Node.js)',
                first_only=True,
            ),
        ]
