#!/usr/bin/env python3
# ==============================================================================
# adapters/laravel.py - Laravel/PHP version adapter
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Version locations for Laravel projects: composer.json and the app
#   version in config/app.php.
#
# Design Notes:
#   config/app.php is matched in one of two shapes, chosen by content:
#       'version' => env('APP_VERSION', '1.2.3')
#       'version' => '1.2.3'
#
# ==============================================================================

import sys
from pathlib import Path
from typing import List

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
from common import read_source

# Support both direct script execution and module import
try:
    from .base import BaseVersionAdapter
    from ..models import VersionTarget
except ImportError:
    from adapters.base import BaseVersionAdapter
    from models import VersionTarget


APP_CONFIG = 'config/app.php'


class LaravelVersionAdapter(BaseVersionAdapter):
    """composer.json and config/app.php."""

    @property
    def name(self) -> str:
        return "Laravel"

    @staticmethod
    def detect(project_root: Path) -> bool:
        return (project_root / 'artisan').exists() or (project_root / 'composer.json').exists()

    def targets(self, project_root: Path) -> List[VersionTarget]:
        targets = [
            VersionTarget(
                path='composer.json',
                pattern=r'"version"\s*:\s*"[^"]*"',
                replacement='"version": "{version}"',
                description='composer.json (PHP)',
                first_only=True,
            ),
        ]

        app_config = project_root / APP_CONFIG
        content = read_source(app_config) if app_config.is_file() else None
        if content is None:
            return targets

        if "env('APP_VERSION'" in content:
            targets.append(VersionTarget(
                path=APP_CONFIG,
                pattern=r"env\('APP_VERSION',\s*'[^']*'\)",
                replacement="env('APP_VERSION', '{version}')",
                description='config/app.php (Laravel)',
            ))
        elif "'version'" in content:
            targets.append(VersionTarget(
                path=APP_CONFIG,
                pattern=r"'version'\s*=>\s*'[^']*'",
                replacement="'version' => '{version}'",
                description='config/app.php (Laravel)',
            ))

        return targets
