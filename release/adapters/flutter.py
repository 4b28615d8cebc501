#!/usr/bin/env python3
# ==============================================================================
# adapters/flutter.py - Flutter/Dart version adapter
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Version locations for Flutter/Dart projects: pubspec.yaml and the
#   Android Gradle build files (Groovy and Kotlin DSL).
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


class FlutterVersionAdapter(BaseVersionAdapter):
    """pubspec.yaml plus Android versionName."""

    @property
    def name(self) -> str:
        return "Flutter"

    @staticmethod
    def detect(project_root: Path) -> bool:
        return (project_root / 'pubspec.yaml').exists()

    def targets(self, project_root: Path) -> List[VersionTarget]:
        return [
            VersionTarget(
                path='pubspec.yaml',
                pattern=r'^version:[ \t]*\S+',
                replacement='version: {version}',
                description='pubspec.yaml (Flutter)',
            ),
            VersionTarget(
                path='build.gradle',
                pattern=r'versionName\s*[\'"][^\'"]*[\'"]',
                replacement="versionName '{version}'",
                description='build.gradle (Android)',
            ),
            VersionTarget(
                path='build.gradle.kts',
                pattern=r'versionName\s*=\s*"[^"]*"',
                replacement='versionName = "{version}"',
                description='build.gradle.kts (Android/Kotlin)',
            ),
        ]
