#!/usr/bin/env python3
# ==============================================================================
# adapters/base.py - Base adapter for version file updates
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Abstract base class for ecosystem-specific version adapters, plus the
#   shared routine that rewrites a version string in one file.
#
# Design Notes:
#   Each adapter lists the files (and regex patterns) where its ecosystem
#   records the project version. Targets whose file is missing are skipped,
#   so every adapter can be consulted for every project.
#
# ==============================================================================

import re
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
from common import print_info, print_success, print_warning

# Support both direct script execution and module import
try:
    from ..models import VersionInfo, VersionTarget
except ImportError:
    from models import VersionInfo, VersionTarget


MAJOR_VERSION_ONLY = 'major_version_only'
KNOWN_CONDITIONS = {MAJOR_VERSION_ONLY}


class BaseVersionAdapter(ABC):
    """
    Abstract base class for ecosystem-specific version files.

    Subclasses must implement:
        - name: Human-readable ecosystem name
        - detect(): Check if project belongs to this ecosystem
        - targets(): Version locations for a project root
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable ecosystem name (e.g., 'Node', 'Flutter')."""
        pass

    @staticmethod
    @abstractmethod
    def detect(project_root: Path) -> bool:
        """
        Detect if a directory is a project of this ecosystem.

        Args:
            project_root: Path to check

        Returns:
            True if project detected
        """
        pass

    @abstractmethod
    def targets(self, project_root: Path) -> List[VersionTarget]:
        """
        List the version locations this adapter manages.

        Args:
            project_root: Project directory

        Returns:
            Targets (files may not exist; apply_target skips those)
        """
        pass

    def existing_targets(self, project_root: Path) -> List[VersionTarget]:
        """Targets whose file exists under project_root."""
        return [t for t in self.targets(project_root) if (project_root / t.path).is_file()]


def render_template(template: str, version: VersionInfo) -> str:
    """Fill {version}, {major}, {minor} and {patch} placeholders."""
    for key, value in version.placeholders().items():
        template = template.replace('{' + key + '}', value)
    return template


def apply_target(
    project_root: Path,
    target: VersionTarget,
    version: VersionInfo,
    dry_run: bool = False,
    verbose: bool = False
) -> bool:
    """
    Rewrite the version in one file.

    Args:
        project_root: Directory target.path is relative to
        target: What to replace
        version: New version
        dry_run: Report only; never write
        verbose: Show pattern details and skip reasons

    Returns:
        True if the file was (or in dry-run would be) updated
    """
    file_path = project_root / target.path

    if not file_path.is_file():
        if verbose:
            print_info(f"  File {target.path} not found, skipping")
        return False

    if target.when:
        if target.when not in KNOWN_CONDITIONS:
            print_warning(f"Unknown condition '{target.when}' for {target.path}, skipping")
            return False
        if target.when == MAJOR_VERSION_ONLY and not version.is_major_release:
            if verbose:
                print_info(f"  Skipping {target.path} (major version only)")
            return False

    replacement = render_template(target.replacement, version)

    try:
        content = file_path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        print_warning(f"Could not read {target.path}: {e}")
        return False

    if target.whole_file:
        new_content = replacement.rstrip('\n') + '\n'
    else:
        try:
            pattern = re.compile(target.pattern, re.MULTILINE)
        except re.error as e:
            print_warning(f"Invalid pattern for {target.path}: {e}")
            return False

        try:
            new_content, count = pattern.subn(
                lambda match: match.expand(replacement),
                content,
                count=1 if target.first_only else 0
            )
        except re.error as e:
            print_warning(f"Invalid replacement for {target.path}: {e}")
            return False
        if count == 0:
            print_warning(f"Version pattern not found in {target.label}, left unchanged")
            return False

    if dry_run:
        print(f"  [DRY-RUN] Would update {target.label}")
        if verbose and not target.whole_file:
            print_info(f"    Pattern: {target.pattern}")
            print_info(f"    Replacement: {replacement}")
        return True

    if new_content == content:
        print_info(f"  {target.label} already at {version.clean}")
        return True

    try:
        file_path.write_text(new_content, encoding='utf-8')
    except OSError as e:
        print_warning(f"Could not write {target.path}: {e}")
        return False

    print_success(f"Updated {target.label}")
    return True
