#!/usr/bin/env python3
# ==============================================================================
# release/update_version.py - Universal version updater
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Write a new version number into every version-bearing file of a
#   project (package.json, pubspec.yaml, composer.json, config/app.php,
#   version.go, Cargo.toml, pyproject.toml, setup.py, VERSION, ...), and
#   optionally create the release tag.
#
# Usage:
#   python3 release/update_version.py 1.2.3
#   python3 release/update_version.py v2.0.0 --dry-run --verbose
#   python3 release/update_version.py 1.0.0 --config release.yml --tag
#
# Design Notes:
#   Uses adapter pattern for ecosystem-specific version files.
#   A .version-config.yml with a version_files list replaces the built-in
#   targets entirely:
#       version_files:
#         - path: "src/version.ts"
#           pattern: "export const VERSION = '[^']*'"
#           replacement: "export const VERSION = '{version}'"
#           when: "major_version_only"
#
# ==============================================================================

import argparse
import sys
from pathlib import Path
from typing import Any, List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))
from common import (
    ConfigError,
    load_yaml_config,
    print_error,
    print_info,
    print_success,
    print_warning,
)

# Support both direct script execution and module import
try:
    from .adapters import ALL_ADAPTERS, apply_target
    from .git import create_tag, is_git_repository, tag_exists
    from .models import VersionInfo, VersionTarget
except ImportError:
    from adapters import ALL_ADAPTERS, apply_target
    from git import create_tag, is_git_repository, tag_exists
    from models import VersionInfo, VersionTarget


DEFAULT_CONFIG = Path('.version-config.yml')


def parse_version_files(entries: Any) -> List[VersionTarget]:
    """
    Build targets from a version_files config list.

    Raises:
        ConfigError: If an entry is not a mapping or lacks path/pattern/replacement
    """
    if not isinstance(entries, list):
        raise ConfigError("'version_files' must be a list")

    targets = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise ConfigError(f"version_files[{index}] must be a mapping")
        missing = [key for key in ('path', 'pattern', 'replacement') if not entry.get(key)]
        if missing:
            raise ConfigError(f"version_files[{index}] is missing: {', '.join(missing)}")
        targets.append(VersionTarget(
            path=str(entry['path']),
            pattern=str(entry['pattern']),
            replacement=str(entry['replacement']),
            description=str(entry.get('description') or entry['path']),
            when=str(entry['when']) if entry.get('when') else None,
        ))
    return targets


def load_config_targets(config_path: Path) -> Optional[List[VersionTarget]]:
    """Targets declared in the config file, or None when it declares none."""
    config = load_yaml_config(config_path)
    entries = config.get('version_files')
    if not entries:
        return None
    return parse_version_files(entries)


def default_targets(project_root: Path, verbose: bool = False) -> List[VersionTarget]:
    """Collect built-in targets from every adapter."""
    targets: List[VersionTarget] = []
    for adapter_class in ALL_ADAPTERS:
        adapter = adapter_class()
        if verbose and adapter.detect(project_root):
            print_info(f"  Detected {adapter.name} project files")
        targets.extend(adapter.targets(project_root))
    return targets


def update_versions(
    project_root: Path,
    version: VersionInfo,
    targets: List[VersionTarget],
    dry_run: bool = False,
    verbose: bool = False
) -> int:
    """
    Apply every target.

    Returns:
        Number of files updated (or that would be in dry-run)
    """
    return sum(
        1 for target in targets
        if apply_target(project_root, target, version, dry_run=dry_run, verbose=verbose)
    )


def tag_release(project_root: Path, version: VersionInfo, dry_run: bool = False) -> bool:
    """Create annotated tag v<version>, or skip if it already exists."""
    tag_name = version.tag_name

    if dry_run:
        print(f"  [DRY-RUN] Would create git tag: {tag_name}")
        return True

    if not is_git_repository(project_root):
        print_error("Not in a git repository, cannot create tag")
        return False

    if tag_exists(tag_name, project_root):
        print_warning(f"Tag {tag_name} already exists, skipping")
        return True

    if not create_tag(tag_name, f"Release {tag_name}", project_root):
        print_error(f"Failed to create tag {tag_name}")
        return False

    print_success(f"Created git tag: {tag_name}")
    return True


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Universal version updater for all project types',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s 1.2.3
  %(prog)s v2.0.0 --dry-run --verbose
  %(prog)s 1.0.0 --config release.yml --tag

Supported files:
  package.json, pubspec.yaml, build.gradle(.kts), composer.json,
  config/app.php, version.go (Go modules), Cargo.toml, pyproject.toml,
  setup.py, VERSION, version.txt
        """
    )
    parser.add_argument('version', help='Version to set (e.g., 1.2.3 or v1.2.3)')
    parser.add_argument(
        '--config', '-c',
        type=Path,
        default=None,
        help=f'Config file (default: {DEFAULT_CONFIG})'
    )
    parser.add_argument('--dry-run', '-d', action='store_true', help='Preview changes without modifying files')
    parser.add_argument('--tag', '-t', action='store_true', help='Create git tag after updating version')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show detailed output')
    parser.add_argument(
        '--project-root', '-p',
        type=Path,
        default=None,
        help='Project root directory (default: current directory)'
    )
    args = parser.parse_args(argv)

    version = VersionInfo.parse(args.version)
    if version is None:
        print_error("Version must follow semantic versioning (e.g., 1.0.0, 1.0.0-dev)")
        return 1

    project_root = (args.project_root or Path.cwd()).resolve()
    if not project_root.is_dir():
        print_error(f"Project root does not exist: {project_root}")
        return 1

    if args.dry_run:
        print_info(f"DRY-RUN: Previewing version update to {version.clean}")
    else:
        print_info(f"Updating version to {version.clean}")
    if args.verbose:
        print_info(f"  Major: {version.major}, Minor: {version.minor}, Patch: {version.patch}")

    config_path = args.config or DEFAULT_CONFIG
    if not config_path.is_absolute():
        config_path = project_root / config_path
    if args.config and not config_path.is_file():
        print_error(f"Config file not found: {config_path}")
        return 1

    try:
        targets = load_config_targets(config_path) if config_path.is_file() else None
    except ConfigError as e:
        print_error(str(e))
        return 1

    if targets is None:
        if args.config:
            print_warning(f"Config file {args.config} has no version_files, using auto-detection")
        elif args.verbose:
            print_info("  No version_files configured, using auto-detection")
        targets = default_targets(project_root, args.verbose)
    elif args.verbose:
        print_info(f"  Using config file: {config_path}")

    updated = update_versions(project_root, version, targets, args.dry_run, args.verbose)
    if updated == 0:
        print_warning("No version files were updated")

    if args.tag and not tag_release(project_root, version, args.dry_run):
        return 1

    print()
    if args.dry_run:
        print_info("DRY-RUN complete. No files were modified.")
    else:
        print_success(f"Version update completed! ({updated} file(s))")
    return 0


if __name__ == '__main__':
    sys.exit(main())
