#!/usr/bin/env python3
# ==============================================================================
# flutter/affected_packages.py - Changed packages in a Flutter monorepo
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   List the packages of a Flutter/Dart monorepo touched since a base
#   branch, for building a CI test matrix.
#
# Usage:
#   python3 flutter/affected_packages.py --base main
#   python3 flutter/affected_packages.py --base develop --format json
#   python3 flutter/affected_packages.py --format github >> "$GITHUB_OUTPUT"
#
# Design Notes:
#   A package is a direct child of the packages directory that contains a
#   pubspec.yaml. Changes to root workspace files (pubspec.yaml, melos.yaml,
#   analysis_options.yaml) mark every package as affected.
#   Verbose messages go to stderr so stdout stays machine-readable.
#
# ==============================================================================

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import yaml

sys.path.insert(0, str(Path(__file__).parent.parent))
from common import Colors, print_error, run_command, unique


ROOT_CONFIG_FILES = {'pubspec.yaml', 'melos.yaml', 'analysis_options.yaml'}
CANDIDATE_DIRS = ['packages', 'apps', 'modules']
DEFAULT_PACKAGES_DIR = 'packages'


def log_verbose(message: str, verbose: bool) -> None:
    if verbose:
        print(f"{Colors.CYAN}[INFO] {message}{Colors.NC}", file=sys.stderr)


def packages_dir_from_melos(melos_file: Path) -> Optional[str]:
    """First package glob in melos.yaml, reduced to its directory."""
    try:
        with open(melos_file, encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return None

    if not isinstance(data, dict):
        return None
    globs = data.get('packages')
    if not isinstance(globs, list) or not globs:
        return None

    first = str(globs[0])
    for suffix in ('/**', '/*', '/'):
        if first.endswith(suffix):
            first = first[:-len(suffix)]
    return first or None


def detect_packages_directory(project_root: Path) -> str:
    """Guess the packages directory from common monorepo layouts."""
    for name in CANDIDATE_DIRS:
        if (project_root / name).is_dir():
            return name
    melos = project_root / 'melos.yaml'
    if melos.is_file():
        return packages_dir_from_melos(melos) or DEFAULT_PACKAGES_DIR
    return DEFAULT_PACKAGES_DIR


def _git_lines(args: List[str], cwd: Optional[Path]) -> Optional[List[str]]:
    result = run_command(['git'] + args, check=False, capture=True, cwd=cwd)
    if result is None or result.returncode != 0:
        return None
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


def get_changed_files(
    base: str,
    cwd: Optional[Path] = None,
    verbose: bool = False
) -> List[str]:
    """
    Files changed on HEAD since it diverged from base.

    Falls back to a direct base..HEAD diff, then to the last commit.
    """
    merge_base = _git_lines(['merge-base', base, 'HEAD'], cwd)
    if merge_base:
        log_verbose(f"Merge base: {merge_base[0]}", verbose)
        files = _git_lines(['diff', '--name-only', f"{merge_base[0]}..HEAD"], cwd)
        if files is not None:
            return files

    files = _git_lines(['diff', '--name-only', f"{base}..HEAD"], cwd)
    if files is None:
        files = _git_lines(['diff', '--name-only', 'HEAD~1..HEAD'], cwd)
    return files or []


def package_from_path(file_path: str, packages_dir: str) -> Optional[str]:
    """'packages/core/lib/main.dart' -> 'core'."""
    prefix = packages_dir.rstrip('/') + '/'
    if not file_path.startswith(prefix):
        return None
    name = file_path[len(prefix):].split('/', 1)[0]
    return name or None


def list_packages(project_root: Path, packages_dir: str) -> List[str]:
    directory = project_root / packages_dir
    if not directory.is_dir():
        return []
    return sorted(
        child.name for child in directory.iterdir()
        if child.is_dir() and (child / 'pubspec.yaml').is_file()
    )


def find_affected_packages(
    changed_files: List[str],
    project_root: Path,
    packages_dir: str,
    verbose: bool = False
) -> List[str]:
    """
    Map changed files to package names.

    Returns:
        Package names in first-affected order, without duplicates
    """
    affected: List[str] = []
    for file_path in changed_files:
        name = package_from_path(file_path, packages_dir)
        if name and (project_root / packages_dir / name / 'pubspec.yaml').is_file():
            affected.append(name)
            log_verbose(f"Affected package: {name}", verbose)

        if file_path in ROOT_CONFIG_FILES:
            log_verbose(f"Root config changed: {file_path} - all packages affected", verbose)
            affected.extend(list_packages(project_root, packages_dir))

    return unique(affected)


def format_output(packages: List[str], output_format: str) -> Optional[str]:
    """Render the package list; None means print nothing."""
    if output_format == 'json':
        return json.dumps(packages, separators=(',', ':'))
    if output_format == 'github':
        return f"packages={json.dumps(packages, separators=(',', ':'))}"
    return '\n'.join(packages) if packages else None


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Detect which monorepo packages changed since a base branch',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output formats:
  plain     One package per line
  json      JSON array of package names
  github    GitHub Actions output (packages=[...])

Examples:
  %(prog)s --base main
  %(prog)s --base develop --format json
  %(prog)s --dir packages --verbose
        """
    )
    parser.add_argument('--base', '-b', default='main', help='Base branch (default: main)')
    parser.add_argument('--format', '-f', choices=['plain', 'json', 'github'], default='plain', help='Output format (default: plain)')
    parser.add_argument('--dir', '-d', default=DEFAULT_PACKAGES_DIR, help='Packages directory (default: packages)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Show detailed output on stderr')
    args = parser.parse_args(argv)

    verbose = args.verbose
    project_root = Path.cwd()

    packages_dir = args.dir
    if not (project_root / packages_dir).is_dir():
        packages_dir = detect_packages_directory(project_root)
        log_verbose(f"Auto-detected packages directory: {packages_dir}", verbose)

    check = run_command(['git', 'rev-parse', '--git-dir'], check=False, capture=True, cwd=project_root)
    if check is None or check.returncode != 0:
        print_error("Not in a git repository")
        return 1

    log_verbose(f"Base branch: {args.base}", verbose)
    log_verbose(f"Packages directory: {packages_dir}", verbose)

    changed = get_changed_files(args.base, project_root, verbose)
    if not changed:
        log_verbose("No changed files found", verbose)
    else:
        log_verbose("Changed files:\n" + '\n'.join(changed), verbose)

    packages = find_affected_packages(changed, project_root, packages_dir, verbose)

    output = format_output(packages, args.format)
    if output is not None:
        print(output)

    log_verbose(f"Found {len(packages)} affected package(s)", verbose)
    return 0


if __name__ == '__main__':
    sys.exit(main())
