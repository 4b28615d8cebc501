#!/usr/bin/env python3
# ==============================================================================
# laravel/check_relationship_conflicts.py - Relationship/attribute name clashes
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Detect Eloquent models that declare an attribute (fillable or cast) with
#   the same name as a relationship method. Attribute access wins over the
#   relationship, so $model->notes returns the column value and the notes()
#   relationship is silently shadowed.
#
# Usage:
#   python3 laravel/check_relationship_conflicts.py [base-path]
#
# Design Notes:
#   Fillable and cast collisions are errors (exit 1).
#   Guarded collisions are warnings only.
#
# ==============================================================================

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

sys.path.insert(0, str(Path(__file__).parent.parent))
from common import (
    Colors,
    display_path,
    print_error,
    print_section,
    print_success,
    read_source,
)

# Support both direct script execution and module import
try:
    from .extractors import (
        extract_casts,
        extract_fillable,
        extract_guarded,
        extract_relationship_methods,
    )
except ImportError:
    from extractors import (
        extract_casts,
        extract_fillable,
        extract_guarded,
        extract_relationship_methods,
    )


@dataclass
class Conflict:
    """A name shared by an attribute declaration and a relationship method."""
    model: str
    file: Path
    name: str
    kind: str  # 'CONFLICT' or 'WARNING'
    message: str


def detect_conflicts(
    content: str,
    model: str,
    file_path: Path
) -> Tuple[List[Conflict], List[Conflict]]:
    """
    Find attribute/relationship collisions in one model's source.

    Args:
        content: Model source
        model: Model class name
        file_path: Model file (for reporting)

    Returns:
        Tuple of (conflicts, warnings)
    """
    relationships = set(extract_relationship_methods(content))
    conflicts: List[Conflict] = []
    warnings: List[Conflict] = []

    if not relationships:
        return conflicts, warnings

    for column in extract_fillable(content):
        if column in relationships:
            conflicts.append(Conflict(
                model, file_path, column, 'CONFLICT',
                f"Column '{column}' in $fillable conflicts with relationship method '{column}()'"
            ))

    for column in extract_casts(content):
        if column in relationships:
            conflicts.append(Conflict(
                model, file_path, column, 'CONFLICT',
                f"Cast '{column}' in casts() conflicts with relationship method '{column}()'"
            ))

    for column in extract_guarded(content):
        if column in relationships:
            warnings.append(Conflict(
                model, file_path, column, 'WARNING',
                f"Guarded column '{column}' may conflict with relationship method "
                f"'{column}()' depending on usage"
            ))

    return conflicts, warnings


def scan_models(models_dir: Path) -> Tuple[int, List[Conflict], List[Conflict]]:
    """
    Scan every model in models_dir.

    Returns:
        Tuple of (models_scanned, conflicts, warnings)
    """
    model_files = sorted(models_dir.glob('*.php'))
    conflicts: List[Conflict] = []
    warnings: List[Conflict] = []

    for model_file in model_files:
        content = read_source(model_file)
        if content is None:
            continue
        file_conflicts, file_warnings = detect_conflicts(content, model_file.stem, model_file)
        conflicts.extend(file_conflicts)
        warnings.extend(file_warnings)

    return len(model_files), conflicts, warnings


def print_report(
    models_dir: Path,
    scanned: int,
    conflicts: List[Conflict],
    warnings: List[Conflict]
) -> None:
    print_section("=" * 55)
    print_section("  Eloquent Relationship-Column Conflict Detector")
    print_section("=" * 55 + "\n")
    print(f"Scanned {scanned} model files in {display_path(models_dir)}\n")

    if not conflicts and not warnings:
        print_success("No conflicts detected!\n")
        return

    if conflicts:
        print(f"{Colors.RED}✗ CONFLICTS FOUND ({len(conflicts)}):{Colors.NC}\n")
        for conflict in conflicts:
            print(f"  {Colors.RED}[{conflict.kind}]{Colors.NC} {conflict.model}")
            print(f"    File: {display_path(conflict.file)}")
            print(f"    {conflict.message}")
            print(f"    {Colors.YELLOW}Fix: Rename the relationship method to avoid "
                  f"shadowing the column.{Colors.NC}")
            suggested = 'get' + conflict.name[:1].upper() + conflict.name[1:]
            print(f"    Example: Rename '{conflict.name}()' to '{suggested}()' "
                  f"or use a different name.\n")

    if warnings:
        print(f"{Colors.YELLOW}⚠ WARNINGS ({len(warnings)}):{Colors.NC}\n")
        for warning in warnings:
            print(f"  {Colors.YELLOW}[{warning.kind}]{Colors.NC} {warning.model}")
            print(f"    File: {display_path(warning.file)}")
            print(f"    {warning.message}\n")

    print_section("=" * 55)
    print("Summary:")
    print(f"  - Models scanned: {scanned}")
    print(f"  - Conflicts: {len(conflicts)}")
    print(f"  - Warnings: {len(warnings)}")
    print_section("=" * 55 + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Detect Eloquent attributes that shadow relationship methods',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s               Scan app/Models in the current directory
  %(prog)s ../api        Scan another Laravel project
        """
    )
    parser.add_argument(
        'base_path',
        nargs='?',
        type=Path,
        default=Path.cwd(),
        help='Laravel project root (default: current directory)'
    )
    args = parser.parse_args(argv)

    models_dir = args.base_path / 'app' / 'Models'
    if not models_dir.is_dir():
        print_error(f"Models directory not found at {models_dir}")
        return 1

    scanned, conflicts, warnings = scan_models(models_dir)
    print_report(models_dir, scanned, conflicts, warnings)

    if conflicts:
        print_error("Please fix the conflicts above to prevent runtime bugs.\n")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
