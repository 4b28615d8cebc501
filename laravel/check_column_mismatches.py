#!/usr/bin/env python3
# ==============================================================================
# laravel/check_column_mismatches.py - Migration/model column reconciliation
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Compare the columns implied by a Laravel project's migrations with the
#   $fillable and casts declared on its Eloquent models, and flag
#   column names in repositories and form requests that are known to be
#   wrong for this project.
#
# Usage:
#   python3 laravel/check_column_mismatches.py [base-path] [--config FILE]
#
# Examples:
#   python3 laravel/check_column_mismatches.py
#   python3 laravel/check_column_mismatches.py ../my-laravel-app --verbose
#
# Design Notes:
#   For every *_create_<table>_table.php migration, all later migrations
#   that mention '<table>' are replayed (adds, renames, drops) to compute
#   the final column set, which is diffed against app/Models/<Model>.php.
#   Exit code is 1 only when CRITICAL findings exist.
#
# ==============================================================================

import argparse
import re
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

sys.path.insert(0, str(Path(__file__).parent.parent))
from common import (
    ConfigError,
    find_files,
    print_banner,
    print_error,
    print_info,
    print_success,
    print_warning,
    read_source,
    table_to_model_name,
)

# Support both direct script execution and module import
try:
    from .extractors import (
        collect_table_columns,
        extract_casts,
        extract_fillable,
        find_create_migrations,
        table_name_from_migration,
    )
    from .settings import ColumnCheckerSettings, load_column_checker_settings
except ImportError:
    from extractors import (
        collect_table_columns,
        extract_casts,
        extract_fillable,
        find_create_migrations,
        table_name_from_migration,
    )
    from settings import ColumnCheckerSettings, load_column_checker_settings


class Severity(Enum):
    """Finding severity, highest first."""
    CRITICAL = 'CRITICAL'
    HIGH = 'HIGH'
    MEDIUM = 'MEDIUM'


class Category(Enum):
    """Kind of column mismatch."""
    SCHEMA_NOT_IN_MODEL = 'schema_not_in_model'
    MODEL_NOT_IN_SCHEMA = 'model_not_in_schema'
    CASTS_NOT_IN_SCHEMA = 'casts_not_in_schema'
    SUSPICIOUS_COLUMN = 'suspicious_column'


SEVERITY_ICONS = {
    Severity.CRITICAL: '🔴',
    Severity.HIGH: '🟠',
    Severity.MEDIUM: '🟡',
}

CATEGORY_TITLES = {
    Category.SCHEMA_NOT_IN_MODEL: "Columns in migration but NOT in model fillable",
    Category.MODEL_NOT_IN_SCHEMA: (
        "Columns in model fillable but NOT in migration (will cause SQL errors)"
    ),
    Category.CASTS_NOT_IN_SCHEMA: "Columns in casts but NOT in migration",
    Category.SUSPICIOUS_COLUMN: "Suspicious column names",
}


@dataclass
class Mismatch:
    """One reported column problem."""
    table: str
    model: str
    column: str
    category: Category
    severity: Severity
    message: str = ""


# ==============================================================================
# Reconciliation
# ==============================================================================

def reconcile(
    table: str,
    model: str,
    schema_columns: List[str],
    fillable: List[str],
    casts: List[str],
    settings: Optional[ColumnCheckerSettings] = None
) -> List[Mismatch]:
    """
    Diff a table's final column set against a model's declarations.

    Args:
        table: Table name
        model: Model class name
        schema_columns: Final columns from migrations
        fillable: Model $fillable entries
        casts: Model cast keys
        settings: Exclusion lists and thresholds

    Returns:
        Mismatches in report order; empty when fillable is empty
        (guarded-style models are not reconciled)
    """
    settings = settings or ColumnCheckerSettings()

    if not fillable:
        return []

    schema_set = set(schema_columns)
    fillable_set = set(fillable)
    system_set = set(settings.system_columns)
    auto_set = set(settings.auto_columns)

    # Foreign keys are often assigned through relationships, not mass assignment
    missing_from_model = [
        col for col in schema_columns
        if col not in fillable_set
        and col not in system_set
        and not col.endswith('_id')
    ]
    missing_from_schema = [col for col in fillable if col not in schema_set]
    casts_not_in_schema = [
        col for col in casts if col not in schema_set and col not in auto_set
    ]

    mismatches = []

    if missing_from_model:
        severity = (
            Severity.CRITICAL
            if len(missing_from_model) > settings.critical_threshold
            else Severity.HIGH
        )
        mismatches.extend(
            Mismatch(table, model, col, Category.SCHEMA_NOT_IN_MODEL, severity)
            for col in missing_from_model
        )

    mismatches.extend(
        Mismatch(table, model, col, Category.MODEL_NOT_IN_SCHEMA, Severity.CRITICAL)
        for col in missing_from_schema
    )
    mismatches.extend(
        Mismatch(table, model, col, Category.CASTS_NOT_IN_SCHEMA, Severity.MEDIUM)
        for col in casts_not_in_schema
    )

    return mismatches


def resolve_model_name(table: str, settings: ColumnCheckerSettings) -> str:
    """Model class for a table, honoring configured overrides."""
    return settings.table_models.get(table) or table_to_model_name(table)


def check_models(
    base_path: Path,
    settings: ColumnCheckerSettings,
    verbose: bool = False
) -> Tuple[int, List[Mismatch]]:
    """
    Reconcile every table that has a create migration and a model.

    Args:
        base_path: Laravel project root
        settings: Checker settings
        verbose: Print skipped tables

    Returns:
        Tuple of (tables_checked, mismatches)
    """
    migrations_dir = base_path / 'database' / 'migrations'
    models_dir = base_path / 'app' / 'Models'

    tables_checked = 0
    mismatches: List[Mismatch] = []
    seen_tables = set()

    for migration in find_create_migrations(migrations_dir):
        table = table_name_from_migration(migration.name)
        if not table or table in seen_tables:
            continue
        seen_tables.add(table)

        model = resolve_model_name(table, settings)
        model_path = models_dir / f"{model}.php"
        if not model_path.exists():
            if verbose:
                print_info(f"  Skipping {table}: no model {model_path.name}")
            continue

        model_source = read_source(model_path)
        if model_source is None:
            continue

        fillable = extract_fillable(model_source)
        if not fillable:
            if verbose:
                print_info(f"  Skipping {table}: {model} declares no $fillable")
            continue

        schema_columns = collect_table_columns(migrations_dir, table, settings.auto_columns)
        casts = extract_casts(model_source)
        tables_checked += 1

        mismatches.extend(
            reconcile(table, model, schema_columns, fillable, casts, settings)
        )

    return tables_checked, mismatches


def find_suspicious_columns(
    directory: Path,
    settings: ColumnCheckerSettings,
    include_accessors: bool = True
) -> List[Mismatch]:
    """
    Look for configured suspicious column names in PHP sources.

    Args:
        directory: Directory to scan recursively
        settings: Checker settings carrying the pattern dictionaries
        include_accessors: Also match `.name` and `->name` usages
            (repositories), not only quoted names (form requests)

    Returns:
        One MEDIUM mismatch per (file, pattern) hit
    """
    findings = []

    for php_file in find_files(directory, '*.php'):
        patterns = settings.suspicious_patterns_for(php_file.stem)
        if not patterns:
            continue

        content = read_source(php_file)
        if content is None:
            continue

        for name, suggestion in patterns.items():
            escaped = re.escape(name)
            checks = [rf'[\'"]{escaped}[\'"]']
            if include_accessors:
                checks.append(rf'\.{escaped}(?:\s|,|\))')
                checks.append(rf'->{escaped}(?:\s|;|\))')

            if any(re.search(check, content) for check in checks):
                findings.append(Mismatch(
                    table=php_file.stem,
                    model='',
                    column=name,
                    category=Category.SUSPICIOUS_COLUMN,
                    severity=Severity.MEDIUM,
                    message=f"Found '{name}': {suggestion}",
                ))

    return findings


# ==============================================================================
# Reporting
# ==============================================================================

def group_by_table(mismatches: List[Mismatch]) -> Dict[Tuple[str, str], List[Mismatch]]:
    grouped: Dict[Tuple[str, str], List[Mismatch]] = {}
    for mismatch in mismatches:
        grouped.setdefault((mismatch.table, mismatch.model), []).append(mismatch)
    return grouped


def print_table_report(table: str, model: str, mismatches: List[Mismatch]) -> None:
    """Print the findings for one table, one block per category."""
    print("━" * 70)
    print(f"📋 Table: {table}")
    print(f"   Model: {model}")
    print("━" * 70)

    for category in (
        Category.SCHEMA_NOT_IN_MODEL,
        Category.MODEL_NOT_IN_SCHEMA,
        Category.CASTS_NOT_IN_SCHEMA,
    ):
        entries = [m for m in mismatches if m.category == category]
        if not entries:
            continue
        severity = entries[0].severity
        print(f"\n{SEVERITY_ICONS[severity]} [{severity.value}] {CATEGORY_TITLES[category]}:")
        for entry in entries:
            print(f"   - {entry.column}")
    print()


def print_suspicious_report(title: str, icon: str, findings: List[Mismatch]) -> None:
    print_banner(title)
    if not findings:
        print_success("No suspicious column names found")
        return

    for (name, _), entries in group_by_table(findings).items():
        print(f"{icon} {name}")
        for entry in entries:
            print(f"   ⚠️  {entry.message}")
        print()


def count_by_severity(mismatches: List[Mismatch]) -> Dict[Severity, int]:
    counts = {severity: 0 for severity in Severity}
    for mismatch in mismatches:
        counts[mismatch.severity] += 1
    return counts


def print_summary(mismatches: List[Mismatch]) -> int:
    """
    Print the summary block.

    Returns:
        Process exit code: 1 if any CRITICAL finding, else 0
    """
    print_banner("SUMMARY")

    if not mismatches:
        print_success("No column mismatches found!")
        print()
        return 0

    counts = count_by_severity(mismatches)
    print(f"Total issues found: {len(mismatches)}")
    print(f"  🔴 Critical: {counts[Severity.CRITICAL]}")
    print(f"  🟠 High:     {counts[Severity.HIGH]}")
    print(f"  🟡 Medium:   {counts[Severity.MEDIUM]}")
    print()
    print_warning("Please review and fix the issues above to prevent runtime errors.")
    print()

    return 1 if counts[Severity.CRITICAL] > 0 else 0


def resolve_base_path(candidate: Optional[Path]) -> Optional[Path]:
    """Return the first of [candidate, cwd] that contains app/Models."""
    options = [candidate] if candidate else []
    options.append(Path.cwd())
    for option in options:
        if option.is_dir() and (option / 'app' / 'Models').is_dir():
            return option.resolve()
    return None


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Check Laravel migrations against model fillable and casts',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                       Check the Laravel project in the current directory
  %(prog)s ../api                Check another project
  %(prog)s --config checks.yml   Use custom exclusion lists

Exit status is 1 when CRITICAL mismatches are found.
        """
    )
    parser.add_argument(
        'base_path',
        nargs='?',
        type=Path,
        default=None,
        help='Laravel project root (default: current directory)'
    )
    parser.add_argument(
        '--config', '-c',
        type=Path,
        default=None,
        help='Config file (default: .laravel-checks.yml in the project root)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show skipped tables'
    )
    args = parser.parse_args(argv)

    base_path = resolve_base_path(args.base_path)
    if base_path is None:
        print_error("Could not find app/Models directory")
        return 1

    try:
        settings = load_column_checker_settings(base_path, args.config)
    except ConfigError as e:
        print_error(str(e))
        return 1

    print_banner("DATABASE COLUMN MISMATCH CHECKER")
    if args.verbose:
        print_info(f"Project: {base_path}")

    tables_checked, mismatches = check_models(base_path, settings, verbose=args.verbose)
    for (table, model), entries in group_by_table(mismatches).items():
        print_table_report(table, model, entries)
    if args.verbose:
        print_info(f"Reconciled {tables_checked} table(s)")

    suspicious: List[Mismatch] = []
    if settings.suspicious_columns or settings.scoped_suspicious_columns:
        repository_findings = find_suspicious_columns(
            base_path / 'app' / 'Repositories', settings, include_accessors=True
        )
        print_suspicious_report("REPOSITORY SQL COLUMN CHECK", "📁", repository_findings)

        request_findings = find_suspicious_columns(
            base_path / 'app' / 'Http' / 'Requests', settings, include_accessors=False
        )
        print_suspicious_report("FORM REQUEST VALIDATION CHECK", "📋", request_findings)
        suspicious = repository_findings + request_findings

    return print_summary(mismatches + suspicious)


if __name__ == '__main__':
    sys.exit(main())
