#!/usr/bin/env python3
# ==============================================================================
# laravel/extractors.py - Migration and model source extraction
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Pattern-based extraction of schema columns from Laravel migrations and
#   of fillable/cast/guarded attributes and relationship accessors from
#   Eloquent model source.
#
# Design Notes:
#   Extraction is heuristic: regular expressions over PHP source, with
#   brace counting to isolate up() bodies and Schema::table() closures.
#   Missing syntax yields empty results, never an error.
#
# ==============================================================================

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))
from common import find_files, read_source, unique


# Blueprint methods that declare a named column
COLUMN_TYPES = [
    'string', 'char', 'text', 'mediumText', 'longText',
    'integer', 'bigInteger', 'unsignedInteger', 'unsignedBigInteger',
    'unsignedTinyInteger', 'unsignedSmallInteger', 'tinyInteger', 'smallInteger',
    'decimal', 'float', 'double', 'boolean',
    'date', 'dateTime', 'timestamp', 'time', 'year',
    'json', 'jsonb', 'enum', 'uuid', 'ulid', 'foreignId', 'foreignUuid',
]

RELATIONSHIP_TYPES = [
    'HasOne', 'HasMany', 'BelongsTo', 'BelongsToMany',
    'HasOneThrough', 'HasManyThrough',
    'MorphOne', 'MorphMany', 'MorphTo', 'MorphToMany', 'MorphedByMany',
]

DEFAULT_AUTO_COLUMNS = ['id', 'created_at', 'updated_at', 'deleted_at']

COLUMN_PATTERN = re.compile(
    r'\$table->(?:' + '|'.join(COLUMN_TYPES) + r')\s*\(\s*[\'"]([^"\']+)[\'"]'
)
RENAME_PATTERN = re.compile(
    r'\$table->renameColumn\s*\(\s*[\'"]([^\'"]+)[\'"]\s*,\s*[\'"]([^\'"]+)[\'"]\s*\)'
)
DROP_SINGLE_PATTERN = re.compile(r'\$table->dropColumn\s*\(\s*[\'"]([^\'"]+)[\'"]\s*\)')
DROP_ARRAY_PATTERN = re.compile(r'\$table->dropColumn\s*\(\s*\[(.*?)\]\s*\)', re.DOTALL)
UP_METHOD_PATTERN = re.compile(r'public\s+function\s+up\s*\(\s*\)\s*(?::\s*\w+\s*)?\{')
CREATE_MIGRATION_PATTERN = re.compile(r'create_([a-z0-9_]+)_table\.php$')
QUOTED_PATTERN = re.compile(r'[\'"]([^\'"]+)[\'"]')
ARRAY_KEY_PATTERN = re.compile(r'[\'"]([^\'"]+)[\'"]\s*=>')

FILLABLE_PATTERN = re.compile(r'protected\s+\$fillable\s*=\s*\[(.*?)\];', re.DOTALL)
GUARDED_PATTERN = re.compile(r'protected\s+\$guarded\s*=\s*\[(.*?)\];', re.DOTALL)
CASTS_PROPERTY_PATTERN = re.compile(r'protected\s+\$casts\s*=\s*\[(.*?)\];', re.DOTALL)
CASTS_METHOD_PATTERN = re.compile(
    r'protected\s+function\s+casts\s*\(\s*\)\s*:\s*array\s*\{\s*return\s*\[(.*?)\];',
    re.DOTALL
)
TYPED_RELATIONSHIP_PATTERN = re.compile(
    r'public\s+function\s+(\w+)\s*\(\s*\)\s*:\s*(?:\\?(?:\w+\\)*)(?:'
    + '|'.join(RELATIONSHIP_TYPES) + r')\b'
)
RETURNED_RELATIONSHIP_PATTERN = re.compile(
    r'public\s+function\s+(\w+)\s*\(\s*\)\s*(?::\s*[\w\\]+\s*)?\{[^}]*?return\s+\$this\s*->\s*'
    r'(?:hasOne|hasMany|belongsTo|belongsToMany|morphOne|morphMany|morphTo|'
    r'morphToMany|morphedByMany|hasOneThrough|hasManyThrough)\s*\('
)


@dataclass
class TableChanges:
    """Column changes a single migration applies to one table."""
    columns: List[str] = field(default_factory=list)
    renames: Dict[str, str] = field(default_factory=dict)
    drops: List[str] = field(default_factory=list)


# ==============================================================================
# Migration Extraction
# ==============================================================================

def find_block_end(content: str, start: int) -> int:
    """
    Find the index of the brace closing a block whose body starts at start.

    Args:
        content: Source text
        start: Index just after the opening '{'

    Returns:
        Index of the matching '}' (or len(content) if unbalanced)
    """
    depth = 1
    for i in range(start, len(content)):
        char = content[i]
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return i
    return len(content)


def extract_up_method(content: str) -> str:
    """Return the body of the migration's up() method, or the whole file."""
    match = UP_METHOD_PATTERN.search(content)
    if not match:
        return content
    start = match.end()
    return content[start:find_block_end(content, start)]


def extract_columns(content: str) -> List[str]:
    """Extract every column name declared via a Blueprint type method."""
    return COLUMN_PATTERN.findall(content)


def extract_migration_columns(
    content: str,
    auto_columns: Iterable[str] = DEFAULT_AUTO_COLUMNS
) -> List[str]:
    """
    Extract columns from a create-table migration.

    Args:
        content: Migration source
        auto_columns: Implicit columns to leave out

    Returns:
        Deduplicated column names in declaration order
    """
    excluded = set(auto_columns)
    return unique(col for col in extract_columns(content) if col not in excluded)


def extract_table_changes(content: str, table_name: str) -> TableChanges:
    """
    Extract column additions, renames, and drops a migration applies to a table.

    Only the up() method is inspected so that down() cannot cancel a rename.
    Every Schema::table('<table_name>', ...) closure inside it is scanned.
    """
    up_content = extract_up_method(content)
    changes = TableChanges()

    table_pattern = re.compile(
        r'Schema::table\s*\(\s*[\'"]' + re.escape(table_name)
        + r'[\'"]\s*,\s*(?:static\s+)?function\s*\([^)]*\)\s*(?::\s*\w+\s*)?\{'
    )

    for match in table_pattern.finditer(up_content):
        start = match.end()
        block = up_content[start:find_block_end(up_content, start)]

        changes.columns.extend(extract_columns(block))

        for old_name, new_name in RENAME_PATTERN.findall(block):
            changes.renames[old_name] = new_name

        changes.drops.extend(DROP_SINGLE_PATTERN.findall(block))
        for drop_list in DROP_ARRAY_PATTERN.findall(block):
            changes.drops.extend(QUOTED_PATTERN.findall(drop_list))

    return changes


def table_name_from_migration(filename: str) -> Optional[str]:
    """Get the table name from a create migration file name."""
    match = CREATE_MIGRATION_PATTERN.search(filename)
    return match.group(1) if match else None


def find_create_migrations(migrations_dir: Path) -> List[Path]:
    """Find all *_create_*_table.php migrations (recursively)."""
    return find_files(migrations_dir, '*_create_*_table.php')


def references_table(content: str, table_name: str) -> bool:
    """Check whether migration source mentions the table as a string literal."""
    return f"'{table_name}'" in content or f'"{table_name}"' in content


def apply_changes(
    columns: List[str],
    renames: Dict[str, str],
    drops: Iterable[str],
    auto_columns: Iterable[str] = DEFAULT_AUTO_COLUMNS
) -> List[str]:
    """
    Apply accumulated renames, then drops, then strip implicit columns.

    Args:
        columns: Columns from the create migration plus later additions
        renames: Ordered map of old name -> new name
        drops: Dropped column names
        auto_columns: Implicit columns to strip

    Returns:
        Final deduplicated column list
    """
    result = list(columns)

    for old_name, new_name in renames.items():
        result = [col for col in result if col != old_name]
        result.append(new_name)

    removed = set(drops) | set(auto_columns)
    return unique(col for col in result if col not in removed)


def collect_table_columns(
    migrations_dir: Path,
    table_name: str,
    auto_columns: Iterable[str] = DEFAULT_AUTO_COLUMNS
) -> List[str]:
    """
    Compute the final column set of a table by replaying its migrations.

    The create migration provides the initial columns; every other migration
    in migrations_dir that mentions the table is applied in file-name order.
    """
    auto_columns = list(auto_columns)
    columns: List[str] = []
    renames: Dict[str, str] = {}
    drops: List[str] = []

    create_marker = f"_create_{table_name}_table"

    for migration in find_create_migrations(migrations_dir):
        if migration.name.endswith(f"{create_marker}.php"):
            content = read_source(migration)
            if content is not None:
                columns.extend(extract_migration_columns(content, auto_columns))

    for migration in sorted(migrations_dir.glob('*.php'), key=lambda p: p.name):
        if create_marker in migration.name:
            continue

        content = read_source(migration)
        if content is None or not references_table(content, table_name):
            continue

        changes = extract_table_changes(content, table_name)
        columns.extend(changes.columns)
        renames.update(changes.renames)
        drops.extend(changes.drops)

    return apply_changes(columns, renames, drops, auto_columns)


# ==============================================================================
# Model Extraction
# ==============================================================================

def extract_fillable(content: str) -> List[str]:
    """Extract the $fillable attribute list (empty if not declared)."""
    match = FILLABLE_PATTERN.search(content)
    if not match:
        return []
    return QUOTED_PATTERN.findall(match.group(1))


def extract_guarded(content: str) -> List[str]:
    """Extract the $guarded attribute list (empty if not declared)."""
    match = GUARDED_PATTERN.search(content)
    if not match:
        return []
    return QUOTED_PATTERN.findall(match.group(1))


def extract_casts(content: str) -> List[str]:
    """
    Extract cast keys from both declaration styles.

    Supports the casts() method (Laravel 11+) and the $casts property.
    """
    keys: List[str] = []
    for pattern in (CASTS_METHOD_PATTERN, CASTS_PROPERTY_PATTERN):
        match = pattern.search(content)
        if match:
            keys.extend(ARRAY_KEY_PATTERN.findall(match.group(1)))
    return unique(keys)


def extract_relationship_methods(content: str) -> List[str]:
    """
    Extract names of relationship accessor methods.

    A method counts when its return type is a relation class or its body
    returns $this->hasMany(...) and friends.
    """
    methods = TYPED_RELATIONSHIP_PATTERN.findall(content)
    methods.extend(RETURNED_RELATIONSHIP_PATTERN.findall(content))
    return unique(methods)
