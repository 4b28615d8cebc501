#!/usr/bin/env python3
# ==============================================================================
# laravel/settings.py - Configuration for the Laravel checkers
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Exclusion lists and pattern dictionaries used by the Laravel checkers,
#   with generic defaults that a project can override in
#   .laravel-checks.yml.
#
# Example .laravel-checks.yml:
#   column_checker:
#     system_columns: [password, remember_token]
#     critical_threshold: 3
#     table_models:
#       people: Person
#     suspicious_columns:
#       administrator: 'Should this be "administered_by"?'
#     scoped_suspicious_columns:
#       immunization:
#         location: 'Should this be "facility_name"?'
#   missing_requests:
#     skip_methods: [stats, history]
#
# ==============================================================================

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))
from common import ConfigError, config_section, find_config_file, load_yaml_config

try:
    from .extractors import DEFAULT_AUTO_COLUMNS
except ImportError:
    from extractors import DEFAULT_AUTO_COLUMNS


CONFIG_CANDIDATES = ['.laravel-checks.yml', '.laravel-checks.yaml']

# Columns that are normally kept out of $fillable on purpose
DEFAULT_SYSTEM_COLUMNS = [
    'email_verified_at', 'remember_token', 'token',
    'two_factor_secret', 'two_factor_recovery_codes', 'two_factor_confirmed_at',
    'password', 'ip_address', 'user_agent', 'last_activity', 'payload',
]

# Controller methods that usually only read (no request body to validate)
DEFAULT_SKIP_METHODS = ['index', 'show', 'create', 'edit', 'destroy']


def _string_list(value: Any, key: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def _string_map(value: Any, key: str) -> Dict[str, str]:
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return {str(k): str(v) for k, v in value.items()}


@dataclass
class ColumnCheckerSettings:
    """Settings for check_column_mismatches."""
    auto_columns: List[str] = field(default_factory=lambda: list(DEFAULT_AUTO_COLUMNS))
    system_columns: List[str] = field(default_factory=lambda: list(DEFAULT_SYSTEM_COLUMNS))
    critical_threshold: int = 3
    table_models: Dict[str, str] = field(default_factory=dict)
    suspicious_columns: Dict[str, str] = field(default_factory=dict)
    scoped_suspicious_columns: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ColumnCheckerSettings':
        settings = cls()
        if 'auto_columns' in data:
            settings.auto_columns = _string_list(data['auto_columns'], 'auto_columns')
        if 'system_columns' in data:
            settings.system_columns = _string_list(data['system_columns'], 'system_columns')
        if 'critical_threshold' in data:
            threshold = data['critical_threshold']
            if not isinstance(threshold, int) or isinstance(threshold, bool):
                raise ConfigError("'critical_threshold' must be an integer")
            settings.critical_threshold = threshold
        if 'table_models' in data:
            settings.table_models = _string_map(data['table_models'], 'table_models')
        if 'suspicious_columns' in data:
            settings.suspicious_columns = _string_map(
                data['suspicious_columns'], 'suspicious_columns'
            )
        if 'scoped_suspicious_columns' in data:
            scoped = data['scoped_suspicious_columns']
            if not isinstance(scoped, dict):
                raise ConfigError("'scoped_suspicious_columns' must be a mapping")
            settings.scoped_suspicious_columns = {
                str(scope): _string_map(patterns, f"scoped_suspicious_columns.{scope}")
                for scope, patterns in scoped.items()
            }
        return settings

    def suspicious_patterns_for(self, file_stem: str) -> Dict[str, str]:
        """Global suspicious patterns plus those scoped to this file name."""
        patterns = dict(self.suspicious_columns)
        for fragment, scoped in self.scoped_suspicious_columns.items():
            if fragment.lower() in file_stem.lower():
                patterns.update(scoped)
        return patterns


@dataclass
class MissingRequestSettings:
    """Settings for check_missing_requests."""
    skip_methods: List[str] = field(default_factory=lambda: list(DEFAULT_SKIP_METHODS))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MissingRequestSettings':
        settings = cls()
        if 'skip_methods' in data:
            # Extends the defaults rather than replacing them
            extra = _string_list(data['skip_methods'], 'skip_methods')
            settings.skip_methods = settings.skip_methods + [
                m for m in extra if m not in settings.skip_methods
            ]
        return settings


def load_checker_config(base_path: Path, config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the Laravel checker config file.

    Args:
        base_path: Laravel project root (searched for default file names)
        config_path: Explicit config file (overrides the search)

    Returns:
        Parsed config mapping ({} when no file exists)

    Raises:
        ConfigError: If the file is invalid
    """
    if config_path is None:
        config_path = find_config_file(base_path, CONFIG_CANDIDATES)
    elif not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    return load_yaml_config(config_path)


def load_column_checker_settings(
    base_path: Path,
    config_path: Optional[Path] = None
) -> ColumnCheckerSettings:
    config = load_checker_config(base_path, config_path)
    return ColumnCheckerSettings.from_dict(config_section(config, 'column_checker'))


def load_missing_request_settings(
    base_path: Path,
    config_path: Optional[Path] = None
) -> MissingRequestSettings:
    config = load_checker_config(base_path, config_path)
    return MissingRequestSettings.from_dict(config_section(config, 'missing_requests'))
