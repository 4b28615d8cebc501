#!/usr/bin/env python3
# ==============================================================================
# common.py
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Shared utilities for the CI check and release scripts.
#       Provides terminal colors, command execution helpers, file search,
#       name conversion, and YAML configuration loading used across all
#       scripts.
#
# Usage:
#   Import utilities in other scripts:
#          from common import print_success, load_yaml_config
#
#          config = load_yaml_config(Path('.release-config.yml'))
#          print_success("Config loaded")
#
# Design Notes:
#   Design as pure utility module - no side effects
#       All functions are stateless and reusable
#       Terminal colors use ANSI escape codes for cross-platform support
#
# See Also:
#   laravel/check_column_mismatches.py - uses file search and singularization
#       release/generate_changelog.py - uses command execution and config
#       PyYAML for configuration parsing
# ==============================================================================

import fnmatch
import re
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml


# ANSI color codes for terminal output
class Colors:
    """Terminal color codes for formatted output."""
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    BLUE = '\033[0;34m'
    CYAN = '\033[0;36m'
    ORANGE = '\033[0;33m'
    BOLD = '\033[1m'
    NC = '\033[0m'  # No Color


def print_success(message: str) -> None:
    """Print a success message in green."""
    print(f"{Colors.GREEN}✓ {message}{Colors.NC}")


def print_error(message: str) -> None:
    """Print an error message in red."""
    print(f"{Colors.RED}✗ {message}{Colors.NC}", file=sys.stderr)


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    print(f"{Colors.YELLOW}⚠ {message}{Colors.NC}")


def print_info(message: str) -> None:
    """Print an info message in cyan."""
    print(f"{Colors.CYAN}{message}{Colors.NC}")


def print_section(message: str) -> None:
    """Print a section header in blue."""
    print(f"{Colors.BLUE}{message}{Colors.NC}")


def print_banner(title: str) -> None:
    """Print a titled banner framed by separator lines."""
    print_section(f"\n{'='*70}")
    print_section(title)
    print_section(f"{'='*70}\n")


def command_exists(command: str) -> bool:
    """Check if a command exists in PATH."""
    return shutil.which(command) is not None


def run_command(
    cmd: List[str],
    check: bool = True,
    capture: bool = False,
    cwd: Optional[Path] = None
) -> Optional[subprocess.CompletedProcess]:
    """
    Run a shell command.

    Args:
        cmd: Command as list of strings
        check: Raise exception on non-zero exit
        capture: Capture stdout/stderr
        cwd: Working directory (default: current directory)

    Returns:
        CompletedProcess if capture=True, None otherwise.
        None is also returned when the executable is not installed.
    """
    try:
        if capture:
            return subprocess.run(
                cmd,
                check=check,
                capture_output=True,
                encoding='utf-8',
                errors='replace',
                cwd=cwd
            )
        else:
            subprocess.run(cmd, check=check, cwd=cwd)
            return None
    except FileNotFoundError:
        print_error(f"Command not found: {cmd[0]}")
        return None
    except subprocess.CalledProcessError:
        print_error(f"Command failed: {' '.join(cmd)}")
        raise


# ==============================================================================
# File Utilities
# ==============================================================================

def find_files(base_dir: Path, pattern: str) -> List[Path]:
    """
    Recursively find files whose name matches a glob pattern.

    Args:
        base_dir: Directory to search
        pattern: fnmatch pattern applied to the file name (e.g. "*.php")

    Returns:
        Sorted list of matching paths, empty if base_dir does not exist
    """
    if not base_dir.is_dir():
        return []

    return sorted(
        path for path in base_dir.rglob('*')
        if path.is_file() and fnmatch.fnmatch(path.name, pattern)
    )


def read_source(file_path: Path) -> Optional[str]:
    """
    Read a source file as UTF-8 text.

    Returns:
        File content, or None (with a warning) if it cannot be read
    """
    try:
        return file_path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        print_warning(f"Could not read {file_path}: {e}")
        return None


def display_path(path: Path, root: Optional[Path] = None) -> str:
    """Return path relative to root (or cwd) when possible, for reports."""
    root = root or Path.cwd()
    try:
        return str(path.resolve().relative_to(root.resolve()))
    except ValueError:
        return str(path)


def unique(items: Iterable[str]) -> List[str]:
    """Deduplicate while keeping first-seen order."""
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


# ==============================================================================
# Configuration
# ==============================================================================

class ConfigError(ValueError):
    """Raised when a configuration file cannot be parsed."""


def find_config_file(base_dir: Path, candidates: List[str]) -> Optional[Path]:
    """Return the first existing config file among candidates in base_dir."""
    for name in candidates:
        path = base_dir / name
        if path.is_file():
            return path
    return None


def load_yaml_config(config_path: Optional[Path]) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        config_path: Path to the YAML file (None means no config)

    Returns:
        Parsed mapping, or an empty dict if the file is absent or empty

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping
    """
    if config_path is None or not config_path.exists():
        return {}

    try:
        with open(config_path, encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {config_path} must be a mapping")

    return data


def config_section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return a nested section of a config mapping, or {} if absent."""
    section = config.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return section


# ==============================================================================
# Case Conversion Utilities
# ==============================================================================

# Plurals that the suffix rules below would get wrong
IRREGULAR_PLURALS = {
    'people': 'person',
    'children': 'child',
    'men': 'man',
    'women': 'woman',
    'statuses': 'status',
    'media': 'media',
    'data': 'data',
    'news': 'news',
    'series': 'series',
    'caches': 'cache',
    'niches': 'niche',
    'movies': 'movie',
    'cookies': 'cookie',
    'species': 'species',
}


def singularize(word: str) -> str:
    """
    Convert an English plural to singular using common suffix rules.

    Table names the rules still get wrong can be mapped to a model with the
    column checker's table_models setting.

    Args:
        word: e.g., "categories", "addresses", "users"

    Returns:
        Singular form: e.g., "category", "address", "user"
    """
    lower = word.lower()
    if lower in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[lower]
    if lower.endswith('ies') and len(lower) > 3:
        return word[:-3] + 'y'
    if re.search(r'(sses|xes|zes|ches|shes)$', lower):
        return word[:-2]
    if lower.endswith('ss'):
        return word
    if lower.endswith('s'):
        return word[:-1]
    return word


def to_pascal_case(snake_case: str) -> str:
    """
    Convert snake_case to PascalCase.

    Args:
        snake_case: e.g., "blood_pressure_reading"

    Returns:
        PascalCase: e.g., "BloodPressureReading"
    """
    return ''.join(word.capitalize() for word in snake_case.split('_') if word)


def table_to_model_name(table_name: str) -> str:
    """
    Convert a plural snake_case table name to a singular PascalCase model name.

    Only the last word is singularized ("user_profiles" -> "UserProfile").
    """
    words = table_name.split('_')
    words[-1] = singularize(words[-1])
    return to_pascal_case('_'.join(words))
