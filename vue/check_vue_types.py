#!/usr/bin/env python3
# ==============================================================================
# vue/check_vue_types.py - Inline type definition linter for Vue files
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Report top-level `interface` and `type` declarations inside <script>
#   blocks of .vue files. Shared types belong in dedicated .ts files under
#   the types/ directory.
#
# Usage:
#   python3 vue/check_vue_types.py [vue-directory] [--config .vue-checks.yml]
#
# Design Notes:
#   Props interfaces (used with defineProps) are allowed.
#   Only declarations starting at column 0 are reported.
#   Further exceptions come from .vue-checks.yml:
#       vue_types:
#         excluded_files: ["resources/js/pages/Legacy.vue"]
#         excluded_types: ["type StatusKey ="]
#
# ==============================================================================

import argparse
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

sys.path.insert(0, str(Path(__file__).parent.parent))
from common import (
    ConfigError,
    config_section,
    display_path,
    find_files,
    load_yaml_config,
    print_error,
    print_info,
    print_success,
    read_source,
)


DEFAULT_CONFIG = Path('.vue-checks.yml')

INTERFACE_PATTERN = re.compile(r'^(?:export )?interface ')
TYPE_PATTERN = re.compile(r'^(?:export )?type ')
SCRIPT_OPEN = '<script'
SCRIPT_CLOSE = '</script>'


@dataclass
class VueTypeSettings:
    excluded_files: List[str] = field(default_factory=list)
    excluded_types: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VueTypeSettings':
        settings = cls()
        for key in ('excluded_files', 'excluded_types'):
            if key in data:
                value = data[key]
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ConfigError(f"'vue_types.{key}' must be a list of strings")
                setattr(settings, key, list(value))
        return settings

    def is_file_excluded(self, file_path: Path) -> bool:
        path = file_path.as_posix()
        return any(excluded in path for excluded in self.excluded_files)

    def is_type_excluded(self, line: str) -> bool:
        return any(excluded in line for excluded in self.excluded_types)


@dataclass
class TypeFindings:
    file: Path
    interfaces: List[Tuple[int, str]] = field(default_factory=list)
    types: List[Tuple[int, str]] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.interfaces or self.types)


def script_lines(content: str) -> List[Tuple[int, str]]:
    """
    Lines inside <script> blocks, with 1-based file line numbers.

    The opening and closing tag lines are included, as a line-range scan
    would include them.
    """
    result = []
    inside = False
    for number, line in enumerate(content.splitlines(), start=1):
        if not inside and SCRIPT_OPEN in line:
            inside = True
        if inside:
            result.append((number, line))
            if SCRIPT_CLOSE in line:
                inside = False
    return result


def find_inline_types(
    content: str,
    file_path: Path,
    settings: Optional[VueTypeSettings] = None
) -> TypeFindings:
    settings = settings or VueTypeSettings()
    findings = TypeFindings(file_path)

    for number, line in script_lines(content):
        if settings.is_type_excluded(line):
            continue
        if INTERFACE_PATTERN.match(line) and 'Props' not in line:
            findings.interfaces.append((number, line.rstrip()))
        elif TYPE_PATTERN.match(line):
            findings.types.append((number, line.rstrip()))

    return findings


def load_settings(config_path: Optional[Path] = None) -> VueTypeSettings:
    """Settings from an explicit file, or from .vue-checks.yml when present."""
    if config_path is None:
        config_path = DEFAULT_CONFIG
    elif not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    config = load_yaml_config(config_path)
    return VueTypeSettings.from_dict(config_section(config, 'vue_types'))


def print_findings(findings: TypeFindings) -> None:
    print(f"Found in: {display_path(findings.file)}")
    if findings.interfaces:
        print("  Interfaces:")
        for number, line in findings.interfaces:
            print(f"    {number}:{line}")
    if findings.types:
        print("  Types:")
        for number, line in findings.types:
            print(f"    {number}:{line}")
    print()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Find interface/type definitions inside Vue files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                      Scan resources/js
  %(prog)s src --config ci.yml  Scan src with custom exclusions
        """
    )
    parser.add_argument(
        'vue_dir',
        nargs='?',
        type=Path,
        default=Path('resources/js'),
        help='Directory to scan (default: resources/js)'
    )
    parser.add_argument(
        '--config', '-c',
        type=Path,
        default=None,
        help=f'Config file (default: {DEFAULT_CONFIG} when present)'
    )
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print_error(str(e))
        return 1

    print_info("Checking for interface/type definitions in Vue files...")
    print_info("(Props interfaces for defineProps are excluded)")
    if settings.excluded_files:
        print_info(f"({len(settings.excluded_files)} file(s) excluded)")
    if settings.excluded_types:
        print_info(f"({len(settings.excluded_types)} type(s) excluded)")
    print()

    files_with_issues = 0
    for vue_file in find_files(args.vue_dir, '*.vue'):
        if settings.is_file_excluded(vue_file):
            continue
        content = read_source(vue_file)
        if content is None:
            continue
        findings = find_inline_types(content, vue_file, settings)
        if findings:
            print_findings(findings)
            files_with_issues += 1

    if files_with_issues == 0:
        print_success("No interface/type definitions found in Vue files.")
        return 0

    print_error(f"Found issues in {files_with_issues} file(s).")
    print("\nPlease move these definitions to the types/ directory.")
    print("Then import them in the Vue file.")
    return 1


if __name__ == '__main__':
    sys.exit(main())
