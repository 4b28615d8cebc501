#!/usr/bin/env python3
# ==============================================================================
# vue/check_native_inputs.py - Native HTML form control linter
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Find native <input type="date|time|...">, <select> and <textarea>
#   elements in Vue templates that should use the project's UI component
#   library instead.
#
# Usage:
#   python3 vue/check_native_inputs.py [pages-path] [components-path]
#
# Design Notes:
#   Only the <template> section is scanned. Patterns are lower-case so
#   PascalCase components (<Input>, <Select>) never match.
#   File inputs are reported as warnings and do not fail the run.
#
# ==============================================================================

import argparse
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))
from common import (
    Colors,
    display_path,
    find_files,
    print_info,
    print_success,
    read_source,
)


@dataclass
class InputRule:
    name: str
    pattern: re.Pattern
    replacement: str
    warn_only: bool = False


def _input_type(input_type: str) -> re.Pattern:
    return re.compile(r'<input\s[^>]*\btype\s*=\s*["\']' + input_type + r'["\'][^>]*>')


RULES = [
    InputRule('Native date input', _input_type('date'),
              'DatePicker from @/components/ui/date-picker'),
    InputRule('Native time input', _input_type('time'),
              'TimePicker from @/components/ui/time-picker'),
    InputRule('Native datetime-local input', _input_type('datetime-local'),
              'DateTimePicker from @/components/ui/date-time-picker'),
    InputRule('Native select element', re.compile(r'<select\s[^>]*>[\s\S]*?</select>'),
              'Select from @/components/ui/select'),
    InputRule('Native checkbox input', _input_type('checkbox'),
              'Checkbox from @/components/ui/checkbox'),
    InputRule('Native radio input', _input_type('radio'),
              'RadioGroup from @/components/ui/radio-group'),
    InputRule('Native file input', _input_type('file'),
              'Consider using a custom file upload component (may be acceptable)',
              warn_only=True),
    InputRule('Native range input', _input_type('range'),
              'Slider from @/components/ui/slider'),
    InputRule('Native textarea element', re.compile(r'<textarea\s[^>]*>[\s\S]*?</textarea>'),
              'Textarea from @/components/ui/textarea'),
]

EXCLUDED_PATHS = ['components/ui/', 'node_modules/', '.nuxt/', 'dist/']

# Greedy so that nested <template #slot> blocks stay inside the outer one
TEMPLATE_PATTERN = re.compile(r'<template[^>]*>([\s\S]*)</template>', re.IGNORECASE)

SNIPPET_LENGTH = 60


@dataclass
class InputIssue:
    file: Path
    line: int
    kind: str
    replacement: str
    snippet: str
    warn_only: bool = False


def should_exclude(file_path: Path) -> bool:
    path = file_path.as_posix()
    return any(excluded in path for excluded in EXCLUDED_PATHS)


def find_vue_files(directory: Path) -> List[Path]:
    return [f for f in find_files(directory, '*.vue') if not should_exclude(f)]


def _snippet(text: str) -> str:
    if len(text) > SNIPPET_LENGTH:
        return text[:SNIPPET_LENGTH] + '...'
    return text


def scan_template(content: str, file_path: Path) -> List[InputIssue]:
    """
    Find native form controls in a Vue single-file component.

    Args:
        content: .vue source
        file_path: File (for reporting)

    Returns:
        Issues grouped by rule, each with its 1-based line in the file
    """
    template = TEMPLATE_PATTERN.search(content)
    if not template:
        return []

    body = template.group(1)
    offset = template.start(1)
    issues = []

    for rule in RULES:
        for match in rule.pattern.finditer(body):
            issues.append(InputIssue(
                file=file_path,
                line=content.count('\n', 0, offset + match.start()) + 1,
                kind=rule.name,
                replacement=rule.replacement,
                snippet=_snippet(match.group(0)),
                warn_only=rule.warn_only,
            ))

    return issues


def print_report(issues: List[InputIssue]) -> None:
    errors = [issue for issue in issues if not issue.warn_only]
    warnings = [issue for issue in issues if issue.warn_only]

    if errors:
        print(f"Found {len(errors)} native input element(s) that must use UI components:\n")
    if warnings:
        prefix = "Also found" if errors else "Found"
        print(f"{prefix} {len(warnings)} warning(s) (acceptable but worth reviewing):\n")

    grouped: Dict[Path, List[InputIssue]] = {}
    for issue in issues:
        grouped.setdefault(issue.file, []).append(issue)

    for file_path, file_issues in grouped.items():
        print(f"📁 {display_path(file_path)}")
        for issue in file_issues:
            if issue.warn_only:
                icon = f"{Colors.YELLOW}💡{Colors.NC}"
            else:
                icon = f"{Colors.RED}❌{Colors.NC}"
            print(f"   {icon} Line {issue.line}: {issue.kind}")
            print(f"      Found: {issue.snippet}")
            print(f"      Use: {issue.replacement}")
        print()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Find native HTML form controls that should use UI components',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s resources/js/pages resources/js/components
        """
    )
    parser.add_argument(
        'pages_path',
        nargs='?',
        type=Path,
        default=Path('resources/js/pages'),
        help='Pages directory (default: resources/js/pages)'
    )
    parser.add_argument(
        'components_path',
        nargs='?',
        type=Path,
        default=Path('resources/js/components'),
        help='Components directory (default: resources/js/components)'
    )
    args = parser.parse_args(argv)

    print_info("Scanning for native HTML input elements that should use UI components...\n")

    issues: List[InputIssue] = []
    for vue_file in find_vue_files(args.pages_path) + find_vue_files(args.components_path):
        content = read_source(vue_file)
        if content is not None:
            issues.extend(scan_template(content, vue_file))

    if not issues:
        print_success("No native HTML input elements found.\n")
        return 0

    print_report(issues)

    if any(not issue.warn_only for issue in issues):
        print("Suggestions:")
        print("  - Replace native HTML inputs with UI components for consistency")
        print("  - Import components from @/components/ui/")
        print()
        return 1

    print_success("All warnings are acceptable. No blocking issues found.\n")
    return 0


if __name__ == '__main__':
    sys.exit(main())
