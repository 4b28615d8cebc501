#!/usr/bin/env python3
# ==============================================================================
# laravel/check_missing_requests.py - Find controllers bypassing FormRequests
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Report controller methods that validate inline with
#   $request->validate([...]) and methods that take a plain Request and read
#   input without any visible validation.
#
# Usage:
#   python3 laravel/check_missing_requests.py [base-path] [--strict]
#
# Design Notes:
#   Advisory by default (exit 0). With --strict any finding fails the run.
#   Read-only controller actions are skipped; extend the list under
#   missing_requests.skip_methods in .laravel-checks.yml.
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
    ConfigError,
    display_path,
    find_files,
    print_error,
    print_info,
    print_success,
    print_warning,
    read_source,
)

# Support both direct script execution and module import
try:
    from .settings import MissingRequestSettings, load_missing_request_settings
except ImportError:
    from settings import MissingRequestSettings, load_missing_request_settings


INLINE_VALIDATE = 'inline_validate'
NO_VALIDATION = 'no_validation'

INLINE_VALIDATE_PATTERN = re.compile(r'\$request->validate\s*\(\s*\[')
PUBLIC_FUNCTION_PATTERN = re.compile(r'public\s+function\s+(\w+)')
REQUEST_METHOD_PATTERN = re.compile(r'public\s+function\s+(\w+)\s*\(\s*Request\s+\$request')
REQUEST_INPUT_PATTERN = re.compile(r'\$request->(?:input|get|post|query|all)\s*\(')

MESSAGES = {
    INLINE_VALIDATE: 'Inline $request->validate() - consider using FormRequest',
    NO_VALIDATION: 'Uses request input without visible validation',
}


@dataclass
class RequestIssue:
    file: Path
    line: int
    method: str
    kind: str

    @property
    def message(self) -> str:
        return MESSAGES[self.kind]


def line_number(content: str, offset: int) -> int:
    """1-based line number of a character offset."""
    return content.count('\n', 0, offset) + 1


def enclosing_method(content: str, offset: int) -> str:
    """Name of the last public method declared before offset."""
    names = PUBLIC_FUNCTION_PATTERN.findall(content, 0, offset)
    return names[-1] if names else 'unknown'


def find_request_issues(
    content: str,
    file_path: Path,
    skip_methods: Optional[List[str]] = None
) -> List[RequestIssue]:
    """
    Find validation issues in one controller's source.

    Args:
        content: Controller source
        file_path: Controller file (for reporting)
        skip_methods: Method names never reported as no_validation

    Returns:
        Issues in source order per kind (inline validations first)
    """
    if skip_methods is None:
        skip_methods = MissingRequestSettings().skip_methods
    skipped = set(skip_methods)
    issues: List[RequestIssue] = []

    for match in INLINE_VALIDATE_PATTERN.finditer(content):
        issues.append(RequestIssue(
            file_path,
            line_number(content, match.start()),
            enclosing_method(content, match.start()),
            INLINE_VALIDATE,
        ))

    for match in REQUEST_METHOD_PATTERN.finditer(content):
        method = match.group(1)
        if method in skipped:
            continue

        end = content.find('public function', match.start() + 1)
        body = content[match.start():end if end != -1 else len(content)]

        # Inline validation is already reported above
        if '$request->validate' in body:
            continue

        if REQUEST_INPUT_PATTERN.search(body):
            issues.append(RequestIssue(
                file_path,
                line_number(content, match.start(1)),
                method,
                NO_VALIDATION,
            ))

    return issues


def scan_controllers(controllers_dir: Path, settings: MissingRequestSettings) -> List[RequestIssue]:
    issues: List[RequestIssue] = []
    for controller in find_files(controllers_dir, '*.php'):
        content = read_source(controller)
        if content is None:
            continue
        issues.extend(find_request_issues(content, controller, settings.skip_methods))
    return issues


def print_report(issues: List[RequestIssue]) -> None:
    if not issues:
        print_success("No issues found. All controllers use FormRequest classes properly.")
        return

    print_warning(f"Found {len(issues)} potential issues:\n")

    grouped: Dict[Path, List[RequestIssue]] = {}
    for issue in issues:
        grouped.setdefault(issue.file, []).append(issue)

    for file_path, file_issues in grouped.items():
        print(f"📁 {display_path(file_path)}")
        for issue in file_issues:
            icon = '⚠️ ' if issue.kind == INLINE_VALIDATE else '❓'
            print(f"   {icon} Line {issue.line}: {issue.method}() - {issue.message}")
        print()

    print_info("Suggestions:")
    print("  - Create FormRequest classes: php artisan make:request Store{Model}Request")
    print("  - Move validation rules to the FormRequest's rules() method")
    print("  - Replace Request type hint with your FormRequest class")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Find controllers that validate inline instead of using FormRequests',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                   Scan app/Http/Controllers (advisory)
  %(prog)s --strict          Fail when any issue is found
  %(prog)s ../api -c ci.yml  Scan another project with a custom config
        """
    )
    parser.add_argument(
        'base_path',
        nargs='?',
        type=Path,
        default=Path.cwd(),
        help='Laravel project root (default: current directory)'
    )
    parser.add_argument(
        '--config', '-c',
        type=Path,
        help='Config file (default: .laravel-checks.yml in base path)'
    )
    parser.add_argument(
        '--strict',
        action='store_true',
        help='Exit with status 1 when issues are found'
    )
    args = parser.parse_args(argv)

    controllers_dir = args.base_path / 'app' / 'Http' / 'Controllers'
    if not controllers_dir.is_dir():
        print_error(f"Controllers directory not found at {controllers_dir}")
        return 1

    try:
        settings = load_missing_request_settings(args.base_path, args.config)
    except ConfigError as e:
        print_error(str(e))
        return 1

    issues = scan_controllers(controllers_dir, settings)
    print_report(issues)

    if issues and args.strict:
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
