#!/usr/bin/env python3
# ==============================================================================
# flutter/check_file_sizes.py - Dart source and asset size checker
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Flag Dart files and image assets larger than configurable thresholds.
#
# Usage:
#   python3 flutter/check_file_sizes.py --dart-max 20KB --asset-max 40KB
#   python3 flutter/check_file_sizes.py --dir lib --format markdown
#   python3 flutter/check_file_sizes.py --strict --format github
#
# Design Notes:
#   Sizes accept B, KB, MB, GB (or K, M, G), in 1024 multiples.
#   Paths with a hidden component (.dart_tool, .git, ...) are ignored.
#   Only --strict turns violations into a failing exit status.
#
# ==============================================================================

import argparse
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))
from common import print_error


ASSET_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.svg', '.gif', '.webp'}

SIZE_UNITS = {
    '': 1,
    'B': 1,
    'K': 1024,
    'KB': 1024,
    'M': 1024 ** 2,
    'MB': 1024 ** 2,
    'G': 1024 ** 3,
    'GB': 1024 ** 3,
}

SIZE_PATTERN = re.compile(r'^\s*(\d+)\s*([A-Za-z]*)\s*$')


@dataclass
class SizeViolation:
    path: Path
    size: int


@dataclass
class SizeReport:
    dart_max: str
    asset_max: str
    dart_total: int = 0
    asset_total: int = 0
    dart_violations: List[SizeViolation] = field(default_factory=list)
    asset_violations: List[SizeViolation] = field(default_factory=list)

    @property
    def has_violations(self) -> bool:
        return bool(self.dart_violations or self.asset_violations)


def parse_size(text: str) -> int:
    """
    Convert a size such as '20KB' or '1M' to bytes.

    Raises:
        ValueError: If the size or unit is not recognized
    """
    match = SIZE_PATTERN.match(text)
    if not match:
        raise ValueError(f"Invalid size: {text}")
    value, unit = match.groups()
    unit = unit.upper()
    if unit not in SIZE_UNITS:
        raise ValueError(f"Unknown size unit in: {text}")
    return int(value) * SIZE_UNITS[unit]


def format_size(size: int) -> str:
    """Human-readable size, truncated to one decimal (e.g. 20.5KB)."""
    if size >= 1024 ** 2:
        return f"{size * 10 // 1024 ** 2 / 10:.1f}MB"
    if size >= 1024:
        return f"{size * 10 // 1024 / 10:.1f}KB"
    return f"{size}B"


def is_hidden(path: Path, root: Path) -> bool:
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        parts = path.parts
    return any(part.startswith('.') for part in parts)


def scan_sizes(root: Path, dart_max: str, asset_max: str) -> SizeReport:
    """
    Walk root and compare Dart files and image assets to their limits.

    Args:
        root: Directory to scan
        dart_max: Dart file limit (e.g. '20KB')
        asset_max: Asset limit (e.g. '40KB')

    Returns:
        Totals and violations, each list sorted by path
    """
    dart_limit = parse_size(dart_max)
    asset_limit = parse_size(asset_max)
    report = SizeReport(dart_max, asset_max)

    if not root.is_dir():
        return report

    for path in sorted(root.rglob('*')):
        if not path.is_file() or is_hidden(path, root):
            continue

        suffix = path.suffix.lower()
        if suffix == '.dart':
            report.dart_total += 1
            size = path.stat().st_size
            if size > dart_limit:
                report.dart_violations.append(SizeViolation(path, size))
        elif suffix in ASSET_EXTENSIONS:
            report.asset_total += 1
            size = path.stat().st_size
            if size > asset_limit:
                report.asset_violations.append(SizeViolation(path, size))

    return report


# ==============================================================================
# Output Formats
# ==============================================================================

def render_plain(report: SizeReport) -> List[str]:
    lines = ["File Size Check Results", "=======================", "",
             f"Dart Files (max: {report.dart_max}):"]
    if not report.dart_violations:
        lines.append(f"  ✅ All {report.dart_total} files OK")
    else:
        for v in report.dart_violations:
            lines.append(f"  ❌ {v.path} ({format_size(v.size)})")
        lines.append(f"  {len(report.dart_violations)} of {report.dart_total} files exceed limit")

    lines += ["", f"Asset Files (max: {report.asset_max}):"]
    if not report.asset_violations:
        lines.append(f"  ✅ All {report.asset_total} files OK")
    else:
        for v in report.asset_violations:
            lines.append(f"  ⚠️ {v.path} ({format_size(v.size)})")
        lines.append(f"  {len(report.asset_violations)} of {report.asset_total} assets exceed limit")
    return lines


def render_markdown(report: SizeReport) -> List[str]:
    lines = ["## 📏 File Size Check", "", f"### Dart Files (max: {report.dart_max})", ""]
    if not report.dart_violations:
        lines.append(f"✅ All {report.dart_total} Dart files are within the size limit.")
    else:
        lines += ["| File | Size | Status |", "|------|------|--------|"]
        for v in report.dart_violations:
            lines.append(f"| `{v.path}` | {format_size(v.size)} | ❌ Exceeds limit |")
        lines += ["", f"❌ {len(report.dart_violations)} of {report.dart_total} files exceed the limit"]

    lines += ["", f"### Asset Files (max: {report.asset_max})", ""]
    if not report.asset_violations:
        lines.append(f"✅ All {report.asset_total} assets are within the size limit.")
    else:
        lines += ["| File | Size | Status |", "|------|------|--------|"]
        for v in report.asset_violations:
            lines.append(f"| `{v.path}` | {format_size(v.size)} | ⚠️ Exceeds limit |")
        lines += ["", f"⚠️ {len(report.asset_violations)} of {report.asset_total} assets exceed the limit"]
    return lines


def render_github(report: SizeReport) -> List[str]:
    """GitHub Actions workflow annotations."""
    lines = [
        f"::error file={v.path}::Dart file size {format_size(v.size)} "
        f"exceeds maximum of {report.dart_max}"
        for v in report.dart_violations
    ]
    lines += [
        f"::warning file={v.path}::Asset size {format_size(v.size)} "
        f"exceeds recommended maximum of {report.asset_max}"
        for v in report.asset_violations
    ]
    if not report.has_violations:
        lines.append("✅ All files are within size limits")
    return lines


RENDERERS = {
    'plain': render_plain,
    'markdown': render_markdown,
    'github': render_github,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Check Dart file and asset sizes against thresholds',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --dart-max 20KB --asset-max 40KB
  %(prog)s --dir lib --format markdown
  %(prog)s --strict --format github
        """
    )
    parser.add_argument('--dart-max', default='20KB', help='Max Dart file size (default: 20KB)')
    parser.add_argument('--asset-max', default='40KB', help='Max asset file size (default: 40KB)')
    parser.add_argument('--dir', type=Path, default=Path('.'), help='Directory to check (default: .)')
    parser.add_argument('--format', '-f', choices=sorted(RENDERERS), default='plain', help='Output format (default: plain)')
    parser.add_argument('--strict', action='store_true', help='Exit with status 1 if any file exceeds its limit')
    args = parser.parse_args(argv)

    try:
        report = scan_sizes(args.dir, args.dart_max, args.asset_max)
    except ValueError as e:
        print_error(str(e))
        return 1

    for line in RENDERERS[args.format](report):
        print(line)

    if args.strict and report.has_violations:
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
