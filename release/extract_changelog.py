#!/usr/bin/env python3
# ==============================================================================
# release/extract_changelog.py - Print one version's changelog section
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Extract the body of a version section from CHANGELOG.md, for use as
#   release notes.
#
# Usage:
#   python3 release/extract_changelog.py --version 1.2.3
#   python3 release/extract_changelog.py --version latest --file CHANGELOG.md
#   NOTES=$(python3 release/extract_changelog.py --version "$GITHUB_REF_NAME")
#
# Design Notes:
#   Headers "## [1.2.3]", "## [v1.2.3]" and "## 1.2.3" are recognized.
#   The section ends at the next version (or Unreleased) header.
#   The body goes to stdout with no decoration; errors go to stderr.
#
# ==============================================================================

import argparse
import re
import sys
from pathlib import Path
from typing import List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))
from common import print_error


LATEST_VERSION_PATTERN = re.compile(r'^## \[v?(\d+\.\d+\.\d+[^\]]*)\]', re.MULTILINE)
NEXT_SECTION_PATTERN = re.compile(r'^## (?:\[?v?\d+\.\d+\.\d+|\[?Unreleased)', re.MULTILINE)


def find_latest_version(content: str) -> Optional[str]:
    """First released version listed in the changelog."""
    match = LATEST_VERSION_PATTERN.search(content)
    return match.group(1) if match else None


def extract_section(content: str, version: str) -> Optional[str]:
    """
    Return a version section including its header line.

    Args:
        content: Changelog text
        version: '1.2.3', 'v1.2.3', or 'latest'

    Returns:
        Section text (stripped), or None when the version is not listed
    """
    if version.lower() == 'latest':
        latest = find_latest_version(content)
        return extract_section(content, latest) if latest else None

    clean = re.escape(version[1:] if version.startswith('v') else version)
    header_patterns = [
        rf'## \[{clean}\]',
        rf'## \[v{clean}\]',
        rf'## {clean}(?![\d.])',
    ]

    header = None
    for pattern in header_patterns:
        header = re.search(rf'^{pattern}.*$', content, re.MULTILINE)
        if header:
            break
    if header is None:
        return None

    following = NEXT_SECTION_PATTERN.search(content, header.end())
    end = following.start() if following else len(content)
    return content[header.start():end].strip()


def extract_content_only(content: str, version: str) -> Optional[str]:
    """Return a version section without its header line or surrounding blank lines."""
    section = extract_section(content, version)
    if section is None:
        return None
    return '\n'.join(section.split('\n')[1:]).strip('\n')


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Extract one version section from a changelog',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --version 1.2.3
  %(prog)s --version v1.2.3 --file CHANGELOG.md
  %(prog)s --version latest

In GitHub Actions:
  NOTES=$(%(prog)s --version ${{ github.ref_name }})
  gh release create ${{ github.ref_name }} --notes "$NOTES"
        """
    )
    parser.add_argument('--version', '-v', required=True, help="Version to extract, or 'latest'")
    parser.add_argument('--file', '-f', type=Path, default=Path('CHANGELOG.md'), help='Changelog file (default: CHANGELOG.md)')
    args = parser.parse_args(argv)

    if not args.file.is_file():
        print_error(f"File not found: {args.file}")
        return 1

    try:
        content = args.file.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        print_error(f"Could not read {args.file}: {e}")
        return 1

    section = extract_content_only(content, args.version)
    if section is None:
        print_error(f"Version {args.version} not found in {args.file}")
        return 1

    print(section)
    return 0


if __name__ == '__main__':
    sys.exit(main())
