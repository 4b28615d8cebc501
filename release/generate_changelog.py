#!/usr/bin/env python3
# ==============================================================================
# release/generate_changelog.py - Changelog generation from conventional commits
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Build a Keep-a-Changelog version section from the conventional commits
#   made since the last release tag, and insert it into CHANGELOG.md.
#
# Usage:
#   python3 release/generate_changelog.py --version 1.2.3
#   python3 release/generate_changelog.py --version v1.2.3 --format plain --links short
#   python3 release/generate_changelog.py --version 1.2.3 --dry-run
#
# Design Notes:
#   Options resolve as command line, then config file, then defaults.
#   Config is read from .release-config.yml, .release-config.yaml or
#   .changelog.yml (changelog: section).
#   The entry goes after "## [Unreleased]" when present, otherwise before
#   the first released version.
#
# ==============================================================================

import argparse
import re
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))
from common import (
    ConfigError,
    config_section,
    find_config_file,
    load_yaml_config,
    print_banner,
    print_error,
    print_info,
    print_success,
    print_warning,
)

# Support both direct script execution and module import
try:
    from .git import (
        detect_repository_url,
        get_commits,
        get_last_tag,
        has_uncommitted_changes,
        is_git_repository,
    )
    from .models import ChangelogFormat, ChangelogOptions, CommitRecord, LinkStyle, ParsedCommit, VersionInfo
except ImportError:
    from git import (
        detect_repository_url,
        get_commits,
        get_last_tag,
        has_uncommitted_changes,
        is_git_repository,
    )
    from models import ChangelogFormat, ChangelogOptions, CommitRecord, LinkStyle, ParsedCommit, VersionInfo


CONFIG_CANDIDATES = ['.release-config.yml', '.release-config.yaml', '.changelog.yml']

# Commit type -> (plain heading, emoji heading)
COMMIT_TYPES = {
    'feat': ('Added', '✨ Features'),
    'fix': ('Fixed', '🐛 Bug Fixes'),
    'hotfix': ('Hotfixes', '🚑 Hotfixes'),
    'docs': ('Documentation', '📚 Documentation'),
    'style': ('Style', '💎 Styles'),
    'refactor': ('Changed', '♻️ Code Refactoring'),
    'perf': ('Performance', '⚡ Performance'),
    'test': ('Tests', '✅ Tests'),
    'build': ('Build', '📦 Build System'),
    'ci': ('CI/CD', '👷 CI/CD'),
    'chore': ('Maintenance', '🔧 Chores'),
    'revert': ('Reverted', '⏪ Reverts'),
    'breaking': ('Breaking Changes', '⚠️ Breaking Changes'),
}

OTHER_CATEGORY = 'Other'

CATEGORY_PRIORITY = [
    'Breaking Changes', 'Hotfixes', 'Added', 'Changed', 'Fixed', 'Performance',
    'Documentation', 'Tests', 'CI/CD', 'Build', 'Maintenance', 'Style',
    'Reverted',
    '⚠️ Breaking Changes', '🚑 Hotfixes', '✨ Features', '♻️ Code Refactoring',
    '🐛 Bug Fixes', '⚡ Performance', '📚 Documentation', '✅ Tests',
    '👷 CI/CD', '📦 Build System', '🔧 Chores', '💎 Styles', '⏪ Reverts',
    OTHER_CATEGORY,
]

# Regex (matched against lower-cased subjects) -> highlight label
HIGHLIGHT_KEYWORDS = {
    'interceptor': 'HTTP Interceptor Support',
    'webview': 'WebView Integration',
    'form.*engine': 'Form Engine Configuration',
    'authentication': 'Authentication System',
    'real-?time': 'Real-time Updates',
    'websocket': 'WebSocket Support',
    'caching': 'Caching Implementation',
    'dark.*mode': 'Dark Mode Support',
    'i18n': 'Internationalization',
    'localization': 'Localization Support',
}

CONVENTIONAL_COMMIT_PATTERN = re.compile(r'^(\w+)(?:\(([^)]+)\))?(!)?: (.+)$')

MONOREPO_MARKERS = [
    ('melos.yaml', 'melos'),
    ('lerna.json', 'lerna'),
    ('pnpm-workspace.yaml', 'pnpm'),
    ('rush.json', 'rush'),
]

NEW_CHANGELOG_HEADER = """# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).

## [Unreleased]

"""


# ==============================================================================
# Parsing and Categorization
# ==============================================================================

def parse_conventional_commit(subject: str, commit_hash: str = '') -> ParsedCommit:
    """
    Parse a 'type(scope)!: description' subject.

    Subjects that do not follow the convention become type 'other' with the
    whole subject as description.
    """
    match = CONVENTIONAL_COMMIT_PATTERN.match(subject)
    if not match:
        return ParsedCommit('other', None, subject, False, commit_hash)

    commit_type, scope, marker, description = match.groups()
    breaking = marker == '!' or 'BREAKING CHANGE' in description
    return ParsedCommit(commit_type.lower(), scope, description, breaking, commit_hash)


def category_heading(commit: ParsedCommit, fmt: ChangelogFormat, include_breaking: bool = True) -> str:
    """Heading a parsed commit is listed under."""
    commit_type = 'breaking' if commit.breaking and include_breaking else commit.type
    labels = COMMIT_TYPES.get(commit_type)
    if labels is None:
        return OTHER_CATEGORY
    plain, emoji = labels
    return emoji if fmt == ChangelogFormat.EMOJI else plain


def categorize_commits(
    commits: Iterable[CommitRecord],
    fmt: ChangelogFormat = ChangelogFormat.EMOJI,
    include_breaking: bool = True
) -> Dict[str, List[ParsedCommit]]:
    """
    Group commits by heading in the fixed priority order.

    Headings outside the priority list follow in first-seen order. Within a
    heading, commits keep their input order.
    """
    grouped: Dict[str, List[ParsedCommit]] = {}
    for commit in commits:
        parsed = parse_conventional_commit(commit.subject, commit.hash)
        grouped.setdefault(category_heading(parsed, fmt, include_breaking), []).append(parsed)

    ordered = {name: grouped[name] for name in CATEGORY_PRIORITY if name in grouped}
    for name, entries in grouped.items():
        if name not in ordered:
            ordered[name] = entries
    return ordered


def detect_key_highlights(
    commits: Iterable[CommitRecord],
    extra_keywords: Optional[Dict[str, str]] = None
) -> List[str]:
    """Match highlight keywords against all commit subjects."""
    keywords = dict(HIGHLIGHT_KEYWORDS)
    if extra_keywords:
        keywords.update(extra_keywords)

    all_text = ' '.join(commit.subject.lower() for commit in commits)

    highlights = []
    for pattern, label in keywords.items():
        if re.search(pattern, all_text, re.IGNORECASE) and label not in highlights:
            highlights.append(label)
    return highlights


# ==============================================================================
# Rendering
# ==============================================================================

def format_commit_link(commit: ParsedCommit, repo_url: Optional[str], links: LinkStyle) -> str:
    if links == LinkStyle.NONE:
        return ''
    if links == LinkStyle.SHORT or not repo_url:
        return f" ([{commit.short_hash}])"
    return f" ([{commit.short_hash}]({repo_url}/commit/{commit.hash}))"


def format_entry(commit: ParsedCommit, options: ChangelogOptions) -> str:
    """Render one bullet: '- **scope**: description (link)'."""
    line = '- '
    if commit.scope:
        line += f"**{commit.scope}**: "
    description = commit.description
    line += description[:1].lower() + description[1:]
    line += format_commit_link(commit, options.repo_url, options.links)
    return line


def generate_changelog_content(
    version: str,
    categories: Dict[str, List[ParsedCommit]],
    options: ChangelogOptions,
    release_date: Optional[str] = None
) -> str:
    """
    Render a version section.

    Args:
        version: Version (a leading 'v' is dropped)
        categories: Ordered heading -> commits
        options: Rendering options (highlights included)
        release_date: YYYY-MM-DD (default: today)

    Returns:
        Markdown text ending with a newline
    """
    clean_version = version[1:] if version.startswith('v') else version
    release_date = release_date or datetime.now().strftime("%Y-%m-%d")

    lines = [f"## [{clean_version}] - {release_date}", '']

    if options.include_key_highlights and options.highlights:
        if options.format == ChangelogFormat.EMOJI:
            lines.append('### 🎯 Key Highlights')
        else:
            lines.append('### Key Highlights')
        lines.append('')
        lines.extend(f"- **{highlight}**" for highlight in options.highlights)
        lines.append('')

    for heading, commits in categories.items():
        if not commits:
            continue
        lines.append(f"### {heading}")
        lines.append('')
        lines.extend(format_entry(commit, options) for commit in commits)
        lines.append('')

    return '\n'.join(lines)


def insert_changelog_entry(existing: Optional[str], entry: str) -> str:
    """
    Insert a rendered version section into changelog text.

    Args:
        existing: Current changelog content, or None when there is no file
        entry: Section produced by generate_changelog_content

    Returns:
        Updated changelog content
    """
    if existing is None:
        return NEW_CHANGELOG_HEADER + entry

    unreleased = re.search(r'^## \[Unreleased\]\s*\n', existing, re.MULTILINE)
    if unreleased:
        at = unreleased.end()
        return existing[:at] + '\n' + entry + '\n' + existing[at:]

    first_version = re.search(r'^## \[v?\d+\.\d+\.\d+', existing, re.MULTILINE)
    if first_version:
        at = first_version.start()
        return existing[:at] + entry + '\n' + existing[at:]

    header = re.search(r'^# Changelog\s*\n', existing, re.MULTILINE)
    if header:
        next_section = re.search(r'^##', existing[header.end():], re.MULTILINE)
        if next_section:
            at = header.end() + next_section.start()
            return existing[:at] + entry + '\n' + existing[at:]
        return existing.rstrip('\n') + '\n\n' + entry

    return entry + '\n\n' + existing


def detect_monorepo(project_root: Path) -> Optional[str]:
    """Name of the workspace tool managing project_root, if any."""
    for marker, tool in MONOREPO_MARKERS:
        if (project_root / marker).exists():
            return tool
    return None


# ==============================================================================
# Configuration
# ==============================================================================

def _choice(enum_type, value, source: str):
    try:
        return enum_type(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_type)
        raise ConfigError(f"Invalid {source} '{value}' (expected one of: {allowed})") from None


def resolve_options(
    cli_format: Optional[str],
    cli_links: Optional[str],
    config: Dict
) -> ChangelogOptions:
    """
    Merge command-line options over the changelog config section.

    Raises:
        ConfigError: On unknown format/link values or a malformed section
    """
    section = config_section(config, 'changelog')

    fmt = _choice(ChangelogFormat, cli_format or section.get('format') or 'emoji', 'format')
    links = _choice(LinkStyle, cli_links or section.get('commit_links') or 'full', 'commit_links')

    highlights = section.get('highlights') or {}
    if not isinstance(highlights, dict):
        raise ConfigError("'changelog.highlights' must be a mapping of pattern to label")
    for pattern in highlights:
        try:
            re.compile(str(pattern))
        except re.error as e:
            raise ConfigError(f"Invalid highlight pattern '{pattern}': {e}") from None

    return ChangelogOptions(
        format=fmt,
        links=links,
        include_breaking_changes=section.get('include_breaking_changes', True) is not False,
        include_key_highlights=section.get('include_key_highlights', True) is not False,
        extra_keywords={str(k): str(v) for k, v in highlights.items()},
    )


def load_changelog_config(project_root: Path, config_path: Optional[Path] = None) -> Dict:
    if config_path is None:
        config_path = find_config_file(project_root, CONFIG_CANDIDATES)
    elif not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    return load_yaml_config(config_path)


# ==============================================================================
# Main
# ==============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description='Generate a changelog section from conventional commits',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --version 1.2.3
  %(prog)s --version v1.2.3 --format plain --links short
  %(prog)s --version 1.2.3 --dry-run
  %(prog)s --config .release-config.yml --version 2.0.0

Configuration file (.release-config.yml):
  changelog:
    format: emoji
    commit_links: full
    include_breaking_changes: true
    include_key_highlights: true
    highlights:
      "offline": "Offline Mode"
        """
    )
    parser.add_argument('--version', '-v', required=True, help='Version to generate (e.g., 1.2.3)')
    parser.add_argument('--format', '-f', choices=['emoji', 'plain'], help='Heading style (default: emoji)')
    parser.add_argument('--links', '-l', choices=['full', 'short', 'none'], help='Commit links (default: full)')
    parser.add_argument('--dry-run', '-d', action='store_true', help='Preview without writing')
    parser.add_argument('--force', action='store_true', help='Proceed with uncommitted changes')
    parser.add_argument('--debug', action='store_true', help='Show resolved settings')
    parser.add_argument('--config', '-c', type=Path, help='Config file path')
    parser.add_argument('--file', type=Path, default=Path('CHANGELOG.md'), help='Changelog file (default: CHANGELOG.md)')
    args = parser.parse_args(argv)

    project_root = Path.cwd()

    version = VersionInfo.parse(args.version)
    if version is None:
        print_error("Version must follow semantic versioning (e.g., 1.0.0, 1.0.0-dev)")
        return 1

    if not is_git_repository(project_root):
        print_error("Not in a git repository")
        return 1

    if not args.force and has_uncommitted_changes(project_root):
        print_error("Uncommitted changes detected. Use --force to proceed.")
        return 1

    try:
        config = load_changelog_config(project_root, args.config)
        options = resolve_options(args.format, args.links, config)
    except ConfigError as e:
        print_error(str(e))
        return 1

    try:
        options.repo_url = detect_repository_url(project_root)
        last_tag = get_last_tag(project_root)

        if args.debug:
            print_info("Debug info:")
            print_info(f"  Version: {version.clean}")
            print_info(f"  Repository URL: {options.repo_url or 'not detected'}")
            print_info(f"  Monorepo: {detect_monorepo(project_root) or 'no'}")
            print_info(f"  Last tag: {last_tag or 'none'}")
            print_info(f"  Format: {options.format.value}")
            print_info(f"  Links: {options.links.value}")
            print()

        print_info(f"Generating changelog for version {version.clean}...")

        commits = get_commits(last_tag, project_root)
        if not commits:
            print_warning("No commits found since last release.")
            return 0

        print_info(f"Found {len(commits)} commits since {last_tag or 'beginning'}")

        categories = categorize_commits(commits, options.format, options.include_breaking_changes)
        if options.include_key_highlights:
            options.highlights = detect_key_highlights(commits, options.extra_keywords)

        content = generate_changelog_content(version.clean, categories, options)

        if args.dry_run:
            print_banner("CHANGELOG PREVIEW (dry run)")
            print(content)
            return 0

        changelog_file = args.file if args.file.is_absolute() else project_root / args.file
        existing = changelog_file.read_text(encoding='utf-8') if changelog_file.exists() else None
        changelog_file.write_text(insert_changelog_entry(existing, content), encoding='utf-8')

        print_success("Changelog updated successfully!")
        return 0

    except OSError as e:
        print_error(f"Error updating changelog: {e}")
        return 1
    except KeyboardInterrupt:
        print_warning("\nInterrupted by user")
        return 1


if __name__ == '__main__':
    sys.exit(main())
