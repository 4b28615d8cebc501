#!/usr/bin/env python3
# ==============================================================================
# release/models.py - Release data models
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Value types shared by the changelog generator and version updater:
#   commits read from git, parsed conventional commits, changelog options,
#   version numbers, and version-file update targets.
#
# ==============================================================================

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


SEMVER_PATTERN = re.compile(
    r'^(\d+)\.(\d+)\.(\d+)(-[0-9A-Za-z.-]+)?(\+[0-9A-Za-z.-]+)?$'
)


class ChangelogFormat(Enum):
    """Section heading style."""
    EMOJI = 'emoji'
    PLAIN = 'plain'


class LinkStyle(Enum):
    """How commit hashes are rendered in changelog entries."""
    FULL = 'full'
    SHORT = 'short'
    NONE = 'none'


@dataclass
class CommitRecord:
    """A commit as read from git log."""
    hash: str
    subject: str
    author: str = ''
    email: str = ''
    date: str = ''

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass
class ParsedCommit:
    """A commit subject split into its conventional-commit parts."""
    type: str
    scope: Optional[str]
    description: str
    breaking: bool = False
    hash: str = ''

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass
class ChangelogOptions:
    """Rendering options for a changelog entry."""
    format: ChangelogFormat = ChangelogFormat.EMOJI
    links: LinkStyle = LinkStyle.FULL
    repo_url: Optional[str] = None
    include_breaking_changes: bool = True
    include_key_highlights: bool = True
    highlights: List[str] = field(default_factory=list)
    extra_keywords: Dict[str, str] = field(default_factory=dict)


@dataclass
class VersionInfo:
    """
    A semantic version as given on the command line.

    Attributes:
        raw: Version exactly as supplied (may carry a leading 'v')
        clean: Version without the leading 'v'
        major, minor, patch: Numeric components as strings
        prerelease: Pre-release suffix without the dash ('' if none)
    """
    raw: str
    clean: str
    major: str
    minor: str
    patch: str
    prerelease: str = ''

    @classmethod
    def parse(cls, version: str) -> Optional['VersionInfo']:
        """Parse 'X.Y.Z' or 'vX.Y.Z' (with optional suffixes), or None if invalid."""
        clean = version[1:] if version.startswith('v') else version
        match = SEMVER_PATTERN.match(clean)
        if not match:
            return None
        prerelease = (match.group(4) or '')[1:]
        return cls(version, clean, match.group(1), match.group(2), match.group(3), prerelease)

    @property
    def tag_name(self) -> str:
        return f"v{self.clean}"

    @property
    def is_major_release(self) -> bool:
        """True for X.0.0 versions."""
        return self.minor == '0' and self.patch == '0'

    def placeholders(self) -> Dict[str, str]:
        return {
            'version': self.clean,
            'major': self.major,
            'minor': self.minor,
            'patch': self.patch,
        }


@dataclass
class VersionTarget:
    """
    One file location that carries the project version.

    Attributes:
        path: File path relative to the project root
        pattern: Regex locating the version text
        replacement: Replacement template with {version}/{major}/{minor}/{patch}
        description: Label used in output
        when: Optional condition ('major_version_only')
        whole_file: Replace the entire file content instead of a pattern
        first_only: Replace only the first match
    """
    path: str
    pattern: str = ''
    replacement: str = '{version}'
    description: str = ''
    when: Optional[str] = None
    whole_file: bool = False
    first_only: bool = False

    @property
    def label(self) -> str:
        return self.description or self.path
