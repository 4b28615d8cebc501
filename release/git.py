#!/usr/bin/env python3
# ==============================================================================
# release/git.py - Git queries for release scripts
# ==============================================================================
# Copyright (c) 2025 Michael Gardner, A Bit of Help, Inc.
# SPDX-License-Identifier: BSD-3-Clause
# See LICENSE file in the project root.
#
# Purpose:
#   Thin wrappers around the git CLI used by the changelog generator and the
#   version updater: repository checks, remote URL detection, tag lookup,
#   commit listing, and tag creation.
#
# Design Notes:
#   All calls go through common.run_command with check=False; a failing git
#   command yields an empty/negative answer instead of an exception.
#   Commit fields are separated by the ASCII unit separator (0x1f) so that
#   subjects containing '|' survive parsing.
#
# ==============================================================================

import re
import sys
from pathlib import Path
from typing import List, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))
from common import print_warning, run_command

# Support both direct script execution and module import
try:
    from .models import CommitRecord
except ImportError:
    from models import CommitRecord


FIELD_SEPARATOR = '\x1f'
LOG_FORMAT = '%H%x1f%s%x1f%an%x1f%ae%x1f%ad'
RELEASE_TAG_PATTERN = re.compile(r'^v?\d+\.\d+\.\d+')


def _git(args: List[str], cwd: Optional[Path] = None):
    return run_command(['git'] + args, check=False, capture=True, cwd=cwd)


def is_git_repository(cwd: Optional[Path] = None) -> bool:
    """Check that cwd is inside a git work tree."""
    result = _git(['rev-parse', '--git-dir'], cwd)
    return result is not None and result.returncode == 0


def has_uncommitted_changes(cwd: Optional[Path] = None) -> bool:
    """True when tracked files have staged or unstaged modifications."""
    result = _git(['status', '--porcelain', '--untracked-files=no'], cwd)
    if result is None or result.returncode != 0:
        return False
    return len(result.stdout.strip()) > 0


def normalize_remote_url(url: str) -> str:
    """
    Convert a git remote URL to a browsable HTTPS URL.

    Examples:
        git@github.com:org/repo.git -> https://github.com/org/repo
        ssh://git@github.com/org/repo.git -> https://github.com/org/repo
        https://github.com/org/repo.git -> https://github.com/org/repo
    """
    url = url.strip()
    if url.startswith('git@'):
        host, _, path = url[len('git@'):].partition(':')
        url = f"https://{host}/{path}"
    elif url.startswith('ssh://'):
        rest = url[len('ssh://'):]
        if '@' in rest.split('/', 1)[0]:
            rest = rest.split('@', 1)[1]
        url = f"https://{rest}"
    return re.sub(r'\.git$', '', url)


def detect_repository_url(cwd: Optional[Path] = None) -> Optional[str]:
    """
    Detect the repository's web URL from its remotes.

    Prefers 'origin', falling back to the first configured remote.

    Returns:
        HTTPS URL without a trailing .git, or None when there is no remote
    """
    result = _git(['remote', 'get-url', 'origin'], cwd)
    url = result.stdout.strip() if result is not None and result.returncode == 0 else ''

    if not url:
        remotes = _git(['remote'], cwd)
        names = remotes.stdout.split() if remotes is not None and remotes.returncode == 0 else []
        if names:
            result = _git(['remote', 'get-url', names[0]], cwd)
            if result is not None and result.returncode == 0:
                url = result.stdout.strip()

    if not url:
        return None
    return normalize_remote_url(url)


def get_last_tag(cwd: Optional[Path] = None) -> Optional[str]:
    """Return the highest release tag (vX.Y.Z or X.Y.Z), or None."""
    result = _git(['tag', '-l', '--sort=-version:refname'], cwd)
    if result is None or result.returncode != 0:
        return None
    for tag in result.stdout.splitlines():
        tag = tag.strip()
        if RELEASE_TAG_PATTERN.match(tag):
            return tag
    return None


def is_noise_commit(subject: str) -> bool:
    """Merge commits and automated commits are left out of changelogs."""
    return (
        subject.startswith('Merge ')
        or 'auto-generated' in subject
        or 'back-merge' in subject
    )


def parse_log_output(output: str) -> List[CommitRecord]:
    """
    Parse git log output produced with LOG_FORMAT.

    Args:
        output: Raw stdout of git log

    Returns:
        Commits in log order, without noise commits
    """
    commits = []
    for line in output.splitlines():
        if not line.strip():
            continue
        fields = line.split(FIELD_SEPARATOR)
        if len(fields) < 2:
            continue
        fields += [''] * (5 - len(fields))
        commit = CommitRecord(*fields[:5])
        if not is_noise_commit(commit.subject):
            commits.append(commit)
    return commits


def get_commits(since: Optional[str] = None, cwd: Optional[Path] = None) -> List[CommitRecord]:
    """
    List commits since a tag (exclusive), or the whole history.

    Args:
        since: Tag or ref; None includes every commit reachable from HEAD
        cwd: Repository directory

    Returns:
        Commits newest first, without noise commits
    """
    revision_range = f"{since}..HEAD" if since else 'HEAD'
    result = _git(['log', revision_range, f'--format={LOG_FORMAT}', '--date=iso'], cwd)
    if result is None:
        return []
    if result.returncode != 0:
        print_warning(f"Could not read git history: {result.stderr.strip()}")
        return []
    return parse_log_output(result.stdout)


def tag_exists(tag_name: str, cwd: Optional[Path] = None) -> bool:
    result = _git(['tag', '-l', tag_name], cwd)
    return result is not None and result.stdout.strip() == tag_name


def create_tag(tag_name: str, message: str, cwd: Optional[Path] = None) -> bool:
    """Create an annotated tag. Returns True on success."""
    result = _git(['tag', '-a', tag_name, '-m', message], cwd)
    if result is None:
        return False
    if result.returncode != 0:
        print_warning(f"git tag failed: {result.stderr.strip()}")
        return False
    return True
