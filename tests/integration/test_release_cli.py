"""Integration tests for the release command lines."""

import json
from unittest.mock import patch

import pytest

from release import extract_changelog, generate_changelog, update_version
from release.models import CommitRecord


REPO_URL = "https://github.com/acme/app"

EXISTING_CHANGELOG = """# Changelog

## [Unreleased]

## [1.0.0] - 2024-01-01

### Added

- first release
"""


@pytest.fixture
def repo(temp_dir, monkeypatch):
    """A clean repository with three commits since v1.0.0."""
    monkeypatch.chdir(temp_dir)
    history = [
        CommitRecord("a" * 40, "feat(api): Add export endpoint"),
        CommitRecord("b" * 40, "fix: crash on empty cart"),
        CommitRecord("c" * 40, "chore: add response caching"),
    ]
    monkeypatch.setattr(generate_changelog, "is_git_repository", lambda cwd=None: True)
    monkeypatch.setattr(generate_changelog, "has_uncommitted_changes", lambda cwd=None: False)
    monkeypatch.setattr(generate_changelog, "detect_repository_url", lambda cwd=None: REPO_URL)
    monkeypatch.setattr(generate_changelog, "get_last_tag", lambda cwd=None: "v1.0.0")
    monkeypatch.setattr(generate_changelog, "get_commits", lambda since=None, cwd=None: list(history))
    return temp_dir


class TestGenerateChangelogCli:
    """Test generate_changelog.main()."""

    def test_updates_existing_changelog(self, repo):
        """Test the new section lands between Unreleased and the last release."""
        changelog = repo / "CHANGELOG.md"
        changelog.write_text(EXISTING_CHANGELOG, encoding="utf-8")

        assert generate_changelog.main(["--version", "v1.1.0", "--format", "plain"]) == 0

        content = changelog.read_text(encoding="utf-8")
        assert content.index("## [Unreleased]") < content.index("## [1.1.0] - ") < content.index("## [1.0.0]")
        assert f"- **api**: add export endpoint ([aaaaaaa]({REPO_URL}/commit/{'a' * 40}))" in content
        assert content.index("### Added") < content.index("### Fixed") < content.index("### Maintenance")
        assert "- **Caching Implementation**" in content

    def test_creates_changelog(self, repo):
        """Test a missing changelog is created with the standard header."""
        assert generate_changelog.main(["--version", "1.1.0", "--links", "none"]) == 0

        content = (repo / "CHANGELOG.md").read_text(encoding="utf-8")
        assert content.startswith("# Changelog\n")
        assert "### ✨ Features" in content
        assert "- **api**: add export endpoint\n" in content

    def test_config_file(self, repo):
        """Test changelog settings are read from .release-config.yml."""
        (repo / ".release-config.yml").write_text(
            "changelog:\n  format: plain\n  commit_links: short\n  include_key_highlights: false\n",
            encoding="utf-8",
        )

        assert generate_changelog.main(["--version", "1.1.0"]) == 0

        content = (repo / "CHANGELOG.md").read_text(encoding="utf-8")
        assert "- fix crash on empty cart" not in content
        assert "- crash on empty cart ([bbbbbbb])" in content
        assert "Key Highlights" not in content

    def test_dry_run(self, repo, capsys):
        """Test dry-run previews without writing."""
        assert generate_changelog.main(["--version", "1.1.0", "--dry-run"]) == 0

        assert not (repo / "CHANGELOG.md").exists()
        output = capsys.readouterr().out
        assert "CHANGELOG PREVIEW" in output
        assert "## [1.1.0] - " in output

    def test_invalid_version(self, repo, capsys):
        """Test non-semver versions are rejected."""
        assert generate_changelog.main(["--version", "1.1"]) == 1
        assert "semantic versioning" in capsys.readouterr().err

    def test_uncommitted_changes(self, repo, monkeypatch):
        """Test local changes block generation unless forced."""
        monkeypatch.setattr(generate_changelog, "has_uncommitted_changes", lambda cwd=None: True)

        assert generate_changelog.main(["--version", "1.1.0"]) == 1
        assert generate_changelog.main(["--version", "1.1.0", "--force"]) == 0

    def test_not_a_repository(self, repo, monkeypatch):
        """Test a directory outside git is rejected."""
        monkeypatch.setattr(generate_changelog, "is_git_repository", lambda cwd=None: False)
        assert generate_changelog.main(["--version", "1.1.0"]) == 1

    def test_no_commits(self, repo, monkeypatch, capsys):
        """Test an empty range leaves the changelog alone."""
        monkeypatch.setattr(generate_changelog, "get_commits", lambda since=None, cwd=None: [])

        assert generate_changelog.main(["--version", "1.1.0"]) == 0
        assert not (repo / "CHANGELOG.md").exists()
        assert "No commits found" in capsys.readouterr().out

    def test_invalid_config(self, repo):
        """Test a malformed config fails the run."""
        (repo / ".release-config.yml").write_text("changelog:\n  format: fancy\n", encoding="utf-8")
        assert generate_changelog.main(["--version", "1.1.0"]) == 1

    def test_invalid_highlight_pattern(self, repo, capsys):
        """Test a highlight pattern that does not compile is reported."""
        (repo / ".release-config.yml").write_text(
            "changelog:\n  highlights:\n    \"(oops\": Oops\n", encoding="utf-8"
        )

        assert generate_changelog.main(["--version", "1.1.0"]) == 1
        assert not (repo / "CHANGELOG.md").exists()
        assert "Invalid highlight pattern" in capsys.readouterr().err

    def test_missing_config_file(self, repo, capsys):
        """Test an explicit config path must exist."""
        assert generate_changelog.main(["--version", "1.1.0", "--config", "absent.yml"]) == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_debug_output(self, repo, capsys):
        """Test --debug shows resolved settings."""
        (repo / "melos.yaml").write_text("name: ws\n", encoding="utf-8")

        assert generate_changelog.main(["--version", "1.1.0", "--dry-run", "--debug"]) == 0

        output = capsys.readouterr().out
        assert "Monorepo: melos" in output
        assert "Last tag: v1.0.0" in output


class TestExtractChangelogCli:
    """Test extract_changelog.main()."""

    def test_prints_section_body(self, temp_dir, capsys):
        """Test only the section body reaches stdout."""
        path = temp_dir / "CHANGELOG.md"
        path.write_text(EXISTING_CHANGELOG, encoding="utf-8")

        assert extract_changelog.main(["--version", "v1.0.0", "--file", str(path)]) == 0
        assert capsys.readouterr().out == "### Added\n\n- first release\n"

    def test_missing_version(self, temp_dir, capsys):
        """Test unknown versions fail with a message on stderr."""
        path = temp_dir / "CHANGELOG.md"
        path.write_text(EXISTING_CHANGELOG, encoding="utf-8")

        assert extract_changelog.main(["--version", "2.0.0", "--file", str(path)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Version 2.0.0 not found" in captured.err

    def test_missing_file(self, temp_dir):
        """Test a missing changelog fails."""
        assert extract_changelog.main(["--version", "1.0.0", "--file", str(temp_dir / "nope.md")]) == 1


class TestUpdateVersionCli:
    """Test update_version.main()."""

    @pytest.fixture
    def node_project(self, temp_dir, make_file):
        make_file(temp_dir / "package.json", '{\n  "name": "app",\n  "version": "2.0.9"\n}\n')
        make_file(temp_dir / "VERSION", "2.0.9\n")
        return temp_dir

    def test_updates_detected_files(self, node_project):
        """Test every detected version file is updated."""
        assert update_version.main(["2.1.0", "--project-root", str(node_project)]) == 0

        data = json.loads((node_project / "package.json").read_text(encoding="utf-8"))
        assert data["version"] == "2.1.0"
        assert (node_project / "VERSION").read_text(encoding="utf-8") == "2.1.0\n"

    def test_dry_run(self, node_project, capsys):
        """Test dry-run modifies nothing."""
        before = (node_project / "package.json").read_text(encoding="utf-8")

        assert update_version.main(["v2.1.0", "-p", str(node_project), "--dry-run"]) == 0

        assert (node_project / "package.json").read_text(encoding="utf-8") == before
        assert (node_project / "VERSION").read_text(encoding="utf-8") == "2.0.9\n"
        assert "No files were modified" in capsys.readouterr().out

    def test_invalid_version(self, node_project, capsys):
        """Test non-semver versions are rejected."""
        assert update_version.main(["2.1", "-p", str(node_project)]) == 1
        assert "semantic versioning" in capsys.readouterr().err

    def test_config_targets_replace_defaults(self, node_project, make_file):
        """Test version_files in the config replace auto-detection."""
        make_file(node_project / "src" / "version.ts", "export const VERSION = '2.0.9'\n")
        make_file(
            node_project / ".version-config.yml",
            "version_files:\n"
            "  - path: src/version.ts\n"
            "    pattern: \"VERSION = '[^']*'\"\n"
            "    replacement: \"VERSION = '{version}'\"\n",
        )

        assert update_version.main(["2.1.0", "-p", str(node_project)]) == 0

        assert (node_project / "src" / "version.ts").read_text(encoding="utf-8") == (
            "export const VERSION = '2.1.0'\n"
        )
        assert '"version": "2.0.9"' in (node_project / "package.json").read_text(encoding="utf-8")

    def test_invalid_config(self, node_project, make_file):
        """Test a malformed version_files list fails the run."""
        make_file(node_project / ".version-config.yml", "version_files:\n  - path: x\n")
        assert update_version.main(["2.1.0", "-p", str(node_project)]) == 1

    def test_config_without_version_files(self, node_project, make_file, capsys):
        """Test an explicit config without version_files falls back to detection."""
        config = make_file(node_project / "release.yml", "changelog:\n  format: plain\n")

        assert update_version.main(["2.1.0", "-p", str(node_project), "-c", str(config)]) == 0

        assert (node_project / "VERSION").read_text(encoding="utf-8") == "2.1.0\n"
        assert "has no version_files" in capsys.readouterr().out

    def test_missing_config_file(self, node_project, capsys):
        """Test an explicit config path must exist."""
        assert update_version.main(["2.1.0", "-p", str(node_project), "-c", "absent.yml"]) == 1

        assert "Config file not found" in capsys.readouterr().err
        assert (node_project / "VERSION").read_text(encoding="utf-8") == "2.0.9\n"

    def test_tag(self, node_project):
        """Test --tag creates the release tag after updating."""
        with patch("release.update_version.is_git_repository", return_value=True), \
                patch("release.update_version.tag_exists", return_value=False), \
                patch("release.update_version.create_tag", return_value=True) as create:
            assert update_version.main(["2.1.0", "-p", str(node_project), "--tag"]) == 0
        create.assert_called_once_with("v2.1.0", "Release v2.1.0", node_project.resolve())

    def test_tag_failure(self, node_project):
        """Test a failed tag fails the run."""
        with patch("release.update_version.is_git_repository", return_value=False):
            assert update_version.main(["2.1.0", "-p", str(node_project), "--tag"]) == 1
