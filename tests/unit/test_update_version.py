"""Unit tests for version file updates."""

import json
from unittest.mock import patch

import pytest

from common import ConfigError
from release.adapters import (
    ALL_ADAPTERS,
    FlutterVersionAdapter,
    GoVersionAdapter,
    LaravelVersionAdapter,
    NodeVersionAdapter,
    apply_target,
)
from release.adapters.base import render_template
from release.models import VersionInfo, VersionTarget
from release.update_version import (
    default_targets,
    load_config_targets,
    parse_version_files,
    tag_release,
    update_versions,
)


PACKAGE_JSON = """{
  "name": "app",
  "version": "2.0.9",
  "private": true,
  "engines": {
    "version": "18.0.0"
  }
}
"""


def version(text):
    return VersionInfo.parse(text)


class TestVersionInfo:
    """Test version parsing."""

    def test_plain_and_prefixed(self):
        """Test an optional leading v is dropped."""
        info = version("v1.2.3")

        assert info.raw == "v1.2.3"
        assert info.clean == "1.2.3"
        assert (info.major, info.minor, info.patch) == ("1", "2", "3")
        assert info.tag_name == "v1.2.3"

    def test_prerelease_and_build(self):
        """Test pre-release and build suffixes are accepted."""
        info = version("1.0.0-beta.1+build.5")

        assert info.clean == "1.0.0-beta.1+build.5"
        assert info.prerelease == "beta.1"

    def test_hyphenated_identifiers(self):
        """Test hyphens inside pre-release and build identifiers."""
        assert version("1.0.0-alpha-1").prerelease == "alpha-1"

        info = version("v1.0.0+build-5")
        assert info.clean == "1.0.0+build-5"
        assert info.prerelease == ""

    @pytest.mark.parametrize("text", ["1.2", "1.2.3.4", "latest", "v", "1.2.x"])
    def test_invalid(self, text):
        """Test malformed versions are rejected."""
        assert VersionInfo.parse(text) is None

    def test_major_release(self):
        """Test X.0.0 is a major release."""
        assert version("3.0.0").is_major_release
        assert not version("3.1.0").is_major_release
        assert not version("3.0.1").is_major_release

    def test_render_template(self):
        """Test all placeholders are filled."""
        rendered = render_template("v{major}.{minor} ({version}, patch {patch})", version("2.1.4"))
        assert rendered == "v2.1 (2.1.4, patch 4)"


class TestApplyTarget:
    """Test rewriting one file."""

    def test_package_json_first_version_only(self, temp_dir, make_file):
        """Test only the top-level version field changes."""
        make_file(temp_dir / "package.json", PACKAGE_JSON)
        target = NodeVersionAdapter().targets(temp_dir)[0]

        assert apply_target(temp_dir, target, version("2.1.0"))

        data = json.loads((temp_dir / "package.json").read_text(encoding="utf-8"))
        assert data["version"] == "2.1.0"
        assert data["engines"]["version"] == "18.0.0"
        assert data["name"] == "app"

    def test_dry_run_leaves_file_untouched(self, temp_dir, make_file, capsys):
        """Test dry-run reports without writing."""
        path = make_file(temp_dir / "package.json", PACKAGE_JSON)
        target = NodeVersionAdapter().targets(temp_dir)[0]

        assert apply_target(temp_dir, target, version("2.1.0"), dry_run=True)

        assert path.read_text(encoding="utf-8") == PACKAGE_JSON
        assert "[DRY-RUN] Would update package.json (Node.js)" in capsys.readouterr().out

    def test_missing_file(self, temp_dir):
        """Test absent files are skipped."""
        assert not apply_target(temp_dir, VersionTarget(path="VERSION", whole_file=True), version("1.0.0"))

    def test_pattern_not_found(self, temp_dir, make_file, capsys):
        """Test an unmatched pattern leaves the file and warns."""
        path = make_file(temp_dir / "package.json", '{"name": "app"}\n')
        target = NodeVersionAdapter().targets(temp_dir)[0]

        assert not apply_target(temp_dir, target, version("2.1.0"))
        assert path.read_text(encoding="utf-8") == '{"name": "app"}\n'
        assert "Version pattern not found" in capsys.readouterr().out

    def test_whole_file(self, temp_dir, make_file):
        """Test plain version files are replaced entirely."""
        path = make_file(temp_dir / "VERSION", "1.0.0\n")
        target = VersionTarget(path="VERSION", whole_file=True)

        assert apply_target(temp_dir, target, version("v1.1.0"))
        assert path.read_text(encoding="utf-8") == "1.1.0\n"

    def test_backreferences_and_placeholders(self, temp_dir, make_file):
        """Test capture groups and placeholders both expand."""
        path = make_file(temp_dir / "src" / "version.ts", 'export const API = "v1";\n')
        target = VersionTarget(
            path="src/version.ts",
            pattern=r'(export const API = ")v\d+(";)',
            replacement=r"\g<1>v{major}\g<2>",
        )

        assert apply_target(temp_dir, target, version("2.0.0"))
        assert path.read_text(encoding="utf-8") == 'export const API = "v2";\n'

    def test_major_version_only(self, temp_dir, make_file):
        """Test conditional targets only apply to X.0.0 releases."""
        path = make_file(temp_dir / "api.txt", "api v1\n")
        target = VersionTarget(
            path="api.txt", pattern=r"v\d+", replacement="v{major}", when="major_version_only"
        )

        assert not apply_target(temp_dir, target, version("1.4.0"))
        assert path.read_text(encoding="utf-8") == "api v1\n"
        assert apply_target(temp_dir, target, version("2.0.0"))
        assert path.read_text(encoding="utf-8") == "api v2\n"

    def test_unknown_condition(self, temp_dir, make_file, capsys):
        """Test unknown conditions skip the target with a warning."""
        make_file(temp_dir / "api.txt", "api v1\n")
        target = VersionTarget(path="api.txt", pattern=r"v\d+", replacement="v{major}", when="sometimes")

        assert not apply_target(temp_dir, target, version("2.0.0"))
        assert "Unknown condition" in capsys.readouterr().out

    def test_bad_replacement_escape(self, temp_dir, make_file, capsys):
        """Test a replacement with a stray escape skips the file with a warning."""
        path = make_file(temp_dir / "version.txt", "set V=1.0.0\n")
        target = VersionTarget(path="version.txt", pattern=r"set V=\S+", replacement=r"set V={version} \d")

        assert not apply_target(temp_dir, target, version("2.0.0"))
        assert path.read_text(encoding="utf-8") == "set V=1.0.0\n"
        assert "Invalid replacement for version.txt" in capsys.readouterr().out

    def test_bad_replacement_does_not_stop_later_targets(self, temp_dir, make_file):
        """Test the remaining targets are still applied."""
        make_file(temp_dir / "a.txt", "v1\n")
        later = make_file(temp_dir / "VERSION", "1.0.0\n")
        targets = [
            VersionTarget(path="a.txt", pattern=r"v\d+", replacement=r"\q{major}"),
            VersionTarget(path="VERSION", whole_file=True),
        ]

        assert update_versions(temp_dir, version("2.0.0"), targets) == 1
        assert later.read_text(encoding="utf-8") == "2.0.0\n"


class TestAdapters:
    """Test built-in ecosystem targets."""

    def test_pubspec(self, temp_dir, make_file):
        """Test the pubspec version line is replaced."""
        path = make_file(temp_dir / "pubspec.yaml", "name: app\nversion: 1.0.0+3\n")
        target = FlutterVersionAdapter().targets(temp_dir)[0]

        assert apply_target(temp_dir, target, version("1.1.0"))
        assert path.read_text(encoding="utf-8") == "name: app\nversion: 1.1.0\n"

    def test_laravel_env_style(self, temp_dir, make_file):
        """Test env('APP_VERSION', ...) defaults are updated."""
        path = make_file(
            temp_dir / "config" / "app.php",
            "return [\n    'version' => env('APP_VERSION', '1.0.0'),\n];\n",
        )
        targets = LaravelVersionAdapter().targets(temp_dir)

        assert [t.path for t in targets] == ["composer.json", "config/app.php"]
        assert apply_target(temp_dir, targets[1], version("1.2.0"))
        assert "env('APP_VERSION', '1.2.0')" in path.read_text(encoding="utf-8")

    def test_laravel_literal_style(self, temp_dir, make_file):
        """Test literal 'version' => '...' entries are updated."""
        path = make_file(temp_dir / "config" / "app.php", "return [\n    'version' => '1.0.0',\n];\n")
        target = LaravelVersionAdapter().targets(temp_dir)[1]

        assert apply_target(temp_dir, target, version("1.2.0"))
        assert "'version' => '1.2.0'" in path.read_text(encoding="utf-8")

    def test_laravel_without_version_entry(self, temp_dir, make_file):
        """Test app.php without a version entry adds no target."""
        make_file(temp_dir / "config" / "app.php", "return ['name' => 'App'];\n")
        assert [t.path for t in LaravelVersionAdapter().targets(temp_dir)] == ["composer.json"]

    def test_go_requires_module(self, temp_dir, make_file):
        """Test Go targets exist only in Go modules."""
        make_file(temp_dir / "version.go", 'package main\n\nconst Version = "0.1.0"\n')
        assert GoVersionAdapter().targets(temp_dir) == []

        make_file(temp_dir / "go.mod", "module example.com/app\n")
        targets = GoVersionAdapter().existing_targets(temp_dir)

        assert [t.path for t in targets] == ["version.go"]
        assert apply_target(temp_dir, targets[0], version("0.2.0"))
        assert 'const Version = "0.2.0"' in (temp_dir / "version.go").read_text(encoding="utf-8")

    def test_pyproject_first_version_only(self, temp_dir, make_file):
        """Test tool sections keep their own version keys."""
        path = make_file(
            temp_dir / "pyproject.toml",
            '[project]\nname = "app"\nversion = "0.1.0"\n\n[tool.x]\nversion = "9"\n',
        )

        assert update_versions(temp_dir, version("0.2.0"), default_targets(temp_dir)) == 1
        assert path.read_text(encoding="utf-8") == (
            '[project]\nname = "app"\nversion = "0.2.0"\n\n[tool.x]\nversion = "9"\n'
        )

    def test_every_adapter_has_a_name(self, temp_dir):
        """Test adapters are instantiable and named."""
        assert [cls().name for cls in ALL_ADAPTERS] == ["Node", "Flutter", "Laravel", "Go", "Generic"]

    def test_update_versions_counts_files(self, temp_dir, make_file):
        """Test only existing files are counted."""
        make_file(temp_dir / "package.json", PACKAGE_JSON)
        make_file(temp_dir / "VERSION", "2.0.9\n")

        assert update_versions(temp_dir, version("2.1.0"), default_targets(temp_dir)) == 2


class TestConfigTargets:
    """Test version_files configuration."""

    def test_parse_entries(self):
        """Test entries become targets."""
        targets = parse_version_files([
            {"path": "src/version.ts", "pattern": "'[^']*'", "replacement": "'{version}'"},
            {
                "path": "docs/api.md",
                "pattern": "v\\d+",
                "replacement": "v{major}",
                "description": "API docs",
                "when": "major_version_only",
            },
        ])

        assert [t.label for t in targets] == ["src/version.ts", "API docs"]
        assert targets[1].when == "major_version_only"
        assert targets[0].when is None

    @pytest.mark.parametrize(
        "entries, message",
        [
            ("src/version.ts", "must be a list"),
            (["src/version.ts"], "must be a mapping"),
            ([{"path": "a", "pattern": "b"}], "missing: replacement"),
        ],
    )
    def test_invalid_entries(self, entries, message):
        """Test malformed entries raise ConfigError."""
        with pytest.raises(ConfigError, match=message):
            parse_version_files(entries)

    def test_load_without_version_files(self, temp_dir, make_file):
        """Test a config without version_files yields None."""
        path = make_file(temp_dir / ".version-config.yml", "other: 1\n")
        assert load_config_targets(path) is None


class TestTagRelease:
    """Test git tag creation."""

    def test_dry_run(self, temp_dir, capsys):
        """Test dry-run only reports the tag."""
        with patch("release.update_version.create_tag") as create:
            assert tag_release(temp_dir, version("1.2.0"), dry_run=True)
        create.assert_not_called()
        assert "Would create git tag: v1.2.0" in capsys.readouterr().out

    def test_creates_tag(self, temp_dir):
        """Test an annotated release tag is created."""
        with patch("release.update_version.is_git_repository", return_value=True), \
                patch("release.update_version.tag_exists", return_value=False), \
                patch("release.update_version.create_tag", return_value=True) as create:
            assert tag_release(temp_dir, version("1.2.0"))
        create.assert_called_once_with("v1.2.0", "Release v1.2.0", temp_dir)

    def test_existing_tag_skipped(self, temp_dir):
        """Test an existing tag is left alone."""
        with patch("release.update_version.is_git_repository", return_value=True), \
                patch("release.update_version.tag_exists", return_value=True), \
                patch("release.update_version.create_tag") as create:
            assert tag_release(temp_dir, version("1.2.0"))
        create.assert_not_called()

    def test_not_a_repository(self, temp_dir):
        """Test tagging fails outside a repository."""
        with patch("release.update_version.is_git_repository", return_value=False):
            assert not tag_release(temp_dir, version("1.2.0"))
