"""Unit tests for migration/model column reconciliation."""

from laravel.check_column_mismatches import (
    Category,
    Severity,
    check_models,
    count_by_severity,
    find_suspicious_columns,
    print_summary,
    reconcile,
    resolve_model_name,
)
from laravel.settings import ColumnCheckerSettings


class TestReconcile:
    """Test diffing a schema against a model."""

    def test_column_missing_from_fillable(self):
        """Test a single unfillable column is a HIGH finding."""
        result = reconcile("users", "User", ["name", "email", "age"], ["name", "email"], [])

        assert len(result) == 1
        assert result[0].column == "age"
        assert result[0].category == Category.SCHEMA_NOT_IN_MODEL
        assert result[0].severity == Severity.HIGH

    def test_many_missing_columns_are_critical(self):
        """Test more missing columns than the threshold is CRITICAL."""
        result = reconcile("items", "Item", ["a", "b", "c", "d", "e"], ["a"], [])

        assert [m.column for m in result] == ["b", "c", "d", "e"]
        assert all(m.severity == Severity.CRITICAL for m in result)

    def test_threshold_is_configurable(self):
        """Test the critical threshold comes from settings."""
        settings = ColumnCheckerSettings(critical_threshold=0)
        result = reconcile("users", "User", ["name", "age"], ["name"], [], settings)

        assert result[0].severity == Severity.CRITICAL

    def test_foreign_keys_and_system_columns_excluded(self):
        """Test *_id and system columns never count as missing."""
        result = reconcile(
            "users", "User", ["name", "team_id", "password", "remember_token"], ["name"], []
        )
        assert result == []

    def test_fillable_not_in_schema(self):
        """Test fillable entries without a column are CRITICAL."""
        result = reconcile("users", "User", ["name"], ["name", "nickname"], [])

        assert len(result) == 1
        assert result[0].column == "nickname"
        assert result[0].category == Category.MODEL_NOT_IN_SCHEMA
        assert result[0].severity == Severity.CRITICAL

    def test_casts_not_in_schema(self):
        """Test casts without a column are MEDIUM, auto columns excepted."""
        result = reconcile("users", "User", ["name"], ["name"], ["created_at", "settings"])

        assert [(m.column, m.category, m.severity) for m in result] == [
            ("settings", Category.CASTS_NOT_IN_SCHEMA, Severity.MEDIUM)
        ]

    def test_empty_fillable_skipped(self):
        """Test models without $fillable are not reconciled."""
        assert reconcile("users", "User", ["name"], [], ["settings"]) == []


class TestCheckModels:
    """Test project-wide reconciliation."""

    def test_matching_project(self, laravel_project):
        """Test a consistent project has no findings."""
        checked, mismatches = check_models(laravel_project, ColumnCheckerSettings())

        assert checked == 1
        assert mismatches == []

    def test_mismatched_model(self, laravel_project, make_file, user_model):
        """Test a model missing a fillable column is reported."""
        make_file(
            laravel_project / "app" / "Models" / "User.php",
            user_model.replace("'age',", "'nickname',"),
        )

        _, mismatches = check_models(laravel_project, ColumnCheckerSettings())

        assert {(m.column, m.category) for m in mismatches} == {
            ("age", Category.SCHEMA_NOT_IN_MODEL),
            ("nickname", Category.MODEL_NOT_IN_SCHEMA),
        }

    def test_table_without_model_skipped(self, laravel_project, make_file):
        """Test tables whose model file is absent are not checked."""
        make_file(
            laravel_project / "database" / "migrations" / "2024_01_02_000000_create_posts_table.php",
            "Schema::create('posts', function (Blueprint $table) { $table->string('title'); });",
        )

        checked, _ = check_models(laravel_project, ColumnCheckerSettings())
        assert checked == 1

    def test_model_name_override(self):
        """Test configured table to model overrides."""
        settings = ColumnCheckerSettings(table_models={"staff": "Employee"})

        assert resolve_model_name("staff", settings) == "Employee"
        assert resolve_model_name("user_profiles", settings) == "UserProfile"


class TestSuspiciousColumns:
    """Test configured suspicious column detection."""

    def test_repository_accessor_usage(self, temp_dir, make_file):
        """Test accessor usages match in repositories."""
        make_file(
            temp_dir / "VisitRepository.php",
            "return $visit->administrator;\n",
        )
        settings = ColumnCheckerSettings(suspicious_columns={"administrator": "Use administered_by"})

        findings = find_suspicious_columns(temp_dir, settings, include_accessors=True)

        assert len(findings) == 1
        assert findings[0].table == "VisitRepository"
        assert findings[0].severity == Severity.MEDIUM
        assert "administered_by" in findings[0].message

    def test_request_requires_quoted_name(self, temp_dir, make_file):
        """Test only quoted names match when accessors are excluded."""
        make_file(temp_dir / "StoreVisitRequest.php", "return $visit->administrator;\n")
        settings = ColumnCheckerSettings(suspicious_columns={"administrator": "Use administered_by"})

        assert find_suspicious_columns(temp_dir, settings, include_accessors=False) == []

        make_file(temp_dir / "StoreVisitRequest.php", "'administrator' => 'required',\n")
        assert len(find_suspicious_columns(temp_dir, settings, include_accessors=False)) == 1

    def test_no_patterns_no_findings(self, temp_dir, make_file):
        """Test default settings never flag anything."""
        make_file(temp_dir / "StoreVisitRequest.php", "'administrator' => 'required',\n")
        assert find_suspicious_columns(temp_dir, ColumnCheckerSettings()) == []


class TestSummary:
    """Test summary exit codes."""

    def test_exit_code_follows_critical(self, capsys):
        """Test only CRITICAL findings fail the run."""
        high = reconcile("users", "User", ["name", "age"], ["name"], [])
        critical = reconcile("users", "User", ["name"], ["name", "nickname"], [])

        assert print_summary([]) == 0
        assert print_summary(high) == 0
        assert print_summary(high + critical) == 1
        assert count_by_severity(high + critical)[Severity.CRITICAL] == 1
        assert "Total issues found: 2" in capsys.readouterr().out
