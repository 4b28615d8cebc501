"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path

import pytest


CREATE_USERS_MIGRATION = """<?php

use Illuminate\\Database\\Migrations\\Migration;
use Illuminate\\Database\\Schema\\Blueprint;
use Illuminate\\Support\\Facades\\Schema;

return new class extends Migration
{
    public function up(): void
    {
        Schema::create('users', function (Blueprint $table) {
            $table->id();
            $table->string('name');
            $table->string('email');
            $table->integer('age');
            $table->timestamps();
        });
    }

    public function down(): void
    {
        Schema::dropIfExists('users');
    }
};
"""

USER_MODEL = """<?php

namespace App\\Models;

use Illuminate\\Database\\Eloquent\\Model;
use Illuminate\\Database\\Eloquent\\Relations\\HasMany;

class User extends Model
{
    protected $fillable = [
        'name',
        'email',
        'age',
    ];

    protected function casts(): array
    {
        return [
            'created_at' => 'datetime',
        ];
    }

    public function posts(): HasMany
    {
        return $this->hasMany(Post::class);
    }
}
"""


def write_file(path: Path, content: str) -> Path:
    """Write content, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def laravel_project(temp_dir):
    """Create a minimal Laravel project with a users table and User model."""
    write_file(
        temp_dir / "database" / "migrations" / "2024_01_01_000000_create_users_table.php",
        CREATE_USERS_MIGRATION,
    )
    write_file(temp_dir / "app" / "Models" / "User.php", USER_MODEL)
    return temp_dir


@pytest.fixture
def make_file():
    """Return a helper that writes a file (creating parents) and returns its path."""
    return write_file


@pytest.fixture
def create_users_migration():
    """Source of the users create migration."""
    return CREATE_USERS_MIGRATION


@pytest.fixture
def user_model():
    """Source of the User model."""
    return USER_MODEL
