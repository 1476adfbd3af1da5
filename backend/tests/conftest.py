"""Root conftest — shared test configuration."""

import os

# Settings are cached on first use; pin test values before anything imports app.config
os.environ.setdefault("JWT_SECRET", "test-signing-secret-with-at-least-32-bytes")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
