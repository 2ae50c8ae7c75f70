"""Global pytest configuration."""

import os

# Tests use in-memory SQLite and a process-local membership cache
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.pop("REDIS_URL", None)
