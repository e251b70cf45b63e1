"""Global pytest configuration and fixtures."""

from __future__ import annotations

import os

# Settings are read at import time; keep tests off real infrastructure.
os.environ.setdefault("COURSEHUB_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")
