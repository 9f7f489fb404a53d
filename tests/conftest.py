"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path so we can import services, repositories, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture
def anyio_backend():
    """Async tests run on asyncio only."""
    return "asyncio"


# Seeded in-memory catalog, shared by the HTTP and WebSocket tests
from test_fixtures import catalog  # noqa: E402,F401
