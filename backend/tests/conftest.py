"""
Shared test fixtures and configuration.

Environment variables are set BEFORE any app imports to prevent
accidental connections to real databases.
"""

import os
import sys

# Ensure the backend app is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Override settings before any app code imports the settings singleton
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["DATABASE_NAME"] = "test_project_collaboration"
os.environ["FRONTEND_BASE_URL"] = "https://app.example.com"

import pytest  # noqa: E402

from tests.mocks.mongodb import create_in_memory_db  # noqa: E402


@pytest.fixture
def creator():
    from app.models.principal import Principal

    return Principal(user_id="user-1", email="Owner@Test.com")


@pytest.fixture
def other_user():
    from app.models.principal import Principal

    return Principal(user_id="user-2", email="member2@test.com")


@pytest.fixture
def in_memory_db():
    return create_in_memory_db()


@pytest.fixture
def make_project():
    """Factory for a project whose creator ``user-1`` is the only active admin."""
    from tests.mocks.projects import make_project

    return make_project
