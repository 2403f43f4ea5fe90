"""Shared fixtures for API endpoint tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.models.principal import Principal


@pytest.fixture
def principal():
    return Principal(user_id="user-1", email="owner@test.com")


@pytest.fixture
def service():
    """ProjectService double; tests set the return values they need."""
    mock = MagicMock()
    for name in (
        "create",
        "get",
        "update",
        "archive",
        "soft_delete",
        "get_members",
        "list_projects",
        "invite",
        "join",
        "update_role",
        "remove_member",
        "leave",
    ):
        setattr(mock, name, AsyncMock())
    return mock
