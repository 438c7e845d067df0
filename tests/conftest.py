"""Shared fixtures for the change engine service tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from app.main import app


@pytest.fixture
async def client():
    """Async client bound to the FastAPI app, no network involved."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def old_people():
    """People list before an edit: Bob leaves, Alice gets renamed."""
    return [
        {"Id": 1, "Name": "Alice", "Role": "Admin"},
        {"Id": 2, "Name": "Bob", "Role": "Dev"},
    ]


@pytest.fixture
def new_people():
    """People list after the edit, with Cy added."""
    return [
        {"Id": 1, "Name": "Alicia", "Role": "Admin"},
        {"Id": 3, "Name": "Cy", "Role": "Dev"},
    ]
