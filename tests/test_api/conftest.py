"""Route-level helpers shared by the API tests."""

from typing import Any

import pytest
from httpx import AsyncClient


@pytest.fixture
def create_project(client: AsyncClient):
    """Create a project through the API and return its payload."""

    async def _create(name: str = "demo") -> dict[str, Any]:
        resp = await client.post("/api/projects", json={"name": name})
        assert resp.status_code == 200
        return resp.json()["data"]

    return _create


@pytest.fixture
def upload(client: AsyncClient):
    """Upload ``{path: text}`` to a project through the API."""

    async def _upload(project_id: str, files: dict[str, str]) -> Any:
        return await client.post(
            f"/api/projects/{project_id}/upload",
            files=[
                ("files", (path, text.encode(), "text/plain"))
                for path, text in files.items()
            ],
        )

    return _upload
