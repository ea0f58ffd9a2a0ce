"""Tests for serving the built frontend."""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from cinecrib.main import mount_frontend


@pytest.fixture
def frontend_app(tmp_path) -> FastAPI:
    (tmp_path / "index.html").write_text("<html>CineCrib</html>")
    (tmp_path / "assets").mkdir()
    (tmp_path / "assets" / "app.js").write_text("console.log('app')")

    app = FastAPI()

    @app.get("/api/v1/ping")
    async def ping() -> dict:
        return {"success": True}

    mount_frontend(app, str(tmp_path))
    return app


@pytest_asyncio.fixture
async def frontend_client(frontend_app: FastAPI):
    transport = ASGITransport(app=frontend_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestFrontendMount:
    """Single-page app routing."""

    @pytest.mark.asyncio
    async def test_index_at_root(self, frontend_client: AsyncClient):
        response = await frontend_client.get("/")

        assert response.status_code == 200
        assert "CineCrib" in response.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/watchlist", "/content/content_inception"])
    async def test_client_routes_serve_index(self, frontend_client: AsyncClient, path):
        response = await frontend_client.get(path)

        assert response.status_code == 200
        assert "CineCrib" in response.text

    @pytest.mark.asyncio
    async def test_assets_served(self, frontend_client: AsyncClient):
        response = await frontend_client.get("/assets/app.js")

        assert response.status_code == 200
        assert "console.log" in response.text

    @pytest.mark.asyncio
    async def test_api_routes_take_precedence(self, frontend_client: AsyncClient):
        response = await frontend_client.get("/api/v1/ping")
        assert response.json() == {"success": True}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/v1/missing", "/health"])
    async def test_unknown_api_paths_not_found(self, frontend_client: AsyncClient, path):
        response = await frontend_client.get(path)
        assert response.status_code == 404
