"""
API endpoint tests
"""

import pytest
import pytest_asyncio
import httpx
from api.main import app
from api.dependencies import get_db
from core.config import settings
from models.base import ImportStatus


@pytest_asyncio.fixture
async def client(db_session, monkeypatch):
    """Create test client with database override"""

    async def override_get_db():
        yield db_session

    monkeypatch.setattr(settings, "IMPORT_BLOCK_DELAY_SECONDS", 0)
    monkeypatch.setattr(settings, "GEMINI_API_KEY", None)
    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_health_endpoint_database_connected(client):
    """Test health endpoint returns database status"""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "healthy"
    assert data["database_connected"] is True
    assert data["last_import_status"] is None
    assert "X-Request-ID" in response.headers
    assert "X-API-Latency-ms" in response.headers


@pytest.mark.asyncio
async def test_request_id_is_propagated(client):
    response = await client.get("/", headers={"X-Request-ID": "abc-123"})

    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "abc-123"


@pytest.mark.asyncio
async def test_create_import_without_ai(client, sample_row):
    """Test importing rows through the API"""
    response = await client.post("/imports", json={
        "file_name": "planilha.xlsx",
        "records": [sample_row, {"ESTADO": "RJ"}],
        "use_ai": False,
    })

    assert response.status_code == 201
    body = response.json()
    assert body["result"]["success"] is True
    assert body["result"]["data"]["convencoes"] == 1
    assert body["result"]["data"]["pisos_salariais"] == 1
    assert body["result"]["data"]["particularidades"] == 2

    run = await client.get(f"/imports/{body['import_id']}")
    assert run.status_code == 200
    run_data = run.json()
    assert run_data["status"] == ImportStatus.COMPLETED.value
    assert run_data["origem"] == "planilha.xlsx"
    assert run_data["registros_processados"] == 1
    assert run_data["detalhes"]["registros_detectados"] == 2

    health = await client.get("/health")
    assert health.json()["last_import_status"] == "concluido"


@pytest.mark.asyncio
async def test_create_import_ai_without_key(client):
    """Test AI mode without a key is reported in the result, not as HTTP error"""
    response = await client.post("/imports", json={
        "file_name": "planilha.xlsx",
        "records": [{"SINDICATO": "Sind A"}],
        "use_ai": True,
    })

    assert response.status_code == 201
    body = response.json()
    assert body["result"]["success"] is False
    assert body["result"]["data"] is None

    run = await client.get(f"/imports/{body['import_id']}")
    assert run.json()["status"] == "erro"


@pytest.mark.asyncio
async def test_create_import_validation(client):
    response = await client.post("/imports", json={"records": []})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_imports(client):
    for name in ("a.xlsx", "b.xlsx"):
        await client.post("/imports", json={"file_name": name, "records": [], "use_ai": False})

    response = await client.get("/imports", params={"limit": 1})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert len(data["items"]) == 1


@pytest.mark.asyncio
async def test_get_unknown_import(client):
    response = await client.get("/imports/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404
