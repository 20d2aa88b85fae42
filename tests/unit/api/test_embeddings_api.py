import re

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.main import create_app
from app.core.dependencies import get_embedding_service, get_record_store
from app.core.exceptions import StoreError
from app.vectorstore.schemas import SchoolRecord

VOCABULARY = ("springfield", "shelbyville", "capital", "high", "academy", "main", "oak")


class VocabularyEmbeddingService:
    model_name = "vocabulary"

    async def embed(self, text: str) -> list[float]:
        words = re.findall(r"\w+", text.lower())
        return [float(words.count(term)) for term in VOCABULARY]

    async def aclose(self) -> None:
        return None


class StubRecordStore:
    def __init__(self, records: list[SchoolRecord], fail: bool = False) -> None:
        self.records = records
        self.fail = fail
        self.upserted: list[int] = []

    async def fetch_all_records(self) -> list[SchoolRecord]:
        if self.fail:
            raise StoreError("Failed to fetch records: connection refused")
        return self.records

    async def upsert_vector(self, record_id, vector, model=None) -> None:
        self.upserted.append(record_id)


RECORDS = [
    SchoolRecord(id=1, name="Springfield High", address="1 Main St", city="Springfield"),
    SchoolRecord(id=2, name="Shelbyville Academy", address="2 Oak St", city="Shelbyville"),
    SchoolRecord(id=3, name="Capital High", address="3 Oak St", city="Capital"),
    SchoolRecord(id=4, name="Springfield Academy", address="4 Main St", city="Springfield"),
]


@pytest.fixture
def store() -> StubRecordStore:
    return StubRecordStore(RECORDS)


@pytest.fixture
def app(store):
    """Fresh app with stubbed record store and embedding service."""

    fastapi_app = create_app()
    fastapi_app.dependency_overrides[get_record_store] = lambda: store
    fastapi_app.dependency_overrides[get_embedding_service] = lambda: VocabularyEmbeddingService()
    return fastapi_app


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.mark.asyncio
async def test_rebuild_returns_message_and_count(client, store):
    response = await client.post("/api/embeddings")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Embeddings generated"
    assert body["count"] == 4
    assert body["failed"] == 0
    assert body["cancelled"] is False
    assert "data" not in body
    assert response.headers["X-Request-ID"]
    assert store.upserted == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_search_after_rebuild(client):
    await client.post("/api/embeddings")

    response = await client.get("/api/embeddings", params={"q": "Springfield", "top_k": 2})

    assert response.status_code == 200
    data = response.json()
    assert "results" in data
    assert "data" not in data
    assert data["query"] == "Springfield"
    assert data["top_k"] == 2
    assert data["index_built_at"] is not None
    assert sorted(hit["id"] for hit in data["results"]) == [1, 4]
    first, second = data["results"]
    assert first["score"] >= second["score"]
    assert first["city"] == "Springfield"


@pytest.mark.asyncio
async def test_search_on_empty_index_returns_no_results(client):
    response = await client.get("/api/embeddings", params={"q": "Springfield"})

    assert response.status_code == 200
    data = response.json()
    assert data["results"] == []
    assert data["index_built_at"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "   "}])
async def test_search_without_query_is_400(client, params):
    response = await client.get("/api/embeddings", params=params)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "ValidationError"
    assert body["error"]["message"] == "Missing query ?q="


@pytest.mark.asyncio
async def test_search_with_invalid_top_k_is_400(client):
    response = await client.get("/api/embeddings", params={"q": "high", "top_k": 0})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "ValidationError"


@pytest.mark.asyncio
async def test_store_failure_is_503(app, client):
    app.dependency_overrides[get_record_store] = lambda: StubRecordStore(RECORDS, fail=True)

    response = await client.post("/api/embeddings")

    assert response.status_code == 503
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "StoreError"


@pytest.mark.asyncio
async def test_rebuild_while_rebuilding_is_409(app, client):
    async with app.state.semantic_index.rebuilding():
        response = await client.post("/api/embeddings")
        status_response = await client.get("/api/embeddings/status")

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "IndexRebuildInProgressError"
    assert status_response.json()["rebuilding"] is True


@pytest.mark.asyncio
async def test_cancel_without_rebuild(client):
    response = await client.delete("/api/embeddings/rebuild")

    assert response.status_code == 200
    assert response.json() == {"cancelled": False}


@pytest.mark.asyncio
async def test_status_reflects_latest_build(client):
    before = (await client.get("/api/embeddings/status")).json()
    await client.post("/api/embeddings")
    after = (await client.get("/api/embeddings/status")).json()

    assert before["size"] == 0
    assert before["built_at"] is None
    assert after["size"] == 4
    assert after["dimension"] == len(VOCABULARY)
    assert after["model"] == "vocabulary"
    assert after["rebuilding"] is False


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "ok"
