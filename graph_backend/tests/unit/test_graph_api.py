import pytest
from unittest.mock import AsyncMock, Mock
from fastapi.testclient import TestClient
from graph_backend.src.api.main import app
from graph_backend.src.api.routes.graph import get_graph_source, get_layout_service
from graph_backend.src.services.config import LayoutConfig
from graph_backend.src.services.errors import GraphSourceError
from graph_backend.src.services.graph_source import GraphSourceClient
from graph_backend.src.services.layout_service import GraphLayoutService

client = TestClient(app)

FRAGMENTS = [
    {"this": {"id": "a"}, "neighbors": [{"id": "b"}], "edges": [{"id": "e1", "source": "a", "target": "b"}]},
    {"this": {"id": "b"}, "neighbors": [{"id": "a"}], "edges": [{"id": "e2", "source": "a", "target": "b"}]},
]


@pytest.fixture(autouse=True)
def layout_service():
    """Pin the layout configuration regardless of the environment."""
    app.dependency_overrides[get_layout_service] = lambda: GraphLayoutService(config=LayoutConfig())
    yield
    app.dependency_overrides = {}


@pytest.fixture
def mock_source():
    source = Mock(spec=GraphSourceClient)
    source.fetch_graph = AsyncMock()
    source.fetch_fragments = AsyncMock()
    app.dependency_overrides[get_graph_source] = lambda: source
    return source


def test_health():
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_layout_fragments_success():
    """Fragments are merged, simulated and projected."""
    response = client.post("/api/layout/fragments", json=FRAGMENTS)

    assert response.status_code == 200
    data = response.json()
    assert data["ready"] is True
    assert [node["id"] for node in data["nodes"]] == ["a", "b"]
    assert len(data["edges"]) == 1

    edge = data["edges"][0]
    assert edge["id"] == "e1"
    assert edge["markerEnd"] == {"type": "arrowclosed", "width": 20, "height": 20}
    assert edge["style"]["strokeWidth"] == 2

    node = data["nodes"][0]
    assert set(node["position"]) == {"x", "y"}
    assert node["data"]["label"] == "a"


def test_layout_fragments_rejects_non_list_body():
    response = client.post("/api/layout/fragments", json={"this": {"id": "a"}})

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_layout_whole_graph_success():
    payload = {
        "nodes": [{"id": "a", "data": {"label": "https://a.example.com"}}, {"id": "b"}],
        "edges": [{"id": "e1", "source": "a", "target": "b"}],
    }

    response = client.post("/api/layout/graph", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["nodes"][0]["data"]["label"] == "https://a.example.com"
    assert data["dropped_edges"] == 0


def test_layout_whole_graph_malformed():
    """A payload without an edges array is reported, not laid out."""
    response = client.post("/api/layout/graph", json={"nodes": []})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "malformed_input"
    assert body["detail"] == {"missing": ["edges"]}


def test_layout_from_source_fragments(mock_source):
    mock_source.fetch_fragments.return_value = FRAGMENTS

    response = client.get("/api/layout")

    assert response.status_code == 200
    assert len(response.json()["nodes"]) == 2
    mock_source.fetch_fragments.assert_awaited_once()
    mock_source.fetch_graph.assert_not_called()


def test_layout_from_source_listing_failure_yields_empty_layout(mock_source):
    mock_source.fetch_fragments.side_effect = GraphSourceError("down", url="http://upstream")

    response = client.get("/api/layout", params={"strategy": "fragments"})

    assert response.status_code == 200
    data = response.json()
    assert data["nodes"] == []
    assert data["ready"] is True


def test_layout_from_source_whole_graph(mock_source):
    mock_source.fetch_graph.return_value = {"nodes": [{"id": "solo"}], "edges": []}

    response = client.get("/api/layout", params={"strategy": "graph"})

    assert response.status_code == 200
    assert [node["id"] for node in response.json()["nodes"]] == ["solo"]


def test_layout_from_source_upstream_error(mock_source):
    mock_source.fetch_graph.side_effect = GraphSourceError("Timed out", url="http://upstream/graphs/graph")

    response = client.get("/api/layout", params={"strategy": "graph"})

    assert response.status_code == 502
    body = response.json()
    assert body["error"] == "upstream_error"
    assert body["detail"] == {"url": "http://upstream/graphs/graph"}


def test_layout_from_source_unknown_strategy(mock_source):
    response = client.get("/api/layout", params={"strategy": "bogus"})

    assert response.status_code == 400
