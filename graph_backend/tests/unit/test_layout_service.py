import math

import pytest

from graph_backend.src.services.aggregator import GraphAggregator
from graph_backend.src.services.config import LayoutConfig
from graph_backend.src.services.errors import MalformedInputError
from graph_backend.src.services.layout_service import GraphLayoutService, parse_whole_graph
from graph_backend.src.services.simulation import ForceSimulationEngine

EXAMPLE_FRAGMENTS = [
    {
        "this": {"id": "a"},
        "neighbors": [{"id": "b"}],
        "edges": [{"id": "e1", "source": "a", "target": "b"}],
    },
    {
        "this": {"id": "b"},
        "neighbors": [{"id": "a"}],
        "edges": [{"id": "e2", "source": "a", "target": "b"}],
    },
]


@pytest.fixture
def config() -> LayoutConfig:
    return LayoutConfig()


@pytest.fixture
def service(config: LayoutConfig) -> GraphLayoutService:
    return GraphLayoutService(config=config)


def test_two_fragment_example_end_to_end(service: GraphLayoutService) -> None:
    graph = GraphAggregator().aggregate(EXAMPLE_FRAGMENTS)
    assert graph.node_ids() == ["a", "b"]
    assert [e.id for e in graph.edges] == ["e1"]

    result = service.layout_fragments(EXAMPLE_FRAGMENTS)

    assert result.ready is True
    assert [node.id for node in result.nodes] == ["a", "b"]
    assert [edge.id for edge in result.edges] == ["e1"]
    for node in result.nodes:
        assert math.isfinite(node.position.x)
        assert math.isfinite(node.position.y)


def test_projected_coordinates_are_simulated_times_three(
    service: GraphLayoutService, config: LayoutConfig
) -> None:
    graph = GraphAggregator().aggregate(EXAMPLE_FRAGMENTS)

    simulated = ForceSimulationEngine(config).run(graph)
    result = service.layout_graph(graph)

    for node in result.nodes:
        x, y = simulated[node.id]
        assert node.position.x == x * 3
        assert node.position.y == y * 3


def test_empty_input_is_a_valid_empty_layout(service: GraphLayoutService) -> None:
    result = service.layout_fragments([])

    assert result.ready is True
    assert result.nodes == []
    assert result.edges == []


def test_whole_graph_payload_is_laid_out(service: GraphLayoutService) -> None:
    payload = {
        "nodes": [
            {"id": "a", "data": {"label": "https://a.example.com", "description": None, "tags": None}},
            {"id": "b", "data": {"label": "https://b.example.com", "description": "B", "tags": ["#kafka"]}},
        ],
        "edges": [
            {"id": "e1", "source": "a", "target": "b"},
            {"id": "e2", "source": "b", "target": "missing"},
        ],
    }

    result = service.layout_payload(payload)

    assert [node.data.label for node in result.nodes] == [
        "https://a.example.com",
        "https://b.example.com",
    ]
    assert [edge.id for edge in result.edges] == ["e1"]
    assert result.dropped_edges == 1


def test_whole_graph_matches_single_fragment_path(service: GraphLayoutService) -> None:
    payload = {
        "nodes": [{"id": "a"}, {"id": "b"}, {"id": "c"}],
        "edges": [{"id": "e1", "source": "a", "target": "b"}, {"id": "e2", "source": "b", "target": "c"}],
    }

    from_payload = service.layout_payload(payload)
    from_fragment = service.layout_fragments([{"neighbors": payload["nodes"], "edges": payload["edges"]}])

    assert from_payload == from_fragment


@pytest.mark.parametrize(
    "payload, missing",
    [
        ({"nodes": []}, ("edges",)),
        ({"edges": []}, ("nodes",)),
        ({}, ("nodes", "edges")),
        ({"nodes": None, "edges": []}, ("nodes",)),
        ({"nodes": {"a": 1}, "edges": []}, ("nodes",)),
    ],
)
def test_malformed_whole_graph_is_rejected(payload, missing) -> None:
    with pytest.raises(MalformedInputError) as excinfo:
        parse_whole_graph(payload)

    assert excinfo.value.missing == missing


def test_non_object_payload_is_rejected(service: GraphLayoutService) -> None:
    with pytest.raises(MalformedInputError):
        service.layout_payload(["nodes", "edges"])


def test_empty_arrays_are_valid(service: GraphLayoutService) -> None:
    result = service.layout_payload({"nodes": [], "edges": []})

    assert result.ready is True
    assert result.nodes == []
