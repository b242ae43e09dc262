"""Graph data models."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _as_str(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


class NodeRecord(BaseModel):
    """Represents a single knowledge-graph node."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., description="Unique identifier")
    label: str = Field(..., description="Display label (usually the source URL)")
    description: Optional[str] = Field(default=None, description="Optional summary text")
    tags: Tuple[str, ...] = Field(default=(), description="Ordered tag list")

    @model_validator(mode="before")
    @classmethod
    def _lift_render_payload(cls, value: Any) -> Any:
        # Renderer-shaped nodes keep their payload under "data".
        if not isinstance(value, Mapping):
            return value
        payload = dict(value)
        data = payload.pop("data", None)
        if isinstance(data, Mapping):
            for key in ("label", "description", "tags"):
                if payload.get(key) is None and key in data:
                    payload[key] = data[key]
        payload["id"] = _as_str(payload.get("id"))
        if payload["id"] is not None and not payload.get("label"):
            payload["label"] = payload["id"]
        payload["label"] = _as_str(payload.get("label"))
        payload["description"] = _as_str(payload.get("description"))
        return payload

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> Tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        if not isinstance(value, (list, tuple)):
            return ()
        return tuple(str(tag) for tag in value if tag is not None)


class EdgeRecord(BaseModel):
    """Represents a directed connection between two nodes."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., description="Edge identifier (not used for deduplication)")
    source: str = Field(..., description="ID of the source node")
    target: str = Field(..., description="ID of the target node")

    @model_validator(mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        payload = dict(value)
        for key in ("id", "source", "target"):
            payload[key] = _as_str(payload.get(key))
        if payload["id"] is None and payload["source"] is not None and payload["target"] is not None:
            payload["id"] = f"{payload['source']}->{payload['target']}"
        return payload

    @property
    def key(self) -> Tuple[str, str]:
        """Deduplication key: the ordered (source, target) pair."""
        return (self.source, self.target)

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


def _parse_one(model: Type[RecordT], raw: Any) -> Optional[RecordT]:
    if raw is None:
        return None
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        logger.debug("Skipping malformed %s: %s", model.__name__, exc.errors())
        return None


def _parse_many(model: Type[RecordT], raw: Any) -> Tuple[RecordT, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    parsed = (_parse_one(model, item) for item in raw)
    return tuple(record for record in parsed if record is not None)


class GraphFragment(BaseModel):
    """A partial view of the graph centred on one focal node."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    focal: Optional[NodeRecord] = Field(default=None, alias="this")
    neighbors: Tuple[NodeRecord, ...] = ()
    edges: Tuple[EdgeRecord, ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "GraphFragment":
        """
        Build a fragment from an arbitrary decoded JSON value.

        Malformed members are dropped individually; a payload that is not a
        mapping becomes an empty fragment. Never raises.
        """
        if isinstance(payload, GraphFragment):
            return payload
        if not isinstance(payload, Mapping):
            logger.debug("Ignoring non-mapping fragment of type %s", type(payload).__name__)
            return cls()
        focal_raw = payload.get("this", payload.get("focal"))
        return cls(
            focal=_parse_one(NodeRecord, focal_raw),
            neighbors=_parse_many(NodeRecord, payload.get("neighbors")),
            edges=_parse_many(EdgeRecord, payload.get("edges")),
        )

    def iter_nodes(self) -> List[NodeRecord]:
        """Nodes in observation order: focal first, then neighbors."""
        nodes: List[NodeRecord] = [self.focal] if self.focal is not None else []
        nodes.extend(self.neighbors)
        return nodes


class Graph(BaseModel):
    """Deduplicated graph handed from aggregation to simulation."""

    model_config = ConfigDict(frozen=True)

    nodes: Dict[str, NodeRecord] = Field(default_factory=dict)
    edges: Tuple[EdgeRecord, ...] = ()

    def node_ids(self) -> List[str]:
        return list(self.nodes)

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes

    def resolved_edges(self) -> List[EdgeRecord]:
        """Edges whose endpoints both exist in the node mapping."""
        return [e for e in self.edges if e.source in self.nodes and e.target in self.nodes]

    def dangling_edges(self) -> List[EdgeRecord]:
        return [e for e in self.edges if e.source not in self.nodes or e.target not in self.nodes]

    @property
    def is_empty(self) -> bool:
        return not self.nodes
