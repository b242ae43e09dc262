"""HTTP API routes for graph layout."""

from __future__ import annotations

from enum import Enum
import logging
from typing import Annotated, Any, List

from fastapi import APIRouter, Body, Depends, Query
from fastapi.concurrency import run_in_threadpool

from ...models.layout import LayoutResult
from ...services.errors import GraphSourceError
from ...services.graph_source import GraphSourceClient
from ...services.layout_service import GraphLayoutService

logger = logging.getLogger(__name__)

router = APIRouter()


class FetchStrategy(str, Enum):
    """How the upstream graph is acquired."""
    FRAGMENTS = "fragments"
    GRAPH = "graph"


def get_layout_service() -> GraphLayoutService:
    return GraphLayoutService()


def get_graph_source() -> GraphSourceClient:
    return GraphSourceClient()


@router.post("/api/layout/graph", response_model=LayoutResult)
async def layout_whole_graph(
    payload: Annotated[Any, Body()],
    service: Annotated[GraphLayoutService, Depends(get_layout_service)],
) -> LayoutResult:
    """Lay out a whole-graph ``{nodes, edges}`` payload."""
    return await run_in_threadpool(service.layout_payload, payload)


@router.post("/api/layout/fragments", response_model=LayoutResult)
async def layout_fragments(
    fragments: Annotated[List[Any], Body()],
    service: Annotated[GraphLayoutService, Depends(get_layout_service)],
) -> LayoutResult:
    """Merge per-node fragments and lay out the result."""
    return await run_in_threadpool(service.layout_fragments, fragments)


@router.get("/api/layout", response_model=LayoutResult)
async def layout_from_source(
    service: Annotated[GraphLayoutService, Depends(get_layout_service)],
    source: Annotated[GraphSourceClient, Depends(get_graph_source)],
    strategy: FetchStrategy = Query(FetchStrategy.FRAGMENTS),
) -> LayoutResult:
    """Fetch the graph from the upstream service, then lay it out."""
    if strategy is FetchStrategy.GRAPH:
        payload = await source.fetch_graph()
        return await run_in_threadpool(service.layout_payload, payload)

    try:
        fragments = await source.fetch_fragments()
    except GraphSourceError as exc:
        # Nothing acquired: lay out the empty graph rather than fail.
        logger.warning("Node listing failed, laying out empty graph: %s", exc)
        fragments = []
    return await run_in_threadpool(service.layout_fragments, fragments)
