"""
Graph Source Client - fetches graph data from the upstream graph service.

Two acquisition strategies are supported:
- whole graph: one request returning ``{nodes, edges}``
- fragments: the node id list first, then one ``{this, neighbors, edges}``
  fragment per id, fetched concurrently

Fragment fetches that fail are logged and skipped; the caller always receives
a (possibly empty) list it can aggregate.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from .config import LayoutConfig, get_config
from .errors import GraphSourceError

logger = logging.getLogger(__name__)

GRAPH_PATH = "/graphs/graph"
NODES_PATH = "/graphs/nodes"

JSON_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


def extract_node_ids(payload: Any) -> List[str]:
    """
    Pull node ids out of a node listing.

    Accepts a list of ids, a list of node objects, or an object wrapping
    either under ``ids`` or ``nodes``.
    """
    if isinstance(payload, dict):
        payload = payload.get("ids", payload.get("nodes"))
    if not isinstance(payload, list):
        return []

    ids: List[str] = []
    for item in payload:
        if isinstance(item, dict):
            item = item.get("id")
        if item is None or isinstance(item, (dict, list)):
            continue
        ids.append(str(item))
    return ids


class GraphSourceClient:
    """
    Client for the upstream graph service.

    Each call opens its own httpx.AsyncClient so instances can be shared
    freely between requests.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_concurrency: int = 8,
    ):
        """
        Initialize graph source client.

        Args:
            base_url: Upstream base URL (default: LAYOUT_SOURCE_URL)
            timeout: Per-request timeout in seconds (default: LAYOUT_SOURCE_TIMEOUT)
            max_concurrency: Maximum fragment requests in flight at once
        """
        config: LayoutConfig = get_config()
        self.base_url = (base_url or config.source_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.source_timeout
        self.max_concurrency = max(1, max_concurrency)

    async def _get_json(self, client: httpx.AsyncClient, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = await client.get(url, headers=JSON_HEADERS)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise GraphSourceError(
                f"Upstream returned {e.response.status_code} for {path}", url=url
            ) from e
        except httpx.TimeoutException as e:
            raise GraphSourceError(f"Timed out fetching {path}", url=url) from e
        except httpx.HTTPError as e:
            raise GraphSourceError(f"Failed to fetch {path}: {e}", url=url) from e
        except ValueError as e:
            raise GraphSourceError(f"Upstream returned invalid JSON for {path}", url=url) from e

    async def fetch_graph(self) -> Any:
        """
        Fetch the whole graph in one request.

        Returns:
            Decoded JSON payload; shape validation is left to the layout
            pipeline.

        Raises:
            GraphSourceError: If the request fails.
        """
        logger.info("Fetching graph data from %s%s", self.base_url, GRAPH_PATH)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._get_json(client, GRAPH_PATH)

    async def fetch_node_ids(self) -> List[str]:
        """Fetch the list of node ids to request fragments for."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            payload = await self._get_json(client, NODES_PATH)
        ids = extract_node_ids(payload)
        logger.info("Upstream listed %d node ids", len(ids))
        return ids

    async def fetch_fragment(self, node_id: str) -> Dict[str, Any]:
        """Fetch the fragment centred on one node."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._get_json(client, f"{NODES_PATH}/{quote(node_id, safe='')}")

    async def fetch_fragments(self, node_ids: Optional[List[str]] = None) -> List[Any]:
        """
        Fetch one fragment per node id concurrently.

        Args:
            node_ids: Ids to fetch; when omitted the id list is fetched first

        Returns:
            Successfully fetched fragments in node-id order. Failed fetches
            are dropped.

        Raises:
            GraphSourceError: If the node id listing itself fails.
        """
        if node_ids is None:
            node_ids = await self.fetch_node_ids()
        if not node_ids:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _fetch(node_id: str) -> Any:
            async with semaphore:
                return await self.fetch_fragment(node_id)

        results = await asyncio.gather(
            *(_fetch(node_id) for node_id in node_ids), return_exceptions=True
        )

        fragments: List[Any] = []
        failed = 0
        for node_id, result in zip(node_ids, results):
            if isinstance(result, GraphSourceError):
                failed += 1
                logger.warning("Skipping fragment for %s: %s", node_id, result)
                continue
            if isinstance(result, BaseException):
                raise result
            fragments.append(result)

        logger.info("Fetched %d fragments (%d failed)", len(fragments), failed)
        return fragments


__all__ = ["GraphSourceClient", "extract_node_ids", "GRAPH_PATH", "NODES_PATH"]
