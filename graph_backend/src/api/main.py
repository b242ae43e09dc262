"""FastAPI application main entry point."""

from __future__ import annotations

import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .middleware import register_error_handlers
from .routes import graph
from ..services.config import get_config

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Knowledge Graph Layout API",
    description="Aggregates knowledge-graph fragments and computes force-directed layouts",
    version="0.1.0",
)

# CORS middleware for the graph viewer dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(graph.router, tags=["layout"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def run_server(host: str = "127.0.0.1", port: int = 8000):
    """Run the API server."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = get_config()
    logger.info("Upstream graph source: %s (%d ticks per layout)", config.source_url, config.ticks)

    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_server()


__all__ = ["app", "run_server"]
