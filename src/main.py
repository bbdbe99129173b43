"""FastAPI application entry point — wires everything together.

Usage:
    python -m src.main

Parses the customer group mapping once at startup, builds the commerce
platform client, and serves the Pub/Sub push endpoint.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from src.assignment.dispatcher import OrderEventDispatcher
from src.assignment.mapping import load_customer_group_mapping
from src.assignment.service import GroupAssigner
from src.channels.pubsub import pubsub_router
from src.config import settings
from src.integrations.commercetools.client import CommercetoolsClient

# ── Logging setup ────────────────────────────────────────────────────

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = logging.getLogger(__name__)

# ── FastAPI lifespan ─────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup and shutdown lifecycle."""
    logger.info("Starting customer group assigner (env=%s)", settings.environment)

    # 1. Assignment rules — parsed once, read-only afterwards
    mapping = load_customer_group_mapping(settings.assignment.cgroup_to_product_type_map)
    if not mapping:
        logger.warning("No customer group rules configured — orders will not change any customer")

    # 2. Commerce platform client
    client = CommercetoolsClient(settings.commercetools)
    if not settings.commercetools.ctp_project_key:
        logger.warning("CTP_PROJECT_KEY not set — customer lookups will fail")

    app.state.dispatcher = OrderEventDispatcher(mapping, GroupAssigner(client))
    logger.info("Dispatcher ready with %d customer group rules", len(mapping))

    try:
        yield
    finally:
        logger.info("Shutting down customer group assigner...")
        await client.close()
        logger.info("Commerce platform client closed")


# ── FastAPI app ──────────────────────────────────────────────────────

app = FastAPI(
    title="Customer Group Assigner",
    description="Moves customers into customer groups based on the product types they order",
    version="0.1.0",
    lifespan=lifespan,
)
app.include_router(pubsub_router)


@app.get("/health")
async def health_check() -> dict[str, str | int]:
    """Health check endpoint."""
    dispatcher = getattr(app.state, "dispatcher", None)
    return {
        "status": "ok",
        "environment": settings.environment,
        "groups": len(dispatcher.mapping) if dispatcher else 0,
    }


# ── Entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )
