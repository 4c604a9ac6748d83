"""FastAPI receiver for GitHub release webhooks.

Point a repository's `release` webhook at POST /release and every
delivery is relayed to the configured chat webhook, the same way the CLI
does it from an Actions step. Provides:
- POST /release - Relay a release webhook delivery
- GET /health - Health check for load balancers and monitoring

To run locally:
    uvicorn release_notifier.main:app --reload --port 8000
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from release_notifier.config import NotifierConfig
from release_notifier.errors import ConfigurationError
from release_notifier.logging_config import get_logger
from release_notifier.notifier import ReleaseNotifier
from release_notifier.schemas import ReleaseEvent

logger = get_logger(__name__)

ANNOUNCED_ACTIONS = frozenset({"published"})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load the configuration once at startup.

    Tests may set app.state.config before the app starts.
    """
    if getattr(app.state, "config", None) is None:
        app.state.config = NotifierConfig.from_env()
    yield


app = FastAPI(
    title="Release Notifier",
    description="Relays GitHub releases to a chat webhook",
    version="0.1.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    logger.error("configuration_error", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=500,
        content={"error": "configuration_error", "detail": str(exc)},
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@app.post("/release")
async def relay_release(event: ReleaseEvent, request: Request) -> dict:
    """Relay one release webhook delivery.

    Only `published` deliveries are announced. GitHub sends created,
    edited, deleted, unpublished and prereleased to the same hook; those
    are acknowledged and skipped. The delivery's own release is always
    used; a configured release_tag_name does not apply here.

    Returns:
        The version, whether the chat webhook accepted it, and whether
        the delivery was skipped
    """
    tag = event.release.tag_name
    logger.info("release_event_received", action=event.action, tag=tag)
    if event.action not in ANNOUNCED_ACTIONS:
        logger.info("release_event_skipped", action=event.action, tag=tag)
        return {"version": tag, "delivered": False, "skipped": True}

    config: NotifierConfig = request.app.state.config
    config = config.model_copy(update={"release_tag_name": None})

    notifier = ReleaseNotifier(config)
    result = await notifier.run(event.model_dump())
    return {"version": result.version, "delivered": result.delivered, "skipped": False}
