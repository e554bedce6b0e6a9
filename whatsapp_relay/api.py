"""FastAPI app: K8s health probes plus the batch webhook.

The chat-protocol session lives in a separate bridge process which POSTs
each ``messages.upsert`` notification batch to ``/v1/batches``.  The
webhook only validates the batch and puts it on the channel; ingestion
happens in the coordinator loop.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from .models import HealthStatus, NotificationBatch, RelayStatus

if TYPE_CHECKING:
    from .service import RelayService

logger = structlog.get_logger()


def create_app(service: RelayService) -> FastAPI:
    """Build the FastAPI app bound to a running *service*."""
    app = FastAPI(title=f"{service.config.name}", docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> JSONResponse:
        status = HealthStatus(
            service_name=service.config.name,
            status=service.status,
            uptime_seconds=time.monotonic() - service.start_time,
            details=service.health_details(),
        )
        code = 200 if service.status in (RelayStatus.RUNNING, RelayStatus.STARTING) else 503
        return JSONResponse(content=status.model_dump(mode="json"), status_code=code)

    @app.get("/ready")
    async def ready() -> JSONResponse:
        is_ready = service.status == RelayStatus.RUNNING
        return JSONResponse(
            content={"ready": is_ready},
            status_code=200 if is_ready else 503,
        )

    @app.post("/v1/batches")
    async def receive_batch(batch: NotificationBatch) -> JSONResponse:
        if not service.accepting_batches:
            return JSONResponse(content={"accepted": False}, status_code=503)

        await service.channel.put(batch)
        logger.debug("batch_enqueued", mode=batch.type, events=len(batch.messages))
        return JSONResponse(
            content={"accepted": True, "events": len(batch.messages)},
            status_code=202,
        )

    return app
