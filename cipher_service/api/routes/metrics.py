"""Prometheus scrape endpoint."""
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from cipher_service.api.dependencies import get_metrics_registry
from cipher_service.core.metrics import MetricsRegistry

router = APIRouter()


@router.get("/metrics", summary="Expose metrics in the Prometheus text format")
async def read_metrics(metrics: MetricsRegistry = Depends(get_metrics_registry)) -> Response:
    body, content_type = metrics.render()
    return Response(content=body, media_type=content_type)
