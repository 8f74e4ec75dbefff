"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - gateway_latency_ms{capability, outcome}
    - gateway_errors_total{capability, reason}
    - ranking_skipped_total{reason}
    - qa_answers_total{outcome}
    - ingested_chunks_total
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
