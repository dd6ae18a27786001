"""
Notes API — Health Check Route
================================

What:  Liveness endpoint for monitoring and load balancer probes.
How:   Returns a fixed success message without touching the database, so it
       answers 200 whenever the process is serving requests.

Paths:
    GET /health                  conventional probe path
    GET /api/healthchecker       path used by existing clients of the API
"""

from fastapi import APIRouter

from notes_api.schemas.note import HealthResponse

router = APIRouter(tags=["Health"])

MESSAGE = "Simple CRUD API with FastAPI, SQLAlchemy and PostgreSQL"


@router.get("/health", response_model=HealthResponse, summary="Service health check")
@router.get("/api/healthchecker", response_model=HealthResponse, include_in_schema=False)
async def health_check() -> HealthResponse:
    return HealthResponse(message=MESSAGE)
