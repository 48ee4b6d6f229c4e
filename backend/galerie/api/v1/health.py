"""
Health check endpoints for monitoring and readiness probes.

- Liveness probe: /health (the process is up)
- Readiness probe: /health/ready (database reachable, schema up to date)
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, status

from galerie.core.probes import check_database, check_migrations
from galerie.schemas.health import (
    HealthCheckDetail,
    HealthResponse,
    MigrationCheckDetail,
    ReadinessChecks,
    ReadinessResponse,
)


router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Database connectivity and migration status",
)
async def readiness_check(request: Request, response: Response) -> ReadinessResponse:
    """
    Readiness probe with dependency checks.

    Returns 200 when the database answers and every journal entry is
    recorded in the tracking table, 503 otherwise.

    Example response (pending migration):
        {
            "status": "not_ready",
            "checks": {
                "db": {"healthy": true, "latency_ms": 0.9},
                "migrations": {
                    "healthy": false,
                    "applied": ["0000_pictograms_galleries"],
                    "pending": ["0001_users_favorites"],
                    "error": "1 pending migration(s)"
                }
            },
            "timestamp": "2026-01-15T10:30:00.123456Z"
        }
    """
    engine = request.app.state.engine
    migrations_folder = request.app.state.settings.migrations_folder

    db_start = time.perf_counter()
    db_healthy = await check_database(engine)
    db_latency = (time.perf_counter() - db_start) * 1000

    migrations_start = time.perf_counter()
    migration_state = await check_migrations(engine, migrations_folder)
    migrations_latency = (time.perf_counter() - migrations_start) * 1000

    if migration_state is None:
        migrations_check = MigrationCheckDetail(
            healthy=False,
            latency_ms=round(migrations_latency, 2),
            error="Migration status unavailable",
        )
    else:
        migrations_check = MigrationCheckDetail(
            healthy=migration_state.up_to_date,
            latency_ms=round(migrations_latency, 2),
            applied=migration_state.applied,
            pending=migration_state.pending,
            error=None if migration_state.up_to_date else (
                f"{len(migration_state.pending)} pending migration(s)"
            ),
        )

    checks = ReadinessChecks(
        db=HealthCheckDetail(
            healthy=db_healthy,
            latency_ms=round(db_latency, 2),
            error=None if db_healthy else "Database connection failed or timed out",
        ),
        migrations=migrations_check,
    )

    all_healthy = checks.all_healthy()
    if not all_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(
        status="ready" if all_healthy else "not_ready",
        checks=checks,
        timestamp=datetime.now(timezone.utc),
    )
