"""
Pydantic schemas for health check endpoints.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """
    Response model for the liveness probe.

    Attributes:
        status: Health status ("ok" if service is running)
        timestamp: Current UTC timestamp
    """
    status: Literal["ok"] = Field(
        description="Health status indicator"
    )
    timestamp: datetime = Field(
        description="Current UTC timestamp"
    )


class HealthCheckDetail(BaseModel):
    healthy: bool = Field(
        description="Whether the check passed"
    )
    latency_ms: Optional[float] = Field(
        default=None,
        description="Check execution time in milliseconds"
    )
    error: Optional[str] = Field(
        default=None,
        description="Error message if check failed"
    )


class MigrationCheckDetail(HealthCheckDetail):
    applied: List[str] = Field(
        default_factory=list,
        description="Journal tags recorded in the tracking table"
    )
    pending: List[str] = Field(
        default_factory=list,
        description="Journal tags not applied yet"
    )


class ReadinessChecks(BaseModel):
    db: HealthCheckDetail = Field(
        description="Database connectivity"
    )
    migrations: MigrationCheckDetail = Field(
        description="Journal entries versus the tracking table"
    )

    def all_healthy(self) -> bool:
        return self.db.healthy and self.migrations.healthy


class ReadinessResponse(BaseModel):
    """
    Response model for the readiness probe.

    Attributes:
        status: "ready" when the database answers and no migration is pending
        checks: Individual check results
        timestamp: Current UTC timestamp
    """
    status: Literal["ready", "not_ready"] = Field(
        description="Overall readiness status"
    )
    checks: ReadinessChecks = Field(
        description="Individual dependency checks"
    )
    timestamp: datetime = Field(
        description="Current UTC timestamp"
    )
