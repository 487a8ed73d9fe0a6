"""
Health Check Service - component health for load balancers and monitoring.

Components:
- MongoDB connectivity and response time (only when a Mongo store is configured)
- Schema registry per resource (schema loaded, current revision)
"""

import time
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Optional

from app.core import get_logger
from app.exceptions import SchemaServiceException

logger = get_logger(__name__)

APP_VERSION = "1.0.0"


@dataclass
class ComponentHealth:
    """Individual component health status."""
    status: str  # "healthy", "degraded", "unhealthy"
    response_time_ms: Optional[float] = None
    message: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


@dataclass
class SystemHealth:
    """Overall system health status."""
    status: str
    timestamp: str
    uptime_seconds: float
    version: str
    components: Dict[str, Any]


class HealthService:
    """Service for system health checks."""

    def __init__(self, container, version: str = APP_VERSION):
        self.container = container
        self.version = version
        self.start_time = time.time()

    def get_uptime(self) -> float:
        """Get application uptime in seconds."""
        return time.time() - self.start_time

    def check_health(self) -> Dict[str, Any]:
        """
        Perform health check (blocking; call from a worker thread).

        Returns:
            Health status dictionary
        """
        components: Dict[str, ComponentHealth] = {}

        if self.container.uses_mongo:
            components["mongodb"] = self._check_mongodb()

        for name, context in self.container.contexts.items():
            components[f"schema:{name}"] = self._check_registry(context)

        health = SystemHealth(
            status=self._determine_overall_status(components),
            timestamp=datetime.utcnow().isoformat(),
            uptime_seconds=round(self.get_uptime(), 3),
            version=self.version,
            components={k: asdict(v) for k, v in components.items()},
        )
        return asdict(health)

    def _check_mongodb(self) -> ComponentHealth:
        """Check MongoDB connectivity and response time."""
        result = self.container.mongo.health_check()
        if result["status"] != "healthy":
            logger.error(f"MongoDB health check failed: {result.get('error')}")
            return ComponentHealth(status="unhealthy", message=result.get("error"))

        latency = result["latency_ms"]
        if latency > 1000:
            return ComponentHealth(
                status="degraded",
                response_time_ms=latency,
                message=f"High latency: {latency:.2f}ms"
            )
        return ComponentHealth(status="healthy", response_time_ms=latency, message="Connected")

    def _check_registry(self, context) -> ComponentHealth:
        """Check that the resource schema is loaded and report its revision."""
        start = time.time()
        try:
            snapshot = context.registry.snapshot()
        except SchemaServiceException as e:
            logger.error(f"Schema registry unavailable for {context.resource.name}: {e.message}")
            return ComponentHealth(status="unhealthy", message=e.message)

        return ComponentHealth(
            status="healthy",
            response_time_ms=round((time.time() - start) * 1000, 2),
            details={
                "schemaName": snapshot.document.schemaName,
                "revision": snapshot.revision,
                "fields": len(snapshot.document.fields),
            }
        )

    def _determine_overall_status(self, components: Dict[str, ComponentHealth]) -> str:
        """Any unhealthy component makes the service unhealthy."""
        statuses = [c.status for c in components.values()]
        if "unhealthy" in statuses:
            return "unhealthy"
        if "degraded" in statuses:
            return "degraded"
        return "healthy"
