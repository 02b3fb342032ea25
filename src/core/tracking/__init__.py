# src/core/tracking/__init__.py
"""
Домен отслеживания: приём точек геолокации и ограничение частоты.
"""

from src.core.tracking.models import (
    IngestResult,
    KinematicMetrics,
    LocationEnvelope,
    LocationEvent,
    LocationInput,
    LocationSample,
)
from src.core.tracking.rate_limiter import (
    MemoryRateLimiter,
    RateLimiter,
    RedisRateLimiter,
    create_rate_limiter,
)
from src.core.tracking.repository import LocationRepository
from src.core.tracking.service import LocationIngestService

__all__ = [
    "IngestResult",
    "KinematicMetrics",
    "LocationEnvelope",
    "LocationEvent",
    "LocationInput",
    "LocationSample",
    "MemoryRateLimiter",
    "RateLimiter",
    "RedisRateLimiter",
    "create_rate_limiter",
    "LocationRepository",
    "LocationIngestService",
]
