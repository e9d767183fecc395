"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import SynthesisRequest
from .responses import ClearCacheResponse, HealthCheckResponse, StatusResponse

__all__ = [
    "SynthesisRequest",
    "StatusResponse",
    "HealthCheckResponse",
    "ClearCacheResponse",
]
