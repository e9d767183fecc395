"""Response DTOs for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class StatusResponse(BaseModel):
    """Response DTO for GET /status.

    Serialized with camelCase names to match the legacy status report.
    """

    model_config = ConfigDict(populate_by_name=True)

    items_count: int = Field(
        ...,
        alias="itemsCount",
        description="Live entries in the durable tier",
        ge=0,
    )
    cache_memory_bytes: int = Field(
        ...,
        alias="cacheMemoryBytes",
        description="Sum of key and payload lengths over the durable tier",
        ge=0,
    )
    cache_memory: str = Field(..., alias="cacheMemory", description="cacheMemoryBytes in MB")
    temporary_items_count: int = Field(
        ...,
        alias="temporaryItemsCount",
        description="Live entries in the temporary tier",
        ge=0,
    )
    process_alloc_bytes: int = Field(..., alias="processAllocBytes", ge=0)
    process_total_alloc_bytes: int = Field(..., alias="processTotalAllocBytes", ge=0)
    process_sys_bytes: int = Field(..., alias="processSysBytes", ge=0)
    gc_cycles: int = Field(..., alias="gcCycles", ge=0)
    performance: dict[str, float | int] = Field(
        default_factory=dict,
        description="Hit/miss counters since startup",
    )


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    persistence: bool = Field(..., description="Whether durable entries are saved to disk")
    in_flight: int = Field(0, description="Captures still reading from the provider", ge=0)


class ClearCacheResponse(BaseModel):
    """Response DTO for clearing the temporary tier."""

    success: bool = Field(..., description="Whether the operation succeeded")
    deleted_count: int = Field(..., description="Number of entries removed", ge=0)
    message: str = Field(..., description="Human-readable status message")
