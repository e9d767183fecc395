"""Request DTOs for API endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from tts_cache.entities import SynthesisParams


class SynthesisRequest(BaseModel):
    """Request DTO for POST /tts.

    Field aliases keep the wire names existing clients already send.
    The handler will convert this to a SynthesisParams entity.
    """

    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., description="The text to synthesize", min_length=1)
    language: str = Field("", description="Voice locale, e.g. en-US")
    gender: str = Field("", description="Voice gender, e.g. Female")
    name: str = Field("", description="Voice name, e.g. en-US-JennyNeural")
    style: str = Field("", description="Speaking style, e.g. cheerful")
    azure_key: str = Field(
        ...,
        alias="azureKey",
        description="Azure Speech subscription key",
        min_length=1,
        pattern=r"^[\x21-\x7e]+$",
    )
    azure_region: str = Field(
        ...,
        alias="azureRegion",
        description="Azure Speech region, e.g. westeurope",
        min_length=1,
        pattern=r"^[a-z0-9-]+$",
    )
    should_cache: bool = Field(
        False,
        alias="shouldCache",
        description="Keep the result in the durable tier (persisted across restarts)",
    )

    def to_params(self) -> SynthesisParams:
        """Convert to the internal synthesis entity."""
        return SynthesisParams(
            text=self.text,
            language=self.language,
            gender=self.gender,
            name=self.name,
            style=self.style,
            credential=self.azure_key,
            region=self.azure_region,
        )
