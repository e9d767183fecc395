import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Persistence
    persist_cache: bool = os.getenv("PERSIST_CACHE", "true").lower() != "false"
    cache_file: str = os.getenv("CACHE_FILE", "cache-data.json")

    # Temporary tier
    temp_cache_ttl: float = float(os.getenv("TEMP_CACHE_TTL", "300"))  # 5 minutes
    temp_cache_sweep_interval: float = float(os.getenv("TEMP_CACHE_SWEEP_INTERVAL", "600"))

    # Upstream (Azure Speech)
    tts_endpoint_template: str = os.getenv(
        "TTS_ENDPOINT_TEMPLATE",
        "https://{region}.tts.speech.microsoft.com/cognitiveservices/v1",
    )
    tts_output_format: str = os.getenv("TTS_OUTPUT_FORMAT", "audio-16khz-64kbitrate-mono-mp3")
    tts_prosody_rate: str = os.getenv("TTS_PROSODY_RATE", "0.8")
    tts_user_agent: str = os.getenv("TTS_USER_AGENT", "tts-cache")
    upstream_timeout: float = float(os.getenv("UPSTREAM_TIMEOUT", "30"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("PORT", "8080"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.temp_cache_ttl <= 0:
            raise ValueError("TEMP_CACHE_TTL must be positive")

        if self.temp_cache_sweep_interval <= 0:
            raise ValueError("TEMP_CACHE_SWEEP_INTERVAL must be positive")

        if self.upstream_timeout <= 0:
            raise ValueError("UPSTREAM_TIMEOUT must be positive")

        if "{region}" not in self.tts_endpoint_template:
            raise ValueError(
                f"TTS_ENDPOINT_TEMPLATE must contain a {{region}} placeholder, "
                f"got {self.tts_endpoint_template!r}"
            )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
