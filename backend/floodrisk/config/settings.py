from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Weather provider (WeatherAPI.com) ─────────────────────────────────────
    WEATHER_API_URL: str = "https://api.weatherapi.com/v1"
    WEATHER_API_KEY: str = ""

    # ── Elevation provider (Open-Elevation) ───────────────────────────────────
    ELEVATION_API_URL: str = "https://api.open-elevation.com/api/v1/lookup"

    # ── Map provider (OpenStreetMap Overpass) ─────────────────────────────────
    OVERPASS_API_URL: str = "https://overpass-api.de/api/interpreter"
    OVERPASS_QUERY_TIMEOUT_SECONDS: int = 25

    # ── Government open data ──────────────────────────────────────────────────
    GOV_DATA_API_URL: str = "https://api.gov.vn"
    GOV_DATA_API_KEY: str = ""

    # ── HTTP ──────────────────────────────────────────────────────────────────
    HTTP_TIMEOUT_SECONDS: float = 15.0
    HTTP_USER_AGENT: str = "FloodRisk-Engine/1.0"

    # ── Per-source caches (TTL in seconds, max entries) ──────────────────────
    WEATHER_CACHE_TTL: float = 10 * 60
    WEATHER_CACHE_SIZE: int = 100
    ELEVATION_CACHE_TTL: float = 24 * 60 * 60
    ELEVATION_CACHE_SIZE: int = 200
    MAP_CACHE_TTL: float = 60 * 60
    MAP_CACHE_SIZE: int = 50
    GOV_CACHE_TTL: float = 24 * 60 * 60
    GOV_CACHE_SIZE: int = 100

    # ── Assessment pipeline ───────────────────────────────────────────────────
    # Must outlast the slowest collaborator request (Overpass: query timeout + 5 s)
    SCORER_TIMEOUT_SECONDS: float = 35.0
    BATCH_GROUP_SIZE: int = 5
    BATCH_PACING_DELAY_SECONDS: float = 2.0
    BATCH_MAX_LOCATIONS: int = 20

    # ── Logging ───────────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    # ── CORS ──────────────────────────────────────────────────────────────────
    ALLOW_ORIGINS: str = "*"

    @property
    def cors_origins(self) -> list[str]:
        if self.ALLOW_ORIGINS == "*":
            return ["*"]
        return [o.strip() for o in self.ALLOW_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
