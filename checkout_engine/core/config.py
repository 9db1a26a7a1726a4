"""Checkout Engine Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    # Application
    app_name: str = "Checkout Engine"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8002

    # Pricing fallbacks (used when the config store has nothing or fails)
    default_platform_fee: float = 2.00
    default_commission_rate: float = 0.06
    default_max_delivery_distance_km: float = 60.0
    default_province: str = "BC"
    strict_province: bool = False
    currency: str = "cad"

    # Payment state machine timing
    payment_confirmation_delay_seconds: float = 2.0
    payment_fallback_timeout_seconds: float = 7.0
    fallback_assumes_paid: bool = True
    # How long a finished checkout stays readable, and when an abandoned one is dropped
    payment_flow_retention_seconds: float = 60.0
    payment_flow_max_age_seconds: float = 1800.0

    # Geocoding (Google Geocoding API compatible)
    geocoding_api_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    geocoding_api_key: Optional[str] = None
    geocoding_country: str = "CA"

    class Config:
        env_file = "config/.env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def geocoding_configured(self) -> bool:
        """Check if the geocoder has credentials"""
        return bool(self.geocoding_api_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
