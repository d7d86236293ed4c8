"""
Centralized application configuration
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    API_TITLE: str = "Unified Catalog API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Product types, products and variants for the store catalog"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    # Empty by default so the app can be imported without a database;
    # connection helpers fail loudly when it is missing.
    DATABASE_URL: str = ""
    DB_MAX_RETRIES: int = 3
    DB_RETRY_DELAY: float = 1.0
    CONNECTION_TIMEOUT: int = 10

    # Auth (HS256 shared secret of the identity provider)
    AUTH_SECRET: str = ""

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000,http://localhost:5173"

    # Catalog rules
    STRICT_SPECIFICATIONS: bool = False  # reject keys the product type does not describe
    STRICT_VARIANT_GROUPS: bool = False  # reject blank color / version instead of skipping
    LOW_STOCK_THRESHOLD: int = 5
    SKU_WIDTH: int = 8
    DEFAULT_BRAND: str = "Apple"
    DEFAULT_PAGE_SIZE: int = 12

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
