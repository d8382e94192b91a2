"""
Configuración centralizada de la aplicación
"""
import json
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Configuración de la aplicación"""

    # API Settings
    API_TITLE: str = "Shopdesk API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Order, inventory and discount backend for the Shopdesk admin dashboard"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database (checked at connect time, not at import time)
    DATABASE_URL: str = ""
    DB_MAX_RETRIES: int = 3
    DB_RETRY_DELAY: float = 1.0

    # Supabase (RPC endpoint + auth tokens)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    SUPABASE_JWT_SECRET: str = ""

    # Business defaults
    LOW_STOCK_THRESHOLD: int = 5
    ACTIVITY_LOG_LIMIT: int = 500

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:5173,https://admin.example.com" or '["http://localhost:5173"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:5173,http://localhost:3000"

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:5173"]

        # Try JSON parse first (for array format)
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
