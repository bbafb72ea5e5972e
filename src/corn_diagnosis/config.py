from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


# ──────────────────────────────────────────────
# Settings (from environment variables / .env)
# ──────────────────────────────────────────────
class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # Remote classifier
    api_endpoint: str = "https://felipepflorezo-corn-disease-api.hf.space/predict"
    request_timeout: float = 60.0

    # History ledger
    history_store_path: str = "data/history_store.json"  # empty → in-memory store
    history_key: str = "cornDiseaseHistory"
    history_limit: int = 50
    timestamp_format: str = "%d/%m/%Y, %H:%M:%S"

    # Upload settings
    max_upload_size: int = 10 * 1024 * 1024  # 10 MB

    # Workflow
    show_connection_status: bool = False
    preview_max_pixels: int = 512

    # CORS settings
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000"
    cors_allow_credentials: bool = True
    cors_allow_methods: str = "GET,POST,DELETE,OPTIONS"
    cors_allow_headers: str = "*"

    # Application settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def cors_methods_list(self) -> list[str]:
        """Parse CORS methods from comma-separated string."""
        if self.cors_allow_methods == "*":
            return ["*"]
        return [method.strip() for method in self.cors_allow_methods.split(",")]

    @property
    def cors_headers_list(self) -> list[str]:
        """Parse CORS headers from comma-separated string."""
        if self.cors_allow_headers == "*":
            return ["*"]
        return [header.strip() for header in self.cors_allow_headers.split(",")]

    @property
    def history_store_file(self) -> Path | None:
        """Resolved history store path, or ``None`` for an in-memory store."""
        if not self.history_store_path.strip():
            return None
        path = Path(self.history_store_path)
        return path if path.is_absolute() else BASE_DIR.parent / path


# ──────────────────────────────────────────────
# Paths
# ──────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent          # src/

# Global settings instance
settings = Settings()

# ──────────────────────────────────────────────
# Class labels (as returned by the remote classifier)
# ──────────────────────────────────────────────
CLASS_NAMES: list[str] = [
    "Blight",
    "Common_Rust",
    "Gray_Leaf_Spot",
    "Healthy",
]

# ──────────────────────────────────────────────
# Display names shown to the user
#   key   → raw label from the classifier
#   value → Spanish display name
# ──────────────────────────────────────────────
DISPLAY_NAMES: dict[str, str] = {
    "Blight": "Tizón",
    "Common_Rust": "Roya Común",
    "Gray_Leaf_Spot": "Mancha Gris",
    "Healthy": "Saludable",
}

UNKNOWN_FILE_NAME = "Imagen desconocida"
