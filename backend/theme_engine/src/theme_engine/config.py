import logging
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuration settings for the Theme Engine service.
    Settings are loaded from environment variables and/or a .env file.
    """

    # --- General Service Settings ---
    SERVICE_NAME: str = Field(default="theme_engine", description="Name of the service.")
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level for the service."
    )
    API_VERSION: str = Field(default="v1", description="API version prefix for REST endpoints.")

    # --- Generator Defaults ---
    ROOT_FONT_SIZE: float = Field(
        default=16.0,
        gt=0,
        description="Root font size in pixels used for every px <-> rem conversion."
    )
    DEFAULT_BASE_FONT_SIZE: float = Field(
        default=16.0,
        gt=0,
        description="Base font size (px) substituted when a type scale is requested with an invalid base."
    )
    DEFAULT_TYPE_RATIO: float = Field(
        default=1.25,
        gt=1,
        description="Modular scale ratio substituted when a type scale is requested with ratio <= 1."
    )
    DEFAULT_SPACING_RATIO: float = Field(
        default=1.5,
        gt=1,
        description="Spacing ratio substituted when a spacing scale is requested with ratio <= 1."
    )

    # --- Runtime Settings ---
    SCOPE_CLASS_PREFIX: str = Field(
        default="theme",
        description="Prefix of the per-tenant class selector (e.g. '.theme-acme')."
    )
    SUPERSEDED_HISTORY_SIZE: int = Field(
        default=32,
        ge=0,
        description="Number of replaced theme fingerprints remembered per scope."
    )

    # --- Preset Library Settings ---
    # Empty means the presets.json bundled with the package
    PRESETS_FILE_PATH: str = Field(
        default="",
        description="Path to the JSON file containing the saved theme presets."
    )

    # --- File Watcher Settings ---
    ENABLE_HOT_RELOAD: bool = Field(
        default=True,
        description="Whether to watch for changes to the presets file and reload automatically."
    )
    FILE_WATCH_INTERVAL_SECONDS: float = Field(
        default=2.0,
        description="Interval in seconds for checking if the presets file has changed."
    )

    # --- Caching Settings ---
    ENABLE_LRU_CACHE: bool = Field(
        default=True,
        description="Whether to cache palette generation results using LRU cache."
    )
    LRU_CACHE_MAXSIZE: int = Field(
        default=256,
        description="Maximum number of entries to keep in the LRU cache."
    )

    # --- API Server Settings ---
    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to."
    )
    API_PORT: int = Field(
        default=8010,
        description="Port to bind the API server to."
    )

    model_config = SettingsConfigDict(
        env_file=".env",  # Load .env file if present
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra environment variables
        case_sensitive=False,
    )

    def get_absolute_presets_path(self) -> Path:
        """
        Returns the absolute path to the presets file.
        An empty setting resolves to the file shipped inside the package,
        a relative one is resolved against the current working directory.
        """
        if not self.PRESETS_FILE_PATH:
            return Path(__file__).resolve().parent / "data" / "presets.json"

        path = Path(self.PRESETS_FILE_PATH)
        if path.is_absolute():
            return path
        return Path.cwd() / path


# Initialize settings globally for easy access
settings = Settings()

# Configure logging based on settings
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(settings.SERVICE_NAME)

logger.debug(f"Theme Engine settings loaded: {settings.model_dump()}")

if __name__ == "__main__":
    print("Loaded Theme Engine Settings:")
    for field_name, value in settings.model_dump().items():
        print(f"  {field_name}: {value}")

    presets_path = settings.get_absolute_presets_path()
    print(f"\nAbsolute presets file path: {presets_path}")
    print(f"Presets file exists: {presets_path.exists()}")
