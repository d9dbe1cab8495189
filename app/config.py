# app/config.py
from pathlib import Path
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Mounted volume (sandbox root for every operation)
    VOLUME_ROOT: Path = Path("/data")

    # HTTP transport; 8080 belongs to the game server SDK sidecar
    HOST: str = "0.0.0.0"
    PORT: int = 8081

    # Upload ceiling (whole request body)
    MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024

    # HTML view
    SERVER_NAME: str = "Volume File Manager"

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
