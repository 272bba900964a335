import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class Settings(BaseModel):
    expected_extension_id: str | None = None
    app_env: str = "production"
    log_level: str = "INFO"
    max_body_bytes: int = Field(default=10 * 1024 * 1024)

    @property
    def expose_error_details(self) -> bool:
        return self.app_env.strip().lower() != "production"


def get_settings() -> Settings:
    # Built per call so EXPECTED_EXTENSION_ID is read at request time.
    return Settings(
        expected_extension_id=os.getenv("EXPECTED_EXTENSION_ID") or None,
        app_env=os.getenv("APP_ENV", "production"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
