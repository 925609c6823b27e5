from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("gemini_api_key", "google_api_key", "api_key"),
    )
    gemini_model: str = "gemini-3-flash-preview"
    strict_response_parsing: bool = False

    log_level: str = "INFO"

    session_cookie_name: str = "scamguard_session"
    max_sessions: int = 1000
    max_image_bytes: int = 10 * 1024 * 1024


settings = Settings()
