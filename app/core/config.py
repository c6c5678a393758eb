from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    url: str = Field(
        default="sqlite+aiosqlite:///./study_aid.db", alias="STORAGE_URL"
    )
    history_key: str = Field(default="study_aid.history", alias="HISTORY_STORAGE_KEY")
    theme_key: str = Field(default="study_aid.theme", alias="THEME_STORAGE_KEY")
    echo: bool = Field(default=False, alias="STORAGE_ECHO")


class GenerationSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    text_model: str = Field(default="gemini-2.5-flash", alias="TEXT_MODEL")
    image_model: str = Field(default="imagen-4.0-generate-001", alias="IMAGE_MODEL")
    icon_mime_type: str = Field(default="image/png", alias="ICON_MIME_TYPE")
    # Visual transition between un-flipping a card and moving to the next one
    flip_delay_ms: int = Field(default=150, alias="REVIEW_FLIP_DELAY_MS")

    @computed_field
    def flip_delay_seconds(self) -> float:
        return max(0, self.flip_delay_ms) / 1000.0


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="study-aid", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"], alias="CORS_ORIGINS"
    )

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    storage: StorageSettings = Field(default_factory=lambda: StorageSettings())
    generation: GenerationSettings = Field(
        default_factory=lambda: GenerationSettings()
    )


settings = Settings()
