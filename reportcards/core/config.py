from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "School Progress Reports API"
    app_env: str = "dev"
    app_version: str = "0.1.0"
    api_v1_prefix: str = ""

    database_url: str = "sqlite+pysqlite:///./reportcards.db"
    auto_create_schema: bool = True

    snapshot_key: str = "tisa-assessment-storage"
    seed_defaults: bool = True

    max_attachment_bytes: int = 200 * 1024
    share_token_bytes: int = 32

    lovable_api_key: str | None = None
    lovable_api_url: str = "https://ai.gateway.lovable.dev/v1/chat/completions"
    lovable_model: str = "google/gemini-2.5-flash"
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    openai_model: str = "gpt-4o-mini"
    google_api_url_template: str = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
    google_model: str = "gemini-1.5-flash"
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    anthropic_model: str = "claude-3-haiku-20240307"
    anthropic_version: str = "2023-06-01"
    rewrite_max_tokens: int = 1000
    rewrite_timeout_seconds: float = 30.0
    rewrite_school_name: str = "TISA School"

    @property
    def token_bytes(self) -> int:
        # 16 bytes is 128 bits, the floor for an unguessable share link
        return max(16, self.share_token_bytes)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def clear_settings_cache() -> None:
    get_settings.cache_clear()
