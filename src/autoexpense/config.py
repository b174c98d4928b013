from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent.parent.parent / ".env"),
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    # Local encrypted store
    database_url: str = "sqlite+aiosqlite:///./autoexpense.db"
    db_echo: bool = False
    encryption_key: str | None = None
    encryption_key_file: str = ".encryption_key"

    # Mailbox (Gmail REST API)
    gmail_api_base: str = "https://gmail.googleapis.com/gmail/v1"
    gmail_token_uri: str = "https://oauth2.googleapis.com/token"
    gmail_client_id: str | None = None
    gmail_client_secret: str | None = None
    gmail_refresh_token: str | None = None
    mailbox_search_limit: int = 10
    mailbox_fetch_limit: int = 5
    mailbox_lookback_months: int = 1
    auto_parsing_enabled: bool = True

    # Remote spreadsheet store
    sheets_api_base: str = "https://sheets.googleapis.com/v4/spreadsheets"
    remote_read_timeout_seconds: float = 10.0
    http_timeout_seconds: float = 15.0


settings = Settings()
